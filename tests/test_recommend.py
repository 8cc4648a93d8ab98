import asyncio

import pytest

from app.models import DateRange, QuizSelections, RuntimeRange
from app.recommend import build_discover_params, fetch_discover_pages, recommend
from app.tmdb.client import CatalogError

SELECTIONS = QuizSelections(
    genres=[18, 53],
    moods=[18, 878],
    era=DateRange("1990-01-01", "1999-12-31"),
    runtime=RuntimeRange(121, 300),
    rating=8,
)


def _tmdb_movie(movie_id: int, **changes) -> dict:
    movie = {
        "id": movie_id,
        "title": f"Movie {movie_id}",
        "poster_path": f"/{movie_id}.jpg",
        "release_date": "1999-10-15",
        "vote_average": 8.4,
        "overview": "",
        "genre_ids": [18, 53, 878],
    }
    movie.update(changes)
    return movie


class FakeCatalog:
    def __init__(self, pages: list[list[dict]], runtimes: dict[int, int], fail_discover=False):
        self.pages = pages
        self.runtimes = runtimes
        self.fail_discover = fail_discover
        self.discover_calls = []
        self.detail_calls = []

    async def discover_movies(self, params):
        self.discover_calls.append(params)
        if self.fail_discover:
            raise CatalogError("discover returned 503")
        page = params["page"]
        return {"page": page, "results": self.pages[page - 1], "total_pages": len(self.pages)}

    async def get_movie_details(self, movie_id):
        self.detail_calls.append(movie_id)
        if movie_id not in self.runtimes:
            return None
        return {"id": movie_id, "runtime": self.runtimes[movie_id]}


def test_discover_params():
    params = build_discover_params(SELECTIONS, page=3)
    assert params["with_genres"] == "18,53,878"
    assert params["primary_release_date.gte"] == "1990-01-01"
    assert params["primary_release_date.lte"] == "1999-12-31"
    assert params["with_runtime.gte"] == 121
    assert params["with_runtime.lte"] == 300
    assert params["vote_average.gte"] == 8
    assert params["sort_by"] == "popularity.desc"
    assert params["vote_count.gte"] == 100
    assert params["page"] == 3


def test_recommend_filters_with_runtime_details():
    catalog = FakeCatalog(
        pages=[[_tmdb_movie(1), _tmdb_movie(2), _tmdb_movie(3, vote_average=7.0)]],
        runtimes={1: 139, 2: 95, 3: 150},
    )
    recos, total = asyncio.run(recommend(catalog, SELECTIONS))
    assert [reco.id for reco in recos] == [1]
    assert total == 1
    assert recos[0].runtime == 139
    assert sorted(catalog.detail_calls) == [1, 2, 3]


def test_failed_detail_leaves_runtime_absent():
    catalog = FakeCatalog(pages=[[_tmdb_movie(1), _tmdb_movie(2)]], runtimes={2: 130})
    recos, total = asyncio.run(recommend(catalog, SELECTIONS))
    # movie 1 has no runtime, counted as 0 minutes
    assert [reco.id for reco in recos] == [2]
    assert total == 1


def test_results_truncated_but_total_is_not():
    movies = [_tmdb_movie(i) for i in range(1, 16)]
    catalog = FakeCatalog(pages=[movies], runtimes={i: 140 for i in range(1, 16)})
    recos, total = asyncio.run(recommend(catalog, SELECTIONS))
    assert len(recos) == 10
    assert total == 15
    assert [reco.id for reco in recos] == list(range(1, 11))


def test_pages_are_capped_and_deduplicated():
    catalog = FakeCatalog(
        pages=[[_tmdb_movie(1), _tmdb_movie(2)], [_tmdb_movie(2), _tmdb_movie(3)]],
        runtimes={},
    )
    movies = asyncio.run(fetch_discover_pages(catalog, SELECTIONS, pages=5))
    assert [movie["id"] for movie in movies] == [1, 2, 3]
    assert [call["page"] for call in catalog.discover_calls] == [1, 2]


def test_single_page_by_default():
    catalog = FakeCatalog(pages=[[_tmdb_movie(1)], [_tmdb_movie(2)]], runtimes={1: 140, 2: 140})
    recos, total = asyncio.run(recommend(catalog, SELECTIONS))
    assert [reco.id for reco in recos] == [1]
    assert len(catalog.discover_calls) == 1


def test_discover_failure_propagates():
    catalog = FakeCatalog(pages=[[]], runtimes={}, fail_discover=True)
    with pytest.raises(CatalogError):
        asyncio.run(recommend(catalog, SELECTIONS))
