"""
Quiz recommendations: query the catalog with the quiz selections, enrich every
candidate with its runtime and keep the movies that match all criteria.
"""

import asyncio
from typing import Any

from app.logger import logger
from app.models import CatalogMovie, MovieRecommendation, QuizSelections
from app.quiz.constants import RESULTS_LIMIT
from app.quiz.matching import match_movies
from app.tmdb.client import TMDBClient

MIN_VOTE_COUNT = 100


def build_discover_params(selections: QuizSelections, page: int = 1) -> dict[str, Any]:
    # genres and moods share the id space, the catalog ANDs comma separated ids
    all_genres = list(dict.fromkeys([*selections.genres, *selections.moods]))
    return {
        "with_genres": ",".join(str(genre_id) for genre_id in all_genres),
        "primary_release_date.gte": selections.era.gte,
        "primary_release_date.lte": selections.era.lte,
        "with_runtime.gte": selections.runtime.gte,
        "with_runtime.lte": selections.runtime.lte,
        "vote_average.gte": selections.rating,
        "sort_by": "popularity.desc",
        "vote_count.gte": MIN_VOTE_COUNT,
        "page": page,
    }


def _unique_by_id(movies: list[dict[str, Any]]) -> list[dict[str, Any]]:
    seen = set()
    unique = []
    for movie in movies:
        if movie["id"] in seen:
            continue
        seen.add(movie["id"])
        unique.append(movie)
    return unique


async def fetch_discover_pages(
    client: TMDBClient, selections: QuizSelections, pages: int = 1
) -> list[dict[str, Any]]:
    first = await client.discover_movies(build_discover_params(selections, page=1))
    last_page = min(pages, first.get("total_pages") or 1)
    rest = await asyncio.gather(
        *(
            client.discover_movies(build_discover_params(selections, page=page))
            for page in range(2, last_page + 1)
        )
    )
    movies = list(first.get("results", []))
    for data in rest:
        movies.extend(data.get("results", []))
    return _unique_by_id(movies)


async def _with_runtime(client: TMDBClient, movie: dict[str, Any]) -> CatalogMovie:
    details = await client.get_movie_details(movie["id"])
    if details is not None:
        movie = {**movie, "runtime": details.get("runtime")}
    return CatalogMovie.from_tmdb(movie)


async def recommend(
    client: TMDBClient,
    selections: QuizSelections,
    pages: int = 1,
    limit: int = RESULTS_LIMIT,
) -> tuple[list[MovieRecommendation], int]:
    """
    Return at most `limit` recommendations and the total number of matches.
    Catalog errors on the discover query propagate; a failed detail lookup
    leaves that movie without runtime.
    """
    candidates = await fetch_discover_pages(client, selections, pages)
    movies = await asyncio.gather(*(_with_runtime(client, movie) for movie in candidates))
    matched = match_movies(list(movies), selections)
    logger.info(f"{len(matched)} of {len(candidates)} candidates match all quiz criteria")
    return matched[:limit], len(matched)
