"""
Client for the TMDB movie catalog.
"""

from typing import Any, Optional

import requests
from aiocache import cached
from fastapi.concurrency import run_in_threadpool

from app.logger import logger
from app.utils import timed

TMDB_BASE_URL = "https://api.themoviedb.org/3"
MOVIE_CATEGORIES = ("popular", "top_rated", "now_playing", "upcoming")
REQUEST_TIMEOUT = 10


class CatalogError(Exception):
    pass


def _get_json(url: str, params: dict[str, Any]) -> dict[str, Any]:
    try:
        response = requests.get(url, params=params, timeout=REQUEST_TIMEOUT)
    except requests.RequestException as exc:
        raise CatalogError(f"request to {url} failed: {exc}") from exc
    if response.status_code != 200:
        raise CatalogError(f"{url} returned {response.status_code} {response.reason}")
    return response.json()


@cached(ttl=3600)
@timed
async def fetch_json(url: str, params: tuple[tuple[str, Any], ...]) -> dict[str, Any]:
    # params is a sorted tuple so it can be part of the cache key
    return await run_in_threadpool(_get_json, url, dict(params))


class TMDBClient:
    def __init__(self, api_key: str, base_url: str = TMDB_BASE_URL):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")

    async def _get(self, path: str, params: Optional[dict[str, Any]] = None) -> dict[str, Any]:
        query = {"api_key": self.api_key, **(params or {})}
        return await fetch_json(f"{self.base_url}{path}", tuple(sorted(query.items())))

    async def list_movies(self, category: str, page: int = 1) -> dict[str, Any]:
        if category not in MOVIE_CATEGORIES:
            raise ValueError(f"unknown movie category {category}")
        return await self._get(f"/movie/{category}", {"page": page, "language": "en-US"})

    async def search_movies(self, query: str, page: int = 1) -> dict[str, Any]:
        if not query:
            raise ValueError("search query is empty")
        return await self._get("/search/movie", {"query": query, "page": page, "language": "en-US"})

    async def discover_movies(self, params: dict[str, Any]) -> dict[str, Any]:
        return await self._get("/discover/movie", params)

    async def get_movie_details(self, movie_id: int) -> Optional[dict[str, Any]]:
        """Movie details, or None when the lookup fails."""
        try:
            return await self._get(f"/movie/{movie_id}")
        except CatalogError as exc:
            logger.warning(f"failed to fetch details of movie {movie_id}: {exc}")
            return None
