"""
Functions to read and write the reviews and watchlist JSON files.
"""

import json
from pathlib import Path
from typing import Any, Callable, TypeVar

from app.logger import logger
from app.models import MovieReview, WatchlistItem

REVIEWS_FILE = "reviews.json"
WATCHLIST_FILE = "watchlist.json"

T = TypeVar("T")


def _read_records(path: Path) -> list[dict[str, Any]]:
    try:
        records = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return []
    except (OSError, ValueError) as exc:
        logger.warning(f"could not read {path}, starting from an empty list: {exc}")
        return []
    if not isinstance(records, list):
        logger.warning(f"{path} does not hold a list of records, starting from an empty list")
        return []
    return [record for record in records if isinstance(record, dict)]


def _convert_records(path: Path, convert: Callable[[dict[str, Any]], T]) -> list[T]:
    converted = []
    for record in _read_records(path):
        try:
            converted.append(convert(record))
        except KeyError as exc:
            logger.warning(f"skipping record of {path} without {exc}")
    return converted


def _write_records(path: Path, records: list[dict[str, Any]]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(records, indent=2), encoding="utf-8")


def review_to_record(review: MovieReview) -> dict[str, Any]:
    return {
        "id": review.id,
        "movieId": review.movie_id,
        "movieTitle": review.movie_title,
        "userName": review.user_name,
        "email": review.email,
        "rating": review.rating,
        "review": review.review,
        "createdAt": review.created_at,
    }


def _record_to_review(record: dict[str, Any]) -> MovieReview:
    return MovieReview(
        id=record["id"],
        movie_id=record["movieId"],
        movie_title=record["movieTitle"],
        user_name=record["userName"],
        email=record["email"],
        rating=record["rating"],
        review=record["review"],
        created_at=record["createdAt"],
    )


def item_to_record(item: WatchlistItem) -> dict[str, Any]:
    return {
        "id": item.id,
        "movieId": item.movie_id,
        "movieTitle": item.movie_title,
        "posterPath": item.poster_path,
        "addedAt": item.added_at,
    }


def _record_to_item(record: dict[str, Any]) -> WatchlistItem:
    return WatchlistItem(
        id=record["id"],
        movie_id=record["movieId"],
        movie_title=record["movieTitle"],
        poster_path=record.get("posterPath"),
        added_at=record["addedAt"],
    )


def get_reviews(data_dir: Path) -> list[MovieReview]:
    return _convert_records(data_dir / REVIEWS_FILE, _record_to_review)


def insert_review(data_dir: Path, review: MovieReview) -> None:
    path = data_dir / REVIEWS_FILE
    records = _read_records(path)
    records.append(review_to_record(review))
    _write_records(path, records)


def get_watchlist(data_dir: Path) -> list[WatchlistItem]:
    return _convert_records(data_dir / WATCHLIST_FILE, _record_to_item)


def is_in_watchlist(data_dir: Path, movie_id: int) -> bool:
    return any(item.movie_id == movie_id for item in get_watchlist(data_dir))


def insert_watchlist_item(data_dir: Path, item: WatchlistItem) -> None:
    path = data_dir / WATCHLIST_FILE
    records = _read_records(path)
    records.append(item_to_record(item))
    _write_records(path, records)


def delete_watchlist_item(data_dir: Path, movie_id: int) -> None:
    path = data_dir / WATCHLIST_FILE
    records = [r for r in _read_records(path) if r.get("movieId") != movie_id]
    _write_records(path, records)
