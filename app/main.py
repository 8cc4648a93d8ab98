import math
import os
import re
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Union

from fastapi import FastAPI, Query, Request
from fastapi.templating import Jinja2Templates
from pydantic import (BaseModel, Field, ValidationError, ValidationInfo,
                      field_validator)
from starlette import status
from starlette.responses import JSONResponse

from app.db.store import (delete_watchlist_item, get_reviews, get_watchlist,
                          insert_review, insert_watchlist_item,
                          is_in_watchlist, item_to_record, review_to_record)
from app.logger import logger
from app.models import MovieReview, QuizSelections, WatchlistItem
from app.quiz.constants import QUIZ_QUESTIONS, TMDB_IMAGE_BASE_URL
from app.quiz.validation import validate_selections
from app.recommend import recommend
from app.tmdb.client import (MOVIE_CATEGORIES, TMDB_BASE_URL, CatalogError,
                             TMDBClient)
from app.utils import timed

app = FastAPI(title="Movie Discovery")

templates = Jinja2Templates(directory="templates")

UNAVAILABLE_MESSAGE = "Unable to fetch recommendations. Please try again later."
EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
MIN_REVIEW_LENGTH = 10
REQUIRED_MESSAGES = {
    "movie_id": "Movie ID is required",
    "movie_title": "Movie title is required",
    "user_name": "User name is required",
}


class QuizOption(BaseModel):
    id: str
    label: str
    value: Union[int, list[int], dict[str, Union[int, str]]]


class QuizQuestion(BaseModel):
    id: int
    text: str
    type: str
    options: list[QuizOption]


class ReviewBody(BaseModel):
    movie_id: int = Field(None, alias="movieId", validate_default=True)
    movie_title: str = Field(None, alias="movieTitle", validate_default=True)
    user_name: str = Field(None, alias="userName", validate_default=True)
    email: str = Field(None, validate_default=True)
    rating: float = Field(None, validate_default=True)
    review: str = Field(None, validate_default=True)

    @field_validator("movie_id", "movie_title", "user_name", mode="before")
    @classmethod
    def required(cls, value, info: ValidationInfo):
        if not value:
            raise ValueError(REQUIRED_MESSAGES[info.field_name])
        return value

    @field_validator("email", mode="before")
    @classmethod
    def valid_email(cls, value):
        if not value:
            raise ValueError("Email is required")
        if not isinstance(value, str) or not EMAIL_PATTERN.match(value):
            raise ValueError("Invalid email format")
        return value

    @field_validator("rating", mode="before")
    @classmethod
    def rating_in_range(cls, value):
        if value is None:
            raise ValueError("Rating is required")
        try:
            rating = float(value)
        except (TypeError, ValueError):
            rating = math.nan
        if not 1 <= rating <= 10:
            raise ValueError("Rating must be a number between 1 and 10")
        return rating

    @field_validator("review", mode="before")
    @classmethod
    def long_enough(cls, value):
        if not value:
            raise ValueError("Review is required")
        if isinstance(value, str) and len(value) < MIN_REVIEW_LENGTH:
            raise ValueError(f"Review must be at least {MIN_REVIEW_LENGTH} characters long")
        return value


class WatchlistBody(BaseModel):
    movie_id: int = Field(None, alias="movieId", validate_default=True)
    movie_title: str = Field(None, alias="movieTitle", validate_default=True)
    poster_path: Optional[str] = Field(None, alias="posterPath")

    @field_validator("movie_id", mode="before")
    @classmethod
    def positive_id(cls, value):
        if value is None:
            raise ValueError("Movie ID is required")
        if not isinstance(value, int) or isinstance(value, bool) or value <= 0:
            raise ValueError("Movie ID must be a positive integer")
        return value

    @field_validator("movie_title", mode="before")
    @classmethod
    def non_empty_title(cls, value):
        if not value:
            raise ValueError("Movie title is required")
        if not isinstance(value, str) or not value.strip():
            raise ValueError("Movie title must be a non-empty string")
        return value


def field_errors(exc: ValidationError) -> dict[str, str]:
    """First message per body field, keyed by its JSON name."""
    errors = {}
    for error in exc.errors():
        field = str(error["loc"][0]) if error["loc"] else "body"
        if error["type"] == "value_error":
            message = str(error["ctx"]["error"])
        else:
            message = error["msg"]
        errors.setdefault(field, message)
    return errors


@app.on_event("startup")
@timed
async def startup_event():
    api_key = os.environ.get("TMDB_API_KEY")
    if api_key:
        base_url = os.environ.get("TMDB_BASE_URL") or TMDB_BASE_URL
        app.state.tmdb = TMDBClient(api_key, base_url)
    else:
        logger.warning("TMDB_API_KEY not configured, catalog routes will fail")
        app.state.tmdb = None
    app.state.data_dir = Path(os.environ.get("DATA_DIR") or "./data")
    app.state.discover_pages = int(os.environ.get("DISCOVER_PAGES") or 1)


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _record_id() -> str:
    return str(int(time.time() * 1000))


async def _json_body(request: Request) -> dict:
    """Request JSON object, an empty dict when the body is not one."""
    try:
        body = await request.json()
    except ValueError:
        return {}
    return body if isinstance(body, dict) else {}


@app.get("/")
async def landing(request: Request):
    return templates.TemplateResponse(
        "index.html",
        {
            "request": request,
            "categories": MOVIE_CATEGORIES,
            "questions": QUIZ_QUESTIONS,
            "image_base_url": TMDB_IMAGE_BASE_URL,
        },
    )


@app.get("/movies")
@timed
async def list_movies(
    request: Request,
    category: str = "popular",
    page: int = Query(ge=1, le=500, default=1),
) -> JSONResponse:
    if category not in MOVIE_CATEGORIES:
        return JSONResponse(
            {"error": f"unknown category {category}"}, status_code=status.HTTP_400_BAD_REQUEST
        )
    client: Optional[TMDBClient] = request.app.state.tmdb
    if client is None:
        return JSONResponse({"error": "TMDB API key not configured"}, status_code=500)
    try:
        return JSONResponse(await client.list_movies(category, page))
    except CatalogError as exc:
        logger.error(f"failed to list {category} movies: {exc}")
        return JSONResponse({"error": "Failed to fetch movies"}, status_code=500)


@app.get("/movies/search")
@timed
async def search_movies(request: Request, query: str = "") -> JSONResponse:
    if not query:
        return JSONResponse(
            {"error": "Search query is required"}, status_code=status.HTTP_400_BAD_REQUEST
        )
    client: Optional[TMDBClient] = request.app.state.tmdb
    if client is None:
        return JSONResponse({"error": "TMDB API key not configured"}, status_code=500)
    try:
        return JSONResponse(await client.search_movies(query))
    except CatalogError as exc:
        logger.error(f"movie search for {query!r} failed: {exc}")
        return JSONResponse({"error": "Failed to search movies"}, status_code=500)


@app.get("/quiz/questions", response_model=list[QuizQuestion])
async def quiz_questions() -> list[QuizQuestion]:
    return [QuizQuestion(**question) for question in QUIZ_QUESTIONS]


@app.post("/quiz/recommendations")
@timed
async def quiz_recommendations(request: Request) -> JSONResponse:
    body = await _json_body(request)
    validation = validate_selections(body)
    if not validation.is_valid:
        return JSONResponse(
            {
                "error": "Validation error",
                "message": validation.errors[0].message,
                "details": [error._asdict() for error in validation.errors],
            },
            status_code=status.HTTP_400_BAD_REQUEST,
        )

    client: Optional[TMDBClient] = request.app.state.tmdb
    if client is None:
        logger.error("TMDB_API_KEY not configured")
        return JSONResponse(
            {"error": "Configuration error", "message": UNAVAILABLE_MESSAGE}, status_code=500
        )

    selections = QuizSelections.from_dict(body)
    try:
        recommendations, total_matches = await recommend(
            client, selections, pages=request.app.state.discover_pages
        )
    except CatalogError as exc:
        logger.error(f"catalog error while recommending: {exc}")
        return JSONResponse(
            {"error": "External API error", "message": UNAVAILABLE_MESSAGE}, status_code=500
        )
    except Exception as exc:
        logger.error(f"quiz recommendations crashed: {exc}")
        return JSONResponse(
            {"error": "Internal server error", "message": UNAVAILABLE_MESSAGE}, status_code=500
        )

    if not recommendations:
        return JSONResponse(
            {
                "recommendations": [],
                "totalMatches": 0,
                "message": "No movies match all your preferences",
            }
        )
    return JSONResponse(
        {
            "recommendations": [reco.to_dict() for reco in recommendations],
            "totalMatches": total_matches,
        }
    )


@app.get("/reviews")
async def list_reviews(request: Request) -> JSONResponse:
    reviews = get_reviews(request.app.state.data_dir)
    return JSONResponse([review_to_record(review) for review in reviews])


@app.post("/reviews")
async def create_review(request: Request) -> JSONResponse:
    try:
        body = ReviewBody.model_validate(await _json_body(request))
    except ValidationError as exc:
        return JSONResponse(
            {"error": "Validation failed", "errors": field_errors(exc)},
            status_code=status.HTTP_400_BAD_REQUEST,
        )

    review = MovieReview(
        id=_record_id(),
        movie_id=body.movie_id,
        movie_title=body.movie_title,
        user_name=body.user_name,
        email=body.email,
        rating=body.rating,
        review=body.review,
        created_at=_now_iso(),
    )
    try:
        insert_review(request.app.state.data_dir, review)
    except OSError as exc:
        logger.error(f"failed to save review {review.id}: {exc}")
        return JSONResponse({"error": "Failed to save review"}, status_code=500)
    logger.info(f"saved review of movie {review.movie_id} by {review.user_name}")
    return JSONResponse(
        {"message": "Review submitted successfully", "review": review_to_record(review)},
        status_code=status.HTTP_201_CREATED,
    )


@app.get("/watchlist")
async def list_watchlist(request: Request) -> JSONResponse:
    items = get_watchlist(request.app.state.data_dir)
    return JSONResponse([item_to_record(item) for item in items])


@app.post("/watchlist")
async def add_to_watchlist(request: Request) -> JSONResponse:
    try:
        body = WatchlistBody.model_validate(await _json_body(request))
    except ValidationError as exc:
        return JSONResponse(
            {"error": "Validation failed", "errors": field_errors(exc)},
            status_code=status.HTTP_400_BAD_REQUEST,
        )

    data_dir = request.app.state.data_dir
    if is_in_watchlist(data_dir, body.movie_id):
        return JSONResponse(
            {"error": "Movie already in watchlist"}, status_code=status.HTTP_400_BAD_REQUEST
        )

    item = WatchlistItem(
        id=_record_id(),
        movie_id=body.movie_id,
        movie_title=body.movie_title,
        poster_path=body.poster_path,
        added_at=_now_iso(),
    )
    try:
        insert_watchlist_item(data_dir, item)
    except OSError as exc:
        logger.error(f"failed to add movie {item.movie_id} to watchlist: {exc}")
        return JSONResponse({"error": "Failed to add to watchlist"}, status_code=500)
    return JSONResponse(
        {"message": "Added to watchlist successfully", "item": item_to_record(item)},
        status_code=status.HTTP_201_CREATED,
    )


@app.delete("/watchlist")
async def remove_from_watchlist(request: Request, movie_id: int = Query(ge=1)) -> JSONResponse:
    try:
        delete_watchlist_item(request.app.state.data_dir, movie_id)
    except OSError as exc:
        logger.error(f"failed to remove movie {movie_id} from watchlist: {exc}")
        return JSONResponse({"error": "Failed to remove from watchlist"}, status_code=500)
    return JSONResponse({"message": "Removed from watchlist"})
