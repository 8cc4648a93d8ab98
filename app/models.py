"""
Data models and types.
"""

from dataclasses import dataclass, field
from typing import Any, NamedTuple, Optional


class DateRange(NamedTuple):
    gte: str
    lte: str


class RuntimeRange(NamedTuple):
    gte: int
    lte: int


@dataclass
class QuizSelections:
    genres: list[int]
    moods: list[int]
    era: DateRange
    runtime: RuntimeRange
    rating: float

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "QuizSelections":
        return cls(
            genres=list(data["genres"]),
            moods=list(data["moods"]),
            era=DateRange(data["era"]["gte"], data["era"]["lte"]),
            runtime=RuntimeRange(data["runtime"]["gte"], data["runtime"]["lte"]),
            rating=data["rating"],
        )


@dataclass
class CatalogMovie:
    id: int
    title: str
    poster_path: Optional[str]
    release_date: str
    vote_average: float
    runtime: Optional[int]
    overview: str
    genre_ids: list[int]

    @classmethod
    def from_tmdb(cls, data: dict[str, Any]) -> "CatalogMovie":
        return cls(
            id=data["id"],
            title=data.get("title", ""),
            poster_path=data.get("poster_path"),
            release_date=data.get("release_date") or "",
            vote_average=data.get("vote_average") or 0.0,
            runtime=data.get("runtime"),
            overview=data.get("overview") or "",
            genre_ids=list(data.get("genre_ids") or []),
        )


@dataclass
class MatchCriteria:
    genres: list[str]
    moods: list[str]
    era: str
    runtime: str
    rating: str


@dataclass
class MovieRecommendation:
    id: int
    title: str
    poster_path: Optional[str]
    release_date: str
    rating: float
    runtime: int
    overview: str
    genre_ids: list[int]
    match_explanation: str
    match_criteria: MatchCriteria

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "posterPath": self.poster_path,
            "releaseDate": self.release_date,
            "rating": self.rating,
            "runtime": self.runtime,
            "overview": self.overview,
            "genreIds": list(self.genre_ids),
            "matchExplanation": self.match_explanation,
            "matchCriteria": {
                "genres": list(self.match_criteria.genres),
                "moods": list(self.match_criteria.moods),
                "era": self.match_criteria.era,
                "runtime": self.match_criteria.runtime,
                "rating": self.match_criteria.rating,
            },
        }


@dataclass
class SavedResult:
    """
    Cached quiz result. Selections and recommendations are kept in their JSON
    wire shape so a stored entry reads back exactly as it was written.
    """

    timestamp: int
    expires_at: int
    version: str
    selections: dict[str, Any]
    recommendations: list[dict[str, Any]]
    total_matches: int
    cache_key: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SavedResult":
        return cls(
            timestamp=data["timestamp"],
            expires_at=data["expiresAt"],
            version=data["version"],
            selections=data["selections"],
            recommendations=data["recommendations"],
            total_matches=data["totalMatches"],
            cache_key=data.get("cacheKey", ""),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "cacheKey": self.cache_key,
            "timestamp": self.timestamp,
            "expiresAt": self.expires_at,
            "version": self.version,
            "selections": self.selections,
            "recommendations": self.recommendations,
            "totalMatches": self.total_matches,
        }


class ValidationError(NamedTuple):
    field: str
    message: str


@dataclass
class ValidationResult:
    is_valid: bool
    errors: list[ValidationError] = field(default_factory=list)


class MovieReview(NamedTuple):
    id: str
    movie_id: int
    movie_title: str
    user_name: str
    email: str
    rating: float
    review: str
    created_at: str


class WatchlistItem(NamedTuple):
    id: str
    movie_id: int
    movie_title: str
    poster_path: Optional[str]
    added_at: str
