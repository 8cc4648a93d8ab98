"""
Strict AND matching of catalog movies against quiz selections.

A movie is recommended only if it satisfies every selected criterion: it carries
all selected genre and mood ids, was released inside the era, runs inside the
runtime range and is rated at least the selected minimum.
"""

from app.models import CatalogMovie, MatchCriteria, MovieRecommendation, QuizSelections
from app.quiz.constants import ERA_DECADES, GENRE_MAP, GENRE_TO_MOOD
from app.utils import parse_date


def _mood_label(mood: str) -> str:
    return "-".join(word[:1].upper() + word[1:] for word in mood.split("-"))


def _era_label(release_date: str) -> str:
    released = parse_date(release_date)
    if released is None:
        return "Unknown"
    for start, end, label in ERA_DECADES:
        if start <= released.year <= end:
            return label
    return "Unknown"


def _runtime_label(runtime: int) -> str:
    if runtime < 90:
        return "Short"
    if runtime <= 120:
        return "Medium"
    return "Long"


def _rating_label(rating: float) -> str:
    if rating >= 9:
        return "Masterpiece"
    if rating >= 8:
        return "Excellent"
    if rating >= 7:
        return "Very Good"
    if rating >= 6:
        return "Good"
    return "Unknown"


def generate_match_criteria(movie: CatalogMovie, selections: QuizSelections) -> MatchCriteria:
    movie_genres = set(movie.genre_ids)
    matched_genres = [
        GENRE_MAP.get(genre_id, f"Unknown ({genre_id})")
        for genre_id in selections.genres
        if genre_id in movie_genres
    ]

    mood_labels: list[str] = []
    for mood_genre_id in selections.moods:
        if mood_genre_id not in movie_genres:
            continue
        for mood in GENRE_TO_MOOD.get(mood_genre_id, []):
            label = _mood_label(mood)
            if label not in mood_labels:
                mood_labels.append(label)

    return MatchCriteria(
        genres=matched_genres,
        moods=mood_labels,
        era=_era_label(movie.release_date),
        runtime=_runtime_label(movie.runtime or 0),
        rating=_rating_label(movie.vote_average),
    )


def generate_match_explanation(criteria: MatchCriteria) -> str:
    parts = []
    if criteria.genres:
        parts.append(" and ".join(criteria.genres))
    if criteria.era != "Unknown":
        parts.append(f"{criteria.era} films")

    if not parts:
        return "Matches your preferences"
    return f"Based on your love of {' and '.join(parts)}"


def matches_all_criteria(movie: CatalogMovie, selections: QuizSelections) -> bool:
    movie_genres = set(movie.genre_ids)
    if not all(genre_id in movie_genres for genre_id in selections.genres):
        return False

    if not all(mood_genre_id in movie_genres for mood_genre_id in selections.moods):
        return False

    # an unparseable date on either side never matches
    released = parse_date(movie.release_date)
    era_start = parse_date(selections.era.gte)
    era_end = parse_date(selections.era.lte)
    if released is None or era_start is None or era_end is None:
        return False
    if released < era_start or released > era_end:
        return False

    runtime = movie.runtime or 0
    if runtime < selections.runtime.gte or runtime > selections.runtime.lte:
        return False

    return movie.vote_average >= selections.rating


def _to_recommendation(movie: CatalogMovie, selections: QuizSelections) -> MovieRecommendation:
    criteria = generate_match_criteria(movie, selections)
    return MovieRecommendation(
        id=movie.id,
        title=movie.title,
        poster_path=movie.poster_path,
        release_date=movie.release_date,
        rating=movie.vote_average,
        runtime=movie.runtime or 0,
        overview=movie.overview,
        genre_ids=list(movie.genre_ids),
        match_explanation=generate_match_explanation(criteria),
        match_criteria=criteria,
    )


def match_movies(movies: list[CatalogMovie], selections: QuizSelections) -> list[MovieRecommendation]:
    """Keep the movies matching every criterion, in input order."""
    return [
        _to_recommendation(movie, selections)
        for movie in movies
        if matches_all_criteria(movie, selections)
    ]


def calculate_match_score(movie: CatalogMovie, selections: QuizSelections) -> float:
    """
    Weighted score in [0, 100] for ranking candidates. The recommendation path
    filters only, this is kept for ranked output.
    """
    movie_genres = set(movie.genre_ids)
    score = 0.0
    if selections.genres:
        genre_matches = sum(1 for genre_id in selections.genres if genre_id in movie_genres)
        score += genre_matches / len(selections.genres) * 20
    if selections.moods:
        mood_matches = sum(1 for mood_id in selections.moods if mood_id in movie_genres)
        score += mood_matches / len(selections.moods) * 20
    score += movie.vote_average / 10 * 30
    return min(score, 100.0)
