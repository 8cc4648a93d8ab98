from dataclasses import replace

from app.models import CatalogMovie, DateRange, MatchCriteria, QuizSelections, RuntimeRange
from app.quiz.constants import GENRE_TO_MOOD, MOOD_TO_GENRE, QUIZ_QUESTIONS
from app.quiz.matching import (calculate_match_score, generate_match_criteria,
                               generate_match_explanation, match_movies,
                               matches_all_criteria)

SELECTIONS = QuizSelections(
    genres=[18, 53],
    moods=[18],
    era=DateRange("1990-01-01", "1999-12-31"),
    runtime=RuntimeRange(121, 300),
    rating=8,
)


def _movie(**changes) -> CatalogMovie:
    fields = dict(
        id=550,
        title="Fight Club",
        poster_path="/fight.jpg",
        release_date="1999-10-15",
        vote_average=8.4,
        runtime=139,
        overview="An insomniac office worker...",
        genre_ids=[18, 53],
    )
    fields.update(changes)
    return CatalogMovie(**fields)


def _selections(**changes) -> QuizSelections:
    return replace(SELECTIONS, **changes)


def test_full_match():
    assert matches_all_criteria(_movie(), SELECTIONS)


def test_runtime_below_minimum():
    assert not matches_all_criteria(_movie(runtime=90), SELECTIONS)


def test_rating_below_threshold():
    assert not matches_all_criteria(_movie(vote_average=7.9), SELECTIONS)


def test_rating_threshold_inclusive():
    assert matches_all_criteria(_movie(vote_average=8.0), SELECTIONS)


def test_genres_must_be_superset():
    assert matches_all_criteria(_movie(genre_ids=[18, 53, 80]), SELECTIONS)
    assert not matches_all_criteria(_movie(genre_ids=[18]), SELECTIONS)


def test_mood_genres_required():
    selections = _selections(moods=[35])
    assert not matches_all_criteria(_movie(), selections)
    assert matches_all_criteria(_movie(genre_ids=[18, 53, 35]), selections)


def test_era_bounds_inclusive():
    assert matches_all_criteria(_movie(release_date="1990-01-01"), SELECTIONS)
    assert matches_all_criteria(_movie(release_date="1999-12-31"), SELECTIONS)
    assert not matches_all_criteria(_movie(release_date="2000-01-01"), SELECTIONS)
    assert not matches_all_criteria(_movie(release_date="1989-12-31"), SELECTIONS)


def test_invalid_release_date_never_matches():
    assert not matches_all_criteria(_movie(release_date=""), SELECTIONS)
    assert not matches_all_criteria(_movie(release_date="someday"), SELECTIONS)


def test_missing_runtime_counts_as_zero():
    selections = _selections(runtime=RuntimeRange(0, 89))
    assert matches_all_criteria(_movie(runtime=None), selections)
    assert not matches_all_criteria(_movie(runtime=None), SELECTIONS)


def test_widening_never_removes_a_match():
    movie = _movie(runtime=100, vote_average=7.5, release_date="2001-06-01")
    assert not matches_all_criteria(movie, SELECTIONS)
    widened = _selections(
        genres=[18],
        runtime=RuntimeRange(90, 300),
        era=DateRange("1990-01-01", "2009-12-31"),
        rating=7,
    )
    assert matches_all_criteria(movie, widened)
    assert matches_all_criteria(_movie(), widened)


def test_match_movies_keeps_order_and_filters():
    movies = [
        _movie(id=1, title="First"),
        _movie(id=2, title="Too short", runtime=95),
        _movie(id=3, title="Third", vote_average=9.1),
    ]
    recos = match_movies(movies, SELECTIONS)
    assert [reco.id for reco in recos] == [1, 3]
    assert len(recos) <= len(movies)


def test_match_movies_does_not_dedupe():
    recos = match_movies([_movie(), _movie()], SELECTIONS)
    assert len(recos) == 2


def test_recommendation_shape():
    reco = match_movies([_movie()], SELECTIONS)[0]
    data = reco.to_dict()
    assert data["posterPath"] == "/fight.jpg"
    assert data["releaseDate"] == "1999-10-15"
    assert data["rating"] == 8.4
    assert data["runtime"] == 139
    assert data["genreIds"] == [18, 53]
    assert data["matchExplanation"] == "Based on your love of Drama and Thriller and 1990s films"
    assert data["matchCriteria"] == {
        "genres": ["Drama", "Thriller"],
        "moods": ["Heartwarming", "Thought-Provoking"],
        "era": "1990s",
        "runtime": "Long",
        "rating": "Excellent",
    }


def test_criteria_genres_are_the_intersection():
    selections = _selections(genres=[18, 35])
    criteria = generate_match_criteria(_movie(genre_ids=[18, 53, 80]), selections)
    assert criteria.genres == ["Drama"]


def test_criteria_unknown_genre_id():
    criteria = generate_match_criteria(_movie(genre_ids=[4242]), _selections(genres=[4242]))
    assert criteria.genres == ["Unknown (4242)"]


def test_mood_labels_deduplicated():
    selections = _selections(moods=[10749, 18])
    criteria = generate_match_criteria(_movie(genre_ids=[10749, 18]), selections)
    assert criteria.moods == ["Heartwarming", "Romantic", "Thought-Provoking"]


def test_criteria_buckets():
    assert generate_match_criteria(_movie(runtime=89), SELECTIONS).runtime == "Short"
    assert generate_match_criteria(_movie(runtime=90), SELECTIONS).runtime == "Medium"
    assert generate_match_criteria(_movie(runtime=120), SELECTIONS).runtime == "Medium"
    assert generate_match_criteria(_movie(runtime=121), SELECTIONS).runtime == "Long"
    assert generate_match_criteria(_movie(vote_average=6.0), SELECTIONS).rating == "Good"
    assert generate_match_criteria(_movie(vote_average=7.9), SELECTIONS).rating == "Very Good"
    assert generate_match_criteria(_movie(vote_average=9.0), SELECTIONS).rating == "Masterpiece"
    assert generate_match_criteria(_movie(vote_average=5.9), SELECTIONS).rating == "Unknown"
    assert generate_match_criteria(_movie(release_date="1975-05-01"), SELECTIONS).era == "Unknown"
    assert generate_match_criteria(_movie(release_date="2024-05-01"), SELECTIONS).era == "2020s"
    assert generate_match_criteria(_movie(release_date="bad"), SELECTIONS).era == "Unknown"


def test_explanation_variants():
    criteria = MatchCriteria(genres=[], moods=[], era="Unknown", runtime="Long", rating="Good")
    assert generate_match_explanation(criteria) == "Matches your preferences"

    criteria.era = "2010s"
    assert generate_match_explanation(criteria) == "Based on your love of 2010s films"

    criteria.era = "Unknown"
    criteria.genres = ["Comedy"]
    assert generate_match_explanation(criteria) == "Based on your love of Comedy"


def test_match_score():
    assert calculate_match_score(_movie(vote_average=10), SELECTIONS) == 70
    partial = calculate_match_score(_movie(genre_ids=[18], vote_average=0), SELECTIONS)
    assert partial == 30
    assert 0 <= calculate_match_score(_movie(), SELECTIONS) <= 100


def test_mood_tables_are_inverse():
    pairs = {(mood, genre_id) for mood, ids in MOOD_TO_GENRE.items() for genre_id in ids}
    assert pairs == {(mood, genre_id) for genre_id, moods in GENRE_TO_MOOD.items() for mood in moods}
    options = QUIZ_QUESTIONS[1]["options"]
    assert [o["id"] for o in options] == list(MOOD_TO_GENRE)
    assert options[0] == {"id": "action-packed", "label": "Action-packed", "value": 28}
    assert options[1]["value"] == [10749, 18]
