"""
Genre and mood tables, quiz questions and cache settings.
"""

# https://developer.themoviedb.org/reference/genre-movie-list
GENRE_MAP: dict[int, str] = {
    28: "Action",
    12: "Adventure",
    16: "Animation",
    35: "Comedy",
    80: "Crime",
    99: "Documentary",
    18: "Drama",
    10751: "Family",
    14: "Fantasy",
    36: "History",
    27: "Horror",
    10402: "Music",
    9648: "Mystery",
    10749: "Romance",
    878: "Science Fiction",
    10770: "TV Movie",
    53: "Thriller",
    10752: "War",
    37: "Western",
}

MOOD_TO_GENRE: dict[str, list[int]] = {
    "action-packed": [28],
    "heartwarming": [10749, 18],
    "thought-provoking": [18, 878],
    "scary": [27, 53],
    "funny": [35],
    "romantic": [10749],
}

GENRE_TO_MOOD: dict[int, list[str]] = {
    28: ["action-packed"],
    10749: ["heartwarming", "romantic"],
    18: ["heartwarming", "thought-provoking"],
    878: ["thought-provoking"],
    27: ["scary"],
    53: ["scary"],
    35: ["funny"],
}

ERA_DECADES: list[tuple[int, int, str]] = [
    (1980, 1989, "1980s"),
    (1990, 1999, "1990s"),
    (2000, 2009, "2000s"),
    (2010, 2019, "2010s"),
    (2020, 2029, "2020s"),
]

QUIZ_QUESTIONS: list[dict] = [
    {
        "id": 1,
        "text": "What genres interest you?",
        "type": "multi-select",
        "options": [
            {"id": "action", "label": "Action", "value": 28},
            {"id": "comedy", "label": "Comedy", "value": 35},
            {"id": "drama", "label": "Drama", "value": 18},
            {"id": "horror", "label": "Horror", "value": 27},
            {"id": "romance", "label": "Romance", "value": 10749},
            {"id": "sci-fi", "label": "Sci-Fi", "value": 878},
            {"id": "thriller", "label": "Thriller", "value": 53},
            {"id": "adventure", "label": "Adventure", "value": 12},
            {"id": "animation", "label": "Animation", "value": 16},
            {"id": "crime", "label": "Crime", "value": 80},
            {"id": "fantasy", "label": "Fantasy", "value": 14},
            {"id": "mystery", "label": "Mystery", "value": 9648},
        ],
    },
    {
        "id": 2,
        "text": "What mood are you in?",
        "type": "multi-select",
        # single-genre moods carry a bare id
        "options": [
            {"id": mood, "label": mood.capitalize(), "value": ids[0] if len(ids) == 1 else ids}
            for mood, ids in MOOD_TO_GENRE.items()
        ],
    },
    {
        "id": 3,
        "text": "Which era do you prefer?",
        "type": "single-select",
        "options": [
            {"id": label, "label": label, "value": {"gte": f"{start}-01-01", "lte": f"{end}-12-31"}}
            for start, end, label in ERA_DECADES
        ],
    },
    {
        "id": 4,
        "text": "How long of a movie do you want?",
        "type": "single-select",
        "options": [
            {"id": "short", "label": "Short (under 90 min)", "value": {"gte": 0, "lte": 89}},
            {"id": "medium", "label": "Medium (90-120 min)", "value": {"gte": 90, "lte": 120}},
            {"id": "long", "label": "Long (over 120 min)", "value": {"gte": 121, "lte": 300}},
        ],
    },
    {
        "id": 5,
        "text": "Minimum rating?",
        "type": "single-select",
        "options": [
            {"id": "rating-6", "label": "6+ (Good)", "value": 6},
            {"id": "rating-7", "label": "7+ (Very Good)", "value": 7},
            {"id": "rating-8", "label": "8+ (Excellent)", "value": 8},
            {"id": "rating-9", "label": "9+ (Masterpiece)", "value": 9},
        ],
    },
]

CACHE_KEY = "quiz_result"
CACHE_VERSION = "v1"
CACHE_EXPIRATION_MS = 30 * 24 * 60 * 60 * 1000

TMDB_IMAGE_BASE_URL = "https://image.tmdb.org/t/p/w500"
RESULTS_LIMIT = 10
