"""
Five-question quiz state machine.

QUESTION(1..5) -> SUBMITTING -> RESULTS | ERROR. A valid cached result found on
mount jumps straight to RESULTS; retaking the quiz or retrying after an error
clears the cache and starts again at question 1.
"""

from enum import Enum
from typing import Any, Callable, Optional

from app.logger import logger
from app.models import DateRange, RuntimeRange
from app.quiz.cache import ResultCache
from app.quiz.constants import QUIZ_QUESTIONS
from app.quiz.validation import has_selection, is_quiz_complete

STEP_FIELDS = {1: "genres", 2: "moods", 3: "era", 4: "runtime", 5: "rating"}
LAST_STEP = len(STEP_FIELDS)


class QuizState(Enum):
    QUESTION = "question"
    SUBMITTING = "submitting"
    RESULTS = "results"
    ERROR = "error"


class RecommendationRequestError(Exception):
    pass


def _id_list(answer) -> list[int]:
    ids: list[int] = []
    for value in answer:
        for genre_id in value if isinstance(value, (list, tuple)) else [value]:
            if genre_id not in ids:
                ids.append(genre_id)
    return ids


def _date_range(answer) -> dict[str, str]:
    if isinstance(answer, dict):
        answer = DateRange(answer["gte"], answer["lte"])
    return answer._asdict()


def _runtime_range(answer) -> dict[str, int]:
    if isinstance(answer, dict):
        answer = RuntimeRange(answer["gte"], answer["lte"])
    return answer._asdict()


# one converter per question, producing the wire shape of that selection field
ANSWER_CONVERTERS: dict[int, Callable[[Any], Any]] = {
    1: _id_list,
    2: _id_list,
    3: _date_range,
    4: _runtime_range,
    5: float,
}


class QuizFlow:
    def __init__(
        self,
        cache: ResultCache,
        fetch_recommendations: Callable[[dict[str, Any]], dict[str, Any]],
    ):
        self.cache = cache
        self.fetch_recommendations = fetch_recommendations
        self._reset()

    def _reset(self) -> None:
        self.state = QuizState.QUESTION
        self.current_step = 1
        self.selections: dict[str, Any] = {}
        self.recommendations: list[dict[str, Any]] = []
        self.total_matches = 0
        self.message: Optional[str] = None
        self.error: Optional[str] = None

    def mount(self) -> QuizState:
        cached = self.cache.get_cache()
        if cached is not None:
            logger.info("loading cached quiz results")
            self.selections = cached.selections
            self.recommendations = cached.recommendations
            self.total_matches = cached.total_matches
            self.current_step = LAST_STEP
            self.state = QuizState.RESULTS
        return self.state

    @property
    def current_question(self) -> dict[str, Any]:
        return QUIZ_QUESTIONS[self.current_step - 1]

    @property
    def current_answer(self) -> Any:
        return self.selections.get(STEP_FIELDS[self.current_step])

    def answer(self, value: Any) -> None:
        if self.state is not QuizState.QUESTION:
            raise RuntimeError(f"cannot answer a question in state {self.state.value}")
        field = STEP_FIELDS[self.current_step]
        self.selections[field] = None if value is None else ANSWER_CONVERTERS[self.current_step](value)

    def next(self) -> QuizState:
        if self.state is not QuizState.QUESTION or not has_selection(self.current_answer):
            return self.state
        if self.current_step < LAST_STEP:
            self.current_step += 1
            return self.state
        return self.submit()

    def back(self) -> QuizState:
        if self.state is QuizState.QUESTION and self.current_step > 1:
            self.current_step -= 1
        return self.state

    def submit(self) -> QuizState:
        if self.state is not QuizState.QUESTION:
            return self.state
        if not is_quiz_complete(self.selections):
            self.error = "Please answer all questions"
            self.state = QuizState.ERROR
            return self.state

        self.state = QuizState.SUBMITTING
        try:
            data = self.fetch_recommendations(self.selections)
        except RecommendationRequestError as exc:
            logger.error(f"quiz submission failed: {exc}")
            self.error = str(exc) or "Failed to fetch recommendations"
            self.state = QuizState.ERROR
            return self.state
        except Exception as exc:
            logger.error(f"quiz submission crashed: {exc}")
            self.error = "Failed to fetch recommendations"
            self.state = QuizState.ERROR
            return self.state

        self.recommendations = data.get("recommendations", [])
        self.total_matches = data.get("totalMatches", len(self.recommendations))
        self.message = data.get("message")
        if self.recommendations:
            self.cache.set_cache(self.selections, self.recommendations, self.total_matches)
        self.error = None
        self.state = QuizState.RESULTS
        return self.state

    def retake(self) -> QuizState:
        self.cache.clear_cache()
        self._reset()
        return self.state

    retry = retake
