"""
Take the movie quiz from the terminal.

Requires a running service:
    TMDB_API_KEY=... uvicorn app.main:app --port 8000

The last result is cached in --cache-dir for 30 days and shown again on the
next run until the quiz is retaken.
"""

import argparse
from pathlib import Path

import requests

from app.logger import logger
from app.quiz.cache import FileStorage, ResultCache
from app.quiz.flow import QuizFlow, QuizState, RecommendationRequestError

API_URL = "http://localhost:8000"
CACHE_DIR = Path.home() / ".movie_discovery"


def create_fetcher(api_url: str):
    def fetch_recommendations(selections: dict) -> dict:
        try:
            response = requests.post(
                f"{api_url}/quiz/recommendations", json=selections, timeout=120
            )
        except requests.RequestException as exc:
            raise RecommendationRequestError(f"service unreachable: {exc}") from exc
        if response.status_code != 200:
            try:
                message = response.json().get("message")
            except ValueError:
                message = None
            raise RecommendationRequestError(message or "Failed to fetch recommendations")
        try:
            return response.json()
        except ValueError as exc:
            raise RecommendationRequestError("service returned an invalid response") from exc

    return fetch_recommendations


def parse_choice(raw: str, question: dict):
    """Turn '1,3' into the values of the chosen options, None if invalid."""
    options = question["options"]
    try:
        picked = [int(x) - 1 for x in raw.replace(" ", "").split(",") if x]
    except ValueError:
        return None
    if not picked or any(not 0 <= i < len(options) for i in picked):
        return None
    values = [options[i]["value"] for i in picked]
    if question["type"] == "single-select":
        return values[0] if len(values) == 1 else None
    return values


def ask(flow: QuizFlow) -> bool:
    question = flow.current_question
    print(f"\n[{flow.current_step}/5] {question['text']}")
    for i, option in enumerate(question["options"], start=1):
        print(f"  {i}. {option['label']}")
    raw = input("choice (b = back, q = quit): ").strip().lower()
    if raw == "q":
        return False
    if raw == "b":
        flow.back()
        return True
    answer = parse_choice(raw, question)
    if answer is None:
        print("invalid choice")
        return True
    flow.answer(answer)
    flow.next()
    return True


def show_results(flow: QuizFlow) -> None:
    if not flow.recommendations:
        print(f"\n{flow.message or 'No movies match all your preferences'}")
        return
    print(f"\n{flow.total_matches} movies match, showing {len(flow.recommendations)}:")
    for reco in flow.recommendations:
        year = reco["releaseDate"][:4]
        print(f"  {reco['title']} ({year}) {reco['rating']:.1f} - {reco['matchExplanation']}")


def main():
    parser = argparse.ArgumentParser()
    parser.add_argument("--api-url", default=API_URL)
    parser.add_argument("--cache-dir", type=Path, default=CACHE_DIR)
    args = parser.parse_args()

    cache = ResultCache(FileStorage(args.cache_dir))
    flow = QuizFlow(cache, create_fetcher(args.api_url.rstrip("/")))
    if flow.mount() is QuizState.RESULTS:
        logger.info("showing cached quiz results")

    while True:
        if flow.state is QuizState.QUESTION:
            if not ask(flow):
                return
        elif flow.state is QuizState.RESULTS:
            show_results(flow)
            if input("\nretake the quiz? [y/N] ").strip().lower() != "y":
                return
            flow.retake()
        elif flow.state is QuizState.ERROR:
            print(f"\nerror: {flow.error}")
            if input("try again? [y/N] ").strip().lower() != "y":
                return
            flow.retry()


if __name__ == "__main__":
    main()
