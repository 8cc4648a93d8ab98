"""
Validation of quiz selections before any matching or catalog request.
"""

import math
from numbers import Real
from typing import Any, Mapping

from app.models import ValidationError, ValidationResult
from app.utils import parse_date


def _is_number(value: Any) -> bool:
    # NaN and infinities compare false against every bound
    return isinstance(value, Real) and not isinstance(value, bool) and math.isfinite(value)


def _is_id_list(value: Any) -> bool:
    return isinstance(value, (list, tuple)) and all(
        isinstance(x, int) and not isinstance(x, bool) for x in value
    )


def _range_bound(bounds: Any, key: str) -> Any:
    if isinstance(bounds, Mapping):
        return bounds.get(key)
    return getattr(bounds, key, None)


def _validate_era(era: Any) -> list[ValidationError]:
    errors = []
    start = parse_date(_range_bound(era, "gte"))
    end = parse_date(_range_bound(era, "lte"))
    if start is None:
        errors.append(ValidationError("era", "Invalid start date format"))
    if end is None:
        errors.append(ValidationError("era", "Invalid end date format"))
    # ordering is only meaningful once both bounds parsed
    if start is not None and end is not None and start >= end:
        errors.append(ValidationError("era", "Start date must be before end date"))
    return errors


def _validate_runtime(runtime: Any) -> list[ValidationError]:
    low = _range_bound(runtime, "gte")
    high = _range_bound(runtime, "lte")
    if not (_is_number(low) and _is_number(high)):
        return [ValidationError("runtime", "Runtime range must be numeric")]

    errors = []
    if low < 0:
        errors.append(ValidationError("runtime", "Runtime minimum cannot be negative"))
    if high < 0:
        errors.append(ValidationError("runtime", "Runtime maximum cannot be negative"))
    if low >= high:
        errors.append(ValidationError("runtime", "Runtime minimum must be less than maximum"))
    return errors


def validate_selections(selections: Mapping[str, Any]) -> ValidationResult:
    """
    Check a possibly partial set of quiz answers.

    Every rule is evaluated so the caller gets the complete list of problems,
    nothing is raised.
    """
    errors: list[ValidationError] = []

    for field, name in (("genres", "genre"), ("moods", "mood")):
        ids = selections.get(field)
        if not ids:
            errors.append(ValidationError(field, f"At least one {name} must be selected"))
        elif not _is_id_list(ids):
            errors.append(ValidationError(field, f"Selected {field} must be a list of genre ids"))

    era = selections.get("era")
    if era is None:
        errors.append(ValidationError("era", "Era must be selected"))
    else:
        errors.extend(_validate_era(era))

    runtime = selections.get("runtime")
    if runtime is None:
        errors.append(ValidationError("runtime", "Runtime preference must be selected"))
    else:
        errors.extend(_validate_runtime(runtime))

    rating = selections.get("rating")
    if rating is None:
        errors.append(ValidationError("rating", "Rating preference must be selected"))
    elif not _is_number(rating):
        errors.append(ValidationError("rating", "Rating must be a number"))
    elif rating < 0 or rating > 10:
        errors.append(ValidationError("rating", "Rating must be between 0 and 10"))

    return ValidationResult(is_valid=not errors, errors=errors)


def has_selection(answer: Any) -> bool:
    """Whether a single question has been answered."""
    if isinstance(answer, (list, tuple, set, frozenset)):
        return len(answer) > 0
    return answer is not None


def is_quiz_complete(selections: Mapping[str, Any]) -> bool:
    """All five answers present, without checking that ranges are well ordered."""
    return bool(
        selections.get("genres")
        and selections.get("moods")
        and selections.get("era") is not None
        and selections.get("runtime") is not None
        and selections.get("rating") is not None
    )
