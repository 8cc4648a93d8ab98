"""
Miscelaneous utilities.
"""

import inspect
import time
from datetime import datetime, timezone
from functools import wraps
from typing import Callable, Optional

from app.logger import logger


def timed(func) -> Callable:
    if inspect.iscoroutinefunction(func):
        @wraps(func)
        async def timed_coro(*args, **kwargs):
            init = time.perf_counter()
            out = await func(*args, **kwargs)
            end = time.perf_counter() - init
            logger.info(f"{func.__name__} finished in {1000 * end:.2f} ms")
            return out
        return timed_coro

    @wraps(func)
    def timed_func(*args, **kwargs):
        init = time.perf_counter()
        out = func(*args, **kwargs)
        end = time.perf_counter() - init
        logger.info(f"{func.__name__} finished in {1000 * end:.2f} ms")
        return out
    return timed_func


def parse_date(value) -> Optional[datetime]:
    """Parse an ISO date string, returning None when it is not a valid date."""
    if not isinstance(value, str):
        return None
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        return None
    # dates are compared naive, aware values are moved to UTC first
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def now_ms() -> int:
    return int(time.time() * 1000)
