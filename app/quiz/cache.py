"""
Single-slot cache of the last quiz result.

The entry lives under one fixed key of a key-value storage, expires 30 days
after it was written and is discarded when its schema version differs from the
current one. Storage problems never reach the caller: writes report a boolean
and reads fall back to None.
"""

import errno
import json
from pathlib import Path
from typing import Any, Callable, Optional, Protocol

from app.logger import logger
from app.models import SavedResult
from app.quiz.constants import CACHE_EXPIRATION_MS, CACHE_KEY, CACHE_VERSION
from app.utils import now_ms


class QuotaExceededError(Exception):
    pass


class Storage(Protocol):
    def get_item(self, key: str) -> Optional[str]: ...

    def set_item(self, key: str, value: str) -> None: ...

    def remove_item(self, key: str) -> None: ...


def _check_quota(used: int, value: str, quota_bytes: Optional[int]) -> None:
    size = len(value.encode("utf-8"))
    if quota_bytes is not None and used + size > quota_bytes:
        raise QuotaExceededError(f"storing {size} bytes exceeds the {quota_bytes} bytes quota")


class MemoryStorage:
    def __init__(self, quota_bytes: Optional[int] = None):
        self.items: dict[str, str] = {}
        self.quota_bytes = quota_bytes

    def get_item(self, key: str) -> Optional[str]:
        return self.items.get(key)

    def set_item(self, key: str, value: str) -> None:
        used = sum(len(v.encode("utf-8")) for k, v in self.items.items() if k != key)
        _check_quota(used, value, self.quota_bytes)
        self.items[key] = value

    def remove_item(self, key: str) -> None:
        self.items.pop(key, None)


class FileStorage:
    """One file per key inside a directory."""

    def __init__(self, directory: Path, quota_bytes: Optional[int] = None):
        self.directory = Path(directory)
        self.quota_bytes = quota_bytes

    def _path(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    def get_item(self, key: str) -> Optional[str]:
        path = self._path(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def set_item(self, key: str, value: str) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        path = self._path(key)
        used = sum(p.stat().st_size for p in self.directory.glob("*.json") if p != path)
        _check_quota(used, value, self.quota_bytes)
        try:
            path.write_text(value, encoding="utf-8")
        except OSError as exc:
            if exc.errno in (errno.ENOSPC, errno.EDQUOT):
                raise QuotaExceededError(str(exc)) from exc
            raise

    def remove_item(self, key: str) -> None:
        self._path(key).unlink(missing_ok=True)


class ResultCache:
    def __init__(
        self,
        storage: Optional[Storage],
        now: Callable[[], int] = now_ms,
        key: str = CACHE_KEY,
        version: str = CACHE_VERSION,
    ):
        self.storage = storage
        self.now = now
        self.key = key
        self.version = version

    def _write(self, serialized: str) -> None:
        self.storage.set_item(self.key, serialized)

    def set_cache(
        self,
        selections: dict[str, Any],
        recommendations: list[dict[str, Any]],
        total_matches: int,
    ) -> bool:
        if self.storage is None:
            logger.warning("result cache storage not available")
            return False

        now = self.now()
        saved = SavedResult(
            timestamp=now,
            expires_at=now + CACHE_EXPIRATION_MS,
            version=self.version,
            selections=selections,
            recommendations=recommendations,
            total_matches=total_matches,
            cache_key=self.key,
        )
        try:
            serialized = json.dumps(saved.to_dict())
            self._write(serialized)
            return True
        except QuotaExceededError:
            logger.warning("result cache quota exceeded, clearing old data")
            self.clear_cache()
            try:
                self._write(serialized)
                return True
            except Exception as exc:
                logger.error(f"failed to save result cache after clearing: {exc}")
                return False
        except Exception as exc:
            logger.error(f"error saving result cache: {exc}")
            return False

    def get_cache(self) -> Optional[SavedResult]:
        if self.storage is None:
            return None

        try:
            serialized = self.storage.get_item(self.key)
            if not serialized:
                return None

            saved = SavedResult.from_dict(json.loads(serialized))
            if saved.version != self.version:
                logger.warning("result cache version mismatch, clearing old cache")
                self.clear_cache()
                return None

            if self.now() >= saved.expires_at:
                logger.warning("result cache expired, clearing")
                self.clear_cache()
                return None

            return saved
        except Exception as exc:
            logger.error(f"error reading result cache: {exc}")
            self.clear_cache()
            return None

    def clear_cache(self) -> None:
        if self.storage is None:
            return
        try:
            self.storage.remove_item(self.key)
        except Exception as exc:
            logger.error(f"error clearing result cache: {exc}")

    def has_cached_results(self) -> bool:
        return self.get_cache() is not None

    def get_cache_metadata(self) -> Optional[dict[str, Any]]:
        cached = self.get_cache()
        if cached is None:
            return None
        return {
            "timestamp": cached.timestamp,
            "expiresAt": cached.expires_at,
            "version": cached.version,
        }
