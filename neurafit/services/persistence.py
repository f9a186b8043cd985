"""
Local persistence of the in-progress workout, for resume after a reload.
"""
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Callable, Iterable

from pydantic import ValidationError

from neurafit.core.config import settings
from neurafit.core.logger import logger
from neurafit.models.session import PersistedSnapshot, SessionState
from neurafit.models.workout import WorkoutPlan


def utc_now() -> datetime:
    return datetime.now(tz=timezone.utc)


class LocalStorage:
    """Durable key/value store: one JSON document per key under a directory."""

    def __init__(self, directory: Path | str | None = None) -> None:
        self.directory = Path(directory) if directory is not None else settings.STORAGE_DIR

    def _path(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    def get_item(self, key: str) -> str | None:
        path = self._path(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def set_item(self, key: str, value: str) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        self._path(key).write_text(value, encoding="utf-8")

    def remove_item(self, key: str) -> None:
        self._path(key).unlink(missing_ok=True)

    def keys(self) -> list[str]:
        if not self.directory.exists():
            return []
        return sorted(path.stem for path in self.directory.glob("*.json"))


def clear_matching_keys(storage: LocalStorage, markers: Iterable[str]) -> list[str]:
    """
    Remove every key containing one of ``markers``.

    Returns the removed keys. Storage failures are logged, never raised.
    """
    removed: list[str] = []
    try:
        for key in storage.keys():
            if any(marker in key for marker in markers):
                storage.remove_item(key)
                removed.append(key)
    except OSError as e:
        logger.warning(f"Failed to clear cached generation keys: {e}")
    return removed


class WorkoutStateStore:
    """Saves, loads and clears the single persisted workout snapshot."""

    def __init__(
        self,
        storage: LocalStorage,
        key: str | None = None,
        max_age: timedelta | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.storage = storage
        self.key = key or settings.WORKOUT_STATE_KEY
        self.max_age = max_age or timedelta(hours=settings.WORKOUT_STATE_MAX_AGE_HOURS)
        self._clock = clock

    def save(self, plan: WorkoutPlan | None, state: SessionState) -> bool:
        """Write a snapshot of an active workout. Returns whether anything was written."""
        if plan is None or not state.isWorkoutActive:
            return False

        snapshot = PersistedSnapshot.capture(plan, state, saved_at=self._clock())
        try:
            self.storage.set_item(self.key, snapshot.model_dump_json())
        except OSError as e:
            logger.warning(f"Failed to save workout state: {e}")
            return False
        return True

    def load(self) -> PersistedSnapshot | None:
        """Return the saved snapshot, or None when absent, stale or corrupt."""
        try:
            raw = self.storage.get_item(self.key)
        except UnicodeDecodeError as e:
            logger.warning(f"Discarding unreadable workout state: {e}")
            self.clear()
            return None
        except OSError as e:
            logger.warning(f"Failed to load workout state: {e}")
            return None

        if raw is None:
            return None

        try:
            snapshot = PersistedSnapshot.model_validate_json(raw)
        except (ValidationError, ValueError) as e:
            logger.warning(f"Discarding corrupt workout state: {e}")
            self.clear()
            return None

        saved_at = snapshot.timestamp
        if saved_at.tzinfo is None:
            saved_at = saved_at.replace(tzinfo=timezone.utc)

        if self._clock() - saved_at > self.max_age:
            logger.info(f"Discarding workout state older than {self.max_age}")
            self.clear()
            return None

        return snapshot

    def clear(self) -> None:
        try:
            self.storage.remove_item(self.key)
        except OSError as e:
            logger.warning(f"Failed to clear workout state: {e}")
