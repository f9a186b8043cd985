"""
Per-second session timer: a pure tick reducer plus the asyncio task that drives it.
"""
import asyncio
from typing import Callable, Optional

from neurafit.core.config import settings
from neurafit.models.session import SessionState


def tick(state: SessionState) -> SessionState:
    """
    Advance the session by one second.

    While resting only the rest countdown moves, and reaching zero ends the
    rest. Otherwise only the exercise timer moves. Inactive sessions are
    returned unchanged.
    """
    if not state.isWorkoutActive:
        return state

    if state.isResting:
        remaining = state.restTimerSeconds - 1
        if remaining <= 0:
            return state.model_copy(update={"restTimerSeconds": 0, "isResting": False})
        return state.model_copy(update={"restTimerSeconds": remaining})

    return state.model_copy(update={"exerciseTimerSeconds": state.exerciseTimerSeconds + 1})


class WorkoutTicker:
    """Calls ``on_tick`` once per interval until stopped."""

    def __init__(self, on_tick: Callable[[], None], interval: float | None = None) -> None:
        self._on_tick = on_tick
        self._interval = interval or settings.TICK_INTERVAL_SECONDS
        self._task: Optional[asyncio.Task[None]] = None

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.is_running:
            return
        self._task = asyncio.get_running_loop().create_task(self._run())

    def stop(self) -> None:
        """Cancel the tick task. Safe to call when not running."""
        if self._task is not None:
            self._task.cancel()
            self._task = None

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self._interval)
            self._on_tick()
