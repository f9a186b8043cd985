"""
Periodic backend health polling.
"""
import asyncio
from typing import Callable, Optional

from neurafit.core.config import settings
from neurafit.core.errors import ApiError
from neurafit.core.logger import logger
from neurafit.models.session import ServiceStatus
from neurafit.services.neurastack_client import NeuraStackClient


class HealthMonitor:
    """Checks /health immediately and then every ``interval`` seconds."""

    def __init__(
        self,
        client: NeuraStackClient,
        on_status: Callable[[ServiceStatus], None],
        interval: float | None = None,
    ) -> None:
        self._client = client
        self._on_status = on_status
        self._interval = interval or settings.HEALTH_CHECK_INTERVAL_SECONDS
        self._task: Optional[asyncio.Task[None]] = None

    async def check_once(self) -> ServiceStatus:
        try:
            health = await self._client.health_check()
        except ApiError as e:
            logger.warning(f"Periodic health check failed: {e}")
            status = ServiceStatus.DEGRADED
        else:
            reported = str(health.get("status", "")).lower() if isinstance(health, dict) else ""
            status = ServiceStatus.HEALTHY if reported in ("healthy", "ok") else ServiceStatus.DEGRADED

        self._on_status(status)
        return status

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if not self.is_running:
            self._task = asyncio.get_running_loop().create_task(self._run())

    def stop(self) -> None:
        if self._task is not None:
            self._task.cancel()
            self._task = None

    async def _run(self) -> None:
        while True:
            await self.check_once()
            await asyncio.sleep(self._interval)
