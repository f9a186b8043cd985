"""
Async client for the NeuraStack workout backend.
"""
import time
import uuid
from typing import Any

import httpx

from neurafit.core.config import settings
from neurafit.core.errors import ApiError
from neurafit.core.logger import log_request, log_response, logger
from neurafit.models.session import CompletionSummary
from neurafit.models.workout import GenerationRequest, GenerationResponse


HEALTH_ENDPOINT = "/health"
GENERATE_WORKOUT_ENDPOINT = "/workout/generate-workout"
WORKOUT_HISTORY_ENDPOINT = "/workout/workout-history"
COMPLETE_WORKOUT_ENDPOINT = "/workout/complete-workout"


def _correlation_id() -> str:
    return f"neurafit-{int(time.time() * 1000)}-{uuid.uuid4().hex[:9]}"


class NeuraStackClient:
    """Thin async adapter over the backend's HTTP API."""

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._timeout = timeout or settings.REQUEST_TIMEOUT
        self._http = httpx.AsyncClient(
            base_url=base_url or settings.BACKEND_URL,
            timeout=self._timeout,
            transport=transport,
            headers={"Content-Type": "application/json"},
        )

    async def __aenter__(self) -> "NeuraStackClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    # ------------------------------------------------------------------
    # API surface
    # ------------------------------------------------------------------

    async def health_check(self) -> dict[str, Any]:
        """Report backend health: {"status": "healthy" | "degraded" | "ok" | ...}."""
        return await self._request("GET", HEALTH_ENDPOINT)

    async def generate_workout(
        self,
        request: GenerationRequest,
        *,
        user_id: str = "",
        timeout: float | None = None,
    ) -> GenerationResponse:
        """
        Ask the backend for a personalised workout.

        Args:
            request: Generation payload
            user_id: Scopes backend personalisation; omitted when empty
            timeout: Per-call timeout in seconds

        Returns:
            Parsed response envelope (status may still be non-success)
        """
        payload = await self._request(
            "POST",
            GENERATE_WORKOUT_ENDPOINT,
            json=request.payload(),
            user_id=user_id,
            timeout=timeout or settings.GENERATION_TIMEOUT,
        )
        return GenerationResponse.model_validate(payload)

    async def get_workout_history(
        self,
        *,
        limit: int = 10,
        user_id: str = "",
        include_details: bool = False,
        include_incomplete: bool = False,
    ) -> dict[str, Any]:
        params = {
            "limit": limit,
            "includeDetails": str(include_details).lower(),
            "includeIncomplete": str(include_incomplete).lower(),
        }
        return await self._request("GET", WORKOUT_HISTORY_ENDPOINT, params=params, user_id=user_id)

    async def complete_workout(self, summary: CompletionSummary, *, user_id: str = "") -> dict[str, Any]:
        """Report a finished workout so the backend can record it in history."""
        body = {
            "workoutId": summary.workoutId,
            "completed": summary.completedExercises == summary.totalExercises,
            "completionPercentage": summary.completionPercentage,
            "actualDuration": summary.actualDurationMinutes,
            "completedAt": summary.completedAt.isoformat(),
        }
        return await self._request("POST", COMPLETE_WORKOUT_ENDPOINT, json=body, user_id=user_id)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    async def _request(
        self,
        method: str,
        endpoint: str,
        *,
        json: dict | None = None,
        params: dict | None = None,
        user_id: str = "",
        timeout: float | None = None,
    ) -> Any:
        """Send one request, mapping every failure onto ApiError."""
        correlation_id = _correlation_id()
        headers = {"X-Correlation-ID": correlation_id}
        if user_id:
            headers["X-User-Id"] = user_id

        log_request(method, endpoint, correlation_id)
        started = time.perf_counter()
        try:
            response = await self._http.request(
                method,
                endpoint,
                json=json,
                params=params,
                headers=headers,
                timeout=timeout or self._timeout,
            )
        except httpx.TimeoutException as exc:
            raise ApiError(
                "Request timed out. Please try again.",
                status_code=408,
                error="Request Timeout",
            ) from exc
        except httpx.TransportError as exc:
            raise ApiError(
                "Failed to connect to NeuraStack API. Please check your connection.",
                status_code=0,
                error="Network Error",
            ) from exc

        log_response(
            endpoint,
            response.status_code,
            (time.perf_counter() - started) * 1000,
            correlation_id,
        )

        if response.is_error:
            raise self._error_from_response(response)

        try:
            return response.json()
        except ValueError as exc:
            logger.warning(f"Non-JSON body from {endpoint}")
            raise ApiError(
                f"HTTP {response.status_code}: response was not valid JSON",
                status_code=response.status_code,
            ) from exc

    @staticmethod
    def _error_from_response(response: httpx.Response) -> ApiError:
        fallback = f"HTTP {response.status_code}: {response.reason_phrase}"
        try:
            body = response.json()
        except ValueError:
            body = None

        if not isinstance(body, dict):
            return ApiError(fallback, status_code=response.status_code)

        return ApiError(
            body.get("message") or body.get("detail") or fallback,
            status_code=response.status_code,
            error=body.get("error") or "API Error",
        )
