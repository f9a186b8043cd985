"""
Workout generation with error classification, bounded retries and backoff.

A single tenacity retry loop replaces recursive self-invocation: every
underlying call is one attempt, rate-limit and transient failures share the
MAX_RETRIES budget, and the outcome is returned as a tagged GenerationResult.
"""
import asyncio
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Awaitable, Callable, Literal, Optional

from pydantic import ValidationError
from tenacity import AsyncRetrying, RetryCallState, retry_if_exception, stop_after_attempt

from neurafit.core.config import settings
from neurafit.core.errors import (
    ApiError,
    GenerationError,
    GenerationErrorKind,
    InvalidWorkoutDataError,
    ServiceUnavailableError,
)
from neurafit.core.logger import log_error, log_generation_attempt, logger
from neurafit.models.session import Notice
from neurafit.models.workout import GenerationContext, GenerationRequest, WorkoutPlan
from neurafit.services.neurastack_client import NeuraStackClient
from neurafit.services.persistence import LocalStorage, clear_matching_keys
from neurafit.services.plan_transform import extract_exercises, transform_api_workout


class ErrorClassification(str, Enum):
    RATE_LIMITED = "rate_limited"
    RETRYABLE = "retryable"
    NON_RETRYABLE = "non_retryable"


# Status codes embedded in messages that arrive without an HTTP status
_RETRYABLE_CODES = ("503", "500")

_RETRYABLE_MARKERS = (
    "timeout",
    "timed out",
    "temporarily unavailable",
    "service unavailable",
    "internal server error",
)


def classify_error(error: BaseException) -> ErrorClassification:
    """
    Decide whether a failed generation call may be retried.

    A known 4xx status other than 408/429 is terminal whatever the message
    says. Otherwise rate limiting is checked first, then server/network
    trouble; bad payloads and unexpected exceptions are terminal.
    """
    if not isinstance(error, ApiError) or isinstance(error, InvalidWorkoutDataError):
        return ErrorClassification.NON_RETRYABLE

    status = error.status_code
    message = str(error).lower()

    if status is not None and 400 <= status < 500 and status not in (408, 429):
        return ErrorClassification.NON_RETRYABLE

    unknown_status = status is None

    if status == 429 or "rate limit" in message or (unknown_status and "429" in message):
        return ErrorClassification.RATE_LIMITED

    if (
        (status or 0) >= 500
        or status == 408
        or any(marker in message for marker in _RETRYABLE_MARKERS)
        or (unknown_status and any(code in message for code in _RETRYABLE_CODES))
    ):
        return ErrorClassification.RETRYABLE

    return ErrorClassification.NON_RETRYABLE


def backoff_delay_ms(classification: ErrorClassification, retry_count: int) -> int:
    """Delay before the next attempt: 2s·2^n when rate limited, 1s·2^n for transient errors."""
    if classification is ErrorClassification.RATE_LIMITED:
        return settings.RATE_LIMIT_BASE_DELAY_MS * 2 ** retry_count
    if classification is ErrorClassification.RETRYABLE:
        return settings.TRANSIENT_BASE_DELAY_MS * 2 ** retry_count
    return 0


def describe_failure(error: BaseException) -> GenerationError:
    """Map a terminal failure onto the notice the user should see."""
    if isinstance(error, GenerationError):
        return error

    if isinstance(error, ServiceUnavailableError):
        return GenerationError(
            GenerationErrorKind.AVAILABILITY,
            "Service Unavailable",
            "Workout generation service is temporarily unavailable. Please try again later.",
            severity="warning",
        )

    if isinstance(error, InvalidWorkoutDataError):
        return GenerationError(
            GenerationErrorKind.INVALID_DATA,
            "Invalid Workout Data",
            "The workout service returned an unusable workout. Please try again.",
        )

    status = getattr(error, "status_code", None)
    message = str(error).lower()
    classification = classify_error(error)

    if status == 401 or "unauthorized" in message:
        return GenerationError(
            GenerationErrorKind.AUTH,
            "Authentication Error",
            "Authentication required. Please sign in and try again.",
            status_code=status,
        )

    if status == 400 or "bad request" in message:
        return GenerationError(
            GenerationErrorKind.INVALID_REQUEST,
            "Invalid Request",
            "Invalid request data. Please check your profile information and try again.",
            status_code=status,
        )

    if classification is ErrorClassification.RATE_LIMITED:
        return GenerationError(
            GenerationErrorKind.RATE_LIMIT,
            "Rate Limit Exceeded",
            "Too many requests. Please wait a moment before trying again.",
            status_code=status,
        )

    if status == 408 or "timeout" in message or "timed out" in message:
        return GenerationError(
            GenerationErrorKind.TIMEOUT,
            "Request Timeout",
            "Workout generation timed out. Please try again with a simpler request.",
            status_code=status,
        )

    if status == 0 or "failed to connect" in message or "network error" in message:
        return GenerationError(
            GenerationErrorKind.CONNECTION,
            "Connection Error",
            "Unable to connect to workout service. Please check your internet connection.",
            status_code=status,
        )

    if classification is ErrorClassification.RETRYABLE:
        return GenerationError(
            GenerationErrorKind.TRANSIENT,
            "Service Temporarily Unavailable",
            "Workout generation service is temporarily unavailable. Please try again in a few minutes.",
            status_code=status,
        )

    return GenerationError(
        GenerationErrorKind.UNKNOWN,
        "Generation Failed",
        "Unable to generate workout. Please try again.",
        status_code=status,
    )


@dataclass(frozen=True)
class GenerationAttempt:
    """One failed call in a generation chain."""

    retryCount: int
    classification: ErrorClassification
    delayMs: int
    message: str = ""


@dataclass
class GenerationResult:
    status: Literal["success", "terminal_error"]
    plan: Optional[WorkoutPlan] = None
    error: Optional[GenerationError] = None
    attempts: list[GenerationAttempt] = field(default_factory=list)
    calls: int = 0

    @property
    def ok(self) -> bool:
        return self.status == "success"


Notify = Callable[[Notice], None]
StatusCallback = Callable[[str], None]
Sleep = Callable[[float], Awaitable[None]]


class GenerationController:
    """Runs one generation chain against the backend."""

    def __init__(
        self,
        client: NeuraStackClient,
        storage: LocalStorage | None = None,
        *,
        user_id: str = "",
        notify: Notify | None = None,
        on_status: StatusCallback | None = None,
        sleep: Sleep = asyncio.sleep,
        max_retries: int | None = None,
    ) -> None:
        self._client = client
        self._storage = storage
        self._user_id = user_id
        self._notify = notify or (lambda notice: None)
        self._on_status = on_status or (lambda text: None)
        self._sleep = sleep
        self._max_retries = settings.MAX_RETRIES if max_retries is None else max_retries

    async def attempt_generation(
        self,
        request: GenerationRequest,
        *,
        workout_type: str,
        fallback_duration: int | None = None,
        fallback_difficulty: str | None = None,
    ) -> GenerationResult:
        """
        Generate a workout plan, retrying transient failures.

        Args:
            request: Payload for the backend
            workout_type: Allow-listed workout type the plan is tagged with
            fallback_duration: Plan duration when the backend omits one
            fallback_difficulty: Plan difficulty when the backend omits one

        Returns:
            Tagged result with the plan or the terminal error, plus the
            failed attempts that were retried along the way
        """
        attempts: list[GenerationAttempt] = []
        calls = 0

        try:
            await self._check_availability()
        except ServiceUnavailableError as e:
            logger.warning(str(e))
            return GenerationResult("terminal_error", error=describe_failure(e))

        if self._storage is not None:
            removed = clear_matching_keys(self._storage, settings.CACHE_KEY_MARKERS)
            if removed:
                logger.info(f"Cleared cached generation keys: {', '.join(removed)}")

        total = self._max_retries + 1

        def before_retry(retry_state: RetryCallState) -> None:
            error = retry_state.outcome.exception()
            classification = classify_error(error)
            delay_ms = int(retry_state.next_action.sleep * 1000)
            attempts.append(GenerationAttempt(
                retryCount=retry_state.attempt_number - 1,
                classification=classification,
                delayMs=delay_ms,
                message=str(error),
            ))
            logger.warning(
                f"Generation attempt {retry_state.attempt_number}/{total} failed "
                f"({classification.value}: {error}), retrying in {delay_ms}ms"
            )
            if classification is ErrorClassification.RATE_LIMITED:
                self._notify(Notice(
                    title="Rate Limit Exceeded",
                    description=f"Too many requests. Retrying in {delay_ms // 1000} seconds...",
                    severity="warning",
                    durationMs=delay_ms,
                ))

        retrying = AsyncRetrying(
            stop=stop_after_attempt(total),
            wait=self._wait,
            retry=retry_if_exception(
                lambda e: classify_error(e) is not ErrorClassification.NON_RETRYABLE
            ),
            before_sleep=before_retry,
            sleep=self._sleep,
            reraise=True,
        )

        try:
            async for attempt in retrying:
                with attempt:
                    retry_count = attempt.retry_state.attempt_number - 1
                    if retry_count:
                        self._on_status(f"Retrying workout generation (attempt {retry_count + 1}/{total})...")
                    else:
                        self._on_status("Generating your personalized workout...")
                    log_generation_attempt(retry_count + 1, total, request.workoutType)
                    calls += 1
                    plan = await self._generate_once(
                        request,
                        workout_type=workout_type,
                        fallback_duration=fallback_duration or request.timeAvailable,
                        fallback_difficulty=fallback_difficulty or request.fitnessLevel,
                    )
        except Exception as e:
            log_error("Workout generation (final attempt)", e)
            attempts.append(GenerationAttempt(
                retryCount=calls - 1,
                classification=classify_error(e),
                delayMs=0,
                message=str(e),
            ))
            return GenerationResult("terminal_error", error=describe_failure(e), attempts=attempts, calls=calls)

        return GenerationResult("success", plan=plan, attempts=attempts, calls=calls)

    @staticmethod
    def _wait(retry_state: RetryCallState) -> float:
        error = retry_state.outcome.exception()
        return backoff_delay_ms(classify_error(error), retry_state.attempt_number - 1) / 1000

    async def _check_availability(self) -> None:
        """Fast-fail gate before a fresh chain; not counted against the retry budget."""
        self._on_status("Checking service availability...")
        try:
            health = await self._client.health_check()
        except ApiError as e:
            logger.warning(f"Health check failed, proceeding with generation: {e}")
            return

        status = str(health.get("status", "")).lower() if isinstance(health, dict) else ""
        if status not in ("healthy", "ok"):
            raise ServiceUnavailableError(status)

    async def _generate_once(
        self,
        request: GenerationRequest,
        *,
        workout_type: str,
        fallback_duration: int,
        fallback_difficulty: str,
    ) -> WorkoutPlan:
        started = time.perf_counter()
        try:
            response = await self._client.generate_workout(
                request,
                user_id=self._user_id,
                timeout=settings.GENERATION_TIMEOUT,
            )
        except ValidationError as e:
            raise InvalidWorkoutDataError("Invalid workout data - malformed response envelope") from e

        if response.status != "success" or response.data is None:
            raise ApiError(response.message or "Failed to generate workout")

        workout = response.data.workout
        if not workout:
            raise InvalidWorkoutDataError()
        if not extract_exercises(workout):
            raise InvalidWorkoutDataError("Invalid workout data - empty exercise list")

        metadata = response.data.metadata
        context = GenerationContext(
            correlationId=response.correlationId,
            sessionId=response.correlationId or "unknown",
            generationTimeMs=(time.perf_counter() - started) * 1000,
            approach=metadata.get("approach"),
            model=metadata.get("model"),
        )
        try:
            return transform_api_workout(
                workout,
                workout_type=workout_type,
                fallback_duration=fallback_duration,
                fallback_difficulty=fallback_difficulty,
                context=context,
            )
        except ValidationError as e:
            raise InvalidWorkoutDataError(
                f"Invalid workout data - {e.error_count()} invalid fields"
            ) from e
