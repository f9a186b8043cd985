"""
Exception hierarchy for the NeuraFit workout engine.
"""
from enum import Enum

from neurafit.models.session import Notice


class NeuraFitError(Exception):
    """Base exception for all neurafit errors."""


class ApiError(NeuraFitError):
    """A backend call failed at the transport or HTTP level."""

    def __init__(self, message: str, status_code: int | None = None, error: str = "API Error") -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.error = error

    @property
    def retryable(self) -> bool:
        code = self.status_code or 0
        return code >= 500 or code in (408, 429)


class InvalidWorkoutDataError(ApiError):
    """The backend answered, but the workout payload is unusable."""

    def __init__(self, message: str = "Invalid workout data received from API") -> None:
        super().__init__(message, status_code=None, error="Invalid Data")


class ServiceUnavailableError(NeuraFitError):
    """Pre-flight health check reported the service as unhealthy."""

    def __init__(self, status: str) -> None:
        super().__init__(f"Workout service reported status {status!r}")
        self.status = status


class GenerationErrorKind(str, Enum):
    VALIDATION = "validation"
    AVAILABILITY = "availability"
    RATE_LIMIT = "rate_limit"
    TRANSIENT = "transient"
    TIMEOUT = "timeout"
    CONNECTION = "connection"
    INVALID_REQUEST = "invalid_request"
    AUTH = "auth"
    INVALID_DATA = "invalid_data"
    UNKNOWN = "unknown"


class GenerationError(NeuraFitError):
    """Terminal, user-facing failure of a generation or modification."""

    def __init__(
        self,
        kind: GenerationErrorKind,
        title: str,
        description: str,
        severity: str = "error",
        status_code: int | None = None,
    ) -> None:
        super().__init__(f"{title}: {description}")
        self.kind = kind
        self.title = title
        self.description = description
        self.severity = severity
        self.status_code = status_code

    def notice(self, duration_ms: int = 5000) -> Notice:
        return Notice(
            title=self.title,
            description=self.description,
            severity=self.severity,
            durationMs=duration_ms,
        )
