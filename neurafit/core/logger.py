"""
Logging for the NeuraFit workout engine.

Backend traffic is logged with its correlation id so a failed generation
can be matched against the backend's own logs.
"""
import logging
import sys

from neurafit.core.config import settings


def setup_logger(name: str = "neurafit", level: str | None = None) -> logging.Logger:
    """
    Create the engine logger, once per process.

    Args:
        name: Logger name
        level: Level name; defaults to NEURAFIT_LOG_LEVEL

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger

    logger.setLevel(getattr(logging, (level or settings.LOG_LEVEL).upper(), logging.INFO))
    logger.propagate = False

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(
        fmt="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    ))
    logger.addHandler(handler)

    return logger


logger = setup_logger()


def log_request(method: str, endpoint: str, correlation_id: str | None = None) -> None:
    """Log a call to the NeuraStack backend."""
    suffix = f" [{correlation_id}]" if correlation_id else ""
    logger.info(f"NeuraStack {method} {endpoint}{suffix}")


def log_response(
    endpoint: str,
    status: int,
    duration_ms: float | None = None,
    correlation_id: str | None = None,
) -> None:
    """Log a backend answer; error statuses are logged as warnings."""
    msg = f"NeuraStack {endpoint} -> {status}"
    if duration_ms is not None:
        msg += f" in {duration_ms:.0f}ms"
    if correlation_id:
        msg += f" [{correlation_id}]"
    logger.log(logging.WARNING if status >= 400 else logging.INFO, msg)


def log_error(context: str, error: Exception) -> None:
    """Log a failure that is reported to the user rather than raised."""
    status = getattr(error, "status_code", None)
    code = f" (HTTP {status})" if status else ""
    logger.error(f"{context} failed{code}: {type(error).__name__}: {error}")


def log_generation_attempt(attempt: int, total: int, workout_type: str) -> None:
    logger.info(f"Workout generation attempt {attempt}/{total} for {workout_type!r}")
