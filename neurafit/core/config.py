"""
Configuration and constants for the NeuraFit workout engine.
"""
import os
from pathlib import Path
from dotenv import load_dotenv

load_dotenv()


class Settings:
    """Engine settings loaded from environment variables."""

    # Backend Configuration
    BACKEND_URL: str = os.getenv("NEURAFIT_BACKEND_URL", "http://localhost:8080").rstrip("/")

    # Request Configuration
    REQUEST_TIMEOUT: float = float(os.getenv("NEURAFIT_REQUEST_TIMEOUT", 60))
    GENERATION_TIMEOUT: float = float(os.getenv("NEURAFIT_GENERATION_TIMEOUT", 60))

    # Retry policy: one budget shared by rate-limit and transient errors
    MAX_RETRIES: int = 2
    RATE_LIMIT_BASE_DELAY_MS: int = 2000
    TRANSIENT_BASE_DELAY_MS: int = 1000

    # Local storage
    STORAGE_DIR: Path = Path(os.getenv("NEURAFIT_STORAGE_DIR", "~/.neurafit")).expanduser()
    WORKOUT_STATE_KEY: str = "neurafit-workout-state"
    WORKOUT_STATE_MAX_AGE_HOURS: int = 24
    CACHE_KEY_MARKERS: tuple[str, ...] = ("workout", "neurafit", "exercise", "generation")

    LOG_LEVEL: str = os.getenv("NEURAFIT_LOG_LEVEL", "INFO")

    # Session timers
    TICK_INTERVAL_SECONDS: float = 1.0
    HEALTH_CHECK_INTERVAL_SECONDS: float = 120.0

    # Request fallbacks for incomplete profiles
    DEFAULT_AGE: int = 30
    DEFAULT_WEIGHT: float = 150
    DEFAULT_DAYS_PER_WEEK: int = 3

    @classmethod
    def validate(cls) -> None:
        """Validate configuration before the first request."""
        problems = []

        if not cls.BACKEND_URL.startswith(("http://", "https://")):
            problems.append(f"NEURAFIT_BACKEND_URL must be an http(s) URL, got {cls.BACKEND_URL!r}")

        if cls.MAX_RETRIES < 0:
            problems.append("MAX_RETRIES cannot be negative")

        if problems:
            raise ValueError(
                f"Invalid configuration: {'; '.join(problems)}. "
                "Please check your .env file."
            )


settings = Settings()
