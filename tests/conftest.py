"""
Pytest fixtures for the NeuraFit workout engine tests.
"""
import asyncio
import os

# Keep local state out of the user's home directory
os.environ.setdefault("NEURAFIT_STORAGE_DIR", "/tmp/neurafit-tests")

import httpx
import pytest
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, PlainTextResponse

from neurafit.models.profile import FitnessProfile
from neurafit.services.neurastack_client import NeuraStackClient
from neurafit.services.persistence import LocalStorage, WorkoutStateStore
from neurafit.services.session import WorkoutSession


def api_workout(count: int = 5, rest: str = "3s", **overrides) -> dict:
    """Workout object in the shape returned by /workout/generate-workout."""
    workout = {
        "type": "strength",
        "duration": 45,
        "difficulty": "intermediate",
        "exercises": [
            {
                "name": f"Exercise {i + 1}",
                "sets": 3,
                "reps": "10",
                "rest": rest,
                "instructions": "Keep a neutral spine",
                "targetMuscles": ["legs"],
            }
            for i in range(count)
        ],
        "warmup": [{"name": "Light jog"}],
        "cooldown": [{"name": "Hamstring stretch"}],
        "coachingTips": ["Breathe out on exertion"],
        "calorieEstimate": 320,
    }
    workout.update(overrides)
    return workout


def success_body(workout: dict | None = None, correlation_id: str = "corr-123") -> dict:
    return {
        "status": "success",
        "data": {
            "workout": api_workout() if workout is None else workout,
            "metadata": {"approach": "ensemble", "model": "gpt-4o-mini"},
        },
        "correlationId": correlation_id,
    }


class ScriptedBackend:
    """In-process stand-in for the NeuraStack API with scripted generation responses."""

    def __init__(self) -> None:
        self.health_status = "healthy"
        self.health_code = 200
        self.health_body: object = None
        self.responses: list[tuple[int, dict | str]] = []
        self.default_response: tuple[int, dict | str] = (200, success_body())
        self.generate_calls = 0
        self.requests: list[dict] = []
        self.headers: list[dict] = []
        self.history_params: list[dict] = []
        self.completed: list[dict] = []
        self.hold: asyncio.Event | None = None
        self.app = self._build_app()

    def queue(self, status: int, body: dict | str) -> None:
        self.responses.append((status, body))

    def fail(self, status: int, message: str, times: int = 1) -> None:
        for _ in range(times):
            self.queue(status, {"status": "error", "message": message})

    def succeed(self, workout: dict | None = None) -> None:
        self.queue(200, success_body(workout))

    @staticmethod
    def _respond(status: int, body: dict | str):
        if isinstance(body, str):
            return PlainTextResponse(body, status_code=status)
        return JSONResponse(body, status_code=status)

    def _build_app(self) -> FastAPI:
        app = FastAPI()

        @app.get("/health")
        async def health():
            body = {"status": self.health_status} if self.health_body is None else self.health_body
            return JSONResponse(body, status_code=self.health_code)

        @app.post("/workout/generate-workout")
        async def generate(request: Request):
            self.generate_calls += 1
            self.requests.append(await request.json())
            self.headers.append(dict(request.headers))
            if self.hold is not None:
                await self.hold.wait()
            status, body = self.responses.pop(0) if self.responses else self.default_response
            return self._respond(status, body)

        @app.get("/workout/workout-history")
        async def history(request: Request):
            self.history_params.append(dict(request.query_params))
            return {"status": "success", "data": {"workouts": []}}

        @app.post("/workout/complete-workout")
        async def complete(request: Request):
            self.completed.append(await request.json())
            return {"status": "success"}

        return app


class RecordingSleep:
    """Replaces asyncio.sleep in retry loops and records the requested delays."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


@pytest.fixture
def backend():
    """Scripted fake backend."""
    return ScriptedBackend()


@pytest.fixture
def client(backend):
    """NeuraStack client wired to the fake backend."""
    return NeuraStackClient(
        base_url="http://testserver",
        transport=httpx.ASGITransport(app=backend.app),
    )


@pytest.fixture
def storage(tmp_path):
    """Local storage in a per-test directory."""
    return LocalStorage(tmp_path / "storage")


@pytest.fixture
def store(storage):
    return WorkoutStateStore(storage)


@pytest.fixture
def recording_sleep():
    return RecordingSleep()


@pytest.fixture
def notices():
    """Collects notices sent to the user."""
    return []


@pytest.fixture
def sample_profile():
    """Complete, valid fitness profile."""
    return FitnessProfile(
        fitnessLevel="intermediate",
        goals=["BM", "IC"],
        equipment=["Dumbbells", "RB"],
        availableTime=45,
        age=28,
        weight=140,
        gender="female",
        injuries=[],
        daysPerWeek=4,
    )


@pytest.fixture
def make_session(client, store, notices, recording_sleep):
    """Factory for sessions with manual ticking."""
    def factory(**kwargs) -> WorkoutSession:
        kwargs.setdefault("notify", notices.append)
        kwargs.setdefault("sleep", recording_sleep)
        kwargs.setdefault("auto_tick", False)
        return WorkoutSession(client, store, **kwargs)
    return factory
