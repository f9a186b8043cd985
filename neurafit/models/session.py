"""
Pydantic models for the in-progress workout session and its snapshot.
"""
from datetime import datetime
from enum import Enum
from typing import Literal, Optional
from pydantic import BaseModel, Field

from neurafit.models.workout import WorkoutPlan


class SessionPhase(str, Enum):
    IDLE = "idle"
    GENERATING = "generating"
    READY = "ready"
    ACTIVE = "active"
    RESTING = "resting"
    COMPLETED = "completed"
    STOPPED = "stopped"


class ServiceStatus(str, Enum):
    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNAVAILABLE = "unavailable"
    UNKNOWN = "unknown"


class SessionState(BaseModel):
    """
    Working memory of an active workout.

    Instances are immutable; every change produces a new state so the
    timer and user actions can be expressed as pure transitions.
    """

    currentExerciseIndex: int = 0
    completedExercises: set[int] = Field(default_factory=set)
    exerciseTimerSeconds: int = 0
    restTimerSeconds: int = 0
    isResting: bool = False
    workoutStartTime: Optional[datetime] = None
    isWorkoutActive: bool = False

    class Config:
        frozen = True


class PersistedSnapshot(BaseModel):
    """Session state plus plan, as written to local storage."""

    workout: WorkoutPlan
    currentExerciseIndex: int
    completedExercises: list[int]
    exerciseTimer: int
    restTimer: int
    isResting: bool
    workoutStartTime: Optional[datetime] = None
    timestamp: datetime

    @classmethod
    def capture(cls, plan: WorkoutPlan, state: SessionState, saved_at: datetime) -> "PersistedSnapshot":
        return cls(
            workout=plan,
            currentExerciseIndex=state.currentExerciseIndex,
            completedExercises=sorted(state.completedExercises),
            exerciseTimer=state.exerciseTimerSeconds,
            restTimer=state.restTimerSeconds,
            isResting=state.isResting,
            workoutStartTime=state.workoutStartTime,
            timestamp=saved_at,
        )

    def to_session_state(self) -> SessionState:
        return SessionState(
            currentExerciseIndex=self.currentExerciseIndex,
            completedExercises=set(self.completedExercises),
            exerciseTimerSeconds=self.exerciseTimer,
            restTimerSeconds=self.restTimer,
            isResting=self.isResting,
            workoutStartTime=self.workoutStartTime,
            isWorkoutActive=True,
        )


class Notice(BaseModel):
    """User-visible toast."""

    title: str
    description: str
    severity: Literal["info", "success", "warning", "error"] = "info"
    durationMs: int = 3000


class CompletionSummary(BaseModel):
    """Handed to the completion collaborator when a workout finishes."""

    workoutId: str
    workoutName: str
    completedExercises: int
    totalExercises: int
    startedAt: Optional[datetime] = None
    completedAt: datetime
    actualDurationMinutes: int = 0

    @property
    def completionPercentage(self) -> int:
        if not self.totalExercises:
            return 0
        return round(self.completedExercises / self.totalExercises * 100)
