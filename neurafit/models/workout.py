"""
Pydantic models for workout generation requests and plans.
"""
from datetime import datetime, timezone
from typing import Any, Optional
from pydantic import BaseModel, Field


class GenerationRequest(BaseModel):
    """Payload for one workout generation call. Built fresh per call."""

    age: int
    fitnessLevel: str
    gender: Optional[str] = None
    weight: float
    goals: list[str] = Field(default=[], description="Human-readable goal names")
    equipment: list[str] = Field(default=[], description="Human-readable equipment names")
    injuries: list[str] = Field(default=[])
    timeAvailable: int = Field(..., description="Workout duration in minutes")
    daysPerWeek: int
    workoutType: str
    additionalInformation: Optional[str] = None

    class Config:
        frozen = True

    def payload(self) -> dict:
        """Request body as sent to the backend; empty optionals are omitted."""
        return self.model_dump(exclude_none=True)


class Exercise(BaseModel):
    """Single exercise in a workout plan."""

    name: str
    sets: int = Field(3, gt=0)
    reps: int | str = "8-12"
    duration: int = Field(0, ge=0, description="Seconds; 0 when not time-based")
    restTime: int = Field(60, ge=0, description="Seconds")
    instructions: str = ""
    tips: str = ""
    targetMuscles: list[str] = Field(default=[])
    equipment: list[str] = Field(default=[])
    category: str = "compound"
    modifications: list[str] = Field(default=[])

    class Config:
        frozen = True


class WorkoutBlock(BaseModel):
    """Warm-up or cool-down block."""

    duration: int = 5
    exercises: list[str] = Field(default=[])

    class Config:
        frozen = True


class GenerationContext(BaseModel):
    """Where a plan came from."""

    correlationId: Optional[str] = None
    sessionId: str = "unknown"
    generationTimeMs: float = 0.0
    approach: Optional[str] = None
    model: Optional[str] = None

    class Config:
        frozen = True


class WorkoutPlan(BaseModel):
    """Generated workout plan."""

    id: str
    name: str
    duration: int = Field(..., description="Minutes")
    difficulty: str
    exercises: list[Exercise]
    warmUp: WorkoutBlock = Field(default_factory=WorkoutBlock)
    coolDown: WorkoutBlock = Field(default_factory=WorkoutBlock)
    coachingNotes: str = ""
    estimatedCalories: Optional[int] = None
    workoutType: str = "mixed"
    focusAreas: list[str] = Field(default=["general"])
    createdAt: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    generationContext: GenerationContext = Field(default_factory=GenerationContext)

    class Config:
        frozen = True

    def replace_exercise(self, index: int, exercise: Exercise) -> "WorkoutPlan":
        """Return a copy of the plan with one exercise swapped out."""
        exercises = list(self.exercises)
        exercises[index] = exercise
        return self.model_copy(update={"exercises": exercises})


class GenerationData(BaseModel):
    workout: Optional[dict[str, Any]] = None
    metadata: dict[str, Any] = Field(default={})


class GenerationResponse(BaseModel):
    """Envelope returned by the workout generation endpoint."""

    status: str
    data: Optional[GenerationData] = None
    correlationId: Optional[str] = None
    message: Optional[str] = None
