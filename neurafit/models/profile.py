"""
Pydantic models and catalogues for the user's fitness profile.
"""
from typing import Literal, Optional
from pydantic import BaseModel, Field


# Goal codes collected by onboarding, mapped to the labels the backend understands
FITNESS_GOALS: dict[str, str] = {
    "LW": "Lose Weight",
    "BM": "Build Muscle",
    "IC": "Improve Cardio",
    "IF": "Increase Flexibility",
    "GF": "General Fitness",
    "AP": "Athletic Performance",
}

# Legacy equipment codes still present in older profiles
EQUIPMENT_OPTIONS: dict[str, str] = {
    "BW": "Body Weight",
    "DB": "Dumbbells",
    "BB": "Barbell",
    "KB": "Kettlebells",
    "RB": "Resistance Bands",
    "TM": "Treadmill",
    "BK": "Exercise Bike",
    "YM": "Yoga Mat",
}

VALID_FITNESS_LEVELS = ("beginner", "intermediate", "advanced")

VALID_GENDERS = ("male", "female", "rather_not_say")

VALID_WORKOUT_TYPES = (
    "mixed", "strength", "hiit", "cardio", "flexibility",
    "push", "pull", "lower_body", "core",
    "upper_body", "full_body", "yoga", "pilates", "functional",
    "push_day", "pull_day", "leg_day", "upper", "lower", "legs",
    "chest", "back", "shoulders", "arms", "abs",
)

# Selectable workout types: value -> (label, description)
WORKOUT_TYPES: dict[str, tuple[str, str]] = {
    "mixed": ("Mixed Training", "Combination of strength, cardio, and flexibility"),
    "strength": ("Strength Training", "Focus on building muscle and power"),
    "cardio": ("Cardio", "Heart-pumping cardiovascular exercises"),
    "hiit": ("HIIT", "High-intensity interval training"),
    "flexibility": ("Flexibility", "Stretching and mobility work"),
    "upper_body": ("Upper Body", "Chest, back, shoulders, and arms"),
    "lower_body": ("Lower Body", "Legs, glutes, and core"),
    "push": ("Push Day", "Chest, shoulders, and triceps"),
    "pull": ("Pull Day", "Back and biceps"),
    "core": ("Core Focus", "Abdominals and core stability"),
    "yoga": ("Yoga", "Mind-body practice with poses and breathing"),
    "full_body": ("Full Body", "Complete body workout targeting all muscle groups"),
}


class FitnessProfile(BaseModel):
    """
    User profile as captured by onboarding.

    Every field is optional so incomplete profiles can be represented;
    completeness is checked by validate_fitness_profile.
    """

    fitnessLevel: Optional[str] = Field(None, examples=["beginner", "intermediate", "advanced"])
    goals: list[str] = Field(default=[], description="Goal codes or labels")
    equipment: list[str] = Field(default=[], description="Equipment labels or legacy codes")
    availableTime: Optional[int] = Field(None, description="Minutes per session")
    age: Optional[int] = Field(None, ge=10, le=120)
    weight: Optional[float] = Field(None, gt=0)
    gender: Optional[str] = None
    injuries: list[str] = Field(default=[])
    daysPerWeek: Optional[int] = Field(None, ge=1, le=7)

    class Config:
        json_schema_extra = {
            "example": {
                "fitnessLevel": "intermediate",
                "goals": ["BM", "IC"],
                "equipment": ["Dumbbells", "Resistance Bands"],
                "availableTime": 45,
                "age": 28,
                "weight": 140,
                "gender": "female",
                "injuries": [],
                "daysPerWeek": 3,
            }
        }


class WorkoutModifications(BaseModel):
    """Parameters for regenerating the current plan."""

    workoutType: Optional[str] = None
    duration: Optional[int] = Field(None, gt=0, description="Minutes")
    difficulty: Optional[Literal["beginner", "intermediate", "advanced"]] = None
    focusAreas: list[str] = Field(default=[])
    intensity: Optional[Literal["low", "moderate", "high"]] = None
