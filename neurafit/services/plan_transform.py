"""
Converts backend workout payloads into WorkoutPlan models.
"""
import re
import time
import uuid
from typing import Any

from neurafit.models.profile import WORKOUT_TYPES
from neurafit.models.workout import Exercise, GenerationContext, WorkoutBlock, WorkoutPlan

DEFAULT_COACHING_NOTES = "Focus on proper form and listen to your body"


def new_workout_id() -> str:
    return f"workout-{int(time.time() * 1000)}-{uuid.uuid4().hex[:13]}"


def parse_rest_seconds(rest: Any, default: int = 60) -> int:
    """Read "60s", "90 seconds" or 45 as a number of seconds."""
    if isinstance(rest, (int, float)):
        return max(0, int(rest))
    digits = re.sub(r"\D", "", str(rest or ""))
    return int(digits) if digits else default


def extract_exercises(workout: dict[str, Any]) -> list[dict[str, Any]]:
    """Main exercise list, in either the flat or the mainWorkout layout."""
    exercises = workout.get("exercises")
    if exercises is None:
        exercises = (workout.get("mainWorkout") or {}).get("exercises")
    return exercises if isinstance(exercises, list) else []


def _to_exercise(raw: dict[str, Any]) -> Exercise:
    modifications = raw.get("modifications") or ""
    if isinstance(modifications, list):
        modifications = " ".join(str(m) for m in modifications)
    return Exercise(
        name=raw.get("name") or "Exercise",
        sets=raw.get("sets") or 3,
        reps=raw.get("reps") or "8-12",
        duration=0,
        restTime=parse_rest_seconds(raw.get("rest")),
        instructions=raw.get("instructions") or "",
        tips=modifications,
        targetMuscles=raw.get("targetMuscles") or [],
        equipment=["bodyweight"],
        category="compound",
        modifications=[modifications] if modifications else [],
    )


def _plan_name(api_type: str | None, requested_type: str) -> str:
    if api_type:
        return f"{api_type[:1].upper()}{api_type[1:].replace('_', ' ')} Workout"
    label = WORKOUT_TYPES.get(requested_type, ("Mixed",))[0]
    return f"AI Generated {label} Workout"


def _coaching_notes(workout: dict[str, Any]) -> str:
    notes: list[str] = []
    tips = workout.get("coachingTips")
    if isinstance(tips, list):
        notes.extend(str(t) for t in tips)
    for key in ("progressionNotes", "safetyNotes"):
        if workout.get(key):
            notes.append(str(workout[key]))
    return " ".join(notes) if notes else DEFAULT_COACHING_NOTES


def _block(items: Any, fallback_name: str) -> WorkoutBlock:
    names = [(item or {}).get("name") or fallback_name for item in (items or [])]
    return WorkoutBlock(duration=5, exercises=names)


def transform_api_workout(
    workout: dict[str, Any],
    *,
    workout_type: str,
    fallback_duration: int,
    fallback_difficulty: str,
    context: GenerationContext,
) -> WorkoutPlan:
    """
    Build a WorkoutPlan from the backend's workout object.

    Args:
        workout: The "workout" object of a successful generation response
        workout_type: Workout type value the user asked for
        fallback_duration: Minutes to use when the backend omits a duration
        fallback_difficulty: Difficulty to use when the backend omits one
        context: Correlation and timing information for the generation

    Returns:
        New WorkoutPlan with a unique id
    """
    calories = workout.get("calorieEstimate")
    return WorkoutPlan(
        id=new_workout_id(),
        name=_plan_name(workout.get("type"), workout_type),
        duration=workout.get("duration") or fallback_duration,
        difficulty=workout.get("difficulty") or fallback_difficulty,
        exercises=[_to_exercise(raw) for raw in extract_exercises(workout)],
        warmUp=_block(workout.get("warmup"), "Dynamic warm-up"),
        coolDown=_block(workout.get("cooldown"), "Cool-down stretch"),
        coachingNotes=_coaching_notes(workout),
        estimatedCalories=int(calories) if isinstance(calories, (int, float)) else None,
        workoutType=workout_type or workout.get("type") or "mixed",
        generationContext=context,
    )
