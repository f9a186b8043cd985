"""
Builds workout generation payloads from a profile and modification parameters.
"""
from neurafit.core.config import settings
from neurafit.models.profile import (
    EQUIPMENT_OPTIONS,
    FITNESS_GOALS,
    WORKOUT_TYPES,
    FitnessProfile,
    WorkoutModifications,
)
from neurafit.models.workout import GenerationRequest
from neurafit.services.validation import sanitize_user_input


def goal_labels(codes: list[str]) -> list[str]:
    """Convert goal codes to human-readable names; unknown entries pass through."""
    return [FITNESS_GOALS.get(code, code) for code in codes if code]


def equipment_labels(codes: list[str]) -> list[str]:
    return [EQUIPMENT_OPTIONS.get(code, code) for code in codes if code]


def describe_workout_type(workout_type: str) -> str:
    """
    Render a workout type for the backend's natural-language prompt.

    Known types become "<Label> - <Description>"; anything else is sent as-is.
    """
    known = WORKOUT_TYPES.get(workout_type)
    if known is None:
        return workout_type
    label, description = known
    return f"{label} - {description}"


def _join_info(parts: list[str]) -> str | None:
    info = ". ".join(part for part in parts if part)
    return info or None


def build_generation_request(
    profile: FitnessProfile,
    workout_type: str,
    additional_instructions: str = "",
) -> GenerationRequest:
    """
    Build the payload for a fresh workout.

    Args:
        profile: Validated fitness profile
        workout_type: Allow-listed workout type value
        additional_instructions: Free text typed by the user

    Returns:
        Immutable GenerationRequest
    """
    goals = goal_labels(profile.goals)
    days_per_week = profile.daysPerWeek or settings.DEFAULT_DAYS_PER_WEEK
    instructions = sanitize_user_input(additional_instructions)

    info = _join_info([
        f"Goals: {', '.join(goals)}" if goals else "",
        f"Available {days_per_week} days per week",
        f"Special instructions: {instructions}" if instructions else "",
    ])

    return GenerationRequest(
        age=profile.age or settings.DEFAULT_AGE,
        fitnessLevel=profile.fitnessLevel,
        gender=profile.gender,
        weight=profile.weight or settings.DEFAULT_WEIGHT,
        goals=goals,
        equipment=equipment_labels(profile.equipment),
        injuries=list(profile.injuries),
        timeAvailable=profile.availableTime,
        daysPerWeek=days_per_week,
        workoutType=describe_workout_type(workout_type),
        additionalInformation=info,
    )


def merge_modifications(profile: FitnessProfile, modifications: WorkoutModifications) -> FitnessProfile:
    """Profile with the modification's difficulty and duration applied on top."""
    return profile.model_copy(update={
        "fitnessLevel": modifications.difficulty or profile.fitnessLevel,
        "availableTime": modifications.duration or profile.availableTime,
    })


def build_modification_request(
    profile: FitnessProfile,
    modifications: WorkoutModifications,
    current_type: str,
) -> GenerationRequest:
    """Build the payload for regenerating a plan with modified parameters."""
    profile = merge_modifications(profile, modifications)
    goals = goal_labels(profile.goals)
    workout_type = modifications.workoutType or current_type

    info = _join_info([
        "Workout modification requested",
        f"Focus areas: {', '.join(modifications.focusAreas)}" if modifications.focusAreas else "",
        f"Intensity: {modifications.intensity}" if modifications.intensity else "",
        f"User goals: {', '.join(goals)}" if goals else "",
    ])

    return GenerationRequest(
        age=profile.age or settings.DEFAULT_AGE,
        fitnessLevel=profile.fitnessLevel,
        gender=profile.gender,
        weight=profile.weight or settings.DEFAULT_WEIGHT,
        goals=goals,
        equipment=equipment_labels(profile.equipment),
        injuries=list(profile.injuries),
        timeAvailable=profile.availableTime,
        daysPerWeek=profile.daysPerWeek or settings.DEFAULT_DAYS_PER_WEEK,
        workoutType=describe_workout_type(workout_type),
        additionalInformation=info,
    )
