"""
Client-side validation of profiles, workout types and generated plans.
"""
from dataclasses import dataclass, field

from neurafit.models.profile import (
    EQUIPMENT_OPTIONS,
    FITNESS_GOALS,
    VALID_FITNESS_LEVELS,
    VALID_GENDERS,
    VALID_WORKOUT_TYPES,
    FitnessProfile,
)
from neurafit.models.workout import Exercise, WorkoutPlan


@dataclass
class ValidationResult:
    isValid: bool
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


def sanitize_user_input(text: str) -> str:
    """Trim, strip angle brackets and cap free text at 1000 characters."""
    return text.strip().replace("<", "").replace(">", "")[:1000]


def is_valid_workout_type(value: str) -> bool:
    return value in VALID_WORKOUT_TYPES


def validate_workout_type_selection(value: str) -> str | None:
    """Normalise a user-selected workout type, or None when unsupported."""
    sanitized = sanitize_user_input(value).lower()
    return sanitized if is_valid_workout_type(sanitized) else None


def _is_valid_goal(goal: str) -> bool:
    return goal in FITNESS_GOALS or goal in FITNESS_GOALS.values()


def _is_valid_equipment(item: str) -> bool:
    return item in EQUIPMENT_OPTIONS or item in EQUIPMENT_OPTIONS.values()


def validate_fitness_profile(profile: FitnessProfile) -> ValidationResult:
    """
    Check that a profile carries everything generation needs.

    Args:
        profile: Profile captured by onboarding

    Returns:
        ValidationResult with blocking errors and advisory warnings
    """
    errors: list[str] = []
    warnings: list[str] = []

    if not profile.fitnessLevel:
        errors.append("Fitness level is required")
    elif profile.fitnessLevel not in VALID_FITNESS_LEVELS:
        errors.append(f"Invalid fitness level: {profile.fitnessLevel}")

    if not profile.goals:
        errors.append("At least one fitness goal is required")
    else:
        invalid_goals = [g for g in profile.goals if not _is_valid_goal(g)]
        if invalid_goals:
            errors.append(f"Invalid goal codes: {', '.join(invalid_goals)}")

    if not profile.equipment:
        errors.append("At least one equipment option is required")
    else:
        invalid_equipment = [e for e in profile.equipment if not _is_valid_equipment(e)]
        if invalid_equipment:
            errors.append(f"Invalid equipment: {', '.join(invalid_equipment)}")

    if not profile.availableTime or profile.availableTime <= 0:
        errors.append("Available time must be greater than 0")
    elif profile.availableTime < 10:
        warnings.append("Very short workout time may limit exercise options")
    elif profile.availableTime > 120:
        warnings.append("Very long workout time - consider breaking into multiple sessions")

    if profile.gender and profile.gender not in VALID_GENDERS:
        errors.append(f"Invalid gender: {profile.gender}")

    if profile.injuries and profile.fitnessLevel == "advanced":
        warnings.append("Advanced fitness level with injuries - ensure proper modifications")

    return ValidationResult(isValid=not errors, errors=errors, warnings=warnings)


def validate_exercise(exercise: Exercise) -> ValidationResult:
    errors: list[str] = []
    warnings: list[str] = []

    if not exercise.name.strip():
        errors.append("Exercise name is required")

    if exercise.sets > 10:
        warnings.append("Very high number of sets - ensure adequate recovery")

    if isinstance(exercise.reps, int):
        if exercise.reps <= 0:
            errors.append("Reps must be greater than 0")
        elif exercise.reps > 50:
            warnings.append("Very high number of reps - consider reducing for strength focus")

    if exercise.restTime > 300:
        warnings.append("Very long rest time - may extend workout duration significantly")

    if not exercise.instructions.strip():
        warnings.append("Exercise instructions are missing")

    if not exercise.targetMuscles:
        warnings.append("Target muscles should be specified for better tracking")

    return ValidationResult(isValid=not errors, errors=errors, warnings=warnings)


def validate_workout_plan(plan: WorkoutPlan) -> ValidationResult:
    """Sanity-check a generated plan. Problems are reported, never fatal."""
    errors: list[str] = []
    warnings: list[str] = []

    if not plan.name.strip():
        errors.append("Workout name is required")

    if plan.duration <= 0:
        errors.append("Workout duration must be greater than 0")

    if plan.difficulty not in VALID_FITNESS_LEVELS:
        errors.append("Valid difficulty level is required")

    if not plan.exercises:
        errors.append("At least one exercise is required")

    for index, exercise in enumerate(plan.exercises, start=1):
        result = validate_exercise(exercise)
        errors.extend(f"Exercise {index}: {e}" for e in result.errors)
        warnings.extend(f"Exercise {index}: {w}" for w in result.warnings)

    if not is_valid_workout_type(plan.workoutType):
        errors.append(f"Invalid workout type: {plan.workoutType}")

    # 20% buffer over the planned duration
    total_seconds = sum(ex.sets * ex.duration + ex.sets * ex.restTime for ex in plan.exercises)
    if plan.duration > 0 and total_seconds > plan.duration * 60 * 1.2:
        warnings.append("Total exercise time may exceed planned workout duration")

    return ValidationResult(isValid=not errors, errors=errors, warnings=warnings)
