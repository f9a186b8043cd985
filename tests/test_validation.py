"""
Tests for profile, workout type and plan validation.
"""
import pytest

from neurafit.models.profile import FitnessProfile
from neurafit.models.workout import Exercise, WorkoutPlan
from neurafit.services.validation import (
    sanitize_user_input,
    validate_exercise,
    validate_fitness_profile,
    validate_workout_plan,
    validate_workout_type_selection,
)


class TestSanitizeUserInput:
    """Tests for free-text sanitizing."""

    def test_strips_angle_brackets(self):
        assert sanitize_user_input("  <script>hi</script> ") == "scripthi/script"

    def test_caps_length(self):
        assert len(sanitize_user_input("x" * 1500)) == 1000


class TestValidateFitnessProfile:
    """Tests for validate_fitness_profile."""

    def test_valid_profile(self, sample_profile):
        result = validate_fitness_profile(sample_profile)

        assert result.isValid
        assert result.errors == []

    def test_missing_fitness_level(self, sample_profile):
        """Test that a missing fitness level is a blocking error."""
        profile = sample_profile.model_copy(update={"fitnessLevel": None})

        result = validate_fitness_profile(profile)

        assert not result.isValid
        assert "Fitness level is required" in result.errors

    def test_unknown_fitness_level(self, sample_profile):
        profile = sample_profile.model_copy(update={"fitnessLevel": "elite"})

        assert "Invalid fitness level: elite" in validate_fitness_profile(profile).errors

    def test_missing_goals_and_equipment(self):
        result = validate_fitness_profile(FitnessProfile(fitnessLevel="beginner", availableTime=30))

        assert "At least one fitness goal is required" in result.errors
        assert "At least one equipment option is required" in result.errors

    def test_invalid_goal_codes(self, sample_profile):
        profile = sample_profile.model_copy(update={"goals": ["BM", "XX"]})

        assert "Invalid goal codes: XX" in validate_fitness_profile(profile).errors

    @pytest.mark.parametrize("minutes,expected", [
        (5, "Very short workout time may limit exercise options"),
        (150, "Very long workout time - consider breaking into multiple sessions"),
    ])
    def test_time_warnings(self, sample_profile, minutes, expected):
        """Test that unusual durations warn without failing."""
        profile = sample_profile.model_copy(update={"availableTime": minutes})

        result = validate_fitness_profile(profile)

        assert result.isValid
        assert expected in result.warnings

    def test_zero_time_is_error(self, sample_profile):
        profile = sample_profile.model_copy(update={"availableTime": 0})

        assert "Available time must be greater than 0" in validate_fitness_profile(profile).errors

    def test_advanced_with_injuries_warns(self, sample_profile):
        profile = sample_profile.model_copy(update={"fitnessLevel": "advanced", "injuries": ["knee"]})

        result = validate_fitness_profile(profile)

        assert result.isValid
        assert "Advanced fitness level with injuries - ensure proper modifications" in result.warnings


class TestWorkoutTypeSelection:
    """Tests for workout type allow-listing."""

    def test_valid_type_is_normalised(self):
        assert validate_workout_type_selection("  HIIT ") == "hiit"

    def test_invalid_type_rejected(self):
        assert validate_workout_type_selection("invalid_type") is None


class TestValidateWorkoutPlan:
    """Tests for generated plan checks."""

    def _plan(self, **overrides):
        fields = {
            "id": "workout-1",
            "name": "Strength Workout",
            "duration": 45,
            "difficulty": "intermediate",
            "exercises": [Exercise(name="Squat", instructions="Sit back", targetMuscles=["legs"])],
            "workoutType": "strength",
        }
        fields.update(overrides)
        return WorkoutPlan(**fields)

    def test_valid_plan(self):
        result = validate_workout_plan(self._plan())

        assert result.isValid
        assert result.warnings == []

    def test_missing_details_only_warn(self):
        """Test that missing instructions and muscles are warnings."""
        result = validate_workout_plan(self._plan(exercises=[Exercise(name="Squat")]))

        assert result.isValid
        assert "Exercise 1: Exercise instructions are missing" in result.warnings
        assert "Exercise 1: Target muscles should be specified for better tracking" in result.warnings

    def test_bad_difficulty_and_type(self):
        result = validate_workout_plan(self._plan(difficulty="insane", workoutType="zumba"))

        assert not result.isValid
        assert "Valid difficulty level is required" in result.errors
        assert "Invalid workout type: zumba" in result.errors

    def test_exercise_reps_must_be_positive(self):
        result = validate_exercise(Exercise(name="Plank", reps=0))

        assert "Reps must be greater than 0" in result.errors
