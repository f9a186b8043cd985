"""
Tests for generation request building.
"""
from neurafit.models.profile import FitnessProfile, WorkoutModifications
from neurafit.services.request_builder import (
    build_generation_request,
    build_modification_request,
    describe_workout_type,
    equipment_labels,
    goal_labels,
    merge_modifications,
)


class TestLabels:
    """Tests for code-to-label conversion."""

    def test_goal_codes_become_labels(self):
        """Test that goal codes are expanded and unknown goals pass through."""
        assert goal_labels(["BM", "IC", "Run a marathon"]) == [
            "Build Muscle",
            "Improve Cardio",
            "Run a marathon",
        ]

    def test_legacy_equipment_codes(self):
        """Test that legacy equipment codes are expanded."""
        assert equipment_labels(["DB", "Pull-up Bar"]) == ["Dumbbells", "Pull-up Bar"]

    def test_known_workout_type_is_described(self):
        assert describe_workout_type("hiit") == "HIIT - High-intensity interval training"

    def test_unknown_workout_type_passes_through(self):
        assert describe_workout_type("leg_day") == "leg_day"


class TestBuildGenerationRequest:
    """Tests for fresh generation payloads."""

    def test_full_profile(self, sample_profile):
        """Test payload fields derived from a complete profile."""
        request = build_generation_request(sample_profile, "strength", "Focus on form")

        assert request.age == 28
        assert request.fitnessLevel == "intermediate"
        assert request.goals == ["Build Muscle", "Improve Cardio"]
        assert request.equipment == ["Dumbbells", "Resistance Bands"]
        assert request.timeAvailable == 45
        assert request.daysPerWeek == 4
        assert request.workoutType == "Strength Training - Focus on building muscle and power"
        assert request.additionalInformation == (
            "Goals: Build Muscle, Improve Cardio. "
            "Available 4 days per week. "
            "Special instructions: Focus on form"
        )

    def test_defaults_for_missing_fields(self):
        """Test that age, weight and days per week fall back to defaults."""
        profile = FitnessProfile(
            fitnessLevel="beginner",
            goals=["GF"],
            equipment=["Body Weight"],
            availableTime=20,
        )

        request = build_generation_request(profile, "mixed")

        assert request.age == 30
        assert request.weight == 150
        assert request.daysPerWeek == 3
        assert "Special instructions" not in request.additionalInformation

    def test_instructions_are_sanitized(self, sample_profile):
        """Test that angle brackets are stripped from free text."""
        request = build_generation_request(sample_profile, "mixed", "<b>no jumping</b>")

        assert "Special instructions: bno jumping/b" in request.additionalInformation

    def test_payload_omits_empty_optionals(self):
        profile = FitnessProfile(
            fitnessLevel="beginner",
            goals=["GF"],
            equipment=["Body Weight"],
            availableTime=20,
        )

        payload = build_generation_request(profile, "mixed").payload()

        assert "gender" not in payload
        assert payload["injuries"] == []


class TestBuildModificationRequest:
    """Tests for modification payloads."""

    def test_modification_overrides(self, sample_profile):
        """Test that modifications override the profile and describe the change."""
        modifications = WorkoutModifications(
            workoutType="cardio",
            duration=30,
            difficulty="advanced",
            focusAreas=["legs", "core"],
            intensity="high",
        )

        request = build_modification_request(sample_profile, modifications, "strength")

        assert request.fitnessLevel == "advanced"
        assert request.timeAvailable == 30
        assert request.workoutType == "Cardio - Heart-pumping cardiovascular exercises"
        assert request.additionalInformation == (
            "Workout modification requested. "
            "Focus areas: legs, core. "
            "Intensity: high. "
            "User goals: Build Muscle, Improve Cardio"
        )

    def test_keeps_current_type(self, sample_profile):
        request = build_modification_request(sample_profile, WorkoutModifications(), "push")

        assert request.workoutType == "Push Day - Chest, shoulders, and triceps"
        assert request.timeAvailable == 45
        assert request.fitnessLevel == "intermediate"

    def test_merge_applies_difficulty_and_duration(self):
        """Test that modifications fill gaps left by an incomplete profile."""
        merged = merge_modifications(
            FitnessProfile(goals=["GF"]),
            WorkoutModifications(difficulty="beginner", duration=25),
        )

        assert merged.fitnessLevel == "beginner"
        assert merged.availableTime == 25
        assert merged.goals == ["GF"]
