"""Tests for exercise preferences."""

from __future__ import annotations

from lingua.domain.learning.models.preferences import ExercisePreferences
from lingua.domain.shared.models import ExerciseCategory, ExerciseType


class TestExercisePreferences:
    """Test ExercisePreferences."""

    def test_defaults_enable_implemented_types(self):
        prefs = ExercisePreferences.defaults()

        assert prefs.enabled_types == frozenset(ExerciseType.implemented())
        assert not prefs.is_enabled(ExerciseType.LISTENING_RECOGNITION)
        assert prefs.prioritize_weaknesses is False
        assert prefs.weakness_threshold == 0.7

    def test_toggle_type(self):
        prefs = ExercisePreferences.defaults()

        toggled = prefs.toggle_type(ExerciseType.WRITING_TRANSLATION)

        assert not toggled.is_enabled(ExerciseType.WRITING_TRANSLATION)
        assert prefs.is_enabled(ExerciseType.WRITING_TRANSLATION)
        assert toggled.toggle_type(ExerciseType.WRITING_TRANSLATION) == prefs

    def test_toggle_category(self):
        prefs = ExercisePreferences.defaults().disable_all()

        enabled = prefs.toggle_category(ExerciseCategory.RECOGNITION)

        assert enabled.is_category_fully_enabled(ExerciseCategory.RECOGNITION)
        assert not enabled.is_category_partially_enabled(ExerciseCategory.RECOGNITION)
        assert not enabled.is_enabled(ExerciseType.WRITING_TRANSLATION)

        disabled = enabled.toggle_category(ExerciseCategory.RECOGNITION)
        assert not disabled.has_any_enabled

    def test_partial_category(self):
        prefs = ExercisePreferences.defaults().toggle_type(
            ExerciseType.READING_RECOGNITION
        )

        assert prefs.is_category_partially_enabled(ExerciseCategory.RECOGNITION)
        assert prefs.is_category_fully_enabled(ExerciseCategory.PRODUCTION)

    def test_enable_disable_all(self):
        prefs = ExercisePreferences.defaults().disable_all()
        assert prefs.enabled_count == 0
        assert prefs.enable_all().enabled_count == len(ExerciseType.implemented())

    def test_json_round_trip(self):
        prefs = ExercisePreferences(
            enabled_types=frozenset(
                {ExerciseType.READING_RECOGNITION, ExerciseType.ARTICLE_SELECTION}
            ),
            prioritize_weaknesses=True,
            weakness_threshold=0.5,
        )

        assert ExercisePreferences.from_json(prefs.to_json()) == prefs

    def test_from_json_drops_unknown_and_unimplemented(self):
        prefs = ExercisePreferences.from_json(
            {
                "enabled_types": [
                    "reading_recognition",
                    "telepathy",
                    "listening_recognition",
                ]
            }
        )

        assert prefs.enabled_types == frozenset({ExerciseType.READING_RECOGNITION})
