"""Learner preferences for which exercise types a session offers."""

from __future__ import annotations

import logging
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from lingua.domain.shared.models import ExerciseCategory, ExerciseType

logger = logging.getLogger(__name__)


class ExercisePreferences(BaseModel):
    """Enabled exercise types plus weakness-first ordering options.

    Immutable: every toggle returns a new instance.
    """

    model_config = ConfigDict(frozen=True)

    enabled_types: frozenset[ExerciseType] = Field(
        default_factory=lambda: frozenset(ExerciseType.implemented())
    )
    prioritize_weaknesses: bool = False
    weakness_threshold: float = Field(default=0.7, ge=0.0, le=1.0)

    @classmethod
    def defaults(cls) -> ExercisePreferences:
        """Every implemented exercise type enabled."""
        return cls()

    def is_enabled(self, exercise_type: ExerciseType) -> bool:
        return exercise_type in self.enabled_types

    def toggle_type(self, exercise_type: ExerciseType) -> ExercisePreferences:
        if exercise_type in self.enabled_types:
            enabled = self.enabled_types - {exercise_type}
        else:
            enabled = self.enabled_types | {exercise_type}
        return self.model_copy(update={"enabled_types": frozenset(enabled)})

    def toggle_category(self, category: ExerciseCategory) -> ExercisePreferences:
        """Enable the whole category, or disable it when already fully enabled."""
        category_types = set(category.exercise_types)
        if self.is_category_fully_enabled(category):
            enabled = self.enabled_types - category_types
        else:
            enabled = self.enabled_types | category_types
        return self.model_copy(update={"enabled_types": frozenset(enabled)})

    def enable_all(self) -> ExercisePreferences:
        return self.model_copy(
            update={"enabled_types": frozenset(ExerciseType.implemented())}
        )

    def disable_all(self) -> ExercisePreferences:
        return self.model_copy(update={"enabled_types": frozenset()})

    def is_category_fully_enabled(self, category: ExerciseCategory) -> bool:
        return all(t in self.enabled_types for t in category.exercise_types)

    def is_category_partially_enabled(self, category: ExerciseCategory) -> bool:
        enabled = [t in self.enabled_types for t in category.exercise_types]
        return any(enabled) and not all(enabled)

    @property
    def has_any_enabled(self) -> bool:
        return bool(self.enabled_types)

    @property
    def enabled_count(self) -> int:
        return len(self.enabled_types)

    def to_json(self) -> dict[str, Any]:
        return {
            "enabled_types": sorted(t.value for t in self.enabled_types),
            "prioritize_weaknesses": self.prioritize_weaknesses,
            "weakness_threshold": self.weakness_threshold,
        }

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> ExercisePreferences:
        """Parse stored preferences, dropping unknown or unimplemented types."""
        enabled: set[ExerciseType] = set()
        for name in data.get("enabled_types", []):
            try:
                exercise_type = ExerciseType(name)
            except ValueError:
                logger.debug(f"Ignoring unknown exercise type {name!r}")
                continue
            if exercise_type.is_implemented:
                enabled.add(exercise_type)

        return cls(
            enabled_types=frozenset(enabled),
            prioritize_weaknesses=data.get("prioritize_weaknesses", False),
            weakness_threshold=data.get("weakness_threshold", 0.7),
        )
