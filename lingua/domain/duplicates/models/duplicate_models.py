"""Duplicate-match results and detection configuration."""

from __future__ import annotations

from dataclasses import dataclass, fields
from enum import Enum

from lingua.domain.learning.models.card_models import Card
from lingua.domain.shared.services import ValidationError


class DuplicateMatchStrategy(str, Enum):
    """Rule that produced a duplicate match, highest priority first."""

    EXACT_MATCH = "exact_match"
    CASE_INSENSITIVE = "case_insensitive"
    NORMALIZED_WHITESPACE = "normalized_whitespace"
    SAME_FRONT_DIFFERENT_BACK = "same_front_different_back"
    SAME_BACK_DIFFERENT_FRONT = "same_back_different_front"
    FUZZY_MATCH = "fuzzy_match"

    @property
    def display_name(self) -> str:
        return self.value.replace("_", " ").capitalize()


@dataclass(frozen=True)
class DuplicateMatch:
    """A candidate duplicate of some source card."""

    duplicate_card: Card
    similarity_score: float
    strategy: DuplicateMatchStrategy
    reason: str

    def __post_init__(self) -> None:
        if not 0.0 <= self.similarity_score <= 1.0:
            raise ValueError("similarity_score must be between 0.0 and 1.0")

    @property
    def similarity_percent(self) -> int:
        return round(self.similarity_score * 100)

    def __str__(self) -> str:
        return (
            f"DuplicateMatch({self.duplicate_card.id}, "
            f"{self.strategy.value}, {self.similarity_score:.2f})"
        )


@dataclass(frozen=True)
class DuplicateDetectionConfig:
    """Which strategies run and how strict fuzzy matching is."""

    fuzzy_threshold: float = 0.85
    check_exact_match: bool = True
    check_case_insensitive: bool = True
    check_normalized_whitespace: bool = True
    check_fuzzy_match: bool = True
    check_same_front_different_back: bool = True
    check_same_back_different_front: bool = False
    same_language_only: bool = True

    def __post_init__(self) -> None:
        if not 0.0 <= self.fuzzy_threshold <= 1.0:
            raise ValidationError(
                "fuzzy_threshold must be between 0.0 and 1.0", "fuzzy_threshold"
            )

    @classmethod
    def standard(cls) -> DuplicateDetectionConfig:
        return cls()

    @classmethod
    def strict(cls) -> DuplicateDetectionConfig:
        """Lower fuzzy threshold and synonym detection."""
        return cls(fuzzy_threshold=0.75, check_same_back_different_front=True)

    @classmethod
    def loose(cls) -> DuplicateDetectionConfig:
        """Only exact, case and whitespace checks."""
        return cls(
            check_fuzzy_match=False,
            check_same_front_different_back=False,
            check_same_back_different_front=False,
        )

    @classmethod
    def from_preset(cls, name: str) -> DuplicateDetectionConfig:
        presets = {"standard": cls.standard, "strict": cls.strict, "loose": cls.loose}
        factory = presets.get(name.strip().lower())
        if factory is None:
            raise ValidationError(
                f"Unknown duplicate detection preset: {name!r}. "
                f"Expected one of {', '.join(presets)}",
                "preset",
            )
        return factory()

    def to_dict(self) -> dict[str, float | bool]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


PRESET_NAMES = ("standard", "strict", "loose")
