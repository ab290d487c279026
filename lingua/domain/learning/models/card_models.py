"""Flashcard, per-exercise score and word-data models."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING, Annotated, Literal
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator

from lingua.domain.shared.models import ExerciseType, MasteryLevel

if TYPE_CHECKING:
    from lingua.domain.learning.services.schedule_exercise import ExerciseScheduler

MASTERY_STREAK = 5


def _as_utc(value: datetime | None) -> datetime | None:
    """Treat naive timestamps as UTC so due checks never compare naive/aware."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def _is_due(next_review: datetime | None, now: datetime) -> bool:
    return next_review is None or next_review <= now


def _rate_mastery(rate: float) -> MasteryLevel:
    if rate >= 0.9:
        return MasteryLevel.MASTERED
    if rate >= 0.7:
        return MasteryLevel.GOOD
    if rate >= 0.5:
        return MasteryLevel.LEARNING
    return MasteryLevel.DIFFICULT


# ============================================================================
# Word data (tagged union keyed by ``word_type``)
# ============================================================================


class VerbData(BaseModel):
    """Conjugation-relevant data for verbs."""

    model_config = ConfigDict(frozen=True)

    word_type: Literal["verb"] = "verb"
    is_regular: bool = True
    is_separable: bool = False
    separable_prefix: str | None = None  # "auf" for aufmachen
    auxiliary: str = "haben"  # Perfekt auxiliary: haben or sein
    present_second_person: str | None = None  # du sprichst
    present_third_person: str | None = None  # er spricht
    past_simple: str | None = None  # sprach
    past_participle: str | None = None  # gesprochen


class NounData(BaseModel):
    """Gender and declension data for nouns."""

    model_config = ConfigDict(frozen=True)

    word_type: Literal["noun"] = "noun"
    gender: str  # der, die or das
    plural: str | None = None
    genitive: str | None = None


class AdjectiveData(BaseModel):
    """Comparison forms for adjectives."""

    model_config = ConfigDict(frozen=True)

    word_type: Literal["adjective"] = "adjective"
    comparative: str | None = None
    superlative: str | None = None


class AdverbData(BaseModel):
    """Usage notes for adverbs."""

    model_config = ConfigDict(frozen=True)

    word_type: Literal["adverb"] = "adverb"
    usage_note: str | None = None


WordData = Annotated[
    VerbData | NounData | AdjectiveData | AdverbData,
    Field(discriminator="word_type"),
]


class IconRef(BaseModel):
    """Reference to an icon picked for a card."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str = ""
    url: str | None = None


# ============================================================================
# Exercise score
# ============================================================================


class ExerciseScore(BaseModel):
    """Mastery record for one (card, exercise type) pair."""

    model_config = ConfigDict(frozen=True)

    type: ExerciseType
    correct_count: int = Field(default=0, ge=0)
    incorrect_count: int = Field(default=0, ge=0)
    current_streak: int = Field(default=0, ge=0)
    best_streak: int = Field(default=0, ge=0)
    last_practiced: datetime | None = None
    next_review: datetime | None = None

    @field_validator("last_practiced", "next_review")
    @classmethod
    def ensure_utc(cls, v: datetime | None) -> datetime | None:
        return _as_utc(v)

    @classmethod
    def initial(cls, exercise_type: ExerciseType) -> ExerciseScore:
        """A score with no attempts."""
        return cls(type=exercise_type)

    @property
    def total_attempts(self) -> int:
        return self.correct_count + self.incorrect_count

    @property
    def success_rate(self) -> float:
        """Share of correct attempts in [0, 1]; 0 when never attempted."""
        if self.total_attempts == 0:
            return 0.0
        return self.correct_count / self.total_attempts

    @property
    def mastery_level(self) -> MasteryLevel:
        """Streak-based classification; five correct in a row is mastered."""
        if self.current_streak >= MASTERY_STREAK:
            return MasteryLevel.MASTERED
        if self.total_attempts == 0:
            return MasteryLevel.NEW
        if self.current_streak >= 3:
            return MasteryLevel.GOOD
        if self.current_streak >= 1:
            return MasteryLevel.LEARNING
        return MasteryLevel.DIFFICULT

    @property
    def mastery_progress(self) -> float:
        return min(1.0, self.current_streak / MASTERY_STREAK)

    @property
    def answers_to_mastery(self) -> int:
        return max(0, MASTERY_STREAK - self.current_streak)

    @property
    def net_score(self) -> int:
        return self.correct_count - self.incorrect_count

    def is_due(self, now: datetime) -> bool:
        """Due when never scheduled or the scheduled time has been reached."""
        return _is_due(self.next_review, now)


# ============================================================================
# Card
# ============================================================================


class Card(BaseModel):
    """A language-learning flashcard.

    Cards are immutable; every update produces a new instance which the
    caller hands to its persistence layer.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    front_text: str = Field(..., min_length=1, description="Prompt / term")
    back_text: str = Field(..., min_length=1, description="Answer / translation")
    language: str = Field(..., description="Language code, e.g. 'de'")
    category: str = ""
    tags: list[str] = Field(default_factory=list)
    difficulty: int = Field(default=1, ge=1, le=5)
    german_article: str | None = None
    examples: list[str] = Field(default_factory=list)
    icon: IconRef | None = None
    word_data: WordData | None = None

    review_count: int = Field(default=0, ge=0)
    correct_count: int = Field(default=0, ge=0)
    last_reviewed: datetime | None = None
    next_review: datetime | None = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    is_favorite: bool = False
    is_archived: bool = False

    exercise_scores: dict[ExerciseType, ExerciseScore] = Field(default_factory=dict)

    @field_validator("last_reviewed", "next_review", "created_at", "updated_at")
    @classmethod
    def ensure_utc(cls, v: datetime | None) -> datetime | None:
        return _as_utc(v)

    @field_validator("front_text", "back_text")
    @classmethod
    def validate_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Card text cannot be blank")
        return v

    @classmethod
    def create(
        cls,
        front_text: str,
        back_text: str,
        language: str,
        **fields: object,
    ) -> Card:
        """Build a brand-new card with a random id and no practice history."""
        now = datetime.now(UTC)
        return cls(
            id=str(uuid4()),
            front_text=front_text,
            back_text=back_text,
            language=language,
            created_at=now,
            updated_at=now,
            **fields,
        )

    @property
    def success_rate(self) -> float:
        """Lifetime share of correct reviews in [0, 1]."""
        if self.review_count == 0:
            return 0.0
        return self.correct_count / self.review_count

    @property
    def mastery_level(self) -> MasteryLevel:
        if self.review_count < 3:
            return MasteryLevel.NEW
        return _rate_mastery(self.success_rate)

    @property
    def overall_mastery_level(self) -> MasteryLevel:
        """Mastery across every exercise type practiced on this card."""
        if not self.exercise_scores:
            return self.mastery_level

        total = sum(s.total_attempts for s in self.exercise_scores.values())
        if total < 5:
            return MasteryLevel.NEW
        correct = sum(s.correct_count for s in self.exercise_scores.values())
        return _rate_mastery(correct / total)

    def is_due_for_review(self, now: datetime) -> bool:
        """Card-level due check on ``next_review`` only."""
        return _is_due(self.next_review, now)

    def get_exercise_score(self, exercise_type: ExerciseType) -> ExerciseScore | None:
        return self.exercise_scores.get(exercise_type)

    def is_exercise_due(self, exercise_type: ExerciseType, now: datetime) -> bool:
        """Whether ``exercise_type`` is due for this card.

        A recorded score is authoritative. A type that was never practiced
        falls back to the card-level ``next_review``.
        """
        score = self.exercise_scores.get(exercise_type)
        if score is not None:
            return score.is_due(now)
        return self.is_due_for_review(now)

    def due_exercise_types(self, now: datetime) -> list[ExerciseType]:
        """Implemented exercise types currently due, in declaration order."""
        return [t for t in ExerciseType.implemented() if self.is_exercise_due(t, now)]

    def with_exercise_result(
        self,
        exercise_type: ExerciseType,
        was_correct: bool,
        scheduler: ExerciseScheduler,
        now: datetime,
    ) -> Card:
        """Return a copy with one more attempt recorded for ``exercise_type``."""
        current = self.exercise_scores.get(exercise_type) or ExerciseScore.initial(
            exercise_type
        )
        if was_correct:
            updated = scheduler.record_correct(current, now)
        else:
            updated = scheduler.record_incorrect(current, now)

        scores = dict(self.exercise_scores)
        scores[exercise_type] = updated

        return self.model_copy(
            update={
                "exercise_scores": scores,
                "review_count": self.review_count + 1,
                "correct_count": self.correct_count + (1 if was_correct else 0),
                "last_reviewed": now,
                "updated_at": now,
            }
        )

    def __str__(self) -> str:
        return f"Card(id={self.id}, front={self.front_text!r}, back={self.back_text!r})"
