"""Shared models and base classes for all bounded contexts."""

from __future__ import annotations

from enum import Enum

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Base class for all database models."""

    pass


class ExerciseCategory(str, Enum):
    """Groups of exercise types."""

    RECOGNITION = "recognition"  # passive recall
    PRODUCTION = "production"  # active recall/output

    @property
    def display_name(self) -> str:
        """Human-readable category name."""
        return self.value.capitalize()

    @property
    def description(self) -> str:
        """Short explanation of the category."""
        if self is ExerciseCategory.RECOGNITION:
            return "See or hear, then identify the meaning"
        return "Actively produce the translation"

    @property
    def exercise_types(self) -> list[ExerciseType]:
        """Implemented exercise types that belong to this category."""
        return [t for t in ExerciseType if t.category is self and t.is_implemented]


class ExerciseType(str, Enum):
    """Ways of practicing a single card."""

    READING_RECOGNITION = "reading_recognition"
    WRITING_TRANSLATION = "writing_translation"
    MULTIPLE_CHOICE_TEXT = "multiple_choice_text"
    MULTIPLE_CHOICE_ICON = "multiple_choice_icon"
    REVERSE_TRANSLATION = "reverse_translation"
    LISTENING_RECOGNITION = "listening_recognition"
    SPEAKING_PRONUNCIATION = "speaking_pronunciation"
    SENTENCE_FILL = "sentence_fill"
    SENTENCE_BUILDING = "sentence_building"
    CONJUGATION_PRACTICE = "conjugation_practice"
    ARTICLE_SELECTION = "article_selection"

    @property
    def display_name(self) -> str:
        """Human-readable name for the exercise type."""
        return _DISPLAY_NAMES[self]

    @property
    def description(self) -> str:
        """What the learner is asked to do."""
        return _DESCRIPTIONS[self]

    @property
    def is_implemented(self) -> bool:
        """Whether the exercise can be offered in a practice session."""
        return self not in _NOT_IMPLEMENTED

    @property
    def requires_icon(self) -> bool:
        """Whether the card needs an icon for this exercise."""
        return self is ExerciseType.MULTIPLE_CHOICE_ICON

    @property
    def is_multiple_choice(self) -> bool:
        """Whether the exercise presents a list of candidate answers."""
        return self in (
            ExerciseType.MULTIPLE_CHOICE_TEXT,
            ExerciseType.MULTIPLE_CHOICE_ICON,
        )

    @property
    def category(self) -> ExerciseCategory:
        """Recognition or production."""
        if self in _RECOGNITION_TYPES:
            return ExerciseCategory.RECOGNITION
        return ExerciseCategory.PRODUCTION

    @classmethod
    def implemented(cls) -> list[ExerciseType]:
        """All exercise types that can currently be practiced."""
        return [t for t in cls if t.is_implemented]


_DISPLAY_NAMES = {
    ExerciseType.READING_RECOGNITION: "Reading Recognition",
    ExerciseType.WRITING_TRANSLATION: "Writing Translation",
    ExerciseType.MULTIPLE_CHOICE_TEXT: "Multiple Choice (Text)",
    ExerciseType.MULTIPLE_CHOICE_ICON: "Multiple Choice (Icon)",
    ExerciseType.REVERSE_TRANSLATION: "Reverse Translation",
    ExerciseType.LISTENING_RECOGNITION: "Listening Recognition",
    ExerciseType.SPEAKING_PRONUNCIATION: "Speaking Pronunciation",
    ExerciseType.SENTENCE_FILL: "Sentence Fill",
    ExerciseType.SENTENCE_BUILDING: "Sentence Building",
    ExerciseType.CONJUGATION_PRACTICE: "Conjugation Practice",
    ExerciseType.ARTICLE_SELECTION: "Article Selection",
}

_DESCRIPTIONS = {
    ExerciseType.READING_RECOGNITION: "See the word and recall its meaning",
    ExerciseType.WRITING_TRANSLATION: "Type the correct translation",
    ExerciseType.MULTIPLE_CHOICE_TEXT: "Choose the correct meaning from options",
    ExerciseType.MULTIPLE_CHOICE_ICON: "Choose the matching icon",
    ExerciseType.REVERSE_TRANSLATION: "Translate from your native language",
    ExerciseType.LISTENING_RECOGNITION: "Listen and identify the word",
    ExerciseType.SPEAKING_PRONUNCIATION: "Speak the word correctly",
    ExerciseType.SENTENCE_FILL: "Complete the sentence with the word",
    ExerciseType.SENTENCE_BUILDING: "Arrange words in correct order",
    ExerciseType.CONJUGATION_PRACTICE: "Provide the correct form",
    ExerciseType.ARTICLE_SELECTION: "Choose the correct article",
}

_NOT_IMPLEMENTED = frozenset(
    {
        ExerciseType.LISTENING_RECOGNITION,
        ExerciseType.SPEAKING_PRONUNCIATION,
        ExerciseType.SENTENCE_FILL,
    }
)

_RECOGNITION_TYPES = frozenset(
    {
        ExerciseType.READING_RECOGNITION,
        ExerciseType.MULTIPLE_CHOICE_TEXT,
        ExerciseType.MULTIPLE_CHOICE_ICON,
        ExerciseType.LISTENING_RECOGNITION,
        ExerciseType.ARTICLE_SELECTION,
    }
)


class MasteryLevel(str, Enum):
    """Display classification of a learner's history with a card."""

    NEW = "New"
    LEARNING = "Learning"
    GOOD = "Good"
    MASTERED = "Mastered"
    DIFFICULT = "Difficult"


class AnswerState(str, Enum):
    """Sub-state of the current practice item."""

    PENDING = "pending"  # no answer submitted yet
    ANSWERED = "answered"  # answer submitted, waiting for confirmation
