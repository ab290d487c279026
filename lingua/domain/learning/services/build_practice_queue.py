"""Build the ordered, due-only practice queue for a session."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import datetime
from typing import assert_never

from lingua.domain.learning.models.card_models import (
    AdjectiveData,
    AdverbData,
    Card,
    NounData,
    VerbData,
)
from lingua.domain.learning.models.practice_models import PracticeItem
from lingua.domain.learning.models.preferences import ExercisePreferences
from lingua.domain.shared.models import ExerciseType

logger = logging.getLogger(__name__)

MIN_MULTIPLE_CHOICE_POOL = 4
GERMAN_ARTICLES = frozenset({"der", "die", "das"})


def _has_text(*values: str | None) -> bool:
    return any(v is not None and v.strip() for v in values)


def supports_conjugation(card: Card) -> bool:
    """Whether the card's word data carries any inflection worth drilling."""
    word_data = card.word_data
    match word_data:
        case VerbData():
            return _has_text(
                word_data.separable_prefix,
                word_data.auxiliary,
                word_data.present_second_person,
                word_data.present_third_person,
                word_data.past_simple,
                word_data.past_participle,
            )
        case NounData():
            return _has_text(word_data.gender)
        case AdjectiveData():
            return _has_text(word_data.comparative, word_data.superlative)
        case AdverbData():
            return False
        case None:
            return False
        case _:
            assert_never(word_data)


def supports_article_selection(card: Card) -> bool:
    word_data = card.word_data
    if isinstance(word_data, NounData) and word_data.gender.lower() in GERMAN_ARTICLES:
        return True
    return _has_text(card.german_article)


def is_exercise_applicable(
    card: Card,
    exercise_type: ExerciseType,
    pool_size: int,
    min_pool_size: int = MIN_MULTIPLE_CHOICE_POOL,
) -> bool:
    """Whether ``exercise_type`` makes sense for ``card`` at all.

    ``pool_size`` is the number of cards available as multiple-choice
    distractor sources (including ``card`` itself).
    """
    if not exercise_type.is_implemented:
        return False

    match exercise_type:
        case (
            ExerciseType.READING_RECOGNITION
            | ExerciseType.WRITING_TRANSLATION
            | ExerciseType.REVERSE_TRANSLATION
        ):
            return True
        case ExerciseType.MULTIPLE_CHOICE_TEXT:
            return pool_size >= min_pool_size
        case ExerciseType.MULTIPLE_CHOICE_ICON:
            return card.icon is not None and pool_size >= min_pool_size
        case ExerciseType.SENTENCE_BUILDING:
            return any(example.strip() for example in card.examples)
        case ExerciseType.CONJUGATION_PRACTICE:
            return supports_conjugation(card)
        case ExerciseType.ARTICLE_SELECTION:
            return supports_article_selection(card)
        case _:
            return False


def weakness_key(card: Card, exercise_type: ExerciseType) -> float:
    """Sort key: never-attempted types first (-1), then lowest success rate."""
    score = card.get_exercise_score(exercise_type)
    if score is None or score.total_attempts == 0:
        return -1.0
    return score.success_rate


class PracticeQueueBuilder:
    """Expand due cards into (card, exercise type) queue entries.

    A card contributes one entry per enabled, applicable exercise type that is
    due. An exercise type with a recorded score is due when that score's
    ``next_review`` has been reached; a type never practiced on the card
    follows the card's own ``next_review``.
    """

    def __init__(self, min_multiple_choice_pool: int = MIN_MULTIPLE_CHOICE_POOL):
        self.min_multiple_choice_pool = min_multiple_choice_pool

    @staticmethod
    def filter_for_practice(
        cards: Sequence[Card], active_language: str | None = None
    ) -> list[Card]:
        """Drop archived cards and, when given, cards in other languages."""
        return [
            card
            for card in cards
            if not card.is_archived
            and (active_language is None or card.language == active_language)
        ]

    def due_exercise_types(
        self,
        card: Card,
        preferences: ExercisePreferences,
        now: datetime,
        pool_size: int,
    ) -> list[ExerciseType]:
        """Enabled, applicable and due exercise types in declaration order."""
        return [
            exercise_type
            for exercise_type in ExerciseType
            if preferences.is_enabled(exercise_type)
            and is_exercise_applicable(
                card, exercise_type, pool_size, self.min_multiple_choice_pool
            )
            and card.is_exercise_due(exercise_type, now)
        ]

    def build(
        self,
        cards: Sequence[Card],
        preferences: ExercisePreferences,
        now: datetime,
        active_language: str | None = None,
        limit: int | None = None,
    ) -> list[PracticeItem]:
        """Build the session queue.

        Args:
            cards: Candidate cards in the order the queue should follow
            preferences: Enabled exercise types and ordering options
            now: Reference time for due checks
            active_language: Only practice cards in this language
            limit: Maximum number of queue entries

        Returns:
            Ordered queue; empty when nothing is due
        """
        if limit is not None and limit < 0:
            raise ValueError("limit cannot be negative")

        pool = self.filter_for_practice(cards, active_language)
        queue: list[PracticeItem] = []

        for card in pool:
            due_types = self.due_exercise_types(card, preferences, now, len(pool))
            if not due_types:
                continue
            if preferences.prioritize_weaknesses:
                # min() keeps the first of equally weak types
                due_types = [min(due_types, key=lambda t: weakness_key(card, t))]
            queue.extend(PracticeItem(card=card, exercise_type=t) for t in due_types)

        if preferences.prioritize_weaknesses:
            queue.sort(key=lambda item: weakness_key(item.card, item.exercise_type))

        if limit is not None:
            queue = queue[:limit]

        logger.info(
            f"Built practice queue with {len(queue)} items from {len(pool)} cards"
        )
        return queue
