"""Session queue entries."""

from __future__ import annotations

from dataclasses import dataclass, field

from lingua.domain.learning.models.card_models import Card
from lingua.domain.shared.models import ExerciseType


@dataclass(frozen=True)
class PracticeItem:
    """One (card, exercise type) pair in a session queue.

    Identity is the card id plus the exercise type, so a refreshed copy of the
    same card still compares equal to its earlier queue entry.
    """

    card: Card = field(compare=False)
    exercise_type: ExerciseType
    card_id: str = field(init=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "card_id", self.card.id)

    def with_card(self, card: Card) -> PracticeItem:
        """Same exercise, refreshed card data."""
        if card.id != self.card_id:
            raise ValueError(f"Card id mismatch: {card.id} != {self.card_id}")
        return PracticeItem(card=card, exercise_type=self.exercise_type)

    def __str__(self) -> str:
        return f"PracticeItem({self.card_id}, {self.exercise_type.value})"
