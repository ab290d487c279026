"""Streak-based spaced-repetition scheduling for exercise scores.

A correct answer pushes the next review out by an interval that grows with
the consecutive-correct streak; an incorrect answer resets the streak and
brings the exercise back after a short retry interval.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta

from lingua.domain.learning.models.card_models import ExerciseScore

logger = logging.getLogger(__name__)


class ExerciseScheduler:
    """Compute review intervals and record outcomes on ``ExerciseScore``.

    With the defaults the intervals after 1, 2, 3... consecutive correct
    answers are 3, 5, 7... days.
    """

    def __init__(
        self,
        base_interval_days: float = 1.0,
        streak_factor: float = 2.0,
        retry_interval_days: float = 1.0,
        max_interval_days: float = 365.0,
    ) -> None:
        if base_interval_days <= 0:
            raise ValueError("base_interval_days must be positive")
        if streak_factor < 0:
            raise ValueError("streak_factor cannot be negative")
        if retry_interval_days <= 0:
            raise ValueError("retry_interval_days must be positive")
        if max_interval_days < base_interval_days:
            raise ValueError("max_interval_days must be >= base_interval_days")

        self.base_interval_days = base_interval_days
        self.streak_factor = streak_factor
        self.retry_interval_days = retry_interval_days
        self.max_interval_days = max_interval_days

    def interval_for_streak(self, streak: int) -> timedelta:
        """Interval to wait after reaching ``streak`` consecutive correct answers."""
        days = round(self.base_interval_days * (1 + streak * self.streak_factor))
        return timedelta(days=min(days, self.max_interval_days))

    def record_correct(self, score: ExerciseScore, now: datetime) -> ExerciseScore:
        streak = score.current_streak + 1
        interval = self.interval_for_streak(streak)
        logger.debug(
            f"{score.type.value}: correct, streak {streak}, next in {interval.days}d"
        )
        return score.model_copy(
            update={
                "correct_count": score.correct_count + 1,
                "current_streak": streak,
                "best_streak": max(score.best_streak, streak),
                "last_practiced": now,
                "next_review": now + interval,
            }
        )

    def record_incorrect(self, score: ExerciseScore, now: datetime) -> ExerciseScore:
        """Count a miss; the streak steps back by one but never below zero."""
        streak = max(0, score.current_streak - 1)
        return score.model_copy(
            update={
                "incorrect_count": score.incorrect_count + 1,
                "current_streak": streak,
                "last_practiced": now,
                "next_review": now + timedelta(days=self.retry_interval_days),
            }
        )
