"""Tests for the exercise scheduler."""

from __future__ import annotations

from datetime import timedelta

import pytest

from lingua.domain.learning.models.card_models import ExerciseScore
from lingua.domain.learning.services.schedule_exercise import ExerciseScheduler
from lingua.domain.shared.models import ExerciseType


@pytest.fixture
def scheduler():
    return ExerciseScheduler()


@pytest.fixture
def fresh_score():
    return ExerciseScore.initial(ExerciseType.WRITING_TRANSLATION)


class TestExerciseScheduler:
    """Test ExerciseScheduler."""

    def test_interval_grows_with_streak(self, scheduler):
        intervals = [scheduler.interval_for_streak(s).days for s in range(1, 5)]
        assert intervals == [3, 5, 7, 9]

    def test_interval_capped(self):
        scheduler = ExerciseScheduler(max_interval_days=10)
        assert scheduler.interval_for_streak(100) == timedelta(days=10)

    def test_record_correct(self, scheduler, fresh_score, now):
        score = scheduler.record_correct(fresh_score, now)

        assert score.correct_count == 1
        assert score.incorrect_count == 0
        assert score.current_streak == 1
        assert score.best_streak == 1
        assert score.last_practiced == now
        assert score.next_review == now + timedelta(days=3)

    def test_two_corrects_strictly_increase_interval(
        self, scheduler, fresh_score, now
    ):
        first = scheduler.record_correct(fresh_score, now)
        second = scheduler.record_correct(first, now)

        assert second.next_review - now > first.next_review - now

    def test_record_incorrect_resets_to_retry_interval(
        self, scheduler, fresh_score, now
    ):
        score = fresh_score
        for _ in range(4):
            score = scheduler.record_correct(score, now)

        missed = scheduler.record_incorrect(score, now)

        assert missed.incorrect_count == 1
        assert missed.current_streak == 3
        assert missed.best_streak == 4
        assert missed.next_review == now + timedelta(days=1)

    def test_streak_never_negative(self, scheduler, fresh_score, now):
        missed = scheduler.record_incorrect(fresh_score, now)
        missed = scheduler.record_incorrect(missed, now)

        assert missed.current_streak == 0
        assert missed.incorrect_count == 2

    def test_correct_after_failure_not_shorter_than_retry(
        self, scheduler, fresh_score, now
    ):
        missed = scheduler.record_incorrect(fresh_score, now)
        recovered = scheduler.record_correct(missed, now)

        assert recovered.next_review - now >= missed.next_review - now

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"base_interval_days": 0},
            {"streak_factor": -1},
            {"retry_interval_days": 0},
            {"max_interval_days": 0.5},
        ],
    )
    def test_invalid_configuration(self, kwargs):
        with pytest.raises(ValueError):
            ExerciseScheduler(**kwargs)
