"""Tests for the fixed-interval review scheduler."""

import random
from datetime import datetime, timedelta

import pytest

from backend.srs.scheduler import (
    DEFAULT_INTERVALS,
    ProgressState,
    ProgressStatus,
    ReviewScheduler,
)

NOW = datetime(2026, 3, 1, 12, 0, 0)


def seen(level: int, correct: int, incorrect: int) -> ProgressState:
    return ProgressState(
        mastery_level=level,
        correct_attempts=correct,
        incorrect_attempts=incorrect,
        status=ProgressStatus.IN_PROGRESS,
    )


class TestReviewScheduler:
    def setup_method(self) -> None:
        self.scheduler = ReviewScheduler()

    def test_defaults(self) -> None:
        assert self.scheduler.intervals == DEFAULT_INTERVALS == (1, 3, 7, 14, 30, 60)
        assert self.scheduler.promotion_threshold == 0.7
        assert self.scheduler.max_level == 6

    def test_interval_lookup(self) -> None:
        assert self.scheduler.interval_for(0) == 1
        assert self.scheduler.interval_for(2) == 7
        assert self.scheduler.interval_for(5) == 60
        # Past the table the last interval applies
        assert self.scheduler.interval_for(6) == 60
        assert self.scheduler.interval_for(42) == 60

    def test_first_correct_answer_moves_to_level_one(self) -> None:
        result = self.scheduler.review(ProgressState(), is_correct=True, now=NOW)
        assert result.new_state.mastery_level == 1
        assert result.new_state.correct_attempts == 1
        assert result.new_state.incorrect_attempts == 0
        assert result.new_state.status is ProgressStatus.IN_PROGRESS
        assert result.interval_days == 3
        assert result.next_review_date == NOW + timedelta(days=3)

    def test_first_incorrect_answer_stays_at_zero(self) -> None:
        result = self.scheduler.review(ProgressState(), is_correct=False, now=NOW)
        assert result.new_state.mastery_level == 0
        assert result.new_state.incorrect_attempts == 1
        assert result.new_state.status is ProgressStatus.IN_PROGRESS
        assert result.next_review_date == NOW + timedelta(days=1)

    def test_correct_promotes_when_accuracy_meets_threshold(self) -> None:
        # 7 of 10 is exactly the threshold
        result = self.scheduler.review(seen(2, 7, 3), is_correct=True, now=NOW)
        assert result.new_state.mastery_level == 3
        assert result.new_state.correct_attempts == 8
        assert result.interval_days == 14

    def test_correct_holds_level_below_threshold(self) -> None:
        result = self.scheduler.review(seen(2, 2, 3), is_correct=True, now=NOW)
        assert result.new_state.mastery_level == 2
        assert result.new_state.correct_attempts == 3
        assert result.interval_days == 7

    def test_ratio_uses_counts_before_the_answer(self) -> None:
        # 2/3 before is below 0.7 even though 3/4 after would pass
        result = self.scheduler.review(seen(1, 2, 1), is_correct=True, now=NOW)
        assert result.new_state.mastery_level == 1

    def test_incorrect_demotes_by_one(self) -> None:
        result = self.scheduler.review(seen(4, 10, 1), is_correct=False, now=NOW)
        assert result.new_state.mastery_level == 3
        assert result.new_state.incorrect_attempts == 2
        assert result.new_state.correct_attempts == 10
        assert result.interval_days == 14

    def test_incorrect_never_goes_below_zero(self) -> None:
        result = self.scheduler.review(seen(0, 0, 5), is_correct=False, now=NOW)
        assert result.new_state.mastery_level == 0

    def test_level_is_capped_at_table_length(self) -> None:
        result = self.scheduler.review(seen(6, 20, 0), is_correct=True, now=NOW)
        assert result.new_state.mastery_level == 6
        assert result.interval_days == 60

    def test_review_does_not_mutate_input(self) -> None:
        state = seen(2, 5, 0)
        self.scheduler.review(state, is_correct=True, now=NOW)
        assert state.mastery_level == 2
        assert state.correct_attempts == 5

    def test_repeated_success_climbs_the_table(self) -> None:
        state = ProgressState()
        intervals = []
        for _ in range(7):
            result = self.scheduler.review(state, is_correct=True, now=NOW)
            state = result.new_state
            intervals.append(result.interval_days)
        assert intervals == [3, 7, 14, 30, 60, 60, 60]
        assert state.mastery_level == 6


class TestCustomScheduler:
    def test_custom_table_and_threshold(self) -> None:
        scheduler = ReviewScheduler(intervals=[2, 4], promotion_threshold=0.5)
        result = scheduler.review(seen(1, 1, 1), is_correct=True, now=NOW)
        assert result.new_state.mastery_level == 2
        assert result.interval_days == 4

    def test_empty_table_is_rejected(self) -> None:
        with pytest.raises(ValueError):
            ReviewScheduler(intervals=[])


class TestProgressState:
    def test_accuracy(self) -> None:
        assert ProgressState().accuracy is None
        assert seen(1, 3, 1).accuracy == 0.75
        assert seen(1, 3, 1).total_attempts == 4


class TestSchedulerProperties:
    def setup_method(self) -> None:
        self.scheduler = ReviewScheduler()

    def test_level_stays_in_bounds_for_any_answer_sequence(self) -> None:
        rng = random.Random(1234)
        for _ in range(200):
            state = ProgressState()
            for _ in range(rng.randint(1, 40)):
                result = self.scheduler.review(state, rng.random() < 0.6, now=NOW)
                state = result.new_state
                assert 0 <= state.mastery_level <= self.scheduler.max_level
                assert result.next_review_date == NOW + timedelta(
                    days=self.scheduler.interval_for(state.mastery_level)
                )

    def test_low_ratio_blocks_promotion(self) -> None:
        result = self.scheduler.review(seen(2, 3, 7), is_correct=True, now=NOW)
        assert result.new_state.mastery_level == 2
