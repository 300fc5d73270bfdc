"""Fixed-interval review scheduler.

A word's mastery level indexes into an ascending table of day intervals.
Correct answers promote the level only while the learner's running accuracy
on that word stays at or above the promotion threshold; incorrect answers
always demote it by one.

Key concepts:
- Mastery level: 0..len(intervals), how well the word is known.
- Interval table: days until the next review, per mastery level.
- Status: NEW until the first answer is recorded, IN_PROGRESS afterwards.
"""

from dataclasses import dataclass, replace
from datetime import datetime, timedelta
from enum import Enum

from backend.config import utcnow

DEFAULT_INTERVALS = (1, 3, 7, 14, 30, 60)
DEFAULT_PROMOTION_THRESHOLD = 0.7


class ProgressStatus(Enum):
    NEW = "new"
    IN_PROGRESS = "in_progress"


@dataclass(frozen=True)
class ProgressState:
    """Scheduling state of a word for one user."""

    mastery_level: int = 0
    correct_attempts: int = 0
    incorrect_attempts: int = 0
    status: ProgressStatus = ProgressStatus.NEW

    @property
    def total_attempts(self) -> int:
        return self.correct_attempts + self.incorrect_attempts

    @property
    def accuracy(self) -> float | None:
        """Share of correct answers, or None before any answer."""
        if self.total_attempts == 0:
            return None
        return self.correct_attempts / self.total_attempts


@dataclass(frozen=True)
class ReviewResult:
    """The result of applying one answer to a word's state."""

    new_state: ProgressState
    next_review_date: datetime
    interval_days: int


class ReviewScheduler:
    """Mastery-level scheduler with a fixed interval table."""

    def __init__(
        self,
        intervals: tuple[int, ...] | list[int] = DEFAULT_INTERVALS,
        promotion_threshold: float = DEFAULT_PROMOTION_THRESHOLD,
    ) -> None:
        """Initialize the scheduler with an ascending interval table in days."""
        if not intervals:
            raise ValueError("intervals must not be empty")
        self.intervals = tuple(intervals)
        self.promotion_threshold = promotion_threshold

    @property
    def max_level(self) -> int:
        return len(self.intervals)

    def interval_for(self, mastery_level: int) -> int:
        """Return the review interval in days for a mastery level.

        Levels past the end of the table use the last interval.
        """
        if 0 <= mastery_level < len(self.intervals):
            return self.intervals[mastery_level]
        return self.intervals[-1]

    def review(
        self,
        state: ProgressState,
        is_correct: bool,
        now: datetime | None = None,
    ) -> ReviewResult:
        """Apply an answer to a word's state.

        Args:
            state: State before the answer.
            is_correct: Whether the learner answered correctly.
            now: When the answer happened (defaults to now).

        Returns:
            ReviewResult with the new state and next review date.
        """
        now = now or utcnow()
        level = state.mastery_level

        if is_correct:
            if state.status is ProgressStatus.NEW:
                # First answer ever: a single data point is not worth a ratio check
                level = 1
            elif state.accuracy is not None and state.accuracy >= self.promotion_threshold:
                level = min(level + 1, self.max_level)
            new_state = replace(
                state,
                mastery_level=level,
                correct_attempts=state.correct_attempts + 1,
                status=ProgressStatus.IN_PROGRESS,
            )
        else:
            new_state = replace(
                state,
                mastery_level=max(level - 1, 0),
                incorrect_attempts=state.incorrect_attempts + 1,
                status=ProgressStatus.IN_PROGRESS,
            )

        interval = self.interval_for(new_state.mastery_level)
        return ReviewResult(
            new_state=new_state,
            next_review_date=now + timedelta(days=interval),
            interval_days=interval,
        )
