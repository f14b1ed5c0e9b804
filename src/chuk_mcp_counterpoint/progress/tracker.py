"""
Progress tracker - mastery levels and spaced-repetition review scheduling.

Every completion or quiz result moves an exercise's mastery level up or
down by one and schedules the next review further out the higher the
mastery. Exercises that are still weak are queued for a quiz. The queue
never holds two items for the same exercise.
"""

from __future__ import annotations

import logging
import random
from collections.abc import Callable, Sequence
from datetime import UTC, datetime, timedelta

from chuk_mcp_counterpoint.constants import (
    DEFAULT_QUIZ_KEY,
    MASTERY_DOWN_ACCURACY,
    MASTERY_UP_ACCURACY,
    MAX_MASTERY,
    QUIZ_MASTERY_THRESHOLD,
    REVIEW_INTERVALS,
)
from chuk_mcp_counterpoint.core.key import Key
from chuk_mcp_counterpoint.models.exercise import Exercise
from chuk_mcp_counterpoint.models.progress import ExerciseProgress, QuizItem
from chuk_mcp_counterpoint.progress.store import ProgressStore

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(UTC)


def review_interval(mastery_level: int) -> timedelta:
    """Time until the next review for a mastery level (capped at the last interval)."""
    index = min(mastery_level, len(REVIEW_INTERVALS) - 1)
    return timedelta(days=REVIEW_INTERVALS[index])


class ProgressTracker:
    """
    Tracks per-exercise progress and the quiz queue.

    Reads everything from the store once, then writes back after every
    mutation. Time and randomness are injected so scheduling is
    deterministic under test.
    """

    def __init__(
        self,
        store: ProgressStore,
        clock: Callable[[], datetime] = _utc_now,
        rng: random.Random | None = None,
    ):
        """
        Initialize the tracker.

        Args:
            store: Where progress is loaded from and saved to
            clock: Returns the current time
            rng: Random source for picking quiz keys
        """
        self.store = store
        self.clock = clock
        self.rng = rng or random.Random()
        self._snapshot = store.load()

    # Queries

    @property
    def quiz_queue(self) -> list[QuizItem]:
        """The queued quizzes, ordered by due date."""
        return list(self._snapshot.quiz_queue)

    @property
    def records(self) -> dict[str, ExerciseProgress]:
        return dict(self._snapshot.progress)

    def get_progress(self, exercise_id: str) -> ExerciseProgress | None:
        """Get progress for a specific exercise."""
        return self._snapshot.progress.get(exercise_id)

    def is_completed(self, exercise_id: str) -> bool:
        record = self._snapshot.progress.get(exercise_id)
        return record is not None and record.completed

    def is_queued(self, exercise_id: str) -> bool:
        return any(item.exercise_id == exercise_id for item in self._snapshot.quiz_queue)

    def completion_percentage(self, bassline_id: str, exercises: Sequence[Exercise]) -> float:
        """Fraction of a bassline's exercises completed (0-1)."""
        group = [e for e in exercises if e.bassline_id == bassline_id]
        if not group:
            return 0.0
        return sum(1 for e in group if self.is_completed(e.id)) / len(group)

    def exercises_due_for_review(self, now: datetime | None = None) -> list[str]:
        """Ids of exercises whose review date has passed."""
        now = now or self.clock()
        return [
            exercise_id
            for exercise_id, record in self._snapshot.progress.items()
            if record.is_due(now)
        ]

    def next_exercise_to_practice(
        self, exercises: Sequence[Exercise], now: datetime | None = None
    ) -> Exercise | None:
        """
        Pick what to practice next.

        The first exercise due for review wins; otherwise the first one
        not yet completed.
        """
        now = now or self.clock()
        for exercise in exercises:
            record = self._snapshot.progress.get(exercise.id)
            if record is not None and record.is_due(now):
                return exercise
        for exercise in exercises:
            if not self.is_completed(exercise.id):
                return exercise
        return None

    # Statistics

    @property
    def total_completed(self) -> int:
        return sum(1 for r in self._snapshot.progress.values() if r.completed)

    @property
    def average_accuracy(self) -> float:
        """Mean best accuracy across completed exercises."""
        completed = [r for r in self._snapshot.progress.values() if r.completed]
        if not completed:
            return 0.0
        return sum(r.best_accuracy for r in completed) / len(completed)

    def exercises_at_mastery_level(self, level: int) -> int:
        return sum(1 for r in self._snapshot.progress.values() if r.mastery_level == level)

    def days_since_last_practice(self, now: datetime | None = None) -> int | None:
        """Whole days since the most recent completion, or None if never practiced."""
        practiced = [
            r.last_practiced for r in self._snapshot.progress.values() if r.last_practiced
        ]
        if not practiced:
            return None
        now = now or self.clock()
        return (now - max(practiced)).days

    # Mutations

    def record_completion(
        self, exercise_id: str, accuracy: float = 1.0, key: Key = Key.C_MAJOR
    ) -> ExerciseProgress:
        """
        Record a completed attempt.

        Args:
            exercise_id: The exercise completed
            accuracy: Correct placements over total placements (0-1)
            key: Key the attempt was made in

        Returns:
            The updated progress record
        """
        now = self.clock()
        record = self._snapshot.progress.get(exercise_id) or ExerciseProgress(
            exercise_id=exercise_id
        )

        record.completed = True
        record.last_practiced = now
        record.best_accuracy = max(record.best_accuracy, accuracy)
        record.completed_keys.add(key.identifier)

        if accuracy >= MASTERY_UP_ACCURACY:
            record.mastery_level = min(record.mastery_level + 1, MAX_MASTERY)
        elif accuracy < MASTERY_DOWN_ACCURACY:
            record.mastery_level = max(record.mastery_level - 1, 0)

        record.next_review_date = now + review_interval(record.mastery_level)
        self._snapshot.progress[exercise_id] = record

        if record.mastery_level < QUIZ_MASTERY_THRESHOLD and not self.is_queued(exercise_id):
            self._enqueue(record, record.next_review_date)

        logger.info(
            f"Recorded completion of {exercise_id} in {key.short_name} "
            f"(accuracy {accuracy:.2f}, mastery {record.mastery_level})"
        )
        self._save()
        return record

    def due_for_review(self, now: datetime | None = None) -> list[QuizItem]:
        """
        Queue every exercise whose review date has passed.

        Safe to call repeatedly: an exercise already in the queue is not
        queued again.

        Returns:
            The queued items due at ``now``, ordered by due date
        """
        now = now or self.clock()
        added = False
        for record in self._snapshot.progress.values():
            review_date = record.next_review_date
            if review_date is None or review_date > now or self.is_queued(record.exercise_id):
                continue
            self._enqueue(record, review_date)
            added = True

        if added:
            self._save()
        return [item for item in self._snapshot.quiz_queue if item.due_date <= now]

    def next_quiz(self, now: datetime | None = None) -> QuizItem | None:
        """The earliest due quiz, refreshing the queue first."""
        due = self.due_for_review(now)
        return due[0] if due else None

    def should_show_quiz(self, now: datetime | None = None) -> bool:
        return bool(self.due_for_review(now))

    def complete_quiz(self, item: QuizItem, was_correct: bool) -> ExerciseProgress | None:
        """
        Remove a quiz from the queue and apply its result.

        A correct answer raises mastery by one, a wrong one lowers it, and
        the next review is rescheduled. No record is created for an
        exercise that was never attempted.

        Returns:
            The updated record, or None if the exercise has no progress
        """
        self._snapshot.quiz_queue = [q for q in self._snapshot.quiz_queue if q.id != item.id]

        record = self._snapshot.progress.get(item.exercise_id)
        if record is not None:
            if was_correct:
                record.mastery_level = min(record.mastery_level + 1, MAX_MASTERY)
            else:
                record.mastery_level = max(record.mastery_level - 1, 0)
            record.next_review_date = self.clock() + review_interval(record.mastery_level)

        self._save()
        return record

    def reset(self) -> None:
        """Clear all progress and the quiz queue."""
        self._snapshot.progress = {}
        self._snapshot.quiz_queue = []
        self._save()
        logger.info("Progress reset")

    def _enqueue(self, record: ExerciseProgress, due_date: datetime) -> QuizItem:
        keys = sorted(record.completed_keys)
        item = QuizItem(
            exercise_id=record.exercise_id,
            due_date=due_date,
            key=self.rng.choice(keys) if keys else DEFAULT_QUIZ_KEY,
        )
        self._snapshot.quiz_queue.append(item)
        self._snapshot.quiz_queue.sort(key=lambda q: q.due_date)
        return item

    def _save(self) -> None:
        self.store.save(self._snapshot)
