"""
Session Manager - owns the single active exercise session.

Starting a session closes the previous one (cancelling its timers), and
every completed attempt is forwarded to the progress tracker.

A quiz is a session started straight in practice, in the quiz item's key.
Its first completion settles the quiz item instead of counting as an
ordinary completion, so mastery moves once per quiz.
"""

from __future__ import annotations

import logging

from chuk_mcp_counterpoint.constants import DEFAULT_TEMPO, QUIZ_PASS_ACCURACY
from chuk_mcp_counterpoint.core.key import Key
from chuk_mcp_counterpoint.exercises.registry import ExerciseRegistry
from chuk_mcp_counterpoint.models.progress import ExerciseProgress, QuizItem
from chuk_mcp_counterpoint.playback.events import PlaybackPort
from chuk_mcp_counterpoint.progress.tracker import ProgressTracker
from chuk_mcp_counterpoint.session.exercise_session import ExerciseSession
from chuk_mcp_counterpoint.session.state import ExerciseCompleted, SessionEffect
from chuk_mcp_counterpoint.session.tasks import Scheduler

logger = logging.getLogger(__name__)


class SessionManager:
    """
    Manages the lifecycle of the active session.

    Provides methods to start, look up and end a session, and to take or
    skip a quiz. Completion effects are routed into the tracker as they
    happen.
    """

    def __init__(
        self,
        registry: ExerciseRegistry,
        tracker: ProgressTracker,
        scheduler: Scheduler,
        playback: PlaybackPort | None = None,
    ):
        """
        Initialize the manager.

        Args:
            registry: Source of exercises
            tracker: Receives completed attempts
            scheduler: Timer source handed to each session
            playback: Optional audio port shared by sessions
        """
        self.registry = registry
        self.tracker = tracker
        self.scheduler = scheduler
        self.playback = playback
        self.active: ExerciseSession | None = None
        self.active_quiz: QuizItem | None = None
        self.last_recorded: ExerciseProgress | None = None

    def start(
        self, exercise_id: str, key: Key | None = None, tempo: float = DEFAULT_TEMPO
    ) -> ExerciseSession | None:
        """
        Start a session on an exercise, replacing any active one.

        Args:
            exercise_id: Exercise to practice
            key: Optional key to start in (must be in the transposition cycle)
            tempo: Playback tempo in BPM

        Returns:
            The new session, or None if the exercise does not exist
        """
        exercise = self.registry.get_exercise(exercise_id)
        if exercise is None:
            return None

        self.end()
        session = ExerciseSession(
            exercise,
            self.scheduler,
            playback=self.playback,
            listener=self._on_effect,
            tempo=tempo,
        )
        if key is not None:
            session.set_key(key)
        self.active = session
        logger.info(f"Started session on {exercise_id} in {session.current_key.short_name}")
        return session

    def start_quiz(self, item: QuizItem, tempo: float = DEFAULT_TEMPO) -> ExerciseSession | None:
        """
        Start a quiz: practice in the item's key with the soprano hidden.

        The quiz passes when the attempt completes with accuracy of at
        least QUIZ_PASS_ACCURACY.

        Args:
            item: Queued quiz item
            tempo: Playback tempo in BPM

        Returns:
            The quiz session, or None if the exercise does not exist
        """
        session = self.start(item.exercise_id, key=Key.parse(item.key), tempo=tempo)
        if session is None:
            return None

        session.start_practice()
        self.active_quiz = item
        logger.info(f"Started quiz {item.id} on {item.exercise_id} in {item.key}")
        return session

    def skip_quiz(self, item: QuizItem) -> ExerciseProgress | None:
        """
        Skip a quiz. Skipping counts as a failed quiz.

        Closes the session if it is running this quiz.

        Returns:
            The updated record, or None if the exercise has no progress
        """
        if self.active_quiz is not None and self.active_quiz.id == item.id:
            self.end()
        record = self.tracker.complete_quiz(item, False)
        self.last_recorded = record
        logger.info(f"Skipped quiz {item.id} on {item.exercise_id}")
        return record

    def end(self) -> bool:
        """Close the active session. Returns False if there was none."""
        self.active_quiz = None
        if self.active is None:
            return False
        self.active.close()
        logger.debug(f"Closed session on {self.active.exercise.id}")
        self.active = None
        return True

    def _on_effect(self, effect: SessionEffect) -> None:
        if not isinstance(effect, ExerciseCompleted):
            return

        if self.active_quiz is not None:
            item, self.active_quiz = self.active_quiz, None
            passed = effect.accuracy >= QUIZ_PASS_ACCURACY
            self.last_recorded = self.tracker.complete_quiz(item, passed)
            outcome = "passed" if passed else "failed"
            logger.info(f"Quiz {item.id} {outcome} ({effect.accuracy:.0%})")
            return

        self.last_recorded = self.tracker.record_completion(
            effect.exercise_id, effect.accuracy, effect.key
        )
