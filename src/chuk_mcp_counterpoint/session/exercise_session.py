"""
Exercise session - the study / practice / review state machine.

A session walks one exercise through:

    study -> practice -> review
                ^          |
                +----------+  (practice again, next key)

In practice the soprano is hidden and the user places notes one beat at
a time. Correct notes stay; incorrect ones are labelled with their
interval above the bass, fade after a delay and are then removed. Once
every beat holds a correct note the session moves to review and emits an
ExerciseCompleted effect for the progress tracker.

Timers live in a TaskRegistry that is flushed on every reset, so a fade
scheduled in one attempt can never touch the next.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from typing import Any

from chuk_mcp_counterpoint.constants import (
    DEFAULT_TEMPO,
    FADE_DELAY,
    HINT_DURATION,
    REMOVAL_DELAY,
    SuccessMessages,
)
from chuk_mcp_counterpoint.core.interval import Interval
from chuk_mcp_counterpoint.core.key import Key
from chuk_mcp_counterpoint.core.pitch import Accidental, NoteName, Pitch
from chuk_mcp_counterpoint.core.rhythm import Note, Voice
from chuk_mcp_counterpoint.core.transpose import transpose_voice
from chuk_mcp_counterpoint.models.exercise import Exercise
from chuk_mcp_counterpoint.playback.events import PlaybackEvent, PlaybackPort, exercise_events
from chuk_mcp_counterpoint.session.state import (
    Correct,
    ExerciseCompleted,
    ExercisePhase,
    Fading,
    FadeScheduled,
    HintHidden,
    HintShown,
    Incorrect,
    NoteFaded,
    NotePlaced,
    NoteRemoved,
    PhaseChanged,
    PlacedNote,
    SessionEffect,
)
from chuk_mcp_counterpoint.session.tasks import Scheduler, TaskRegistry

logger = logging.getLogger(__name__)

_HINT_TASK = "hint"

EffectListener = Callable[[SessionEffect], None]


def figure_for(interval: Interval) -> str:
    """Figured-bass label: simple size, with a unison shown as '8'."""
    size = interval.simple_size
    return "8" if size == 1 else str(size)


class ExerciseSession:
    """
    One user's attempt at one exercise.

    Collaborators are injected: the scheduler that runs fade/hint timers,
    an optional playback port, and an optional listener that receives
    every effect (including those fired later by timers).
    """

    def __init__(
        self,
        exercise: Exercise,
        scheduler: Scheduler,
        playback: PlaybackPort | None = None,
        listener: EffectListener | None = None,
        keys: Sequence[Key] = Key.CIRCLE_OF_FOURTHS,
        tempo: float = DEFAULT_TEMPO,
    ):
        """
        Initialize the session in study phase, in the exercise's own key.

        Args:
            exercise: The exercise to practice
            scheduler: Runs deferred fade/removal/hint callbacks
            playback: Optional audio port
            listener: Optional receiver for every effect
            keys: Transposition cycle (default circle of fourths)
            tempo: Playback tempo in BPM
        """
        self.exercise = exercise
        self.playback = playback
        self.listener = listener
        self.tempo = tempo
        self.tasks = TaskRegistry(scheduler)

        self.available_keys: list[Key] = list(keys)
        self.current_key = exercise.key
        self.transposition_index = (
            self.available_keys.index(exercise.key) if exercise.key in self.available_keys else 0
        )

        self.phase = ExercisePhase.STUDY
        self.show_soprano = True
        self.placed_notes: list[PlacedNote] = []
        self.feedback_message = ""
        self.is_complete = False
        self.accuracy = 0.0
        self.correct_count = 0
        self.total_attempts = 0

        self._bass: Voice = exercise.bass
        self._soprano: Voice = exercise.primary_soprano
        self._transpose()

    # Derived state

    @property
    def transposed_bass(self) -> list[Note]:
        """Bass notes in the current key."""
        return list(self._bass.notes)

    @property
    def transposed_soprano(self) -> list[Note]:
        """Solution notes in the current key."""
        return list(self._soprano.notes)

    @property
    def note_count(self) -> int:
        """Number of notes the user needs to place."""
        return self.exercise.note_count

    @property
    def progress(self) -> float:
        """Placed notes over notes needed (0-1)."""
        if self.note_count == 0:
            return 0.0
        return len(self.placed_notes) / self.note_count

    @property
    def figured_bass(self) -> list[str]:
        """
        Interval figures from bass to soprano, e.g. ['8', '7', '8'].

        Sizes are reduced to a single octave and a unison is written '8'.
        """
        return [
            figure_for(Interval.between(bass.pitch, soprano.pitch, self.current_key))
            for bass, soprano in zip(self._bass, self._soprano)
        ]

    @property
    def key_signature(self) -> list[tuple[NoteName, Accidental]]:
        """Signature accidentals for the current key, in drawing order."""
        return self.current_key.signature()

    def note_at(self, beat_index: int) -> PlacedNote | None:
        for note in self.placed_notes:
            if note.beat_index == beat_index:
                return note
        return None

    # Phase transitions

    def start_study(self) -> list[SessionEffect]:
        """Show everything; clears placed notes."""
        self._reset()
        self.phase = ExercisePhase.STUDY
        self.show_soprano = True
        self.feedback_message = ""
        return self._emit([PhaseChanged(self.phase)])

    def start_practice(self) -> list[SessionEffect]:
        """Hide the soprano and start a fresh attempt."""
        self._reset()
        self.phase = ExercisePhase.PRACTICE
        self.show_soprano = False
        self.correct_count = 0
        self.total_attempts = 0
        self.accuracy = 0.0
        self.feedback_message = SuccessMessages.PRACTICE_STARTED
        return self._emit([PhaseChanged(self.phase)])

    def practice_again(self) -> list[SessionEffect]:
        """Retry the same key from review."""
        return self.start_practice()

    def next_key(self) -> list[SessionEffect]:
        """
        Move forward around the transposition cycle.

        The new key starts straight in practice with the soprano hidden,
        so the line has to be recalled rather than read.
        """
        self.stop_playback()
        self.transposition_index = (self.transposition_index + 1) % len(self.available_keys)
        self._change_key(self.available_keys[self.transposition_index])
        return self.start_practice()

    def previous_key(self) -> list[SessionEffect]:
        """Move back around the transposition cycle, into study."""
        self.stop_playback()
        self.transposition_index = (self.transposition_index - 1) % len(self.available_keys)
        self._change_key(self.available_keys[self.transposition_index])
        return self.start_study()

    def set_key(self, key: Key) -> list[SessionEffect]:
        """
        Jump to a key in the cycle, into study.

        Keys outside the cycle are ignored.
        """
        if key not in self.available_keys:
            logger.debug(f"Ignoring key outside the transposition cycle: {key}")
            return []
        self.stop_playback()
        self.transposition_index = self.available_keys.index(key)
        self._change_key(key)
        return self.start_study()

    def close(self) -> None:
        """End the session, cancelling every pending timer."""
        self.stop_playback()
        self.tasks.cancel_all()

    # Note placement

    def place_note(self, pitch: Pitch, beat_index: int) -> list[SessionEffect]:
        """
        Place a note at a beat.

        Ignored (no effects) outside practice, for an out-of-range beat,
        or where a correct note already stands. Any other note at that
        beat is replaced.

        Args:
            pitch: The pitch entered; with no accidental it follows the key
            beat_index: Which note of the line (0-based)

        Returns:
            Effects of the placement
        """
        if self.phase != ExercisePhase.PRACTICE:
            return []
        if not 0 <= beat_index < self.note_count:
            return []

        existing = self.note_at(beat_index)
        if existing is not None:
            if existing.is_correct:
                return []
            self.tasks.cancel(existing.id)
            self.placed_notes.remove(existing)

        bass_pitch = self._bass[beat_index].pitch if beat_index < len(self._bass) else None
        if self.playback is not None:
            self.playback.play_feedback(pitch, bass_pitch, self.current_key)

        expected = self._soprano[beat_index].pitch
        is_correct = pitch.matches(expected, self.current_key)
        self.total_attempts += 1

        effects: list[SessionEffect] = []
        if is_correct:
            self.correct_count += 1
            placed = PlacedNote(pitch, beat_index, Correct())
            self.feedback_message = SuccessMessages.CORRECT
            effects.append(NotePlaced(placed.id, beat_index, True))
        else:
            label = (
                Interval.between(bass_pitch, pitch, self.current_key).simple_name
                if bass_pitch is not None
                else ""
            )
            placed = PlacedNote(pitch, beat_index, Incorrect(label))
            self.feedback_message = SuccessMessages.INCORRECT.format(interval=label)
            self.tasks.schedule(placed.id, FADE_DELAY, lambda: self._fade(placed.id))
            effects.append(NotePlaced(placed.id, beat_index, False, label))
            effects.append(FadeScheduled(placed.id, FADE_DELAY))

        self.placed_notes.append(placed)
        effects.extend(self._check_completion())
        return self._emit(effects)

    # Hints

    def show_hint(self) -> list[SessionEffect]:
        """
        Reveal the soprano for a moment during practice.

        It hides again after HINT_DURATION unless the session has left
        practice in the meantime.
        """
        if self.phase != ExercisePhase.PRACTICE:
            return []
        self.tasks.cancel(_HINT_TASK)
        self.show_soprano = True
        self.tasks.schedule(_HINT_TASK, HINT_DURATION, self._end_hint)
        return self._emit([HintShown(HINT_DURATION)])

    # Playback

    def playback_events(self, include_soprano: bool | None = None) -> list[PlaybackEvent]:
        """
        Events for the audio layer in the current key.

        The soprano is included when visible unless overridden.
        """
        if include_soprano is None:
            include_soprano = self.show_soprano
        soprano = self._soprano if include_soprano else None
        return exercise_events(self._bass, soprano, self.current_key)

    def play_exercise(self) -> None:
        if self.playback is not None:
            self.playback.play(self.playback_events(), self.tempo)

    def play_bass(self) -> None:
        if self.playback is not None:
            self.playback.play(self.playback_events(include_soprano=False), self.tempo)

    def stop_playback(self) -> None:
        if self.playback is not None:
            self.playback.stop()

    def snapshot(self) -> dict[str, Any]:
        """Current state as plain data for the UI layer."""
        return {
            "exercise_id": self.exercise.id,
            "phase": self.phase.value,
            "key": self.current_key.short_name,
            "key_name": self.current_key.display_name,
            "key_signature": [
                f"{name.value}{accidental.ascii}" for name, accidental in self.key_signature
            ],
            "show_soprano": self.show_soprano,
            "bass": [str(note.pitch) for note in self._bass],
            "soprano": [str(note.pitch) for note in self._soprano] if self.show_soprano else None,
            "figured_bass": self.figured_bass,
            "placed_notes": [note.to_dict() for note in self.placed_notes],
            "feedback": self.feedback_message,
            "progress": self.progress,
            "is_complete": self.is_complete,
            "accuracy": self.accuracy,
            "correct_count": self.correct_count,
            "total_attempts": self.total_attempts,
        }

    # Internals

    def _reset(self) -> None:
        self.tasks.cancel_all()
        self.placed_notes = []
        self.is_complete = False

    def _change_key(self, key: Key) -> None:
        self.current_key = key
        self._transpose()
        logger.debug(f"Session {self.exercise.id} now in {key}")

    def _transpose(self) -> None:
        self._bass = transpose_voice(self.exercise.bass, self.exercise.key, self.current_key)
        self._soprano = transpose_voice(
            self.exercise.primary_soprano, self.exercise.key, self.current_key
        )

    def _check_completion(self) -> list[SessionEffect]:
        correct_positions = {note.beat_index for note in self.placed_notes if note.is_correct}
        if len(correct_positions) != self.note_count:
            return []

        self.phase = ExercisePhase.REVIEW
        self.is_complete = True
        self.accuracy = (
            self.correct_count / self.total_attempts if self.total_attempts > 0 else 1.0
        )
        self.feedback_message = SuccessMessages.COMPLETE.format(percent=int(self.accuracy * 100))
        return [
            PhaseChanged(self.phase),
            ExerciseCompleted(self.exercise.id, self.accuracy, self.current_key),
        ]

    def _fade(self, note_id: str) -> None:
        note = self._find(note_id)
        if note is None:
            logger.debug(f"Fade fired for missing note {note_id}")
            return
        note.state = Fading()
        self.tasks.schedule(note_id, REMOVAL_DELAY, lambda: self._remove(note_id))
        self._emit([NoteFaded(note_id)])

    def _remove(self, note_id: str) -> None:
        note = self._find(note_id)
        if note is None:
            logger.debug(f"Removal fired for missing note {note_id}")
            return
        self.placed_notes.remove(note)
        self._emit([NoteRemoved(note_id)])

    def _end_hint(self) -> None:
        if self.phase != ExercisePhase.PRACTICE:
            return
        self.show_soprano = False
        self._emit([HintHidden()])

    def _find(self, note_id: str) -> PlacedNote | None:
        for note in self.placed_notes:
            if note.id == note_id:
                return note
        return None

    def _emit(self, effects: list[SessionEffect]) -> list[SessionEffect]:
        if self.listener is not None:
            for effect in effects:
                self.listener(effect)
        return effects
