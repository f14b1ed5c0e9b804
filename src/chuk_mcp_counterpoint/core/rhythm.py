"""
Rhythm primitives - NoteDuration, Note and Voice.

Time is measured in beats (quarter note = 1 beat) and kept as Fraction
for exact representation. First-species content is whole notes only,
but the other durations are available for imported material.
"""

from __future__ import annotations

import uuid
from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass, field, replace
from enum import Enum
from fractions import Fraction

from .pitch import Pitch

_BEATS: dict[str, Fraction] = {
    "whole": Fraction(4),
    "half": Fraction(2),
    "quarter": Fraction(1),
    "eighth": Fraction(1, 2),
}


class NoteDuration(str, Enum):
    """The fixed set of note lengths."""

    WHOLE = "whole"
    HALF = "half"
    QUARTER = "quarter"
    EIGHTH = "eighth"

    @property
    def beats(self) -> Fraction:
        """Length in beats."""
        return _BEATS[self.value]

    @classmethod
    def from_beats(cls, beats: Fraction | float) -> NoteDuration:
        """
        Snap a beat length to the nearest duration at or below it.

        Lengths of four beats or more are whole notes; anything shorter
        than a quarter is an eighth.
        """
        if beats >= 4:
            return cls.WHOLE
        if beats >= 2:
            return cls.HALF
        if beats >= 1:
            return cls.QUARTER
        return cls.EIGHTH


def _new_id() -> str:
    return uuid.uuid4().hex


@dataclass(frozen=True)
class Note:
    """
    A pitch held for a duration, starting at a beat offset in its voice.

    The id survives transposition so a transposed note can be traced back
    to its source.
    """

    pitch: Pitch
    duration: NoteDuration = NoteDuration.WHOLE
    beat_position: Fraction = Fraction(0)
    id: str = field(default_factory=_new_id)

    def __post_init__(self) -> None:
        if self.beat_position < 0:
            raise ValueError(f"Beat position must be non-negative, got {self.beat_position}")
        if not isinstance(self.beat_position, Fraction):
            object.__setattr__(self, "beat_position", Fraction(self.beat_position))

    @property
    def end_beat(self) -> Fraction:
        return self.beat_position + self.duration.beats

    def with_pitch(self, pitch: Pitch) -> Note:
        """Same note (id, timing) with a different pitch."""
        return replace(self, pitch=pitch)


@dataclass(frozen=True)
class Voice:
    """
    A melodic line: notes ordered by beat position.

    Voices are owned by a single exercise and never shared.
    """

    notes: tuple[Note, ...] = ()

    def __post_init__(self) -> None:
        if not isinstance(self.notes, tuple):
            object.__setattr__(self, "notes", tuple(self.notes))
        for earlier, later in zip(self.notes, self.notes[1:]):
            if later.beat_position < earlier.beat_position:
                raise ValueError(
                    f"Notes must be ordered by beat position "
                    f"({later.beat_position} after {earlier.beat_position})"
                )

    @property
    def duration(self) -> Fraction:
        """Total length in beats (sum of the note durations)."""
        return sum((note.duration.beats for note in self.notes), Fraction(0))

    @property
    def pitches(self) -> list[Pitch]:
        return [note.pitch for note in self.notes]

    def with_notes(self, notes: Iterable[Note]) -> Voice:
        return Voice(tuple(notes))

    @classmethod
    def from_pitches(
        cls,
        pitches: Sequence[Pitch | str],
        duration: NoteDuration = NoteDuration.WHOLE,
    ) -> Voice:
        """
        Build a 1:1 line of back-to-back notes.

        Args:
            pitches: Pitches or pitch strings like 'C4', 'F#3'
            duration: Length of every note (default whole)

        Returns:
            Voice with notes at 0, d, 2d, ... beats
        """
        notes = []
        for i, pitch in enumerate(pitches):
            if isinstance(pitch, str):
                pitch = Pitch.parse(pitch)
            notes.append(Note(pitch, duration, duration.beats * i))
        return cls(tuple(notes))

    def __len__(self) -> int:
        return len(self.notes)

    def __iter__(self) -> Iterator[Note]:
        return iter(self.notes)

    def __getitem__(self, index: int) -> Note:
        return self.notes[index]
