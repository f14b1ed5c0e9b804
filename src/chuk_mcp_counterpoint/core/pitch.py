"""
Pitch primitives - NoteName, Accidental and Pitch.

These are the foundational types for all pitch-related operations.
A Pitch is a letter, an octave and an optional explicit accidental.
Staff position is diatonic (lines and spaces) and ignores the accidental;
chromatic value is the MIDI-equivalent semitone number (C4 = 60).
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from chuk_mcp_counterpoint.core.key import Key

# Semitones above C for each natural letter
_BASE_SEMITONES: dict[str, int] = {
    "C": 0,
    "D": 2,
    "E": 4,
    "F": 5,
    "G": 7,
    "A": 9,
    "B": 11,
}

_LETTERS = "CDEFGAB"

_PITCH_RE = re.compile(r"^\s*([A-Ga-g])([#♯b♭n♮]?)(-?\d+)\s*$")


class NoteName(str, Enum):
    """
    The seven diatonic letters.

    Letter order matters: the index is the step count above C
    within one octave and drives the staff position.
    """

    C = "C"
    D = "D"
    E = "E"
    F = "F"
    G = "G"
    A = "A"
    B = "B"

    @property
    def index(self) -> int:
        """Diatonic index above C (C=0 .. B=6)."""
        return _LETTERS.index(self.value)

    @property
    def base_semitone(self) -> int:
        """Semitones above C for the natural letter."""
        return _BASE_SEMITONES[self.value]

    @classmethod
    def from_index(cls, index: int) -> NoteName:
        """Letter at a diatonic index, wrapping around the 7-letter cycle."""
        return cls(_LETTERS[index % 7])


class Accidental(str, Enum):
    """Accidental applied to a letter."""

    NATURAL = "natural"
    SHARP = "sharp"
    FLAT = "flat"

    @property
    def semitone_offset(self) -> int:
        """Semitone shift relative to the natural letter."""
        return {"natural": 0, "sharp": 1, "flat": -1}[self.value]

    @property
    def symbol(self) -> str:
        """Display symbol (empty for natural)."""
        return {"natural": "", "sharp": "♯", "flat": "♭"}[self.value]

    @property
    def ascii(self) -> str:
        """Plain-text spelling used in identifiers and pitch strings."""
        return {"natural": "", "sharp": "#", "flat": "b"}[self.value]

    @classmethod
    def parse(cls, text: str) -> Accidental:
        """Parse '#', 'b', 'n', the unicode symbols, or the enum value."""
        mapping = {
            "": cls.NATURAL,
            "n": cls.NATURAL,
            "♮": cls.NATURAL,
            "#": cls.SHARP,
            "♯": cls.SHARP,
            "b": cls.FLAT,
            "♭": cls.FLAT,
        }
        if text in mapping:
            return mapping[text]
        try:
            return cls(text.lower())
        except ValueError:
            raise ValueError(f"Unknown accidental: {text!r}") from None

    @classmethod
    def from_alter(cls, alter: int) -> Accidental:
        """Map a semitone alteration (-1, 0, 1) to an accidental."""
        if alter == 1:
            return cls.SHARP
        if alter == -1:
            return cls.FLAT
        if alter == 0:
            return cls.NATURAL
        raise ValueError(f"Unsupported alteration: {alter}")


@dataclass(frozen=True)
class Pitch:
    """
    A notated pitch: letter, octave and optional explicit accidental.

    ``accidental`` is ``None`` when the note carries no accidental of its own
    and therefore follows the key signature. An explicit accidental
    (including an explicit natural) overrides the key.

    Immutable and hashable.

    Examples:
        Pitch(NoteName.C, 4) = middle C, staff position 0
        Pitch(NoteName.F, 4, Accidental.SHARP) = F#4
    """

    name: NoteName
    octave: int
    accidental: Accidental | None = None

    @property
    def staff_position(self) -> int:
        """Diatonic line/space index relative to middle C (C4 = 0)."""
        return self.name.index + (self.octave - 4) * 7

    @classmethod
    def from_staff_position(cls, position: int) -> Pitch:
        """
        Natural-letter pitch at a diatonic position.

        Inverse of ``staff_position`` for pitches without an accidental.
        Floor division keeps negative positions in the right octave.
        """
        octave_offset, index = divmod(position, 7)
        return cls(NoteName.from_index(index), 4 + octave_offset)

    def chromatic_value(self, key: Key | None = None) -> int:
        """
        Absolute semitone number (MIDI-equivalent, C4 = 60).

        Without a key only the pitch's own accidental applies. With a key,
        a pitch with no explicit accidental takes the key's implied one.
        """
        accidental = self.accidental
        if accidental is None and key is not None:
            accidental = key.accidental_for(self.name)
        offset = accidental.semitone_offset if accidental is not None else 0
        return self.name.base_semitone + (self.octave + 1) * 12 + offset

    @property
    def midi_note(self) -> int:
        """MIDI note number ignoring any key context."""
        return self.chromatic_value()

    def position_equal(self, other: Pitch) -> bool:
        """Same line or space on the staff (accidentals ignored)."""
        return self.staff_position == other.staff_position and self.octave == other.octave

    def matches(self, other: Pitch, key: Key | None = None) -> bool:
        """
        Tolerant pitch equality used for correctness checks.

        Two pitches match when they sit on the same staff position and
        sound the same under the key: a plain F entered in G major matches
        an expected F that the key sharpens, and an explicit F# matches too.
        """
        return self.position_equal(other) and self.chromatic_value(key) == other.chromatic_value(key)

    def with_accidental(self, accidental: Accidental | None) -> Pitch:
        """Return a copy carrying a different explicit accidental."""
        return Pitch(self.name, self.octave, accidental)

    def transpose_steps(self, steps: int) -> Pitch:
        """Move by diatonic steps, keeping any explicit accidental."""
        moved = Pitch.from_staff_position(self.staff_position + steps)
        return moved.with_accidental(self.accidental)

    def spell(self, unicode: bool = True) -> str:
        """Human-readable name like 'B♭3' (or 'Bb3' with unicode=False)."""
        if self.accidental is None:
            mark = ""
        elif self.accidental == Accidental.NATURAL:
            mark = "♮" if unicode else "n"
        else:
            mark = self.accidental.symbol if unicode else self.accidental.ascii
        return f"{self.name.value}{mark}{self.octave}"

    @classmethod
    def parse(cls, text: str) -> Pitch:
        """
        Parse a pitch string like 'C4', 'F#3', 'Bb2' or 'En4'.

        'n' marks an explicit natural. A missing accidental leaves the
        pitch following the key signature.
        """
        match = _PITCH_RE.match(text)
        if match is None:
            raise ValueError(f"Invalid pitch: {text!r}")
        letter, mark, octave = match.groups()
        accidental = Accidental.parse(mark) if mark else None
        return cls(NoteName(letter.upper()), int(octave), accidental)

    def __str__(self) -> str:
        return self.spell(unicode=False)

    def __repr__(self) -> str:
        if self.accidental is None:
            return f"Pitch({self.name.value}, {self.octave})"
        return f"Pitch({self.name.value}, {self.octave}, {self.accidental.value})"
