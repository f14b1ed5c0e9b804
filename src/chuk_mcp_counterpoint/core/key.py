"""
Key primitives - Mode and Key.

A key is a tonic spelling plus a mode. Its signature is looked up from a
fixed table of (tonic, accidental, mode) spellings rather than computed,
so enharmonic spellings are independent entries.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import ClassVar

from .pitch import Accidental, NoteName

logger = logging.getLogger(__name__)

SHARP_ORDER: tuple[NoteName, ...] = (
    NoteName.F,
    NoteName.C,
    NoteName.G,
    NoteName.D,
    NoteName.A,
    NoteName.E,
    NoteName.B,
)
FLAT_ORDER: tuple[NoteName, ...] = tuple(reversed(SHARP_ORDER))


class Mode(str, Enum):
    """Key mode."""

    MAJOR = "major"
    MINOR = "minor"


_N = Accidental.NATURAL
_S = Accidental.SHARP
_F = Accidental.FLAT

# Signed accidental count per spelling. Each enharmonic spelling is its own
# entry with its conventional sign (F# major = +6, Gb major = -6).
_FIFTHS_TABLE: dict[tuple[NoteName, Accidental, Mode], int] = {
    # Major keys
    (NoteName.C, _N, Mode.MAJOR): 0,
    (NoteName.G, _N, Mode.MAJOR): 1,
    (NoteName.D, _N, Mode.MAJOR): 2,
    (NoteName.A, _N, Mode.MAJOR): 3,
    (NoteName.E, _N, Mode.MAJOR): 4,
    (NoteName.B, _N, Mode.MAJOR): 5,
    (NoteName.F, _S, Mode.MAJOR): 6,
    (NoteName.C, _S, Mode.MAJOR): 7,
    (NoteName.F, _N, Mode.MAJOR): -1,
    (NoteName.B, _F, Mode.MAJOR): -2,
    (NoteName.E, _F, Mode.MAJOR): -3,
    (NoteName.A, _F, Mode.MAJOR): -4,
    (NoteName.D, _F, Mode.MAJOR): -5,
    (NoteName.G, _F, Mode.MAJOR): -6,
    (NoteName.C, _F, Mode.MAJOR): -7,
    # Minor keys
    (NoteName.A, _N, Mode.MINOR): 0,
    (NoteName.E, _N, Mode.MINOR): 1,
    (NoteName.B, _N, Mode.MINOR): 2,
    (NoteName.F, _S, Mode.MINOR): 3,
    (NoteName.C, _S, Mode.MINOR): 4,
    (NoteName.G, _S, Mode.MINOR): 5,
    (NoteName.D, _N, Mode.MINOR): -1,
    (NoteName.G, _N, Mode.MINOR): -2,
    (NoteName.C, _N, Mode.MINOR): -3,
    (NoteName.F, _N, Mode.MINOR): -4,
    (NoteName.B, _F, Mode.MINOR): -5,
    (NoteName.E, _F, Mode.MINOR): -6,
}


@dataclass(frozen=True)
class Key:
    """
    A tonic spelling plus a mode.

    This is the context for resolving the accidentals a note inherits
    from the key signature.

    Examples:
        Key(NoteName.C) = C major
        Key(NoteName.B, Accidental.FLAT) = B♭ major
        Key(NoteName.F, Accidental.SHARP, Mode.MINOR) = F♯ minor
    """

    tonic: NoteName
    accidental: Accidental = Accidental.NATURAL
    mode: Mode = Mode.MAJOR

    C_MAJOR: ClassVar[Key]
    CIRCLE_OF_FOURTHS: ClassVar[tuple[Key, ...]]
    ENHARMONIC_PAIRS: ClassVar[tuple[tuple[Key, Key], ...]]

    @property
    def fifths(self) -> int:
        """
        Signed count of sharps (positive) or flats (negative).

        Unknown spellings fall back to 0 (no accidentals) and are logged
        rather than raised; exercise content is trusted.
        """
        entry = (self.tonic, self.accidental, self.mode)
        if entry not in _FIFTHS_TABLE:
            logger.warning(f"Unrecognised key spelling {self.display_name}; using empty signature")
            return 0
        return _FIFTHS_TABLE[entry]

    @property
    def is_known(self) -> bool:
        """Whether this spelling has a signature table entry."""
        return (self.tonic, self.accidental, self.mode) in _FIFTHS_TABLE

    def accidental_for(self, name: NoteName) -> Accidental:
        """Key-signature accidental for a diatonic letter."""
        fifths = self.fifths
        if fifths > 0:
            return Accidental.SHARP if name in SHARP_ORDER[:fifths] else Accidental.NATURAL
        if fifths < 0:
            return Accidental.FLAT if name in FLAT_ORDER[:-fifths] else Accidental.NATURAL
        return Accidental.NATURAL

    def signature(self) -> list[tuple[NoteName, Accidental]]:
        """
        Accidentals to draw for this key, in signature order.

        Returns an empty list for keys with no sharps or flats.
        """
        fifths = self.fifths
        if fifths > 0:
            return [(name, Accidental.SHARP) for name in SHARP_ORDER[:fifths]]
        if fifths < 0:
            return [(name, Accidental.FLAT) for name in FLAT_ORDER[:-fifths]]
        return []

    @property
    def tonic_semitone(self) -> int:
        """Pitch class of the tonic (0-11)."""
        return (self.tonic.base_semitone + self.accidental.semitone_offset) % 12

    @property
    def short_name(self) -> str:
        """Short plain-text name like 'C' or 'Bb'."""
        return f"{self.tonic.value}{self.accidental.ascii}"

    @property
    def identifier(self) -> str:
        """Token recorded in a progress record's completed keys."""
        if self.mode == Mode.MINOR:
            return f"{self.short_name}m"
        return self.short_name

    @property
    def display_name(self) -> str:
        """Display name like 'C major' or 'B♭ major'."""
        return f"{self.tonic.value}{self.accidental.symbol} {self.mode.value}"

    def enharmonic_equivalent(self) -> Key | None:
        """The other spelling of a 6- or 7-accidental major key, if any."""
        for first, second in Key.ENHARMONIC_PAIRS:
            if self == first:
                return second
            if self == second:
                return first
        return None

    def __str__(self) -> str:
        return self.display_name

    def __repr__(self) -> str:
        return f"Key({self.short_name}, {self.mode.value})"

    @classmethod
    def from_fifths(cls, fifths: int, mode: Mode = Mode.MAJOR) -> Key:
        """
        The key with a signed number of signature accidentals.

        Unknown counts fall back to C major (or A minor) with a warning.
        """
        for (tonic, accidental, key_mode), count in _FIFTHS_TABLE.items():
            if key_mode == mode and count == fifths:
                return cls(tonic, accidental, mode)
        logger.warning(f"No {mode.value} key with {fifths} fifths, using the neutral key")
        return cls(NoteName.C) if mode == Mode.MAJOR else cls(NoteName.A, mode=Mode.MINOR)

    @classmethod
    def parse(cls, name: str) -> Key:
        """
        Parse a key from 'Bb', 'Bb_major', 'F#_minor' or an identifier like 'Am'.

        Args:
            name: Key name, optionally with an underscore-separated mode

        Returns:
            Parsed Key object
        """
        text = name.strip()
        if not text:
            raise ValueError("Empty key name")

        mode = Mode.MAJOR
        if "_" in text:
            text, mode_str = text.split("_", 1)
            try:
                mode = Mode(mode_str.lower())
            except ValueError:
                raise ValueError(f"Unknown mode: {mode_str}") from None
        elif len(text) > 1 and text.endswith("m"):
            text = text[:-1]
            mode = Mode.MINOR

        letter, mark = text[0].upper(), text[1:]
        if letter not in NoteName.__members__:
            raise ValueError(f"Invalid key format: {name}")
        return cls(NoteName(letter), Accidental.parse(mark), mode)


Key.C_MAJOR = Key(NoteName.C)

# C - F - B♭ - E♭ - A♭ - D♭ - G♭ - B - E - A - D - G
Key.CIRCLE_OF_FOURTHS = (
    Key(NoteName.C),
    Key(NoteName.F),
    Key(NoteName.B, Accidental.FLAT),
    Key(NoteName.E, Accidental.FLAT),
    Key(NoteName.A, Accidental.FLAT),
    Key(NoteName.D, Accidental.FLAT),
    Key(NoteName.G, Accidental.FLAT),
    Key(NoteName.B),
    Key(NoteName.E),
    Key(NoteName.A),
    Key(NoteName.D),
    Key(NoteName.G),
)

Key.ENHARMONIC_PAIRS = (
    (Key(NoteName.G, Accidental.FLAT), Key(NoteName.F, Accidental.SHARP)),
    (Key(NoteName.D, Accidental.FLAT), Key(NoteName.C, Accidental.SHARP)),
)
