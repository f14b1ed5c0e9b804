"""
Interval calculator - diatonic size plus quality.

An interval is measured on the staff (size: 1 = unison, 2 = second, ...)
and in semitones; the quality (perfect, major, minor, augmented,
diminished) falls out of comparing the two.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .key import Key
    from .pitch import Pitch


class IntervalQuality(str, Enum):
    """Interval quality, valued by its one-letter abbreviation."""

    PERFECT = "P"
    MAJOR = "M"
    MINOR = "m"
    AUGMENTED = "A"
    DIMINISHED = "d"


# Simple sizes that take perfect/augmented/diminished
_PERFECT_SIZES: dict[int, int] = {1: 0, 4: 5, 5: 7}

# Simple sizes that take major/minor (value is the major form)
_MAJOR_SIZES: dict[int, int] = {2: 2, 3: 4, 6: 9, 7: 11}


def simple_size(size: int) -> int:
    """Reduce a compound size to 1-7 (an octave reduces to 1)."""
    return ((size - 1) % 7) + 1


def _nearest_offset(semitones: int, reference: int) -> int:
    """Signed distance from reference within the octave, in -6..5."""
    return ((semitones - reference + 6) % 12) - 6


def _quality(size: int, semitones: int) -> IntervalQuality:
    reduced = simple_size(size)
    semis = semitones % 12

    if reduced in _PERFECT_SIZES:
        offset = _nearest_offset(semis, _PERFECT_SIZES[reduced])
        if offset == 0:
            return IntervalQuality.PERFECT
        return IntervalQuality.AUGMENTED if offset > 0 else IntervalQuality.DIMINISHED

    offset = _nearest_offset(semis, _MAJOR_SIZES[reduced])
    if offset == 0:
        return IntervalQuality.MAJOR
    if offset == -1:
        return IntervalQuality.MINOR
    return IntervalQuality.AUGMENTED if offset > 0 else IntervalQuality.DIMINISHED


@dataclass(frozen=True)
class Interval:
    """
    Distance between two notated pitches.

    ``semitones`` is signed (upper minus lower); ``size`` and ``quality``
    describe the absolute distance, so an upper pitch that sits below the
    lower one still gets a sensible name.

    Immutable and hashable.
    """

    semitones: int
    quality: IntervalQuality
    size: int

    @classmethod
    def between(cls, lower: Pitch, upper: Pitch, key: Key | None = None) -> Interval:
        """
        Calculate the interval from one pitch to another.

        Args:
            lower: Reference pitch (the bass in counterpoint)
            upper: Second pitch
            key: Optional key whose signature applies to unmarked pitches

        Returns:
            The interval with signed semitones and absolute size/quality
        """
        semitones = upper.chromatic_value(key) - lower.chromatic_value(key)
        staff_distance = upper.staff_position - lower.staff_position
        size = abs(staff_distance) + 1

        # Measure quality on the absolute distance
        span = semitones if staff_distance >= 0 else -semitones
        return cls(semitones, _quality(size, span), size)

    @property
    def simple_size(self) -> int:
        """Size reduced to a single octave (1-7)."""
        return simple_size(self.size)

    @property
    def is_compound(self) -> bool:
        return self.size > 8

    @property
    def is_consonant(self) -> bool:
        """
        Consonant in first-species counterpoint.

        Perfect unisons, fifths and octaves plus major/minor thirds and
        sixths. Seconds, fourths, sevenths and anything augmented or
        diminished are dissonant.
        """
        reduced = self.simple_size
        if reduced in (1, 5):
            return self.quality == IntervalQuality.PERFECT
        if reduced in (3, 6):
            return self.quality in (IntervalQuality.MAJOR, IntervalQuality.MINOR)
        return False

    @property
    def display_name(self) -> str:
        """Quality letter plus size, e.g. 'P5', 'M3', 'P11'."""
        return f"{self.quality.value}{self.size}"

    @property
    def simple_name(self) -> str:
        """Display name of the octave-reduced interval, e.g. 'P4' for 'P11'."""
        reduced = self.simple_size
        if reduced == 1 and self.size > 1:
            return f"{self.quality.value}8"
        return f"{self.quality.value}{reduced}"

    def __str__(self) -> str:
        return self.display_name
