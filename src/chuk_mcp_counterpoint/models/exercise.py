"""
Exercise model - a bass line with one or more soprano solutions.

Exercises are immutable once built. The authored key and notes are the
canonical source; every other key is derived at runtime by transposition.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from fractions import Fraction
from typing import Any

from pydantic import BaseModel, Field

from chuk_mcp_counterpoint.core.key import Key
from chuk_mcp_counterpoint.core.pitch import Pitch
from chuk_mcp_counterpoint.core.rhythm import Note, NoteDuration, Voice


class Species(str, Enum):
    """Counterpoint species. Only first species has content."""

    FIRST = "1:1"
    SECOND = "2:1"
    THIRD = "3:1"
    FOURTH = "syncopated"
    FIFTH = "florid"


@dataclass(frozen=True)
class Exercise:
    """
    A counterpoint exercise.

    The bass is given; the sopranos are the known solutions the user
    recalls. The first soprano is the one practice is scored against.
    """

    id: str
    name: str
    bassline_id: str
    key: Key
    bass: Voice
    sopranos: tuple[Voice, ...]
    pattern_name: str = ""
    species: Species = Species.FIRST

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("Exercise id must not be empty")
        if not isinstance(self.sopranos, tuple):
            object.__setattr__(self, "sopranos", tuple(self.sopranos))
        if not self.sopranos:
            raise ValueError(f"Exercise '{self.id}' needs at least one soprano solution")
        for soprano in self.sopranos:
            if len(soprano) != len(self.bass):
                raise ValueError(
                    f"Exercise '{self.id}': soprano has {len(soprano)} notes, "
                    f"bass has {len(self.bass)}"
                )

    @property
    def primary_soprano(self) -> Voice:
        """The solution practice is scored against."""
        return self.sopranos[0]

    @property
    def note_count(self) -> int:
        """Number of notes the user has to place."""
        return len(self.primary_soprano)

    def to_dict(self) -> dict[str, Any]:
        """
        Convert to a YAML-friendly dict.

        Whole-note 1:1 voices are written as plain pitch strings;
        anything else keeps explicit timing.
        """
        return {
            "schema": "exercise/v1",
            "id": self.id,
            "name": self.name,
            "bassline": self.bassline_id,
            "species": self.species.value,
            "key": f"{self.key.short_name}_{self.key.mode.value}",
            "pattern": self.pattern_name,
            "bass": _voice_to_data(self.bass),
            "sopranos": [_voice_to_data(v) for v in self.sopranos],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any], defaults: dict[str, Any] | None = None) -> Exercise:
        """
        Create an Exercise from a YAML-parsed dict.

        Args:
            data: Exercise fields
            defaults: Fallback fields shared by a bassline file (key, bass, bassline)

        Returns:
            The constructed Exercise
        """
        merged = {**(defaults or {}), **data}
        return cls(
            id=merged["id"],
            name=merged.get("name", merged["id"]),
            bassline_id=merged.get("bassline", ""),
            key=Key.parse(merged.get("key", "C_major")),
            bass=_voice_from_data(merged["bass"]),
            sopranos=tuple(_voice_from_data(v) for v in merged["sopranos"]),
            pattern_name=merged.get("pattern", ""),
            species=Species(merged.get("species", Species.FIRST.value)),
        )


class Bassline(BaseModel):
    """
    Lightweight bassline metadata for listing/discovery.

    Groups the exercises that share one bass line.
    """

    id: str = Field(..., description="Bassline identifier")
    name: str = Field(..., description="Display name")
    description: str = Field("", description="Human-readable description")
    scale_degrees: list[int] = Field(default_factory=list, description="Bass scale degrees")

    model_config = {"frozen": True}


def _is_plain_line(voice: Voice) -> bool:
    return all(
        note.duration == NoteDuration.WHOLE and note.beat_position == 4 * i
        for i, note in enumerate(voice)
    )


def _voice_to_data(voice: Voice) -> list[Any]:
    if _is_plain_line(voice):
        return [str(note.pitch) for note in voice]
    return [
        {
            "pitch": str(note.pitch),
            "duration": note.duration.value,
            "beat": str(note.beat_position),
        }
        for note in voice
    ]


def _voice_from_data(data: list[Any]) -> Voice:
    if all(isinstance(item, str) for item in data):
        return Voice.from_pitches(data)
    notes = []
    for item in data:
        notes.append(
            Note(
                Pitch.parse(item["pitch"]),
                NoteDuration(item.get("duration", "whole")),
                Fraction(str(item.get("beat", 0))),
            )
        )
    return Voice(tuple(notes))
