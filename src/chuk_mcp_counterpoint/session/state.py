"""
Session state types - phases, placed notes and effect descriptors.

Note display state is a tagged variant: ``Incorrect`` carries the interval
label computed when the note was placed, so nothing is recomputed at
render time. Session operations return effect descriptors describing what
changed; the surrounding UI reacts to them however it likes.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Any, Literal

from chuk_mcp_counterpoint.core.key import Key
from chuk_mcp_counterpoint.core.pitch import Pitch


class ExercisePhase(str, Enum):
    """Where an attempt is."""

    STUDY = "study"  # Everything visible
    PRACTICE = "practice"  # Soprano hidden, user places notes
    REVIEW = "review"  # Complete, showing results


# Note states


@dataclass(frozen=True)
class Normal:
    tag: Literal["normal"] = "normal"


@dataclass(frozen=True)
class Correct:
    tag: Literal["correct"] = "correct"


@dataclass(frozen=True)
class Incorrect:
    """Wrong note, labelled with its interval above the bass."""

    interval: str
    tag: Literal["incorrect"] = "incorrect"


@dataclass(frozen=True)
class Fading:
    tag: Literal["fading"] = "fading"


NoteState = Normal | Correct | Incorrect | Fading


@dataclass
class PlacedNote:
    """A note the user put on the staff during practice."""

    pitch: Pitch
    beat_index: int
    state: NoteState = field(default_factory=Normal)
    id: str = field(default_factory=lambda: uuid.uuid4().hex)

    @property
    def is_correct(self) -> bool:
        return isinstance(self.state, Correct)

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {
            "id": self.id,
            "pitch": str(self.pitch),
            "beat_index": self.beat_index,
            "state": self.state.tag,
        }
        if isinstance(self.state, Incorrect):
            d["interval"] = self.state.interval
        return d


# Effects


@dataclass(frozen=True)
class PhaseChanged:
    phase: ExercisePhase


@dataclass(frozen=True)
class NotePlaced:
    note_id: str
    beat_index: int
    correct: bool
    interval: str | None = None


@dataclass(frozen=True)
class FadeScheduled:
    note_id: str
    delay: float


@dataclass(frozen=True)
class NoteFaded:
    note_id: str


@dataclass(frozen=True)
class NoteRemoved:
    note_id: str


@dataclass(frozen=True)
class HintShown:
    duration: float


@dataclass(frozen=True)
class HintHidden:
    pass


@dataclass(frozen=True)
class ExerciseCompleted:
    """An attempt finished; the progress tracker records it."""

    exercise_id: str
    accuracy: float
    key: Key


SessionEffect = (
    PhaseChanged
    | NotePlaced
    | FadeScheduled
    | NoteFaded
    | NoteRemoved
    | HintShown
    | HintHidden
    | ExerciseCompleted
)


def effect_to_dict(effect: SessionEffect) -> dict[str, Any]:
    """Plain-data form of an effect, tagged with its type name."""
    data: dict[str, Any] = {"type": type(effect).__name__}
    for f in fields(effect):
        value = getattr(effect, f.name)
        if isinstance(value, Key):
            value = value.short_name
        elif isinstance(value, Enum):
            value = value.value
        data[f.name] = value
    return data
