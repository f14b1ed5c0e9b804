"""
Interval modules - single-note drills built above one bass note.

Each module groups a family of intervals (perfect consonances, imperfect
consonances, dissonances). Every interval becomes a one-note exercise over
middle C; advanced variants carry an explicit accidental (C-E♭, C-F♯, ...).
"""

from __future__ import annotations

from dataclasses import dataclass

from chuk_mcp_counterpoint.core.key import Key
from chuk_mcp_counterpoint.core.pitch import Accidental, NoteName, Pitch
from chuk_mcp_counterpoint.core.rhythm import Voice
from chuk_mcp_counterpoint.models.exercise import Exercise

BASS_PITCH = Pitch(NoteName.C, 4)


@dataclass(frozen=True)
class IntervalSpec:
    """One drill: a diatonic size above the bass, optionally altered."""

    id: str
    display_name: str
    size: int
    accidental: Accidental | None = None
    is_advanced: bool = False


@dataclass(frozen=True)
class IntervalModule:
    """A named family of interval drills."""

    id: str
    name: str
    description: str
    intervals: tuple[IntervalSpec, ...]

    def exercises(self) -> list[Exercise]:
        """Build one exercise per interval, in declaration order."""
        return [_build_exercise(self, spec) for spec in self.intervals]


PERFECT = IntervalModule(
    id="intervals_perfect",
    name="Perfect Consonances",
    description="P1, P5, P8",
    intervals=(
        IntervalSpec("p1", "P1", 1),
        IntervalSpec("p5", "P5", 5),
        IntervalSpec("p8", "P8", 8),
        IntervalSpec("a1", "A1", 1, Accidental.SHARP, is_advanced=True),
    ),
)

IMPERFECT = IntervalModule(
    id="intervals_imperfect",
    name="Imperfect Consonances",
    description="M3, M6",
    intervals=(
        IntervalSpec("m3", "M3", 3),
        IntervalSpec("m6", "M6", 6),
        IntervalSpec("m3b", "m3", 3, Accidental.FLAT, is_advanced=True),
        IntervalSpec("m6b", "m6", 6, Accidental.FLAT, is_advanced=True),
    ),
)

DISSONANT = IntervalModule(
    id="intervals_dissonant",
    name="Dissonances",
    description="M2, P4, M7",
    intervals=(
        IntervalSpec("m2", "M2", 2),
        IntervalSpec("p4", "P4", 4),
        IntervalSpec("m7", "M7", 7),
        IntervalSpec("m2b", "m2", 2, Accidental.FLAT, is_advanced=True),
        IntervalSpec("a4", "A4", 4, Accidental.SHARP, is_advanced=True),
        IntervalSpec("m7b", "m7", 7, Accidental.FLAT, is_advanced=True),
    ),
)

INTERVAL_MODULES: tuple[IntervalModule, ...] = (PERFECT, IMPERFECT, DISSONANT)


def interval_exercises() -> list[Exercise]:
    """All interval drills across every module."""
    exercises: list[Exercise] = []
    for module in INTERVAL_MODULES:
        exercises.extend(module.exercises())
    return exercises


def _build_exercise(module: IntervalModule, spec: IntervalSpec) -> Exercise:
    base = Pitch.from_staff_position(BASS_PITCH.staff_position + spec.size - 1)
    soprano = base.with_accidental(spec.accidental)

    if spec.is_advanced:
        exercise_id = f"{module.id}_adv_{spec.id}"
        name = f"Advanced {spec.display_name}"
    else:
        exercise_id = f"{module.id}_{spec.id}"
        name = f"{module.name} {spec.display_name}"

    return Exercise(
        id=exercise_id,
        name=name,
        bassline_id=module.id,
        key=Key.C_MAJOR,
        bass=Voice.from_pitches([BASS_PITCH]),
        sopranos=(Voice.from_pitches([soprano]),),
        pattern_name=spec.display_name,
    )
