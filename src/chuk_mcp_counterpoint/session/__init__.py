"""
Session - the study / practice / review state machine.

This module provides:
- ExerciseSession: One attempt at one exercise, with timed fades
- SessionManager: Owns the active session, forwards completions
- TaskRegistry / schedulers: Cancellable deferred callbacks
- State types: ExercisePhase, PlacedNote, note states and effects
"""

from chuk_mcp_counterpoint.session.exercise_session import ExerciseSession, figure_for
from chuk_mcp_counterpoint.session.manager import SessionManager
from chuk_mcp_counterpoint.session.state import (
    Correct,
    ExerciseCompleted,
    ExercisePhase,
    Fading,
    FadeScheduled,
    HintHidden,
    HintShown,
    Incorrect,
    Normal,
    NoteFaded,
    NotePlaced,
    NoteRemoved,
    NoteState,
    PhaseChanged,
    PlacedNote,
    SessionEffect,
    effect_to_dict,
)
from chuk_mcp_counterpoint.session.tasks import (
    AsyncioScheduler,
    ManualScheduler,
    Scheduler,
    TaskRegistry,
)

__all__ = [
    "AsyncioScheduler",
    "Correct",
    "ExerciseCompleted",
    "ExercisePhase",
    "ExerciseSession",
    "Fading",
    "FadeScheduled",
    "HintHidden",
    "HintShown",
    "Incorrect",
    "ManualScheduler",
    "Normal",
    "NoteFaded",
    "NotePlaced",
    "NoteRemoved",
    "NoteState",
    "PhaseChanged",
    "PlacedNote",
    "Scheduler",
    "SessionEffect",
    "SessionManager",
    "TaskRegistry",
    "effect_to_dict",
    "figure_for",
]
