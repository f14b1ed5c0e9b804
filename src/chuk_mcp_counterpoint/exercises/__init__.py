"""
Exercises - content loading.

This module provides:
- ExerciseRegistry: Library + project discovery with caching
- Interval modules: Generated single-note interval drills
- MusicXMLImporter: Two-voice grand-staff import
"""

from chuk_mcp_counterpoint.exercises.intervals import (
    INTERVAL_MODULES,
    IntervalModule,
    IntervalSpec,
    interval_exercises,
)
from chuk_mcp_counterpoint.exercises.musicxml import MusicXMLImporter, ids_from_filename
from chuk_mcp_counterpoint.exercises.registry import LIBRARY_PATH, ExerciseRegistry

__all__ = [
    "INTERVAL_MODULES",
    "LIBRARY_PATH",
    "ExerciseRegistry",
    "IntervalModule",
    "IntervalSpec",
    "MusicXMLImporter",
    "ids_from_filename",
    "interval_exercises",
]
