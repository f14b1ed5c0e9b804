"""
Models for the counterpoint trainer.

This module provides:
- Exercise: Bass line plus soprano solutions in an authored key
- Species: Counterpoint species tag
- Bassline: Metadata grouping exercises over one bass line
- ExerciseProgress: Per-exercise mastery record
- QuizItem: Queued spaced-repetition review
- ProgressSnapshot: Persisted progress state
"""

from chuk_mcp_counterpoint.models.exercise import Bassline, Exercise, Species
from chuk_mcp_counterpoint.models.progress import ExerciseProgress, ProgressSnapshot, QuizItem

__all__ = [
    "Bassline",
    "Exercise",
    "ExerciseProgress",
    "ProgressSnapshot",
    "QuizItem",
    "Species",
]
