"""
Constants and enums for the counterpoint trainer.

No magic strings or numbers - timings, spaced-repetition intervals and
user-facing messages live here.
"""

from enum import Enum

# Spaced repetition intervals in days, indexed by mastery level
REVIEW_INTERVALS: tuple[int, ...] = (1, 3, 7, 14, 30, 60)

MAX_MASTERY = 5

# Exercises below this mastery level are queued for a quiz on completion
QUIZ_MASTERY_THRESHOLD = 3

# Accuracy at or above this raises mastery; below the low mark lowers it
MASTERY_UP_ACCURACY = 0.9
MASTERY_DOWN_ACCURACY = 0.5

# A quiz passes at or above this accuracy
QUIZ_PASS_ACCURACY = 0.7

# Seconds an incorrect note stays before fading, then before removal
FADE_DELAY = 2.0
REMOVAL_DELAY = 0.5

# Seconds a hint keeps the soprano visible
HINT_DURATION = 2.0

DEFAULT_TEMPO = 60

# Fraction of a note's length that sounds during playback
PLAYBACK_GATE = 0.9

# Quiz key used when a progress record has no completed keys
DEFAULT_QUIZ_KEY = "C"


class Voicing(str, Enum):
    """The two voices of an exercise."""

    BASS = "bass"
    SOPRANO = "soprano"


class ErrorMessages:
    """Standardized error messages."""

    NO_SESSION = "No active session. Start one first."
    EXERCISE_NOT_FOUND = "Exercise '{exercise_id}' not found."
    PROGRESS_NOT_FOUND = "No progress recorded for exercise '{exercise_id}'."
    QUIZ_NOT_FOUND = "Quiz item '{quiz_id}' not found."
    NO_QUIZ = "No quiz is due."
    INVALID_KEY = "Invalid key: '{key}'. Expected a name like 'C', 'Bb' or 'F#_major'."
    INVALID_PITCH = "Invalid pitch: '{pitch}'. Expected a name like 'C4', 'F#3' or 'Bb2'."


class SuccessMessages:
    """Standardized success messages."""

    SESSION_STARTED = "Started session for '{exercise_id}' in {key}."
    QUIZ_STARTED = "Quiz: play '{exercise_id}' in {key} from memory."
    QUIZ_SKIPPED = "Quiz skipped. It counts as a miss."
    PRACTICE_STARTED = "Tap to place notes"
    CORRECT = "Correct!"
    INCORRECT = "Incorrect ({interval})"
    COMPLETE = "Excellent! Accuracy: {percent}%"
    PROGRESS_RESET = "All progress cleared."
