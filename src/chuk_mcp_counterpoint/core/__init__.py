"""
Core music primitives - the theory layer.

These are the invariants everything else composes on:
- NoteName, Accidental, Pitch: notated pitch and staff position
- Mode, Key: key signatures and the circle of fourths
- Interval: diatonic size and quality, consonance
- NoteDuration, Note, Voice: notes in time
- transpose_voice: diatonic transposition between keys
"""

from chuk_mcp_counterpoint.core.interval import Interval, IntervalQuality, simple_size
from chuk_mcp_counterpoint.core.key import FLAT_ORDER, SHARP_ORDER, Key, Mode
from chuk_mcp_counterpoint.core.pitch import Accidental, NoteName, Pitch
from chuk_mcp_counterpoint.core.rhythm import Note, NoteDuration, Voice
from chuk_mcp_counterpoint.core.transpose import (
    transpose_pitch,
    transpose_voice,
    transposition_interval,
)

__all__ = [
    # Pitch
    "NoteName",
    "Accidental",
    "Pitch",
    # Key
    "Mode",
    "Key",
    "SHARP_ORDER",
    "FLAT_ORDER",
    # Interval
    "Interval",
    "IntervalQuality",
    "simple_size",
    # Rhythm
    "NoteDuration",
    "Note",
    "Voice",
    # Transposition
    "transposition_interval",
    "transpose_pitch",
    "transpose_voice",
]
