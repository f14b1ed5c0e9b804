"""
Playback events - what the audio layer needs to sound an exercise.

The core only does beat arithmetic. Each event is a pitch, its sounding
MIDI number under the current key, and a start/length in beats; turning
beats into wall-clock time at a tempo is the audio layer's job
(``beats_to_seconds`` is provided for convenience).
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from fractions import Fraction
from typing import Any, Protocol

from chuk_mcp_counterpoint.constants import Voicing
from chuk_mcp_counterpoint.core.key import Key
from chuk_mcp_counterpoint.core.pitch import Pitch
from chuk_mcp_counterpoint.core.rhythm import Voice


@dataclass(frozen=True, order=True)
class PlaybackEvent:
    """
    One sounding note.

    Ordered by (start_beat, voice, midi_note) so merged voices sort
    deterministically.
    """

    start_beat: Fraction
    voice: Voicing
    midi_note: int
    duration_beats: Fraction
    pitch: Pitch = field(compare=False)

    def to_dict(self) -> dict[str, Any]:
        return {
            "voice": self.voice.value,
            "pitch": str(self.pitch),
            "midi_note": self.midi_note,
            "start_beat": float(self.start_beat),
            "duration_beats": float(self.duration_beats),
        }


def voice_events(voice: Voice, key: Key | None, voicing: Voicing) -> list[PlaybackEvent]:
    """Playback events for one voice, sounding pitches under the key."""
    return [
        PlaybackEvent(
            start_beat=note.beat_position,
            voice=voicing,
            midi_note=note.pitch.chromatic_value(key),
            duration_beats=note.duration.beats,
            pitch=note.pitch,
        )
        for note in voice
    ]


def exercise_events(
    bass: Voice, soprano: Voice | None, key: Key | None
) -> list[PlaybackEvent]:
    """
    Merge bass and (optionally) soprano into one ordered event list.

    Args:
        bass: Bass voice, already in the sounding key
        soprano: Soprano voice, or None to play the bass alone
        key: Key whose signature applies to unmarked notes

    Returns:
        Events sorted by start beat
    """
    events = voice_events(bass, key, Voicing.BASS)
    if soprano is not None:
        events.extend(voice_events(soprano, key, Voicing.SOPRANO))
    return sorted(events)


def beats_to_seconds(beats: Fraction | float, tempo_bpm: float) -> float:
    """Convert a beat count to seconds at a tempo."""
    return float(beats) * 60.0 / tempo_bpm


class PlaybackPort(Protocol):
    """The audio collaborator a session drives."""

    def play(self, events: Iterable[PlaybackEvent], tempo_bpm: float) -> None: ...

    def play_feedback(self, pitch: Pitch, bass: Pitch | None, key: Key | None) -> None: ...

    def stop(self) -> None: ...
