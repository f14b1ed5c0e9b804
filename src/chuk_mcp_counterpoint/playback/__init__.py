"""
Playback - the audio port.

This module provides:
- PlaybackEvent: Ordered note events with beat timing
- exercise_events / voice_events: Build events from voices
- PlaybackPort: Protocol for the audio collaborator
- render_exercise / MidiFilePlayback: MIDI rendering via mido
"""

from chuk_mcp_counterpoint.playback.events import (
    PlaybackEvent,
    PlaybackPort,
    beats_to_seconds,
    exercise_events,
    voice_events,
)
from chuk_mcp_counterpoint.playback.midi import (
    TICKS_PER_BEAT,
    MidiEvent,
    MidiFilePlayback,
    events_to_midi,
    playback_to_midi_events,
    render_exercise,
)

__all__ = [
    "TICKS_PER_BEAT",
    "MidiEvent",
    "MidiFilePlayback",
    "PlaybackEvent",
    "PlaybackPort",
    "beats_to_seconds",
    "events_to_midi",
    "exercise_events",
    "playback_to_midi_events",
    "render_exercise",
    "voice_events",
]
