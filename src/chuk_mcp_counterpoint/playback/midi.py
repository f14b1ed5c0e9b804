"""
MIDI export - render playback events to a MIDI file with mido.

All operations are deterministic: same events -> same MIDI file.
Bass and soprano go on separate channels so a DAW shows two voices.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from pathlib import Path

from mido import Message, MetaMessage, MidiFile, MidiTrack

from chuk_mcp_counterpoint.constants import DEFAULT_TEMPO, PLAYBACK_GATE, Voicing
from chuk_mcp_counterpoint.core.key import Key
from chuk_mcp_counterpoint.core.pitch import Pitch
from chuk_mcp_counterpoint.playback.events import PlaybackEvent

logger = logging.getLogger(__name__)

# Standard ticks per beat (quarter note)
TICKS_PER_BEAT = 480

VOICE_CHANNELS: dict[Voicing, int] = {
    Voicing.BASS: 0,
    Voicing.SOPRANO: 1,
}

DEFAULT_VELOCITY = 80


@dataclass(frozen=True)
class MidiEvent:
    """
    A single MIDI note event.

    All times are in ticks (absolute from start of track).
    """

    pitch: int  # MIDI note number (0-127)
    start_ticks: int
    duration_ticks: int
    velocity: int = DEFAULT_VELOCITY
    channel: int = 0

    def __post_init__(self) -> None:
        """Validate MIDI ranges."""
        if not 0 <= self.pitch <= 127:
            raise ValueError(f"Pitch must be 0-127, got {self.pitch}")
        if not 0 <= self.velocity <= 127:
            raise ValueError(f"Velocity must be 0-127, got {self.velocity}")
        if not 0 <= self.channel <= 15:
            raise ValueError(f"Channel must be 0-15, got {self.channel}")
        if self.start_ticks < 0:
            raise ValueError(f"Start ticks must be >= 0, got {self.start_ticks}")
        if self.duration_ticks < 0:
            raise ValueError(f"Duration ticks must be >= 0, got {self.duration_ticks}")


def playback_to_midi_events(
    events: Iterable[PlaybackEvent],
    ticks_per_beat: int = TICKS_PER_BEAT,
    gate: float = PLAYBACK_GATE,
) -> list[MidiEvent]:
    """
    Convert playback events to MIDI note events.

    Each note sounds for ``gate`` of its written length, leaving a small
    gap before the next one.
    """
    return [
        MidiEvent(
            pitch=event.midi_note,
            start_ticks=beats_to_ticks(event.start_beat, ticks_per_beat),
            duration_ticks=beats_to_ticks(event.duration_beats * gate, ticks_per_beat),
            channel=VOICE_CHANNELS[event.voice],
        )
        for event in events
    ]


def events_to_midi(
    events: Sequence[MidiEvent],
    tempo_bpm: float = DEFAULT_TEMPO,
    ticks_per_beat: int = TICKS_PER_BEAT,
) -> MidiFile:
    """
    Convert a sequence of MidiEvents to a MidiFile.

    Args:
        events: Sequence of MidiEvent objects
        tempo_bpm: Tempo in beats per minute
        ticks_per_beat: Resolution (default 480)

    Returns:
        A mido MidiFile ready to be saved
    """
    mid = MidiFile(ticks_per_beat=ticks_per_beat)
    track = MidiTrack()
    mid.tracks.append(track)

    # Set tempo (microseconds per beat)
    track.append(MetaMessage("set_tempo", tempo=int(60_000_000 / tempo_bpm), time=0))

    messages: list[tuple[int, Message]] = []
    for event in events:
        messages.append(
            (
                event.start_ticks,
                Message(
                    "note_on",
                    channel=event.channel,
                    note=event.pitch,
                    velocity=event.velocity,
                    time=0,
                ),
            )
        )
        messages.append(
            (
                event.start_ticks + event.duration_ticks,
                Message("note_off", channel=event.channel, note=event.pitch, velocity=0, time=0),
            )
        )

    # note_off before note_on at the same tick
    messages.sort(key=lambda x: (x[0], x[1].type != "note_off"))

    # Convert to delta times
    current_time = 0
    for abs_time, msg in messages:
        msg.time = abs_time - current_time
        track.append(msg)
        current_time = abs_time

    track.append(MetaMessage("end_of_track", time=0))
    return mid


def render_exercise(events: Iterable[PlaybackEvent], tempo_bpm: float = DEFAULT_TEMPO) -> MidiFile:
    """Render merged exercise playback events to a MidiFile."""
    return events_to_midi(playback_to_midi_events(events), tempo_bpm=tempo_bpm)


def beats_to_ticks(beats: float, ticks_per_beat: int = TICKS_PER_BEAT) -> int:
    """Convert a beat position to ticks."""
    return int(beats * ticks_per_beat)


class MidiFilePlayback:
    """
    Playback adapter that writes each request to a MIDI file.

    Stands in for a live synthesizer: ``play`` renders the events to
    ``<output_dir>/<name>-<n>.mid`` and remembers the path.
    """

    def __init__(self, output_dir: Path, name: str = "playback"):
        self.output_dir = output_dir
        self.name = name
        self.written: list[Path] = []
        self.is_playing = False

    def play(self, events: Iterable[PlaybackEvent], tempo_bpm: float) -> None:
        self.output_dir.mkdir(parents=True, exist_ok=True)
        path = self.output_dir / f"{self.name}-{len(self.written) + 1}.mid"
        render_exercise(events, tempo_bpm).save(path)
        self.written.append(path)
        self.is_playing = True
        logger.debug(f"Wrote playback to {path}")

    def play_feedback(self, pitch: Pitch, bass: Pitch | None, key: Key | None) -> None:
        # Touch feedback has no file representation
        pass

    def stop(self) -> None:
        self.is_playing = False
