"""
Transposition engine - move a voice from one key to another.

Transposition is diatonic: every note moves by the same number of staff
steps (the letter distance between the two tonics), folded by an octave
when the tonics are more than a tritone apart so the line stays near its
original register.
"""

from __future__ import annotations

from .key import Key
from .pitch import Pitch
from .rhythm import Voice


def transposition_interval(from_key: Key, to_key: Key) -> int:
    """
    Staff steps to move a note from one key to another.

    Args:
        from_key: Key the material is written in
        to_key: Target key

    Returns:
        Signed diatonic step count (within -6..6)
    """
    semitone_interval = to_key.tonic_semitone - from_key.tonic_semitone
    staff_interval = to_key.tonic.index - from_key.tonic.index

    if semitone_interval > 6:
        staff_interval -= 7
    elif semitone_interval < -6:
        staff_interval += 7

    return staff_interval


def transpose_pitch(pitch: Pitch, from_key: Key, to_key: Key) -> Pitch:
    """Transpose a single pitch; an explicit accidental is carried over unchanged."""
    return pitch.transpose_steps(transposition_interval(from_key, to_key))


def transpose_voice(voice: Voice, from_key: Key, to_key: Key) -> Voice:
    """
    Transpose every note of a voice.

    Beat positions, durations and note ids are preserved; only pitches
    change. Notes with an explicit accidental keep it as written and are
    not respelled for the new key.
    """
    if from_key == to_key:
        return voice

    steps = transposition_interval(from_key, to_key)
    return voice.with_notes(note.with_pitch(note.pitch.transpose_steps(steps)) for note in voice)
