"""
Tests for the transposition engine.

Tests cover:
- transposition_interval folding
- transpose_voice pitches, timing and ids
- Sounding pitch classes around the circle of fourths
"""

from chuk_mcp_counterpoint.core import (
    Accidental,
    Key,
    NoteName,
    Pitch,
    Voice,
    transpose_pitch,
    transpose_voice,
    transposition_interval,
)

C_MAJOR = Key.C_MAJOR
F_MAJOR = Key(NoteName.F)
G_MAJOR = Key(NoteName.G)
B_FLAT = Key(NoteName.B, Accidental.FLAT)
G_FLAT = Key(NoteName.G, Accidental.FLAT)


class TestTranspositionInterval:
    """Tests for the staff-step distance between keys."""

    def test_same_key(self) -> None:
        """No movement within a key."""
        for key in Key.CIRCLE_OF_FOURTHS:
            assert transposition_interval(key, key) == 0

    def test_up_a_fourth(self) -> None:
        """C to F moves up three steps."""
        assert transposition_interval(C_MAJOR, F_MAJOR) == 3

    def test_folds_large_leaps(self) -> None:
        """C to G goes down a fourth rather than up a fifth."""
        assert transposition_interval(C_MAJOR, G_MAJOR) == -3

    def test_b_flat_goes_down(self) -> None:
        """C to B-flat is one step down."""
        assert transposition_interval(C_MAJOR, B_FLAT) == -1

    def test_tritone_goes_up(self) -> None:
        """A tritone is not folded."""
        assert transposition_interval(C_MAJOR, G_FLAT) == 4

    def test_stays_within_range(self) -> None:
        """Every pair of cycle keys moves less than an octave."""
        for a in Key.CIRCLE_OF_FOURTHS:
            for b in Key.CIRCLE_OF_FOURTHS:
                assert -6 <= transposition_interval(a, b) <= 6


class TestTransposeVoice:
    """Tests for transposing whole voices."""

    def test_bassline1_to_f(self) -> None:
        """C3 G3 C3 becomes F3 C4 F3."""
        bass = Voice.from_pitches(["C3", "G3", "C3"])
        moved = transpose_voice(bass, C_MAJOR, F_MAJOR)
        assert [str(p) for p in moved.pitches] == ["F3", "C4", "F3"]

    def test_bassline1_to_b_flat_sounds_flat(self) -> None:
        """B-flat major inherits its flat from the key."""
        soprano = Voice.from_pitches(["C5", "B4", "C5"])
        moved = transpose_voice(soprano, C_MAJOR, B_FLAT)
        assert [str(p) for p in moved.pitches] == ["B4", "A4", "B4"]
        assert [p.chromatic_value(B_FLAT) for p in moved.pitches] == [70, 69, 70]

    def test_same_key_returns_voice(self) -> None:
        """Transposing to the same key is the identity."""
        voice = Voice.from_pitches(["C4", "D4"])
        assert transpose_voice(voice, C_MAJOR, C_MAJOR) is voice

    def test_preserves_timing_and_ids(self) -> None:
        """Only pitches change."""
        voice = Voice.from_pitches(["C4", "E4", "G4"])
        moved = transpose_voice(voice, C_MAJOR, G_FLAT)
        for original, transposed in zip(voice, moved):
            assert transposed.id == original.id
            assert transposed.beat_position == original.beat_position
            assert transposed.duration == original.duration

    def test_preserves_explicit_accidentals(self) -> None:
        """Explicit accidentals are carried over as written."""
        pitch = Pitch(NoteName.E, 4, Accidental.FLAT)
        assert transpose_pitch(pitch, C_MAJOR, F_MAJOR) == Pitch(NoteName.A, 4, Accidental.FLAT)

    def test_scale_degrees_survive_every_key(self) -> None:
        """A diatonic line keeps its sounding shape in all twelve keys."""
        line = Voice.from_pitches(["C4", "D4", "E4", "F4", "G4", "A4", "B4"])
        major_scale = [0, 2, 4, 5, 7, 9, 11]
        for key in Key.CIRCLE_OF_FOURTHS:
            moved = transpose_voice(line, C_MAJOR, key)
            values = [p.chromatic_value(key) for p in moved.pitches]
            tonic = values[0]
            assert [v - tonic for v in values] == major_scale, key
            assert tonic % 12 == key.tonic_semitone

    def test_round_trip(self) -> None:
        """Transposing there and back restores the line."""
        line = Voice.from_pitches(["E4", "F4", "G4", "A4"])
        for key in Key.CIRCLE_OF_FOURTHS:
            there = transpose_voice(line, C_MAJOR, key)
            back = transpose_voice(there, key, C_MAJOR)
            assert back.pitches == line.pitches, key
