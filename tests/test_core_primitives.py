"""
Tests for core music primitives.

Tests cover:
- NoteName, Accidental, Pitch (pitch.py)
- Key, key signatures, circle of fourths (key.py)
- Interval size and quality (interval.py)
- NoteDuration, Note, Voice (rhythm.py)
"""

from fractions import Fraction

import pytest

from chuk_mcp_counterpoint.core import (
    Accidental,
    Interval,
    IntervalQuality,
    Key,
    Mode,
    Note,
    NoteDuration,
    NoteName,
    Pitch,
    Voice,
)


class TestNoteName:
    """Tests for NoteName enum."""

    def test_index(self) -> None:
        """Letters are indexed C=0 .. B=6."""
        assert NoteName.C.index == 0
        assert NoteName.F.index == 3
        assert NoteName.B.index == 6

    def test_from_index_wraps(self) -> None:
        """Indices wrap around the 7-letter cycle."""
        assert NoteName.from_index(7) == NoteName.C
        assert NoteName.from_index(-1) == NoteName.B


class TestAccidental:
    """Tests for Accidental enum."""

    def test_offsets(self) -> None:
        """Semitone offsets."""
        assert Accidental.NATURAL.semitone_offset == 0
        assert Accidental.SHARP.semitone_offset == 1
        assert Accidental.FLAT.semitone_offset == -1

    def test_parse(self) -> None:
        """Parse ascii and unicode marks."""
        assert Accidental.parse("#") == Accidental.SHARP
        assert Accidental.parse("♭") == Accidental.FLAT
        assert Accidental.parse("n") == Accidental.NATURAL

    def test_parse_invalid(self) -> None:
        """Unknown marks are rejected."""
        with pytest.raises(ValueError):
            Accidental.parse("x")


class TestPitch:
    """Tests for Pitch class."""

    def test_middle_c(self) -> None:
        """Middle C sits at staff position 0 with chromatic value 60."""
        c4 = Pitch(NoteName.C, 4)
        assert c4.staff_position == 0
        assert c4.chromatic_value() == 60

    def test_staff_positions(self) -> None:
        """Staff positions count letters across octaves."""
        assert Pitch(NoteName.B, 3).staff_position == -1
        assert Pitch(NoteName.C, 5).staff_position == 7
        assert Pitch(NoteName.G, 3).staff_position == -3

    def test_from_staff_position_negative(self) -> None:
        """Negative positions land in the right octave."""
        assert Pitch.from_staff_position(-1) == Pitch(NoteName.B, 3)
        assert Pitch.from_staff_position(-7) == Pitch(NoteName.C, 3)
        assert Pitch.from_staff_position(-8) == Pitch(NoteName.B, 2)

    def test_staff_position_round_trip(self) -> None:
        """from_staff_position inverts staff_position across the range."""
        for position in range(-70, 71):
            assert Pitch.from_staff_position(position).staff_position == position

    def test_natural_pitches_round_trip(self) -> None:
        """Natural pitches survive a trip through their staff position."""
        for octave in range(0, 9):
            for name in NoteName:
                pitch = Pitch(name, octave)
                assert Pitch.from_staff_position(pitch.staff_position) == pitch

    def test_accidentals(self) -> None:
        """Explicit accidentals shift the chromatic value."""
        assert Pitch(NoteName.F, 4, Accidental.SHARP).chromatic_value() == 66
        assert Pitch(NoteName.B, 3, Accidental.FLAT).chromatic_value() == 58

    def test_key_supplies_accidental(self) -> None:
        """An unmarked pitch follows the key signature."""
        g_major = Key(NoteName.G)
        assert Pitch(NoteName.F, 4).chromatic_value(g_major) == 66

    def test_explicit_natural_overrides_key(self) -> None:
        """An explicit natural ignores the key signature."""
        g_major = Key(NoteName.G)
        assert Pitch(NoteName.F, 4, Accidental.NATURAL).chromatic_value(g_major) == 65

    def test_matches_under_key(self) -> None:
        """Unmarked and explicit spellings match when they sound the same."""
        bb_major = Key(NoteName.B, Accidental.FLAT)
        expected = Pitch(NoteName.B, 4)
        assert Pitch(NoteName.B, 4).matches(expected, bb_major)
        assert Pitch(NoteName.B, 4, Accidental.FLAT).matches(expected, bb_major)
        assert not Pitch(NoteName.B, 4, Accidental.NATURAL).matches(expected, bb_major)

    def test_matches_requires_same_position(self) -> None:
        """Enharmonic spellings on different lines do not match."""
        a_sharp = Pitch(NoteName.A, 4, Accidental.SHARP)
        b_flat = Pitch(NoteName.B, 4, Accidental.FLAT)
        assert a_sharp.chromatic_value() == b_flat.chromatic_value()
        assert not a_sharp.matches(b_flat)

    def test_parse(self) -> None:
        """Parse pitch strings."""
        assert Pitch.parse("C4") == Pitch(NoteName.C, 4)
        assert Pitch.parse("F#3") == Pitch(NoteName.F, 3, Accidental.SHARP)
        assert Pitch.parse("Bb2") == Pitch(NoteName.B, 2, Accidental.FLAT)
        assert Pitch.parse("En4") == Pitch(NoteName.E, 4, Accidental.NATURAL)

    def test_parse_invalid(self) -> None:
        """Invalid strings are rejected."""
        with pytest.raises(ValueError):
            Pitch.parse("H4")
        with pytest.raises(ValueError):
            Pitch.parse("C")

    def test_str(self) -> None:
        """String form is the ascii spelling."""
        assert str(Pitch(NoteName.B, 3, Accidental.FLAT)) == "Bb3"
        assert Pitch(NoteName.B, 3, Accidental.FLAT).spell() == "B♭3"

    def test_explicit_natural_round_trips(self) -> None:
        """An explicit natural survives str and parse."""
        pitch = Pitch(NoteName.E, 5, Accidental.NATURAL)
        assert str(pitch) == "En5"
        assert pitch.spell() == "E♮5"
        assert Pitch.parse(str(pitch)) == pitch
        assert str(Pitch(NoteName.E, 5)) == "E5"

    def test_hashable(self) -> None:
        """Pitches are hashable for use in sets."""
        pitches = {Pitch.parse("C4"), Pitch.parse("C4"), Pitch.parse("C#4")}
        assert len(pitches) == 2


class TestKey:
    """Tests for Key class."""

    def test_c_major_has_no_accidentals(self) -> None:
        """C major has an empty signature."""
        assert Key.C_MAJOR.fifths == 0
        assert Key.C_MAJOR.signature() == []

    def test_sharp_keys(self) -> None:
        """Sharp keys count upwards."""
        assert Key(NoteName.G).fifths == 1
        assert Key(NoteName.B).fifths == 5
        assert Key(NoteName.F, Accidental.SHARP).fifths == 6

    def test_flat_keys(self) -> None:
        """Flat keys count downwards."""
        assert Key(NoteName.F).fifths == -1
        assert Key(NoteName.B, Accidental.FLAT).fifths == -2
        assert Key(NoteName.G, Accidental.FLAT).fifths == -6

    def test_d_major_signature(self) -> None:
        """D major sharpens F and C, in that order."""
        assert Key(NoteName.D).signature() == [
            (NoteName.F, Accidental.SHARP),
            (NoteName.C, Accidental.SHARP),
        ]

    def test_e_flat_signature(self) -> None:
        """E-flat major flattens B, E and A, in that order."""
        assert Key(NoteName.E, Accidental.FLAT).signature() == [
            (NoteName.B, Accidental.FLAT),
            (NoteName.E, Accidental.FLAT),
            (NoteName.A, Accidental.FLAT),
        ]

    def test_signature_length_matches_fifths(self) -> None:
        """Every key in the cycle draws abs(fifths) accidentals."""
        for key in Key.CIRCLE_OF_FOURTHS:
            assert len(key.signature()) == abs(key.fifths)

    def test_minor_keys(self) -> None:
        """Minor keys share their relative major's signature."""
        assert Key(NoteName.A, mode=Mode.MINOR).fifths == 0
        assert Key(NoteName.E, mode=Mode.MINOR).fifths == 1
        assert Key(NoteName.D, mode=Mode.MINOR).fifths == -1

    def test_unknown_spelling_is_neutral(self) -> None:
        """An unrecognised spelling falls back to no accidentals."""
        a_sharp_major = Key(NoteName.A, Accidental.SHARP)
        assert not a_sharp_major.is_known
        assert a_sharp_major.fifths == 0
        assert a_sharp_major.signature() == []

    def test_circle_of_fourths(self) -> None:
        """The cycle runs C F Bb Eb Ab Db Gb B E A D G."""
        names = [k.short_name for k in Key.CIRCLE_OF_FOURTHS]
        assert names == ["C", "F", "Bb", "Eb", "Ab", "Db", "Gb", "B", "E", "A", "D", "G"]

    def test_circle_covers_every_pitch_class(self) -> None:
        """Twelve keys, twelve distinct tonics."""
        assert len({k.tonic_semitone for k in Key.CIRCLE_OF_FOURTHS}) == 12

    def test_enharmonic_equivalent(self) -> None:
        """G-flat and F-sharp are the same key spelled two ways."""
        g_flat = Key(NoteName.G, Accidental.FLAT)
        f_sharp = Key(NoteName.F, Accidental.SHARP)
        assert g_flat.enharmonic_equivalent() == f_sharp
        assert f_sharp.enharmonic_equivalent() == g_flat
        assert Key.C_MAJOR.enharmonic_equivalent() is None

    def test_parse(self) -> None:
        """Parse key names."""
        assert Key.parse("C") == Key.C_MAJOR
        assert Key.parse("Bb") == Key(NoteName.B, Accidental.FLAT)
        assert Key.parse("F#_minor") == Key(NoteName.F, Accidental.SHARP, Mode.MINOR)
        assert Key.parse("Am") == Key(NoteName.A, mode=Mode.MINOR)

    def test_parse_invalid(self) -> None:
        """Invalid key names are rejected."""
        with pytest.raises(ValueError):
            Key.parse("X")
        with pytest.raises(ValueError):
            Key.parse("C_lydian")

    def test_from_fifths(self) -> None:
        """Look keys up by signature size."""
        assert Key.from_fifths(0) == Key.C_MAJOR
        assert Key.from_fifths(-3) == Key(NoteName.E, Accidental.FLAT)
        assert Key.from_fifths(2, Mode.MINOR) == Key(NoteName.B, mode=Mode.MINOR)

    def test_names(self) -> None:
        """Display and identifier forms."""
        bb = Key(NoteName.B, Accidental.FLAT)
        assert bb.display_name == "B♭ major"
        assert bb.identifier == "Bb"
        assert Key(NoteName.A, mode=Mode.MINOR).identifier == "Am"


class TestInterval:
    """Tests for Interval class."""

    @pytest.mark.parametrize(
        "lower,upper,name",
        [
            ("C4", "C4", "P1"),
            ("C4", "D4", "M2"),
            ("C4", "Eb4", "m3"),
            ("C4", "E4", "M3"),
            ("C4", "F4", "P4"),
            ("C4", "F#4", "A4"),
            ("C4", "G4", "P5"),
            ("C4", "Ab4", "m6"),
            ("C4", "A4", "M6"),
            ("C4", "Bb4", "m7"),
            ("C4", "B4", "M7"),
            ("C4", "C5", "P8"),
            ("C4", "C#4", "A1"),
            ("B3", "F4", "d5"),
        ],
    )
    def test_simple_intervals(self, lower: str, upper: str, name: str) -> None:
        """Size and quality of intervals within an octave."""
        assert Interval.between(Pitch.parse(lower), Pitch.parse(upper)).display_name == name

    def test_compound_interval(self) -> None:
        """G3 to C5 is a perfect eleventh, a fourth when reduced."""
        interval = Interval.between(Pitch.parse("G3"), Pitch.parse("C5"))
        assert interval.semitones == 17
        assert interval.size == 11
        assert interval.is_compound
        assert interval.display_name == "P11"
        assert interval.simple_name == "P4"

    def test_octave_simple_name(self) -> None:
        """Octaves and double octaves reduce to P8, not P1."""
        assert Interval.between(Pitch.parse("C3"), Pitch.parse("C5")).simple_name == "P8"
        assert Interval.between(Pitch.parse("C4"), Pitch.parse("C4")).simple_name == "P1"

    def test_key_context(self) -> None:
        """Unmarked pitches take the key's accidentals."""
        d_major = Key(NoteName.D)
        interval = Interval.between(Pitch.parse("D3"), Pitch.parse("F4"), d_major)
        assert interval.quality == IntervalQuality.MAJOR
        assert interval.simple_size == 3

    def test_descending(self) -> None:
        """Semitones are signed, size and quality are absolute."""
        interval = Interval.between(Pitch.parse("G4"), Pitch.parse("C4"))
        assert interval.semitones == -7
        assert interval.size == 5
        assert interval.quality == IntervalQuality.PERFECT

    def test_consonance(self) -> None:
        """Consonant and dissonant intervals in first species."""
        c4 = Pitch.parse("C4")
        for upper in ("C4", "E4", "Eb4", "G4", "A4", "C5", "E5"):
            assert Interval.between(c4, Pitch.parse(upper)).is_consonant, upper
        for upper in ("D4", "F4", "F#4", "B4", "Bb4", "C#4"):
            assert not Interval.between(c4, Pitch.parse(upper)).is_consonant, upper


class TestRhythm:
    """Tests for NoteDuration, Note and Voice."""

    def test_duration_beats(self) -> None:
        """Durations in beats."""
        assert NoteDuration.WHOLE.beats == 4
        assert NoteDuration.EIGHTH.beats == Fraction(1, 2)

    def test_from_beats(self) -> None:
        """Snap beat lengths to durations."""
        assert NoteDuration.from_beats(4) == NoteDuration.WHOLE
        assert NoteDuration.from_beats(3) == NoteDuration.HALF
        assert NoteDuration.from_beats(Fraction(1, 4)) == NoteDuration.EIGHTH

    def test_negative_beat_rejected(self) -> None:
        """Notes cannot start before the line."""
        with pytest.raises(ValueError):
            Note(Pitch.parse("C4"), beat_position=Fraction(-1))

    def test_from_pitches(self) -> None:
        """A 1:1 line places whole notes back to back."""
        voice = Voice.from_pitches(["C3", "G3", "C3"])
        assert len(voice) == 3
        assert [n.beat_position for n in voice] == [0, 4, 8]
        assert voice.duration == 12

    def test_unordered_notes_rejected(self) -> None:
        """Notes must be in beat order."""
        with pytest.raises(ValueError):
            Voice(
                (
                    Note(Pitch.parse("C4"), beat_position=Fraction(4)),
                    Note(Pitch.parse("D4"), beat_position=Fraction(0)),
                )
            )
