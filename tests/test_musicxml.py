"""
Tests for the MusicXML importer.
"""

from pathlib import Path

from chuk_mcp_counterpoint.core import Accidental, Key, NoteName, NoteDuration, Pitch
from chuk_mcp_counterpoint.core.key import Mode
from chuk_mcp_counterpoint.exercises import ExerciseRegistry, MusicXMLImporter, ids_from_filename


def note(step: str, octave: int, staff: int, alter: int | None = None, duration: int = 4) -> str:
    alter_xml = f"<alter>{alter}</alter>" if alter is not None else ""
    return (
        f"<note><pitch><step>{step}</step>{alter_xml}<octave>{octave}</octave></pitch>"
        f"<duration>{duration}</duration><voice>{staff}</voice><staff>{staff}</staff></note>"
    )


def score(measures: list[str], fifths: int = 0, title: str | None = None) -> str:
    work = f"<work><work-title>{title}</work-title></work>" if title else ""
    body = []
    for i, content in enumerate(measures, start=1):
        attributes = ""
        if i == 1:
            attributes = (
                f"<attributes><divisions>1</divisions>"
                f"<key><fifths>{fifths}</fifths><mode>major</mode></key>"
                f"<staves>2</staves></attributes>"
            )
        body.append(f'<measure number="{i}">{attributes}{content}</measure>')
    return (
        '<?xml version="1.0" encoding="UTF-8"?>'
        f'<score-partwise version="3.1">{work}'
        '<part-list><score-part id="P1"><part-name>Piano</part-name></score-part></part-list>'
        f'<part id="P1">{"".join(body)}</part>'
        "</score-partwise>"
    )


def grand_staff_measure(soprano: str, bass: str) -> str:
    """Soprano on staff 1, back up a whole note, bass on staff 2."""
    return f"{soprano}<backup><duration>4</duration></backup>{bass}"


BASSLINE1_878 = score(
    [
        grand_staff_measure(note("C", 5, 1), note("C", 3, 2)),
        grand_staff_measure(note("B", 4, 1), note("G", 3, 2)),
        grand_staff_measure(note("C", 5, 1), note("C", 3, 2)),
    ],
    title="8-7-8",
)


class TestIdsFromFilename:
    """Tests for deriving ids from file names."""

    def test_bassline_and_pattern(self) -> None:
        """bassline2_thirds.xml belongs to bassline2."""
        assert ids_from_filename(Path("bassline2_thirds.xml")) == (
            "bassline2_thirds",
            "bassline2",
            "thirds",
        )

    def test_no_pattern(self) -> None:
        """A bare name is its own bassline."""
        assert ids_from_filename(Path("custom.musicxml")) == ("custom", "custom", "")


class TestMusicXMLImporter:
    """Tests for MusicXMLImporter.parse / load."""

    def test_grand_staff(self) -> None:
        """Staff 1 is the soprano, staff 2 the bass."""
        exercise = MusicXMLImporter().parse(BASSLINE1_878, "bassline1_878", "bassline1", "878")
        assert exercise is not None
        assert exercise.name == "8-7-8"
        assert exercise.key == Key.C_MAJOR
        assert [str(p) for p in exercise.bass.pitches] == ["C3", "G3", "C3"]
        assert [str(p) for p in exercise.primary_soprano.pitches] == ["C5", "B4", "C5"]

    def test_timing(self) -> None:
        """Whole notes land on beats 0, 4 and 8."""
        exercise = MusicXMLImporter().parse(BASSLINE1_878, "x", "bassline1")
        assert [n.beat_position for n in exercise.bass] == [0, 4, 8]
        assert [n.beat_position for n in exercise.primary_soprano] == [0, 4, 8]
        assert all(n.duration == NoteDuration.WHOLE for n in exercise.bass)

    def test_pattern_name_when_untitled(self) -> None:
        """Without a title the pattern names the exercise."""
        text = score([grand_staff_measure(note("E", 4, 1), note("C", 3, 2))])
        exercise = MusicXMLImporter().parse(text, "b_10", "b", "10")
        assert exercise.name == "10"

    def test_key_signature(self) -> None:
        """One flat reads as F major, two as B-flat."""
        text = score([grand_staff_measure(note("F", 4, 1), note("F", 3, 2))], fifths=-1)
        assert MusicXMLImporter().parse(text, "x", "b").key == Key(NoteName.F)

        text = score([grand_staff_measure(note("D", 5, 1), note("B", 2, 2, alter=-1))], fifths=-2)
        assert MusicXMLImporter().parse(text, "x", "b").key == Key(NoteName.B, Accidental.FLAT)

    def test_alter_matching_key_stays_implicit(self) -> None:
        """A flat the key already supplies is not written out."""
        text = score([grand_staff_measure(note("D", 5, 1), note("B", 2, 2, alter=-1))], fifths=-2)
        exercise = MusicXMLImporter().parse(text, "x", "b")
        assert exercise.bass.pitches == [Pitch(NoteName.B, 2)]

    def test_alter_against_key_is_explicit(self) -> None:
        """Accidentals outside the key are kept."""
        text = score([grand_staff_measure(note("F", 4, 1, alter=1), note("D", 3, 2))])
        exercise = MusicXMLImporter().parse(text, "x", "b")
        assert exercise.primary_soprano.pitches == [Pitch(NoteName.F, 4, Accidental.SHARP)]

    def test_missing_alter_against_key_is_natural(self) -> None:
        """A plain B in B-flat major is an explicit natural."""
        text = score([grand_staff_measure(note("B", 4, 1), note("G", 3, 2))], fifths=-2)
        exercise = MusicXMLImporter().parse(text, "x", "b")
        assert exercise.primary_soprano.pitches == [
            Pitch(NoteName.B, 4, Accidental.NATURAL)
        ]

    def test_minor_mode(self) -> None:
        """Mode is read alongside fifths."""
        text = score([grand_staff_measure(note("C", 5, 1), note("A", 2, 2))]).replace(
            "<mode>major</mode>", "<mode>minor</mode>"
        )
        exercise = MusicXMLImporter().parse(text, "x", "b")
        assert exercise.key == Key(NoteName.A, mode=Mode.MINOR)

    def test_rests_are_skipped(self) -> None:
        """A rest takes time but adds no note."""
        rest = "<note><rest/><duration>4</duration><voice>1</voice><staff>1</staff></note>"
        text = score(
            [
                grand_staff_measure(note("C", 5, 1), note("C", 3, 2)),
                grand_staff_measure(rest, note("G", 3, 2)),
            ]
        )
        exercise = MusicXMLImporter().parse(text, "x", "b")
        # Soprano and bass lengths differ, so the exercise is rejected
        assert exercise is None

    def test_invalid_xml(self) -> None:
        """Broken documents are skipped."""
        assert MusicXMLImporter().parse("<score-partwise>", "x", "b") is None

    def test_no_bass(self) -> None:
        """A score without a bass staff is skipped."""
        text = score([note("C", 5, 1)])
        assert MusicXMLImporter().parse(text, "x", "b") is None

    def test_invalid_step(self) -> None:
        """Unknown note letters are skipped, not raised."""
        text = score([grand_staff_measure(note("H", 5, 1), note("C", 3, 2))])
        assert MusicXMLImporter().parse(text, "x", "b") is None

    def test_load_from_file(self, temp_dir: Path) -> None:
        """Files take their ids from the file name."""
        path = temp_dir / "bassline1_878.xml"
        path.write_text(BASSLINE1_878, encoding="utf-8")

        exercise = MusicXMLImporter().load(path)

        assert exercise is not None
        assert exercise.id == "bassline1_878"
        assert exercise.bassline_id == "bassline1"
        assert exercise.pattern_name == "878"

    def test_load_missing_file(self, temp_dir: Path) -> None:
        """Unreadable files are skipped."""
        assert MusicXMLImporter().load(temp_dir / "missing.xml") is None

    def test_registry_picks_up_musicxml(self, temp_dir: Path) -> None:
        """Project MusicXML files appear in the registry."""
        (temp_dir / "custom_up.musicxml").write_text(BASSLINE1_878, encoding="utf-8")
        registry = ExerciseRegistry(project_path=temp_dir)
        exercise = registry.get_exercise("custom_up")
        assert exercise is not None
        assert exercise.bassline_id == "custom"
