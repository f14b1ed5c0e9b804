"""
MusicXML importer - turns a two-voice grand-staff score into an Exercise.

Only what first-species drills need is read: pitches, durations, the key
signature and the title. Voice assignment follows the usual grand-staff
layout: staff 2 (or voice 2 and up on staff 1, or any part after the
first) is the bass; everything else is the soprano.

Files that cannot be turned into a valid exercise are skipped: the
importer logs a warning and returns None.
"""

from __future__ import annotations

import logging
import xml.etree.ElementTree
from fractions import Fraction
from pathlib import Path

from chuk_mcp_counterpoint.core.key import Key, Mode
from chuk_mcp_counterpoint.core.pitch import Accidental, NoteName, Pitch
from chuk_mcp_counterpoint.core.rhythm import Note, NoteDuration, Voice
from chuk_mcp_counterpoint.models.exercise import Exercise

logger = logging.getLogger(__name__)

MUSICXML_SUFFIXES = (".xml", ".musicxml")


def ids_from_filename(path: Path) -> tuple[str, str, str]:
    """
    Exercise id, bassline id and pattern name from a file name.

    Files are named ``<bassline>_<pattern>.xml``; e.g. ``bassline1_878.xml``
    gives ('bassline1_878', 'bassline1', '878').
    """
    stem = path.stem
    bassline_id, _, pattern = stem.partition("_")
    return stem, bassline_id or "bassline1", pattern


class MusicXMLImporter:
    """Reads partwise MusicXML into exercises."""

    def load(self, path: Path) -> Exercise | None:
        """
        Import a file, deriving ids from its name.

        Args:
            path: Path to a .xml or .musicxml file

        Returns:
            The Exercise, or None if the file was skipped
        """
        exercise_id, bassline_id, pattern = ids_from_filename(path)
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as e:
            logger.warning(f"Could not read {path}: {e}")
            return None
        return self.parse(text, exercise_id, bassline_id, pattern)

    def parse(
        self,
        text: str,
        exercise_id: str,
        bassline_id: str,
        pattern_name: str = "",
    ) -> Exercise | None:
        """
        Import MusicXML text.

        Args:
            text: The MusicXML document
            exercise_id: Id for the new exercise
            bassline_id: Bassline the exercise belongs to
            pattern_name: Fallback name when the score has no title

        Returns:
            The Exercise, or None if the score is malformed or has no bass
        """
        try:
            root = xml.etree.ElementTree.fromstring(text)
        except xml.etree.ElementTree.ParseError as e:
            logger.warning(f"Skipping {exercise_id}: invalid XML ({e})")
            return None

        try:
            key = self._read_key(root)
            treble, bass = self._read_notes(root, key)
        except ValueError as e:
            logger.warning(f"Skipping {exercise_id}: {e}")
            return None

        if not bass:
            logger.warning(f"Skipping {exercise_id}: no bass notes found")
            return None

        title = root.findtext(".//work-title") or root.findtext(".//movement-title") or ""
        try:
            return Exercise(
                id=exercise_id,
                name=title.strip() or pattern_name or exercise_id,
                bassline_id=bassline_id,
                key=key,
                bass=Voice(tuple(bass)),
                sopranos=(Voice(tuple(treble)),),
                pattern_name=pattern_name,
            )
        except ValueError as e:
            logger.warning(f"Skipping {exercise_id}: {e}")
            return None

    def _read_key(self, root: xml.etree.ElementTree.Element) -> Key:
        key_el = root.find(".//attributes/key")
        if key_el is None:
            return Key.C_MAJOR
        fifths = int(key_el.findtext("fifths", "0").strip())
        mode_text = (key_el.findtext("mode") or "major").strip().lower()
        mode = Mode.MINOR if mode_text == "minor" else Mode.MAJOR
        return Key.from_fifths(fifths, mode)

    def _read_notes(
        self, root: xml.etree.ElementTree.Element, key: Key
    ) -> tuple[list[Note], list[Note]]:
        treble: list[Note] = []
        bass: list[Note] = []

        for part_index, part in enumerate(root.iter("part")):
            divisions = 1
            position = Fraction(0)
            last_start = Fraction(0)

            for measure in part.iter("measure"):
                for element in measure:
                    if element.tag == "attributes":
                        divisions = int(element.findtext("divisions", str(divisions)))
                        if divisions <= 0:
                            raise ValueError(f"Invalid divisions: {divisions}")
                    elif element.tag == "backup":
                        position -= _beats(element, divisions)
                    elif element.tag == "forward":
                        position += _beats(element, divisions)
                    elif element.tag == "note":
                        beats = _beats(element, divisions)
                        if element.find("chord") is not None:
                            start = last_start
                        else:
                            start = position
                            position += beats
                        last_start = start

                        pitch = _read_pitch(element, key)
                        if pitch is None:
                            continue  # Rest

                        note = Note(pitch, NoteDuration.from_beats(beats), start)
                        staff = int(element.findtext("staff", "1"))
                        voice = int(element.findtext("voice", "1"))
                        if staff == 2 or voice >= 2 or part_index > 0:
                            bass.append(note)
                        else:
                            treble.append(note)

        return treble, bass


def _beats(element: xml.etree.ElementTree.Element, divisions: int) -> Fraction:
    duration = element.findtext("duration")
    if duration is None:
        return Fraction(0)
    return Fraction(int(duration.strip()), divisions)


def _read_pitch(note: xml.etree.ElementTree.Element, key: Key) -> Pitch | None:
    """
    Read <pitch>; None for rests.

    An <alter> that only restates the key signature is left implicit so
    the note keeps following the key when transposed.
    """
    pitch_el = note.find("pitch")
    if pitch_el is None:
        return None

    step = (pitch_el.findtext("step") or "").strip().upper()
    if step not in NoteName.__members__:
        raise ValueError(f"Invalid step: {step!r}")
    octave = int(pitch_el.findtext("octave", "").strip())
    name = NoteName(step)

    alter_text = pitch_el.findtext("alter")
    if alter_text is None:
        accidental = Accidental.NATURAL
    else:
        accidental = Accidental.from_alter(int(float(alter_text)))

    if accidental == key.accidental_for(name):
        return Pitch(name, octave)
    return Pitch(name, octave, accidental)
