"""
Exercise tools - MCP tools for exercise discovery and export.

Tools for listing basslines and exercises, describing an exercise in any
key, importing MusicXML and rendering exercises to MIDI.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any

from chuk_mcp_counterpoint.constants import DEFAULT_TEMPO, ErrorMessages
from chuk_mcp_counterpoint.core.interval import Interval
from chuk_mcp_counterpoint.core.key import Key
from chuk_mcp_counterpoint.core.transpose import transpose_voice
from chuk_mcp_counterpoint.exercises import ExerciseRegistry, MusicXMLImporter, ids_from_filename
from chuk_mcp_counterpoint.models.exercise import Exercise
from chuk_mcp_counterpoint.playback import exercise_events, render_exercise
from chuk_mcp_counterpoint.session import figure_for

if TYPE_CHECKING:
    from chuk_mcp_server import ChukMCPServer

logger = logging.getLogger(__name__)


def _exercise_summary(exercise: Exercise) -> dict[str, Any]:
    return {
        "id": exercise.id,
        "name": exercise.name,
        "bassline": exercise.bassline_id,
        "pattern": exercise.pattern_name,
        "key": exercise.key.short_name,
        "species": exercise.species.value,
        "note_count": exercise.note_count,
    }


def _parse_key(key: str | None, default: Key) -> Key:
    if key is None:
        return default
    try:
        return Key.parse(key)
    except ValueError:
        raise ValueError(ErrorMessages.INVALID_KEY.format(key=key)) from None


def register_exercise_tools(
    mcp: ChukMCPServer,
    registry: ExerciseRegistry,
    output_dir: Path,
) -> dict[str, Any]:
    """
    Register exercise tools with the MCP server.

    Args:
        mcp: The MCP server instance
        registry: The exercise registry
        output_dir: Directory for rendered MIDI files

    Returns:
        Dictionary of registered tool functions
    """
    tools: dict[str, Any] = {}
    importer = MusicXMLImporter()

    @mcp.tool  # type: ignore[arg-type]
    async def counterpoint_list_basslines() -> str:
        """
        List the available basslines and interval drill modules.

        Either id can be passed to counterpoint_list_exercises.

        Returns:
            JSON string with bassline and module summaries and exercise counts

        Example:
            counterpoint_list_basslines()
        """
        try:
            basslines = registry.list_basslines()
            modules = registry.list_interval_modules()
            return json.dumps(
                {
                    "status": "success",
                    "basslines": [
                        {
                            "id": b.id,
                            "name": b.name,
                            "description": b.description,
                            "scale_degrees": b.scale_degrees,
                            "exercise_count": len(registry.exercises_for_bassline(b.id)),
                        }
                        for b in basslines
                    ],
                    "count": len(basslines),
                    "modules": [
                        {
                            "id": m.id,
                            "name": m.name,
                            "description": m.description,
                            "exercise_count": len(registry.exercises_for_bassline(m.id)),
                        }
                        for m in modules
                    ],
                }
            )
        except Exception as e:
            logger.exception("Failed to list basslines")
            return json.dumps({"status": "error", "message": str(e)})

    tools["counterpoint_list_basslines"] = counterpoint_list_basslines

    @mcp.tool  # type: ignore[arg-type]
    async def counterpoint_list_exercises(bassline: str | None = None) -> str:
        """
        List exercises, optionally for one bassline or interval module.

        Args:
            bassline: Optional bassline id (e.g. 'bassline1', 'intervals_perfect')

        Returns:
            JSON string with exercise summaries

        Example:
            counterpoint_list_exercises(bassline="bassline1")
        """
        try:
            exercises = registry.list_exercises(bassline_id=bassline)
            return json.dumps(
                {
                    "status": "success",
                    "exercises": [_exercise_summary(e) for e in exercises],
                    "count": len(exercises),
                }
            )
        except Exception as e:
            logger.exception("Failed to list exercises")
            return json.dumps({"status": "error", "message": str(e)})

    tools["counterpoint_list_exercises"] = counterpoint_list_exercises

    @mcp.tool  # type: ignore[arg-type]
    async def counterpoint_describe_exercise(exercise_id: str, key: str | None = None) -> str:
        """
        Show an exercise's voices and figured bass, optionally transposed.

        Args:
            exercise_id: Exercise identifier
            key: Optional key to transpose to (e.g. 'Bb', 'F#')

        Returns:
            JSON string with bass, sopranos, figures and key signature

        Example:
            counterpoint_describe_exercise(exercise_id="bassline1_878", key="Eb")
        """
        try:
            exercise = registry.get_exercise(exercise_id)
            if exercise is None:
                return json.dumps(
                    {
                        "status": "error",
                        "message": ErrorMessages.EXERCISE_NOT_FOUND.format(
                            exercise_id=exercise_id
                        ),
                    }
                )

            target = _parse_key(key, exercise.key)
            bass = transpose_voice(exercise.bass, exercise.key, target)
            sopranos = [transpose_voice(v, exercise.key, target) for v in exercise.sopranos]
            figures = [
                figure_for(Interval.between(b.pitch, s.pitch, target))
                for b, s in zip(bass, sopranos[0])
            ]

            return json.dumps(
                {
                    "status": "success",
                    "exercise": {
                        **_exercise_summary(exercise),
                        "key": target.short_name,
                        "key_name": target.display_name,
                        "key_signature": [
                            f"{name.value}{acc.ascii}" for name, acc in target.signature()
                        ],
                        "bass": [str(p) for p in bass.pitches],
                        "sopranos": [[str(p) for p in v.pitches] for v in sopranos],
                        "figured_bass": figures,
                    },
                }
            )
        except Exception as e:
            logger.exception(f"Failed to describe exercise {exercise_id}")
            return json.dumps({"status": "error", "message": str(e)})

    tools["counterpoint_describe_exercise"] = counterpoint_describe_exercise

    @mcp.tool  # type: ignore[arg-type]
    async def counterpoint_list_keys() -> str:
        """
        List the transposition cycle (circle of fourths from C).

        Returns:
            JSON string with each key and its signature

        Example:
            counterpoint_list_keys()
        """
        try:
            return json.dumps(
                {
                    "status": "success",
                    "keys": [
                        {
                            "key": k.short_name,
                            "name": k.display_name,
                            "fifths": k.fifths,
                            "signature": [
                                f"{name.value}{acc.ascii}" for name, acc in k.signature()
                            ],
                        }
                        for k in Key.CIRCLE_OF_FOURTHS
                    ],
                }
            )
        except Exception as e:
            logger.exception("Failed to list keys")
            return json.dumps({"status": "error", "message": str(e)})

    tools["counterpoint_list_keys"] = counterpoint_list_keys

    @mcp.tool  # type: ignore[arg-type]
    async def counterpoint_import_musicxml(path: str) -> str:
        """
        Import a two-voice MusicXML file into the project.

        The file name gives the ids: 'bassline1_878.xml' becomes exercise
        'bassline1_878' in bassline 'bassline1'.

        Args:
            path: Path to a .xml or .musicxml file

        Returns:
            JSON string with the imported exercise and its saved path

        Example:
            counterpoint_import_musicxml(path="scores/bassline1_878.musicxml")
        """
        try:
            source = Path(path)
            exercise = importer.load(source)
            if exercise is None:
                exercise_id, _, _ = ids_from_filename(source)
                return json.dumps(
                    {
                        "status": "error",
                        "message": f"Could not import {source.name} as exercise '{exercise_id}'",
                    }
                )

            saved = registry.save_to_project(exercise)
            return json.dumps(
                {
                    "status": "success",
                    "exercise": _exercise_summary(exercise),
                    "path": str(saved),
                }
            )
        except Exception as e:
            logger.exception(f"Failed to import {path}")
            return json.dumps({"status": "error", "message": str(e)})

    tools["counterpoint_import_musicxml"] = counterpoint_import_musicxml

    @mcp.tool  # type: ignore[arg-type]
    async def counterpoint_export_midi(
        exercise_id: str,
        key: str | None = None,
        include_soprano: bool = True,
        tempo: int = DEFAULT_TEMPO,
        output_name: str | None = None,
    ) -> str:
        """
        Render an exercise to a MIDI file.

        Args:
            exercise_id: Exercise identifier
            key: Optional key to transpose to
            include_soprano: Include the solution line (default True)
            tempo: Tempo in BPM
            output_name: Optional file name (without .mid extension)

        Returns:
            JSON string with the output path

        Example:
            counterpoint_export_midi(exercise_id="bassline2_contrary", key="D")
        """
        try:
            exercise = registry.get_exercise(exercise_id)
            if exercise is None:
                return json.dumps(
                    {
                        "status": "error",
                        "message": ErrorMessages.EXERCISE_NOT_FOUND.format(
                            exercise_id=exercise_id
                        ),
                    }
                )

            target = _parse_key(key, exercise.key)
            bass = transpose_voice(exercise.bass, exercise.key, target)
            soprano = (
                transpose_voice(exercise.primary_soprano, exercise.key, target)
                if include_soprano
                else None
            )
            events = exercise_events(bass, soprano, target)

            filename = f"{output_name or f'{exercise_id}-{target.short_name}'}.mid"
            output_path = output_dir / filename
            output_dir.mkdir(parents=True, exist_ok=True)
            render_exercise(events, tempo_bpm=tempo).save(output_path)

            return json.dumps(
                {
                    "status": "success",
                    "path": str(output_path),
                    "key": target.short_name,
                    "events": len(events),
                    "tempo": tempo,
                }
            )
        except Exception as e:
            logger.exception(f"Failed to export {exercise_id}")
            return json.dumps({"status": "error", "message": str(e)})

    tools["counterpoint_export_midi"] = counterpoint_export_midi

    return tools
