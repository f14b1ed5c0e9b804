"""
Exercise Registry - discovers and loads exercises.

The registry provides access to the built-in library (bassline YAML files
plus the generated interval drills) and to user-owned exercises in a
project directory (YAML or MusicXML). Project exercises override library
exercises with the same id.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml

from chuk_mcp_counterpoint.exercises.intervals import (
    INTERVAL_MODULES,
    IntervalModule,
    interval_exercises,
)
from chuk_mcp_counterpoint.exercises.musicxml import MUSICXML_SUFFIXES, MusicXMLImporter
from chuk_mcp_counterpoint.models.exercise import Bassline, Exercise

logger = logging.getLogger(__name__)

LIBRARY_PATH = Path(__file__).parent / "library"


class ExerciseRegistry:
    """
    Discovers and loads exercises from library and project.

    Everything is loaded on first access and cached; ``reload`` drops the
    cache.
    """

    def __init__(
        self,
        library_path: Path | None = LIBRARY_PATH,
        project_path: Path | None = None,
        include_intervals: bool = True,
    ):
        """
        Initialize the registry.

        Args:
            library_path: Path to the built-in bassline library
            project_path: Path to project exercises (user-owned)
            include_intervals: Whether to add the generated interval drills
        """
        self.library_path = library_path
        self.project_path = project_path
        self.include_intervals = include_intervals
        self.importer = MusicXMLImporter()
        self._exercises: dict[str, Exercise] = {}
        self._basslines: dict[str, Bassline] = {}
        self._loaded = False

    def list_exercises(self, bassline_id: str | None = None) -> list[Exercise]:
        """
        List exercises in load order, optionally for one bassline.

        Args:
            bassline_id: Filter by bassline (or interval module) id

        Returns:
            List of exercises
        """
        self._ensure_loaded()
        result = list(self._exercises.values())
        if bassline_id:
            result = [e for e in result if e.bassline_id == bassline_id]
        return result

    def exercises_for_bassline(self, bassline_id: str) -> list[Exercise]:
        return self.list_exercises(bassline_id=bassline_id)

    def get_exercise(self, exercise_id: str) -> Exercise | None:
        """
        Get an exercise by id.

        Args:
            exercise_id: Exercise identifier (e.g. 'bassline1_878')

        Returns:
            Exercise or None if not found
        """
        self._ensure_loaded()
        return self._exercises.get(exercise_id)

    def list_basslines(self) -> list[Bassline]:
        """Basslines declared by bassline files, in load order."""
        self._ensure_loaded()
        return list(self._basslines.values())

    def get_bassline(self, bassline_id: str) -> Bassline | None:
        self._ensure_loaded()
        return self._basslines.get(bassline_id)

    def list_interval_modules(self) -> list[IntervalModule]:
        """Interval drill modules, or none when drills are left out."""
        return list(INTERVAL_MODULES) if self.include_intervals else []

    def register_exercise(self, exercise: Exercise) -> str:
        """
        Register an exercise programmatically.

        Returns:
            The exercise id
        """
        self._ensure_loaded()
        self._exercises[exercise.id] = exercise
        return exercise.id

    def save_to_project(self, exercise: Exercise) -> Path:
        """
        Write an exercise to the project as YAML.

        Args:
            exercise: Exercise to save

        Returns:
            Path to the written file
        """
        if not self.project_path:
            raise ValueError("No project path configured")

        self.project_path.mkdir(parents=True, exist_ok=True)
        target_path = self.project_path / f"{exercise.id}.yaml"
        with open(target_path, "w") as f:
            yaml.safe_dump(exercise.to_dict(), f, default_flow_style=False, sort_keys=False)

        self._ensure_loaded()
        self._exercises[exercise.id] = exercise
        return target_path

    def reload(self) -> None:
        self._exercises.clear()
        self._basslines.clear()
        self._loaded = False

    def _ensure_loaded(self) -> None:
        if self._loaded:
            return
        self._loaded = True

        if self.library_path and self.library_path.exists():
            self._scan_directory(self.library_path)

        if self.include_intervals:
            for exercise in interval_exercises():
                self._exercises[exercise.id] = exercise

        # Project exercises override library ones
        if self.project_path and self.project_path.exists():
            self._scan_directory(self.project_path)

        logger.debug(f"Loaded {len(self._exercises)} exercises")

    def _scan_directory(self, base_path: Path) -> None:
        """Load every YAML and MusicXML file in a directory."""
        for path in sorted(base_path.iterdir()):
            if not path.is_file():
                continue
            if path.suffix in (".yaml", ".yml"):
                self._load_yaml_file(path)
            elif path.suffix in MUSICXML_SUFFIXES:
                exercise = self.importer.load(path)
                if exercise is not None:
                    self._exercises[exercise.id] = exercise

    def _load_yaml_file(self, path: Path) -> None:
        """Load a bassline file (many exercises) or a single exercise file."""
        try:
            with open(path) as f:
                data = yaml.safe_load(f)
            if not isinstance(data, dict):
                raise ValueError("expected a mapping")

            if data.get("schema", "bassline/v1") == "exercise/v1":
                exercise = Exercise.from_dict(data)
                self._exercises[exercise.id] = exercise
                return

            entries = data.get("exercises") or []
            if not isinstance(entries, list):
                raise ValueError("'exercises' must be a list")

            bassline = _bassline_from_yaml_dict(data)
            self._basslines[bassline.id] = bassline
            defaults = {"bassline": bassline.id, "key": data.get("key", "C_major")}
            if "bass" in data:
                defaults["bass"] = data["bass"]
        except (OSError, yaml.YAMLError, AttributeError, KeyError, TypeError, ValueError) as e:
            logger.warning(f"Skipping malformed exercise file {path}: {e}")
            return

        for entry in entries:
            try:
                exercise = Exercise.from_dict(entry, defaults=defaults)
            except (AttributeError, KeyError, TypeError, ValueError) as e:
                logger.warning(f"Skipping malformed exercise in {path}: {e}")
                continue
            self._exercises[exercise.id] = exercise


def _bassline_from_yaml_dict(data: dict[str, Any]) -> Bassline:
    return Bassline(
        id=data["id"],
        name=data.get("name", data["id"]),
        description=data.get("description", ""),
        scale_degrees=data.get("scale_degrees", []),
    )
