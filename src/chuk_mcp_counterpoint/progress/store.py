"""
Progress stores - where progress records and the quiz queue live.

The tracker only needs ``load`` and ``save``. Two stores are provided:
an in-memory store for tests and embedding, and a YAML file store.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Protocol

import yaml
from pydantic import ValidationError

from chuk_mcp_counterpoint.models.progress import ProgressSnapshot

logger = logging.getLogger(__name__)


class ProgressStore(Protocol):
    """Opaque persistence for progress snapshots."""

    def load(self) -> ProgressSnapshot: ...

    def save(self, snapshot: ProgressSnapshot) -> None: ...


class InMemoryProgressStore:
    """
    Keeps the last saved snapshot in memory.

    Snapshots are copied on the way in and out so callers never share
    mutable state with the store.
    """

    def __init__(self, snapshot: ProgressSnapshot | None = None):
        self._snapshot = snapshot.model_copy(deep=True) if snapshot else ProgressSnapshot()
        self.save_count = 0

    def load(self) -> ProgressSnapshot:
        return self._snapshot.model_copy(deep=True)

    def save(self, snapshot: ProgressSnapshot) -> None:
        self._snapshot = snapshot.model_copy(deep=True)
        self.save_count += 1


class YamlProgressStore:
    """
    Stores progress in a single YAML file.

    A missing or unreadable file loads as empty progress. The next save
    overwrites it.
    """

    def __init__(self, path: Path):
        """
        Initialize the store.

        Args:
            path: File to read and write (parent directories are created on save)
        """
        self.path = path

    def load(self) -> ProgressSnapshot:
        if not self.path.exists():
            return ProgressSnapshot()

        try:
            with open(self.path) as f:
                data = yaml.safe_load(f)
            if not data:
                return ProgressSnapshot()
            if not isinstance(data, dict):
                raise ValueError("expected a mapping")
            return ProgressSnapshot.from_yaml_dict(data)
        except (
            yaml.YAMLError,
            ValidationError,
            AttributeError,
            KeyError,
            TypeError,
            ValueError,
        ) as e:
            logger.warning(f"Ignoring unreadable progress file {self.path}: {e}")
            return ProgressSnapshot()

    def save(self, snapshot: ProgressSnapshot) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)

        with open(self.path, "w") as f:
            yaml.safe_dump(snapshot.to_yaml_dict(), f, default_flow_style=False, sort_keys=False)

        logger.debug(f"Saved progress for {len(snapshot.progress)} exercises to {self.path}")
