"""
Pytest configuration and shared fixtures.
"""

import tempfile
from datetime import UTC, datetime
from pathlib import Path

import pytest

from chuk_mcp_counterpoint.exercises import ExerciseRegistry
from chuk_mcp_counterpoint.models import Exercise
from chuk_mcp_counterpoint.progress import InMemoryProgressStore, ProgressTracker
from chuk_mcp_counterpoint.session import ManualScheduler


class FixedClock:
    """A clock that only moves when told to."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture
def temp_dir() -> Path:
    """Create a temporary directory for test outputs."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def temp_midi_path(temp_dir: Path) -> Path:
    """Path for a temporary MIDI file."""
    return temp_dir / "test.mid"


@pytest.fixture
def scheduler() -> ManualScheduler:
    """Virtual clock for session timers."""
    return ManualScheduler()


@pytest.fixture
def clock() -> FixedClock:
    """Wall clock pinned to a known instant."""
    return FixedClock(datetime(2025, 1, 1, 12, 0, tzinfo=UTC))


@pytest.fixture
def tracker(clock: FixedClock) -> ProgressTracker:
    """Progress tracker over an in-memory store."""
    return ProgressTracker(InMemoryProgressStore(), clock=clock)


@pytest.fixture
def registry() -> ExerciseRegistry:
    """Registry over the built-in library."""
    return ExerciseRegistry()


@pytest.fixture
def bassline1_878(registry: ExerciseRegistry) -> Exercise:
    """Bassline 1, pattern 8-7-8: bass C3 G3 C3, soprano C5 B4 C5."""
    exercise = registry.get_exercise("bassline1_878")
    assert exercise is not None
    return exercise
