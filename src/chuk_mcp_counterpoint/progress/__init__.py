"""
Progress and spaced repetition.

This module provides:
- ProgressTracker: Mastery levels, review dates and the quiz queue
- ProgressStore: Persistence protocol, with in-memory and YAML stores
"""

from chuk_mcp_counterpoint.progress.store import (
    InMemoryProgressStore,
    ProgressStore,
    YamlProgressStore,
)
from chuk_mcp_counterpoint.progress.tracker import ProgressTracker, review_interval

__all__ = [
    "InMemoryProgressStore",
    "ProgressStore",
    "ProgressTracker",
    "YamlProgressStore",
    "review_interval",
]
