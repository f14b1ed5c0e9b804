"""
Progress models - per-exercise mastery records and the quiz queue.

These are the records the progress store persists. Round-tripping through
``to_yaml_dict`` / ``from_yaml_dict`` is lossless for every field.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field, field_validator

from chuk_mcp_counterpoint.constants import MAX_MASTERY


class ExerciseProgress(BaseModel):
    """
    Progress for one exercise.

    Created on first completion; mutated by later completions and quiz
    results; removed only by a full reset.
    """

    exercise_id: str = Field(..., description="Exercise this record belongs to")
    completed: bool = Field(False, description="Completed at least once")
    best_accuracy: float = Field(0.0, ge=0.0, le=1.0, description="Best accuracy seen (0-1)")
    last_practiced: datetime | None = Field(None, description="Last completion time")
    mastery_level: int = Field(0, ge=0, le=MAX_MASTERY, description="Spaced repetition level")
    next_review_date: datetime | None = Field(None, description="When the next review is due")
    completed_keys: set[str] = Field(default_factory=set, description="Keys completed (e.g. 'Bb')")

    def is_due(self, now: datetime) -> bool:
        """Whether the scheduled review date has passed."""
        return self.next_review_date is not None and self.next_review_date <= now

    def to_yaml_dict(self) -> dict[str, Any]:
        """Convert to a YAML-friendly dict."""
        return {
            "exercise_id": self.exercise_id,
            "completed": self.completed,
            "best_accuracy": self.best_accuracy,
            "last_practiced": _dump_datetime(self.last_practiced),
            "mastery_level": self.mastery_level,
            "next_review_date": _dump_datetime(self.next_review_date),
            "completed_keys": sorted(self.completed_keys),
        }

    @classmethod
    def from_yaml_dict(cls, data: dict[str, Any]) -> ExerciseProgress:
        """Create a record from a YAML-parsed dict."""
        return cls(
            exercise_id=data["exercise_id"],
            completed=data.get("completed", False),
            best_accuracy=data.get("best_accuracy", 0.0),
            last_practiced=data.get("last_practiced"),
            mastery_level=data.get("mastery_level", 0),
            next_review_date=data.get("next_review_date"),
            completed_keys=set(data.get("completed_keys", [])),
        )


class QuizItem(BaseModel):
    """
    A scheduled review of one exercise in one key.

    At most one item per exercise may be queued at a time.
    """

    id: str = Field(default_factory=lambda: uuid.uuid4().hex, description="Quiz item id")
    exercise_id: str = Field(..., description="Exercise to quiz")
    due_date: datetime = Field(..., description="When the quiz becomes due")
    key: str = Field(..., description="Key identifier to quiz in (e.g. 'Bb')")

    model_config = {"frozen": True}

    def to_yaml_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "exercise_id": self.exercise_id,
            "due_date": _dump_datetime(self.due_date),
            "key": self.key,
        }

    @classmethod
    def from_yaml_dict(cls, data: dict[str, Any]) -> QuizItem:
        return cls(
            id=data["id"],
            exercise_id=data["exercise_id"],
            due_date=data["due_date"],
            key=data["key"],
        )


class ProgressSnapshot(BaseModel):
    """Everything the progress store holds: the records and the quiz queue."""

    schema_version: str = Field("progress/v1", description="Schema version")
    progress: dict[str, ExerciseProgress] = Field(
        default_factory=dict, description="Records keyed by exercise id"
    )
    quiz_queue: list[QuizItem] = Field(default_factory=list, description="Queued quizzes")

    @field_validator("quiz_queue")
    @classmethod
    def validate_unique_quizzes(cls, v: list[QuizItem]) -> list[QuizItem]:
        """Ensure no exercise is queued twice."""
        seen: set[str] = set()
        for item in v:
            if item.exercise_id in seen:
                raise ValueError(f"Exercise queued twice: {item.exercise_id}")
            seen.add(item.exercise_id)
        return v

    def to_yaml_dict(self) -> dict[str, Any]:
        """
        Convert to a YAML-friendly dict.

        This produces the canonical progress file format.
        """
        return {
            "schema": self.schema_version,
            "progress": {
                exercise_id: record.to_yaml_dict()
                for exercise_id, record in sorted(self.progress.items())
            },
            "quiz_queue": [item.to_yaml_dict() for item in self.quiz_queue],
        }

    @classmethod
    def from_yaml_dict(cls, data: dict[str, Any]) -> ProgressSnapshot:
        """Create a snapshot from a YAML-parsed dict."""
        return cls(
            schema_version=data.get("schema", "progress/v1"),
            progress={
                exercise_id: ExerciseProgress.from_yaml_dict(record)
                for exercise_id, record in (data.get("progress") or {}).items()
            },
            quiz_queue=[QuizItem.from_yaml_dict(item) for item in data.get("quiz_queue") or []],
        )


def _dump_datetime(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None
