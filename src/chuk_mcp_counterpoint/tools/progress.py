"""
Progress tools - MCP tools for progress and spaced-repetition quizzes.
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any

from chuk_mcp_counterpoint.constants import MAX_MASTERY, ErrorMessages, SuccessMessages
from chuk_mcp_counterpoint.exercises import ExerciseRegistry
from chuk_mcp_counterpoint.progress import ProgressTracker

if TYPE_CHECKING:
    from chuk_mcp_server import ChukMCPServer

logger = logging.getLogger(__name__)


def register_progress_tools(
    mcp: ChukMCPServer,
    tracker: ProgressTracker,
    registry: ExerciseRegistry,
) -> dict[str, Any]:
    """
    Register progress tools with the MCP server.

    Args:
        mcp: The MCP server instance
        tracker: The progress tracker
        registry: The exercise registry

    Returns:
        Dictionary of registered tool functions
    """
    tools: dict[str, Any] = {}

    @mcp.tool  # type: ignore[arg-type]
    async def counterpoint_get_progress(exercise_id: str | None = None) -> str:
        """
        Get progress for one exercise, or for all exercises practiced.

        Args:
            exercise_id: Optional exercise identifier

        Returns:
            JSON string with progress records

        Example:
            counterpoint_get_progress(exercise_id="bassline1_878")
        """
        try:
            if exercise_id is not None:
                record = tracker.get_progress(exercise_id)
                if record is None:
                    return json.dumps(
                        {
                            "status": "error",
                            "message": ErrorMessages.PROGRESS_NOT_FOUND.format(
                                exercise_id=exercise_id
                            ),
                        }
                    )
                return json.dumps({"status": "success", "progress": record.to_yaml_dict()})

            records = tracker.records
            return json.dumps(
                {
                    "status": "success",
                    "progress": [r.to_yaml_dict() for r in records.values()],
                    "count": len(records),
                }
            )
        except Exception as e:
            logger.exception("Failed to get progress")
            return json.dumps({"status": "error", "message": str(e)})

    tools["counterpoint_get_progress"] = counterpoint_get_progress

    @mcp.tool  # type: ignore[arg-type]
    async def counterpoint_get_statistics() -> str:
        """
        Overall practice statistics.

        Returns:
            JSON string with totals, average accuracy and mastery spread

        Example:
            counterpoint_get_statistics()
        """
        try:
            return json.dumps(
                {
                    "status": "success",
                    "statistics": {
                        "total_completed": tracker.total_completed,
                        "average_accuracy": tracker.average_accuracy,
                        "days_since_last_practice": tracker.days_since_last_practice(),
                        "mastery_levels": {
                            str(level): tracker.exercises_at_mastery_level(level)
                            for level in range(MAX_MASTERY + 1)
                        },
                        "quizzes_queued": len(tracker.quiz_queue),
                    },
                }
            )
        except Exception as e:
            logger.exception("Failed to get statistics")
            return json.dumps({"status": "error", "message": str(e)})

    tools["counterpoint_get_statistics"] = counterpoint_get_statistics

    @mcp.tool  # type: ignore[arg-type]
    async def counterpoint_bassline_completion(bassline_id: str) -> str:
        """
        Share of a bassline's exercises completed at least once.

        Args:
            bassline_id: Bassline or interval module id

        Returns:
            JSON string with the completion fraction (0-1)

        Example:
            counterpoint_bassline_completion(bassline_id="bassline1")
        """
        try:
            exercises = registry.exercises_for_bassline(bassline_id)
            return json.dumps(
                {
                    "status": "success",
                    "bassline": bassline_id,
                    "completion": tracker.completion_percentage(bassline_id, exercises),
                    "exercise_count": len(exercises),
                }
            )
        except Exception as e:
            logger.exception(f"Failed to compute completion for {bassline_id}")
            return json.dumps({"status": "error", "message": str(e)})

    tools["counterpoint_bassline_completion"] = counterpoint_bassline_completion

    @mcp.tool  # type: ignore[arg-type]
    async def counterpoint_next_exercise() -> str:
        """
        Suggest what to practice next.

        Exercises due for review come first, then ones never completed.

        Returns:
            JSON string with the suggested exercise id (or null)

        Example:
            counterpoint_next_exercise()
        """
        try:
            exercise = tracker.next_exercise_to_practice(registry.list_exercises())
            return json.dumps(
                {
                    "status": "success",
                    "exercise_id": exercise.id if exercise is not None else None,
                    "name": exercise.name if exercise is not None else None,
                }
            )
        except Exception as e:
            logger.exception("Failed to suggest next exercise")
            return json.dumps({"status": "error", "message": str(e)})

    tools["counterpoint_next_exercise"] = counterpoint_next_exercise

    @mcp.tool  # type: ignore[arg-type]
    async def counterpoint_due_quizzes() -> str:
        """
        List quizzes that are due now.

        Also queues any exercise whose review date has passed.

        Returns:
            JSON string with the due quiz items

        Example:
            counterpoint_due_quizzes()
        """
        try:
            due = tracker.due_for_review()
            return json.dumps(
                {
                    "status": "success",
                    "quizzes": [item.to_yaml_dict() for item in due],
                    "count": len(due),
                }
            )
        except Exception as e:
            logger.exception("Failed to list due quizzes")
            return json.dumps({"status": "error", "message": str(e)})

    tools["counterpoint_due_quizzes"] = counterpoint_due_quizzes

    @mcp.tool  # type: ignore[arg-type]
    async def counterpoint_complete_quiz(quiz_id: str, was_correct: bool) -> str:
        """
        Record a quiz result taken outside a session.

        A correct answer raises mastery one level, a wrong one lowers it.
        Quizzes played with counterpoint_start_quiz settle themselves.

        Args:
            quiz_id: Quiz item id
            was_correct: Whether the quiz was answered correctly

        Returns:
            JSON string with the updated progress record

        Example:
            counterpoint_complete_quiz(quiz_id="3f2a...", was_correct=True)
        """
        try:
            item = next((q for q in tracker.quiz_queue if q.id == quiz_id), None)
            if item is None:
                return json.dumps(
                    {
                        "status": "error",
                        "message": ErrorMessages.QUIZ_NOT_FOUND.format(quiz_id=quiz_id),
                    }
                )

            record = tracker.complete_quiz(item, was_correct)
            return json.dumps(
                {
                    "status": "success",
                    "progress": record.to_yaml_dict() if record is not None else None,
                }
            )
        except Exception as e:
            logger.exception(f"Failed to complete quiz {quiz_id}")
            return json.dumps({"status": "error", "message": str(e)})

    tools["counterpoint_complete_quiz"] = counterpoint_complete_quiz

    @mcp.tool  # type: ignore[arg-type]
    async def counterpoint_reset_progress() -> str:
        """
        Clear all progress and the quiz queue.

        Example:
            counterpoint_reset_progress()
        """
        try:
            tracker.reset()
            return json.dumps({"status": "success", "message": SuccessMessages.PROGRESS_RESET})
        except Exception as e:
            logger.exception("Failed to reset progress")
            return json.dumps({"status": "error", "message": str(e)})

    tools["counterpoint_reset_progress"] = counterpoint_reset_progress

    return tools
