"""
Session tools - MCP tools that drive the active exercise session.

Tools for starting a session or a quiz, switching phase and key, placing
notes and asking for hints. Every tool returns the session snapshot so
the caller always sees the current state.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from chuk_mcp_counterpoint.constants import DEFAULT_TEMPO, ErrorMessages, SuccessMessages
from chuk_mcp_counterpoint.core.key import Key
from chuk_mcp_counterpoint.core.pitch import Pitch
from chuk_mcp_counterpoint.models.progress import QuizItem
from chuk_mcp_counterpoint.session import (
    ExerciseSession,
    SessionEffect,
    SessionManager,
    effect_to_dict,
)

if TYPE_CHECKING:
    from chuk_mcp_server import ChukMCPServer

logger = logging.getLogger(__name__)


def _no_session() -> str:
    return json.dumps({"status": "error", "message": ErrorMessages.NO_SESSION})


def _session_result(session: ExerciseSession, effects: list[SessionEffect]) -> str:
    return json.dumps(
        {
            "status": "success",
            "effects": [effect_to_dict(e) for e in effects],
            "session": session.snapshot(),
        }
    )


def register_session_tools(mcp: ChukMCPServer, sessions: SessionManager) -> dict[str, Any]:
    """
    Register session tools with the MCP server.

    Args:
        mcp: The MCP server instance
        sessions: The session manager

    Returns:
        Dictionary of registered tool functions
    """
    tools: dict[str, Any] = {}

    async def _transition(
        name: str, action: Callable[[ExerciseSession], list[SessionEffect]]
    ) -> str:
        session = sessions.active
        if session is None:
            return _no_session()
        try:
            return _session_result(session, action(session))
        except Exception as e:
            logger.exception(f"Failed to {name}")
            return json.dumps({"status": "error", "message": str(e)})

    @mcp.tool  # type: ignore[arg-type]
    async def counterpoint_start_session(
        exercise_id: str,
        key: str | None = None,
        tempo: int = DEFAULT_TEMPO,
    ) -> str:
        """
        Start a session on an exercise, in study phase.

        Any active session is closed first.

        Args:
            exercise_id: Exercise identifier (e.g. 'bassline1_878')
            key: Optional key from the circle of fourths to start in
            tempo: Playback tempo in BPM

        Returns:
            JSON string with the session snapshot

        Example:
            counterpoint_start_session(exercise_id="bassline1_878")
        """
        try:
            start_key = None
            if key is not None:
                try:
                    start_key = Key.parse(key)
                except ValueError:
                    return json.dumps(
                        {"status": "error", "message": ErrorMessages.INVALID_KEY.format(key=key)}
                    )

            session = sessions.start(exercise_id, key=start_key, tempo=tempo)
            if session is None:
                return json.dumps(
                    {
                        "status": "error",
                        "message": ErrorMessages.EXERCISE_NOT_FOUND.format(
                            exercise_id=exercise_id
                        ),
                    }
                )

            return json.dumps(
                {
                    "status": "success",
                    "message": SuccessMessages.SESSION_STARTED.format(
                        exercise_id=exercise_id, key=session.current_key.display_name
                    ),
                    "session": session.snapshot(),
                }
            )
        except Exception as e:
            logger.exception(f"Failed to start session on {exercise_id}")
            return json.dumps({"status": "error", "message": str(e)})

    tools["counterpoint_start_session"] = counterpoint_start_session

    @mcp.tool  # type: ignore[arg-type]
    async def counterpoint_get_session() -> str:
        """
        Get the active session's state.

        Returns:
            JSON string with the session snapshot

        Example:
            counterpoint_get_session()
        """
        return await _transition("get session", lambda s: [])

    tools["counterpoint_get_session"] = counterpoint_get_session

    def _find_quiz(quiz_id: str | None) -> QuizItem | None:
        if quiz_id is None:
            return sessions.tracker.next_quiz()
        return next((q for q in sessions.tracker.quiz_queue if q.id == quiz_id), None)

    def _missing_quiz(quiz_id: str | None) -> str:
        message = (
            ErrorMessages.NO_QUIZ
            if quiz_id is None
            else ErrorMessages.QUIZ_NOT_FOUND.format(quiz_id=quiz_id)
        )
        return json.dumps({"status": "error", "message": message})

    @mcp.tool  # type: ignore[arg-type]
    async def counterpoint_start_quiz(
        quiz_id: str | None = None,
        tempo: int = DEFAULT_TEMPO,
    ) -> str:
        """
        Start a quiz: practice straight away, in the quiz key, soprano hidden.

        Completing it with at least 70% accuracy passes the quiz and raises
        mastery by one; below that it fails and lowers mastery by one. Any
        active session is closed first.

        Args:
            quiz_id: Queued quiz item id (default: the earliest due quiz)
            tempo: Playback tempo in BPM

        Returns:
            JSON string with the quiz item and the session snapshot

        Example:
            counterpoint_start_quiz()
        """
        try:
            item = _find_quiz(quiz_id)
            if item is None:
                return _missing_quiz(quiz_id)

            session = sessions.start_quiz(item, tempo=tempo)
            if session is None:
                return json.dumps(
                    {
                        "status": "error",
                        "message": ErrorMessages.EXERCISE_NOT_FOUND.format(
                            exercise_id=item.exercise_id
                        ),
                    }
                )

            return json.dumps(
                {
                    "status": "success",
                    "message": SuccessMessages.QUIZ_STARTED.format(
                        exercise_id=item.exercise_id, key=session.current_key.display_name
                    ),
                    "quiz": item.to_yaml_dict(),
                    "session": session.snapshot(),
                }
            )
        except Exception as e:
            logger.exception("Failed to start quiz")
            return json.dumps({"status": "error", "message": str(e)})

    tools["counterpoint_start_quiz"] = counterpoint_start_quiz

    @mcp.tool  # type: ignore[arg-type]
    async def counterpoint_skip_quiz(quiz_id: str | None = None) -> str:
        """
        Skip a quiz for now. A skipped quiz counts as a miss.

        Args:
            quiz_id: Queued quiz item id (default: the quiz in progress)

        Returns:
            JSON string with the updated progress record

        Example:
            counterpoint_skip_quiz()
        """
        try:
            item = sessions.active_quiz if quiz_id is None else _find_quiz(quiz_id)
            if item is None:
                return _missing_quiz(quiz_id)

            record = sessions.skip_quiz(item)
            return json.dumps(
                {
                    "status": "success",
                    "message": SuccessMessages.QUIZ_SKIPPED,
                    "progress": record.to_yaml_dict() if record is not None else None,
                }
            )
        except Exception as e:
            logger.exception("Failed to skip quiz")
            return json.dumps({"status": "error", "message": str(e)})

    tools["counterpoint_skip_quiz"] = counterpoint_skip_quiz

    @mcp.tool  # type: ignore[arg-type]
    async def counterpoint_start_study() -> str:
        """
        Return to study: both voices visible, placed notes cleared.

        Example:
            counterpoint_start_study()
        """
        return await _transition("start study", lambda s: s.start_study())

    tools["counterpoint_start_study"] = counterpoint_start_study

    @mcp.tool  # type: ignore[arg-type]
    async def counterpoint_start_practice() -> str:
        """
        Start practice: the soprano is hidden and notes can be placed.

        Example:
            counterpoint_start_practice()
        """
        return await _transition("start practice", lambda s: s.start_practice())

    tools["counterpoint_start_practice"] = counterpoint_start_practice

    @mcp.tool  # type: ignore[arg-type]
    async def counterpoint_practice_again() -> str:
        """
        Retry the exercise in the same key.

        Example:
            counterpoint_practice_again()
        """
        return await _transition("practice again", lambda s: s.practice_again())

    tools["counterpoint_practice_again"] = counterpoint_practice_again

    @mcp.tool  # type: ignore[arg-type]
    async def counterpoint_next_key() -> str:
        """
        Move to the next key around the circle of fourths and practice there.

        Example:
            counterpoint_next_key()
        """
        return await _transition("move to next key", lambda s: s.next_key())

    tools["counterpoint_next_key"] = counterpoint_next_key

    @mcp.tool  # type: ignore[arg-type]
    async def counterpoint_previous_key() -> str:
        """
        Move to the previous key around the circle of fourths, in study.

        Example:
            counterpoint_previous_key()
        """
        return await _transition("move to previous key", lambda s: s.previous_key())

    tools["counterpoint_previous_key"] = counterpoint_previous_key

    @mcp.tool  # type: ignore[arg-type]
    async def counterpoint_set_key(key: str) -> str:
        """
        Jump to a key in the circle of fourths, in study.

        Args:
            key: Key name (e.g. 'Eb', 'F#')

        Example:
            counterpoint_set_key(key="Eb")
        """
        try:
            target = Key.parse(key)
        except ValueError:
            return json.dumps(
                {"status": "error", "message": ErrorMessages.INVALID_KEY.format(key=key)}
            )
        return await _transition(f"set key {key}", lambda s: s.set_key(target))

    tools["counterpoint_set_key"] = counterpoint_set_key

    @mcp.tool  # type: ignore[arg-type]
    async def counterpoint_place_note(pitch: str, beat_index: int) -> str:
        """
        Place a soprano note during practice.

        A pitch without an accidental follows the key signature. Wrong
        notes are labelled with their interval above the bass and fade
        away after a moment.

        Args:
            pitch: Pitch name (e.g. 'C5', 'F#4', 'Bb4')
            beat_index: Which note of the line (0-based)

        Returns:
            JSON string with effects and the session snapshot

        Example:
            counterpoint_place_note(pitch="B4", beat_index=1)
        """
        try:
            parsed = Pitch.parse(pitch)
        except ValueError:
            return json.dumps(
                {"status": "error", "message": ErrorMessages.INVALID_PITCH.format(pitch=pitch)}
            )
        return await _transition("place note", lambda s: s.place_note(parsed, beat_index))

    tools["counterpoint_place_note"] = counterpoint_place_note

    @mcp.tool  # type: ignore[arg-type]
    async def counterpoint_show_hint() -> str:
        """
        Briefly reveal the soprano during practice.

        Example:
            counterpoint_show_hint()
        """
        return await _transition("show hint", lambda s: s.show_hint())

    tools["counterpoint_show_hint"] = counterpoint_show_hint

    @mcp.tool  # type: ignore[arg-type]
    async def counterpoint_play(bass_only: bool = False) -> str:
        """
        Play the exercise in the current key.

        The soprano sounds only while it is visible.

        Args:
            bass_only: Play just the bass line

        Returns:
            JSON string with the events sent to the audio port

        Example:
            counterpoint_play(bass_only=True)
        """
        session = sessions.active
        if session is None:
            return _no_session()
        try:
            if bass_only:
                session.play_bass()
                events = session.playback_events(include_soprano=False)
            else:
                session.play_exercise()
                events = session.playback_events()
            return json.dumps(
                {
                    "status": "success",
                    "tempo": session.tempo,
                    "events": [e.to_dict() for e in events],
                }
            )
        except Exception as e:
            logger.exception("Failed to play exercise")
            return json.dumps({"status": "error", "message": str(e)})

    tools["counterpoint_play"] = counterpoint_play

    @mcp.tool  # type: ignore[arg-type]
    async def counterpoint_end_session() -> str:
        """
        End the active session.

        Returns:
            JSON string confirming the session was closed

        Example:
            counterpoint_end_session()
        """
        try:
            if not sessions.end():
                return _no_session()
            return json.dumps({"status": "success", "message": "Session ended."})
        except Exception as e:
            logger.exception("Failed to end session")
            return json.dumps({"status": "error", "message": str(e)})

    tools["counterpoint_end_session"] = counterpoint_end_session

    return tools
