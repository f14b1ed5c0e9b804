"""
MCP tool implementations.

Tools are organized by domain:
- exercises - Exercise discovery, MusicXML import, MIDI export
- session - Study / practice / review of the active exercise
- progress - Mastery records and spaced-repetition quizzes
"""

from chuk_mcp_counterpoint.tools.exercises import register_exercise_tools
from chuk_mcp_counterpoint.tools.progress import register_progress_tools
from chuk_mcp_counterpoint.tools.session import register_session_tools

__all__ = [
    "register_exercise_tools",
    "register_progress_tools",
    "register_session_tools",
]
