#!/usr/bin/env python3
"""
Async Counterpoint MCP Server using chuk-mcp-server

This server provides MCP tools for two-part counterpoint ear and eye
training. A bass line is given; the user learns the soprano lines that fit
it, then recalls them in every key around the circle of fourths.

The server provides tools for:
- Browsing basslines, exercises and interval drills
- Studying and practicing an exercise, placing notes one beat at a time
- Transposing through the circle of fourths
- Tracking mastery with spaced-repetition quizzes
- Importing MusicXML and rendering exercises to MIDI files
"""

import logging
from pathlib import Path

from chuk_mcp_server import ChukMCPServer

from chuk_mcp_counterpoint.exercises import LIBRARY_PATH, ExerciseRegistry
from chuk_mcp_counterpoint.playback import MidiFilePlayback
from chuk_mcp_counterpoint.progress import ProgressTracker, YamlProgressStore
from chuk_mcp_counterpoint.session import AsyncioScheduler, SessionManager
from chuk_mcp_counterpoint.tools import (
    register_exercise_tools,
    register_progress_tools,
    register_session_tools,
)

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# Create the MCP server instance
mcp = ChukMCPServer("chuk-mcp-counterpoint")

# Paths - use standard project structure
BASE_PATH = Path.cwd()
EXERCISES_DIR = BASE_PATH / "exercises"
PROGRESS_FILE = BASE_PATH / "progress" / "progress.yaml"
OUTPUT_DIR = BASE_PATH / "output"

# Create managers
exercise_registry = ExerciseRegistry(
    library_path=LIBRARY_PATH,
    project_path=EXERCISES_DIR,
)
progress_tracker = ProgressTracker(YamlProgressStore(PROGRESS_FILE))
session_manager = SessionManager(
    exercise_registry,
    progress_tracker,
    AsyncioScheduler(),
    playback=MidiFilePlayback(OUTPUT_DIR / "playback"),
)

# Register all tools
exercise_tools = register_exercise_tools(mcp, exercise_registry, OUTPUT_DIR)
session_tools = register_session_tools(mcp, session_manager)
progress_tools = register_progress_tools(mcp, progress_tracker, exercise_registry)

# Export tool functions for direct access
counterpoint_list_basslines = exercise_tools["counterpoint_list_basslines"]
counterpoint_list_exercises = exercise_tools["counterpoint_list_exercises"]
counterpoint_describe_exercise = exercise_tools["counterpoint_describe_exercise"]
counterpoint_list_keys = exercise_tools["counterpoint_list_keys"]
counterpoint_import_musicxml = exercise_tools["counterpoint_import_musicxml"]
counterpoint_export_midi = exercise_tools["counterpoint_export_midi"]

counterpoint_start_session = session_tools["counterpoint_start_session"]
counterpoint_get_session = session_tools["counterpoint_get_session"]
counterpoint_start_quiz = session_tools["counterpoint_start_quiz"]
counterpoint_skip_quiz = session_tools["counterpoint_skip_quiz"]
counterpoint_start_study = session_tools["counterpoint_start_study"]
counterpoint_start_practice = session_tools["counterpoint_start_practice"]
counterpoint_practice_again = session_tools["counterpoint_practice_again"]
counterpoint_next_key = session_tools["counterpoint_next_key"]
counterpoint_previous_key = session_tools["counterpoint_previous_key"]
counterpoint_set_key = session_tools["counterpoint_set_key"]
counterpoint_place_note = session_tools["counterpoint_place_note"]
counterpoint_show_hint = session_tools["counterpoint_show_hint"]
counterpoint_play = session_tools["counterpoint_play"]
counterpoint_end_session = session_tools["counterpoint_end_session"]

counterpoint_get_progress = progress_tools["counterpoint_get_progress"]
counterpoint_get_statistics = progress_tools["counterpoint_get_statistics"]
counterpoint_bassline_completion = progress_tools["counterpoint_bassline_completion"]
counterpoint_next_exercise = progress_tools["counterpoint_next_exercise"]
counterpoint_due_quizzes = progress_tools["counterpoint_due_quizzes"]
counterpoint_complete_quiz = progress_tools["counterpoint_complete_quiz"]
counterpoint_reset_progress = progress_tools["counterpoint_reset_progress"]

logger.info("CHUK Counterpoint MCP Server initialized")
logger.info(f"  Library path: {LIBRARY_PATH}")
logger.info(f"  Exercises dir: {EXERCISES_DIR}")
logger.info(f"  Progress file: {PROGRESS_FILE}")
logger.info(f"  Output dir: {OUTPUT_DIR}")
