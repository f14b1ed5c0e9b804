#!/usr/bin/env python3
"""
Example: Render an exercise in all twelve keys to MIDI.

Usage:
    python examples/export_circle.py [exercise_id]
    # Creates: examples/output/<exercise_id>-<key>.mid

Each file holds the bass on channel 1 and the soprano on channel 2,
transposed around the circle of fourths from C.
"""

import sys
from pathlib import Path

from chuk_mcp_counterpoint.core import Key, transpose_voice
from chuk_mcp_counterpoint.exercises import ExerciseRegistry
from chuk_mcp_counterpoint.playback import exercise_events, render_exercise


def main() -> None:
    """Export one exercise in every key."""
    exercise_id = sys.argv[1] if len(sys.argv) > 1 else "bassline2_contrary"
    output_dir = Path(__file__).parent / "output"
    output_dir.mkdir(exist_ok=True)

    registry = ExerciseRegistry()
    exercise = registry.get_exercise(exercise_id)
    if exercise is None:
        print(f"Exercise not found: {exercise_id}")
        sys.exit(1)

    print(f"Exporting {exercise.name} ({exercise.pattern_name})")
    for key in Key.CIRCLE_OF_FOURTHS:
        bass = transpose_voice(exercise.bass, exercise.key, key)
        soprano = transpose_voice(exercise.primary_soprano, exercise.key, key)
        events = exercise_events(bass, soprano, key)

        output_path = output_dir / f"{exercise_id}-{key.short_name}.mid"
        render_exercise(events).save(output_path)
        print(f"  {key.display_name:<10} {[p.spell() for p in soprano.pitches]} -> {output_path.name}")


if __name__ == "__main__":
    main()
