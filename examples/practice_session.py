#!/usr/bin/env python3
"""
Example: Walk through a practice session without a UI.

This demonstrates the session state machine end to end:

1. Load the built-in exercise library
2. Study bassline 1, pattern 8-7-8
3. Practice it, making one mistake and watching it fade
4. Complete it and record progress
5. Move on to the next key around the circle of fourths

Usage:
    python examples/practice_session.py
"""

from chuk_mcp_counterpoint.core import Pitch
from chuk_mcp_counterpoint.exercises import ExerciseRegistry
from chuk_mcp_counterpoint.progress import InMemoryProgressStore, ProgressTracker
from chuk_mcp_counterpoint.session import ManualScheduler, SessionManager, effect_to_dict


def main() -> None:
    """Play through one exercise with a virtual clock."""
    registry = ExerciseRegistry()
    tracker = ProgressTracker(InMemoryProgressStore())
    scheduler = ManualScheduler()
    sessions = SessionManager(registry, tracker, scheduler)

    print("CHUK Counterpoint Practice")
    print("=" * 40)

    session = sessions.start("bassline1_878")
    if session is None:
        print("Exercise not found")
        return

    print(f"Exercise: {session.exercise.name} in {session.current_key.display_name}")
    print(f"  Bass:    {[str(n.pitch) for n in session.transposed_bass]}")
    print(f"  Soprano: {[str(n.pitch) for n in session.transposed_soprano]}")
    print(f"  Figures: {session.figured_bass}")
    print()

    session.start_practice()
    print(f"Practice: {session.feedback_message}")

    # A wrong note: G4 over G3 is an octave, not the expected leading tone
    for effect in session.place_note(Pitch.parse("G4"), 1):
        print(f"  {effect_to_dict(effect)}")
    print(f"  Feedback: {session.feedback_message}")

    scheduler.advance(2.5)
    print(f"  After 2.5s: {len(session.placed_notes)} notes on the staff")
    print()

    for beat, pitch in enumerate(["C5", "B4", "C5"]):
        session.place_note(Pitch.parse(pitch), beat)

    print(f"Review: {session.feedback_message}")
    record = tracker.get_progress("bassline1_878")
    if record is not None:
        print(f"  Mastery: {record.mastery_level}")
        print(f"  Next review: {record.next_review_date:%Y-%m-%d}")
        print(f"  Quiz queued: {tracker.is_queued('bassline1_878')}")
    print()

    session.next_key()
    print(f"Next key: {session.current_key.display_name}")
    print(f"  Bass:    {[str(n.pitch) for n in session.transposed_bass]}")
    print(f"  Soprano: {[str(n.pitch) for n in session.transposed_soprano]}")
    print(f"  Signature: {[f'{n.value}{a.ascii}' for n, a in session.key_signature]}")

    sessions.end()


if __name__ == "__main__":
    main()
