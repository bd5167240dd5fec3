"""Run one rest interval in the terminal: python -m smartrest."""

import argparse
import logging
import sys
from datetime import datetime

from PyQt6.QtCore import QCoreApplication, QTimer

from .database.db import configure_engine, init_db
from .feedback.haptics import NullFeedbackSink
from .settings import load_settings
from .suggestions.context import TimeOfDay, WorkoutContext
from .timer.engine import TimerEvent


def _parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="smartrest", description=__doc__)
    parser.add_argument("exercise", help="exercise just performed")
    parser.add_argument("--type", default="strength", dest="exercise_type")
    parser.add_argument("--set", type=int, default=1, dest="set_number")
    parser.add_argument("--sets", type=int, default=3, dest="total_sets")
    parser.add_argument("--intensity", type=int, default=5)
    parser.add_argument("--progress", type=float, default=0.0)
    parser.add_argument("--compound", action="store_true")
    parser.add_argument("--time", type=int, default=None,
                        help="pin the countdown to this many seconds")
    parser.add_argument("--user", default=None)
    parser.add_argument("--workout", default=None)
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(sys.argv[1:] if argv is None else argv)
    settings = load_settings()
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if settings.database_url:
        configure_engine(settings.database_url)
    init_db()

    app = QCoreApplication(sys.argv[:1])

    # imported late: QSoundEffect wants an application instance
    from .analytics.baseline import HistoricalBaseline
    from .session import RestSession
    from .suggestions.engine import SuggestionEngine

    if settings.sound_cues_enabled:
        from .feedback.sounds import SoundCueSink
        sink = SoundCueSink()
        sink.set_volume(settings.sound_volume)
    else:
        sink = NullFeedbackSink()

    session = RestSession(
        args.user,
        args.workout,
        engine=SuggestionEngine(HistoricalBaseline(settings.history_window)),
        sink=sink,
        initial_time=args.time,
        low_time_threshold=settings.low_time_threshold,
    )
    context = WorkoutContext(
        exercise_name=args.exercise,
        exercise_type=args.exercise_type,
        set_number=args.set_number,
        total_sets=args.total_sets,
        workout_progress=args.progress,
        is_compound_movement=args.compound,
        exercise_intensity=args.intensity,
        time_of_day=TimeOfDay.for_hour(datetime.now().hour),
    )

    session.update_context(context)
    for s in session.suggestions:
        print(f"  {s.time:>4}s  {s.reason}  ({s.confidence:.0%})")

    def on_tick(remaining: int) -> None:
        print(f"\r{remaining // 60:02d}:{remaining % 60:02d}", end="", flush=True)

    def on_event(event: TimerEvent) -> None:
        if event.interval is not None:
            print()
            # the dispatcher saw this event first, so its write is queued ahead
            QTimer.singleShot(0, app.quit)

    session.timer.tick.connect(on_tick)
    session.timer.event_emitted.connect(on_event)
    session.timer.start()

    return app.exec()


if __name__ == "__main__":
    sys.exit(main())
