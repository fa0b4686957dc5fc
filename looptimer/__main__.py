"""Run a LoopTimer session from the command line: python -m looptimer."""

from __future__ import annotations

import argparse
import json
import logging
import signal
import sys
from pathlib import Path

from PyQt6.QtCore import QTimer
from PyQt6.QtGui import QGuiApplication

from .audio.player import TonePlayer
from .audio.tones import TONE_IDS, tone_duration, tone_label
from .database.db import init_db
from .models import ActiveTimerState, TimerConfig, TimerPhase
from .saved_timers import SavedTimers
from .settings import AppSettings, load_settings, new_timer_config
from .timer.engine import TimerEngine


logger = logging.getLogger(__name__)


def format_clock(seconds: int) -> str:
    minutes, seconds = divmod(max(0, seconds), 60)
    return f"{minutes:02d}:{seconds:02d}"


def format_state(state: ActiveTimerState) -> str:
    """One status line per snapshot, e.g. ``[running] 00:42  rep 2/3  30%``."""
    reps = "∞" if state.is_infinite else str(state.total_reps)
    phase = state.phase.value
    if state.phase == TimerPhase.PAUSED and state.resume_to is not None:
        phase = f"paused:{state.resume_to.value}"
    return (
        f"[{phase}] {format_clock(state.seconds_remaining)}  "
        f"rep {state.current_rep}/{reps}  {state.progress:.0%}"
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="looptimer",
        description="Repeating countdown timer with synthesized end-of-rep tones.",
    )
    parser.add_argument("-d", "--duration", type=int, default=60, help="seconds per rep")
    parser.add_argument("-r", "--repeat", type=int, default=1, help="number of reps")
    parser.add_argument("--infinite", action="store_true", help="repeat until interrupted")
    parser.add_argument("--delay", type=int, default=0, help="seconds between reps")
    parser.add_argument("--tone", choices=TONE_IDS, help="tone played after each rep")
    parser.add_argument("--volume", type=float, help="tone volume, 0.0-1.0")
    parser.add_argument("--name", help="timer name")
    parser.add_argument("--preset", metavar="NAME", help="run a saved timer by name or id")
    parser.add_argument("--save", action="store_true", help="save this timer as a preset")
    parser.add_argument("--list-tones", action="store_true", help="list tones and exit")
    parser.add_argument("--list-presets", action="store_true", help="list saved timers and exit")
    parser.add_argument("--export", action="store_true", help="print saved timers as JSON and exit")
    parser.add_argument(
        "--import", dest="import_path", type=Path, metavar="FILE",
        help="add saved timers from a JSON file written by --export and exit",
    )
    parser.add_argument("--mute", action="store_true", help="do not play tones")
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    return parser


def config_from_args(args: argparse.Namespace, settings: AppSettings) -> TimerConfig:
    overrides = {
        "name": args.name,
        "duration_seconds": args.duration,
        "infinite_repeat": args.infinite,
        "repeat_count": args.repeat,
        "delay_seconds": args.delay,
    }
    if args.tone is not None:
        overrides["tone_id"] = args.tone
    if args.volume is not None:
        overrides["volume"] = args.volume
    return new_timer_config(settings, **overrides)


def export_timers(store: SavedTimers) -> str:
    """Saved timers as a JSON array of ``TimerConfig.to_dict`` objects."""
    return json.dumps([config.to_dict() for config in store.timers], indent=2, ensure_ascii=False)


def import_timers(store: SavedTimers, path: Path) -> int:
    """Add the timers in *path* to *store*; return how many were added.

    Entries whose id is already saved replace the stored copy.  Raises
    ``OSError`` or ``ValueError`` when the file cannot be read or parsed.
    """
    data = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(data, list):
        raise ValueError("expected a JSON array of timers")
    try:
        configs = [TimerConfig.from_dict(entry) for entry in data]
    except (KeyError, TypeError) as exc:
        raise ValueError(f"malformed timer entry: {exc}") from exc

    added = 0
    for config in configs:
        if store.find(config.id) is not None:
            store.update(config)
        elif store.can_save_more:
            store.add(config)
            added += 1
        else:
            logger.warning("saved-timer limit reached; skipping %r", config.name)
    return added


def quit_on_interrupt(app: QGuiApplication):
    """Route Ctrl-C to ``app.quit()``; return the previous SIGINT handler.

    Python runs the handler between Qt callbacks, so the engine's
    one-second tick bounds the delay.
    """
    return signal.signal(signal.SIGINT, lambda signum, frame: app.quit())


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.list_tones:
        for tone_id in TONE_IDS:
            print(f"{tone_id:<8} {tone_label(tone_id):<8} {tone_duration(tone_id):.2f}s")
        return 0

    app = QGuiApplication.instance() or QGuiApplication(sys.argv[:1])
    app.setApplicationName("LoopTimer")

    init_db()
    settings = load_settings()
    store = SavedTimers(settings)
    store.load()
    logger.debug("loaded %d saved timers", len(store.timers))

    if args.list_presets:
        for config in store.timers:
            reps = "∞" if config.infinite_repeat else config.repeat_count
            print(
                f"{config.name:<20} {format_clock(config.duration_seconds)} "
                f"x{reps} delay={config.delay_seconds}s tone={config.tone_id}"
            )
        return 0

    if args.export:
        print(export_timers(store))
        return 0

    if args.import_path is not None:
        try:
            added = import_timers(store, args.import_path)
        except (OSError, ValueError) as exc:
            print(f"Could not import {args.import_path}: {exc}", file=sys.stderr)
            return 1
        print(f"Imported {added} timer(s)")
        return 0

    if args.preset:
        config = store.find(args.preset)
        if config is None:
            print(f"No saved timer named {args.preset!r}", file=sys.stderr)
            return 1
    else:
        config = config_from_args(args, settings)
        if args.save:
            if not store.can_save_more:
                print(
                    f"Saved-timer limit ({settings.max_saved_timers}) reached; not saved",
                    file=sys.stderr,
                )
            else:
                store.add(config)

    player = TonePlayer(app)
    player.set_enabled(not args.mute)
    engine = TimerEngine(app, on_play_tone=player.play_tone)

    def on_state(state: ActiveTimerState) -> None:
        print(format_state(state), flush=True)
        if state.phase == TimerPhase.COMPLETED:
            # Let the last tone finish before quitting.
            linger_ms = int(tone_duration(config.tone_id) * 1000) + 250
            QTimer.singleShot(linger_ms, app.quit)

    engine.subscribe(on_state)
    previous_handler = quit_on_interrupt(app)
    engine.start(config)
    try:
        return app.exec()
    finally:
        engine.dispose()
        player.stop()
        signal.signal(signal.SIGINT, previous_handler or signal.SIG_DFL)


if __name__ == "__main__":
    sys.exit(main())
