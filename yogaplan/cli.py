"""YogaPlan command-line interface.

Argparse-based CLI around the session engine and the card library; it
initializes logging before any command runs. Exposed via
``python -m yogaplan`` and the ``yogaplan`` console script.
"""

from __future__ import annotations

import argparse
import json
import logging
import os
from typing import Any, Dict, List, Optional

from . import __app_name__, __version__
from .data.defaults import SESSION_CATEGORIES, SESSION_LEVELS, default_session
from .logging_utils import LogMode, get_default_log_path, setup_logging
from .platform_paths import DATA_DIR_ENV, get_storage_path
from .session.events import SessionEventType
from .session.items import DEFAULT_SESSION_ID, ItemKind, YogaSession
from .session.scheduling import FRAME_INTERVAL_MS, LoopTickScheduler, monotonic_ms
from .session.timeline import DEFAULT_START_TIME, TimedSegment, Timeline, build_timeline, format_elapsed
from .storage.backend import JsonFileStore
from .storage.library import CardLibrary


def _add_logging_args(parser: argparse.ArgumentParser, suppress_defaults: bool = False) -> None:
    """Logging and data flags.

    Subcommands repeat the flags with suppressed defaults so a flag given
    before the subcommand is not overwritten by the subparser.
    """
    def default(value):
        return argparse.SUPPRESS if suppress_defaults else value

    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=default("INFO"),
        help="Set log level (default: INFO)",
    )
    parser.add_argument(
        "--log-mode",
        choices=[mode.value for mode in LogMode],
        default=default(LogMode.NORMAL.value),
        help="Logging preset: quiet suppresses console info, trace adds per-frame transport logs",
    )
    parser.add_argument(
        "--log-file",
        default=default(str(get_default_log_path())),
        help="Path to log file (default: per-user YogaPlan directory)",
    )
    parser.add_argument(
        "--data-dir",
        default=default(None),
        help=f"Directory holding storage.json (default: ${DATA_DIR_ENV} or the per-user directory)",
    )


def _build_logging_parent(suppress_defaults: bool = False) -> argparse.ArgumentParser:
    parent = argparse.ArgumentParser(add_help=False)
    _add_logging_args(parent, suppress_defaults)
    return parent


def _open_library(args) -> CardLibrary:
    return CardLibrary(JsonFileStore(get_storage_path(getattr(args, "data_dir", None))))


def _confirm(prompt: str, assume_yes: bool) -> bool:
    if assume_yes:
        return True
    try:
        answer = input(f"{prompt} [y/N] ")
    except EOFError:
        return False
    return answer.strip().lower() in ("y", "yes")


def _split_tags(text: Optional[str]) -> List[str]:
    if not text:
        return []
    return [tag.strip() for tag in text.split(",") if tag.strip()]


def _load_session(library: CardLibrary, session_id: Optional[str]) -> Optional[YogaSession]:
    if not session_id or session_id == DEFAULT_SESSION_ID:
        return default_session()
    return library.sessions.get(session_id)


def selftest() -> int:
    """Fast import-and-init smoke test. Returns exit code."""
    try:
        from .session.reorder import ReorderEngine
        from .session.scheduling import ManualTickScheduler
        from .session.transport import TransportController
        from .storage.backend import MemoryStore

        library = CardLibrary(MemoryStore())
        library.initialize_defaults()
        timeline = build_timeline(default_session().exercises, library.resolver(), DEFAULT_START_TIME)
        if timeline.unresolved:
            raise RuntimeError(f"Default session has unresolved cards: {[e.item_id for e in timeline.unresolved]}")

        clock = [0.0]
        scheduler = ManualTickScheduler()
        transport = TransportController(scheduler, clock=lambda: clock[0], timeline=timeline)
        transport.start()
        clock[0] = float(timeline.total_duration_ms)
        scheduler.fire(clock[0])
        if transport.progress != 1.0:
            raise RuntimeError("Transport did not reach the end of the default session")
        if ReorderEngine(["a", "b", "c"]).move(0, 2) is not True:
            raise RuntimeError("Reorder engine rejected a valid move")

        msg = f"Selftest OK: {__app_name__} {__version__}, default session ends {timeline.end_label}"
        logging.getLogger(__name__).info(msg)
        print(msg)
        return 0
    except Exception as e:
        logging.getLogger(__name__).error("Selftest failed: %s", e)
        return 1


# ===== timeline / play =====

def _segment_payload(timeline: Timeline, entry) -> Dict[str, Any]:
    if not isinstance(entry, TimedSegment):
        return {
            "position": entry.position + 1,
            "id": entry.item_id,
            "kind": entry.kind.value,
            "missing": True,
            "label": entry.label,
        }
    start, end = timeline.label_range(entry)
    return {
        "position": entry.position + 1,
        "id": entry.item_id,
        "kind": entry.kind.value,
        "title": entry.item.title,
        "minutes": entry.item.duration_minutes,
        "start": start,
        "end": end,
        "start_ms": entry.start_ms,
        "end_ms": entry.end_ms,
    }


def cmd_timeline(args) -> int:
    """Print the timed running order of one session."""
    library = _open_library(args)
    session = _load_session(library, args.session)
    if session is None:
        print(f"Error: session not found: {args.session}")
        return 1

    start = None if args.relative else args.start
    try:
        timeline = build_timeline(session.exercises, library.resolver(), start)
    except ValueError as exc:
        print(f"Error: {exc}")
        return 1

    if args.json:
        payload = {
            "session": {"id": session.id, "title": session.title},
            "start": start,
            "end": timeline.end_label,
            "total_ms": timeline.total_duration_ms,
            "entries": [_segment_payload(timeline, entry) for entry in timeline.entries],
        }
        print(json.dumps(payload, ensure_ascii=False, indent=2))
        return 0

    print(f"{session.title} ({len(session.exercises)} cards)")
    for entry in timeline.entries:
        if isinstance(entry, TimedSegment):
            start_label, end_label = timeline.label_range(entry)
            print(f"  {entry.position + 1:>2}. {start_label} - {end_label}  {entry.item.title}")
        else:
            print(f"  {entry.position + 1:>2}. {entry.label}")
    print(f"Session end: {timeline.end_label}")
    return 0


def cmd_play(args) -> int:
    """Headless playback: run the transport on a frame loop and print segment changes."""
    from .session.view import SessionView

    log = logging.getLogger(__name__)
    speed = float(args.speed)
    if speed <= 0:
        print("Error: --speed must be positive")
        return 1

    origin = monotonic_ms()

    def clock() -> float:
        return origin + (monotonic_ms() - origin) * speed

    library = _open_library(args)
    if args.session and args.session != DEFAULT_SESSION_ID and library.sessions.get(args.session) is None:
        print(f"Error: session not found: {args.session}")
        return 1

    scheduler = LoopTickScheduler(interval_ms=args.tick_ms, clock=clock)
    view = SessionView(library, scheduler, clock=clock, start_time=None)
    if args.session:
        view.select_session(args.session)
    transport = view.transport

    def on_segment(event):
        segment = transport.active_segment()
        if segment is not None:
            print(f"[{format_elapsed(transport.elapsed_ms)}] {segment.position + 1}. {segment.item.title}")

    def on_complete(event):
        print(f"[{format_elapsed(transport.elapsed_ms)}] Session complete")

    view.emitter.subscribe(SessionEventType.SEGMENT_CHANGE, on_segment)
    view.emitter.subscribe(SessionEventType.TRANSPORT_COMPLETE, on_complete)

    print(f"Playing {view.session.title} ({format_elapsed(transport.total_duration_ms)}) at {speed:g}x")
    transport.start()
    try:
        frames = scheduler.run_until_idle()
    except KeyboardInterrupt:
        transport.pause()
        print(f"Stopped at {format_elapsed(transport.elapsed_ms)}")
        return 130
    log.info("Headless playback finished after %d frames", frames)
    return 0


# ===== cards =====

def _card_data(args) -> Dict[str, Any]:
    tags = _split_tags(args.tags)
    kind = ItemKind(args.kind)
    if kind is ItemKind.EXERCISE:
        return {
            "title": args.title,
            "description": args.content,
            "category": args.category or "",
            "tags": tags,
            "duration_minutes": args.minutes,
            "icon": args.icon,
        }
    if kind is ItemKind.STORY:
        return {"title": args.title, "text": args.content, "tags": tags, "time": args.minutes, "mood": args.mood}
    return {"title": args.title, "instruction": args.content, "tags": tags, "time": args.minutes}


def cmd_cards(args) -> int:
    library = _open_library(args)
    action = args.cards_cmd

    if action == "list":
        if not args.kind:
            items = library.all_cards()
        elif ItemKind(args.kind) is ItemKind.EXERCISE:
            items = library.all_exercises()
        else:
            items = library.cards(args.kind).list()
        if args.json:
            rows = [{"kind": item.kind.value, **item.to_dict()} for item in items]
            print(json.dumps(rows, ensure_ascii=False, indent=2))
            return 0
        for item in items:
            tags = f"  [{', '.join(item.tags)}]" if item.tags else ""
            print(f"{item.id:<16} {item.kind.value:<10} {item.duration_minutes:>5g} min  {item.title}{tags}")
        return 0

    if action == "add":
        result = library.cards(args.kind).create(_card_data(args))
        if not result.success:
            for error in result.errors:
                print(f"Error: {error}")
            return 1
        print(f"Created {args.kind} {result.item.id}: {result.item.title}")
        return 0

    if action == "delete":
        from .session.resolver import classify

        repo = library.cards(classify(args.id))
        item = repo.get(args.id)
        if item is None:
            print(f"Error: card not found: {args.id}")
            return 1
        if not _confirm(f"Delete {item.kind.value} '{item.title}'?", args.yes):
            print("Cancelled")
            return 1
        repo.delete(args.id)
        print(f"Deleted {args.id}")
        return 0

    return 2


# ===== sessions =====

def cmd_sessions(args) -> int:
    library = _open_library(args)
    action = args.sessions_cmd

    if action == "list":
        sessions = [default_session(), *library.sessions.list()]
        if args.json:
            print(json.dumps([s.to_dict() for s in sessions], ensure_ascii=False, indent=2))
            return 0
        for session in sessions:
            marker = " (built-in)" if session.is_default else ""
            print(f"{session.id:<12} {len(session.exercises):>3} cards  {session.title}{marker}")
        return 0

    if action == "create":
        data = {
            "title": args.title,
            "description": args.description,
            "story": args.story or "",
            "duration_minutes": args.minutes,
            "exercises": [i.strip() for i in (args.cards or "").split(",") if i.strip()],
            "category": args.category,
            "level": args.level,
        }
        result = library.sessions.create(data)
        if not result.success:
            for error in result.errors:
                print(f"Error: {error}")
            return 1
        print(f"Created session {result.item.id}: {result.item.title}")
        return 0

    if action == "delete":
        if args.id == DEFAULT_SESSION_ID:
            print("Error: the built-in session cannot be deleted")
            return 1
        session = library.sessions.get(args.id)
        if session is None:
            print(f"Error: session not found: {args.id}")
            return 1
        if not _confirm(f"Delete session '{session.title}'?", args.yes):
            print("Cancelled")
            return 1
        library.sessions.delete(args.id)
        print(f"Deleted session {args.id}")
        return 0

    if action == "move":
        if args.id == DEFAULT_SESSION_ID:
            print("Error: the built-in session is not stored; reorder it in the player instead")
            return 1
        session = library.sessions.get(args.id)
        if session is None:
            print(f"Error: session not found: {args.id}")
            return 1

        from .session.reorder import move_item

        size = len(session.exercises)
        from_index, to_index = args.from_pos - 1, args.to_pos - 1
        if not (0 <= from_index < size and 0 <= to_index < size):
            print(f"Error: positions must be between 1 and {size}")
            return 1
        result = library.sessions.reorder(args.id, move_item(session.exercises, from_index, to_index))
        if not result.success:
            for error in result.errors:
                print(f"Error: {error}")
            return 1
        print(f"Moved position {args.from_pos} to {args.to_pos}: {', '.join(result.item.exercises)}")
        return 0

    return 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description=f"{__app_name__} CLI",
        parents=[_build_logging_parent()],
    )
    parser.add_argument("--version", action="version", version=f"{__app_name__} {__version__}")
    sub = parser.add_subparsers(dest="command", required=False)

    sub_logging_parent = _build_logging_parent(suppress_defaults=True)

    def add_subparser(name: str, **kwargs: object) -> argparse.ArgumentParser:
        parents = list(kwargs.pop("parents", []))
        parents.insert(0, sub_logging_parent)
        return sub.add_parser(name, parents=parents, **kwargs)

    add_subparser("run", help="Start the GUI (default)")
    add_subparser("selftest", help="Quick import/initialisation check")

    p_timeline = add_subparser("timeline", help="Print a session's timed running order")
    p_timeline.add_argument("--session", default=DEFAULT_SESSION_ID, help="Session id (default: built-in session)")
    when = p_timeline.add_mutually_exclusive_group()
    when.add_argument("--start", default=DEFAULT_START_TIME, help="Clock start time HH:MM (default: %(default)s)")
    when.add_argument("--relative", action="store_true", help="Show elapsed MM:SS instead of clock times")
    p_timeline.add_argument("--json", action="store_true", help="Emit JSON payload instead of text")

    p_play = add_subparser("play", help="Play a session headlessly and print segment changes")
    p_play.add_argument("--session", default=DEFAULT_SESSION_ID, help="Session id (default: built-in session)")
    p_play.add_argument("--speed", type=float, default=1.0, help="Playback speed multiplier (default: 1)")
    p_play.add_argument("--tick-ms", type=float, default=FRAME_INTERVAL_MS, help="Frame interval in ms (default: %(default)s)")

    p_cards = add_subparser("cards", help="List, add or delete cards")
    cards_sub = p_cards.add_subparsers(dest="cards_cmd", required=True)
    kinds = [kind.value for kind in ItemKind]
    c_list = cards_sub.add_parser("list", help="List cards")
    c_list.add_argument("--kind", choices=kinds, default=None)
    c_list.add_argument("--json", action="store_true", help="Emit JSON payload instead of text")
    c_add = cards_sub.add_parser("add", help="Create a card")
    c_add.add_argument("--kind", choices=kinds, required=True)
    c_add.add_argument("--title", required=True)
    c_add.add_argument("--content", required=True, help="Description, story text or instruction")
    c_add.add_argument("--minutes", type=float, default=None, help="Duration in minutes")
    c_add.add_argument("--tags", default="", help="Comma-separated tags")
    c_add.add_argument("--category", default=None, help="Exercise category")
    c_add.add_argument("--icon", default=None, help="Exercise icon")
    c_add.add_argument("--mood", default=None, help="Story mood")
    c_del = cards_sub.add_parser("delete", help="Delete a card")
    c_del.add_argument("id")
    c_del.add_argument("--yes", action="store_true", help="Do not ask for confirmation")

    p_sessions = add_subparser("sessions", help="List, create, delete or reorder sessions")
    s_sub = p_sessions.add_subparsers(dest="sessions_cmd", required=True)
    s_list = s_sub.add_parser("list", help="List sessions")
    s_list.add_argument("--json", action="store_true", help="Emit JSON payload instead of text")
    s_create = s_sub.add_parser("create", help="Create a session")
    s_create.add_argument("--title", required=True)
    s_create.add_argument("--description", required=True)
    s_create.add_argument("--story", default="")
    s_create.add_argument("--minutes", type=float, default=30)
    s_create.add_argument("--cards", default="", help="Comma-separated card ids in running order")
    s_create.add_argument("--category", default=SESSION_CATEGORIES[0])
    s_create.add_argument("--level", default=SESSION_LEVELS[0])
    s_delete = s_sub.add_parser("delete", help="Delete a session")
    s_delete.add_argument("id")
    s_delete.add_argument("--yes", action="store_true", help="Do not ask for confirmation")
    s_move = s_sub.add_parser("move", help="Move a card within a session (1-based positions)")
    s_move.add_argument("id")
    s_move.add_argument("from_pos", type=int)
    s_move.add_argument("to_pos", type=int)

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    # Configure logging before doing any work
    if getattr(args, "log_mode", None):
        os.environ["YOGAPLAN_LOG_MODE"] = args.log_mode
    setup_logging(
        level=args.log_level,
        log_file=args.log_file,
        log_mode=args.log_mode,
        add_console=True,
    )

    cmd = args.command or "run"
    if cmd == "run":
        # Import the GUI lazily so headless commands never need a display
        from .app import run as run_gui
        return run_gui(_open_library(args))
    if cmd == "selftest":
        return selftest()
    if cmd == "timeline":
        return cmd_timeline(args)
    if cmd == "play":
        return cmd_play(args)
    if cmd == "cards":
        return cmd_cards(args)
    if cmd == "sessions":
        return cmd_sessions(args)
    parser.error(f"unknown command {cmd}")
    return 2


if __name__ == "__main__":
    raise SystemExit(main())
