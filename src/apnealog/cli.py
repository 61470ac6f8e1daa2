"""CLI entry point."""

from __future__ import annotations

import argparse
import json
import logging
import os
from datetime import date
from typing import Optional

from .aggregator import compute_summary
from .config import Config, load_config, save_config
from .history import SessionFilter, location_options, session_rows
from .logbook import delete_session_with_dives, log_session
from .logging_utils import setup_logging
from .models import Environment, Mood, User, Viewer
from .renderer import (
    render_dashboard,
    render_session_detail,
    render_session_rows,
    render_user_rows,
)
from .storage import RecordNotFoundError, RecordStore

logger = logging.getLogger("apnealog")

DEFAULT_CONFIG = "apnealog_config.yml"


def _iso_date(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Invalid date {value!r}, use YYYY-MM-DD.")


def _add_common(cmd: argparse.ArgumentParser) -> None:
    cmd.add_argument("--config", default=DEFAULT_CONFIG, help="Config file.")
    cmd.add_argument("--data-dir", help="Directory holding sessions.json and dives.json.")
    cmd.add_argument("--verbose", action="store_true", help="Also log to stderr.")


def _load_settings(args: argparse.Namespace) -> Config:
    cfg = load_config(args.config) if os.path.exists(args.config) else Config()
    if args.data_dir:
        cfg.data_dir = args.data_dir
    setup_logging(cfg.log_dir, cfg.log_level, console=bool(args.verbose))
    return cfg


def _open_store(cfg: Config, create: bool = False) -> RecordStore:
    return RecordStore.from_directory(
        cfg.data_dir,
        sessions_file=cfg.store.sessions_file,
        dives_file=cfg.store.dives_file,
        create=create,
        users_file=cfg.store.users_file,
    )


def _find_user(store: RecordStore, user_id: Optional[int]) -> Optional[User]:
    if user_id is None:
        return None
    try:
        return store.get_user(user_id)
    except RecordNotFoundError:
        logger.warning("Session refers to unknown user %s", user_id)
        return None


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="apnealog")
    sub = parser.add_subparsers(dest="command")

    stats_cmd = sub.add_parser("stats", help="Show the statistics dashboard.")
    _add_common(stats_cmd)
    stats_cmd.add_argument("--json", action="store_true", help="Print summary JSON.")
    stats_cmd.add_argument("--name", help="Viewer name for the greeting.")

    sessions_cmd = sub.add_parser("sessions", help="List logged sessions.")
    _add_common(sessions_cmd)
    sessions_cmd.add_argument("--type", choices=[e.value for e in Environment])
    sessions_cmd.add_argument("--discipline", help="Discipline code, e.g. CWT.")
    sessions_cmd.add_argument("--location", help="Location substring.")
    sessions_cmd.add_argument("--from", dest="date_from", type=_iso_date)
    sessions_cmd.add_argument("--to", dest="date_to", type=_iso_date)
    sessions_cmd.add_argument(
        "--locations", action="store_true", help="Only list known locations."
    )

    show_cmd = sub.add_parser("show", help="Show one session with its dives.")
    _add_common(show_cmd)
    show_cmd.add_argument("session_id", type=int)

    log_cmd = sub.add_parser("log", help="Log a session with its dives.")
    _add_common(log_cmd)
    log_cmd.add_argument("--date", type=_iso_date, default=None, help="Defaults to today.")
    log_cmd.add_argument("--type", required=True, choices=[e.value for e in Environment])
    log_cmd.add_argument("--discipline", required=True, help="Discipline code.")
    log_cmd.add_argument(
        "--dive",
        action="append",
        default=[],
        help="Depth/distance in metres or STA time in seconds. Repeat per dive.",
    )
    log_cmd.add_argument("--location")
    log_cmd.add_argument("--buddy")
    log_cmd.add_argument("--instructor", type=int, help="Supervising instructor id.")
    log_cmd.add_argument("--mood", choices=[m.value for m in Mood])
    log_cmd.add_argument("--weather")
    log_cmd.add_argument("--visibility", type=float, help="Water visibility in metres.")
    log_cmd.add_argument("--duration", type=float, help="Session duration in minutes.")
    log_cmd.add_argument("--notes", help="Safety notes.")

    users_cmd = sub.add_parser("users", help="List user accounts.")
    _add_common(users_cmd)
    users_cmd.add_argument(
        "--instructors", action="store_true", help="Only instructors and admins."
    )

    delete_cmd = sub.add_parser("delete", help="Delete a session and its dives.")
    _add_common(delete_cmd)
    delete_cmd.add_argument("session_id", type=int)

    serve_cmd = sub.add_parser("serve", help="Serve GET /statistics over HTTP.")
    _add_common(serve_cmd)
    serve_cmd.add_argument("--host")
    serve_cmd.add_argument("--port", type=int)

    config_cmd = sub.add_parser("config", help="Write a default config file.")
    config_cmd.add_argument("--config", default=DEFAULT_CONFIG, help="Config file.")
    config_cmd.add_argument("--force", action="store_true", help="Overwrite.")
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    if args.command == "config":
        if os.path.exists(args.config) and not args.force:
            print(f"{args.config} already exists. Use --force to overwrite.")
            return 1
        save_config(args.config, Config())
        print(f"Wrote {args.config}")
        return 0

    try:
        cfg = _load_settings(args)
        return _run(args, cfg)
    except RecordNotFoundError as exc:
        print(f"Not found: {exc}")
        return 1
    except FileNotFoundError as exc:
        print(f"File error: {exc}")
        return 1
    except ValueError as exc:
        print(f"Invalid input: {exc}")
        return 1


def _run(args: argparse.Namespace, cfg: Config) -> int:
    below_surface = cfg.dashboard.depth_below_surface

    if args.command == "stats":
        store = _open_store(cfg)
        summary = compute_summary(
            store.get_all_sessions(),
            store.get_all_dives(),
            cfg.dashboard.recent_sessions,
        )
        if args.json:
            print(json.dumps(summary.to_dict(), indent=2))
        else:
            viewer = Viewer(name=args.name) if args.name else None
            print(render_dashboard(summary, viewer, depth_below_surface=below_surface))
        return 0

    if args.command == "sessions":
        store = _open_store(cfg)
        sessions = store.get_all_sessions()
        if args.locations:
            for location in location_options(sessions):
                print(location)
            return 0
        session_filter = SessionFilter(
            type=args.type,
            discipline=args.discipline,
            location=args.location,
            date_from=args.date_from,
            date_to=args.date_to,
        )
        rows = session_rows(sessions, store.get_all_dives(), session_filter)
        print(render_session_rows(rows, depth_below_surface=below_surface))
        return 0

    if args.command == "show":
        store = _open_store(cfg)
        session = store.get_session(args.session_id)
        dives = store.get_dives_by_session_id(session.id)
        instructor = _find_user(store, session.instructor_id)
        print(
            render_session_detail(
                session, dives, depth_below_surface=below_surface, instructor=instructor
            )
        )
        return 0

    if args.command == "log":
        store = _open_store(cfg, create=True)
        if args.instructor is not None and args.instructor not in {
            u.id for u in store.get_instructors()
        }:
            raise ValueError(f"User {args.instructor} is not an instructor")
        session_data = {
            "date": (args.date or date.today()).isoformat(),
            "type": args.type,
            "discipline": args.discipline,
            "location": args.location or "",
            "buddyName": args.buddy or "",
            "instructorId": args.instructor,
            "moodLog": args.mood or "",
            "weather": args.weather or "",
            "waterVisibility": args.visibility,
            "diveDuration": args.duration,
            "safetyNotes": args.notes or "",
        }
        session, dives = log_session(store, session_data, args.dive)
        print(f"Logged session {session.id} with {len(dives)} dive(s).")
        return 0

    if args.command == "users":
        store = _open_store(cfg)
        users = store.get_instructors() if args.instructors else store.get_all_users()
        print(render_user_rows(users))
        return 0

    if args.command == "delete":
        store = _open_store(cfg)
        removed = delete_session_with_dives(store, args.session_id)
        print(f"Deleted session {args.session_id} and {removed} dive(s).")
        return 0

    if args.command == "serve":
        from .api import run_server

        store = _open_store(cfg)
        run_server(
            store,
            host=args.host or cfg.api.host,
            port=args.port or cfg.api.port,
            recent_limit=cfg.dashboard.recent_sessions,
        )
        return 0

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
