"""CLI entrypoint for tasktrack."""

import argparse
import json
import sys
from pathlib import Path
from typing import Iterable, List, Optional

from pydantic import BaseModel

from tasktrack.api.events_api import get_event, search_events
from tasktrack.api.tasks_api import get_task, get_tasks_by_column, get_tasks_by_event, search_tasks
from tasktrack.config.loader import get_default_limit, get_log_level, get_sqlite_path, load_config_or_default
from tasktrack.database.schema import TASK_COLUMNS
from tasktrack.database.sqlite_client import get_engine, session_context
from tasktrack.database.task_repo import move_task
from tasktrack.errors import NotFoundError
from tasktrack.query.criteria import EventCriteria, TaskCriteria
from tasktrack.runners.seed import load_fixture, seed
from tasktrack.utils.logging import get_logger, setup_logging
from tasktrack.utils.time import parse_datetime

logger = get_logger(__name__)


def _print_json(payload: BaseModel | Iterable[BaseModel]) -> None:
    if isinstance(payload, BaseModel):
        data = payload.model_dump(mode="json")
    else:
        data = [item.model_dump(mode="json") for item in payload]
    print(json.dumps(data, indent=2, ensure_ascii=False))


def _datetime_arg(value: str):
    try:
        return parse_datetime(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e))


def _sqlite_path(args: argparse.Namespace) -> str:
    return args.db or get_sqlite_path(args.config_data)


def _limit(args: argparse.Namespace) -> Optional[int]:
    if args.limit is not None:
        return args.limit
    return get_default_limit(args.config_data)


def cmd_init_db(args: argparse.Namespace) -> int:
    """Create database tables."""
    sqlite_path = _sqlite_path(args)
    get_engine(sqlite_path).dispose()
    print(f"Initialized database at {sqlite_path}")
    return 0


def cmd_seed(args: argparse.Namespace) -> int:
    """Load a YAML fixture of users, events and tasks."""
    data = load_fixture(Path(args.fixture))
    with session_context(_sqlite_path(args)) as session:
        counts = seed(session, data)
        session.commit()
    print(f"Loaded {counts['users']} users, {counts['events']} events, {counts['tasks']} tasks")
    return 0


def cmd_tasks_search(args: argparse.Namespace) -> int:
    criteria = TaskCriteria(
        keyword=args.keyword,
        column_id=args.column,
        priority=args.priority,
        event_id=args.event,
        start_after=args.start_after,
        end_before=args.end_before,
    )
    with session_context(_sqlite_path(args)) as session:
        results = search_tasks(session, criteria, args.sort, limit=_limit(args), offset=args.offset)
    _print_json(results)
    return 0


def cmd_tasks_show(args: argparse.Namespace) -> int:
    with session_context(_sqlite_path(args)) as session:
        result = get_task(session, args.id)
    _print_json(result)
    return 0


def cmd_tasks_by_event(args: argparse.Namespace) -> int:
    with session_context(_sqlite_path(args)) as session:
        results = get_tasks_by_event(session, args.id)
    _print_json(results)
    return 0


def cmd_tasks_by_column(args: argparse.Namespace) -> int:
    with session_context(_sqlite_path(args)) as session:
        results = get_tasks_by_column(session, args.column)
    _print_json(results)
    return 0


def cmd_tasks_move(args: argparse.Namespace) -> int:
    """Move a task to another board column."""
    with session_context(_sqlite_path(args)) as session:
        move_task(session, args.id, args.column, updated_by_id=args.by)
        session.commit()
        result = get_task(session, args.id)
    _print_json(result)
    return 0


def cmd_events_search(args: argparse.Namespace) -> int:
    criteria = EventCriteria(
        keyword=args.keyword,
        status=args.status,
        start_after=args.start_after,
        end_before=args.end_before,
    )
    with session_context(_sqlite_path(args)) as session:
        results = search_events(session, criteria, args.sort, limit=_limit(args), offset=args.offset)
    _print_json(results)
    return 0


def cmd_events_show(args: argparse.Namespace) -> int:
    with session_context(_sqlite_path(args)) as session:
        result = get_event(session, args.id)
    _print_json(result)
    return 0


def _add_search_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--keyword", type=str, help="Case-insensitive substring of title or description")
    parser.add_argument("--start-after", type=_datetime_arg, help="Inclusive lower bound on start (ISO 8601)")
    parser.add_argument("--end-before", type=_datetime_arg, help="Inclusive upper bound on end (ISO 8601)")
    parser.add_argument(
        "--sort",
        nargs="+",
        metavar="FIELD[:asc|desc]",
        help="Sort tokens, primary first (e.g. createdAt:desc title)",
    )
    parser.add_argument("--limit", type=int, help="Maximum number of results")
    parser.add_argument("--offset", type=int, default=0, help="Number of results to skip (default: 0)")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tasktrack",
        description="Query tasks and events with fully populated associations",
    )
    parser.add_argument("--config", type=Path, help="Path to tasktrack.config.yaml")
    parser.add_argument("--db", type=str, help="SQLite database path (overrides config)")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # init-db command
    init_parser = subparsers.add_parser("init-db", help="Create database tables")
    init_parser.set_defaults(func=cmd_init_db)

    # seed command
    seed_parser = subparsers.add_parser("seed", help="Load users, events and tasks from a YAML fixture")
    seed_parser.add_argument("fixture", type=str, help="Path to fixture YAML")
    seed_parser.set_defaults(func=cmd_seed)

    # tasks commands
    tasks_parser = subparsers.add_parser("tasks", help="Task queries")
    tasks_subparsers = tasks_parser.add_subparsers(dest="tasks_subcommand", help="Tasks subcommands", required=True)

    tasks_search_parser = tasks_subparsers.add_parser("search", help="Search tasks")
    _add_search_arguments(tasks_search_parser)
    tasks_search_parser.add_argument("--column", type=str, help="Board column: " + ", ".join(TASK_COLUMNS))
    tasks_search_parser.add_argument("--priority", type=str, help="LOW, MEDIUM or HIGH")
    tasks_search_parser.add_argument("--event", type=int, help="Event ID")
    tasks_search_parser.set_defaults(func=cmd_tasks_search)

    tasks_show_parser = tasks_subparsers.add_parser("show", help="Show one task")
    tasks_show_parser.add_argument("id", type=int)
    tasks_show_parser.set_defaults(func=cmd_tasks_show)

    tasks_by_event_parser = tasks_subparsers.add_parser("by-event", help="List tasks of an event")
    tasks_by_event_parser.add_argument("id", type=int)
    tasks_by_event_parser.set_defaults(func=cmd_tasks_by_event)

    tasks_by_column_parser = tasks_subparsers.add_parser("by-column", help="List tasks in a board column")
    tasks_by_column_parser.add_argument("column", type=str)
    tasks_by_column_parser.set_defaults(func=cmd_tasks_by_column)

    tasks_move_parser = tasks_subparsers.add_parser("move", help="Move a task to another board column")
    tasks_move_parser.add_argument("id", type=int)
    tasks_move_parser.add_argument("column", type=str)
    tasks_move_parser.add_argument("--by", type=int, required=True, help="ID of the user moving the task")
    tasks_move_parser.set_defaults(func=cmd_tasks_move)

    # events commands
    events_parser = subparsers.add_parser("events", help="Event queries")
    events_subparsers = events_parser.add_subparsers(dest="events_subcommand", help="Events subcommands", required=True)

    events_search_parser = events_subparsers.add_parser("search", help="Search events")
    _add_search_arguments(events_search_parser)
    events_search_parser.add_argument("--status", type=str, help="UPCOMING, ONGOING, COMPLETED or CANCELLED")
    events_search_parser.set_defaults(func=cmd_events_search)

    events_show_parser = events_subparsers.add_parser("show", help="Show one event with its tasks")
    events_show_parser.add_argument("id", type=int)
    events_show_parser.set_defaults(func=cmd_events_show)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entrypoint."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    try:
        args.config_data = load_config_or_default(args.config)
    except (FileNotFoundError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    setup_logging(get_log_level(args.config_data))

    try:
        return args.func(args)
    except (NotFoundError, FileNotFoundError, ValueError) as e:
        logger.warning(f"Command '{args.command}' rejected: {e}")
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except Exception as e:
        logger.error(f"Error running command '{args.command}': {e}", exc_info=True)
        raise


if __name__ == "__main__":
    sys.exit(main())
