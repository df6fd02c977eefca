"""Load users, events and tasks from a YAML fixture into SQLite.

Fixture layout::

    users:
      - key: alice              # local alias used by events/tasks below
        name: Alice
        email: alice@example.com
        code: A001
        team: MEDIA
    events:
      - key: launch
        title: Launch party
        status: UPCOMING
        start_time: 2026-03-01T09:00:00Z
        created_by: alice
    tasks:
      - title: Book venue
        column_id: todo
        priority: HIGH
        event: launch
        created_by: alice
        assignees: [alice]
        links:
          - {url: https://a.com, title: Venue A}
"""

from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from sqlalchemy.orm import Session

from ..database.event_repo import create_event
from ..database.schema import Priority, StatusEvent, UserRole, UserTeam, UserType
from ..database.task_repo import create_task
from ..database.user_repo import create_user
from ..utils.logging import get_logger
from ..utils.time import parse_datetime, to_utc_naive

logger = get_logger(__name__)


def _datetime(value: Any) -> Optional[datetime]:
    if value is None:
        return None
    if isinstance(value, datetime):
        return to_utc_naive(value)
    return parse_datetime(str(value))


def _enum(enum_cls, value: Any, default=None):
    if value is None:
        return default
    try:
        return enum_cls[str(value).strip().upper()]
    except KeyError:
        raise ValueError(f"Unknown {enum_cls.__name__}: {value}") from None


def _resolve(aliases: Dict[str, int], kind: str, key: Any) -> Optional[int]:
    if key is None:
        return None
    if key not in aliases:
        raise ValueError(f"Fixture references unknown {kind}: {key}")
    return aliases[key]


def load_fixture(path: Path) -> Dict[str, Any]:
    if not path.exists():
        raise FileNotFoundError(f"Fixture file not found: {path}")
    with path.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError("Fixture must be a dictionary")
    for section in ("users", "events", "tasks"):
        if not isinstance(data.get(section, []), list):
            raise ValueError(f"Fixture section '{section}' must be a list")
    return data


def seed(session: Session, data: Dict[str, Any]) -> Dict[str, int]:
    """
    Insert fixture rows. Does not commit.

    Returns:
        Counts per section: {"users": n, "events": n, "tasks": n}
    """
    user_ids: Dict[str, int] = {}
    event_ids: Dict[str, int] = {}

    for entry in data.get("users", []):
        user = create_user(
            session,
            name=entry["name"],
            email=entry["email"],
            code=entry.get("code") or entry["email"],
            role=_enum(UserRole, entry.get("role"), UserRole.MEMBER),
            team=_enum(UserTeam, entry.get("team"), UserTeam.EXTERNAL),
            type=_enum(UserType, entry.get("type"), UserType.ACTIVE),
        )
        user_ids[entry.get("key", entry["email"])] = user.id

    for entry in data.get("events", []):
        event = create_event(
            session,
            title=entry["title"],
            description=entry.get("description"),
            status=_enum(StatusEvent, entry.get("status")),
            start_time=_datetime(entry.get("start_time")),
            end_time=_datetime(entry.get("end_time")),
            capacity=entry.get("capacity"),
            created_by_id=_resolve(user_ids, "user", entry.get("created_by")),
        )
        event_ids[entry.get("key", entry["title"])] = event.id

    task_count = 0
    for entry in data.get("tasks", []):
        create_task(
            session,
            title=entry["title"],
            description=entry.get("description"),
            priority=_enum(Priority, entry.get("priority")),
            column_id=entry.get("column_id"),
            start_date=_datetime(entry.get("start_date")),
            end_date=_datetime(entry.get("end_date")),
            event_id=_resolve(event_ids, "event", entry.get("event")),
            links=entry.get("links"),
            assignee_ids=[_resolve(user_ids, "user", key) for key in entry.get("assignees", [])],
            created_by_id=_resolve(user_ids, "user", entry.get("created_by")),
            created_at=_datetime(entry.get("created_at")),
        )
        task_count += 1

    counts = {"users": len(user_ids), "events": len(event_ids), "tasks": task_count}
    logger.info(f"Fixture loaded: {counts}")
    return counts
