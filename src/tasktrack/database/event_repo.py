"""Repository for events table operations."""

from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from ..errors import NotFoundError
from ..utils.logging import get_logger
from ..utils.time import utc_now
from .schema import Event, StatusEvent
from .user_repo import get_user

logger = get_logger(__name__)


def create_event(
    session: Session,
    *,
    title: str,
    description: Optional[str] = None,
    status: Optional[StatusEvent] = None,
    start_time: Optional[datetime] = None,
    end_time: Optional[datetime] = None,
    capacity: Optional[int] = None,
    created_by_id: Optional[int] = None,
    created_at: Optional[datetime] = None,
) -> Event:
    """
    Create an event row.

    Args:
        session: SQLAlchemy session
        title: Event title
        created_by_id: Optional creator user ID (must exist)
        created_at: Optional creation time (defaults to now, UTC)

    Returns:
        The new Event (flushed)

    Raises:
        NotFoundError: If ``created_by_id`` does not exist
    """
    creator = get_user(session, created_by_id) if created_by_id is not None else None

    event = Event(
        title=title,
        description=description,
        status=status,
        start_time=start_time,
        end_time=end_time,
        capacity=capacity,
        created_by=creator,
        created_at=created_at or utc_now(),
    )
    session.add(event)
    session.flush()
    logger.debug(f"Created event: {event.id}")
    return event


def get_event_row(session: Session, event_id: int) -> Event:
    """
    Get event row by ID (no associations loaded).

    Raises:
        NotFoundError: If the event does not exist
    """
    event = session.get(Event, event_id)
    if event is None:
        raise NotFoundError("Event", event_id)
    return event


def update_event(
    session: Session,
    event_id: int,
    *,
    title: str,
    description: Optional[str] = None,
    status: Optional[StatusEvent] = None,
    start_time: Optional[datetime] = None,
    end_time: Optional[datetime] = None,
    capacity: Optional[int] = None,
    updated_by_id: int,
) -> Event:
    """
    Overwrite an event's fields and stamp the updater. Tasks are untouched.

    Raises:
        NotFoundError: If the event or the updating user does not exist
    """
    event = get_event_row(session, event_id)
    updater = get_user(session, updated_by_id)

    event.title = title
    event.description = description
    event.status = status
    event.start_time = start_time
    event.end_time = end_time
    event.capacity = capacity
    event.updated_by = updater
    event.updated_at = utc_now()
    session.flush()
    logger.debug(f"Updated event: {event.id}")
    return event


def delete_event(session: Session, event_id: int) -> None:
    """Delete an event; its tasks are detached (event_id cleared), not deleted."""
    event = get_event_row(session, event_id)
    for task in event.tasks:
        task.event = None
    session.delete(event)
    session.flush()
    logger.debug(f"Deleted event: {event_id}")
