"""Events API: event aggregates with their tasks."""

from typing import List, Optional, Sequence

from sqlalchemy.orm import Session

from ..database.sqlite_client import read_scope
from ..database.store import SqlStore
from ..query.criteria import EventCriteria
from ..query.loader import event_loader
from ..query.predicates import compose_event_predicate
from ..query.sorting import parse_event_sort
from .mapper import map_event
from .models import EventResponse


def search_events(
    session: Session,
    criteria: Optional[EventCriteria] = None,
    sort_tokens: Optional[Sequence[str]] = None,
    limit: Optional[int] = None,
    offset: int = 0,
) -> List[EventResponse]:
    """
    Search events with optional filters and multi-field sorting.

    Raises:
        InvalidSortField: If a sort token names an unsortable field
    """
    ordering = parse_event_sort(sort_tokens)
    predicate = compose_event_predicate(criteria or EventCriteria())
    with read_scope(session):
        aggregates = event_loader(SqlStore(session)).load(predicate, ordering, limit=limit, offset=offset)
        return [map_event(aggregate) for aggregate in aggregates]


def list_events(session: Session) -> List[EventResponse]:
    return search_events(session)


def get_event(session: Session, event_id: int) -> EventResponse:
    """
    Get a single event with its tasks.

    Raises:
        NotFoundError: If no event has ``event_id``
    """
    with read_scope(session):
        return map_event(event_loader(SqlStore(session)).load_one(event_id))
