"""Tasks API: search, single fetch and per-parent listings."""

from typing import List, Optional, Sequence

from sqlalchemy.orm import Session

from ..database.sqlite_client import read_scope
from ..database.store import SqlStore
from ..query.criteria import TaskCriteria
from ..query.loader import task_loader
from ..query.predicates import Equals, Predicate, compose_task_predicate
from ..query.sorting import SortKey, parse_task_sort
from .mapper import map_task
from .models import TaskResponse


def _load_tasks(
    session: Session,
    predicate: Predicate,
    ordering: Sequence[SortKey] = (),
    limit: Optional[int] = None,
    offset: int = 0,
) -> List[TaskResponse]:
    with read_scope(session):
        aggregates = task_loader(SqlStore(session)).load(predicate, ordering, limit=limit, offset=offset)
        return [map_task(aggregate) for aggregate in aggregates]


def search_tasks(
    session: Session,
    criteria: Optional[TaskCriteria] = None,
    sort_tokens: Optional[Sequence[str]] = None,
    limit: Optional[int] = None,
    offset: int = 0,
) -> List[TaskResponse]:
    """
    Search tasks with optional filters and multi-field sorting.

    Args:
        session: SQLAlchemy session
        criteria: Search criteria - if None, no filtering
        sort_tokens: Tokens like ``["createdAt:desc", "title"]`` - if None, store order
        limit: Maximum number of tasks to return
        offset: Number of tasks to skip

    Returns:
        List of TaskResponse in sort order

    Raises:
        InvalidSortField: If a sort token names an unsortable field (raised
            before any query runs)
    """
    ordering = parse_task_sort(sort_tokens)
    predicate = compose_task_predicate(criteria or TaskCriteria())
    return _load_tasks(session, predicate, ordering, limit=limit, offset=offset)


def list_tasks(session: Session) -> List[TaskResponse]:
    """List every task in store order."""
    return search_tasks(session)


def get_task(session: Session, task_id: int) -> TaskResponse:
    """
    Get a single task aggregate.

    Raises:
        NotFoundError: If no task has ``task_id``
    """
    with read_scope(session):
        return map_task(task_loader(SqlStore(session)).load_one(task_id))


def get_tasks_by_event(session: Session, event_id: int) -> List[TaskResponse]:
    """List the tasks attached to an event."""
    return _load_tasks(session, Equals(field="event_id", value=event_id))


def get_tasks_by_column(session: Session, column_id: str) -> List[TaskResponse]:
    """
    List the tasks in a board column (todo, in-progress, done, cancel).

    The column is matched exactly; an empty string matches no task.
    """
    return _load_tasks(session, Equals(field="column_id", value=column_id))
