"""Repository for task persistence.

A task exclusively owns its links and assignee rows. Writes never diff those
collections: the old set is discarded and a new one is built.
"""

from datetime import datetime
from typing import Dict, Iterable, List, Optional

from sqlalchemy.orm import Session

from ..errors import NotFoundError
from ..utils.logging import get_logger
from ..utils.time import utc_now
from .event_repo import get_event_row
from .schema import Priority, Task, TaskLink, UserTask
from .user_repo import get_user

logger = get_logger(__name__)


def replace_links(task: Task, links: Optional[Iterable[Dict]]) -> None:
    """
    Replace the task's links wholesale.

    Args:
        task: Task row
        links: Iterable of {"url": ..., "title": ...} dicts; None clears all links
    """
    task.links.clear()
    for link in links or []:
        url = link.get("url")
        if not url:
            raise ValueError("Task link must have url")
        task.links.append(TaskLink(url=url, title=link.get("title") or url))


def replace_assignees(session: Session, task: Task, assignee_ids: Optional[Iterable[int]]) -> None:
    """
    Replace the task's assignee rows wholesale.

    Raises:
        NotFoundError: If any user ID does not exist
    """
    task.assignees.clear()
    for user_id in assignee_ids or []:
        user = get_user(session, user_id)
        task.assignees.append(UserTask(user=user, assigned_at=utc_now()))


def create_task(
    session: Session,
    *,
    title: str,
    description: Optional[str] = None,
    priority: Optional[Priority] = None,
    column_id: Optional[str] = None,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    event_id: Optional[int] = None,
    links: Optional[List[Dict]] = None,
    assignee_ids: Optional[List[int]] = None,
    created_by_id: Optional[int] = None,
    created_at: Optional[datetime] = None,
) -> Task:
    """
    Create a task with its links and assignees.

    Returns:
        The new Task (flushed, so ``id`` is populated)

    Raises:
        NotFoundError: If the event or any referenced user does not exist
    """
    task = Task(
        title=title,
        description=description,
        priority=priority,
        column_id=column_id,
        start_date=start_date,
        end_date=end_date,
        created_at=created_at or utc_now(),
    )
    if created_by_id is not None:
        task.created_by = get_user(session, created_by_id)
    if event_id is not None:
        task.event = get_event_row(session, event_id)

    session.add(task)
    replace_links(task, links)
    replace_assignees(session, task, assignee_ids)
    session.flush()
    logger.debug(f"Created task: {task.id} ({len(task.links)} links, {len(task.assignees)} assignees)")
    return task


def get_task_row(session: Session, task_id: int) -> Task:
    """
    Get task row by ID (associations lazy).

    Raises:
        NotFoundError: If the task does not exist
    """
    task = session.get(Task, task_id)
    if task is None:
        raise NotFoundError("Task", task_id)
    return task


def update_task(
    session: Session,
    task_id: int,
    *,
    title: str,
    description: Optional[str] = None,
    priority: Optional[Priority] = None,
    column_id: Optional[str] = None,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    event_id: Optional[int] = None,
    links: Optional[List[Dict]] = None,
    assignee_ids: Optional[List[int]] = None,
    updated_by_id: Optional[int] = None,
) -> Task:
    """
    Overwrite a task's fields, event reference, links and assignees.

    A None ``event_id`` detaches the task from its event; None ``links`` or
    ``assignee_ids`` leave the task with no links or assignees.

    Raises:
        NotFoundError: If the task, event or any referenced user does not exist
    """
    task = get_task_row(session, task_id)

    task.title = title
    task.description = description
    task.priority = priority
    task.column_id = column_id
    task.start_date = start_date
    task.end_date = end_date
    task.event = get_event_row(session, event_id) if event_id is not None else None
    task.updated_by = get_user(session, updated_by_id) if updated_by_id is not None else None
    task.updated_at = utc_now()

    replace_links(task, links)
    replace_assignees(session, task, assignee_ids)
    session.flush()
    logger.debug(f"Updated task: {task.id}")
    return task


def move_task(session: Session, task_id: int, column_id: str, *, updated_by_id: int) -> Task:
    """
    Move a task to another board column, stamping who moved it and when.

    Raises:
        NotFoundError: If the task or the updating user does not exist
    """
    task = get_task_row(session, task_id)
    task.updated_by = get_user(session, updated_by_id)
    task.column_id = column_id
    task.updated_at = utc_now()
    session.flush()
    logger.debug(f"Moved task {task.id} to column {column_id!r}")
    return task


def delete_task(session: Session, task_id: int) -> None:
    """Delete a task together with its links and assignee rows."""
    task = get_task_row(session, task_id)
    session.delete(task)
    session.flush()
    logger.debug(f"Deleted task: {task_id}")
