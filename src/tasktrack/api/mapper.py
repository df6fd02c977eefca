"""Project merged aggregates onto transfer models."""

from typing import TYPE_CHECKING, Optional

from .models import (
    AssigneeInfo,
    EventInfo,
    EventResponse,
    TaskInfo,
    TaskLinkInfo,
    TaskResponse,
    UserInfo,
)

if TYPE_CHECKING:
    from ..database.schema import Event, Task, TaskLink, User, UserTask
    from ..query.loader import Aggregate


def _enum_name(value) -> Optional[str]:
    if value is None:
        return None
    return getattr(value, "name", str(value))


def _user_info(user: Optional["User"]) -> Optional[UserInfo]:
    if user is None:
        return None
    return UserInfo(id=user.id, name=user.name, email=user.email)


def _assignee_info(assignment: "UserTask") -> AssigneeInfo:
    user = assignment.user
    return AssigneeInfo(
        id=user.id,
        name=user.name,
        email=user.email,
        code=user.code,
        team=_enum_name(user.team),
        type=_enum_name(user.type),
    )


def _link_info(link: "TaskLink") -> TaskLinkInfo:
    return TaskLinkInfo(id=link.id, url=link.url, title=link.title)


def _event_info(event: Optional["Event"]) -> Optional[EventInfo]:
    if event is None:
        return None
    return EventInfo(id=event.id, title=event.title)


def _task_info(task: "Task") -> TaskInfo:
    return TaskInfo(
        id=task.id,
        title=task.title,
        description=task.description,
        priority=_enum_name(task.priority),
        column_id=task.column_id,
        start_date=task.start_date,
        end_date=task.end_date,
    )


def map_task(aggregate: "Aggregate") -> TaskResponse:
    """
    Map a task aggregate (root task + phase-2 links) to a TaskResponse.

    Assignees come from the task's phase-1 collection; links come from the
    aggregate, never from the ORM relationship.
    """
    task = aggregate.root
    return TaskResponse(
        id=task.id,
        title=task.title,
        description=task.description,
        priority=_enum_name(task.priority),
        column_id=task.column_id,
        start_date=task.start_date,
        end_date=task.end_date,
        event=_event_info(task.event),
        assignees=[_assignee_info(assignment) for assignment in task.assignees],
        links=[_link_info(link) for link in aggregate.children],
        created_at=task.created_at,
        created_by=_user_info(task.created_by),
        updated_at=task.updated_at,
        updated_by=_user_info(task.updated_by),
    )


def map_event(aggregate: "Aggregate") -> EventResponse:
    """Map an event aggregate (root event + phase-2 tasks) to an EventResponse."""
    event = aggregate.root
    return EventResponse(
        id=event.id,
        title=event.title,
        description=event.description,
        status_event=_enum_name(event.status),
        start_time=event.start_time,
        end_time=event.end_time,
        capacity=event.capacity,
        created_at=event.created_at,
        created_by=_user_info(event.created_by),
        updated_at=event.updated_at,
        updated_by=_user_info(event.updated_by),
        tasks=[_task_info(task) for task in aggregate.children],
    )
