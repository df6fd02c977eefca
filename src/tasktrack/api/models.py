"""Transfer models returned by the API layer.

Nested associations are projected to id + display fields only, so responses
are acyclic and never carry credentials or unrelated user fields.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel


class UserInfo(BaseModel):
    id: int
    name: str
    email: str


class AssigneeInfo(BaseModel):
    id: int  # user id, not the assignment row id
    name: str
    email: str
    code: Optional[str] = None
    team: Optional[str] = None
    type: Optional[str] = None


class EventInfo(BaseModel):
    id: int
    title: str


class TaskLinkInfo(BaseModel):
    id: int
    url: str
    title: str


class TaskResponse(BaseModel):
    """Task aggregate: scalars + event, creator/updater, assignees and links."""

    id: int
    title: str
    description: Optional[str] = None
    priority: Optional[str] = None
    column_id: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    event: Optional[EventInfo] = None
    assignees: List[AssigneeInfo] = []
    links: List[TaskLinkInfo] = []
    created_at: Optional[datetime] = None
    created_by: Optional[UserInfo] = None
    updated_at: Optional[datetime] = None
    updated_by: Optional[UserInfo] = None


class TaskInfo(BaseModel):
    """Task summary nested inside an event."""

    id: int
    title: str
    description: Optional[str] = None
    priority: Optional[str] = None
    column_id: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None


class EventResponse(BaseModel):
    id: int
    title: str
    description: Optional[str] = None
    status_event: Optional[str] = None
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    capacity: Optional[int] = None
    created_at: Optional[datetime] = None
    created_by: Optional[UserInfo] = None
    updated_at: Optional[datetime] = None
    updated_by: Optional[UserInfo] = None
    tasks: List[TaskInfo] = []
