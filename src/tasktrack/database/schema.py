import enum

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    create_engine,
)
from sqlalchemy.orm import declarative_base, relationship

from ..utils.time import utc_now

Base = declarative_base()


class Priority(str, enum.Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


class StatusEvent(str, enum.Enum):
    UPCOMING = "UPCOMING"
    ONGOING = "ONGOING"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class UserRole(str, enum.Enum):
    ADMIN = "ADMIN"
    LEADER = "LEADER"
    MEMBER = "MEMBER"


class UserTeam(str, enum.Enum):
    MEDIA = "MEDIA"
    EVENT = "EVENT"
    HR = "HR"
    EXTERNAL = "EXTERNAL"


class UserType(str, enum.Enum):
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
    ALUMNI = "ALUMNI"


# Board column tags; column_id is free text on the task row.
TASK_COLUMNS = ("todo", "in-progress", "done", "cancel")


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), nullable=False)
    email = Column(String(100), nullable=False, unique=True)
    code = Column(String(100), nullable=False, unique=True)
    password_hash = Column(String, nullable=True)  # never projected
    role = Column(Enum(UserRole), nullable=False, default=UserRole.MEMBER)
    team = Column(Enum(UserTeam), nullable=False, default=UserTeam.EXTERNAL)
    type = Column(Enum(UserType), nullable=False, default=UserType.ACTIVE)
    active = Column(Boolean, nullable=False, default=True)
    total_score = Column(Integer, nullable=False, default=0)


class Event(Base):
    __tablename__ = "events"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String, nullable=False)
    description = Column(Text(2000))
    status = Column(Enum(StatusEvent), nullable=True)
    start_time = Column(DateTime, nullable=True)
    end_time = Column(DateTime, nullable=True)
    capacity = Column(Integer, nullable=True)
    created_at = Column(DateTime, nullable=False, default=utc_now)
    updated_at = Column(DateTime, nullable=True)
    created_by_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    updated_by_id = Column(Integer, ForeignKey("users.id"), nullable=True)

    created_by = relationship("User", foreign_keys=[created_by_id])
    updated_by = relationship("User", foreign_keys=[updated_by_id])
    # Inverse side of Task.event; tasks are loaded by the aggregate loader, not here.
    tasks = relationship("Task", back_populates="event", order_by="Task.id")


class Task(Base):
    __tablename__ = "tasks"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(200), nullable=False)
    description = Column(Text(2000))
    priority = Column(Enum(Priority), nullable=True)
    column_id = Column(String(50), nullable=True, index=True)  # todo, in-progress, done, cancel
    start_date = Column(DateTime, nullable=True)
    end_date = Column(DateTime, nullable=True)
    created_at = Column(DateTime, nullable=False, default=utc_now)
    updated_at = Column(DateTime, nullable=True)
    event_id = Column(Integer, ForeignKey("events.id"), nullable=True, index=True)
    created_by_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    updated_by_id = Column(Integer, ForeignKey("users.id"), nullable=True)

    event = relationship("Event", back_populates="tasks")
    created_by = relationship("User", foreign_keys=[created_by_id])
    updated_by = relationship("User", foreign_keys=[updated_by_id])
    links = relationship(
        "TaskLink",
        back_populates="task",
        cascade="all, delete-orphan",
        order_by="TaskLink.id",
    )
    assignees = relationship(
        "UserTask",
        back_populates="task",
        cascade="all, delete-orphan",
        order_by="UserTask.id",
    )


class TaskLink(Base):
    __tablename__ = "task_links"

    id = Column(Integer, primary_key=True, autoincrement=True)
    url = Column(String(500), nullable=False)
    title = Column(String(200), nullable=False)
    task_id = Column(Integer, ForeignKey("tasks.id"), nullable=False, index=True)

    task = relationship("Task", back_populates="links")


class UserTask(Base):
    """Assignment edge between a user and a task."""

    __tablename__ = "user_tasks"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    task_id = Column(Integer, ForeignKey("tasks.id"), nullable=False)
    assigned_at = Column(DateTime, nullable=False, default=utc_now)

    user = relationship("User")
    task = relationship("Task", back_populates="assignees")

    __table_args__ = (
        Index("idx_user_tasks_task_user", "task_id", "user_id"),
    )


def create_all(engine_url: str) -> None:
    engine = create_engine(engine_url)
    Base.metadata.create_all(engine)
