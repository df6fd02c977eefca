"""Tests for task/event/user write helpers."""

from datetime import datetime, timezone

import pytest

from tasktrack.api.events_api import get_event
from tasktrack.api.tasks_api import get_task, get_tasks_by_column
from tasktrack.database.event_repo import delete_event, get_event_row, update_event
from tasktrack.database.schema import Priority, StatusEvent, Task, TaskLink, UserTask
from tasktrack.database.task_repo import create_task, delete_task, get_task_row, move_task, update_task
from tasktrack.database.user_repo import create_user, get_user, get_user_by_email
from tasktrack.errors import NotFoundError


def _count(session, model, **filters):
    return session.query(model).filter_by(**filters).count()


def test_update_replaces_links_and_assignees_wholesale(session, board):
    venue_id = board["tasks"]["venue"]
    users = board["users"]

    update_task(
        session,
        venue_id,
        title="Book venue",
        description="Hall confirmed",
        priority=Priority.HIGH,
        column_id="done",
        links=[{"url": "e.com", "title": "Contract"}],
        assignee_ids=[users["carol"]],
        updated_by_id=users["bob"],
    )
    session.commit()

    # Old link and assignment rows are deleted, not orphaned
    assert _count(session, TaskLink, task_id=venue_id) == 1
    assert _count(session, TaskLink, url="a.com") == 0
    assert _count(session, UserTask, task_id=venue_id) == 1

    task = get_task(session, venue_id)
    assert task.column_id == "done"
    assert [link.url for link in task.links] == ["e.com"]
    assert [a.name for a in task.assignees] == ["Carol Le"]
    assert task.updated_by.name == "Bob Tran"
    assert task.updated_at is not None


def test_update_with_no_event_detaches_task(session, board):
    poster_id = board["tasks"]["poster"]
    update_task(session, poster_id, title="Design poster", column_id="in-progress")
    session.commit()

    task = get_task(session, poster_id)
    assert task.event is None
    assert task.links == []
    assert task.assignees == []


def test_update_missing_task_raises_not_found(session, board):
    with pytest.raises(NotFoundError, match="Task not found: 77"):
        update_task(session, 77, title="Ghost")


def test_create_task_rejects_unknown_assignee(session, board):
    with pytest.raises(NotFoundError, match="User not found: 555"):
        create_task(session, title="Hire DJ", assignee_ids=[555])


def test_create_task_rejects_unknown_event(session, board):
    with pytest.raises(NotFoundError, match="Event not found: 555"):
        create_task(session, title="Hire DJ", event_id=555)


def test_link_without_url_is_rejected(session):
    with pytest.raises(ValueError, match="must have url"):
        create_task(session, title="Broken", links=[{"title": "No url"}])


def test_link_title_defaults_to_url(session):
    task = create_task(session, title="Links", links=[{"url": "f.com"}])
    assert task.links[0].title == "f.com"


def test_delete_task_removes_owned_rows(session, board):
    venue_id = board["tasks"]["venue"]
    delete_task(session, venue_id)
    session.commit()

    assert session.get(Task, venue_id) is None
    assert _count(session, TaskLink, task_id=venue_id) == 0
    assert _count(session, UserTask, task_id=venue_id) == 0


def test_delete_event_detaches_tasks(session, board):
    delete_event(session, board["events"]["launch"])
    session.commit()

    with pytest.raises(NotFoundError):
        get_event_row(session, board["events"]["launch"])
    venue = get_task_row(session, board["tasks"]["venue"])
    assert venue.event_id is None


def test_user_lookup(session, board):
    alice = get_user(session, board["users"]["alice"])
    assert alice.code == "M001"
    assert get_user_by_email(session, "bob@example.com").id == board["users"]["bob"]
    assert get_user_by_email(session, "nobody@example.com") is None


def test_create_user_requires_email(session):
    with pytest.raises(ValueError, match="must have email"):
        create_user(session, name="Nameless", email="", code="X000")


def test_created_at_defaults_to_now(session):
    before = datetime.now(timezone.utc).replace(tzinfo=None, microsecond=0)
    task = create_task(session, title="Fresh")
    assert task.created_at.tzinfo is None
    assert task.created_at >= before


def test_move_task_changes_column_and_stamps_updater(session, board):
    venue_id = board["tasks"]["venue"]
    move_task(session, venue_id, "in-progress", updated_by_id=board["users"]["carol"])
    session.commit()

    moved = get_task(session, venue_id)
    assert moved.column_id == "in-progress"
    assert moved.updated_by.name == "Carol Le"
    assert moved.updated_at is not None
    # Links and assignees are not touched by a move
    assert [link.url for link in moved.links] == ["a.com", "b.com"]
    assert len(moved.assignees) == 2
    assert sorted(t.title for t in get_tasks_by_column(session, "in-progress")) == ["Book venue", "Design poster"]


def test_move_task_requires_existing_task_and_user(session, board):
    with pytest.raises(NotFoundError, match="Task not found: 404"):
        move_task(session, 404, "done", updated_by_id=board["users"]["alice"])
    with pytest.raises(NotFoundError, match="User not found: 404"):
        move_task(session, board["tasks"]["venue"], "done", updated_by_id=404)


def test_update_event_overwrites_fields(session, board):
    launch_id = board["events"]["launch"]
    update_event(
        session,
        launch_id,
        title="Product launch (moved)",
        description="Now indoors",
        status=StatusEvent.ONGOING,
        start_time=datetime(2026, 3, 2, 9, 0),
        end_time=datetime(2026, 3, 2, 18, 0),
        capacity=80,
        updated_by_id=board["users"]["bob"],
    )
    session.commit()

    event = get_event(session, launch_id)
    assert event.title == "Product launch (moved)"
    assert event.status_event == "ONGOING"
    assert event.start_time == datetime(2026, 3, 2, 9, 0)
    assert event.capacity == 80
    assert event.updated_by.name == "Bob Tran"
    assert event.created_by.name == "Alice Nguyen"
    assert sorted(t.title for t in event.tasks) == ["Book venue", "Design poster"]


def test_update_event_missing_raises_not_found(session, board):
    with pytest.raises(NotFoundError, match="Event not found: 31"):
        update_event(session, 31, title="Ghost", updated_by_id=board["users"]["alice"])
