"""Pytest configuration and fixtures."""

from datetime import datetime

import pytest
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker

from tasktrack.database.event_repo import create_event
from tasktrack.database.schema import Base, Priority, StatusEvent, UserTeam
from tasktrack.database.sqlite_client import enable_sqlite_transactions
from tasktrack.database.store import SqlStore
from tasktrack.database.task_repo import create_task
from tasktrack.database.user_repo import create_user


@pytest.fixture
def engine():
    """In-memory SQLite engine with all tables created."""
    engine = enable_sqlite_transactions(create_engine("sqlite:///:memory:", echo=False))
    Base.metadata.create_all(engine)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def session(engine):
    """Create a temporary in-memory database session for testing."""
    SessionLocal = sessionmaker(bind=engine)
    session = SessionLocal()

    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def select_counter(engine):
    """Count SELECT statements sent to the database."""
    statements = []

    def _before_cursor_execute(conn, cursor, statement, parameters, context, executemany):
        if statement.lstrip().upper().startswith("SELECT"):
            statements.append(statement)

    event.listen(engine, "before_cursor_execute", _before_cursor_execute)
    try:
        yield statements
    finally:
        event.remove(engine, "before_cursor_execute", _before_cursor_execute)


class CountingStore(SqlStore):
    """SqlStore that records every call the loader makes."""

    def __init__(self, session):
        super().__init__(session)
        self.calls = []

    def query(self, model_class, predicate, ordering=(), **kwargs):
        self.calls.append(("query", model_class.__name__))
        return super().query(model_class, predicate, ordering, **kwargs)

    def query_by_ids(self, association, ids):
        ids = list(ids)
        self.calls.append(("query_by_ids", association.name, tuple(ids)))
        return super().query_by_ids(association, ids)


@pytest.fixture
def counting_store(session):
    return CountingStore(session)


@pytest.fixture
def counting_store_class():
    """CountingStore itself, for tests that subclass it."""
    return CountingStore


@pytest.fixture
def board(session):
    """
    A small board: three users, two events, five tasks.

    Tasks (created_at order): flyer (cancel), venue (todo), badges (todo),
    poster (in-progress), snacks (todo).
    """
    alice = create_user(session, name="Alice Nguyen", email="alice@example.com", code="M001", team=UserTeam.MEDIA)
    bob = create_user(session, name="Bob Tran", email="bob@example.com", code="E002", team=UserTeam.EVENT)
    carol = create_user(session, name="Carol Le", email="carol@example.com", code="H003", team=UserTeam.HR)

    launch = create_event(
        session,
        title="Product launch",
        description="Spring launch evening",
        status=StatusEvent.UPCOMING,
        start_time=datetime(2026, 3, 1, 9, 0),
        end_time=datetime(2026, 3, 1, 18, 0),
        capacity=120,
        created_by_id=alice.id,
        created_at=datetime(2026, 1, 1, 8, 0),
    )
    retro = create_event(
        session,
        title="Team retro",
        description="Quarterly look back",
        status=StatusEvent.COMPLETED,
        start_time=datetime(2026, 1, 20, 14, 0),
        end_time=datetime(2026, 1, 20, 16, 0),
        created_at=datetime(2026, 1, 2, 8, 0),
    )

    flyer = create_task(
        session,
        title="Old flyer",
        description="Replaced by poster",
        priority=Priority.LOW,
        column_id="cancel",
        created_at=datetime(2026, 1, 9, 8, 0),
    )
    venue = create_task(
        session,
        title="Book venue",
        description="Shortlist and book the hall",
        priority=Priority.HIGH,
        column_id="todo",
        start_date=datetime(2026, 2, 1),
        end_date=datetime(2026, 2, 10),
        event_id=launch.id,
        links=[{"url": "a.com", "title": "Venue A"}, {"url": "b.com", "title": "Venue B"}],
        assignee_ids=[alice.id, bob.id],
        created_by_id=alice.id,
        created_at=datetime(2026, 1, 10, 8, 0),
    )
    badges = create_task(
        session,
        title="Print badges",
        priority=Priority.MEDIUM,
        column_id="todo",
        created_at=datetime(2026, 1, 11, 8, 0),
    )
    poster = create_task(
        session,
        title="Design poster",
        description="Poster for the launch",
        priority=Priority.MEDIUM,
        column_id="in-progress",
        start_date=datetime(2026, 2, 5),
        end_date=datetime(2026, 2, 20),
        event_id=launch.id,
        links=[{"url": "c.com", "title": "Moodboard"}],
        assignee_ids=[carol.id],
        created_by_id=bob.id,
        created_at=datetime(2026, 1, 11, 9, 0),
    )
    snacks = create_task(
        session,
        title="Order snacks",
        description="Venue catering",
        priority=Priority.LOW,
        column_id="todo",
        start_date=datetime(2026, 2, 15),
        end_date=datetime(2026, 2, 28),
        links=[{"url": "d.com", "title": "Caterer"}],
        assignee_ids=[bob.id],
        created_at=datetime(2026, 1, 12, 8, 0),
    )
    ids = {
        "users": {"alice": alice.id, "bob": bob.id, "carol": carol.id},
        "events": {"launch": launch.id, "retro": retro.id},
        "tasks": {
            "flyer": flyer.id,
            "venue": venue.id,
            "badges": badges.id,
            "poster": poster.id,
            "snacks": snacks.id,
        },
    }
    session.commit()
    return ids
