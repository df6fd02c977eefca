from contextlib import contextmanager
from typing import Generator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from .schema import create_all


def enable_sqlite_transactions(engine: Engine) -> Engine:
    """
    Make SQLite transactions start at BEGIN, not at the first write.

    pysqlite defers BEGIN until a DML statement, so a read-only transaction
    would hold no lock between its SELECTs. The driver's own transaction
    handling is switched off and BEGIN is emitted on the engine's "begin"
    event instead.
    """

    @event.listens_for(engine, "connect")
    def _disable_driver_transactions(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _emit_begin(conn):
        conn.exec_driver_sql("BEGIN")

    return engine


def get_engine(sqlite_path: str):
    engine_url = f"sqlite:///{sqlite_path}"
    engine = create_engine(engine_url, future=True)
    create_all(engine_url)
    return enable_sqlite_transactions(engine)


def get_session(sqlite_path: str) -> Session:
    """Get a SQLAlchemy session (caller must close it)."""
    engine = get_engine(sqlite_path)
    return sessionmaker(bind=engine, autoflush=False)()


@contextmanager
def session_context(sqlite_path: str) -> Generator[Session, None, None]:
    """
    Context manager for SQLAlchemy sessions.

    Ensures rollback on error and session cleanup. Writers commit explicitly.

    Usage:
        with session_context(sqlite_path) as session:
            # use session
            session.commit()
    """
    session = get_session(sqlite_path)
    try:
        yield session
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


@contextmanager
def read_scope(session: Session) -> Generator[Session, None, None]:
    """
    Run a multi-query read inside one transaction.

    Both phases of an aggregate load must observe the same data generation.
    If the session already has a transaction open it is reused (the caller
    owns commit/rollback); otherwise a new one is begun and ended here,
    rolling back if the block raises.
    """
    if session.in_transaction():
        yield session
        return
    with session.begin():
        yield session
