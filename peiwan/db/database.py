from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import event
from sqlalchemy.engine import Engine
from sqlmodel import SQLModel, Session, create_engine

from peiwan.core.config import settings


WRITE_TRANSACTION_OPTION = "peiwan_write_transaction"


def _enable_sqlite_write_transactions(engine: Engine) -> None:
    # pysqlite defers BEGIN until the first write and SQLite ignores
    # SELECT ... FOR UPDATE, so write units take the write lock up front.
    # WAL keeps plain reads from blocking a writer and vice versa.
    @event.listens_for(engine, "connect")
    def _configure_connection(dbapi_connection, connection_record) -> None:
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _begin(conn) -> None:
        if conn.get_execution_options().get(WRITE_TRANSACTION_OPTION):
            conn.exec_driver_sql("BEGIN IMMEDIATE")
        else:
            conn.exec_driver_sql("BEGIN")


def build_engine(database_url: str, *, echo: bool = False) -> Engine:
    connect_args = {}
    if database_url.startswith("sqlite"):
        connect_args = {"check_same_thread": False}

    new_engine = create_engine(database_url, echo=echo, connect_args=connect_args)
    if new_engine.dialect.name == "sqlite":
        _enable_sqlite_write_transactions(new_engine)
    return new_engine


engine = build_engine(settings.database_url, echo=settings.debug)


def create_db_and_tables(bind: Engine | None = None) -> None:
    # Ensure all SQLModel table classes are imported before metadata.create_all.
    import peiwan.models  # noqa: F401

    SQLModel.metadata.create_all(bind or engine)


def drop_db_and_tables(bind: Engine | None = None) -> None:
    SQLModel.metadata.drop_all(bind or engine)


def rebuild_db() -> None:
    drop_db_and_tables()
    create_db_and_tables()


def get_session() -> Iterator[Session]:
    with Session(engine) as session:
        yield session


@contextmanager
def unit_of_work(session: Session) -> Iterator[Session]:
    """
    Run a write transaction on ``session``.

    Any read transaction still open on the session is ended first, so the
    write transaction starts from current data and, on SQLite, holds the
    write lock from its first statement. Commits on success and rolls back
    on any error so no partial write is visible.
    """
    if session.in_transaction():
        session.commit()
    try:
        session.connection(execution_options={WRITE_TRANSACTION_OPTION: True})
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
