"""Engine, session factory and declarative base for the teacher database."""

from typing import Any, Generator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from .config import get_settings

settings = get_settings()


def build_engine(database_url: str, **kwargs: Any) -> Engine:
    """Create an engine for ``database_url``.

    SQLite connections are shared with FastAPI's threadpool and need
    explicit BEGIN so that SAVEPOINTs behave.
    """

    if not database_url.startswith("sqlite"):
        return create_engine(database_url, future=True, pool_pre_ping=True, **kwargs)

    connect_args = kwargs.pop("connect_args", {})
    connect_args.setdefault("check_same_thread", False)
    sqlite_engine = create_engine(database_url, future=True, connect_args=connect_args, **kwargs)

    @event.listens_for(sqlite_engine, "connect")
    def _disable_driver_transactions(dbapi_connection, connection_record) -> None:
        dbapi_connection.isolation_level = None

    @event.listens_for(sqlite_engine, "begin")
    def _emit_begin(conn) -> None:
        conn.exec_driver_sql("BEGIN")

    return sqlite_engine


engine = build_engine(settings.database_url)
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)

Base = declarative_base()


def init_db(bind: Engine | None = None) -> None:
    """Create all tables that do not exist yet.

    Production schemas are expected to be managed by migrations; this is
    used for local development and tests.
    """

    from .. import models  # noqa: F401  registers mappers on Base.metadata

    Base.metadata.create_all(bind=bind or engine)


def get_db() -> Generator[Session, None, None]:
    """Yield a database session for request lifetime."""

    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
