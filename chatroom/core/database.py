"""
Database engine, session factory and declarative base.
"""
from contextlib import contextmanager
from typing import Iterator, Optional
import logging

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from chatroom.core.config import settings

logger = logging.getLogger(__name__)

Base = declarative_base()


def create_db_engine(url: Optional[str] = None, echo: Optional[bool] = None) -> Engine:
    """Build an engine. SQLite connections get foreign keys enforced and a busy timeout."""
    url = url or settings.database_url
    if url.startswith("sqlite"):
        engine = create_engine(
            url,
            echo=settings.DB_ECHO if echo is None else echo,
            connect_args={
                "check_same_thread": False,
                "timeout": settings.SQLITE_BUSY_TIMEOUT_SECONDS,
            },
        )
        logger.debug("Created SQLite engine for %s", engine.url)

        @event.listens_for(engine, "connect")
        def _enable_foreign_keys(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

        return engine
    return create_engine(
        url,
        echo=settings.DB_ECHO if echo is None else echo,
        pool_pre_ping=True,
    )


def make_session_factory(bind: Engine) -> sessionmaker:
    # expire_on_commit off so rows can be turned into records after the transaction closes
    return sessionmaker(bind=bind, autoflush=False, expire_on_commit=False)


engine = create_db_engine()
SessionLocal = make_session_factory(engine)


def get_db() -> Iterator[Session]:
    """Yield a session and always close it."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def transaction(session_factory: sessionmaker) -> Iterator[Session]:
    """Open a session with a transaction that commits on success and rolls back on any exception."""
    with session_factory() as db:
        with db.begin():
            yield db
