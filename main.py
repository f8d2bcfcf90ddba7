"""
Chatroom core entry point: logging, database check and (in DEBUG) table creation.
"""
from typing import Optional
import logging

from sqlalchemy import text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from chatroom.core.config import settings
from chatroom.core.database import Base, engine as default_engine

logging.basicConfig(level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))
logger = logging.getLogger(__name__)


def startup(engine: Optional[Engine] = None, create_tables: Optional[bool] = None) -> bool:
    """Check the database connection; create tables in DEBUG mode (use Alembic migrations in production).

    Returns True when the database answered.
    """
    engine = engine or default_engine
    create_tables = settings.DEBUG if create_tables is None else create_tables
    logger.info("Starting %s...", settings.PROJECT_NAME)
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        logger.info("Database connection OK")

        if create_tables:
            from chatroom.model import User, Room, RoomMembership, Message  # noqa: F401  register tables
            Base.metadata.create_all(bind=engine)
            logger.info("Database tables created (DEBUG mode)")
    except SQLAlchemyError as e:
        logger.error(f"Database connection failed: {e}")
        return False
    return True


def shutdown(engine: Optional[Engine] = None) -> None:
    logger.info("Shutting down...")
    (engine or default_engine).dispose()


if __name__ == "__main__":
    ok = startup()
    shutdown()
    raise SystemExit(0 if ok else 1)
