"""
Database session management for triplog.

Provides the database engine and session factory that can be imported
by services and blueprints without circular dependencies.
"""

import logging
import time

from sqlalchemy import event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import scoped_session, sessionmaker

from triplog.config import Config
from triplog.models import Base, get_engine

logger = logging.getLogger(__name__)

# Create engine and session factory
engine = get_engine(Config.DATABASE_URL)
# Objects handed to the filter and statistics layers stay readable after commit
SessionLocal = scoped_session(sessionmaker(bind=engine, expire_on_commit=False))

# Add slow query logging (queries >500ms)
SLOW_QUERY_THRESHOLD_MS = 500


@event.listens_for(Engine, "before_cursor_execute")
def before_cursor_execute(conn, cursor, statement, parameters, context, executemany):
    """Record query start time."""
    conn.info.setdefault("query_start_time", []).append(time.time())


@event.listens_for(Engine, "after_cursor_execute")
def after_cursor_execute(conn, cursor, statement, parameters, context, executemany):
    """Log slow queries."""
    total_time = time.time() - conn.info["query_start_time"].pop(-1)
    duration_ms = total_time * 1000

    if duration_ms > SLOW_QUERY_THRESHOLD_MS:
        # Truncate long queries for logging
        truncated_query = statement[:200] + "..." if len(statement) > 200 else statement
        logger.warning(
            f"Slow query detected: {duration_ms:.2f}ms - {truncated_query}", extra={"duration_ms": duration_ms}
        )


def init_db():
    """Create tables that do not exist yet."""
    Base.metadata.create_all(engine)


def close_db(exception=None):
    """
    Release the thread's session at the end of a request.

    Call this in teardown_appcontext.
    """
    SessionLocal.remove()


def init_app(app):
    """
    Initialize database with Flask app.

    Creates missing tables and registers the teardown function to close sessions.
    """
    init_db()
    app.teardown_appcontext(close_db)
