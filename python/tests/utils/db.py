"""Test database utilities.

Unit tests run against a private in-memory SQLite database per test, built
from the ORM metadata. The same engine backs the test's own sessions and the
app's request sessions, so both see each other's committed rows.
"""

from sqlalchemy import Engine, create_engine, event
from sqlalchemy.pool import StaticPool

from tunebase.db.models import Base


def _enable_foreign_keys(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_test_engine() -> Engine:
    """Create an in-memory SQLite engine with the full schema.

    StaticPool keeps a single connection so every session sees the same
    in-memory database. Foreign keys are enforced as in PostgreSQL.
    """
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    event.listen(engine, "connect", _enable_foreign_keys)
    Base.metadata.create_all(engine)
    return engine
