"""Database base and declarative_base for TaskSync."""

from datetime import datetime, timezone

from sqlalchemy.orm import declarative_base

Base = declarative_base()


def utcnow() -> datetime:
    """Current UTC time as a naive datetime, the form stored in SQLite."""
    return datetime.now(timezone.utc).replace(tzinfo=None)
