"""Declarative base shared by all models."""

from datetime import datetime, timezone

from sqlalchemy.orm import declarative_base

Base = declarative_base()


def utcnow() -> datetime:
    """Naive UTC now, the representation every DateTime column stores."""
    return datetime.now(timezone.utc).replace(tzinfo=None)
