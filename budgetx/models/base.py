"""
Base SQLAlchemy model class.

This module defines the base class for all SQLAlchemy models in the application.
"""

from datetime import datetime, timezone

from sqlalchemy.orm import declarative_base

Base = declarative_base()


def utcnow() -> datetime:
    """Timezone-aware timestamp used as the Python-side column default."""
    return datetime.now(timezone.utc)
