"""SQLAlchemy metadata registry import for Alembic."""

from app.models import Link
from app.models.base import Base

__all__ = ["Base", "Link"]
