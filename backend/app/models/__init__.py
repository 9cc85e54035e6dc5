"""ORM models package exports."""

from app.models.link import Link

__all__ = ["Link"]
