"""Embedding column type for link vectors."""

from __future__ import annotations

from pgvector.sqlalchemy import Vector
from sqlalchemy import JSON

from app.config import get_settings

EMBEDDING_DIMENSIONS = 1536

_ENABLE_PGVECTOR = get_settings().enable_pgvector

# JSON keeps SQLite (tests, local dev) working; pgvector enables the
# distance operators used by the PostgreSQL search path.
if _ENABLE_PGVECTOR:
    EMBEDDING_COLUMN_TYPE = Vector(EMBEDDING_DIMENSIONS).with_variant(JSON(none_as_null=True), "sqlite")
else:
    EMBEDDING_COLUMN_TYPE = JSON(none_as_null=True)


def uses_pgvector() -> bool:
    """Whether link embeddings are stored in a native pgvector column."""

    return _ENABLE_PGVECTOR
