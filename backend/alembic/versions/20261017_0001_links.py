"""links table with enrichment and embedding columns

Revision ID: 20261017_0001
Revises:
Create Date: 2026-10-17 00:00:01
"""

from collections.abc import Sequence

from alembic import op
from pgvector.sqlalchemy import Vector
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "20261017_0001"
down_revision: str | None = None
branch_labels: Sequence[str] | None = None
depends_on: Sequence[str] | None = None

EMBEDDING_DIMENSIONS = 1536


def upgrade() -> None:
    is_postgres = op.get_bind().dialect.name == "postgresql"
    if is_postgres:
        op.execute("CREATE EXTENSION IF NOT EXISTS vector")
        embedding_type = Vector(EMBEDDING_DIMENSIONS)
        tags_type = postgresql.JSONB()
    else:
        embedding_type = sa.JSON()
        tags_type = sa.JSON()

    op.create_table(
        "links",
        sa.Column("id", sa.String(length=32), nullable=False),
        sa.Column("url", sa.Text(), nullable=False),
        sa.Column("title", sa.Text(), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("summary", sa.Text(), nullable=True),
        sa.Column("tags", tags_type, nullable=False, server_default=sa.text("'[]'")),
        sa.Column("image_url", sa.Text(), nullable=True),
        sa.Column("raw_content", sa.Text(), nullable=True),
        sa.Column("source_type", sa.String(length=32), nullable=True),
        sa.Column("embedding", embedding_type, nullable=True),
        sa.Column("workspace_id", sa.String(length=64), nullable=True),
        sa.Column("slack_channel_id", sa.String(length=64), nullable=True),
        sa.Column("slack_user_id", sa.String(length=64), nullable=True),
        sa.Column("slack_message_ts", sa.String(length=64), nullable=True),
        sa.Column("enriched_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("links_url_idx", "links", ["url"], unique=True)
    op.create_index("ix_links_created_at", "links", ["created_at"], unique=False)
    op.create_index("ix_links_workspace_id", "links", ["workspace_id"], unique=False)
    if is_postgres:
        op.create_index("links_tags_idx", "links", ["tags"], unique=False, postgresql_using="gin")
        op.create_index(
            "links_embedding_idx",
            "links",
            ["embedding"],
            unique=False,
            postgresql_using="hnsw",
            postgresql_ops={"embedding": "vector_cosine_ops"},
        )


def downgrade() -> None:
    is_postgres = op.get_bind().dialect.name == "postgresql"
    if is_postgres:
        op.drop_index("links_embedding_idx", table_name="links")
        op.drop_index("links_tags_idx", table_name="links")
    op.drop_index("ix_links_workspace_id", table_name="links")
    op.drop_index("ix_links_created_at", table_name="links")
    op.drop_index("links_url_idx", table_name="links")
    op.drop_table("links")
