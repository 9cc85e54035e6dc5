"""Link persistence services keyed by unique URL."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from sqlalchemy import delete, select, update
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.models.ids import link_id as new_link_id
from app.models.link import Link

ENRICHMENT_FIELDS = frozenset(
    {
        "title",
        "description",
        "summary",
        "tags",
        "image_url",
        "raw_content",
        "source_type",
        "embedding",
    }
)
PROVENANCE_FIELDS = frozenset({"workspace_id", "slack_channel_id", "slack_user_id", "slack_message_ts"})


class LinkAlreadyExistsError(ValueError):
    """Raised when creating a link whose URL is already stored."""


def find_link_by_url(db: Session, url: str) -> Link | None:
    return db.scalar(select(Link).where(Link.url == url))


def get_link(db: Session, link_id: str) -> Link | None:
    return db.get(Link, link_id)


def list_links(db: Session, *, limit: int | None = None) -> list[Link]:
    """Return links newest first."""

    stmt = select(Link).order_by(Link.created_at.desc(), Link.id.asc())
    if limit is not None:
        stmt = stmt.limit(limit)
    return list(db.scalars(stmt).all())


def create_link(
    db: Session,
    url: str,
    *,
    title: str | None = None,
    summary: str | None = None,
    tags: list[str] | None = None,
) -> Link:
    """Insert a new unenriched link; duplicate URLs raise ``LinkAlreadyExistsError``."""

    link = Link(url=url, title=title, summary=summary, tags=list(tags or []))
    db.add(link)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise LinkAlreadyExistsError(f"URL already exists: {url}") from exc
    db.refresh(link)
    return link


def delete_link(db: Session, link_id: str) -> bool:
    result = db.execute(delete(Link).where(Link.id == link_id))
    db.commit()
    return result.rowcount > 0


def insert_link_if_absent(db: Session, url: str, **initial_fields: Any) -> bool:
    """Insert an unenriched link unless the URL exists. Returns whether a row was added."""

    unknown = set(initial_fields) - PROVENANCE_FIELDS
    if unknown:
        raise ValueError(f"Unsupported initial link fields: {sorted(unknown)}")

    now = datetime.now(timezone.utc)
    values = {
        "id": new_link_id(),
        "url": url,
        "tags": [],
        "created_at": now,
        "updated_at": now,
        **initial_fields,
    }
    dialect_name = db.get_bind().dialect.name
    if dialect_name == "postgresql":
        stmt = postgresql.insert(Link).values(**values).on_conflict_do_nothing(index_elements=[Link.url])
    elif dialect_name == "sqlite":
        stmt = sqlite.insert(Link).values(**values).on_conflict_do_nothing(index_elements=[Link.url])
    else:
        if find_link_by_url(db, url) is not None:
            return False
        db.add(Link(**values))
        db.commit()
        return True
    result = db.execute(stmt)
    db.commit()
    return result.rowcount > 0


def update_enrichment(db: Session, url: str, fields: dict[str, Any]) -> int:
    """Write enrichment fields for the link stored at ``url``.

    ``None`` values are skipped so a degraded run never clears data. Returns the
    number of rows updated; zero is not an error.
    """

    unknown = set(fields) - ENRICHMENT_FIELDS
    if unknown:
        raise ValueError(f"Unsupported enrichment fields: {sorted(unknown)}")

    now = datetime.now(timezone.utc)
    values = {key: value for key, value in fields.items() if value is not None}
    values["enriched_at"] = now
    values["updated_at"] = now
    result = db.execute(
        update(Link).where(Link.url == url).values(**values).execution_options(synchronize_session=False)
    )
    db.commit()
    return result.rowcount
