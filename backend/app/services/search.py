"""Semantic link retrieval."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.models.embedding_type import uses_pgvector
from app.models.link import Link
from app.schemas.link import LinkRead
from app.schemas.search import LinkSearchHit
from app.services.embeddings import EmbeddingClient, cosine_similarity, embed_text, ensure_embedding

DEFAULT_SEARCH_LIMIT = 5
DEFAULT_SIMILARITY_THRESHOLD = 0.3


class RetrievalUnavailableError(RuntimeError):
    """Raised when the query cannot be embedded."""


def search_links(
    db: Session,
    *,
    query: str,
    limit: int = DEFAULT_SEARCH_LIMIT,
    threshold: float = DEFAULT_SIMILARITY_THRESHOLD,
    embedding_client: EmbeddingClient | None = None,
) -> list[LinkSearchHit]:
    """Return links whose similarity to the query is strictly above ``threshold``."""

    clean_query = " ".join(query.strip().split())
    query_vector = embed_text(clean_query, client=embedding_client) if clean_query else None
    if query_vector is None:
        raise RetrievalUnavailableError("Failed to generate query embedding")

    if db.get_bind().dialect.name == "postgresql" and uses_pgvector():
        return _search_with_pgvector(db, query_vector, limit=limit, threshold=threshold)
    return _search_in_memory(db, query_vector, limit=limit, threshold=threshold)


def _search_with_pgvector(
    db: Session,
    query_vector: list[float],
    *,
    limit: int,
    threshold: float,
) -> list[LinkSearchHit]:
    similarity_expr = (1 - Link.embedding.cosine_distance(query_vector)).label("similarity")
    rows = db.execute(
        select(Link, similarity_expr)
        .where(Link.embedding.is_not(None), similarity_expr > threshold)
        .order_by(similarity_expr.desc(), Link.created_at.asc(), Link.id.asc())
        .limit(max(0, limit))
    ).all()
    return [
        LinkSearchHit(link=LinkRead.model_validate(link), similarity=float(similarity))
        for link, similarity in rows
    ]


def _search_in_memory(
    db: Session,
    query_vector: list[float],
    *,
    limit: int,
    threshold: float,
) -> list[LinkSearchHit]:
    rows = list(db.scalars(select(Link).where(Link.embedding.is_not(None))))

    scored: list[tuple[float, Link]] = []
    for link in rows:
        similarity = cosine_similarity(query_vector, ensure_embedding(link.embedding))
        if similarity <= threshold:
            continue
        scored.append((similarity, link))
    scored.sort(key=lambda item: (-item[0], item[1].created_at, item[1].id))
    return [
        LinkSearchHit(link=LinkRead.model_validate(link), similarity=score)
        for score, link in scored[: max(0, limit)]
    ]
