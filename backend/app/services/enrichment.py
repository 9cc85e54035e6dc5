"""Link enrichment orchestration: extract, summarize, embed, persist, recurse."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from time import perf_counter
from typing import Protocol

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.enrichment.extractor_interface import ContentExtractor
from app.enrichment.registry import get_default_extractors
from app.enrichment.source_classifier import classify
from app.enrichment.types import ExtractionResult, SourceKind, SummaryResult
from app.services.embeddings import EmbeddingClient, embed_text
from app.services.links import insert_link_if_absent, update_enrichment
from app.services.summarizer import Summarizer, get_default_summarizer

logger = logging.getLogger(__name__)

# Only URLs discovered by a top-level run are enriched; their own discoveries are not.
MAX_ENRICHMENT_DEPTH = 1


class EnrichmentScheduler(Protocol):
    """Launches an enrichment run without the caller waiting for it."""

    def schedule(self, url: str, depth: int) -> None:
        """Queue ``url`` for enrichment at ``depth``."""


@dataclass(slots=True)
class EnrichmentOutcome:
    """What one run produced; used for logging and tests."""

    url: str
    source_type: SourceKind
    rows_updated: int
    has_title: bool = False
    has_summary: bool = False
    has_tags: bool = False
    has_embedding: bool = False
    scheduled_urls: list[str] = field(default_factory=list)


def enrich_link(
    db: Session,
    url: str,
    *,
    depth: int = 0,
    extractors: dict[SourceKind, ContentExtractor] | None = None,
    summarizer: Summarizer | None = None,
    embedding_client: EmbeddingClient | None = None,
    scheduler: EnrichmentScheduler | None = None,
) -> EnrichmentOutcome:
    """Run the enrichment pipeline for one stored URL.

    Extraction, summarization and embedding are best-effort; only a failed
    storage write propagates.
    """

    total_started = perf_counter()
    active_extractors = extractors or get_default_extractors()
    active_summarizer = summarizer or get_default_summarizer()

    source_type = classify(url)

    started = perf_counter()
    result = _extract_with_fallback(url, source_type, active_extractors)
    extract_ms = (perf_counter() - started) * 1000.0

    started = perf_counter()
    summary = _summarize(url, result, active_summarizer)
    summarize_ms = (perf_counter() - started) * 1000.0

    started = perf_counter()
    embedding = _embed(url, result, summary, embedding_client)
    embed_ms = (perf_counter() - started) * 1000.0

    rows_updated = update_enrichment(
        db,
        url,
        {
            "title": result.title,
            "description": result.description,
            "image_url": result.image_url,
            "raw_content": result.raw_content,
            "source_type": result.source_type.value,
            "summary": summary.summary if summary else None,
            "tags": summary.tags if summary else None,
            "embedding": embedding,
        },
    )

    outcome = EnrichmentOutcome(
        url=url,
        source_type=result.source_type,
        rows_updated=rows_updated,
        has_title=bool(result.title),
        has_summary=summary is not None,
        has_tags=bool(summary and summary.tags),
        has_embedding=embedding is not None,
    )
    logger.info(
        (
            "enrichment.link_enriched url=%s depth=%d source_type=%s rows_updated=%d "
            "has_title=%s has_summary=%s has_tags=%s has_embedding=%s "
            "extract_ms=%.2f summarize_ms=%.2f embed_ms=%.2f total_ms=%.2f"
        ),
        url,
        depth,
        outcome.source_type.value,
        rows_updated,
        outcome.has_title,
        outcome.has_summary,
        outcome.has_tags,
        outcome.has_embedding,
        extract_ms,
        summarize_ms,
        embed_ms,
        (perf_counter() - total_started) * 1000.0,
    )

    if depth < MAX_ENRICHMENT_DEPTH and result.extracted_urls:
        outcome.scheduled_urls = _schedule_discovered_urls(db, result.extracted_urls, depth, scheduler)
    return outcome


def build_summary_input(result: ExtractionResult) -> str | None:
    """First available of raw content, description, title."""

    return result.raw_content or result.description or result.title or None


def build_embedding_input(result: ExtractionResult, summary: SummaryResult | None) -> str:
    parts = [result.title, result.description, summary.summary if summary else None, result.raw_content]
    return "\n\n".join(part for part in parts if part)


def _extract_with_fallback(
    url: str,
    source_type: SourceKind,
    extractors: dict[SourceKind, ContentExtractor],
) -> ExtractionResult:
    try:
        return extractors[source_type].extract(url)
    except Exception as exc:
        logger.warning(
            "enrichment.extractor_failed url=%s source_type=%s error=%s",
            url,
            source_type.value,
            exc,
        )

    if source_type is not SourceKind.WEBPAGE:
        try:
            return extractors[SourceKind.WEBPAGE].extract(url)
        except Exception as exc:
            logger.error("enrichment.webpage_fallback_failed url=%s error=%s", url, exc)
    return ExtractionResult(source_type=source_type)


def _summarize(url: str, result: ExtractionResult, summarizer: Summarizer | None) -> SummaryResult | None:
    content = build_summary_input(result)
    if summarizer is None or not content:
        return None
    try:
        return summarizer.summarize(content)
    except Exception as exc:
        logger.warning("enrichment.summary_failed url=%s error=%s", url, exc)
        return None


def _embed(
    url: str,
    result: ExtractionResult,
    summary: SummaryResult | None,
    embedding_client: EmbeddingClient | None,
) -> list[float] | None:
    text = build_embedding_input(result, summary)
    if not text:
        return None
    try:
        embedding = embed_text(text, client=embedding_client)
    except Exception as exc:
        logger.warning("enrichment.embedding_failed url=%s error=%s", url, exc)
        return None
    if embedding is None:
        logger.warning("enrichment.embedding_unavailable url=%s", url)
    return embedding


def _schedule_discovered_urls(
    db: Session,
    urls: list[str],
    depth: int,
    scheduler: EnrichmentScheduler | None,
) -> list[str]:
    active_scheduler = scheduler or _get_default_scheduler()
    scheduled: list[str] = []
    for discovered_url in urls:
        try:
            insert_link_if_absent(db, discovered_url)
        except SQLAlchemyError as exc:
            db.rollback()
            logger.warning("enrichment.discovered_insert_failed url=%s error=%s", discovered_url, exc)
            continue
        active_scheduler.schedule(discovered_url, depth + 1)
        scheduled.append(discovered_url)
    return scheduled


def _get_default_scheduler() -> EnrichmentScheduler:
    from app.services.background_jobs import get_enrichment_scheduler

    return get_enrichment_scheduler()
