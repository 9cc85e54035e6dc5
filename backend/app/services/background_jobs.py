"""Background jobs for fire-and-forget link enrichment."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from functools import lru_cache
from time import perf_counter

from app.config import get_settings
from app.db.session import SessionLocal
from app.services.enrichment import enrich_link

logger = logging.getLogger(__name__)


def run_enrichment_job(url: str, depth: int = 0) -> None:
    """Enrich one URL in its own DB session."""

    total_started = perf_counter()
    db = SessionLocal()
    try:
        outcome = enrich_link(db, url, depth=depth, scheduler=get_enrichment_scheduler())
        logger.info(
            "enrichment.job_timing url=%s depth=%d rows_updated=%d scheduled=%d total_ms=%.2f",
            url,
            depth,
            outcome.rows_updated,
            len(outcome.scheduled_urls),
            (perf_counter() - total_started) * 1000.0,
        )
    except Exception:
        logger.exception(
            "enrichment.job_failed url=%s depth=%d elapsed_ms=%.2f",
            url,
            depth,
            (perf_counter() - total_started) * 1000.0,
        )
        raise
    finally:
        db.close()


class ThreadPoolEnrichmentScheduler:
    """Runs enrichment jobs on a shared worker pool without blocking the caller."""

    def __init__(self, max_workers: int) -> None:
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="enrichment")

    def schedule(self, url: str, depth: int) -> None:
        self._executor.submit(run_enrichment_job, url, depth)

    def shutdown(self, *, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)


@lru_cache
def get_enrichment_scheduler() -> ThreadPoolEnrichmentScheduler:
    """Return the process-wide enrichment scheduler."""

    return ThreadPoolEnrichmentScheduler(max_workers=get_settings().enrichment_max_workers)


def schedule_enrichment(url: str, depth: int = 0) -> None:
    """Queue enrichment for ``url`` on the shared pool and return immediately."""

    get_enrichment_scheduler().schedule(url, depth)
