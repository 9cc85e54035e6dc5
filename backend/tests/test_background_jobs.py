"""Unit tests for background enrichment scheduling."""

from __future__ import annotations

import threading
import unittest
from unittest.mock import MagicMock, patch

from sqlalchemy.exc import OperationalError

from app.services.background_jobs import (
    ThreadPoolEnrichmentScheduler,
    run_enrichment_job,
    schedule_enrichment,
)


class BackgroundJobTests(unittest.TestCase):
    def test_scheduler_runs_job_off_the_calling_thread(self) -> None:
        started = threading.Event()
        release = threading.Event()
        seen: list[tuple[str, int, str]] = []

        def fake_job(url: str, depth: int) -> None:
            started.set()
            release.wait(timeout=5)
            seen.append((url, depth, threading.current_thread().name))

        scheduler = ThreadPoolEnrichmentScheduler(max_workers=1)
        with patch("app.services.background_jobs.run_enrichment_job", side_effect=fake_job):
            scheduler.schedule("https://example.com/a", 1)
            self.assertTrue(started.wait(timeout=5))
            self.assertEqual(seen, [])
            release.set()
            scheduler.shutdown(wait=True)

        self.assertEqual(seen[0][:2], ("https://example.com/a", 1))
        self.assertTrue(seen[0][2].startswith("enrichment"))

    def test_schedule_enrichment_uses_shared_scheduler(self) -> None:
        scheduler = MagicMock()
        with patch("app.services.background_jobs.get_enrichment_scheduler", return_value=scheduler):
            schedule_enrichment("https://example.com/a")

        scheduler.schedule.assert_called_once_with("https://example.com/a", 0)

    def test_failed_run_does_not_block_later_urls(self) -> None:
        scheduler = ThreadPoolEnrichmentScheduler(max_workers=1)
        attempted: list[str] = []

        def flaky_enrich(db, url, *, depth, scheduler):
            attempted.append(url)
            if url.endswith("/1"):
                raise OperationalError("UPDATE links", {}, Exception("database is locked"))
            return MagicMock(rows_updated=1, scheduled_urls=[])

        with (
            patch("app.services.background_jobs.SessionLocal", return_value=MagicMock()),
            patch("app.services.background_jobs.get_enrichment_scheduler", return_value=scheduler),
            patch("app.services.background_jobs.enrich_link", side_effect=flaky_enrich),
            self.assertLogs("app.services.background_jobs", level="ERROR") as logs,
        ):
            for index in (1, 2, 3):
                schedule_enrichment(f"https://example.com/{index}")
            scheduler.shutdown(wait=True)

        self.assertEqual(
            attempted,
            ["https://example.com/1", "https://example.com/2", "https://example.com/3"],
        )
        self.assertEqual(len(logs.records), 1)
        self.assertIn("https://example.com/1", logs.records[0].getMessage())

    def test_job_closes_session_and_reraises(self) -> None:
        session = MagicMock()
        with (
            patch("app.services.background_jobs.SessionLocal", return_value=session),
            patch("app.services.background_jobs.get_enrichment_scheduler", return_value=MagicMock()),
            patch("app.services.background_jobs.enrich_link", side_effect=RuntimeError("db down")),
            self.assertLogs("app.services.background_jobs", level="ERROR"),
        ):
            with self.assertRaises(RuntimeError):
                run_enrichment_job("https://example.com/a")

        session.close.assert_called_once_with()


if __name__ == "__main__":
    unittest.main()
