"""Run real extraction and summarization for one URL without touching the database.

Usage (from repo root):
    python backend/scripts/smoke_enrich_url.py https://github.com/pgvector/pgvector

Usage (from backend/):
    python scripts/smoke_enrich_url.py https://x.com/someone/status/123
"""

from __future__ import annotations

import json
import sys
from pathlib import Path

BACKEND_DIR = Path(__file__).resolve().parents[1]
if str(BACKEND_DIR) not in sys.path:
    sys.path.insert(0, str(BACKEND_DIR))

from app.enrichment.registry import get_default_extractors
from app.enrichment.source_classifier import classify
from app.services.summarizer import get_default_summarizer
from app.services.enrichment import build_summary_input


def main() -> None:
    if len(sys.argv) != 2:
        raise SystemExit("usage: smoke_enrich_url.py <url>")
    url = sys.argv[1]

    source_type = classify(url)
    result = get_default_extractors()[source_type].extract(url)
    summarizer = get_default_summarizer()
    content = build_summary_input(result)
    summary = summarizer.summarize(content) if summarizer and content else None

    print(
        json.dumps(
            {
                "url": url,
                "source_type": result.source_type.value,
                "title": result.title,
                "description": result.description,
                "image_url": result.image_url,
                "raw_content_chars": len(result.raw_content or ""),
                "extracted_urls": result.extracted_urls,
                "summary": summary.summary if summary else None,
                "tags": summary.tags if summary else [],
            },
            indent=2,
        )
    )


if __name__ == "__main__":
    main()
