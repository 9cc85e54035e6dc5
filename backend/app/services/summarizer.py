"""LLM-backed link summarization with a closed tag taxonomy."""

from __future__ import annotations

import json
import logging
import re

from pydantic import BaseModel, Field, ValidationError

from app.enrichment.types import SummaryResult
from app.services.llm import ChatCompletionClient, get_default_chat_client, is_chat_model_configured

logger = logging.getLogger(__name__)

TAG_TAXONOMY: tuple[str, ...] = (
    "ai-ml",
    "web-dev",
    "backend",
    "frontend",
    "devops",
    "security",
    "data",
    "mobile",
    "open-source",
    "product",
    "design",
    "career",
    "startup",
    "research",
    "tutorial",
    "tool",
    "opinion",
    "news",
)
MAX_SUMMARY_INPUT_CHARS = 4000
SUMMARY_MAX_TOKENS = 256

SYSTEM_PROMPT = (
    "You are a link categorizer. Given the content of a web page, tweet, or repository, provide:\n"
    "1. A concise 1-2 sentence summary of what this content is about.\n"
    f"2. 1-3 tags from ONLY this fixed list: {', '.join(TAG_TAXONOMY)}\n\n"
    "Respond with valid JSON only, no markdown:\n"
    '{"summary": "...", "tags": ["..."]}'
)

_LEADING_FENCE_RE = re.compile(r"^```(?:json)?\s*\n?", re.IGNORECASE)
_TRAILING_FENCE_RE = re.compile(r"\n?```\s*$")


class _RawSummary(BaseModel):
    summary: str
    tags: list[str] = Field(default_factory=list)


class Summarizer:
    """Summarizes extracted content and filters tags to the taxonomy."""

    def __init__(self, client: ChatCompletionClient) -> None:
        self._client = client

    def summarize(self, content: str) -> SummaryResult | None:
        """Return a summary, or ``None`` when the model output is not valid JSON."""

        truncated = truncate_for_summary(content)
        raw = self._client.complete(
            [
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": truncated},
            ],
            max_tokens=SUMMARY_MAX_TOKENS,
        )
        return parse_summary_response(raw)


def truncate_for_summary(content: str) -> str:
    if len(content) > MAX_SUMMARY_INPUT_CHARS:
        return content[:MAX_SUMMARY_INPUT_CHARS] + "..."
    return content


def strip_code_fences(raw: str) -> str:
    text = _LEADING_FENCE_RE.sub("", raw.strip())
    return _TRAILING_FENCE_RE.sub("", text).strip()


def parse_summary_response(raw: str) -> SummaryResult | None:
    text = strip_code_fences(raw)
    try:
        parsed = _RawSummary.model_validate(json.loads(text))
    except (json.JSONDecodeError, ValidationError):
        logger.warning("enrichment.summary_unparseable text=%r", text[:200])
        return None
    return SummaryResult(summary=parsed.summary.strip(), tags=filter_tags(parsed.tags))


def filter_tags(tags: list[str]) -> list[str]:
    """Keep taxonomy members in model order, dropping everything else."""

    allowed = set(TAG_TAXONOMY)
    kept: list[str] = []
    for tag in tags:
        if tag in allowed and tag not in kept:
            kept.append(tag)
    return kept


def get_default_summarizer() -> Summarizer | None:
    """Return a summarizer, or ``None`` when no chat model is configured."""

    if not is_chat_model_configured():
        logger.debug("enrichment.summary_skipped reason=missing_api_key")
        return None
    return Summarizer(get_default_chat_client())
