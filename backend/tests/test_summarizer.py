"""Unit tests for link summarization and tag filtering."""

from __future__ import annotations

import unittest
from unittest.mock import patch

from app.services.summarizer import (
    MAX_SUMMARY_INPUT_CHARS,
    Summarizer,
    filter_tags,
    get_default_summarizer,
    parse_summary_response,
    strip_code_fences,
    truncate_for_summary,
)


class _RecordingChatClient:
    def __init__(self, response: str) -> None:
        self.response = response
        self.calls: list[tuple[list[dict[str, str]], int | None]] = []

    def complete(self, messages: list[dict[str, str]], *, max_tokens: int | None = None) -> str:
        self.calls.append((messages, max_tokens))
        return self.response


class SummarizerTests(unittest.TestCase):
    def test_fenced_response_drops_unknown_tags(self) -> None:
        client = _RecordingChatClient(
            '```json\n{"summary": "A guide to vector search.", "tags": ["ai-ml", "quantum-computing", "tutorial"]}\n```'
        )

        result = Summarizer(client).summarize("Some article body")

        self.assertEqual(result.summary, "A guide to vector search.")
        self.assertEqual(result.tags, ["ai-ml", "tutorial"])

    def test_prompt_carries_taxonomy_and_content(self) -> None:
        client = _RecordingChatClient('{"summary": "ok", "tags": []}')

        Summarizer(client).summarize("Body text")

        messages, max_tokens = client.calls[0]
        self.assertEqual(messages[0]["role"], "system")
        self.assertIn("open-source", messages[0]["content"])
        self.assertEqual(messages[1], {"role": "user", "content": "Body text"})
        self.assertIsNotNone(max_tokens)

    def test_long_content_is_truncated_with_ellipsis(self) -> None:
        client = _RecordingChatClient('{"summary": "ok", "tags": []}')

        Summarizer(client).summarize("x" * (MAX_SUMMARY_INPUT_CHARS + 50))

        sent = client.calls[0][0][1]["content"]
        self.assertEqual(len(sent), MAX_SUMMARY_INPUT_CHARS + 3)
        self.assertTrue(sent.endswith("..."))

    def test_invalid_json_returns_none(self) -> None:
        client = _RecordingChatClient("Sure! Here is a summary of the page.")

        self.assertIsNone(Summarizer(client).summarize("Body"))

    def test_missing_summary_key_returns_none(self) -> None:
        self.assertIsNone(parse_summary_response('{"tags": ["news"]}'))


class SummaryHelperTests(unittest.TestCase):
    def test_strip_code_fences_variants(self) -> None:
        self.assertEqual(strip_code_fences('```\n{"a": 1}\n```'), '{"a": 1}')
        self.assertEqual(strip_code_fences('```JSON {"a": 1}```'), '{"a": 1}')
        self.assertEqual(strip_code_fences('  {"a": 1}  '), '{"a": 1}')

    def test_filter_tags_keeps_order_and_dedupes(self) -> None:
        self.assertEqual(filter_tags(["tool", "nope", "ai-ml", "tool"]), ["tool", "ai-ml"])

    def test_short_content_is_not_truncated(self) -> None:
        self.assertEqual(truncate_for_summary("short"), "short")

    def test_default_summarizer_requires_api_key(self) -> None:
        with patch("app.services.summarizer.is_chat_model_configured", return_value=False):
            self.assertIsNone(get_default_summarizer())


if __name__ == "__main__":
    unittest.main()
