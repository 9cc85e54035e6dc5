"""Unit tests for the Firecrawl-backed webpage extractor."""

from __future__ import annotations

import unittest
from typing import Any

from app.enrichment.http import HttpRequestError
from app.enrichment.types import SourceKind
from app.enrichment.webpage_extractor import WebpageExtractor

BASE = "https://scrape.test"


class _StubHttpClient:
    def __init__(self, response: Any) -> None:
        self.response = response
        self.calls: list[tuple[str, dict[str, Any], dict[str, str] | None]] = []

    def get_json(self, url: str, **_: Any) -> Any:
        raise AssertionError("unexpected GET")

    def get_text(self, url: str, **_: Any) -> str:
        raise AssertionError("unexpected GET")

    def post_json(
        self,
        url: str,
        payload: dict[str, Any],
        *,
        headers: dict[str, str] | None = None,
        timeout: float | None = None,
    ) -> Any:
        self.calls.append((url, payload, headers))
        if isinstance(self.response, Exception):
            raise self.response
        return self.response


class WebpageExtractorTests(unittest.TestCase):
    def test_successful_scrape_maps_metadata(self) -> None:
        http = _StubHttpClient(
            {
                "success": True,
                "data": {
                    "markdown": "# Post\nBody",
                    "metadata": {
                        "title": "A post",
                        "description": "About things",
                        "ogImage": "https://img.test/og.png",
                    },
                },
            }
        )
        extractor = WebpageExtractor(http, api_key="key", base_url=BASE)

        result = extractor.extract("https://example.com/post")

        self.assertIs(result.source_type, SourceKind.WEBPAGE)
        self.assertEqual(result.title, "A post")
        self.assertEqual(result.description, "About things")
        self.assertEqual(result.image_url, "https://img.test/og.png")
        self.assertEqual(result.raw_content, "# Post\nBody")
        url, payload, headers = http.calls[0]
        self.assertEqual(url, f"{BASE}/v1/scrape")
        self.assertEqual(payload, {"url": "https://example.com/post", "formats": ["markdown"]})
        self.assertEqual(headers, {"Authorization": "Bearer key"})

    def test_missing_api_key_skips_request(self) -> None:
        http = _StubHttpClient({"success": True})
        extractor = WebpageExtractor(http, api_key=None, base_url=BASE)

        result = extractor.extract("https://example.com/post")

        self.assertIs(result.source_type, SourceKind.WEBPAGE)
        self.assertIsNone(result.title)
        self.assertEqual(http.calls, [])

    def test_unusable_responses_return_bare_result(self) -> None:
        for response in (
            HttpRequestError("rate limited", status_code=429),
            {"success": False},
            {"success": True},
            ["not", "an", "object"],
        ):
            with self.subTest(response=response):
                extractor = WebpageExtractor(_StubHttpClient(response), api_key="key", base_url=BASE)

                result = extractor.extract("https://example.com/post")

                self.assertIs(result.source_type, SourceKind.WEBPAGE)
                self.assertIsNone(result.raw_content)

    def test_transport_failure_propagates(self) -> None:
        extractor = WebpageExtractor(_StubHttpClient(HttpRequestError("dns failure")), api_key="key", base_url=BASE)

        with self.assertRaises(HttpRequestError):
            extractor.extract("https://example.com/post")


if __name__ == "__main__":
    unittest.main()
