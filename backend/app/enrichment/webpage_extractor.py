"""Generic webpage extractor backed by the Firecrawl scrape API.

This extractor is also the fallback for every other source kind, so any
response it cannot use degrades to a bare result instead of raising. Only
transport failures (DNS, timeouts) propagate.
"""

from __future__ import annotations

import logging

from pydantic import BaseModel, ValidationError

from app.config import get_settings
from app.enrichment.extractor_interface import ContentExtractor
from app.enrichment.http import HttpClient, HttpRequestError, get_default_http_client
from app.enrichment.types import ExtractionResult, SourceKind

logger = logging.getLogger(__name__)


class _ScrapeMetadata(BaseModel):
    title: str | None = None
    description: str | None = None
    ogImage: str | None = None  # noqa: N815


class _ScrapeData(BaseModel):
    markdown: str | None = None
    metadata: _ScrapeMetadata | None = None


class _ScrapeResponse(BaseModel):
    success: bool = False
    data: _ScrapeData | None = None


class WebpageExtractor(ContentExtractor):
    """Scrapes a page to markdown plus title/description/og:image."""

    def __init__(
        self,
        http_client: HttpClient,
        *,
        api_key: str | None,
        base_url: str = "https://api.firecrawl.dev",
    ) -> None:
        self._http = http_client
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")

    @property
    def source_type(self) -> SourceKind:
        return SourceKind.WEBPAGE

    def extract(self, url: str) -> ExtractionResult:
        if not self._api_key:
            logger.debug("enrichment.webpage_skipped reason=missing_api_key url=%s", url)
            return self.bare_result()

        try:
            payload = self._http.post_json(
                f"{self._base_url}/v1/scrape",
                {"url": url, "formats": ["markdown"]},
                headers={"Authorization": f"Bearer {self._api_key}"},
            )
        except HttpRequestError as exc:
            if exc.status_code is None:
                raise
            logger.warning("enrichment.webpage_scrape_failed url=%s status=%s", url, exc.status_code)
            return self.bare_result()

        try:
            response = _ScrapeResponse.model_validate(payload)
        except ValidationError:
            response = _ScrapeResponse()
        if not response.success or response.data is None:
            logger.warning("enrichment.webpage_scrape_unsuccessful url=%s", url)
            return self.bare_result()

        metadata = response.data.metadata or _ScrapeMetadata()
        return ExtractionResult(
            source_type=self.source_type,
            title=metadata.title,
            description=metadata.description,
            image_url=metadata.ogImage,
            raw_content=response.data.markdown,
        )


def get_default_webpage_extractor(http_client: HttpClient | None = None) -> WebpageExtractor:
    settings = get_settings()
    return WebpageExtractor(
        http_client or get_default_http_client(),
        api_key=settings.firecrawl_api_key,
        base_url=settings.firecrawl_base_url,
    )
