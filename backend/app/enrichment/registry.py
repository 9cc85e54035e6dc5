"""Default extractor set keyed by source kind."""

from __future__ import annotations

from app.enrichment.code_host_extractor import get_default_code_host_extractor
from app.enrichment.extractor_interface import ContentExtractor
from app.enrichment.http import HttpClient, get_default_http_client
from app.enrichment.social_post_extractor import get_default_social_post_extractor
from app.enrichment.types import SourceKind
from app.enrichment.webpage_extractor import get_default_webpage_extractor


def get_default_extractors(http_client: HttpClient | None = None) -> dict[SourceKind, ContentExtractor]:
    """Return one configured extractor per source kind, sharing an HTTP client."""

    client = http_client or get_default_http_client()
    return {
        SourceKind.CODE_HOST: get_default_code_host_extractor(client),
        SourceKind.SOCIAL_POST: get_default_social_post_extractor(client),
        SourceKind.WEBPAGE: get_default_webpage_extractor(client),
    }
