"""X/Twitter post extractor built on the public syndication and full-text endpoints."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor

from pydantic import BaseModel, Field, ValidationError

from app.config import get_settings
from app.enrichment.extractor_interface import ContentExtractor
from app.enrichment.http import HttpClient, HttpRequestError, get_default_http_client
from app.enrichment.source_classifier import extract_post_id
from app.enrichment.types import ExtractionResult, SourceKind

logger = logging.getLogger(__name__)

FULL_TEXT_TIMEOUT_SECONDS = 5
_ARTICLE_LINK_MARKERS = ("x.com/i/article/", "twitter.com/i/article/")


class SyndicationUser(BaseModel):
    name: str
    screen_name: str
    profile_image_url_https: str | None = None


class SyndicationUrl(BaseModel):
    url: str | None = None
    expanded_url: str
    display_url: str | None = None


class SyndicationEntities(BaseModel):
    urls: list[SyndicationUrl] = Field(default_factory=list)


class SyndicationPhoto(BaseModel):
    url: str


class SyndicationVideo(BaseModel):
    poster: str | None = None


class SyndicationMediaInfo(BaseModel):
    original_img_url: str


class SyndicationCoverMedia(BaseModel):
    media_info: SyndicationMediaInfo


class SyndicationArticle(BaseModel):
    title: str
    preview_text: str = ""
    cover_media: SyndicationCoverMedia | None = None


class SyndicationPost(BaseModel):
    """Subset of the syndication payload the extractor relies on."""

    text: str
    user: SyndicationUser
    entities: SyndicationEntities = Field(default_factory=SyndicationEntities)
    photos: list[SyndicationPhoto] = Field(default_factory=list)
    video: SyndicationVideo | None = None
    article: SyndicationArticle | None = None


class SocialPostExtractor(ContentExtractor):
    """Builds a normalized result from syndication data, preferring untruncated text."""

    def __init__(
        self,
        http_client: HttpClient,
        *,
        syndication_base_url: str = "https://cdn.syndication.twimg.com",
        fulltext_base_url: str = "https://api.fxtwitter.com",
    ) -> None:
        self._http = http_client
        self._syndication_base_url = syndication_base_url.rstrip("/")
        self._fulltext_base_url = fulltext_base_url.rstrip("/")

    @property
    def source_type(self) -> SourceKind:
        return SourceKind.SOCIAL_POST

    def extract(self, url: str) -> ExtractionResult:
        """Never raises; unusable posts come back as a bare result."""

        post_id = extract_post_id(url)
        if post_id is None:
            logger.warning("enrichment.x_post_id_missing url=%s", url)
            return self.bare_result()

        with ThreadPoolExecutor(max_workers=2) as pool:
            syndication_future = pool.submit(self.fetch_syndication, post_id)
            full_text_future = pool.submit(self.fetch_full_text, post_id)
            post = syndication_future.result()
            full_text = full_text_future.result()

        if post is None:
            logger.warning("enrichment.x_syndication_empty url=%s post_id=%s", url, post_id)
            return self.bare_result()

        chosen_full_text = None
        if full_text and len(full_text) > len(post.text):
            chosen_full_text = full_text
            logger.info(
                "enrichment.x_full_text_used url=%s post_id=%s syndication_len=%d full_len=%d",
                url,
                post_id,
                len(post.text),
                len(full_text),
            )
        return build_social_post_result(post, full_text=chosen_full_text)

    def fetch_syndication(self, post_id: str) -> SyndicationPost | None:
        try:
            payload = self._http.get_json(f"{self._syndication_base_url}/tweet-result?id={post_id}&token=0")
        except HttpRequestError as exc:
            logger.warning("enrichment.x_syndication_failed post_id=%s error=%s", post_id, exc)
            return None
        if not payload:
            return None
        try:
            return SyndicationPost.model_validate(payload)
        except ValidationError as exc:
            logger.warning("enrichment.x_syndication_invalid post_id=%s error=%s", post_id, exc)
            return None

    def fetch_full_text(self, post_id: str) -> str | None:
        try:
            payload = self._http.get_json(
                f"{self._fulltext_base_url}/status/{post_id}",
                timeout=FULL_TEXT_TIMEOUT_SECONDS,
            )
        except HttpRequestError:
            return None
        if not isinstance(payload, dict):
            return None
        post = payload.get("tweet")
        text = post.get("text") if isinstance(post, dict) else None
        return text if isinstance(text, str) else None


def build_social_post_result(post: SyndicationPost, *, full_text: str | None = None) -> ExtractionResult:
    """Map a syndication post to an extraction result."""

    text = full_text or post.text
    article = post.article
    outbound_links = [
        entity.expanded_url
        for entity in post.entities.urls
        if not any(marker in entity.expanded_url for marker in _ARTICLE_LINK_MARKERS)
    ]

    image_url = None
    if post.photos:
        image_url = post.photos[0].url
    elif post.video and post.video.poster:
        image_url = post.video.poster
    elif article and article.cover_media:
        image_url = article.cover_media.media_info.original_img_url

    if article:
        title = article.title
        description = f"{article.title}\n\n{article.preview_text}"
    else:
        title = f"{post.user.name} (@{post.user.screen_name})"
        description = text

    parts = [f"@{post.user.screen_name}: {text}"]
    if article:
        parts.append(f"\nArticle: {article.title}\n{article.preview_text}")
    if outbound_links:
        parts.append(f"\nLinks: {', '.join(outbound_links)}")

    return ExtractionResult(
        source_type=SourceKind.SOCIAL_POST,
        title=title,
        description=description,
        image_url=image_url,
        raw_content="".join(parts),
        extracted_urls=outbound_links,
    )


def get_default_social_post_extractor(http_client: HttpClient | None = None) -> SocialPostExtractor:
    settings = get_settings()
    return SocialPostExtractor(
        http_client or get_default_http_client(),
        syndication_base_url=settings.x_syndication_base_url,
        fulltext_base_url=settings.x_fulltext_base_url,
    )
