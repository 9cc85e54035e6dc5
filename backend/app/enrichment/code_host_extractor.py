"""GitHub repository extractor."""

from __future__ import annotations

import logging

from pydantic import BaseModel, Field, ValidationError

from app.config import get_settings
from app.enrichment.extractor_interface import ContentExtractor, ExtractionError
from app.enrichment.http import HttpClient, HttpRequestError, get_default_http_client
from app.enrichment.source_classifier import parse_code_host_url
from app.enrichment.types import CodeHostRef, ExtractionResult, SourceKind

logger = logging.getLogger(__name__)

README_FILENAME = "README.md"


class _RepoOwner(BaseModel):
    avatar_url: str | None = None


class _RepoMetadata(BaseModel):
    full_name: str
    description: str | None = None
    owner: _RepoOwner = Field(default_factory=_RepoOwner)
    default_branch: str = "main"


class CodeHostExtractor(ContentExtractor):
    """Fetches repository metadata plus a file or README from GitHub."""

    def __init__(
        self,
        http_client: HttpClient,
        *,
        api_base_url: str = "https://api.github.com",
        raw_base_url: str = "https://raw.githubusercontent.com",
        token: str | None = None,
    ) -> None:
        self._http = http_client
        self._api_base_url = api_base_url.rstrip("/")
        self._raw_base_url = raw_base_url.rstrip("/")
        self._token = token

    @property
    def source_type(self) -> SourceKind:
        return SourceKind.CODE_HOST

    def extract(self, url: str) -> ExtractionResult:
        """Return repo metadata; raises when the metadata request fails."""

        parsed = parse_code_host_url(url)
        if parsed is None:
            logger.warning("enrichment.github_unparseable url=%s", url)
            return self.bare_result()

        repo = self._fetch_repo(parsed)
        ref = parsed.ref or repo.default_branch
        title = repo.full_name

        if parsed.ref_kind == "blob" and parsed.path:
            title = f"{repo.full_name}/{parsed.path}"
            raw_content = self._fetch_raw(parsed, ref, parsed.path)
        elif parsed.ref_kind == "tree" and parsed.path:
            raw_content = self._fetch_raw(parsed, ref, f"{parsed.path}/{README_FILENAME}")
        else:
            raw_content = self._fetch_raw(parsed, ref, README_FILENAME)

        return ExtractionResult(
            source_type=self.source_type,
            title=title,
            description=repo.description,
            image_url=repo.owner.avatar_url,
            raw_content=raw_content,
        )

    def _fetch_repo(self, parsed: CodeHostRef) -> _RepoMetadata:
        headers = {"Accept": "application/vnd.github.v3+json"}
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        payload = self._http.get_json(
            f"{self._api_base_url}/repos/{parsed.owner}/{parsed.repo}",
            headers=headers,
        )
        try:
            return _RepoMetadata.model_validate(payload)
        except ValidationError as exc:
            raise ExtractionError(f"GitHub repo payload failed validation: {exc}") from exc

    def _fetch_raw(self, parsed: CodeHostRef, ref: str, file_path: str) -> str | None:
        url = f"{self._raw_base_url}/{parsed.owner}/{parsed.repo}/{ref}/{file_path}"
        try:
            return self._http.get_text(url)
        except HttpRequestError as exc:
            logger.info("enrichment.github_raw_missing url=%s status=%s", url, exc.status_code)
            return None


def get_default_code_host_extractor(http_client: HttpClient | None = None) -> CodeHostExtractor:
    settings = get_settings()
    return CodeHostExtractor(
        http_client or get_default_http_client(),
        api_base_url=settings.github_api_base_url,
        raw_base_url=settings.github_raw_base_url,
        token=settings.github_token,
    )
