"""Outbound HTTP helpers shared by the content extractors."""

from __future__ import annotations

import http.client
import json
from dataclasses import dataclass
from typing import Any, Protocol
from urllib import error as urllib_error
from urllib import request as urllib_request

from app.config import get_settings
from app.enrichment.extractor_interface import ExtractionError


class HttpRequestError(ExtractionError):
    """Raised for non-2xx responses, transport failures, and undecodable bodies."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class HttpClient(Protocol):
    """Protocol for the small HTTP surface the extractors need."""

    def get_json(self, url: str, *, headers: dict[str, str] | None = None, timeout: float | None = None) -> Any:
        """GET a URL and decode its JSON body."""

    def get_text(self, url: str, *, headers: dict[str, str] | None = None, timeout: float | None = None) -> str:
        """GET a URL and return its body as text."""

    def post_json(
        self,
        url: str,
        payload: dict[str, Any],
        *,
        headers: dict[str, str] | None = None,
        timeout: float | None = None,
    ) -> Any:
        """POST a JSON payload and decode the JSON response."""


@dataclass(slots=True)
class UrllibHttpClient:
    """Minimal JSON/text HTTP client using stdlib HTTP."""

    timeout_seconds: float = 15
    user_agent: str = "finchly-bot"

    def get_json(self, url: str, *, headers: dict[str, str] | None = None, timeout: float | None = None) -> Any:
        return _decode_json(self._send("GET", url, headers=headers, timeout=timeout), url)

    def get_text(self, url: str, *, headers: dict[str, str] | None = None, timeout: float | None = None) -> str:
        return self._send("GET", url, headers=headers, timeout=timeout)

    def post_json(
        self,
        url: str,
        payload: dict[str, Any],
        *,
        headers: dict[str, str] | None = None,
        timeout: float | None = None,
    ) -> Any:
        merged = {"Content-Type": "application/json", **(headers or {})}
        raw = self._send(
            "POST",
            url,
            headers=merged,
            data=json.dumps(payload).encode("utf-8"),
            timeout=timeout,
        )
        return _decode_json(raw, url)

    def _send(
        self,
        method: str,
        url: str,
        *,
        headers: dict[str, str] | None,
        timeout: float | None,
        data: bytes | None = None,
    ) -> str:
        req = urllib_request.Request(
            url=url,
            data=data,
            method=method,
            headers={"User-Agent": self.user_agent, **(headers or {})},
        )
        try:
            with urllib_request.urlopen(req, timeout=timeout or self.timeout_seconds) as resp:
                return resp.read().decode("utf-8", errors="replace")
        except urllib_error.HTTPError as exc:
            raise HttpRequestError(f"{method} {url} returned HTTP {exc.code}", status_code=exc.code) from exc
        except urllib_error.URLError as exc:
            raise HttpRequestError(f"{method} {url} failed: {exc.reason}") from exc
        except TimeoutError as exc:
            raise HttpRequestError(f"{method} {url} timed out") from exc
        except (http.client.HTTPException, OSError) as exc:
            raise HttpRequestError(f"{method} {url} failed while reading the response: {exc!r}") from exc


def get_default_http_client() -> HttpClient:
    """Return the HTTP client configured from settings."""

    settings = get_settings()
    return UrllibHttpClient(
        timeout_seconds=settings.http_timeout_seconds,
        user_agent=settings.http_user_agent,
    )


def _decode_json(raw: str, url: str) -> Any:
    try:
        return json.loads(raw)
    except json.JSONDecodeError as exc:
        raise HttpRequestError(f"{url} returned a non-JSON body") from exc
