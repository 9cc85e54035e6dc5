"""URL source classification and URL decomposition helpers."""

from __future__ import annotations

import re
from urllib.parse import urlsplit

from app.enrichment.types import CodeHostRef, SourceKind

CODE_HOST_HOSTNAMES = frozenset({"github.com", "www.github.com"})
SOCIAL_POST_HOSTNAMES = frozenset(
    {
        "x.com",
        "www.x.com",
        "mobile.x.com",
        "twitter.com",
        "www.twitter.com",
        "mobile.twitter.com",
        "fxtwitter.com",
        "vxtwitter.com",
    }
)
_POST_ID_RE = re.compile(r"status/(\d+)")


def classify(url: str) -> SourceKind:
    """Return the source kind for a URL; anything unparseable is a webpage."""

    host = _hostname(url)
    if host in CODE_HOST_HOSTNAMES:
        return SourceKind.CODE_HOST
    if host in SOCIAL_POST_HOSTNAMES:
        return SourceKind.SOCIAL_POST
    return SourceKind.WEBPAGE


def parse_code_host_url(url: str) -> CodeHostRef | None:
    """Split ``/owner/repo[/blob|tree/ref/path...]`` into repository coordinates.

    Hosts outside ``CODE_HOST_HOSTNAMES`` give ``None``.
    """

    try:
        parsed = urlsplit(url)
    except ValueError:
        return None
    if not parsed.scheme or (parsed.hostname or "").lower() not in CODE_HOST_HOSTNAMES:
        return None

    segments = [segment for segment in parsed.path.split("/") if segment]
    if len(segments) < 2:
        return None
    owner, repo = segments[0], segments[1]

    if len(segments) >= 4 and segments[2] in {"blob", "tree"}:
        path = "/".join(segments[4:]) or None
        return CodeHostRef(owner=owner, repo=repo, ref_kind=segments[2], ref=segments[3], path=path)
    return CodeHostRef(owner=owner, repo=repo)


def extract_post_id(url: str) -> str | None:
    """Return the numeric id that follows ``status/`` in a social-post URL."""

    match = _POST_ID_RE.search(url or "")
    return match.group(1) if match else None


def _hostname(url: str) -> str | None:
    try:
        host = urlsplit(url).hostname
    except ValueError:
        return None
    return host.lower() if host else None
