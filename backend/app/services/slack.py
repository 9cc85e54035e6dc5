"""Slack event handling: request signatures and link capture."""

from __future__ import annotations

import hashlib
import hmac
import logging
import re
import time

from sqlalchemy.orm import Session

from app.schemas.slack import EventCallback, LinkSharedEvent
from app.services.links import insert_link_if_absent

logger = logging.getLogger(__name__)

SIGNATURE_MAX_AGE_SECONDS = 300
SIGNATURE_VERSION = "v0"
# Slack wraps links as <url> or <url|label>.
_URL_RE = re.compile(r"https?://[^\s>|]+")


def verify_slack_signature(
    signing_secret: str,
    signature: str | None,
    timestamp: str | None,
    body: bytes,
    *,
    now: float | None = None,
) -> bool:
    """Check ``X-Slack-Signature`` against the raw request body."""

    if not signing_secret or not signature or not timestamp:
        return False
    try:
        sent_at = int(timestamp)
    except ValueError:
        return False
    current = time.time() if now is None else now
    if abs(current - sent_at) > SIGNATURE_MAX_AGE_SECONDS:
        return False

    basestring = f"{SIGNATURE_VERSION}:{timestamp}:".encode("utf-8") + body
    digest = hmac.new(signing_secret.encode("utf-8"), basestring, hashlib.sha256).hexdigest()
    expected = f"{SIGNATURE_VERSION}={digest}"
    return hmac.compare_digest(expected.encode("utf-8"), signature.encode("utf-8"))


def extract_urls(text: str | None) -> list[str]:
    """Return every http(s) URL in message text, in order."""

    if not text:
        return []
    return _URL_RE.findall(text)


def capture_event_links(
    db: Session,
    payload: EventCallback,
    *,
    channel_id: str | None,
) -> list[str]:
    """Store links from a channel event and return the URLs to enrich.

    Events from channels other than ``channel_id`` are ignored.
    """

    event = payload.event
    if isinstance(event, LinkSharedEvent):
        urls = [link.url for link in event.links]
        message_ts = event.message_ts
    else:
        urls = extract_urls(event.text)
        message_ts = event.ts

    if not urls or event.channel != channel_id:
        return []

    for url in urls:
        inserted = insert_link_if_absent(
            db,
            url,
            workspace_id=payload.team_id,
            slack_channel_id=event.channel,
            slack_user_id=event.user,
            slack_message_ts=message_ts,
        )
        logger.info("slack.link_captured url=%s channel=%s inserted=%s", url, event.channel, inserted)
    return urls
