"""Slack Events API route."""

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.concurrency import run_in_threadpool
from pydantic import TypeAdapter, ValidationError
from sqlalchemy.orm import Session

from app.config import get_settings
from app.db.dependencies import get_db
from app.schemas.slack import SlackPayload, UrlVerification
from app.services.background_jobs import schedule_enrichment
from app.services.slack import capture_event_links, verify_slack_signature

router = APIRouter(prefix="/slack")

_PAYLOAD_ADAPTER: TypeAdapter[SlackPayload] = TypeAdapter(SlackPayload)


@router.post("/events")
async def slack_events(
    request: Request,
    db: Session = Depends(get_db),
) -> dict[str, object]:
    """Capture links shared in the configured channel; enrichment runs on the worker pool."""

    settings = get_settings()
    body = await request.body()
    if not verify_slack_signature(
        settings.slack_signing_secret or "",
        request.headers.get("x-slack-signature"),
        request.headers.get("x-slack-request-timestamp"),
        body,
    ):
        raise HTTPException(status_code=401, detail="Invalid signature")

    try:
        payload = _PAYLOAD_ADAPTER.validate_json(body)
    except ValidationError as exc:
        raise HTTPException(status_code=400, detail="Invalid payload") from exc

    if isinstance(payload, UrlVerification):
        return {"challenge": payload.challenge}

    urls = await run_in_threadpool(capture_event_links, db, payload, channel_id=settings.slack_channel_id)
    for url in urls:
        schedule_enrichment(url)
    return {"ok": True}
