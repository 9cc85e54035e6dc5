"""Link request/response schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, HttpUrl


class LinkCreate(BaseModel):
    """Payload for saving a link directly through the API."""

    url: HttpUrl
    title: str | None = None
    summary: str | None = None
    tags: list[str] = Field(default_factory=list)


class LinkRead(BaseModel):
    """Serialized link without its embedding vector."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    url: str
    title: str | None
    description: str | None
    summary: str | None
    tags: list[str]
    image_url: str | None
    raw_content: str | None
    source_type: str | None
    workspace_id: str | None
    slack_channel_id: str | None
    slack_user_id: str | None
    slack_message_ts: str | None
    enriched_at: datetime | None
    created_at: datetime
    updated_at: datetime


class EnrichmentAccepted(BaseModel):
    """Acknowledgement that enrichment was queued."""

    link_id: str
    url: str
    status: str = "queued"
