"""Slack Events API payload schemas."""

from typing import Annotated, Literal

from pydantic import BaseModel, Field


class SharedLink(BaseModel):
    url: str
    domain: str | None = None


class LinkSharedEvent(BaseModel):
    type: Literal["link_shared"]
    channel: str
    user: str
    message_ts: str
    links: list[SharedLink] = Field(default_factory=list)


class MessageEvent(BaseModel):
    type: Literal["message"]
    channel: str
    user: str | None = None
    ts: str
    text: str | None = None


class UrlVerification(BaseModel):
    type: Literal["url_verification"]
    challenge: str


class EventCallback(BaseModel):
    type: Literal["event_callback"]
    team_id: str | None = None
    event: Annotated[LinkSharedEvent | MessageEvent, Field(discriminator="type")]


SlackPayload = Annotated[UrlVerification | EventCallback, Field(discriminator="type")]
