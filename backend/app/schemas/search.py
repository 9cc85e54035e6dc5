"""Semantic search and question answering schemas."""

from pydantic import BaseModel, Field

from app.schemas.link import LinkRead


class SearchRequest(BaseModel):
    query: str = Field(min_length=1)
    limit: int = Field(default=5, ge=1, le=20)
    threshold: float = Field(default=0.3, ge=0.0, le=1.0)


class LinkSearchHit(BaseModel):
    """Link search hit with similarity score."""

    link: LinkRead
    similarity: float


class SemanticSearchData(BaseModel):
    """Search response payload."""

    query: str
    limit: int
    threshold: float
    results: list[LinkSearchHit]


class AskRequest(BaseModel):
    question: str = Field(min_length=1)


class AnswerSource(BaseModel):
    """Link used as grounding context for an answer."""

    id: str
    url: str
    title: str | None
    similarity: float


class AnswerResult(BaseModel):
    answer: str
    sources: list[AnswerSource]
