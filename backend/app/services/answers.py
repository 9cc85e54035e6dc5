"""Retrieval-augmented answers grounded in saved links."""

from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from app.schemas.search import AnswerResult, AnswerSource, LinkSearchHit
from app.services.embeddings import EmbeddingClient
from app.services.llm import ChatCompletionClient, get_default_chat_client
from app.services.search import search_links

logger = logging.getLogger(__name__)

ANSWER_SIMILARITY_THRESHOLD = 0.3
ANSWER_SOURCE_LIMIT = 5
CONTEXT_CONTENT_CHARS = 2000
ANSWER_MAX_TOKENS = 1024
NO_RELEVANT_LINKS_ANSWER = "I don't have any relevant links to answer that question."

SYSTEM_PROMPT = (
    "You are Finchly, a helpful assistant that answers questions based on the user's saved links. "
    "Use ONLY the provided context to answer. Reference sources by their number [1], [2], etc. "
    "If the context doesn't contain enough information, say so honestly. Be concise."
)


def answer_question(
    db: Session,
    question: str,
    *,
    embedding_client: EmbeddingClient | None = None,
    chat_client: ChatCompletionClient | None = None,
) -> AnswerResult:
    """Answer from the top matching links; no model call when nothing matches."""

    active_chat_client = chat_client or get_default_chat_client()
    hits = search_links(
        db,
        query=question,
        limit=ANSWER_SOURCE_LIMIT,
        threshold=ANSWER_SIMILARITY_THRESHOLD,
        embedding_client=embedding_client,
    )
    if not hits:
        logger.info("answers.no_matches question_len=%d", len(question))
        return AnswerResult(answer=NO_RELEVANT_LINKS_ANSWER, sources=[])

    answer = active_chat_client.complete(
        [
            {"role": "system", "content": SYSTEM_PROMPT},
            {
                "role": "user",
                "content": f"Context from saved links:\n\n{build_context(hits)}\n\n---\n\nQuestion: {question}",
            },
        ],
        max_tokens=ANSWER_MAX_TOKENS,
    )
    logger.info("answers.generated sources=%d answer_len=%d", len(hits), len(answer))
    return AnswerResult(
        answer=answer,
        sources=[
            AnswerSource(
                id=hit.link.id,
                url=hit.link.url,
                title=hit.link.title,
                similarity=hit.similarity,
            )
            for hit in hits
        ],
    )


def build_context(hits: list[LinkSearchHit]) -> str:
    """Number each hit as ``[i]`` so the model can cite it."""

    blocks: list[str] = []
    for index, hit in enumerate(hits, start=1):
        link = hit.link
        if link.raw_content:
            content = link.raw_content[:CONTEXT_CONTENT_CHARS]
        else:
            content = link.summary or "No content available"
        blocks.append(f"[{index}] {link.title or link.url}\nURL: {link.url}\n{content}")
    return "\n\n---\n\n".join(blocks)
