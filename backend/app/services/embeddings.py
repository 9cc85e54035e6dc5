"""Embedding clients and vector helpers for link retrieval."""

from __future__ import annotations

import hashlib
import http.client
import logging
import math
import re
from dataclasses import dataclass, field
from typing import Any, Protocol

from pydantic import BaseModel, ValidationError

from app.config import get_settings
from app.enrichment.http import HttpClient, HttpRequestError, get_default_http_client
from app.models.embedding_type import EMBEDDING_DIMENSIONS

logger = logging.getLogger(__name__)

MAX_EMBEDDING_INPUT_CHARS = 8000
_TOKEN_RE = re.compile(r"[a-z0-9]+")
_BIGRAM_WEIGHT = 0.5


class EmbeddingError(RuntimeError):
    """Raised when an embedding provider call fails."""


class EmbeddingClient(Protocol):
    """Protocol for pluggable embedding clients."""

    def embed_texts(self, texts: list[str]) -> list[list[float]]:
        """Return one vector per input text, in input order."""


class _EmbeddingRow(BaseModel):
    index: int = 0
    embedding: list[float]


class _EmbeddingResponse(BaseModel):
    data: list[_EmbeddingRow]


@dataclass(slots=True)
class OpenAIEmbeddingsClient:
    """OpenAI ``/embeddings`` client over the shared HTTP client."""

    api_key: str
    model: str
    base_url: str = "https://api.openai.com/v1"
    timeout_seconds: int = 60
    http_client: HttpClient = field(default_factory=get_default_http_client)

    def embed_texts(self, texts: list[str]) -> list[list[float]]:
        if not texts:
            return []
        try:
            payload = self.http_client.post_json(
                f"{self.base_url.rstrip('/')}/embeddings",
                {"model": self.model, "input": texts},
                headers={"Authorization": f"Bearer {self.api_key}"},
                timeout=self.timeout_seconds,
            )
            response = _EmbeddingResponse.model_validate(payload)
        except HttpRequestError as exc:
            raise EmbeddingError(f"OpenAI embeddings request failed: {exc}") from exc
        except ValidationError as exc:
            raise EmbeddingError("OpenAI embeddings response was invalid") from exc
        except (http.client.HTTPException, OSError) as exc:
            raise EmbeddingError(f"OpenAI embeddings transport failed: {exc!r}") from exc
        return [row.embedding for row in sorted(response.data, key=lambda row: row.index)]


@dataclass(slots=True)
class HashEmbeddingsClient:
    """Deterministic offline embeddings; selected with ``EMBEDDING_PROVIDER=hash``."""

    dimensions: int = EMBEDDING_DIMENSIONS

    def embed_texts(self, texts: list[str]) -> list[list[float]]:
        return [hash_embed_text(text, dimensions=self.dimensions) for text in texts]


def get_default_embedding_client() -> EmbeddingClient | None:
    """Return the configured embedding client, or ``None`` when unconfigured."""

    settings = get_settings()
    if settings.embedding_provider == "hash":
        return HashEmbeddingsClient()
    if not settings.openai_api_key:
        return None
    return OpenAIEmbeddingsClient(
        api_key=settings.openai_api_key,
        model=settings.openai_embedding_model,
        base_url=settings.openai_base_url,
        timeout_seconds=settings.openai_timeout_seconds,
    )


def embed_text(text: str, *, client: EmbeddingClient | None = None) -> list[float] | None:
    """Embed one text; ``None`` means the embedding is unavailable. Never raises."""

    active_client = client or get_default_embedding_client()
    if active_client is None:
        logger.debug("embeddings.skipped reason=not_configured")
        return None
    try:
        vectors = active_client.embed_texts([text[:MAX_EMBEDDING_INPUT_CHARS]])
    except EmbeddingError as exc:
        logger.warning("embeddings.request_failed error=%s", exc)
        return None
    if len(vectors) != 1 or not vectors[0] or _vector_norm(vectors[0]) == 0.0:
        logger.warning("embeddings.invalid_vector count=%d", len(vectors))
        return None
    return vectors[0]


def hash_embed_text(text: str, *, dimensions: int = EMBEDDING_DIMENSIONS) -> list[float]:
    """Signed feature hashing over lowercase tokens and adjacent token pairs.

    Texts sharing vocabulary land close together, which is enough for local
    runs and tests. Empty text gives the zero vector.
    """

    size = max(1, int(dimensions))
    vector = [0.0] * size
    tokens = _TOKEN_RE.findall((text or "").lower())
    features = [(token, 1.0) for token in tokens]
    features.extend((f"{left} {right}", _BIGRAM_WEIGHT) for left, right in zip(tokens, tokens[1:]))

    for feature, weight in features:
        digest = hashlib.blake2b(feature.encode("utf-8"), digest_size=8).digest()
        bucket = int.from_bytes(digest[:4], "big") % size
        vector[bucket] += -weight if digest[4] & 1 else weight

    norm = _vector_norm(vector)
    if norm == 0.0:
        return vector
    return [value / norm for value in vector]


def cosine_similarity(left: list[float] | None, right: list[float] | None) -> float:
    """Return ``1 - cosine_distance``, i.e. the raw cosine in [-1, 1]."""

    if not left or not right or len(left) != len(right):
        return 0.0
    left_norm = _vector_norm(left)
    right_norm = _vector_norm(right)
    if left_norm == 0.0 or right_norm == 0.0:
        return 0.0
    dot = sum(l * r for l, r in zip(left, right, strict=False))
    return max(-1.0, min(1.0, dot / (left_norm * right_norm)))


def ensure_embedding(value: Any) -> list[float] | None:
    """Coerce a stored JSON or pgvector value to a float list."""

    if value is None:
        return None
    try:
        return [float(item) for item in value]
    except (TypeError, ValueError):
        return None


def _vector_norm(vector: list[float]) -> float:
    return math.sqrt(sum(value * value for value in vector))
