"""Unit tests for embedding helpers."""

from __future__ import annotations

import http.client
import unittest
from typing import Any

from app.enrichment.http import HttpRequestError
from app.services.embeddings import (
    MAX_EMBEDDING_INPUT_CHARS,
    EmbeddingError,
    HashEmbeddingsClient,
    OpenAIEmbeddingsClient,
    cosine_similarity,
    embed_text,
    ensure_embedding,
    hash_embed_text,
)


class _RecordingEmbeddingClient:
    def __init__(self, vectors: list[list[float]] | None = None, error: Exception | None = None) -> None:
        self.vectors = vectors or [[1.0, 0.0]]
        self.error = error
        self.inputs: list[list[str]] = []

    def embed_texts(self, texts: list[str]) -> list[list[float]]:
        self.inputs.append(texts)
        if self.error is not None:
            raise self.error
        return self.vectors


class EmbedTextTests(unittest.TestCase):
    def test_returns_single_vector(self) -> None:
        client = _RecordingEmbeddingClient([[0.6, 0.8]])

        self.assertEqual(embed_text("hello", client=client), [0.6, 0.8])
        self.assertEqual(client.inputs, [["hello"]])

    def test_input_is_truncated(self) -> None:
        client = _RecordingEmbeddingClient()

        embed_text("a" * (MAX_EMBEDDING_INPUT_CHARS + 10), client=client)

        self.assertEqual(len(client.inputs[0][0]), MAX_EMBEDDING_INPUT_CHARS)

    def test_provider_failure_is_absorbed(self) -> None:
        client = _RecordingEmbeddingClient(error=EmbeddingError("HTTP 500"))

        self.assertIsNone(embed_text("hello", client=client))

    def test_zero_vector_is_rejected(self) -> None:
        self.assertIsNone(embed_text("hello", client=_RecordingEmbeddingClient([[0.0, 0.0]])))
        self.assertIsNone(embed_text("hello", client=_RecordingEmbeddingClient([[1.0], [1.0]])))


class _StubHttpClient:
    def __init__(self, response: Any) -> None:
        self.response = response
        self.calls: list[tuple[str, dict[str, Any], dict[str, str] | None]] = []

    def post_json(self, url: str, payload: dict[str, Any], *, headers=None, timeout=None) -> Any:
        self.calls.append((url, payload, headers))
        if isinstance(self.response, Exception):
            raise self.response
        return self.response


class OpenAIEmbeddingsClientTests(unittest.TestCase):
    def test_rows_are_returned_in_index_order(self) -> None:
        stub = _StubHttpClient({"data": [{"index": 1, "embedding": [0.0, 1.0]}, {"index": 0, "embedding": [1.0, 0.0]}]})
        client = OpenAIEmbeddingsClient(api_key="key", model="m", base_url="https://llm.test/v1/", http_client=stub)

        vectors = client.embed_texts(["a", "b"])

        self.assertEqual(vectors, [[1.0, 0.0], [0.0, 1.0]])
        url, payload, headers = stub.calls[0]
        self.assertEqual(url, "https://llm.test/v1/embeddings")
        self.assertEqual(payload, {"model": "m", "input": ["a", "b"]})
        self.assertEqual(headers, {"Authorization": "Bearer key"})

    def test_failures_become_embedding_errors(self) -> None:
        for response in (
            HttpRequestError("HTTP 500", status_code=500),
            {"data": "nope"},
            http.client.IncompleteRead(b"{\"da"),
            ConnectionResetError("peer reset"),
        ):
            with self.subTest(response=response):
                client = OpenAIEmbeddingsClient(api_key="key", model="m", http_client=_StubHttpClient(response))

                with self.assertRaises(EmbeddingError):
                    client.embed_texts(["a"])

    def test_transport_failure_leaves_embedding_unavailable(self) -> None:
        client = OpenAIEmbeddingsClient(
            api_key="key",
            model="m",
            http_client=_StubHttpClient(http.client.IncompleteRead(b"partial")),
        )

        self.assertIsNone(embed_text("hello", client=client))


class HashEmbeddingTests(unittest.TestCase):
    def test_deterministic_and_normalized(self) -> None:
        first = hash_embed_text("Vector search with pgvector", dimensions=64)
        second = hash_embed_text("  vector SEARCH with   pgvector ", dimensions=64)

        self.assertEqual(first, second)
        self.assertAlmostEqual(sum(value * value for value in first), 1.0, places=6)

    def test_empty_text_is_zero_vector(self) -> None:
        self.assertEqual(hash_embed_text("", dimensions=4), [0.0, 0.0, 0.0, 0.0])

    def test_client_uses_configured_dimensions(self) -> None:
        vectors = HashEmbeddingsClient(dimensions=16).embed_texts(["a", "b"])

        self.assertEqual([len(vector) for vector in vectors], [16, 16])


class CosineSimilarityTests(unittest.TestCase):
    def test_raw_cosine(self) -> None:
        self.assertAlmostEqual(cosine_similarity([1.0, 0.0], [1.0, 0.0]), 1.0)
        self.assertAlmostEqual(cosine_similarity([1.0, 0.0], [0.0, 1.0]), 0.0)
        self.assertAlmostEqual(cosine_similarity([1.0, 0.0], [-1.0, 0.0]), -1.0)

    def test_invalid_inputs_score_zero(self) -> None:
        self.assertEqual(cosine_similarity(None, [1.0]), 0.0)
        self.assertEqual(cosine_similarity([1.0, 0.0], [1.0]), 0.0)
        self.assertEqual(cosine_similarity([0.0, 0.0], [1.0, 0.0]), 0.0)

    def test_ensure_embedding(self) -> None:
        self.assertEqual(ensure_embedding([1, "2.5"]), [1.0, 2.5])
        self.assertIsNone(ensure_embedding(None))
        self.assertIsNone(ensure_embedding(["x"]))


if __name__ == "__main__":
    unittest.main()
