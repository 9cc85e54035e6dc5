"""Chat completion client used for summaries and grounded answers."""

from __future__ import annotations

import http.client
import json
import logging
from dataclasses import dataclass, field
from typing import Protocol
from urllib import error as urllib_error
from urllib import request as urllib_request

from app.config import get_settings

logger = logging.getLogger(__name__)


class LLMError(RuntimeError):
    """Raised when the chat model is unconfigured or its response is unusable."""


class ChatCompletionClient(Protocol):
    """Protocol for chat completion providers."""

    def complete(self, messages: list[dict[str, str]], *, max_tokens: int | None = None) -> str:
        """Return assistant text for the provided conversation."""


@dataclass(slots=True)
class OpenAIChatClient:
    """Minimal OpenAI chat completions client with an ordered model fallback list."""

    api_key: str
    model: str
    fallback_models: list[str] = field(default_factory=list)
    base_url: str = "https://api.openai.com/v1"
    timeout_seconds: int = 60
    temperature: float = 0.2

    def complete(self, messages: list[dict[str, str]], *, max_tokens: int | None = None) -> str:
        models = [self.model, *[m for m in self.fallback_models if m != self.model]]
        last_error: LLMError | None = None
        for model in models:
            try:
                return self._complete_with_model(model, messages, max_tokens=max_tokens)
            except LLMError as exc:
                last_error = exc
                logger.warning("llm.completion_failed model=%s error=%s", model, exc)
        raise last_error or LLMError("No chat model configured")

    def _complete_with_model(
        self,
        model: str,
        messages: list[dict[str, str]],
        *,
        max_tokens: int | None,
    ) -> str:
        payload: dict[str, object] = {
            "model": model,
            "temperature": self.temperature,
            "messages": messages,
        }
        if max_tokens is not None:
            payload["max_tokens"] = max_tokens
        url = f"{self.base_url.rstrip('/')}/chat/completions"
        req = urllib_request.Request(
            url=url,
            data=json.dumps(payload).encode("utf-8"),
            method="POST",
            headers={
                "Authorization": f"Bearer {self.api_key}",
                "Content-Type": "application/json",
            },
        )
        try:
            with urllib_request.urlopen(req, timeout=self.timeout_seconds) as resp:
                raw = resp.read().decode("utf-8")
        except urllib_error.HTTPError as exc:
            detail = exc.read().decode("utf-8", errors="replace")
            raise LLMError(f"OpenAI HTTP {exc.code}: {detail}") from exc
        except urllib_error.URLError as exc:
            raise LLMError(f"OpenAI request failed: {exc.reason}") from exc
        except TimeoutError as exc:
            raise LLMError(f"OpenAI request timed out for model {model}") from exc
        except (http.client.HTTPException, OSError) as exc:
            raise LLMError(f"OpenAI response read failed: {exc!r}") from exc

        try:
            decoded = json.loads(raw)
            content = decoded["choices"][0]["message"]["content"]
            if not isinstance(content, str) or not content.strip():
                raise TypeError("assistant message content missing")
            return content.strip()
        except (KeyError, IndexError, TypeError, json.JSONDecodeError) as exc:
            raise LLMError("OpenAI returned an unexpected chat response") from exc


def is_chat_model_configured() -> bool:
    return bool(get_settings().openai_api_key)


def get_default_chat_client() -> ChatCompletionClient:
    """Return the configured chat client or fail fast."""

    settings = get_settings()
    if not settings.openai_api_key:
        raise LLMError("OPENAI_API_KEY is not configured. Set it in backend/.env before asking questions.")
    return OpenAIChatClient(
        api_key=settings.openai_api_key,
        model=settings.openai_model,
        fallback_models=list(settings.openai_fallback_models),
        base_url=settings.openai_base_url,
        timeout_seconds=settings.openai_timeout_seconds,
    )
