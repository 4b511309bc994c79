from __future__ import annotations

import os
from typing import Any, AsyncGenerator, Mapping, Optional, Sequence

from openai import AsyncOpenAI

from app.ai.types import ChatMessage


class OpenAIProvider:
    """Chat client for any OpenAI-compatible endpoint (OpenAI, OpenRouter)."""

    def __init__(
        self,
        model: str,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout_s: float = 30.0,
        max_retries: int = 2,
        default_headers: Optional[Mapping[str, str]] = None,
    ):
        self._model = model
        key = (api_key or os.getenv("OPENAI_API_KEY") or "").strip()
        if not key:
            raise RuntimeError("OPENAI_API_KEY (or OPENROUTER_API_KEY) is missing")

        self._client = AsyncOpenAI(
            api_key=key,
            base_url=(base_url or os.getenv("OPENAI_BASE_URL") or None),
            timeout=float(os.getenv("AI_TIMEOUT_S", str(timeout_s))),
            max_retries=int(os.getenv("AI_MAX_RETRIES", str(max_retries))),
            default_headers=dict(default_headers) if default_headers else None,
        )

    @staticmethod
    def key_from_env(name: str) -> str | None:
        return (os.getenv(name) or "").strip() or None

    def _create_kwargs(
        self,
        messages: Sequence[ChatMessage],
        *,
        model: str | None,
        temperature: float,
        max_tokens: int | None,
    ) -> dict[str, Any]:
        kwargs: dict[str, Any] = {
            "model": model or self._model,
            "messages": [{"role": m.role, "content": m.content} for m in messages],
            "temperature": temperature,
        }
        if max_tokens is not None:
            kwargs["max_tokens"] = max_tokens
        return kwargs

    async def stream(
        self,
        messages: Sequence[ChatMessage],
        *,
        model: str | None = None,
        temperature: float = 0.7,
        max_tokens: int | None = None,
    ) -> AsyncGenerator[str, None]:
        create_kwargs = self._create_kwargs(
            messages, model=model, temperature=temperature, max_tokens=max_tokens
        )
        stream = await self._client.chat.completions.create(stream=True, **create_kwargs)

        async for chunk in stream:
            if not chunk.choices:
                continue
            text = getattr(chunk.choices[0].delta, "content", None)
            if text:
                yield text

    async def complete(
        self,
        messages: Sequence[ChatMessage],
        *,
        model: str | None = None,
        temperature: float = 0.2,
        max_tokens: int | None = None,
        json_mode: bool = False,
    ) -> str:
        create_kwargs = self._create_kwargs(
            messages, model=model, temperature=temperature, max_tokens=max_tokens
        )
        if json_mode:
            create_kwargs["response_format"] = {"type": "json_object"}

        response = await self._client.chat.completions.create(**create_kwargs)
        if not response.choices:
            return ""
        return response.choices[0].message.content or ""
