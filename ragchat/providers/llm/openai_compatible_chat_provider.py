"""OpenAI-compatible streaming chat provider.

Wraps the ``openai`` async client to implement :class:`IChatModelProvider`.
DeepSeek exposes an OpenAI-compatible API, so the same adapter serves both:
when ``DEEPSEEK_API_KEY`` is set the client points at DeepSeek and uses
``deepseek-chat``; otherwise it falls back to OpenAI with ``gpt-4o-mini``.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from typing import Any

import openai
import structlog

from ragchat.config.settings import Settings
from ragchat.interfaces.llm_provider import IChatModelProvider
from ragchat.models.chat import ChatStreamEvent, ToolCall
from ragchat.utils.errors import LLMError

logger = structlog.get_logger(logger_name=__name__)

_DEEPSEEK_MODEL = "deepseek-chat"
_OPENAI_MODEL = "gpt-4o-mini"


class OpenAICompatibleChatProvider(IChatModelProvider):
    """Streaming chat completions with tool calling over an OpenAI-style API."""

    def __init__(self, settings: Settings, client: openai.AsyncOpenAI | None = None) -> None:
        if settings.deepseek_api_key:
            self._api_key = settings.deepseek_api_key
            base_url: str | None = settings.deepseek_base_url
            self._model = settings.chat_model or _DEEPSEEK_MODEL
            self._provider_label = "deepseek"
        else:
            self._api_key = settings.openai_api_key
            base_url = settings.openai_base_url or None
            self._model = settings.chat_model or _OPENAI_MODEL
            self._provider_label = "openai_chat"

        if client is None:
            client_kwargs: dict = {
                "api_key": self._api_key or "missing",
                "timeout": openai.Timeout(60.0, connect=5.0),
            }
            if base_url:
                client_kwargs["base_url"] = base_url
            client = openai.AsyncOpenAI(**client_kwargs)
        self._client = client

    async def stream_chat(
        self,
        messages: list[dict[str, Any]],
        tools: list[dict[str, Any]] | None = None,
        temperature: float = 0.3,
    ) -> AsyncIterator[ChatStreamEvent]:
        """Stream one completion step.

        Tool-call fragments arrive spread over many chunks keyed by
        ``index``; they are stitched together and emitted once the stream
        ends.
        """
        request: dict[str, Any] = {
            "model": self._model,
            "messages": messages,
            "temperature": temperature,
            "stream": True,
        }
        if tools:
            request["tools"] = tools

        pending: dict[int, dict[str, str]] = {}
        try:
            stream = await self._client.chat.completions.create(**request)
            async for chunk in stream:
                if not chunk.choices:
                    continue
                delta = chunk.choices[0].delta
                if delta.content:
                    yield ChatStreamEvent(text=delta.content)
                for fragment in delta.tool_calls or []:
                    slot = pending.setdefault(fragment.index, {"id": "", "name": "", "arguments": ""})
                    if fragment.id:
                        slot["id"] = fragment.id
                    if fragment.function is not None:
                        if fragment.function.name:
                            slot["name"] += fragment.function.name
                        if fragment.function.arguments:
                            slot["arguments"] += fragment.function.arguments
        except openai.APITimeoutError as exc:
            raise LLMError(
                message=f"{self._provider_label} timed out",
                provider_name=self.get_provider_name(),
            ) from exc
        except openai.APIError as exc:
            raise LLMError(
                message=f"{self._provider_label} API error: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        if pending:
            calls = [
                ToolCall(
                    id=slot["id"] or f"call_{index}",
                    name=slot["name"],
                    arguments=slot["arguments"] or "{}",
                )
                for index, slot in sorted(pending.items())
            ]
            logger.info(
                "chat_tool_calls",
                provider=self._provider_label,
                model=self._model,
                tools=[c.name for c in calls],
            )
            yield ChatStreamEvent(tool_calls=calls)

    def get_provider_name(self) -> str:
        return self._provider_label

    def is_available(self) -> bool:
        return bool(self._api_key)
