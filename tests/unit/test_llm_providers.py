"""Unit tests for the OpenAI-compatible streaming chat provider."""

from __future__ import annotations

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from ragchat.config.settings import Settings


def _settings(**overrides) -> Settings:
    defaults = {
        "openai_api_key": "sk-test",
        "openai_base_url": "",
        "deepseek_api_key": "",
        "chat_model": "",
    }
    defaults.update(overrides)
    return Settings(_env_file=None, **defaults)


def _chunk(content: str | None = None, tool_calls: list | None = None) -> SimpleNamespace:
    delta = SimpleNamespace(content=content, tool_calls=tool_calls)
    return SimpleNamespace(choices=[SimpleNamespace(delta=delta)])


def _fragment(index: int, id: str | None = None, name: str | None = None, arguments: str | None = None):  # noqa: A002
    return SimpleNamespace(
        index=index,
        id=id,
        function=SimpleNamespace(name=name, arguments=arguments),
    )


class _Stream:
    def __init__(self, chunks: list) -> None:
        self._chunks = chunks

    def __aiter__(self):
        return self._gen()

    async def _gen(self):
        for chunk in self._chunks:
            yield chunk


def _client(chunks: list) -> MagicMock:
    client = MagicMock()
    client.chat.completions.create = AsyncMock(return_value=_Stream(chunks))
    return client


async def _events(provider, **kwargs) -> list:
    return [e async for e in provider.stream_chat([{"role": "user", "content": "hi"}], **kwargs)]


class TestProviderSelection:
    def test_openai_fallback(self) -> None:
        from ragchat.providers.llm.openai_compatible_chat_provider import OpenAICompatibleChatProvider

        with patch("ragchat.providers.llm.openai_compatible_chat_provider.openai.AsyncOpenAI") as ctor:
            provider = OpenAICompatibleChatProvider(_settings())
        assert provider.get_provider_name() == "openai_chat"
        assert "base_url" not in ctor.call_args.kwargs
        assert provider.is_available() is True

    def test_deepseek_preferred(self) -> None:
        from ragchat.providers.llm.openai_compatible_chat_provider import OpenAICompatibleChatProvider

        with patch("ragchat.providers.llm.openai_compatible_chat_provider.openai.AsyncOpenAI") as ctor:
            provider = OpenAICompatibleChatProvider(_settings(deepseek_api_key="ds-key"))
        assert provider.get_provider_name() == "deepseek"
        assert ctor.call_args.kwargs["base_url"] == "https://api.deepseek.com"
        assert ctor.call_args.kwargs["api_key"] == "ds-key"

    def test_unavailable_without_keys(self) -> None:
        from ragchat.providers.llm.openai_compatible_chat_provider import OpenAICompatibleChatProvider

        provider = OpenAICompatibleChatProvider(_settings(openai_api_key=""), client=MagicMock())
        assert provider.is_available() is False


class TestStreamChat:
    @pytest.mark.asyncio
    async def test_text_deltas(self) -> None:
        from ragchat.providers.llm.openai_compatible_chat_provider import OpenAICompatibleChatProvider

        client = _client([_chunk("Hel"), _chunk("lo"), SimpleNamespace(choices=[])])
        provider = OpenAICompatibleChatProvider(_settings(), client=client)

        events = await _events(provider, temperature=0.3)

        assert [e.text for e in events] == ["Hel", "lo"]
        request = client.chat.completions.create.call_args.kwargs
        assert request["model"] == "gpt-4o-mini"
        assert request["stream"] is True
        assert request["temperature"] == 0.3
        assert "tools" not in request

    @pytest.mark.asyncio
    async def test_tool_call_fragments_assembled(self) -> None:
        from ragchat.providers.llm.openai_compatible_chat_provider import OpenAICompatibleChatProvider

        client = _client(
            [
                _chunk(tool_calls=[_fragment(0, id="call_a", name="getInformation", arguments='{"que')]),
                _chunk(tool_calls=[_fragment(0, arguments='stion": "x"}')]),
                _chunk(tool_calls=[_fragment(1, id="call_b", name="addResource", arguments="{}")]),
            ]
        )
        provider = OpenAICompatibleChatProvider(_settings(), client=client)

        events = await _events(provider, tools=[{"type": "function"}])

        assert len(events) == 1
        calls = events[0].tool_calls
        assert [(c.id, c.name) for c in calls] == [("call_a", "getInformation"), ("call_b", "addResource")]
        assert calls[0].arguments == '{"question": "x"}'
        assert client.chat.completions.create.call_args.kwargs["tools"] == [{"type": "function"}]

    @pytest.mark.asyncio
    async def test_api_error_wrapped(self) -> None:
        import openai

        from ragchat.providers.llm.openai_compatible_chat_provider import OpenAICompatibleChatProvider
        from ragchat.utils.errors import LLMError

        client = MagicMock()
        client.chat.completions.create = AsyncMock(
            side_effect=openai.APIError(
                "server error",
                request=httpx.Request("POST", "https://api.openai.com/v1/chat/completions"),
                body=None,
            )
        )
        provider = OpenAICompatibleChatProvider(_settings(), client=client)

        with pytest.raises(LLMError) as exc_info:
            await _events(provider)
        assert exc_info.value.provider_name == "openai_chat"

    @pytest.mark.asyncio
    async def test_timeout_wrapped(self) -> None:
        import openai

        from ragchat.providers.llm.openai_compatible_chat_provider import OpenAICompatibleChatProvider
        from ragchat.utils.errors import LLMError

        client = MagicMock()
        client.chat.completions.create = AsyncMock(
            side_effect=openai.APITimeoutError(
                request=httpx.Request("POST", "https://api.deepseek.com/chat/completions")
            )
        )
        provider = OpenAICompatibleChatProvider(_settings(deepseek_api_key="ds"), client=client)

        with pytest.raises(LLMError, match="timed out"):
            await _events(provider)
