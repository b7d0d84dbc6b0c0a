"""Abstract base class for chat-model providers.

Defines the contract for a streaming, tool-calling chat completion
backend.  Implementations wrap any OpenAI-compatible endpoint (DeepSeek,
OpenAI).
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator
from typing import Any

from ragchat.models.chat import ChatStreamEvent


# Concrete implementation: OpenAICompatibleChatProvider
# Located in: ragchat/providers/llm/
class IChatModelProvider(ABC):
    """Contract for the model that drives the chat endpoint."""

    @abstractmethod
    def stream_chat(
        self,
        messages: list[dict[str, Any]],
        tools: list[dict[str, Any]] | None = None,
        temperature: float = 0.3,
    ) -> AsyncIterator[ChatStreamEvent]:
        """Run one model step and stream its output.

        Parameters
        ----------
        messages:
            Conversation in OpenAI chat format, including any ``tool``
            role messages from earlier steps.
        tools:
            JSON-schema tool definitions in OpenAI ``function`` format.
        temperature:
            Sampling temperature.

        Yields
        ------
        ChatStreamEvent
            Text deltas as they arrive, then at most one event carrying the
            fully assembled tool calls for this step.

        Raises
        ------
        ragchat.utils.errors.LLMError
            If the API call fails.
        """

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a human-readable identifier for this chat model."""

    @abstractmethod
    def is_available(self) -> bool:
        """Return ``True`` if the provider has credentials configured."""
