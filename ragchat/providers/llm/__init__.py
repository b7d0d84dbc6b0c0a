"""Chat model adapters.

OpenAICompatibleChatProvider talks to DeepSeek (DEEPSEEK_API_KEY) or, if
that is unset, OpenAI.  main.py injects it into app.state at startup.
"""

from ragchat.providers.llm.openai_compatible_chat_provider import OpenAICompatibleChatProvider

__all__ = ["OpenAICompatibleChatProvider"]
