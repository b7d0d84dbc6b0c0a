"""Tool-using chat over the knowledge base.

The model gets two tools:

    addResource(content)      -> ResourceService.create_resource
    getInformation(question)  -> RetrievalService.find_relevant_content

Each request runs at most ``max_steps`` model steps.  A step that ends in
tool calls has its tools executed and the results appended as ``tool``
messages before the next step; a step with no tool calls ends the turn.
Text deltas are yielded as they arrive.
"""

from __future__ import annotations

import json
from collections.abc import AsyncIterator
from typing import Any

import structlog

from ragchat.interfaces.llm_provider import IChatModelProvider
from ragchat.models.chat import ChatMessage, ToolCall
from ragchat.services.resource_service import ResourceService
from ragchat.services.retrieval_service import RetrievalService
from ragchat.utils.errors import LLMError

logger = structlog.get_logger(logger_name=__name__)

SYSTEM_PROMPT = (
    "You are a helpful assistant that can talk about any topic.\n\n"
    "Before answering a question, check your knowledge base and use the "
    "information returned by your tool calls. If the tool calls return no "
    "relevant information, say honestly that you don't know."
)

TOOLS: list[dict[str, Any]] = [
    {
        "type": "function",
        "function": {
            "name": "addResource",
            "description": (
                "Add a resource to your knowledge base. If the user provides a "
                "piece of information without explicitly asking, use this tool "
                "without asking for confirmation."
            ),
            "parameters": {
                "type": "object",
                "properties": {
                    "content": {
                        "type": "string",
                        "description": "The content or resource to add to the knowledge base",
                    }
                },
                "required": ["content"],
            },
        },
    },
    {
        "type": "function",
        "function": {
            "name": "getInformation",
            "description": "Get information from your knowledge base to answer questions.",
            "parameters": {
                "type": "object",
                "properties": {
                    "question": {"type": "string", "description": "The user's question"}
                },
                "required": ["question"],
            },
        },
    },
]


class ChatService:
    """Runs the bounded tool-calling loop for one chat request."""

    def __init__(
        self,
        chat_provider: IChatModelProvider,
        retrieval_service: RetrievalService,
        resource_service: ResourceService,
        max_steps: int = 3,
        temperature: float = 0.3,
    ) -> None:
        self._chat_provider = chat_provider
        self._retrieval_service = retrieval_service
        self._resource_service = resource_service
        self._max_steps = max(1, max_steps)
        self._temperature = temperature

    async def stream_reply(self, messages: list[ChatMessage]) -> AsyncIterator[str]:
        """Yield the assistant's reply text for *messages*.

        Provider failures end the stream with a short error line.
        """
        conversation: list[dict[str, Any]] = [{"role": "system", "content": SYSTEM_PROMPT}]
        conversation.extend(m.to_openai() for m in messages if m.role != "system")

        for step in range(1, self._max_steps + 1):
            tool_calls: list[ToolCall] = []
            try:
                async for event in self._chat_provider.stream_chat(
                    conversation, tools=TOOLS, temperature=self._temperature
                ):
                    if event.text:
                        yield event.text
                    if event.tool_calls:
                        tool_calls.extend(event.tool_calls)
            except LLMError as exc:
                logger.error("chat_step_failed", step=step, error=str(exc))
                yield "\n[error] The assistant is unavailable right now. Please try again."
                return

            if not tool_calls:
                logger.info("chat_complete", steps=step)
                return

            conversation.append(
                {
                    "role": "assistant",
                    "content": None,
                    "tool_calls": [
                        {
                            "id": call.id,
                            "type": "function",
                            "function": {"name": call.name, "arguments": call.arguments},
                        }
                        for call in tool_calls
                    ],
                }
            )
            for call in tool_calls:
                result = await self.run_tool(call)
                conversation.append(
                    {
                        "role": "tool",
                        "tool_call_id": call.id,
                        "content": json.dumps(result, ensure_ascii=False, default=str),
                    }
                )

        logger.info("chat_step_limit_reached", max_steps=self._max_steps)

    async def run_tool(self, call: ToolCall) -> dict[str, Any]:
        """Execute one tool call; bad arguments or unknown tools yield an error payload."""
        try:
            args = json.loads(call.arguments or "{}")
        except json.JSONDecodeError:
            logger.warning("chat_tool_bad_arguments", tool=call.name, arguments=call.arguments)
            return {"success": False, "error": "Tool arguments were not valid JSON"}
        if not isinstance(args, dict):
            return {"success": False, "error": "Tool arguments must be a JSON object"}

        logger.info("chat_tool_call", tool=call.name)
        if call.name == "addResource":
            return await self._resource_service.create_resource(str(args.get("content", "")))
        if call.name == "getInformation":
            return await self._retrieval_service.find_relevant_content(str(args.get("question", "")))
        return {"success": False, "error": f"Unknown tool: {call.name}"}
