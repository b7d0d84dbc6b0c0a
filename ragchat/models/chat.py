"""Chat conversation models.

Messages follow the OpenAI chat format so they can be passed to any
OpenAI-compatible endpoint without translation.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field


class ChatMessage(BaseModel):
    """A single conversation turn sent by the client."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    role: Literal["system", "user", "assistant"]
    content: str = ""

    def to_openai(self) -> dict[str, Any]:
        return {"role": self.role, "content": self.content}


class ToolCall(BaseModel):
    """A tool invocation requested by the model."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    arguments: str = Field(default="{}", description="Raw JSON argument string.")


class ChatStreamEvent(BaseModel):
    """One event from a streamed model step.

    Exactly one of ``text`` or ``tool_calls`` is meaningful per event: text
    deltas arrive as they stream, tool calls arrive once, fully assembled, at
    the end of the step.
    """

    model_config = ConfigDict(frozen=True)

    text: str = ""
    tool_calls: list[ToolCall] = Field(default_factory=list)
