"""Pydantic models for conversation messages, tool calls and turn results."""

from __future__ import annotations

import json
from typing import Any, Literal

from pydantic import BaseModel, Field

from worklooking.models.candidature import CandidatureConfig
from worklooking.models.resume import ResumeDocument

Role = Literal["user", "assistant", "system", "tool"]


class ToolCall(BaseModel):
    id: str
    name: str
    arguments: dict[str, Any] = Field(default_factory=dict)


class ConversationMessage(BaseModel):
    role: Role
    content: str | None = None
    tool_call_id: str | None = None
    tool_calls: list[ToolCall] | None = None

    @classmethod
    def system(cls, content: str) -> ConversationMessage:
        return cls(role="system", content=content)

    @classmethod
    def user(cls, content: str) -> ConversationMessage:
        return cls(role="user", content=content)

    @classmethod
    def tool_result(cls, tool_call_id: str, result: Any) -> ConversationMessage:
        """Answer a tool call with its JSON-serialized result."""
        return cls(
            role="tool",
            tool_call_id=tool_call_id,
            content=json.dumps(result, ensure_ascii=False, default=str),
        )


class ToolDefinition(BaseModel):
    name: str
    description: str
    parameter_schema: dict[str, Any]


class DocumentMutation(BaseModel):
    resume: ResumeDocument | None = None
    config: CandidatureConfig | None = None


class ToolExecutionResult(BaseModel):
    result: Any = None
    document_mutation: DocumentMutation | None = None


class ToolStatus(BaseModel):
    """Progress notification sent around each tool execution."""

    name: str
    status: Literal["start", "end"]
    args: dict[str, Any] | None = None
    result: Any = None


class TurnResult(BaseModel):
    content: str | None = None
    updated_resume: ResumeDocument | None = None
    updated_config: CandidatureConfig | None = None
    error: str | None = None
    rounds: int = 0
    tool_calls: int = 0

    @property
    def ok(self) -> bool:
        return self.error is None
