"""Claude API wrapper for tool-calling chat completions with retry logic."""

from __future__ import annotations

import logging
from typing import Any

import anthropic
from tenacity import retry, stop_after_attempt, wait_exponential

from worklooking.models.chat import ConversationMessage, ToolCall, ToolDefinition

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "claude-sonnet-4-5-20250929"


class LLMClient:
    """Async Claude client that speaks the agent's message model.

    ``complete`` is stateless: the full history is sent on every call.
    """

    def __init__(
        self,
        api_key: str | None = None,
        timeout: float | None = None,
        *,
        model: str = DEFAULT_MODEL,
        max_tokens: int = 4096,
    ):
        kwargs: dict = {}
        if api_key is not None:
            kwargs["api_key"] = api_key
        if timeout is not None:
            kwargs["timeout"] = timeout
        self.client = anthropic.AsyncAnthropic(**kwargs)
        self.model = model
        self.max_tokens = max_tokens
        self._token_log: list[tuple[str, int, int]] = []  # (model, input_tokens, output_tokens)

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(min=1, max=10),
        reraise=True,
    )
    async def _call_api(
        self,
        system: str,
        messages: list[dict],
        tools: list[dict],
    ) -> anthropic.types.Message:
        """Make the actual API call with retry logic."""
        kwargs: dict = {
            "model": self.model,
            "max_tokens": self.max_tokens,
            "messages": messages,
        }
        if system:
            kwargs["system"] = system
        if tools:
            kwargs["tools"] = tools
        return await self.client.messages.create(**kwargs)

    async def complete(
        self,
        messages: list[ConversationMessage],
        tools: list[ToolDefinition],
    ) -> ConversationMessage | None:
        """Run one completion; return the assistant message, or None when there is none."""
        system, api_messages = to_api_messages(messages)
        api_tools = [to_api_tool(t) for t in tools]
        logger.debug("LLM call: model=%s messages=%d", self.model, len(api_messages))
        try:
            message = await self._call_api(system, api_messages, api_tools)
        except Exception:
            logger.error("LLM call failed", exc_info=True)
            raise
        if message is None:
            return None
        input_tokens = message.usage.input_tokens
        output_tokens = message.usage.output_tokens
        logger.debug("LLM response: %d input, %d output tokens", input_tokens, output_tokens)
        self._token_log.append((self.model, input_tokens, output_tokens))
        return from_api_message(message)

    def get_token_summary(self) -> dict:
        """Return accumulated token usage and reset the log."""
        summary = {
            "input": sum(t[1] for t in self._token_log),
            "output": sum(t[2] for t in self._token_log),
            "calls": list(self._token_log),
        }
        self._token_log.clear()
        return summary


def to_api_tool(tool: ToolDefinition) -> dict:
    return {
        "name": tool.name,
        "description": tool.description,
        "input_schema": tool.parameter_schema,
    }


def to_api_messages(messages: list[ConversationMessage]) -> tuple[str, list[dict]]:
    """Convert history to (system prompt, Messages API payload).

    Consecutive tool results are grouped into a single user message, as the
    API expects every tool_use of a turn to be answered together.
    """
    system_parts: list[str] = []
    converted: list[dict] = []

    for msg in messages:
        if msg.role == "system":
            if msg.content:
                system_parts.append(msg.content)
        elif msg.role == "tool":
            block = {
                "type": "tool_result",
                "tool_use_id": msg.tool_call_id,
                "content": msg.content or "",
            }
            if converted and _is_tool_result_message(converted[-1]):
                converted[-1]["content"].append(block)
            else:
                converted.append({"role": "user", "content": [block]})
        elif msg.role == "assistant":
            blocks: list[dict[str, Any]] = []
            if msg.content:
                blocks.append({"type": "text", "text": msg.content})
            for call in msg.tool_calls or []:
                blocks.append(
                    {"type": "tool_use", "id": call.id, "name": call.name, "input": call.arguments}
                )
            if blocks:
                converted.append({"role": "assistant", "content": blocks})
        else:
            converted.append({"role": "user", "content": msg.content or ""})

    return "\n\n".join(system_parts), converted


def _is_tool_result_message(message: dict) -> bool:
    content = message["content"]
    return (
        message["role"] == "user"
        and isinstance(content, list)
        and all(block.get("type") == "tool_result" for block in content)
    )


def from_api_message(message: anthropic.types.Message | None) -> ConversationMessage | None:
    """Convert an API reply; None only when there is no message at all.

    An empty ``end_turn`` reply (common right after tool results) is a normal
    assistant message without content.
    """
    if message is None:
        return None

    texts: list[str] = []
    calls: list[ToolCall] = []
    for block in message.content or []:
        if block.type == "text":
            texts.append(block.text)
        elif block.type == "tool_use":
            calls.append(ToolCall(id=block.id, name=block.name, arguments=dict(block.input or {})))

    text = "\n".join(t for t in texts if t)
    return ConversationMessage(
        role="assistant",
        content=text or None,
        tool_calls=calls or None,
    )
