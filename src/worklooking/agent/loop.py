"""Agent loop: alternates LLM completions and tool rounds until a final answer."""

from __future__ import annotations

import asyncio
import logging
import time
from enum import Enum
from typing import Protocol

from worklooking.agent.events import EventEmitter
from worklooking.agent.prompt import build_system_prompt
from worklooking.agent.state import DocumentStateTracker
from worklooking.agent.tools import ToolContext, ToolExecutor, ToolRegistry, default_registry
from worklooking.errors import MaxRoundsExceeded, NoResponseFromAgent, TurnCancelled
from worklooking.models.candidature import CandidatureConfig
from worklooking.models.chat import (
    ConversationMessage,
    ToolDefinition,
    ToolStatus,
    TurnResult,
)
from worklooking.models.resume import ResumeDocument
from worklooking.utils.sandbox import SandboxedFileAccessor

logger = logging.getLogger(__name__)

DEFAULT_MAX_ROUNDS = 20
NO_CONTENT = "No content returned"


class CompletionProvider(Protocol):
    async def complete(
        self,
        messages: list[ConversationMessage],
        tools: list[ToolDefinition],
    ) -> ConversationMessage | None:
        ...


class AgentState(str, Enum):
    IDLE = "idle"
    AWAITING_COMPLETION = "awaiting_completion"
    TOOL_CALLS_PENDING = "tool_calls_pending"
    EXECUTING_TOOLS = "executing_tools"
    DONE = "done"
    FAILED = "failed"


class AgentLoop:
    """Runs one conversational turn at a time.

    Within a turn everything is sequential: one completion in flight, then the
    requested tools one by one in the order received, since a later call may
    depend on a document saved by an earlier one.
    """

    def __init__(
        self,
        llm: CompletionProvider,
        sandbox: SandboxedFileAccessor,
        registry: ToolRegistry | None = None,
        *,
        events: EventEmitter | None = None,
        max_rounds: int = DEFAULT_MAX_ROUNDS,
    ):
        self.llm = llm
        self.sandbox = sandbox
        self.registry = registry or default_registry()
        self.executor = ToolExecutor(self.registry)
        self.events = events or EventEmitter()
        self.max_rounds = max_rounds
        self.state = AgentState.IDLE

    async def handle_turn(
        self,
        history: list[ConversationMessage],
        resume: ResumeDocument | None = None,
        config: CandidatureConfig | None = None,
        *,
        cancel_event: asyncio.Event | None = None,
    ) -> TurnResult:
        """Run a turn; turn-fatal failures come back as ``TurnResult.error``."""
        try:
            return await self.run_turn(history, resume, config, cancel_event=cancel_event)
        except Exception as exc:
            self.state = AgentState.FAILED
            logger.error("Turn failed", exc_info=True)
            return TurnResult(error=getattr(exc, "message", None) or str(exc) or type(exc).__name__)

    async def run_turn(
        self,
        history: list[ConversationMessage],
        resume: ResumeDocument | None = None,
        config: CandidatureConfig | None = None,
        *,
        cancel_event: asyncio.Event | None = None,
    ) -> TurnResult:
        """Run a turn, raising on turn-fatal failures."""
        start = time.monotonic()
        self.state = AgentState.IDLE
        documents = DocumentStateTracker(resume, config)
        context = ToolContext(sandbox=self.sandbox, documents=documents)
        tools = self.registry.definitions()
        messages = [ConversationMessage.system(build_system_prompt(config, resume)), *history]
        logger.debug("Turn start: %d history message(s), %d tool(s)", len(history), len(tools))

        rounds = 0
        tool_calls = 0
        assistant = await self._complete(messages, tools, cancel_event)

        while assistant.tool_calls:
            if rounds >= self.max_rounds:
                raise MaxRoundsExceeded(
                    f"Agent requested tools for more than {self.max_rounds} rounds"
                )
            rounds += 1
            self.state = AgentState.TOOL_CALLS_PENDING
            logger.debug("Round %d: %d tool call(s)", rounds, len(assistant.tool_calls))
            if assistant.content:
                self.events.emit_partial(assistant.content)
            messages.append(assistant)

            self.state = AgentState.EXECUTING_TOOLS
            for call in assistant.tool_calls:
                _check_cancelled(cancel_event)
                self.events.emit_tool_status(
                    ToolStatus(name=call.name, status="start", args=call.arguments)
                )
                outcome = await self.executor.execute(call.name, call.arguments, context)
                documents.apply(outcome.document_mutation)
                self.events.emit_tool_status(
                    ToolStatus(name=call.name, status="end", result=outcome.result)
                )
                messages.append(ConversationMessage.tool_result(call.id, outcome.result))
                tool_calls += 1

            assistant = await self._complete(messages, tools, cancel_event)

        self.state = AgentState.DONE
        logger.info(
            "Turn done: %d round(s), %d tool call(s), %.1fs",
            rounds,
            tool_calls,
            time.monotonic() - start,
        )
        return TurnResult(
            content=assistant.content or NO_CONTENT,
            updated_resume=documents.final_resume,
            updated_config=documents.final_config,
            rounds=rounds,
            tool_calls=tool_calls,
        )

    async def _complete(
        self,
        messages: list[ConversationMessage],
        tools: list[ToolDefinition],
        cancel_event: asyncio.Event | None,
    ) -> ConversationMessage:
        _check_cancelled(cancel_event)
        self.state = AgentState.AWAITING_COMPLETION
        assistant = await self.llm.complete(messages, tools)
        if assistant is None:
            raise NoResponseFromAgent("No response from AI agent")
        return assistant


def _check_cancelled(cancel_event: asyncio.Event | None) -> None:
    if cancel_event is not None and cancel_event.is_set():
        raise TurnCancelled("Turn cancelled")
