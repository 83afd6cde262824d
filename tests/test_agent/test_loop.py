"""Tests for the agent loop with a scripted completion provider."""

from __future__ import annotations

import asyncio
import json

import pytest

from conftest import ScriptedLLM, assistant, call
from worklooking.agent.loop import AgentLoop, AgentState
from worklooking.errors import MaxRoundsExceeded, NoResponseFromAgent
from worklooking.models.chat import ConversationMessage

TOOL_NAMES = {
    "read_file",
    "write_file",
    "render_resume",
    "generate_pdf",
    "fetch_url",
    "read_pdf",
    "save_source_resume",
    "save_candidature_config",
}


def _history(text: str = "Hello") -> list[ConversationMessage]:
    return [ConversationMessage.user(text)]


class TestPlainAnswer:
    async def test_no_tool_calls_returns_content_without_mutations(
        self, sandbox, registry, sample_resume, sample_config
    ):
        llm = ScriptedLLM([assistant("Hi Alice, how can I help?")])
        loop = AgentLoop(llm, sandbox, registry)

        result = await loop.handle_turn(_history(), sample_resume, sample_config)

        assert result.ok
        assert result.content == "Hi Alice, how can I help?"
        assert result.updated_resume is None
        assert result.updated_config is None
        assert result.rounds == 0
        assert loop.state == AgentState.DONE

    async def test_request_has_system_prompt_history_and_full_catalog(
        self, sandbox, registry, sample_resume, sample_config
    ):
        llm = ScriptedLLM([assistant("ok")])
        loop = AgentLoop(llm, sandbox, registry)

        await loop.handle_turn(_history("Find me a job"), sample_resume, sample_config)

        sent = llm.calls[0]
        assert sent[0].role == "system"
        assert "Globex" in sent[0].content
        assert "alice@example.com" not in sent[0].content
        assert sent[1].content == "Find me a job"
        assert set(llm.tool_names[0]) == TOOL_NAMES

    async def test_caller_history_is_not_mutated(self, sandbox, registry):
        history = _history()
        llm = ScriptedLLM(
            [assistant("Writing.", call("c1", "write_file", filePath="a.md", content="x")), assistant("done")]
        )

        await AgentLoop(llm, sandbox, registry).handle_turn(history)

        assert len(history) == 1

    async def test_empty_final_content_gets_placeholder(self, sandbox, registry):
        llm = ScriptedLLM([assistant(None)])
        result = await AgentLoop(llm, sandbox, registry).handle_turn(_history())
        assert result.content == "No content returned"


class TestToolRounds:
    async def test_every_tool_call_answered_before_next_completion(self, sandbox, registry):
        llm = ScriptedLLM(
            [
                assistant(
                    "Saving two notes.",
                    call("c1", "write_file", filePath="a/x/1.md", content="A"),
                    call("c2", "write_file", filePath="b/y/2.md", content="B"),
                ),
                assistant("Both saved."),
            ]
        )

        result = await AgentLoop(llm, sandbox, registry).handle_turn(_history())

        second_request = llm.calls[1]
        assistant_index = next(
            i for i, m in enumerate(second_request) if m.role == "assistant" and m.tool_calls
        )
        answers = second_request[assistant_index + 1 :]
        assert [m.role for m in answers] == ["tool", "tool"]
        assert [m.tool_call_id for m in answers] == ["c1", "c2"]
        assert json.loads(answers[0].content)["success"] is True
        assert json.loads(answers[1].content)["success"] is True
        assert (sandbox.root / "a" / "x" / "1.md").read_text() == "A"
        assert (sandbox.root / "b" / "y" / "2.md").read_text() == "B"
        assert result.tool_calls == 2
        assert result.rounds == 1

    async def test_unknown_tool_is_answered_with_error(self, sandbox, registry):
        llm = ScriptedLLM(
            [assistant("Making a folder.", call("c1", "create_directory", path="x")), assistant("Sorry.")]
        )

        result = await AgentLoop(llm, sandbox, registry).handle_turn(_history())

        tool_message = llm.calls[1][-1]
        assert tool_message.tool_call_id == "c1"
        assert json.loads(tool_message.content) == {"error": "Unknown tool: create_directory"}
        assert result.ok

    async def test_failed_generate_pdf_does_not_abort_turn(self, sandbox, registry):
        llm = ScriptedLLM(
            [
                assistant(
                    "Generating the PDF.",
                    call("c1", "generate_pdf", htmlPath="missing/resume.html", pdfPath="missing/resume.pdf"),
                ),
                assistant("The HTML file does not exist yet."),
            ]
        )

        result = await AgentLoop(llm, sandbox, registry).handle_turn(_history())

        assert len(llm.calls) == 2
        payload = json.loads(llm.calls[1][-1].content)
        assert set(payload) == {"error"}
        assert "File not found" in payload["error"]
        assert result.content == "The HTML file does not exist yet."

    async def test_save_then_render_uses_saved_resume(
        self, sandbox, registry, fake_renderer, sample_resume
    ):
        saved = sample_resume.to_json_dict()
        saved["skills"] = [{"name": "Rust"}]
        llm = ScriptedLLM(
            [
                assistant("Updating your resume.", call("c1", "save_source_resume", resumeJson=saved)),
                assistant(
                    "Rendering it.",
                    call("c2", "render_resume", resumeJson={"skills": [{"name": "Rust"}]}),
                ),
                assistant("Done."),
            ]
        )

        result = await AgentLoop(llm, sandbox, registry).handle_turn(_history(), sample_resume)

        assert result.updated_resume is not None
        assert result.updated_resume.skills[0].name == "Rust"
        rendered = fake_renderer.rendered[0]
        assert rendered.basics.name == "Alice Martin"
        assert rendered.skills[0].name == "Rust"

    async def test_render_keeps_snapshot_basics(self, sandbox, registry, fake_renderer, sample_resume):
        proposed = sample_resume.to_json_dict()
        proposed["basics"] = {"name": "Bob", "email": "bob@evil.test"}
        llm = ScriptedLLM(
            [
                assistant("Rendering.", call("c1", "render_resume", resumeJson=proposed)),
                assistant("Done."),
            ]
        )

        await AgentLoop(llm, sandbox, registry).handle_turn(_history(), sample_resume)

        basics = fake_renderer.rendered[0].basics
        assert basics.name == "Alice Martin"
        assert basics.email == "alice@example.com"
        assert "Alice Martin" in json.loads(llm.calls[1][-1].content)["html"]

    async def test_last_config_mutation_wins(self, sandbox, registry, sample_config):
        first = sample_config.model_dump()
        second = sample_config.model_dump()
        second["applications"] = [{"company": "Globex", "position": "Backend", "status": "applied"}]
        llm = ScriptedLLM(
            [
                assistant(
                    "Saving.",
                    call("c1", "save_candidature_config", config=first),
                    call("c2", "save_candidature_config", config=second),
                ),
                assistant("Recorded."),
            ]
        )

        result = await AgentLoop(llm, sandbox, registry).handle_turn(_history(), None, sample_config)

        assert result.updated_config.applications[0].company == "Globex"
        assert result.updated_resume is None

    async def test_events_follow_execution_order(self, sandbox, registry, recorded_events):
        emitter, events = recorded_events
        llm = ScriptedLLM(
            [
                assistant("I'll save this.", call("c1", "write_file", filePath="a.txt", content="A")),
                assistant("Saved."),
            ]
        )

        await AgentLoop(llm, sandbox, registry, events=emitter).handle_turn(_history())

        kinds = [(kind, getattr(payload, "status", payload)) for kind, payload in events]
        assert kinds == [("partial", "I'll save this."), ("tool", "start"), ("tool", "end")]
        assert events[1][1].args == {"filePath": "a.txt", "content": "A"}
        assert events[2][1].result["success"] is True

    async def test_tool_call_without_text_emits_no_partial(self, sandbox, registry, recorded_events):
        emitter, events = recorded_events
        llm = ScriptedLLM(
            [assistant(None, call("c1", "write_file", filePath="a.txt", content="A")), assistant("ok")]
        )

        await AgentLoop(llm, sandbox, registry, events=emitter).handle_turn(_history())

        assert [kind for kind, _ in events] == ["tool", "tool"]


class TestFatalConditions:
    async def test_no_response_on_first_call(self, sandbox, registry):
        llm = ScriptedLLM([None])
        loop = AgentLoop(llm, sandbox, registry)

        result = await loop.handle_turn(_history())

        assert not result.ok
        assert result.error == "No response from AI agent"
        assert loop.state == AgentState.FAILED

    async def test_no_response_after_tool_round_raises_from_run_turn(self, sandbox, registry):
        llm = ScriptedLLM(
            [assistant("Saving.", call("c1", "write_file", filePath="a.txt", content="A")), None]
        )

        with pytest.raises(NoResponseFromAgent):
            await AgentLoop(llm, sandbox, registry).run_turn(_history())

        # The tool ran before the failure
        assert (sandbox.root / "a.txt").read_text() == "A"

    async def test_round_cap(self, sandbox, registry):
        looping = [
            assistant("Again.", call(f"c{i}", "read_file", filePath="nothing.txt")) for i in range(4)
        ]
        llm = ScriptedLLM(looping)
        loop = AgentLoop(llm, sandbox, registry, max_rounds=3)

        with pytest.raises(MaxRoundsExceeded):
            await loop.run_turn(_history())
        assert len(llm.calls) == 4

    async def test_provider_exception_becomes_turn_error(self, sandbox, registry):
        class BrokenLLM:
            async def complete(self, messages, tools):
                raise RuntimeError("overloaded")

        result = await AgentLoop(BrokenLLM(), sandbox, registry).handle_turn(_history())

        assert result.error == "overloaded"
        assert result.content is None

    async def test_cancelled_turn_stops_before_next_completion(self, sandbox, registry):
        cancel = asyncio.Event()
        llm = ScriptedLLM(
            [assistant("Saving.", call("c1", "write_file", filePath="a.txt", content="A")), assistant("x")]
        )
        loop = AgentLoop(llm, sandbox, registry)
        loop.events.on_tool_status(lambda status: cancel.set() if status.status == "end" else None)

        result = await loop.handle_turn(_history(), cancel_event=cancel)

        assert result.error == "Turn cancelled"
        assert len(llm.calls) == 1


class TestEmptyReplies:
    async def test_empty_reply_after_tool_round_keeps_mutations(self, sandbox, registry, sample_config):
        updated = sample_config.model_dump()
        updated["applications"] = [{"company": "Globex", "status": "applied"}]
        llm = ScriptedLLM(
            [
                assistant(None, call("c1", "save_candidature_config", config=updated)),
                assistant(None),
            ]
        )

        result = await AgentLoop(llm, sandbox, registry).handle_turn(_history(), None, sample_config)

        assert result.ok
        assert result.content == "No content returned"
        assert result.updated_config.applications[0].company == "Globex"
