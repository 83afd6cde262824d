"""Shared test fixtures."""

from __future__ import annotations

from typing import Any

import pytest

from worklooking.agent.events import EventEmitter
from worklooking.agent.state import DocumentStateTracker
from worklooking.agent.tools import ToolContext, default_registry
from worklooking.clients.page_fetcher import PageContent
from worklooking.models.candidature import CandidatureConfig
from worklooking.models.chat import ConversationMessage, ToolCall, ToolStatus
from worklooking.models.resume import ResumeDocument
from worklooking.utils.sandbox import SandboxedFileAccessor


class ScriptedLLM:
    """Completion provider returning canned assistant messages in order.

    Each call records a copy of the history as it was at call time.
    """

    def __init__(self, responses: list[ConversationMessage | None]):
        self.responses = list(responses)
        self.calls: list[list[ConversationMessage]] = []
        self.tool_names: list[list[str]] = []

    async def complete(self, messages, tools):
        self.calls.append(list(messages))
        self.tool_names.append([t.name for t in tools])
        return self.responses.pop(0)


def assistant(content: str | None = None, *calls: ToolCall) -> ConversationMessage:
    return ConversationMessage(role="assistant", content=content, tool_calls=list(calls) or None)


def call(call_id: str, name: str, **arguments: Any) -> ToolCall:
    return ToolCall(id=call_id, name=name, arguments=arguments)


class FakeRenderer:
    def __init__(self):
        self.rendered: list[ResumeDocument] = []

    def __call__(self, resume: ResumeDocument, theme: str) -> str:
        self.rendered.append(resume)
        name = resume.basics.name if resume.basics else ""
        return f"<html><body><h1>{name}</h1><p>{theme}</p></body></html>"


class FakeFetcher:
    def __init__(self, page: PageContent | None = None, error: Exception | None = None):
        self.page = page or PageContent(
            text="Senior Python developer wanted",
            final_url="https://jobs.example.com/offer/42",
            page_title="Senior Python Developer - Example",
        )
        self.error = error
        self.requests: list[tuple[str, str | None]] = []

    async def __call__(self, url: str, wait_for_selector: str | None = None) -> PageContent:
        self.requests.append((url, wait_for_selector))
        if self.error is not None:
            raise self.error
        return self.page


@pytest.fixture
def sample_resume() -> ResumeDocument:
    return ResumeDocument.model_validate(
        {
            "basics": {
                "name": "Alice Martin",
                "label": "Backend Engineer",
                "email": "alice@example.com",
                "phone": "+33 6 12 34 56 78",
                "image": "data:image/png;base64,iVBORw0KGgo=",
                "summary": "Backend engineer with 6 years of Python.",
                "location": {"city": "Lyon", "countryCode": "FR"},
            },
            "work": [
                {
                    "name": "Acme",
                    "position": "Backend Engineer",
                    "startDate": "2019-03",
                    "highlights": ["Built the billing API"],
                }
            ],
            "skills": [{"name": "Python", "keywords": ["FastAPI", "asyncio"]}],
        }
    )


@pytest.fixture
def sample_config() -> CandidatureConfig:
    return CandidatureConfig.model_validate(
        {
            "candidate": {"name": "Alice", "position": "Backend Engineer", "location": "Lyon"},
            "goals": {"remote_policy": "hybrid", "criteria": ["Python", "product team"]},
            "target_companies": [{"name": "Globex", "sector": "Fintech"}],
            "applications": [],
        }
    )


@pytest.fixture
def sandbox(tmp_path) -> SandboxedFileAccessor:
    root = tmp_path / "data"
    root.mkdir()
    return SandboxedFileAccessor(root)


@pytest.fixture
def fake_renderer() -> FakeRenderer:
    return FakeRenderer()


@pytest.fixture
def fake_fetcher() -> FakeFetcher:
    return FakeFetcher()


@pytest.fixture
def pdf_converter():
    def _convert(html: str, base_url) -> bytes:
        return b"%PDF-1.7 " + html.encode("utf-8")

    return _convert


@pytest.fixture
def registry(fake_renderer, fake_fetcher, pdf_converter):
    return default_registry(
        fetch_page=fake_fetcher,
        renderer=fake_renderer,
        pdf_converter=pdf_converter,
        pdf_extractor=lambda path: f"text of {path.name}",
    )


@pytest.fixture
def tool_context(sandbox, sample_resume, sample_config) -> ToolContext:
    return ToolContext(
        sandbox=sandbox,
        documents=DocumentStateTracker(sample_resume, sample_config),
    )


@pytest.fixture
def recorded_events():
    """An EventEmitter plus the list of (kind, payload) it emitted."""
    emitter = EventEmitter()
    events: list[tuple[str, str | ToolStatus]] = []
    emitter.on_assistant_partial(lambda content: events.append(("partial", content)))
    emitter.on_tool_status(lambda status: events.append(("tool", status)))
    return emitter, events
