"""Tool catalog exposed to the agent, and the executor that runs one call.

Every tool validates its arguments with a pydantic model whose JSON schema is
what the model sees. The executor never raises for a tool-local failure: the
model must get an answer for every tool call, so errors come back as
``{"error": message}`` results.
"""

from __future__ import annotations

import asyncio
import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Awaitable, Callable, ClassVar, Iterable
from urllib.parse import urlparse

from pydantic import BaseModel, ConfigDict, Field

from worklooking.agent.state import DocumentStateTracker
from worklooking.clients.page_fetcher import PageContent, PageFetcher
from worklooking.errors import (
    FetchNeedsAuth,
    FetchNetworkError,
    FileNotFound,
    RenderFailed,
    UnknownTool,
    WorklookingError,
)
from worklooking.export.pdf_renderer import html_to_pdf
from worklooking.export.renderer import DEFAULT_THEME, render_resume
from worklooking.models.candidature import CandidatureConfig
from worklooking.models.chat import DocumentMutation, ToolDefinition, ToolExecutionResult
from worklooking.models.resume import ResumeDocument
from worklooking.parsers.pdf_parser import extract_pdf_text
from worklooking.utils.auth_detector import detects_auth_required
from worklooking.utils.sandbox import SandboxedFileAccessor

logger = logging.getLogger(__name__)

MAX_CONTENT_CHARS = 50000

PageFetch = Callable[[str, str | None], Awaitable[PageContent]]


@dataclass
class ToolContext:
    """What a tool may touch while it runs."""

    sandbox: SandboxedFileAccessor
    documents: DocumentStateTracker


class ToolArgs(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class Tool(ABC):
    name: ClassVar[str]
    description: ClassVar[str]
    args_model: ClassVar[type[ToolArgs]]

    @property
    def definition(self) -> ToolDefinition:
        return ToolDefinition(
            name=self.name,
            description=self.description,
            parameter_schema=self.args_model.model_json_schema(by_alias=True),
        )

    def parse_args(self, args: dict[str, Any]) -> ToolArgs:
        return self.args_model.model_validate(args)

    @abstractmethod
    async def run(self, args: Any, context: ToolContext) -> ToolExecutionResult:
        ...


def _preserve_basics(proposed: ResumeDocument, documents: DocumentStateTracker) -> ResumeDocument:
    """Replace the model's basics with the current resume's, when there is one."""
    current = documents.resume
    if current is not None and current.basics is not None:
        return proposed.with_basics(current.basics)
    return proposed


# --- Files ---


class ReadFileArgs(ToolArgs):
    file_path: str = Field(
        alias="filePath",
        description="Relative (to the user data directory) or absolute path.",
    )


class ReadFileTool(Tool):
    name = "read_file"
    description = "Read a text file (e.g. a saved offer, notes, a tailored resume JSON)."
    args_model = ReadFileArgs

    async def run(self, args: ReadFileArgs, context: ToolContext) -> ToolExecutionResult:
        content = context.sandbox.read_text(args.file_path)
        return ToolExecutionResult(result={"content": content})


class WriteFileArgs(ToolArgs):
    file_path: str = Field(
        alias="filePath",
        description="Path relative to the user data directory (e.g. candidatures/offer.md).",
    )
    content: str


class WriteFileTool(Tool):
    name = "write_file"
    description = (
        "Create or overwrite a file in the user data directory. "
        "Missing parent directories are created."
    )
    args_model = WriteFileArgs

    async def run(self, args: WriteFileArgs, context: ToolContext) -> ToolExecutionResult:
        path = context.sandbox.write_text(args.file_path, args.content)
        return ToolExecutionResult(result={"success": True, "path": str(path)})


# --- Resume rendering ---


class RenderResumeArgs(ToolArgs):
    resume_json: dict[str, Any] = Field(
        alias="resumeJson",
        description="Resume content in JSON Resume format.",
    )
    theme_name: str | None = Field(
        None,
        alias="themeName",
        description="Theme name (modern-sidebar or classic). Defaults to the configured theme.",
    )
    output_path: str | None = Field(
        None,
        alias="outputPath",
        description="Optional relative path where the HTML is written (e.g. candidatures/acme/resume.html).",
    )


class RenderResumeTool(Tool):
    name = "render_resume"
    description = (
        "Render a resume JSON to a themed HTML page. Personal information is "
        "restored from the source resume. With outputPath, the HTML is saved there."
    )
    args_model = RenderResumeArgs

    def __init__(
        self,
        renderer: Callable[[ResumeDocument, str], str] = render_resume,
        default_theme: str = DEFAULT_THEME,
    ):
        self.renderer = renderer
        self.default_theme = default_theme

    async def run(self, args: RenderResumeArgs, context: ToolContext) -> ToolExecutionResult:
        resume = _preserve_basics(ResumeDocument.model_validate(args.resume_json), context.documents)
        try:
            html = self.renderer(resume, args.theme_name or self.default_theme)
        except RenderFailed:
            raise
        except Exception as exc:
            raise RenderFailed(f"Theme rendering failed: {exc}") from exc

        if args.output_path:
            path = context.sandbox.write_text(args.output_path, html)
            return ToolExecutionResult(result={"success": True, "path": str(path), "size": len(html)})
        return ToolExecutionResult(result={"success": True, "html": html})


class GeneratePdfArgs(ToolArgs):
    html_path: str = Field(alias="htmlPath", description="Relative path to the source HTML file.")
    pdf_path: str = Field(alias="pdfPath", description="Relative path of the PDF to write.")


class GeneratePdfTool(Tool):
    name = "generate_pdf"
    description = "Generate an A4 PDF from an HTML file of the user data directory."
    args_model = GeneratePdfArgs

    def __init__(self, converter: Callable[[str, Path | None], bytes] = html_to_pdf):
        self.converter = converter

    async def run(self, args: GeneratePdfArgs, context: ToolContext) -> ToolExecutionResult:
        html = context.sandbox.read_text(args.html_path)
        base_url = context.sandbox.resolve(args.html_path).parent
        pdf = await asyncio.to_thread(self.converter, html, base_url)
        path = context.sandbox.write_bytes(args.pdf_path, pdf)
        return ToolExecutionResult(result={"success": True, "path": str(path)})


# --- Web and PDF input ---


class FetchUrlArgs(ToolArgs):
    url: str = Field(description="The URL to read (job offer, company website).")
    wait_for_selector: str | None = Field(
        None,
        alias="waitForSelector",
        description="Optional CSS selector to wait for (max 30s) before reading the page.",
    )


class FetchUrlTool(Tool):
    name = "fetch_url"
    description = "Fetch the visible text of a web page (job offer, company site)."
    args_model = FetchUrlArgs

    def __init__(self, fetch_page: PageFetch | None = None, max_content_chars: int = MAX_CONTENT_CHARS):
        self.fetch_page = fetch_page or PageFetcher().fetch
        self.max_content_chars = max_content_chars

    async def run(self, args: FetchUrlArgs, context: ToolContext) -> ToolExecutionResult:
        try:
            if urlparse(args.url).scheme not in ("http", "https"):
                raise FetchNetworkError(f"Unsupported URL scheme: {args.url}")
            page = await self.fetch_page(args.url, args.wait_for_selector)
            if detects_auth_required(args.url, page.final_url, page.page_title):
                raise FetchNeedsAuth(
                    "Authentication required. This URL requires login. "
                    "Ask the user to paste the page content instead.",
                    final_url=page.final_url,
                )
        except FetchNeedsAuth as exc:
            logger.info("Fetch of %s needs authentication (%s)", args.url, exc.final_url)
            return ToolExecutionResult(
                result={
                    "success": False,
                    "needsAuth": True,
                    "finalUrl": exc.final_url,
                    "error": exc.message,
                    "errorCode": exc.code,
                }
            )
        except FetchNetworkError as exc:
            logger.info("Fetch of %s failed: %s", args.url, exc.message)
            return ToolExecutionResult(
                result={"success": False, "error": exc.message, "errorCode": exc.code}
            )

        return ToolExecutionResult(
            result={
                "success": True,
                "content": page.text[: self.max_content_chars],
                "finalUrl": page.final_url,
            }
        )


class ReadPdfArgs(ToolArgs):
    file_path: str = Field(alias="filePath", description="Relative or absolute path of the PDF.")


class ReadPdfTool(Tool):
    name = "read_pdf"
    description = "Extract the text of a PDF file (e.g. the user's existing resume)."
    args_model = ReadPdfArgs

    def __init__(self, extractor: Callable[[Path], str] = extract_pdf_text):
        self.extractor = extractor

    async def run(self, args: ReadPdfArgs, context: ToolContext) -> ToolExecutionResult:
        path = context.sandbox.resolve(args.file_path)
        if not path.is_file():
            raise FileNotFound(f"File not found: {args.file_path}")
        text = await asyncio.to_thread(self.extractor, path)
        return ToolExecutionResult(result={"success": True, "text": text})


# --- Document mutations ---


class SaveSourceResumeArgs(ToolArgs):
    resume_json: dict[str, Any] = Field(
        alias="resumeJson",
        description="The complete updated source resume in JSON Resume format.",
    )


class SaveSourceResumeTool(Tool):
    name = "save_source_resume"
    description = "Replace the user's main source resume. Personal information is kept from the current one."
    args_model = SaveSourceResumeArgs

    async def run(self, args: SaveSourceResumeArgs, context: ToolContext) -> ToolExecutionResult:
        resume = _preserve_basics(ResumeDocument.model_validate(args.resume_json), context.documents)
        return ToolExecutionResult(
            result={
                "success": True,
                "message": "Source resume updated in memory. It will be persisted by the application.",
            },
            document_mutation=DocumentMutation(resume=resume),
        )


class SaveCandidatureConfigArgs(ToolArgs):
    config: dict[str, Any] = Field(
        description=(
            "The complete candidature configuration: candidate, goals, "
            "target_companies and applications."
        ),
    )


class SaveCandidatureConfigTool(Tool):
    name = "save_candidature_config"
    description = "Replace the candidature configuration (profile, goals, target companies, applications)."
    args_model = SaveCandidatureConfigArgs

    async def run(self, args: SaveCandidatureConfigArgs, context: ToolContext) -> ToolExecutionResult:
        config = CandidatureConfig.model_validate(args.config)
        return ToolExecutionResult(
            result={
                "success": True,
                "message": "Configuration updated in memory. It will be persisted by the application.",
            },
            document_mutation=DocumentMutation(config=config),
        )


# --- Registry and executor ---


class ToolRegistry:
    """Name-keyed catalog of tools; fixed once the agent loop starts."""

    def __init__(self, tools: Iterable[Tool] = ()):
        self._tools: dict[str, Tool] = {}
        for tool in tools:
            self.register(tool)

    def register(self, tool: Tool) -> None:
        if tool.name in self._tools:
            raise ValueError(f"Tool already registered: {tool.name}")
        self._tools[tool.name] = tool

    def get(self, name: str) -> Tool:
        if name not in self._tools:
            raise UnknownTool(f"Unknown tool: {name}")
        return self._tools[name]

    def names(self) -> list[str]:
        return list(self._tools)

    def definitions(self) -> list[ToolDefinition]:
        return [tool.definition for tool in self._tools.values()]

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __len__(self) -> int:
        return len(self._tools)


def default_registry(
    *,
    fetch_page: PageFetch | None = None,
    max_content_chars: int = MAX_CONTENT_CHARS,
    renderer: Callable[[ResumeDocument, str], str] = render_resume,
    pdf_converter: Callable[[str, Path | None], bytes] = html_to_pdf,
    pdf_extractor: Callable[[Path], str] = extract_pdf_text,
    default_theme: str = DEFAULT_THEME,
) -> ToolRegistry:
    """The eight tools of the assistant, wired to their collaborators."""
    return ToolRegistry(
        [
            ReadFileTool(),
            WriteFileTool(),
            RenderResumeTool(renderer, default_theme),
            GeneratePdfTool(pdf_converter),
            FetchUrlTool(fetch_page, max_content_chars),
            ReadPdfTool(pdf_extractor),
            SaveSourceResumeTool(),
            SaveCandidatureConfigTool(),
        ]
    )


class ToolExecutor:
    """Runs a single tool call and turns any failure into an error result."""

    def __init__(self, registry: ToolRegistry):
        self.registry = registry

    async def execute(
        self,
        name: str,
        args: dict[str, Any],
        context: ToolContext,
    ) -> ToolExecutionResult:
        try:
            tool = self.registry.get(name)
        except UnknownTool as exc:
            logger.warning("Model requested unknown tool %r", name)
            return ToolExecutionResult(result={"error": exc.message})

        started = time.monotonic()
        try:
            outcome = await tool.run(tool.parse_args(args), context)
        except Exception as exc:  # noqa: BLE001
            logger.warning("Tool %s failed: %s", name, exc, exc_info=True)
            return ToolExecutionResult(result={"error": _error_message(exc)})
        logger.info("Tool %s done in %.2fs", name, time.monotonic() - started)
        return outcome


def _error_message(exc: Exception) -> str:
    if isinstance(exc, WorklookingError):
        return exc.message
    return str(exc) or type(exc).__name__
