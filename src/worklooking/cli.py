"""CLI interface using typer + rich."""

from __future__ import annotations

import asyncio
import json
import logging
import time
import uuid
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markdown import Markdown
from rich.panel import Panel
from rich.table import Table

from worklooking.agent.events import EventEmitter
from worklooking.agent.loop import AgentLoop
from worklooking.agent.tools import default_registry
from worklooking.clients.llm_client import LLMClient
from worklooking.clients.page_fetcher import PageFetcher
from worklooking.config import AppConfig, load_config
from worklooking.errors import WorklookingError
from worklooking.export.pdf_renderer import html_to_pdf
from worklooking.export.renderer import AVAILABLE_THEMES, render_resume
from worklooking.logging.cost_calculator import calculate_cost
from worklooking.logging.models import TurnLog
from worklooking.logging.usage_store import UsageStore
from worklooking.models.chat import ConversationMessage, ToolStatus
from worklooking.models.resume import Basics, ResumeDocument
from worklooking.store.documents import DocumentStore
from worklooking.utils.image_processor import optimize_image
from worklooking.utils.sandbox import SandboxedFileAccessor

app = typer.Typer(
    name="worklooking",
    help="Job search assistant: resume, applications and an AI agent.",
    no_args_is_help=True,
)
console = Console()

EXIT_WORDS = {"exit", "quit", ":q"}


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(name)s: %(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
    )


def _sandbox(config: AppConfig, data_dir: Path | None) -> SandboxedFileAccessor:
    default_root = config.sandbox.resolved_data_dir
    if data_dir is None:
        default_root.mkdir(parents=True, exist_ok=True)
        return SandboxedFileAccessor(default_root)
    try:
        return SandboxedFileAccessor(default_root).with_root(data_dir)
    except WorklookingError as exc:
        console.print(f"[red]{exc.message}[/red]")
        raise typer.Exit(1)


@app.command()
def chat(
    data_dir: Path = typer.Option(None, "--data-dir", "-d", help="User data directory"),
    config_path: Path = typer.Option(None, "--config", "-c", help="config.yaml path"),
    model: str = typer.Option(None, "--model", "-m", help="Claude model override"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """Chat with the assistant. Updated resume/config are saved after each turn."""
    _setup_logging(verbose)
    config = load_config(config_path)
    sandbox = _sandbox(config, data_dir)
    store = DocumentStore(sandbox)
    usage = UsageStore(config.usage.resolved_db_path)

    llm = LLMClient(
        timeout=config.llm.timeout,
        model=model or config.llm.model,
        max_tokens=config.llm.max_tokens,
    )
    fetcher = PageFetcher(
        config.fetch.resolved_profile_dir,
        navigation_timeout_ms=config.fetch.navigation_timeout_ms,
        selector_timeout_ms=config.fetch.selector_timeout_ms,
    )
    events = EventEmitter()
    events.on_assistant_partial(lambda content: console.print(f"[cyan]{content}[/cyan]"))
    events.on_tool_status(_print_tool_status)
    loop = AgentLoop(
        llm,
        sandbox,
        default_registry(
            fetch_page=fetcher.fetch,
            max_content_chars=config.fetch.max_content_chars,
            default_theme=config.agent.default_theme,
        ),
        events=events,
        max_rounds=config.agent.max_rounds,
    )

    console.print(Panel(f"Data directory: {sandbox.root}\nType 'exit' to quit.", title="worklooking"))
    asyncio.run(_chat_session(loop, llm, store, usage))


async def _chat_session(
    loop: AgentLoop,
    llm: LLMClient,
    store: DocumentStore,
    usage: UsageStore,
) -> None:
    session_id = str(uuid.uuid4())
    resume = store.load_resume()
    candidature = store.load_config()
    history: list[ConversationMessage] = []
    if resume is None:
        console.print("[yellow]No resume.json yet. Ask the assistant to import your resume.[/yellow]")

    while True:
        try:
            text = (await asyncio.to_thread(console.input, "[bold green]you>[/bold green] ")).strip()
        except (EOFError, KeyboardInterrupt):
            break
        if not text:
            continue
        if text.lower() in EXIT_WORDS:
            break

        history.append(ConversationMessage.user(text))
        start = time.monotonic()
        with console.status("Thinking..."):
            result = await loop.handle_turn(history, resume, candidature)
        elapsed = time.monotonic() - start

        tokens = llm.get_token_summary()
        usage.save_log(
            TurnLog(
                session_id=session_id,
                model=llm.model,
                rounds=result.rounds,
                tool_calls=result.tool_calls,
                elapsed_seconds=elapsed,
                total_input_tokens=tokens["input"],
                total_output_tokens=tokens["output"],
                estimated_cost_usd=calculate_cost(tokens["calls"]),
                success=result.ok,
                error_message=result.error,
            )
        )

        if not result.ok:
            console.print(f"[red]Error: {result.error}[/red]")
            continue

        history.append(ConversationMessage(role="assistant", content=result.content))
        console.print(Markdown(result.content or ""))

        if result.updated_resume is not None:
            resume = result.updated_resume
            store.save_resume(resume)
            console.print("[green]resume.json updated[/green]")
        if result.updated_config is not None:
            candidature = result.updated_config
            store.save_config(candidature)
            console.print("[green]candidature_config.json updated[/green]")


def _print_tool_status(status: ToolStatus) -> None:
    if status.status == "start":
        args = json.dumps(status.args or {}, ensure_ascii=False)
        if len(args) > 120:
            args = args[:117] + "..."
        console.print(f"[dim]→ {status.name} {args}[/dim]")
        return
    failed = isinstance(status.result, dict) and (
        "error" in status.result or status.result.get("success") is False
    )
    mark = "[red]✗[/red]" if failed else "[green]✓[/green]"
    console.print(f"[dim]  {mark} {status.name}[/dim]")


@app.command()
def tools() -> None:
    """List the tools available to the agent."""
    table = Table(title="Agent tools")
    table.add_column("Name", style="bold")
    table.add_column("Description")
    for definition in default_registry().definitions():
        table.add_row(definition.name, definition.description)
    console.print(table)


@app.command()
def render(
    output: Path = typer.Option(..., "--output", "-o", help="Output path relative to the data directory (.html)"),
    theme: str = typer.Option(None, "--theme", "-t", help=f"Theme: {', '.join(AVAILABLE_THEMES)}"),
    pdf: bool = typer.Option(False, "--pdf", help="Also write a PDF next to the HTML"),
    data_dir: Path = typer.Option(None, "--data-dir", "-d", help="User data directory"),
    config_path: Path = typer.Option(None, "--config", "-c", help="config.yaml path"),
) -> None:
    """Render the source resume.json to HTML (and PDF)."""
    config = load_config(config_path)
    sandbox = _sandbox(config, data_dir)
    resume = DocumentStore(sandbox).load_resume()
    if resume is None:
        console.print(f"[red]No resume.json found in {sandbox.root}[/red]")
        raise typer.Exit(1)

    try:
        html = render_resume(resume, theme or config.agent.default_theme)
        html_path = sandbox.write_text(str(output), html)
        console.print(f"[green]HTML saved: {html_path}[/green]")
        if pdf:
            pdf_path = sandbox.write_bytes(
                str(output.with_suffix(".pdf")), html_to_pdf(html, html_path.parent)
            )
            console.print(f"[green]PDF saved: {pdf_path}[/green]")
    except WorklookingError as exc:
        console.print(f"[red]{exc.code}: {exc.message}[/red]")
        raise typer.Exit(1)


@app.command()
def photo(
    image: Path = typer.Argument(..., help="Profile photo (JPEG, PNG, WebP...)"),
    data_dir: Path = typer.Option(None, "--data-dir", "-d", help="User data directory"),
    config_path: Path = typer.Option(None, "--config", "-c", help="config.yaml path"),
) -> None:
    """Optimize a profile photo and store it as basics.image in resume.json."""
    config = load_config(config_path)
    store = DocumentStore(_sandbox(config, data_dir))
    try:
        processed = optimize_image(image)
    except WorklookingError as exc:
        console.print(f"[red]{exc.code}: {exc.message}[/red]")
        raise typer.Exit(1)

    resume = store.load_resume() or ResumeDocument()
    basics = (resume.basics or Basics()).model_copy(update={"image": processed.data_url})
    store.save_resume(resume.with_basics(basics))
    console.print(
        f"[green]Photo saved to resume.json "
        f"({processed.original_size} -> {processed.optimized_size} bytes)[/green]"
    )


@app.command("data-dir")
def data_dir_command(
    config_path: Path = typer.Option(None, "--config", "-c", help="config.yaml path"),
) -> None:
    """Show the user data directory all agent file operations are confined to."""
    config = load_config(config_path)
    console.print(str(config.sandbox.resolved_data_dir))


@app.command()
def usage(
    config_path: Path = typer.Option(None, "--config", "-c", help="config.yaml path"),
) -> None:
    """Show this month's agent usage."""
    config = load_config(config_path)
    stats = UsageStore(config.usage.resolved_db_path).get_monthly_stats()
    console.print(
        Panel(
            f"Turns: {stats['total_turns']} | Tool calls: {stats['total_tool_calls']}\n"
            f"Tokens: {stats['total_input_tokens']} in / {stats['total_output_tokens']} out\n"
            f"Estimated cost: ${stats['total_cost_usd']:.4f} | "
            f"Success rate: {stats['success_rate']:.0f}%",
            title=f"Usage {stats['month']}",
        )
    )


if __name__ == "__main__":
    app()
