# Copyright 2025 VERITAS Contributors
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Main CLI application entry point for VERITAS.

VERITAS - evidence-first research assistant in the terminal.

Commands:
    ask     One-shot question
    chat    Interactive conversation
    models  Show the configured model chain
"""

from __future__ import annotations

import asyncio
import logging

import typer
from rich.markup import escape

from veritas import __version__
from veritas.cli.ui import (
    console,
    create_step_progress,
    print_breaker_status,
    print_error,
    print_header,
    print_info,
    print_model_chain,
    print_result,
    print_success,
    print_warning,
)
from veritas.core.citations import Citation, deduplicate_citations, extract_citations
from veritas.core.conversation import ChatSession
from veritas.core.models import Depth, OrchestrationResult, RequestOptions, StructuredOutput
from veritas.llm.factory import build_orchestrator, build_registry
from veritas.llm.orchestration import ConfigurationError, RequestOrchestrator
from veritas.utils.config import Settings, get_settings

app = typer.Typer(
    name="veritas",
    help="VERITAS - evidence-first research assistant.\n\nAsks large language models with retries, circuit breakers and provider fallback.",
    add_completion=True,
    rich_markup_mode="rich",
    no_args_is_help=True,
)

EXIT_COMMANDS = {"/exit", "/quit"}


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"VERITAS version: [bold green]{__version__}[/bold green]")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(  # noqa: ARG001 - Used by Typer callback
        False,
        "--version",
        "-v",
        help="Show version and exit",
        callback=version_callback,
        is_eager=True,
    ),
) -> None:
    """
    VERITAS - evidence-first research assistant.
    """
    pass


def _configure_logging(verbose: bool, level: str = "INFO") -> None:
    log_level = level.upper() if verbose else logging.WARNING
    logging.basicConfig(level=log_level, format="%(message)s", force=True)


def _load_settings(models: list[str] | None) -> Settings:
    settings = get_settings()
    if models:
        settings = settings.model_copy(update={"models": ",".join(models)})
    return settings


def collect_citations(result: OrchestrationResult) -> list[Citation]:
    """Citations from the answer text plus any structured citation list."""
    if not result.success:
        return []

    citations = extract_citations(result.content_text() or "")
    structured = getattr(result.data, "citations", None)
    if isinstance(structured, list):
        citations.extend(Citation(title=url, url=url) for url in structured if isinstance(url, str))
    return deduplicate_citations(citations)


async def _ask_once(
    session: ChatSession,
    orchestrator: RequestOrchestrator,
    prompt: str,
    options: RequestOptions,
) -> OrchestrationResult:
    with create_step_progress() as progress:
        progress.add_task(f"Investigating ({options.depth.value if options.depth else 'SURFACE'})...")
        return await session.ask(orchestrator, prompt, options)


@app.command()
def ask(
    prompt: str = typer.Argument(..., help="Question to investigate"),
    depth: Depth = typer.Option(
        Depth.SURFACE, "--depth", "-d", case_sensitive=False, help="Knowledge layer"
    ),
    model: list[str] | None = typer.Option(
        None,
        "--model",
        "-m",
        help="Model identifier (family:model); repeat to set the fallback order",
    ),
    structured: bool = typer.Option(
        False, "--structured", help="Require a JSON answer with content and citations"
    ),
    verbose: bool = typer.Option(False, "--verbose", help="Verbose output"),
) -> None:
    """
    Ask a single question.

    Example:
        veritas ask "Who first described the effect?" --depth DEEP -m openai:gpt-4o
    """
    try:
        settings = _load_settings(model)
        _configure_logging(verbose, settings.log_level)
        orchestrator = build_orchestrator(settings)
    except (ConfigurationError, ValueError) as e:
        print_error(f"Configuration error: {escape(str(e))}")
        raise typer.Exit(code=2)

    session = ChatSession(depth=depth, system_prompt=settings.system_prompt)
    options = RequestOptions(
        depth=depth,
        structured_output_schema=StructuredOutput if structured else None,
    )

    try:
        result = asyncio.run(_ask_once(session, orchestrator, prompt, options))
    except KeyboardInterrupt:
        console.print()
        print_warning("Interrupted by user")
        raise typer.Exit(code=130)

    print_result(result, collect_citations(result), depth=depth, verbose=verbose)
    if not result.success:
        raise typer.Exit(code=1)


async def _chat_loop(session: ChatSession, orchestrator: RequestOrchestrator, verbose: bool) -> None:
    while True:
        try:
            line = await asyncio.to_thread(console.input, "[veritas.accent]>[/veritas.accent] ")
        except (EOFError, KeyboardInterrupt):
            console.print()
            return

        line = line.strip()
        if not line:
            continue

        if line in EXIT_COMMANDS:
            return
        if line == "/clear":
            session.clear()
            print_info("History cleared")
            continue
        if line == "/status":
            print_breaker_status(orchestrator.breakers.get_all_status())
            continue
        if line.startswith("/depth"):
            _, _, value = line.partition(" ")
            try:
                session.depth = Depth(value.strip().upper())
            except ValueError:
                print_warning(f"Unknown depth '{value.strip()}'. Use one of: {', '.join(d.value for d in Depth)}")
            else:
                print_info(f"Depth set to {session.depth.value}")
            continue
        if line.startswith("/"):
            print_warning(f"Unknown command '{line}'. Try /depth, /status, /clear or /exit")
            continue

        options = RequestOptions(depth=session.depth)
        result = await _ask_once(session, orchestrator, line, options)
        print_result(result, collect_citations(result), depth=session.depth, verbose=verbose)


@app.command()
def chat(
    depth: Depth = typer.Option(
        Depth.SURFACE, "--depth", "-d", case_sensitive=False, help="Initial knowledge layer"
    ),
    verbose: bool = typer.Option(False, "--verbose", help="Verbose output"),
) -> None:
    """
    Start an interactive conversation.

    Commands inside the session: /depth NAME, /status, /clear, /exit.
    """
    try:
        settings = _load_settings(None)
        _configure_logging(verbose, settings.log_level)
        orchestrator = build_orchestrator(settings)
    except (ConfigurationError, ValueError) as e:
        print_error(f"Configuration error: {escape(str(e))}")
        raise typer.Exit(code=2)

    print_header("VERITAS", f"Depth {depth.value} · /depth /status /clear /exit")
    session = ChatSession(depth=depth, system_prompt=settings.system_prompt)
    try:
        asyncio.run(_chat_loop(session, orchestrator, verbose))
    except KeyboardInterrupt:
        console.print()
        print_warning("Interrupted by user")
        raise typer.Exit(code=130)


@app.command()
def models() -> None:
    """
    Show the configured model chain and which families are ready.
    """
    try:
        settings = get_settings()
        registry = build_registry(settings)
    except (ConfigurationError, ValueError) as e:
        print_error(f"Configuration error: {escape(str(e))}")
        raise typer.Exit(code=2)

    families = registry.families()
    print_model_chain(settings.model_chain, families)
    if families:
        print_success(f"Provider families ready: {', '.join(families)}")
    else:
        print_warning("No provider credentials configured. Set VERITAS_OPENAI_API_KEY or similar")
