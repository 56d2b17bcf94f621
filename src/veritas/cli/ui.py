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

"""Rich UI components for the VERITAS terminal.

Reusable renderers for answers, evidence, call metadata and breaker status.
"""

from __future__ import annotations

from typing import Any

from rich.markdown import Markdown
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from veritas.core.citations import Citation
from veritas.core.models import Depth, OrchestrationResult
from veritas.utils.console import (
    console,
    print_error,
    print_info,
    print_success,
    print_warning,
)

__all__ = [
    "console",
    "create_step_progress",
    "print_answer",
    "print_breaker_status",
    "print_citations",
    "print_error",
    "print_header",
    "print_info",
    "print_meta",
    "print_model_chain",
    "print_result",
    "print_success",
    "print_warning",
]


def print_header(title: str, subtitle: str | None = None) -> None:
    """Print a minimal header with title and optional subtitle."""
    console.print()
    console.print(f"[veritas.accent]{title}[/veritas.accent]")
    if subtitle:
        console.print(f"[veritas.dim]{subtitle}[/veritas.dim]")
    console.print()


def print_answer(text: str, depth: Depth | None = None) -> None:
    """Render an answer as markdown inside a panel."""
    title = f"VERITAS · {depth.value}" if depth else "VERITAS"
    console.print(Panel(Markdown(text), title=title, border_style="green", padding=(1, 2)))


def print_citations(citations: list[Citation]) -> None:
    """Print the evidence table of an answer."""
    if not citations:
        return

    table = Table(title="Evidence", show_header=True, header_style="bold green", box=None)
    table.add_column("#", style="dim", justify="right")
    table.add_column("Source")
    table.add_column("URL", style="cyan", overflow="fold")

    for index, citation in enumerate(citations, start=1):
        table.add_row(str(index), citation.title, citation.url)

    console.print(table)


def print_meta(result: OrchestrationResult) -> None:
    """Print the one-line call summary (model, attempts, latency, id)."""
    meta = result.meta
    parts = [
        f"model={meta.model_used or '-'}",
        f"attempts={meta.attempts}",
        f"latency={meta.total_latency_ms:.0f}ms",
        f"id={meta.correlation_id}",
    ]
    if meta.skipped_models:
        parts.append(f"skipped={','.join(meta.skipped_models)}")
    console.print(f"[veritas.dim]{' · '.join(parts)}[/veritas.dim]")


def print_result(
    result: OrchestrationResult,
    citations: list[Citation],
    depth: Depth | None = None,
    verbose: bool = False,
) -> None:
    """Print a full orchestration result."""
    if result.success:
        print_answer(result.content_text() or "", depth)
        print_citations(citations)
    else:
        error = result.error
        kind = error.type.value if error else "UNKNOWN"
        message = error.message if error else "All providers failed"
        print_error(f"[veritas.alert]{kind}[/veritas.alert]: {message}")

    if verbose or not result.success:
        print_meta(result)


def print_model_chain(models: tuple[str, ...], registered: list[str]) -> None:
    """Print the configured model chain and whether each family is available."""
    table = Table(show_header=True, header_style="bold green")
    table.add_column("Priority", justify="right")
    table.add_column("Model")
    table.add_column("Status")

    for priority, identifier in enumerate(models, start=1):
        family = identifier.partition(":")[0].lower()
        status = "[green]ready[/green]" if family in registered else "[yellow]not configured[/yellow]"
        table.add_row(str(priority), identifier, status)

    console.print(table)


def print_breaker_status(statuses: dict[str, dict[str, Any]]) -> None:
    """Print circuit breaker states."""
    if not statuses:
        print_info("No models called yet")
        return

    table = Table(show_header=True, header_style="bold green")
    table.add_column("Model")
    table.add_column("State")
    table.add_column("Failures", justify="right")
    table.add_column("Rejected", justify="right")

    colors = {"closed": "green", "half_open": "yellow", "open": "red"}
    for name, status in statuses.items():
        state = status["state"]
        table.add_row(
            name,
            f"[{colors.get(state, 'white')}]{state}[/{colors.get(state, 'white')}]",
            str(status["failures"]),
            str(status["metrics"]["rejected_calls"]),
        )

    console.print(table)


def create_step_progress() -> Progress:
    """Create a minimal spinner shown while waiting for an answer."""
    return Progress(
        SpinnerColumn(spinner_name="dots"),
        TextColumn("{task.description}"),
        console=console,
        transient=True,
    )
