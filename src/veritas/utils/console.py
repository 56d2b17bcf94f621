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

"""Themed rich console shared by the CLI.

Status lines are a coloured mark followed by the message; marks and colours
live in the theme so the CLI and its tests render the same text.
"""

from __future__ import annotations

from rich.console import Console
from rich.theme import Theme

VERITAS_THEME = Theme(
    {
        "veritas.accent": "bold green",
        "veritas.dim": "dim green",
        "veritas.alert": "bold red",
        "veritas.ok": "green",
        "veritas.warn": "yellow",
        "veritas.note": "cyan",
    }
)

console = Console(theme=VERITAS_THEME)

_MARKS = {
    "ok": "✓",
    "alert": "✗",
    "warn": "⚠",
    "note": "ℹ",
}


def print_status(level: str, message: str) -> None:
    """Print ``message`` prefixed by the mark of ``level`` (ok, alert, warn, note)."""
    console.print(f"[veritas.{level}]{_MARKS[level]}[/veritas.{level}] {message}")


def print_success(message: str) -> None:
    print_status("ok", message)


def print_error(message: str) -> None:
    print_status("alert", message)


def print_warning(message: str) -> None:
    print_status("warn", message)


def print_info(message: str) -> None:
    print_status("note", message)


__all__ = [
    "VERITAS_THEME",
    "console",
    "print_error",
    "print_info",
    "print_status",
    "print_success",
    "print_warning",
]
