"""Unit tests for the themed status helpers."""

from __future__ import annotations

import pytest

from veritas.utils.console import (
    VERITAS_THEME,
    console,
    print_error,
    print_info,
    print_status,
    print_success,
    print_warning,
)


@pytest.mark.unit
class TestStatusHelpers:
    """Each helper prints its mark followed by the message."""

    @pytest.mark.parametrize(
        ("helper", "mark"),
        [
            (print_success, "✓"),
            (print_error, "✗"),
            (print_warning, "⚠"),
            (print_info, "ℹ"),
        ],
    )
    def test_helper_marks(self, helper, mark: str) -> None:
        with console.capture() as capture:
            helper("all good")

        assert capture.get().strip() == f"{mark} all good"

    def test_every_level_has_a_style(self) -> None:
        for level in ("ok", "alert", "warn", "note"):
            assert f"veritas.{level}" in VERITAS_THEME.styles

    def test_unknown_level_rejected(self) -> None:
        with pytest.raises(KeyError):
            print_status("loud", "nope")
