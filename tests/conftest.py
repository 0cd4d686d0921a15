"""Test configuration for the prototype assembler project."""

from __future__ import annotations

import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from collections.abc import Sequence
from typing import Any

import pytest

from prototype_assembler import Screen


@pytest.fixture()
def demo_screens() -> list[Screen]:
    """Return the two-screen project used throughout the examples."""

    return [
        Screen(name="Home", html='<a href="Details">Go</a>', is_root=True),
        Screen(name="Details", html="<p>Detail</p>"),
    ]


@pytest.fixture()
def make_screens() -> Any:
    """Factory fixture building screens from ``(name, html)`` pairs."""

    def _factory(
        pairs: Sequence[tuple[str, str]], *, root: str | None = None
    ) -> list[Screen]:
        return [
            Screen(name=name, html=markup, is_root=name == root)
            for name, markup in pairs
        ]

    return _factory


__all__ = ["demo_screens", "make_screens"]
