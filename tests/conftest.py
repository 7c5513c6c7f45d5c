"""Shared test fixtures."""

from __future__ import annotations

import os
from collections.abc import Callable
from pathlib import Path

import pytest


@pytest.fixture(autouse=True)
def _clean_gloc_env(monkeypatch):
    """Keep GLOC_* variables from the developer shell out of tests."""
    for name in list(os.environ):
        if name.startswith("GLOC_"):
            monkeypatch.delenv(name, raising=False)


@pytest.fixture()
def make_repos(tmp_path: Path) -> Callable[..., list[Path]]:
    """Create sibling directories that look like git checkouts."""

    def _make(*names: str, root: Path | None = None) -> list[Path]:
        base = root or tmp_path
        paths = []
        for name in names:
            repo = base / name
            (repo / ".git").mkdir(parents=True, exist_ok=True)
            paths.append(repo)
        return paths

    return _make


@pytest.fixture()
def fixed_size() -> Callable[[int], Callable[[], os.terminal_size]]:
    """Build a terminal size query returning a fixed width."""

    def _factory(width: int) -> Callable[[], os.terminal_size]:
        return lambda: os.terminal_size((width, 24))

    return _factory
