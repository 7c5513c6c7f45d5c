"""Transient summary line rendering and terminal size lookup."""

from __future__ import annotations

import os
import shutil
from collections.abc import Sequence

ELLIPSIS = " ..."
MIN_RENDER_WIDTH = 5


def render_summary(
    remaining_count: int,
    total_count: int,
    pending_names: Sequence[str],
    terminal_width: int,
) -> str:
    """Build ``"<done>| <pending, names>"`` fitted to ``terminal_width``.

    Returns an empty string for terminals narrower than five columns. Text
    longer than the width is cut and suffixed with :data:`ELLIPSIS` so the
    result is exactly ``terminal_width`` characters long.
    """

    if terminal_width < MIN_RENDER_WIDTH:
        return ""
    done_count = total_count - remaining_count
    text = f"{done_count}| {', '.join(pending_names)}"
    if len(text) > terminal_width:
        text = text[: terminal_width - len(ELLIPSIS)] + ELLIPSIS
    return text


def terminal_size(fallback: tuple[int, int] = (50, 1)) -> os.terminal_size:
    """Query the terminal, substituting ``fallback`` (width, height) on failure."""

    return shutil.get_terminal_size(fallback=fallback)
