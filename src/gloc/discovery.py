"""Locate the directories a command should run in."""

from __future__ import annotations

import logging
import os
from pathlib import Path

logger = logging.getLogger(__name__)

GIT_MARKER = ".git"
PRUNED_DIR_NAMES = frozenset({"node_modules", GIT_MARKER})


class DiscoveryError(RuntimeError):
    """Fatal problem with the search root; nothing can be run."""


def expand_root(root: str | Path) -> Path:
    """Expand ``~`` to the home directory and make the root absolute."""

    try:
        expanded = Path(root).expanduser()
    except RuntimeError as error:
        raise DiscoveryError(f"Cannot resolve home directory for {str(root)!r}: {error}") from error
    return expanded.absolute()


def discover(root: str | Path, *, all_dirs: bool = False, recurse: bool = False) -> list[Path]:
    """Return the sorted task directories under ``root``."""

    if all_dirs and recurse:
        raise ValueError("--all-dirs and --recurse-into cannot be combined.")

    base = expand_root(root)
    if not base.is_dir():
        raise DiscoveryError(f"Root directory does not exist or is not a directory: {base}")

    if all_dirs:
        return find_all_dirs(base)
    if recurse:
        return find_git_dirs_recursive(base)
    return find_git_dirs(base)


def find_git_dirs(root: Path) -> list[Path]:
    """Immediate children of ``root`` that hold a ``.git`` entry."""

    return [child for child in _list_children(root) if (child / GIT_MARKER).exists()]


def find_all_dirs(root: Path) -> list[Path]:
    """Every immediate child directory of ``root``, git or not."""

    return _list_children(root)


def find_git_dirs_recursive(root: Path) -> list[Path]:
    """Every directory below ``root`` holding ``.git``, skipping pruned names."""

    found: list[Path] = []

    def _on_error(error: OSError) -> None:
        if Path(error.filename or "") == root:
            raise DiscoveryError(f"Cannot read root directory {root}: {error}") from error
        logger.warning("Skipping unreadable directory %s: %s", error.filename, error)

    for current, dir_names, file_names in os.walk(root, onerror=_on_error):
        if GIT_MARKER in dir_names or GIT_MARKER in file_names:
            found.append(Path(current))
        dir_names[:] = [name for name in dir_names if name not in PRUNED_DIR_NAMES]
    return sorted(found)


def _list_children(root: Path) -> list[Path]:
    try:
        children = [child for child in root.iterdir() if child.is_dir()]
    except OSError as error:
        raise DiscoveryError(f"Cannot read root directory {root}: {error}") from error
    return sorted(children)
