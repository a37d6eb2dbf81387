"""Workspace discovery of burn source files."""

from __future__ import annotations

import logging
from collections import deque
from pathlib import Path

logger = logging.getLogger(__name__)

# Directories never descended into
SKIP_DIRS: frozenset[str] = frozenset({"node_modules"})


def find_source_files(workspace_root: str | Path, extension: str = ".bn") -> list[Path]:
    """Collect source files below a workspace root, breadth first.

    Hidden directories and ``node_modules`` are skipped. Unreadable
    directories are logged and skipped.

    Args:
        workspace_root: Directory to scan
        extension: Source file extension, including the dot

    Returns:
        Paths of matching files in discovery order
    """
    root = Path(workspace_root)
    if not root.is_dir():
        return []

    found: list[Path] = []
    queue: deque[Path] = deque([root])

    while queue:
        directory = queue.popleft()
        try:
            entries = sorted(directory.iterdir(), key=lambda p: p.name)
        except OSError as e:
            logger.warning("Error reading directory %s: %s", directory, e)
            continue

        for entry in entries:
            if entry.is_dir():
                if not entry.name.startswith(".") and entry.name not in SKIP_DIRS:
                    queue.append(entry)
            elif entry.is_file() and entry.name.endswith(extension):
                found.append(entry)

    logger.debug("Found %d source files in %s", len(found), root)
    return found
