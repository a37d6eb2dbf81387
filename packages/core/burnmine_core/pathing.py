"""Shared conversion helpers between document URIs and file-system paths."""

from __future__ import annotations

from pathlib import Path
from urllib.parse import unquote, urlparse

FILE_SCHEME = "file"


def uri_to_path(uri: str) -> Path | None:
    """Convert a ``file://`` URI to a path.

    Rules:
    - only the ``file`` scheme maps to a path; other schemes return None
    - percent-escapes are decoded
    - a bare path (no scheme) is accepted as-is
    """
    parsed = urlparse(uri)
    if not parsed.scheme:
        return Path(uri)
    if parsed.scheme != FILE_SCHEME:
        return None
    path = unquote(parsed.path)
    if parsed.netloc and parsed.netloc != "localhost":
        path = f"//{parsed.netloc}{path}"
    return Path(path)


def path_to_uri(path: str | Path) -> str:
    """Convert a path to a normalized ``file://`` URI."""
    return Path(path).resolve().as_uri()
