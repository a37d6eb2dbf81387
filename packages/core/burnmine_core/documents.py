"""Text document model shared by the indexer and the diagnostic stages.

Positions are 0-based lines and characters, matching the editor protocol.
"""

from __future__ import annotations

from bisect import bisect_right
from dataclasses import dataclass
from functools import cached_property
from typing import Any


def is_identifier_char(char: str) -> bool:
    """Check if a character can appear inside an identifier."""
    return char == "_" or ("a" <= char <= "z") or ("A" <= char <= "Z") or ("0" <= char <= "9")


def is_identifier_start(char: str) -> bool:
    """Check if a character can start an identifier."""
    return char == "_" or ("a" <= char <= "z") or ("A" <= char <= "Z")


@dataclass(frozen=True)
class Position:
    """A position in a document."""

    line: int  # 0-indexed
    character: int  # 0-indexed


@dataclass(frozen=True)
class TextRange:
    """A range in a document, end exclusive."""

    start_line: int  # 0-indexed
    start_col: int  # 0-indexed
    end_line: int  # 0-indexed
    end_col: int  # 0-indexed

    @classmethod
    def on_line(cls, line: int, start: int, end: int) -> TextRange:
        """Build a single-line range."""
        return cls(line, start, line, end)

    @property
    def start(self) -> Position:
        return Position(self.start_line, self.start_col)

    @property
    def end(self) -> Position:
        return Position(self.end_line, self.end_col)

    def to_dict(self) -> dict[str, Any]:
        """Convert to an editor protocol range."""
        return {
            "start": {"line": self.start_line, "character": self.start_col},
            "end": {"line": self.end_line, "character": self.end_col},
        }


@dataclass(frozen=True)
class TextDocument:
    """An immutable snapshot of a document at one version."""

    uri: str
    version: int
    text: str

    @cached_property
    def _line_starts(self) -> list[int]:
        starts = [0]
        for index, char in enumerate(self.text):
            if char == "\n":
                starts.append(index + 1)
        return starts

    @property
    def line_count(self) -> int:
        return len(self._line_starts)

    def position_at(self, offset: int) -> Position:
        """Convert a character offset into a position (clamped to the text)."""
        offset = max(0, min(offset, len(self.text)))
        line = bisect_right(self._line_starts, offset) - 1
        return Position(line, offset - self._line_starts[line])

    def offset_at(self, line: int, character: int) -> int:
        """Convert a position into a character offset (clamped to the text)."""
        if line < 0:
            return 0
        if line >= len(self._line_starts):
            return len(self.text)
        start = self._line_starts[line]
        line_end = (
            self._line_starts[line + 1] - 1 if line + 1 < len(self._line_starts) else len(self.text)
        )
        return min(start + max(0, character), line_end)

    def range_of(self, start: int, end: int) -> TextRange:
        """Build a range from two character offsets."""
        first = self.position_at(start)
        last = self.position_at(end)
        return TextRange(first.line, first.character, last.line, last.character)

    def line_text(self, line: int) -> str | None:
        """Get the text of one line without its newline, or None if out of range."""
        if line < 0 or line >= len(self._line_starts):
            return None
        start = self._line_starts[line]
        if line + 1 < len(self._line_starts):
            return self.text[start : self._line_starts[line + 1] - 1]
        return self.text[start:]

    def word_at(self, offset: int) -> str:
        """Get the identifier touching the given offset, or an empty string."""
        text = self.text
        start = end = max(0, min(offset, len(text)))
        while start > 0 and is_identifier_char(text[start - 1]):
            start -= 1
        while end < len(text) and is_identifier_char(text[end]):
            end += 1
        return text[start:end]
