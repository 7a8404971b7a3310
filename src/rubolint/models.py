# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Editor-facing value types shared across the rubolint package."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Final, TypeAlias
from urllib.parse import urlparse
from urllib.request import url2pathname

from .severity import DiagnosticSeverity

ResourceKey: TypeAlias = str

FILE_SCHEME: Final[str] = "file"
QUICKFIX_KIND: Final[str] = "quickfix"
DIAGNOSTIC_SOURCE: Final[str] = "rubocop"
LINE_BREAK_PATTERN: Final[re.Pattern[str]] = re.compile(r"\r\n|\r|\n")


def split_lines(text: str) -> list[str]:
    """Split ``text`` at ``\\n``, ``\\r\\n`` and ``\\r`` only, dropping a final empty line."""

    lines = LINE_BREAK_PATTERN.split(text)
    if lines[-1] == "":
        lines.pop()
    return lines


@dataclass(frozen=True, slots=True, order=True)
class Position:
    """Zero-based line and character offset inside a document."""

    line: int
    character: int


@dataclass(frozen=True, slots=True)
class Range:
    """Half-open span between two positions."""

    start: Position
    end: Position

    @classmethod
    def create(cls, start_line: int, start_character: int, end_line: int, end_character: int) -> Range:
        """Build a range from four integer coordinates."""

        return cls(Position(start_line, start_character), Position(end_line, end_character))

    def contains(self, position: Position) -> bool:
        """Return ``True`` when ``position`` lies within the range, both ends inclusive.

        Args:
            position: Cursor position supplied by the editor.

        Returns:
            bool: Whether the line and character both fall inside the range bounds.
        """

        start, end = self.start, self.end
        return (
            start.line <= position.line
            and start.character <= position.character
            and end.line >= position.line
            and end.character >= position.character
        )

    def to_dict(self) -> dict[str, dict[str, int]]:
        """Return an LSP-shaped mapping describing the range."""

        return {
            "start": {"line": self.start.line, "character": self.start.character},
            "end": {"line": self.end.line, "character": self.end.character},
        }


@dataclass(frozen=True, slots=True)
class Diagnostic:
    """Single editor diagnostic derived from a RuboCop offense."""

    range: Range
    message: str
    severity: DiagnosticSeverity
    code: str | None = None
    source: str = DIAGNOSTIC_SOURCE

    def to_dict(self) -> dict[str, object]:
        """Return a JSON-serialisable representation of the diagnostic."""

        return {
            "range": self.range.to_dict(),
            "message": self.message,
            "severity": self.severity.label,
            "code": self.code,
            "source": self.source,
        }


@dataclass(frozen=True, slots=True)
class Command:
    """Editor command invoked when a quick-fix action is chosen."""

    command: str
    title: str
    arguments: tuple[str, Range]


@dataclass(frozen=True, slots=True)
class CodeAction:
    """Quick-fix action offered for a diagnostic."""

    title: str
    command: Command
    diagnostics: tuple[Diagnostic, ...] = ()
    kind: str = QUICKFIX_KIND

    @property
    def cop_name(self) -> str:
        """Return the rule identifier the action suppresses."""

        return self.command.arguments[0]

    @property
    def range(self) -> Range:
        """Return the range the action applies to."""

        return self.command.arguments[1]


@dataclass(frozen=True, slots=True)
class ActionEntry:
    """Pair a diagnostic range with the quick fixes available for it."""

    range: Range
    actions: tuple[CodeAction, ...]


@dataclass(frozen=True, slots=True)
class TextEdit:
    """Replace ``range`` in a document with ``new_text``."""

    range: Range
    new_text: str

    @classmethod
    def insert(cls, position: Position, text: str) -> TextEdit:
        """Return an edit inserting ``text`` at ``position``."""

        return cls(Range(position, position), text)

    @classmethod
    def replace(cls, range_: Range, text: str) -> TextEdit:
        """Return an edit replacing ``range_`` with ``text``."""

        return cls(range_, text)


@dataclass(frozen=True, slots=True)
class TextDocument:
    """Snapshot of an editor document.

    Attributes:
        uri: Location identity of the document, used as its resource key.
        text: Full document contents at snapshot time.
        language_id: Editor language identifier (``ruby`` for Ruby buffers).
        version: Editor-supplied version counter.
    """

    uri: str
    text: str
    language_id: str = "ruby"
    version: int = 0
    _lines: tuple[str, ...] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "_lines", tuple(split_lines(self.text)))

    @classmethod
    def from_path(cls, path: Path, *, language_id: str = "ruby", text: str | None = None) -> TextDocument:
        """Create a document snapshot for ``path``, reading it when ``text`` is omitted.

        Args:
            path: File system location of the document.
            language_id: Editor language identifier to record.
            text: Optional buffer contents overriding the file on disk.

        Returns:
            TextDocument: Snapshot keyed by the file URI of ``path``.
        """

        resolved = path.resolve()
        if text is None:
            with resolved.open(encoding="utf-8", newline="") as handle:
                text = handle.read()
        return cls(uri=resolved.as_uri(), text=text, language_id=language_id)

    @property
    def key(self) -> ResourceKey:
        """Return the resource key identifying this document."""

        return self.uri

    @property
    def scheme(self) -> str:
        """Return the URI scheme of the document."""

        return urlparse(self.uri).scheme

    @property
    def is_file(self) -> bool:
        """Return ``True`` when the document is backed by a local file."""

        return self.scheme == FILE_SCHEME

    @property
    def path(self) -> Path:
        """Return the file system path encoded in the document URI."""

        return Path(url2pathname(urlparse(self.uri).path))

    @property
    def line_count(self) -> int:
        """Return the number of lines in the document."""

        return len(self._lines)

    def line(self, index: int) -> str:
        """Return the text of line ``index`` without its terminator, or ``""`` when out of range."""

        if 0 <= index < len(self._lines):
            return self._lines[index]
        return ""

    @property
    def ends_with_newline(self) -> bool:
        """Return ``True`` when the final line carries a terminator."""

        return not self.text or self.text.endswith(("\n", "\r"))


@dataclass(frozen=True, slots=True)
class LintRequest:
    """Immutable snapshot describing a single lint run for one document."""

    key: ResourceKey
    path: Path
    source: str
    arguments: tuple[str, ...]
    cwd: Path


__all__ = [
    "ActionEntry",
    "CodeAction",
    "Command",
    "DIAGNOSTIC_SOURCE",
    "Diagnostic",
    "FILE_SCHEME",
    "LINE_BREAK_PATTERN",
    "LintRequest",
    "Position",
    "QUICKFIX_KIND",
    "Range",
    "ResourceKey",
    "TextDocument",
    "TextEdit",
    "split_lines",
]
