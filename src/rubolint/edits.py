# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Text edits performed by the RuboCop suppression quick fixes."""

from __future__ import annotations

import re
from collections.abc import Sequence
from typing import Final

from .diagnostics import IGNORE_INLINE_COMMAND, IGNORE_WRAP_COMMAND
from .models import LINE_BREAK_PATTERN, CodeAction, Position, Range, TextDocument, TextEdit

DISABLE_COMMENT_PATTERN: Final[re.Pattern[str]] = re.compile(
    r"#\s*rubocop:disable [A-Za-z0-9_/]+\s*([A-Za-z0-9_/]+,\s*)*",
)


def disable_comment(cop_name: str) -> str:
    """Return the comment disabling ``cop_name``."""

    return f"# rubocop:disable {cop_name}"


def enable_comment(cop_name: str) -> str:
    """Return the comment re-enabling ``cop_name``."""

    return f"# rubocop:enable {cop_name}"


def inline_disable_edits(document: TextDocument, cop_name: str, range_: Range) -> list[TextEdit]:
    """Append a disable directive for ``cop_name`` to each line ``range_`` spans.

    Lines that already carry a ``# rubocop:disable`` list get ``, <cop>``
    appended; all others get a new trailing ``# rubocop:disable <cop>`` comment.

    Args:
        document: Document the edits apply to.
        cop_name: Rule identifier to disable.
        range_: Diagnostic range stored with the quick fix.

    Returns:
        list[TextEdit]: One end-of-line insertion per spanned line.
    """

    edits: list[TextEdit] = []
    for index in range(range_.start.line, range_.end.line + 1):
        line = document.line(index)
        if DISABLE_COMMENT_PATTERN.search(line):
            suffix = f", {cop_name}"
        else:
            suffix = f" {disable_comment(cop_name)}"
        edits.append(TextEdit.insert(Position(index, len(line)), suffix))
    return edits


def wrap_disable_edits(document: TextDocument, cop_name: str, range_: Range) -> list[TextEdit]:
    """Surround the lines of ``range_`` with disable/enable directives.

    Args:
        document: Document the edits apply to.
        cop_name: Rule identifier to disable.
        range_: Diagnostic range stored with the quick fix.

    Returns:
        list[TextEdit]: Insertion before the first line and after the last line.
    """

    edits = [TextEdit.insert(Position(range_.start.line, 0), f"{disable_comment(cop_name)}\n")]
    after = range_.end.line + 1
    if after >= document.line_count and not document.ends_with_newline:
        last = document.line_count - 1
        edits.append(TextEdit.insert(Position(last, len(document.line(last))), f"\n{enable_comment(cop_name)}"))
    else:
        edits.append(TextEdit.insert(Position(after, 0), f"{enable_comment(cop_name)}\n"))
    return edits


def edits_for_action(action: CodeAction, document: TextDocument) -> list[TextEdit]:
    """Return the edits a quick-fix ``action`` performs on ``document``.

    Raises:
        ValueError: If the action's command is not a RuboCop suppression command.
    """

    command = action.command.command
    if command == IGNORE_INLINE_COMMAND:
        return inline_disable_edits(document, action.cop_name, action.range)
    if command == IGNORE_WRAP_COMMAND:
        return wrap_disable_edits(document, action.cop_name, action.range)
    raise ValueError(f"Unsupported quick-fix command: {command}")


def _line_offsets(text: str) -> list[int]:
    offsets = [0, *(match.end() for match in LINE_BREAK_PATTERN.finditer(text))]
    if offsets[-1] != len(text):
        offsets.append(len(text))
    return offsets


def _offset(text: str, offsets: Sequence[int], position: Position) -> int:
    if position.line >= len(offsets) - 1:
        return len(text)
    start = offsets[position.line]
    content = text[start : offsets[position.line + 1]].rstrip("\r\n")
    return start + max(0, min(position.character, len(content)))


def apply_edits(text: str, edits: Sequence[TextEdit]) -> str:
    """Apply ``edits`` to ``text`` as one batch.

    Positions refer to the original text. Insertions at the same position
    keep their relative order. Characters past a line's end clamp to it and
    lines past the end of the text resolve to the end of the text.
    """

    offsets = _line_offsets(text)
    resolved = [
        (_offset(text, offsets, edit.range.start), index, _offset(text, offsets, edit.range.end), edit.new_text)
        for index, edit in enumerate(edits)
    ]
    result = text
    for start, _index, end, new_text in sorted(resolved, reverse=True):
        result = result[:start] + new_text + result[end:]
    return result


__all__ = [
    "DISABLE_COMMENT_PATTERN",
    "apply_edits",
    "disable_comment",
    "edits_for_action",
    "enable_comment",
    "inline_disable_edits",
    "wrap_disable_edits",
]
