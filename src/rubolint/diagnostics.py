# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Turn RuboCop offenses into editor diagnostics and paired quick fixes."""

from __future__ import annotations

from typing import Final

from .models import ActionEntry, CodeAction, Command, Diagnostic, Range, ResourceKey
from .parsing import AnalysisResult, Offense
from .scheduling import CancellationToken
from .severity import to_diagnostic_severity
from .state import PublishedState, PublishedStateStore

IGNORE_INLINE_COMMAND: Final[str] = "ruby.rubocop.ignore.inline"
IGNORE_WRAP_COMMAND: Final[str] = "ruby.rubocop.ignore.wrap"


def offense_range(offense: Offense) -> Range:
    """Return the zero-based, single-line range covered by ``offense``.

    Args:
        offense: Offense carrying one-based ``line``/``column`` and a ``length``.

    Returns:
        Range: ``(line-1, column-1)`` to ``(line-1, column-1+length)``.
    """

    location = offense.location
    line = location.line - 1
    start = location.column - 1
    return Range.create(line, start, line, start + location.length)


def format_message(offense: Offense) -> str:
    """Return ``"<message> (<severity>:<cop>)"`` for ``offense``."""

    return f"{offense.message} ({offense.severity}:{offense.cop_name})"


def build_diagnostic(offense: Offense) -> Diagnostic:
    """Build the editor diagnostic for ``offense``."""

    return Diagnostic(
        range=offense_range(offense),
        message=format_message(offense),
        severity=to_diagnostic_severity(offense.severity),
        code=offense.cop_name,
    )


def _code_action(title: str, command: str, cop_name: str, range_: Range, diagnostic: Diagnostic) -> CodeAction:
    return CodeAction(
        title=title,
        command=Command(command=command, title=title, arguments=(cop_name, range_)),
        diagnostics=(diagnostic,),
    )


def build_actions(offense: Offense, diagnostic: Diagnostic) -> ActionEntry:
    """Return the inline-disable and wrap-disable quick fixes for ``offense``.

    Args:
        offense: Offense the actions suppress.
        diagnostic: Diagnostic already built for ``offense``.

    Returns:
        ActionEntry: The diagnostic range paired with both actions.
    """

    cop_name = offense.cop_name
    range_ = diagnostic.range
    return ActionEntry(
        range=range_,
        actions=(
            _code_action(f"ignore inline ({cop_name})", IGNORE_INLINE_COMMAND, cop_name, range_, diagnostic),
            _code_action(f"ignore wrap ({cop_name})", IGNORE_WRAP_COMMAND, cop_name, range_, diagnostic),
        ),
    )


def synthesize(result: AnalysisResult) -> PublishedState:
    """Build the complete published state for one analysis result."""

    diagnostics: list[Diagnostic] = []
    entries: list[ActionEntry] = []
    for offense in result.iter_offenses():
        diagnostic = build_diagnostic(offense)
        diagnostics.append(diagnostic)
        entries.append(build_actions(offense, diagnostic))
    return PublishedState(diagnostics=tuple(diagnostics), actions=tuple(entries))


def publish(
    store: PublishedStateStore,
    key: ResourceKey,
    result: AnalysisResult,
    *,
    token: CancellationToken | None = None,
) -> bool:
    """Synthesize ``result`` and publish it for ``key`` unless ``token`` was canceled.

    Returns:
        bool: ``True`` when the new state replaced the previous one.
    """

    return store.replace(key, synthesize(result), token=token)


__all__ = [
    "IGNORE_INLINE_COMMAND",
    "IGNORE_WRAP_COMMAND",
    "build_actions",
    "build_diagnostic",
    "format_message",
    "offense_range",
    "publish",
    "synthesize",
]
