# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Severity related types and helpers."""

from __future__ import annotations

from enum import Enum, IntEnum
from typing import Final


class OffenseSeverity(str, Enum):
    """Severity vocabulary emitted by RuboCop for each offense."""

    REFACTOR = "refactor"
    CONVENTION = "convention"
    WARNING = "warning"
    ERROR = "error"
    FATAL = "fatal"


class DiagnosticSeverity(IntEnum):
    """Editor-facing diagnostic severities using the LSP numbering."""

    ERROR = 1
    WARNING = 2
    INFORMATION = 3
    HINT = 4

    @property
    def label(self) -> str:
        """Return the lower-case display name of the severity."""

        return self.name.lower()


DEFAULT_DIAGNOSTIC_SEVERITY: Final[DiagnosticSeverity] = DiagnosticSeverity.ERROR

_OFFENSE_TO_DIAGNOSTIC: Final[dict[OffenseSeverity, DiagnosticSeverity]] = {
    OffenseSeverity.REFACTOR: DiagnosticSeverity.HINT,
    OffenseSeverity.CONVENTION: DiagnosticSeverity.INFORMATION,
    OffenseSeverity.WARNING: DiagnosticSeverity.WARNING,
    OffenseSeverity.ERROR: DiagnosticSeverity.ERROR,
    OffenseSeverity.FATAL: DiagnosticSeverity.ERROR,
}


def to_diagnostic_severity(label: str) -> DiagnosticSeverity:
    """Map a RuboCop severity label onto a :class:`DiagnosticSeverity`.

    Args:
        label: Raw severity string taken from the RuboCop payload.

    Returns:
        DiagnosticSeverity: Mapped severity; unknown labels map to
        :data:`DEFAULT_DIAGNOSTIC_SEVERITY`.
    """

    try:
        severity = OffenseSeverity(label)
    except ValueError:
        return DEFAULT_DIAGNOSTIC_SEVERITY
    return _OFFENSE_TO_DIAGNOSTIC.get(severity, DEFAULT_DIAGNOSTIC_SEVERITY)


__all__ = [
    "DEFAULT_DIAGNOSTIC_SEVERITY",
    "DiagnosticSeverity",
    "OffenseSeverity",
    "to_diagnostic_severity",
]
