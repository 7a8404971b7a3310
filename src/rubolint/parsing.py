# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Decode RuboCop's JSON report into typed offenses."""

from __future__ import annotations

from typing import TypeAlias

from collections.abc import Iterator

from pydantic import BaseModel, ConfigDict, ValidationError

from .failures import Failure, empty_output, malformed_output


class OffenseLocation(BaseModel):
    """One-based location of an offense inside the inspected source."""

    model_config = ConfigDict(frozen=True)

    line: int
    column: int
    length: int


class Offense(BaseModel):
    """Single issue reported by a RuboCop cop.

    ``severity`` is kept as the raw label so unknown values survive decoding
    and fall through to the default diagnostic severity.
    """

    model_config = ConfigDict(frozen=True)

    severity: str
    message: str
    cop_name: str
    location: OffenseLocation
    corrected: bool = False
    correctable: bool = False


class OffenseFile(BaseModel):
    """Offenses reported for one inspected file."""

    model_config = ConfigDict(frozen=True)

    offenses: tuple[Offense, ...]
    path: str = ""


class AnalysisResult(BaseModel):
    """Ordered collection of inspected files and their offenses."""

    model_config = ConfigDict(frozen=True)

    files: tuple[OffenseFile, ...]

    def iter_offenses(self) -> Iterator[Offense]:
        """Yield every offense across all files in report order."""

        for file in self.files:
            yield from file.offenses

    @property
    def offense_count(self) -> int:
        """Return the total number of offenses in the report."""

        return sum(len(file.offenses) for file in self.files)


ParseOutcome: TypeAlias = AnalysisResult | Failure


def parse_output(stdout: str, *, command: str = "rubocop") -> ParseOutcome:
    """Convert raw RuboCop output into an :class:`AnalysisResult` or a failure.

    Args:
        stdout: Text RuboCop wrote to standard output.
        command: Command name quoted in the empty-output message.

    Returns:
        ParseOutcome: The decoded report, or a :class:`Failure` classified as
        ``EMPTY_OUTPUT`` or ``MALFORMED_OUTPUT``. Values inside a structurally
        valid report are passed through unchanged.
    """

    if not stdout:
        return empty_output(command)
    try:
        return AnalysisResult.model_validate_json(stdout)
    except ValidationError:
        return malformed_output(stdout)


__all__ = [
    "AnalysisResult",
    "Offense",
    "OffenseFile",
    "OffenseLocation",
    "ParseOutcome",
    "parse_output",
]
