# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Failure taxonomy and user-facing reporting for lint runs."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Final, Protocol, runtime_checkable

from .logging import MessageKind, emit

LOGGER = logging.getLogger(__name__)

_UNSAFE_WHITESPACE: Final[re.Pattern[str]] = re.compile(r"[\r\n \t]")


class FailureKind(str, Enum):
    """Enumerate the ways a lint or auto-correct run can fail."""

    EXECUTABLE_MISSING = "executable-missing"
    EXECUTABLE_NOT_EXECUTABLE = "executable-not-executable"
    STDERR_NON_EMPTY = "stderr-non-empty"
    EMPTY_OUTPUT = "empty-output"
    MALFORMED_OUTPUT = "malformed-output"
    AUTOCORRECT_SOFT_FAILURE = "autocorrect-soft-failure"
    AUTOCORRECT_HARD_FAILURE = "autocorrect-hard-failure"


@dataclass(frozen=True, slots=True)
class Failure:
    """Classified failure carrying the message shown to the user."""

    kind: FailureKind
    message: str
    detail: str = ""


@runtime_checkable
class Notifier(Protocol):
    """Surface user-facing warnings at the editor boundary."""

    def warn(self, message: str) -> None:
        """Display ``message`` as a warning."""


@dataclass(slots=True)
class ConsoleNotifier:
    """Notifier that prints warnings to the console."""

    use_emoji: bool = True
    use_color: bool | None = None

    def warn(self, message: str) -> None:
        """Display ``message`` as a console warning."""

        emit(MessageKind.WARN, message, use_emoji=self.use_emoji, use_color=self.use_color)


def single_line(text: str) -> str:
    """Return ``text`` with carriage returns, newlines, tabs and spaces replaced by spaces."""

    return _UNSAFE_WHITESPACE.sub(" ", text)


def executable_missing(command: str, detail: str = "") -> Failure:
    """Describe a command that could not be found."""

    return Failure(
        FailureKind.EXECUTABLE_MISSING,
        f"{command} is not executable (command not found). Please check the execute path setting.",
        detail,
    )


def executable_not_executable(command: str, detail: str = "") -> Failure:
    """Describe a command that exists but cannot be executed."""

    message = f"{command} is not executable"
    if detail:
        message = f"{message}: {detail.strip()}"
    return Failure(FailureKind.EXECUTABLE_NOT_EXECUTABLE, message, detail)


def stderr_non_empty(stderr: str) -> Failure:
    """Describe diagnostic text RuboCop wrote to its error stream."""

    return Failure(FailureKind.STDERR_NON_EMPTY, stderr, stderr)


def empty_output(command: str) -> Failure:
    """Describe a run that produced no output at all."""

    return Failure(
        FailureKind.EMPTY_OUTPUT,
        f"command {command} returns empty output! please check configuration.",
    )


def malformed_output(output: str) -> Failure:
    """Describe output that could not be decoded as a RuboCop JSON report."""

    sanitized = single_line(output)
    return Failure(
        FailureKind.MALFORMED_OUTPUT,
        f'Error on parsing output (it might be non-JSON output) : "{sanitized}"',
        sanitized,
    )


def autocorrect_hard_failure(detail: str = "") -> Failure:
    """Describe an auto-correct run whose output cannot be used."""

    return Failure(FailureKind.AUTOCORRECT_HARD_FAILURE, "An error occurred during auto-correction", detail)


def report_failure(notifier: Notifier, failure: Failure) -> None:
    """Show ``failure`` to the user exactly once.

    Args:
        notifier: Editor boundary receiving the warning.
        failure: Classified failure to surface.
    """

    LOGGER.debug("reporting %s failure: %s", failure.kind.value, failure.detail or failure.message)
    notifier.warn(failure.message)


__all__ = [
    "ConsoleNotifier",
    "Failure",
    "FailureKind",
    "Notifier",
    "autocorrect_hard_failure",
    "empty_output",
    "executable_missing",
    "executable_not_executable",
    "malformed_output",
    "report_failure",
    "single_line",
    "stderr_non_empty",
]
