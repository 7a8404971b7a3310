# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Exception hierarchy shared across rubolint."""

from __future__ import annotations


class RubolintError(Exception):
    """Base class for errors raised by rubolint."""


class ConfigError(RubolintError):
    """Raised when configuration input is invalid."""


class TaskQueueError(RubolintError):
    """Raised when the task queue is used incorrectly."""


class RunnerClosedError(RubolintError):
    """Raised when a process is requested from a closed runner."""


class AutoCorrectError(RubolintError):
    """Raised when RuboCop auto-correction cannot produce replacement source."""

    def __init__(
        self,
        message: str,
        *,
        returncode: int | None = None,
        stdout: str = "",
        stderr: str = "",
    ) -> None:
        """Initialise the error with captured process metadata.

        Args:
            message: Human-readable description of the failure.
            returncode: Exit status reported by RuboCop, when it ran at all.
            stdout: Captured standard output stream.
            stderr: Captured standard error stream.
        """

        super().__init__(message)
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr


__all__ = [
    "AutoCorrectError",
    "ConfigError",
    "RubolintError",
    "RunnerClosedError",
    "TaskQueueError",
]
