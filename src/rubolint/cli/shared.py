# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Shared utilities for CLI commands (logging, errors, configuration)."""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import typer
from rich.console import Console

from ..config import LinterConfig, load_config
from ..errors import ConfigError
from ..logging import MessageKind, emit

PACKAGE_LOGGER = logging.getLogger("rubolint")


class CLIError(RuntimeError):
    """Error raised when a CLI command fails and should exit with a status code."""

    def __init__(self, message: str, *, exit_code: int = 1) -> None:
        """Initialise the error with a message and exit code.

        Args:
            message: Human-readable error message shown to the user.
            exit_code: Exit status associated with the failure.
        """

        super().__init__(message)
        self.exit_code = exit_code


@dataclass(slots=True)
class CLILogger:
    """Adapter around project logging helpers respecting CLI emoji settings.

    Also satisfies :class:`rubolint.failures.Notifier`, so lint failures show up
    as CLI warnings.
    """

    console: Console
    use_emoji: bool

    def fail(self, message: str) -> None:
        """Log a failure message honouring emoji preferences."""

        emit(MessageKind.FAIL, message, use_emoji=self.use_emoji)

    def warn(self, message: str) -> None:
        """Log a warning message honouring emoji preferences."""

        emit(MessageKind.WARN, message, use_emoji=self.use_emoji)

    def ok(self, message: str) -> None:
        """Log a success message honouring emoji preferences."""

        emit(MessageKind.OK, message, use_emoji=self.use_emoji)

    def info(self, message: str) -> None:
        """Log an informational message honouring emoji preferences."""

        emit(MessageKind.INFO, message, use_emoji=self.use_emoji)

    def echo(self, message: str, *, newline: bool = True) -> None:
        """Write ``message`` to stdout using Typer's echo helper."""

        typer.echo(message, nl=newline)


def build_cli_logger(*, emoji: bool, no_color: bool = False) -> CLILogger:
    """Return a ``CLILogger`` bound to a dedicated stdout Rich console.

    Args:
        emoji: Whether log output may include emoji glyphs.
        no_color: Whether terminal colour output should be disabled.

    Returns:
        CLILogger: Logger instance for the running command.
    """

    console = Console(no_color=no_color, highlight=False)
    return CLILogger(console=console, use_emoji=emoji)


def enable_debug_logging() -> None:
    """Stream rubolint's internal debug records to stderr."""

    if getattr(PACKAGE_LOGGER, "_rubolint_debug_configured", False):
        return
    handler = logging.StreamHandler(stream=sys.stderr)
    handler.setFormatter(logging.Formatter("[debug] %(name)s: %(message)s"))
    PACKAGE_LOGGER.addHandler(handler)
    PACKAGE_LOGGER.setLevel(logging.DEBUG)
    PACKAGE_LOGGER.propagate = False
    setattr(PACKAGE_LOGGER, "_rubolint_debug_configured", True)


def resolve_config(
    root: Path,
    *,
    execute_path: str | None = None,
    use_bundler: bool = False,
    config_file: Path | None = None,
    suppress_warnings: bool = False,
) -> LinterConfig:
    """Load configuration for ``root`` with command-line overrides applied.

    Only options given explicitly on the command line override file settings.

    Raises:
        CLIError: If configuration files are invalid.
    """

    overrides: dict[str, Any] = {}
    if execute_path:
        overrides["execute_path"] = execute_path
    if use_bundler:
        overrides["use_bundler"] = True
    if config_file is not None:
        overrides["config_file_path"] = config_file
    if suppress_warnings:
        overrides["suppress_rubocop_warnings"] = True
    try:
        return load_config(root, overrides=overrides)
    except ConfigError as exc:
        raise CLIError(str(exc), exit_code=2) from exc


__all__ = [
    "CLIError",
    "CLILogger",
    "build_cli_logger",
    "enable_debug_logging",
    "resolve_config",
]
