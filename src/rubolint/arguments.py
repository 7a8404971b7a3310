# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Command-line argument contract for RuboCop invocations."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import Final

JSON_FORMAT_ARGUMENTS: Final[tuple[str, ...]] = ("--format", "json")
AUTOCORRECT_ARGUMENTS: Final[tuple[str, ...]] = ("--auto-correct",)


def base_arguments(document_path: Path, *, config_file: Path | None = None) -> tuple[str, ...]:
    """Return the arguments shared by diagnostic and correction runs.

    Args:
        document_path: Path RuboCop reports for the text read from stdin.
        config_file: Resolved RuboCop configuration file, when one was found.

    Returns:
        tuple[str, ...]: ``--stdin <path> --force-exclusion`` optionally
        followed by ``--config <file>``.
    """

    arguments: list[str] = ["--stdin", str(document_path), "--force-exclusion"]
    if config_file is not None:
        arguments.extend(("--config", str(config_file)))
    return tuple(arguments)


def lint_arguments(
    document_path: Path,
    *,
    config_file: Path | None = None,
    additional: Sequence[str] = (),
) -> tuple[str, ...]:
    """Return the arguments for a diagnostic (JSON report) run."""

    return (*base_arguments(document_path, config_file=config_file), *additional, *JSON_FORMAT_ARGUMENTS)


__all__ = [
    "AUTOCORRECT_ARGUMENTS",
    "JSON_FORMAT_ARGUMENTS",
    "base_arguments",
    "lint_arguments",
]
