# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Services behind the ``rubolint autocorrect`` command."""

from __future__ import annotations

from pathlib import Path

from ..config import LinterConfig
from ..edits import apply_edits
from ..linter import Linter
from ..models import TextDocument
from .shared import CLILogger


def run_autocorrect(path: Path, *, config: LinterConfig, logger: CLILogger, write: bool = False) -> int:
    """Auto-correct ``path`` and print or write the corrected source.

    Args:
        path: Ruby file to correct.
        config: Resolved linter configuration.
        logger: CLI logger; also receives the hard-failure warning.
        write: Overwrite ``path`` instead of printing to stdout.

    Returns:
        int: ``0`` on success, ``1`` when auto-correction failed.
    """

    document = TextDocument.from_path(path)
    with Linter(config, notifier=logger) as linter:
        edits = linter.format_document(document)
    if not edits:
        return 1
    corrected = apply_edits(document.text, edits)
    if write:
        if corrected != document.text:
            with document.path.open("w", encoding="utf-8", newline="") as handle:
                handle.write(corrected)
            logger.ok(f"Corrected {path}")
        else:
            logger.info(f"{path} already clean")
        return 0
    logger.echo(corrected, newline=False)
    return 0


__all__ = ["run_autocorrect"]
