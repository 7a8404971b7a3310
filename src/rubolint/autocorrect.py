# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Synchronous RuboCop auto-correction used for document formatting."""

from __future__ import annotations

import logging
import re
from collections.abc import Callable
from typing import Final, TypeAlias

from .arguments import AUTOCORRECT_ARGUMENTS
from .errors import AutoCorrectError
from .failures import FailureKind, Notifier, autocorrect_hard_failure, report_failure
from .models import Range, TextDocument, TextEdit
from .process import ProcessCompletion, ProcessInvocation, run_sync

LOGGER = logging.getLogger(__name__)

# Output looks like:
#
#   Inspecting 1 file
#   ...
#   ====================
#   def a
#     3
#   end
CORRECTED_SOURCE_PATTERN: Final[re.Pattern[str]] = re.compile(
    r"^[^\n]*\n={20}\r?\n(.*)",
    re.MULTILINE | re.DOTALL,
)
CLEAN_RETURN_CODE: Final[int] = 0
OFFENSES_REMAIN_RETURN_CODE: Final[int] = 1

SyncRunner: TypeAlias = Callable[[ProcessInvocation, str], ProcessCompletion]


def extract_corrected_source(stdout: str) -> str | None:
    """Return everything after the ``====================`` delimiter line, if present."""

    match = CORRECTED_SOURCE_PATTERN.search(stdout)
    if match is None:
        return None
    return match.group(1)


def autocorrect(
    invocation: ProcessInvocation,
    source: str,
    *,
    runner: SyncRunner = run_sync,
) -> str:
    """Run RuboCop with ``--auto-correct`` and return the corrected source.

    Exit status 0 and exit status 1 (offenses remain) are both usable.

    Args:
        invocation: Base invocation carrying the ``--stdin`` arguments.
        source: Full document text.
        runner: Blocking process runner.

    Returns:
        str: Corrected source text.

    Raises:
        AutoCorrectError: When RuboCop could not run, exited with any other
            status, or produced output without the delimiter line.
    """

    completion = runner(invocation.with_arguments(*AUTOCORRECT_ARGUMENTS), source)
    if completion.failure is not None or completion.returncode not in {CLEAN_RETURN_CODE, OFFENSES_REMAIN_RETURN_CODE}:
        raise AutoCorrectError(
            f"{invocation.command} exited with status {completion.returncode}",
            returncode=completion.returncode,
            stdout=completion.stdout,
            stderr=completion.stderr,
        )
    corrected = extract_corrected_source(completion.stdout)
    if corrected is None:
        raise AutoCorrectError(
            f"Error parsing auto-correction from CLI: {completion.stdout}",
            returncode=completion.returncode,
            stdout=completion.stdout,
            stderr=completion.stderr,
        )
    if completion.returncode == OFFENSES_REMAIN_RETURN_CODE:
        LOGGER.info(
            "%s: %s left offenses it could not correct",
            FailureKind.AUTOCORRECT_SOFT_FAILURE.value,
            invocation.command,
        )
    return corrected


def full_document_range(document: TextDocument) -> Range:
    """Return a range covering the whole of ``document``."""

    return Range.create(0, 0, document.line_count, 0)


def formatting_edits(
    document: TextDocument,
    invocation: ProcessInvocation,
    *,
    notifier: Notifier,
    runner: SyncRunner = run_sync,
) -> list[TextEdit]:
    """Return the whole-document replacement produced by auto-correction.

    Hard failures are reported through ``notifier`` and yield no edits.
    """

    try:
        corrected = autocorrect(invocation, document.text, runner=runner)
    except AutoCorrectError as exc:
        LOGGER.debug("auto-correction failed: %s (stderr: %s)", exc, exc.stderr)
        report_failure(notifier, autocorrect_hard_failure(str(exc)))
        return []
    return [TextEdit.replace(full_document_range(document), corrected)]


__all__ = [
    "CORRECTED_SOURCE_PATTERN",
    "autocorrect",
    "extract_corrected_source",
    "formatting_edits",
    "full_document_range",
]
