# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Services behind the ``rubolint lint`` command."""

from __future__ import annotations

import json
from collections.abc import Sequence
from pathlib import Path
from typing import Final

from rich.text import Text

from ..config import LinterConfig
from ..linter import Linter
from ..models import Diagnostic, TextDocument
from ..severity import DiagnosticSeverity
from .shared import CLIError, CLILogger

_SEVERITY_STYLES: Final[dict[DiagnosticSeverity, str]] = {
    DiagnosticSeverity.ERROR: "bold red",
    DiagnosticSeverity.WARNING: "yellow",
    DiagnosticSeverity.INFORMATION: "cyan",
    DiagnosticSeverity.HINT: "dim",
}


def _display_path(path: Path, root: Path | None) -> str:
    if root is not None:
        try:
            return path.relative_to(root.resolve()).as_posix()
        except ValueError:
            pass
    return str(path)


def render_diagnostics(
    results: Sequence[tuple[TextDocument, Sequence[Diagnostic]]],
    *,
    logger: CLILogger,
    root: Path | None,
) -> None:
    """Print one ``path:line:column: severity message`` line per diagnostic."""

    total = 0
    for document, diagnostics in results:
        location = _display_path(document.path, root)
        for diagnostic in diagnostics:
            start = diagnostic.range.start
            line = Text(f"{location}:{start.line + 1}:{start.character + 1}: ")
            line.append(diagnostic.severity.label, style=_SEVERITY_STYLES[diagnostic.severity])
            line.append(f" {diagnostic.message}")
            logger.console.print(line)
            total += 1
    if total:
        logger.warn(f"{total} offense(s) in {len(results)} file(s)")
    else:
        logger.ok(f"No offenses in {len(results)} file(s)")


def dump_diagnostics(results: Sequence[tuple[TextDocument, Sequence[Diagnostic]]]) -> str:
    """Return the diagnostics as a JSON document keyed by file path."""

    payload = [
        {
            "path": str(document.path),
            "uri": document.uri,
            "diagnostics": [diagnostic.to_dict() for diagnostic in diagnostics],
        }
        for document, diagnostics in results
    ]
    return json.dumps(payload, indent=2)


def run_lint(
    paths: Sequence[Path],
    *,
    config: LinterConfig,
    logger: CLILogger,
    output_json: bool = False,
    timeout: float | None = None,
) -> int:
    """Lint ``paths`` through the scheduler and print the published diagnostics.

    Args:
        paths: Ruby files to lint.
        config: Resolved linter configuration.
        logger: CLI logger; also receives lint failure warnings.
        output_json: Emit JSON instead of human-readable lines.
        timeout: Seconds to wait for all runs, ``None`` to wait forever.

    Returns:
        int: ``1`` when any diagnostic has error severity, otherwise ``0``.

    Raises:
        CLIError: If the runs did not finish within ``timeout``.
    """

    documents = [TextDocument.from_path(path) for path in paths]
    with Linter(config, notifier=logger) as linter:
        linter.lint_open_documents(documents)
        if not linter.queue.wait_idle(timeout):
            raise CLIError(f"RuboCop did not finish within {timeout} seconds", exit_code=2)
        results = [(document, linter.store.diagnostics(document.key)) for document in documents]

    if output_json:
        logger.echo(dump_diagnostics(results))
    else:
        render_diagnostics(results, logger=logger, root=config.workspace_root)
    has_errors = any(
        diagnostic.severity is DiagnosticSeverity.ERROR for _document, diagnostics in results for diagnostic in diagnostics
    )
    return 1 if has_errors else 0


__all__ = ["dump_diagnostics", "render_diagnostics", "run_lint"]
