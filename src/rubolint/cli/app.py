# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""CLI application entry point wiring commands and shared services."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer

from .autocorrect import run_autocorrect
from .lint import run_lint
from .shared import CLIError, build_cli_logger, enable_debug_logging, resolve_config

app = typer.Typer(
    name="rubolint",
    help="Run RuboCop with single-flight scheduling and editor-style diagnostics.",
    no_args_is_help=True,
    add_completion=False,
)

RootOption = Annotated[
    Path,
    typer.Option("--root", file_okay=False, resolve_path=True, help="Workspace root used as working directory."),
]
ExecutePathOption = Annotated[
    str,
    typer.Option("--execute-path", help="Directory containing the rubocop executable."),
]
BundlerOption = Annotated[bool, typer.Option("--bundler", help="Run rubocop through 'bundle exec'.")]
ConfigFileOption = Annotated[
    Path | None,
    typer.Option("--config", dir_okay=False, help="RuboCop configuration file passed with --config."),
]
EmojiOption = Annotated[bool, typer.Option("--emoji/--no-emoji", help="Decorate messages with emoji.")]
DebugOption = Annotated[bool, typer.Option("--debug", help="Print internal scheduling and process logs.")]


@app.command("lint")
def lint_command(
    paths: Annotated[
        list[Path],
        typer.Argument(exists=True, dir_okay=False, readable=True, resolve_path=True, help="Ruby files to lint."),
    ],
    root: RootOption = Path(),
    execute_path: ExecutePathOption = "",
    bundler: BundlerOption = False,
    config_file: ConfigFileOption = None,
    suppress_warnings: Annotated[
        bool,
        typer.Option("--suppress-warnings", help="Ignore text RuboCop writes to stderr."),
    ] = False,
    output_json: Annotated[bool, typer.Option("--json", help="Emit diagnostics as JSON.")] = False,
    timeout: Annotated[float | None, typer.Option("--timeout", min=0, help="Seconds to wait for RuboCop.")] = None,
    emoji: EmojiOption = True,
    debug: DebugOption = False,
) -> None:
    """Lint Ruby files and print their diagnostics."""

    if debug:
        enable_debug_logging()
    logger = build_cli_logger(emoji=emoji)
    try:
        config = resolve_config(
            root,
            execute_path=execute_path,
            use_bundler=bundler,
            config_file=config_file,
            suppress_warnings=suppress_warnings,
        )
        exit_code = run_lint(paths, config=config, logger=logger, output_json=output_json, timeout=timeout)
    except CLIError as exc:
        logger.fail(str(exc))
        raise typer.Exit(code=exc.exit_code) from exc
    raise typer.Exit(code=exit_code)


@app.command("autocorrect")
def autocorrect_command(
    path: Annotated[
        Path,
        typer.Argument(exists=True, dir_okay=False, readable=True, resolve_path=True, help="Ruby file to correct."),
    ],
    write: Annotated[bool, typer.Option("--write", "-w", help="Overwrite the file in place.")] = False,
    root: RootOption = Path(),
    execute_path: ExecutePathOption = "",
    bundler: BundlerOption = False,
    config_file: ConfigFileOption = None,
    emoji: EmojiOption = True,
    debug: DebugOption = False,
) -> None:
    """Auto-correct a Ruby file with RuboCop."""

    if debug:
        enable_debug_logging()
    logger = build_cli_logger(emoji=emoji)
    try:
        config = resolve_config(root, execute_path=execute_path, use_bundler=bundler, config_file=config_file)
    except CLIError as exc:
        logger.fail(str(exc))
        raise typer.Exit(code=exc.exit_code) from exc
    raise typer.Exit(code=run_autocorrect(path, config=config, logger=logger, write=write))


def main() -> None:
    """Console-script entry point."""

    app()


__all__ = ["app", "main"]
