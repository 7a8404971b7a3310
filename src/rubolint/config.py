# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Configuration model and loaders for rubolint."""

from __future__ import annotations

import os
import tomllib
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Final

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .errors import ConfigError
from .process import ProcessInvocation, ProcessMode

DEFAULT_EXECUTABLE: Final[str] = "rubocop"
WINDOWS_EXECUTABLE: Final[str] = "rubocop.bat"
BUNDLER_PREFIX: Final[str] = "bundle exec"
PYPROJECT_FILENAME: Final[str] = "pyproject.toml"
CONFIG_FILENAME: Final[str] = ".rubolint.toml"
PYPROJECT_TOOL_KEY: Final[str] = "tool"
PYPROJECT_SECTION_KEY: Final[str] = "rubolint"


class LinterConfig(BaseModel):
    """Settings controlling how RuboCop is invoked and how results are surfaced."""

    model_config = ConfigDict(validate_assignment=True, extra="forbid")

    execute_path: str = ""
    use_bundler: bool = False
    config_file_path: Path | None = None
    on_save: bool = True
    suppress_rubocop_warnings: bool = False
    additional_arguments: list[str] = Field(default_factory=list)
    workspace_root: Path | None = None

    @property
    def executable_name(self) -> str:
        """Return the platform-specific RuboCop executable name."""

        return WINDOWS_EXECUTABLE if os.name == "nt" else DEFAULT_EXECUTABLE

    @property
    def command(self) -> str:
        """Return the command used to launch RuboCop.

        An explicit ``execute_path`` wins; otherwise ``use_bundler`` selects
        ``bundle exec rubocop``; otherwise the bare executable name is used.
        """

        if self.execute_path:
            return str(Path(self.execute_path) / self.executable_name)
        if self.use_bundler:
            return f"{BUNDLER_PREFIX} {self.executable_name}"
        return self.executable_name

    @property
    def mode(self) -> ProcessMode:
        """Return the process mode implied by the command."""

        if self.use_bundler and not self.execute_path:
            return ProcessMode.WRAPPED
        return ProcessMode.DIRECT

    def invocation(self, cwd: Path | None, arguments: tuple[str, ...] = ()) -> ProcessInvocation:
        """Return a :class:`ProcessInvocation` running RuboCop in ``cwd``."""

        return ProcessInvocation(command=self.command, arguments=arguments, cwd=cwd, mode=self.mode)

    def resolve_config_file(self) -> Path | None:
        """Return the configured RuboCop config file when it exists.

        Relative paths resolve against ``workspace_root`` when one is set.

        Returns:
            Path | None: Existing config file, or ``None`` when unset or missing.
        """

        if self.config_file_path is None:
            return None
        candidate = self.config_file_path
        if not candidate.is_absolute() and self.workspace_root is not None:
            candidate = self.workspace_root / candidate
        return candidate if candidate.is_file() else None


def _normalise_keys(payload: Mapping[str, Any]) -> dict[str, Any]:
    return {str(key).replace("-", "_"): value for key, value in payload.items()}


def _read_toml(path: Path) -> dict[str, Any]:
    try:
        with path.open("rb") as handle:
            return tomllib.load(handle)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"Invalid TOML in {path}: {exc}") from exc


def _section(document: Mapping[str, Any], path: Path) -> dict[str, Any]:
    tool = document.get(PYPROJECT_TOOL_KEY, {})
    section = tool.get(PYPROJECT_SECTION_KEY, {}) if isinstance(tool, Mapping) else {}
    if not isinstance(section, Mapping):
        raise ConfigError(f"[tool.rubolint] in {path} must be a table")
    return _normalise_keys(section)


def load_config(root: Path, *, overrides: Mapping[str, Any] | None = None) -> LinterConfig:
    """Load rubolint settings for the project rooted at ``root``.

    Sources are merged in order: built-in defaults, ``[tool.rubolint]`` in
    ``pyproject.toml``, ``.rubolint.toml``, then ``overrides``.

    Args:
        root: Project root searched for configuration files.
        overrides: Highest-priority values, typically from the command line.

    Returns:
        LinterConfig: Validated configuration with ``workspace_root`` defaulting to ``root``.

    Raises:
        ConfigError: If a file cannot be parsed or a value fails validation.
    """

    payload: dict[str, Any] = {"workspace_root": root}
    pyproject = root / PYPROJECT_FILENAME
    if pyproject.is_file():
        payload.update(_section(_read_toml(pyproject), pyproject))
    dedicated = root / CONFIG_FILENAME
    if dedicated.is_file():
        payload.update(_normalise_keys(_read_toml(dedicated)))
    if overrides:
        payload.update(_normalise_keys(overrides))
    try:
        return LinterConfig.model_validate(payload)
    except ValidationError as exc:
        raise ConfigError(f"Invalid rubolint configuration: {exc}") from exc


__all__ = [
    "BUNDLER_PREFIX",
    "CONFIG_FILENAME",
    "LinterConfig",
    "load_config",
]
