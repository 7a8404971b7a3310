# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Shared pytest fixtures."""

from __future__ import annotations

import json
import os
import stat
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

import pytest

from rubolint.failures import FailureKind
from rubolint.process import CompletionCallback, ProcessCompletion, ProcessInvocation

SCRIPT_TEMPLATE = """#!/bin/sh
printf '%s\\n' "$@" > "{directory}/args.txt"
cat > "{directory}/stdin.txt"
pwd > "{directory}/cwd.txt"
{sleep}
cat "{directory}/stdout.txt"
cat "{directory}/stderr.txt" >&2
exit {exit_code}
"""


def offense_payload(*offenses: dict[str, object], path: str = "app.rb") -> str:
    """Return a RuboCop JSON report containing ``offenses`` for one file."""

    return json.dumps(
        {
            "metadata": {"rubocop_version": "1.60.0"},
            "files": [{"path": path, "offenses": list(offenses)}],
            "summary": {"offense_count": len(offenses), "target_file_count": 1, "inspected_file_count": 1},
        },
    )


def offense(
    *,
    line: int = 1,
    column: int = 1,
    length: int = 1,
    severity: str = "convention",
    message: str = "Issue",
    cop_name: str = "Style/Example",
) -> dict[str, object]:
    """Return a single offense entry in RuboCop's JSON shape."""

    return {
        "severity": severity,
        "message": message,
        "cop_name": cop_name,
        "corrected": False,
        "correctable": True,
        "location": {"line": line, "column": column, "length": length},
    }


@dataclass(slots=True)
class FakeRubocop:
    """Shell script standing in for the rubocop executable."""

    directory: Path

    @property
    def executable(self) -> Path:
        return self.directory / "rubocop"

    def configure(self, *, stdout: str = "", stderr: str = "", exit_code: int = 0, delay: float = 0.0) -> None:
        (self.directory / "stdout.txt").write_text(stdout, encoding="utf-8")
        (self.directory / "stderr.txt").write_text(stderr, encoding="utf-8")
        sleep = f"sleep {delay}" if delay else ""
        script = SCRIPT_TEMPLATE.format(directory=self.directory, sleep=sleep, exit_code=exit_code)
        self.executable.write_text(script, encoding="utf-8")
        self.executable.chmod(self.executable.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)

    @property
    def arguments(self) -> list[str]:
        return (self.directory / "args.txt").read_text(encoding="utf-8").splitlines()

    @property
    def stdin(self) -> str:
        return (self.directory / "stdin.txt").read_bytes().decode("utf-8")

    @property
    def cwd(self) -> Path:
        return Path((self.directory / "cwd.txt").read_text(encoding="utf-8").strip())


@pytest.fixture
def fake_rubocop(tmp_path: Path) -> FakeRubocop:
    if os.name != "posix":
        pytest.skip("fake rubocop script requires a POSIX shell")
    directory = tmp_path / "bin"
    directory.mkdir()
    fake = FakeRubocop(directory)
    fake.configure(stdout=offense_payload())
    return fake


@dataclass(slots=True)
class RecordingNotifier:
    messages: list[str] = field(default_factory=list)

    def warn(self, message: str) -> None:
        self.messages.append(message)


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@dataclass(slots=True)
class SpawnRecord:
    invocation: ProcessInvocation
    source: str
    on_complete: CompletionCallback
    killed: bool = False

    def kill(self) -> None:
        self.killed = True

    def complete(
        self,
        stdout: str = "",
        *,
        stderr: str = "",
        returncode: int | None = 0,
        failure: FailureKind | None = None,
    ) -> None:
        self.on_complete(
            ProcessCompletion(
                returncode=returncode,
                stdout=stdout,
                stderr=stderr,
                failure=failure,
                killed=self.killed,
            ),
        )


@dataclass(slots=True)
class FakeSpawner:
    """Spawner that records invocations and lets tests complete them by hand."""

    spawned: list[SpawnRecord] = field(default_factory=list)
    on_spawn: Callable[[SpawnRecord], None] | None = None

    def spawn(
        self,
        invocation: ProcessInvocation,
        source: str,
        on_complete: CompletionCallback,
    ) -> SpawnRecord:
        record = SpawnRecord(invocation=invocation, source=source, on_complete=on_complete)
        self.spawned.append(record)
        if self.on_spawn is not None:
            self.on_spawn(record)
        return record


@pytest.fixture
def fake_spawner() -> FakeSpawner:
    return FakeSpawner()


@pytest.fixture
def make_offense() -> Callable[..., dict[str, object]]:
    return offense


@pytest.fixture
def make_payload() -> Callable[..., str]:
    return offense_payload
