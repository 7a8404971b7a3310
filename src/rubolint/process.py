# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Spawn RuboCop, stream the document to it and collect its output."""

from __future__ import annotations

import logging
import os
import shlex
import signal

# Bandit: subprocess usage is intentional; the command comes from validated
# linter configuration and shell mode is only used for wrapper commands.
import subprocess  # nosec B404
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, replace
from enum import Enum
from pathlib import Path
from threading import Lock
from typing import Final, Protocol

from .errors import RunnerClosedError
from .failures import FailureKind

LOGGER = logging.getLogger(__name__)

SHELL_COMMAND_NOT_FOUND: Final[int] = 127
SHELL_COMMAND_NOT_EXECUTABLE: Final[int] = 126
DEFAULT_MAX_WORKERS: Final[int] = 4
ENCODING: Final[str] = "utf-8"
_IS_POSIX: Final[bool] = os.name == "posix"


class ProcessMode(str, Enum):
    """Select how the executable is launched."""

    DIRECT = "direct"
    WRAPPED = "wrapped"


@dataclass(frozen=True, slots=True)
class ProcessInvocation:
    """Resolved command line for one RuboCop execution.

    Attributes:
        command: Executable path, or a wrapper command line such as
            ``bundle exec rubocop`` in wrapped mode.
        arguments: Arguments appended after the command.
        cwd: Working directory for the process.
        mode: Direct argument-vector execution or shell-wrapped execution.
    """

    command: str
    arguments: tuple[str, ...] = ()
    cwd: Path | None = None
    mode: ProcessMode = ProcessMode.DIRECT

    def with_arguments(self, *extra: str) -> ProcessInvocation:
        """Return a copy with ``extra`` appended to the argument list."""

        return replace(self, arguments=(*self.arguments, *extra))

    def shell_command(self) -> str:
        """Return the command string handed to the shell in wrapped mode."""

        return " ".join([self.command, *(shlex.quote(argument) for argument in self.arguments)])

    def popen_target(self) -> str | list[str]:
        """Return the first argument for :class:`subprocess.Popen`."""

        if self.mode is ProcessMode.WRAPPED:
            return self.shell_command()
        return [self.command, *self.arguments]

    @property
    def uses_shell(self) -> bool:
        """Return ``True`` when the invocation runs through the shell."""

        return self.mode is ProcessMode.WRAPPED


@dataclass(frozen=True, slots=True)
class ProcessCompletion:
    """Outcome of a finished (or failed to start) process.

    Attributes:
        returncode: Exit status, ``None`` when the process never started.
        stdout: Collected standard output.
        stderr: Collected standard error, or the spawn error text.
        failure: Spawn-level failure classification, if any.
        killed: ``True`` when the process was killed before completing.
    """

    returncode: int | None
    stdout: str = ""
    stderr: str = ""
    failure: FailureKind | None = None
    killed: bool = False


CompletionCallback = Callable[[ProcessCompletion], None]


class Killable(Protocol):
    """Handle exposing the ability to terminate a running process."""

    def kill(self) -> None:
        """Terminate the underlying process."""


class Spawner(Protocol):
    """Start a process for an invocation and report completion asynchronously."""

    def spawn(
        self,
        invocation: ProcessInvocation,
        source: str,
        on_complete: CompletionCallback,
    ) -> Killable:
        """Start ``invocation`` feeding ``source`` to stdin."""


def classify_spawn_error(exc: OSError) -> FailureKind:
    """Map an exception raised while spawning onto a :class:`FailureKind`.

    Args:
        exc: Error raised by :class:`subprocess.Popen`.

    Returns:
        FailureKind: ``EXECUTABLE_MISSING`` for missing executables, otherwise
        ``EXECUTABLE_NOT_EXECUTABLE``.
    """

    if isinstance(exc, FileNotFoundError):
        return FailureKind.EXECUTABLE_MISSING
    # PermissionError, ENOEXEC and other exec failures
    return FailureKind.EXECUTABLE_NOT_EXECUTABLE


def classify_exit(invocation: ProcessInvocation, returncode: int | None) -> FailureKind | None:
    """Return the failure signalled by a wrapper shell's exit status, if any."""

    if not invocation.uses_shell:
        return None
    if returncode == SHELL_COMMAND_NOT_FOUND:
        return FailureKind.EXECUTABLE_MISSING
    if returncode == SHELL_COMMAND_NOT_EXECUTABLE:
        return FailureKind.EXECUTABLE_NOT_EXECUTABLE
    return None


def _popen(invocation: ProcessInvocation) -> subprocess.Popen[bytes]:
    # Bandit: wrapped mode deliberately delegates to the shell so wrapper
    # commands such as ``bundle exec`` resolve as the user configured them.
    return subprocess.Popen(  # nosec B602 B603
        invocation.popen_target(),
        cwd=str(invocation.cwd) if invocation.cwd is not None else None,
        shell=invocation.uses_shell,
        stdin=subprocess.PIPE,
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
        start_new_session=_IS_POSIX,
    )


def _decode(data: bytes | None) -> str:
    return data.decode(ENCODING, errors="replace") if data else ""


class ProcessHandle:
    """Own one external process and allow it to be killed mid-flight."""

    def __init__(self, process: subprocess.Popen[bytes] | None, *, process_group: bool = False) -> None:
        self._process = process
        self._process_group = process_group
        self._killed = False
        self._lock = Lock()

    @property
    def process(self) -> subprocess.Popen[bytes] | None:
        """Return the wrapped process, ``None`` when spawning failed."""

        return self._process

    @property
    def killed(self) -> bool:
        """Return ``True`` once :meth:`kill` has been called."""

        with self._lock:
            return self._killed

    @property
    def running(self) -> bool:
        """Return ``True`` while the process has not exited."""

        return self._process is not None and self._process.poll() is None

    def kill(self) -> None:
        """Terminate the process; later calls and calls after exit are no-ops."""

        with self._lock:
            if self._killed:
                return
            self._killed = True
        process = self._process
        if process is None or process.poll() is not None:
            return
        LOGGER.debug("killing rubocop process pid=%s", process.pid)
        try:
            if self._process_group:
                os.killpg(process.pid, signal.SIGKILL)
            else:
                process.kill()
        except ProcessLookupError:
            return


class ProcessRunner:
    """Launch RuboCop processes and deliver their completion on worker threads."""

    def __init__(self, *, max_workers: int = DEFAULT_MAX_WORKERS) -> None:
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="rubolint-process")
        self._lock = Lock()
        self._closed = False

    def spawn(
        self,
        invocation: ProcessInvocation,
        source: str,
        on_complete: CompletionCallback,
    ) -> ProcessHandle:
        """Start ``invocation``, write ``source`` to its stdin and close it.

        Args:
            invocation: Resolved command line to execute.
            source: Full document text streamed to the process.
            on_complete: Callback receiving the :class:`ProcessCompletion`.
                It always runs on a worker thread, including for spawn failures.

        Returns:
            ProcessHandle: Handle that can kill the process while it runs.

        Raises:
            RunnerClosedError: If the runner has been closed; no process is started.
        """

        with self._lock:
            if self._closed:
                raise RunnerClosedError(f"process runner is closed; not starting {invocation.command}")
            try:
                process = _popen(invocation)
            except OSError as exc:
                LOGGER.debug("failed to spawn %s: %s", invocation.command, exc)
                completion = ProcessCompletion(
                    returncode=None,
                    stderr=str(exc),
                    failure=classify_spawn_error(exc),
                )
                self._executor.submit(_deliver, on_complete, completion)
                return ProcessHandle(None)

            LOGGER.debug("spawned %s pid=%s", invocation.command, process.pid)
            handle = ProcessHandle(process, process_group=_IS_POSIX)
            self._executor.submit(_communicate, invocation, handle, source, on_complete)
        return handle

    @property
    def closed(self) -> bool:
        """Return ``True`` once :meth:`close` has been called."""

        with self._lock:
            return self._closed

    def close(self, *, wait: bool = True) -> None:
        """Refuse further spawns and shut down the worker threads.

        Processes already running are left to finish; kill them first to
        return promptly.
        """

        with self._lock:
            self._closed = True
        self._executor.shutdown(wait=wait)

    def __enter__(self) -> ProcessRunner:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


def _communicate(
    invocation: ProcessInvocation,
    handle: ProcessHandle,
    source: str,
    on_complete: CompletionCallback,
) -> None:
    process = handle.process
    if process is None:
        return
    stdout, stderr = process.communicate(input=source.encode(ENCODING))
    completion = ProcessCompletion(
        returncode=process.returncode,
        stdout=_decode(stdout),
        stderr=_decode(stderr),
        failure=classify_exit(invocation, process.returncode),
        killed=handle.killed,
    )
    _deliver(on_complete, completion)


def _deliver(on_complete: CompletionCallback, completion: ProcessCompletion) -> None:
    try:
        on_complete(completion)
    except Exception:
        LOGGER.exception("rubocop completion callback failed")


def run_sync(invocation: ProcessInvocation, source: str) -> ProcessCompletion:
    """Run ``invocation`` to completion, feeding ``source`` on stdin.

    Args:
        invocation: Resolved command line to execute.
        source: Full document text streamed to the process.

    Returns:
        ProcessCompletion: Collected output; spawn failures are reported in
        :attr:`ProcessCompletion.failure` rather than raised.
    """

    try:
        # Bandit: see :func:`_popen`.
        completed = subprocess.run(  # nosec B602 B603
            invocation.popen_target(),
            cwd=str(invocation.cwd) if invocation.cwd is not None else None,
            shell=invocation.uses_shell,
            input=source.encode(ENCODING),
            capture_output=True,
            check=False,
        )
    except OSError as exc:
        return ProcessCompletion(returncode=None, stderr=str(exc), failure=classify_spawn_error(exc))
    return ProcessCompletion(
        returncode=completed.returncode,
        stdout=_decode(completed.stdout),
        stderr=_decode(completed.stderr),
        failure=classify_exit(invocation, completed.returncode),
    )


__all__ = [
    "CompletionCallback",
    "Killable",
    "ProcessCompletion",
    "ProcessHandle",
    "ProcessInvocation",
    "ProcessMode",
    "ProcessRunner",
    "SHELL_COMMAND_NOT_EXECUTABLE",
    "SHELL_COMMAND_NOT_FOUND",
    "Spawner",
    "classify_exit",
    "classify_spawn_error",
    "run_sync",
]
