# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Orchestrate RuboCop runs for editor documents.

:class:`Linter` turns document lifecycle events into lint requests, schedules
them through the single-flight :class:`~rubolint.scheduling.TaskQueue`, runs
RuboCop through a :class:`~rubolint.process.Spawner`, and republishes the
parsed diagnostics and quick fixes into a
:class:`~rubolint.state.PublishedStateStore`. A canceled run publishes and
reports nothing.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from enum import Enum
from functools import partial
from pathlib import Path
from typing import Final, TypeAlias

from .arguments import base_arguments, lint_arguments
from .autocorrect import formatting_edits
from .config import LinterConfig
from .diagnostics import publish
from .failures import (
    ConsoleNotifier,
    Failure,
    FailureKind,
    Notifier,
    executable_missing,
    executable_not_executable,
    report_failure,
    stderr_non_empty,
)
from .models import CodeAction, LintRequest, Range, ResourceKey, TextDocument, TextEdit
from .parsing import parse_output
from .process import ProcessCompletion, ProcessRunner, Spawner
from .scheduling import AbortCallback, CancellationToken, Task, TaskQueue
from .state import PublishedStateStore

LOGGER = logging.getLogger(__name__)

RUBY_LANGUAGE_ID: Final[str] = "ruby"

CompletionHook: TypeAlias = Callable[[], None]


class DocumentEvent(str, Enum):
    """Document lifecycle events that trigger scheduling decisions."""

    OPEN = "open"
    SAVE = "save"
    CLOSE = "close"
    MANUAL = "manual"


class Linter:
    """Schedule RuboCop runs per document and publish their results."""

    def __init__(
        self,
        config: LinterConfig,
        *,
        store: PublishedStateStore | None = None,
        queue: TaskQueue | None = None,
        spawner: Spawner | None = None,
        notifier: Notifier | None = None,
    ) -> None:
        """Wire the linter to its collaborators.

        Args:
            config: Initial settings; replace them later with :meth:`reload_config`.
            store: Published state shared with the editor boundary.
            queue: Scheduler; a private :class:`TaskQueue` by default.
            spawner: Process launcher; a private :class:`ProcessRunner` by default.
            notifier: Receiver of user-facing warnings.
        """

        self._config = config
        self.store = store if store is not None else PublishedStateStore()
        self.queue = queue if queue is not None else TaskQueue()
        self._owned_runner = ProcessRunner() if spawner is None else None
        self._spawner: Spawner = spawner if spawner is not None else self._owned_runner
        self._notifier: Notifier = notifier if notifier is not None else ConsoleNotifier()

    @property
    def config(self) -> LinterConfig:
        """Return the active configuration."""

        return self._config

    def reload_config(self, config: LinterConfig) -> None:
        """Replace the active configuration; queued runs pick it up when they start."""

        self._config = config

    @property
    def is_on_save(self) -> bool:
        """Return ``True`` when saving a document should trigger a lint run."""

        return self._config.on_save

    def should_lint(self, document: TextDocument) -> bool:
        """Return ``True`` for Ruby documents backed by a local file."""

        return document.language_id == RUBY_LANGUAGE_ID and document.is_file

    def working_directory(self, document: TextDocument) -> Path:
        """Return the workspace root when known, else the document's directory."""

        if self._config.workspace_root is not None:
            return self._config.workspace_root
        return document.path.parent

    def config_file(self) -> Path | None:
        """Return the RuboCop config file to pass with ``--config``, warning when it is missing."""

        resolved = self._config.resolve_config_file()
        if resolved is None and self._config.config_file_path is not None:
            self._notifier.warn(f"{self._config.config_file_path} file does not exist. Ignoring...")
        return resolved

    def build_request(self, document: TextDocument) -> LintRequest:
        """Snapshot ``document`` into an immutable :class:`LintRequest`."""

        arguments = lint_arguments(
            document.path,
            config_file=self.config_file(),
            additional=self._config.additional_arguments,
        )
        return LintRequest(
            key=document.key,
            path=document.path,
            source=document.text,
            arguments=arguments,
            cwd=self.working_directory(document),
        )

    def execute(self, document: TextDocument, on_complete: CompletionHook | None = None) -> Task | None:
        """Schedule a lint run for ``document``, superseding any live run for it.

        Args:
            document: Document snapshot to lint.
            on_complete: Called after a run that was not canceled completes.

        Returns:
            Task | None: The queued task, or ``None`` when the document is not lintable.
        """

        if not self.should_lint(document):
            return None
        request = self.build_request(document)
        return self.queue.enqueue(request.key, partial(self._start, request, on_complete))

    def clear(self, document: TextDocument) -> None:
        """Cancel any run for ``document`` and drop its published diagnostics."""

        if not document.is_file:
            return
        self.queue.cancel(document.key)
        self.store.clear(document.key)

    def handle_event(self, event: DocumentEvent, document: TextDocument) -> Task | None:
        """Dispatch a document lifecycle event.

        Open and manual events always lint; save lints when ``on_save`` is
        enabled; close cancels and clears.
        """

        if event is DocumentEvent.CLOSE:
            self.clear(document)
            return None
        if event is DocumentEvent.SAVE and not self.is_on_save:
            return None
        return self.execute(document)

    def lint_open_documents(self, documents: Iterable[TextDocument]) -> list[Task]:
        """Schedule a run for every already-open lintable document."""

        tasks = (self.execute(document) for document in documents)
        return [task for task in tasks if task is not None]

    def code_actions(self, key: ResourceKey, query: Range) -> list[CodeAction]:
        """Return the quick fixes available at ``query`` in the document ``key``."""

        return self.store.actions_for(key, query)

    def format_document(self, document: TextDocument) -> list[TextEdit]:
        """Return the auto-correct edit for ``document``, or ``[]`` on failure."""

        invocation = self._config.invocation(
            self.working_directory(document),
            base_arguments(document.path, config_file=self.config_file()),
        )
        return formatting_edits(document, invocation, notifier=self._notifier)

    def close(self) -> None:
        """Cancel all queued and running lint work, then release the owned process runner.

        Running processes are killed first so shutting the runner down does not
        wait for them to exit on their own.
        """

        canceled = self.queue.cancel_all()
        if canceled:
            LOGGER.debug("canceled %d lint task(s) on close", canceled)
        if self._owned_runner is not None:
            self._owned_runner.close()

    def __enter__(self) -> Linter:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _start(
        self,
        request: LintRequest,
        on_complete: CompletionHook | None,
        token: CancellationToken,
    ) -> AbortCallback:
        invocation = self._config.invocation(request.cwd, request.arguments)
        LOGGER.debug("linting %s with %s", request.key, invocation.command)
        handle = self._spawner.spawn(
            invocation,
            request.source,
            partial(self._on_process_complete, request, token, on_complete),
        )
        return handle.kill

    def _on_process_complete(
        self,
        request: LintRequest,
        token: CancellationToken,
        on_complete: CompletionHook | None,
        completion: ProcessCompletion,
    ) -> None:
        try:
            if token.canceled or completion.killed:
                LOGGER.debug("discarding output of canceled run for %s", request.key)
                return
            self._handle_completion(request, token, completion)
        finally:
            token.finished()
        if on_complete is not None and not token.canceled:
            on_complete()

    def _handle_completion(
        self,
        request: LintRequest,
        token: CancellationToken,
        completion: ProcessCompletion,
    ) -> None:
        failure = self._process_failure(completion)
        if failure is not None:
            self._report(token, failure)
            if failure.kind is not FailureKind.STDERR_NON_EMPTY:
                return
        outcome = parse_output(completion.stdout, command=self._config.command)
        if isinstance(outcome, Failure):
            self._report(token, outcome)
            return
        if publish(self.store, request.key, outcome, token=token):
            LOGGER.debug("published %d offenses for %s", outcome.offense_count, request.key)

    def _process_failure(self, completion: ProcessCompletion) -> Failure | None:
        command = self._config.command
        if completion.failure is FailureKind.EXECUTABLE_MISSING:
            return executable_missing(command, completion.stderr)
        if completion.failure is FailureKind.EXECUTABLE_NOT_EXECUTABLE:
            return executable_not_executable(command, completion.stderr)
        if completion.stderr and not self._config.suppress_rubocop_warnings:
            return stderr_non_empty(completion.stderr)
        return None

    def _report(self, token: CancellationToken, failure: Failure) -> None:
        if token.canceled:
            return
        report_failure(self._notifier, failure)


__all__ = ["DocumentEvent", "Linter", "RUBY_LANGUAGE_ID"]
