# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Single-flight task queue keyed by document resource.

At most one task per resource key is ever live: enqueuing a task for a key
cancels whatever pending or running task already holds that key. Tasks for
distinct keys run one at a time in first-in-first-out order, so only one
RuboCop process is active at once. A running task advances the queue by
calling :meth:`CancellationToken.finished`; canceling the running task
advances it immediately.
"""

from __future__ import annotations

from typing import TypeAlias

import logging
from collections import deque
from collections.abc import Callable, Iterable
from functools import partial
from threading import Condition, Lock

from ..errors import TaskQueueError
from ..models import ResourceKey
from .cancellation import CancellationToken

LOGGER = logging.getLogger(__name__)

AbortCallback: TypeAlias = Callable[[], None]
TaskBody: TypeAlias = Callable[[CancellationToken], AbortCallback | None]


class Task:
    """Unit of lint work bound to a resource key.

    ``body`` starts the work when the queue reaches the task. It receives a
    fresh :class:`CancellationToken` and returns an abort callable the queue
    invokes when canceling the task while it runs.
    """

    def __init__(self, key: ResourceKey, body: TaskBody) -> None:
        self.key = key
        self._body = body
        self._lock = Lock()
        self._token: CancellationToken | None = None
        self._abort: AbortCallback | None = None
        self._canceled = False
        self._enqueued = False

    @property
    def token(self) -> CancellationToken | None:
        """Return the token handed to the body, ``None`` before the task starts."""

        return self._token

    @property
    def started(self) -> bool:
        """Return ``True`` once the body has been invoked."""

        return self._token is not None

    @property
    def canceled(self) -> bool:
        """Return ``True`` once the task has been canceled."""

        with self._lock:
            return self._canceled

    @property
    def enqueued(self) -> bool:
        """Return ``True`` once the task has been handed to a queue."""

        return self._enqueued

    def mark_enqueued(self) -> None:
        """Record that a queue owns the task."""

        if self._enqueued:
            raise TaskQueueError(f"Task is already enqueued (key: {self.key})")
        self._enqueued = True

    def start(self, on_done: Callable[[Task], None]) -> None:
        """Invoke the body with a fresh token wired to ``on_done``.

        Args:
            on_done: Called with this task once its token reports completion.
        """

        with self._lock:
            if self._canceled:
                return
            token = CancellationToken(on_finished=partial(on_done, self))
            self._token = token
        try:
            abort = self._body(token)
        except Exception:
            LOGGER.exception("lint task for %s failed to start", self.key)
            token.finished()
            return
        with self._lock:
            if not self._canceled:
                self._abort = abort
                return
        # canceled while the body was starting
        if abort is not None:
            abort()

    def cancel(self) -> None:
        """Set the token's cancel flag and abort the running work, once."""

        with self._lock:
            if self._canceled:
                return
            self._canceled = True
            token = self._token
            abort, self._abort = self._abort, None
        if token is not None:
            token.cancel()
        if abort is not None:
            abort()

    def __repr__(self) -> str:
        return f"Task(key={self.key!r}, started={self.started}, canceled={self.canceled})"


class TaskQueue:
    """Serialise lint tasks through one worker with per-key single-flight."""

    def __init__(self) -> None:
        self._lock = Lock()
        self._idle = Condition(self._lock)
        self._pending: deque[Task] = deque()
        self._running: Task | None = None

    def enqueue(self, key: ResourceKey, body: TaskBody) -> Task:
        """Queue ``body`` under ``key``, superseding any live task for that key.

        Args:
            key: Resource key of the document being linted.
            body: Callable starting the work; see :class:`Task`.

        Returns:
            Task: The newly queued task.
        """

        return self.submit(Task(key, body))

    def submit(self, task: Task) -> Task:
        """Queue an existing :class:`Task`.

        Raises:
            TaskQueueError: If ``task`` was already handed to a queue.
        """

        with self._lock:
            task.mark_enqueued()
            superseded = self._detach(task.key)
            self._pending.append(task)
        _cancel_all(superseded)
        self._kick()
        return task

    def cancel(self, key: ResourceKey) -> bool:
        """Cancel and drop any pending or running task for ``key``.

        Returns:
            bool: ``True`` when a task was canceled.
        """

        with self._lock:
            canceled = self._detach(key)
            self._notify_if_idle()
        _cancel_all(canceled)
        self._kick()
        return bool(canceled)

    def cancel_all(self) -> int:
        """Cancel every pending and running task.

        Returns:
            int: Number of tasks canceled.
        """

        with self._lock:
            canceled = list(self._pending)
            self._pending.clear()
            if self._running is not None:
                canceled.append(self._running)
                self._running = None
            self._notify_if_idle()
        _cancel_all(canceled)
        return len(canceled)

    def wait_idle(self, timeout: float | None = None) -> bool:
        """Block until no task is pending or running.

        Returns:
            bool: ``True`` when the queue drained before ``timeout`` expired.
        """

        with self._idle:
            return self._idle.wait_for(self._is_idle, timeout)

    @property
    def running_key(self) -> ResourceKey | None:
        """Return the key of the task currently running, if any."""

        with self._lock:
            return self._running.key if self._running is not None else None

    @property
    def pending_keys(self) -> tuple[ResourceKey, ...]:
        """Return the keys waiting to run, in order."""

        with self._lock:
            return tuple(task.key for task in self._pending)

    def __len__(self) -> int:
        with self._lock:
            return len(self._pending) + (1 if self._running is not None else 0)

    def _detach(self, key: ResourceKey) -> list[Task]:
        # caller holds self._lock
        detached = [task for task in self._pending if task.key == key]
        if detached:
            self._pending = deque(task for task in self._pending if task.key != key)
        if self._running is not None and self._running.key == key:
            detached.append(self._running)
            self._running = None
        return detached

    def _is_idle(self) -> bool:
        return self._running is None and not self._pending

    def _notify_if_idle(self) -> None:
        # caller holds self._lock
        if self._is_idle():
            self._idle.notify_all()

    def _kick(self) -> None:
        while True:
            with self._lock:
                if self._running is not None or not self._pending:
                    self._notify_if_idle()
                    return
                task = self._pending.popleft()
                self._running = task
            LOGGER.debug("starting lint task for %s", task.key)
            task.start(self._on_task_done)

    def _on_task_done(self, task: Task) -> None:
        with self._lock:
            if self._running is not task:
                return
            self._running = None
        LOGGER.debug("lint task for %s finished", task.key)
        self._kick()


def _cancel_all(tasks: Iterable[Task]) -> None:
    for task in tasks:
        LOGGER.debug("canceling lint task for %s", task.key)
        task.cancel()


__all__ = ["AbortCallback", "Task", "TaskBody", "TaskQueue"]
