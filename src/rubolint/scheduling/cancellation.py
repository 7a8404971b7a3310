# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Cancellation token shared between the task queue and a running task."""

from __future__ import annotations

from collections.abc import Callable
from threading import Condition


class CancellationToken:
    """Cancel flag plus completion signal for one unit of lint work.

    The queue sets the flag through :meth:`cancel`; the task body reads
    :attr:`canceled` before publishing anything and calls :meth:`finished`
    on every exit path so the queue can advance.
    """

    __slots__ = ("_canceled", "_condition", "_finished", "_on_finished")

    def __init__(self, on_finished: Callable[[], None] | None = None) -> None:
        self._condition = Condition()
        self._canceled = False
        self._finished = False
        self._on_finished = on_finished

    @property
    def canceled(self) -> bool:
        """Return ``True`` once the scheduler has canceled the task."""

        with self._condition:
            return self._canceled

    @property
    def is_finished(self) -> bool:
        """Return ``True`` once the task body has called :meth:`finished`."""

        with self._condition:
            return self._finished

    def cancel(self) -> None:
        """Mark the task as canceled. Only the scheduler calls this."""

        with self._condition:
            self._canceled = True
            self._condition.notify_all()

    def finished(self) -> None:
        """Signal task completion; only the first call has any effect."""

        with self._condition:
            if self._finished:
                return
            self._finished = True
            callback, self._on_finished = self._on_finished, None
            self._condition.notify_all()
        if callback is not None:
            callback()

    def wait(self, timeout: float | None = None) -> bool:
        """Block until the task finishes or is canceled.

        Args:
            timeout: Maximum number of seconds to wait, ``None`` to wait forever.

        Returns:
            bool: ``True`` when the token settled before the timeout expired.
        """

        with self._condition:
            return self._condition.wait_for(lambda: self._finished or self._canceled, timeout)

    def __repr__(self) -> str:
        return f"CancellationToken(canceled={self.canceled}, finished={self.is_finished})"


__all__ = ["CancellationToken"]
