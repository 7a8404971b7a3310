# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Per-document store of published diagnostics and quick-fix actions."""

from __future__ import annotations

from typing import TypeAlias

from collections.abc import Callable
from dataclasses import dataclass
from threading import Lock

from .models import ActionEntry, CodeAction, Diagnostic, Range, ResourceKey
from .scheduling import CancellationToken


@dataclass(frozen=True, slots=True)
class PublishedState:
    """Diagnostics and their quick-fix entries for one document, swapped as a unit."""

    diagnostics: tuple[Diagnostic, ...] = ()
    actions: tuple[ActionEntry, ...] = ()


PublishListener: TypeAlias = Callable[[ResourceKey, PublishedState | None], None]


class PublishedStateStore:
    """Hold the latest :class:`PublishedState` per resource key.

    Every mutation replaces the whole state for a key under one lock, so a
    reader never observes diagnostics from one run paired with actions from
    another. The optional ``listener`` receives each replacement (``None`` on
    clear) while the lock is held, preserving publication order.
    """

    def __init__(self, listener: PublishListener | None = None) -> None:
        self._lock = Lock()
        self._states: dict[ResourceKey, PublishedState] = {}
        self._listener = listener

    def replace(
        self,
        key: ResourceKey,
        state: PublishedState,
        *,
        token: CancellationToken | None = None,
    ) -> bool:
        """Atomically replace the state published for ``key``.

        Args:
            key: Resource key of the document.
            state: New diagnostics and actions.
            token: Token of the originating task; a canceled token skips the update.

        Returns:
            bool: ``True`` when the state was published.
        """

        with self._lock:
            if token is not None and token.canceled:
                return False
            self._states[key] = state
            if self._listener is not None:
                self._listener(key, state)
        return True

    def clear(self, key: ResourceKey) -> bool:
        """Drop everything published for ``key``.

        Returns:
            bool: ``True`` when state existed for ``key``.
        """

        with self._lock:
            existed = self._states.pop(key, None) is not None
            if self._listener is not None:
                self._listener(key, None)
        return existed

    def get(self, key: ResourceKey) -> PublishedState | None:
        """Return the state currently published for ``key``."""

        with self._lock:
            return self._states.get(key)

    def diagnostics(self, key: ResourceKey) -> tuple[Diagnostic, ...]:
        """Return the diagnostics currently published for ``key``."""

        state = self.get(key)
        return state.diagnostics if state is not None else ()

    def actions_for(self, key: ResourceKey, query: Range) -> list[CodeAction]:
        """Return the quick fixes whose range contains either end of ``query``.

        Args:
            key: Resource key of the document.
            query: Cursor position (empty range) or selection.

        Returns:
            list[CodeAction]: Union of matching actions in publication order.
        """

        state = self.get(key)
        if state is None:
            return []
        actions: list[CodeAction] = []
        for entry in state.actions:
            if entry.range.contains(query.start) or entry.range.contains(query.end):
                actions.extend(entry.actions)
        return actions

    def keys(self) -> tuple[ResourceKey, ...]:
        """Return the keys with published state."""

        with self._lock:
            return tuple(self._states)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._states


__all__ = ["PublishListener", "PublishedState", "PublishedStateStore"]
