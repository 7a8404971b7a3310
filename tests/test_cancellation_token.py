# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Tests for :mod:`rubolint.scheduling.cancellation`."""

from __future__ import annotations

import threading

from rubolint.scheduling import CancellationToken


def test_new_token_is_neither_canceled_nor_finished() -> None:
    token = CancellationToken()

    assert not token.canceled
    assert not token.is_finished
    assert not token.wait(timeout=0.01)


def test_finished_invokes_callback_exactly_once() -> None:
    calls: list[str] = []
    token = CancellationToken(on_finished=lambda: calls.append("done"))

    token.finished()
    token.finished()

    assert calls == ["done"]
    assert token.is_finished


def test_cancel_sets_flag_and_releases_waiters() -> None:
    token = CancellationToken()
    released = threading.Event()

    def waiter() -> None:
        if token.wait(timeout=5):
            released.set()

    thread = threading.Thread(target=waiter)
    thread.start()
    token.cancel()
    thread.join(timeout=5)

    assert token.canceled
    assert released.is_set()
    assert not token.is_finished


def test_wait_returns_once_finished() -> None:
    token = CancellationToken()
    timer = threading.Timer(0.05, token.finished)
    timer.start()

    assert token.wait(timeout=5)
    timer.join()
