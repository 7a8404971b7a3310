# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""User-facing console messages for lint failures and CLI status lines."""

from __future__ import annotations

import sys
from enum import Enum
from functools import cache

from rich.console import Console
from rich.text import Text


class MessageKind(Enum):
    """Message categories with their emoji prefix and colour style."""

    INFO = ("ℹ️", "cyan")
    OK = ("✅", "green")
    WARN = ("⚠️", "yellow")
    FAIL = ("❌", "bold red")

    @property
    def symbol(self) -> str:
        return self.value[0]

    @property
    def style(self) -> str:
        return self.value[1]


def _stderr_is_tty() -> bool:
    try:
        return sys.stderr.isatty()
    except (AttributeError, ValueError):
        return False


@cache
def _console(color: bool, emoji: bool) -> Console:
    # file stays unset so rich resolves sys.stderr at print time
    return Console(stderr=True, no_color=not color, emoji=emoji, soft_wrap=True, highlight=False)


def emit(kind: MessageKind, message: str, *, use_emoji: bool, use_color: bool | None = None) -> None:
    """Print ``message`` to stderr decorated for ``kind``.

    Args:
        kind: Category selecting the prefix and style.
        message: Text shown to the user.
        use_emoji: Prefix the message with the category emoji.
        use_color: Force colour on or off; ``None`` follows stderr TTY detection.
    """

    color = _stderr_is_tty() if use_color is None else use_color
    text = Text(f"{kind.symbol} {message}" if use_emoji else message)
    if color:
        text.stylize(kind.style)
    _console(color, use_emoji).print(text)


__all__ = ["MessageKind", "emit"]
