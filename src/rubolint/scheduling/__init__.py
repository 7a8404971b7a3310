# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Single-flight lint scheduling primitives."""

from __future__ import annotations

from .queue import AbortCallback, Task, TaskBody, TaskQueue
from .cancellation import CancellationToken

__all__ = ["AbortCallback", "CancellationToken", "Task", "TaskBody", "TaskQueue"]
