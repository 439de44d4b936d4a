# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/addonctl/execution.py

from __future__ import annotations

import threading
import time
from dataclasses import dataclass, field
from typing import Optional


class InstallCancelled(RuntimeError):
    pass


@dataclass(frozen=True)
class ExecutionContext:
    """
    controls how an install run executes: dry-run, deadline and cancellation.

    ``deadline`` is an absolute ``time.monotonic()`` value. Collaborators
    call ``check()`` before blocking work and use ``remaining()`` to bound
    subprocess timeouts.
    """

    dry_run: bool = False
    deadline: Optional[float] = None
    cancel_event: threading.Event = field(default_factory=threading.Event, compare=False)

    @classmethod
    def with_timeout(cls, seconds: Optional[float], *, dry_run: bool = False) -> "ExecutionContext":
        deadline = time.monotonic() + seconds if seconds else None
        return cls(dry_run=dry_run, deadline=deadline)

    def cancel(self) -> None:
        self.cancel_event.set()

    @property
    def cancelled(self) -> bool:
        return self.cancel_event.is_set()

    def remaining(self) -> Optional[float]:
        if self.deadline is None:
            return None
        return max(0.0, self.deadline - time.monotonic())

    def check(self) -> None:
        if self.cancelled:
            raise InstallCancelled("install cancelled")
        if self.deadline is not None and time.monotonic() >= self.deadline:
            raise InstallCancelled("install deadline exceeded")
