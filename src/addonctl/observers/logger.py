# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/addonctl/observers/logger.py
from __future__ import annotations
import logging
from .events import AddonFailed, BaseEvent, DependencySkipped, PlanFailed

_CONTEXT_FIELDS = ("ts", "run_id", "env", "context")


class LoggerObserver:
    """Mirror events into the run log; failures and skipped dependencies get louder levels."""

    def __init__(self, logger: logging.Logger):
        self.logger = logger

    @staticmethod
    def _level(event: BaseEvent) -> int:
        if isinstance(event, (AddonFailed, PlanFailed)):
            return logging.ERROR
        if isinstance(event, DependencySkipped):
            return logging.WARNING
        return logging.INFO

    def notify(self, event: BaseEvent) -> None:
        payload = ", ".join(f"{k}={v}" for k, v in event.dict().items() if k not in _CONTEXT_FIELDS)
        self.logger.log(self._level(event), "[EVENT] %s: %s", event.__class__.__name__, payload)
