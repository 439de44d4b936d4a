# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/addonctl/observers/events.py

from __future__ import annotations
from dataclasses import dataclass, asdict
from typing import List, Dict, Any, Optional
from datetime import datetime, timezone
import uuid


# ---------------------------------------------------------------------
# Base context and helper
# ---------------------------------------------------------------------
@dataclass(frozen=True)
class BaseEvent:
    ts: str           # ISO timestamp
    run_id: str       # correlates all events in a single install invocation
    env: str          # dev/staging/prod
    context: Optional[str]  # kube-context

    def dict(self) -> Dict[str, Any]:
        return asdict(self)


def new_ctx(env: str, context: Optional[str], run_id: Optional[str] = None) -> Dict[str, Any]:
    return {
        "ts": datetime.now(timezone.utc).isoformat(timespec="seconds").replace("+00:00", "Z"),
        "run_id": run_id or str(uuid.uuid4()),
        "env": env,
        "context": context,
    }


# ---------------------------------------------------------------------
# Planner
# ---------------------------------------------------------------------
@dataclass(frozen=True)
class PlanComputed(BaseEvent):
    order: List[str]

@dataclass(frozen=True)
class PlanFailed(BaseEvent):
    error: str

@dataclass(frozen=True)
class DependencySkipped(BaseEvent):
    addon: str
    dependency: str


# ---------------------------------------------------------------------
# Addon lifecycle
# ---------------------------------------------------------------------
@dataclass(frozen=True)
class AddonStarted(BaseEvent):
    name: str

@dataclass(frozen=True)
class ManifestApplied(BaseEvent):
    name: str
    index: int
    total: int

@dataclass(frozen=True)
class AddonVerified(BaseEvent):
    name: str

@dataclass(frozen=True)
class AddonSucceeded(BaseEvent):
    name: str
    duration_ms: int

@dataclass(frozen=True)
class AddonFailed(BaseEvent):
    name: str
    phase: str        # "generate" | "apply" | "verify"
    error: str
    continued: bool


# ---------------------------------------------------------------------
# Summary
# ---------------------------------------------------------------------
@dataclass(frozen=True)
class InstallSummary(BaseEvent):
    ok: int
    failed: int
    dry_run: int
