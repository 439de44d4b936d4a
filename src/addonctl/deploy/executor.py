# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/addonctl/deploy/executor.py

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, List, Optional

from .planner import resolve
from ..addons.base import Addon
from ..execution import ExecutionContext, InstallCancelled
from ..kube.interface import ClusterClient
from ..manifests.stream import count_documents

# Observer bits
from ..observers.dispatcher import EventBus
from ..observers.events import (
    new_ctx,
    AddonStarted,
    ManifestApplied,
    AddonVerified,
    AddonSucceeded,
    AddonFailed,
    InstallSummary,
)

log = logging.getLogger("addonctl")


class InstallPhase(str, Enum):
    GENERATE = "generate"
    APPLY = "apply"
    VERIFY = "verify"


@dataclass
class InstallOptions:
    timeout_seconds: Optional[float] = 600.0
    verify: bool = True
    continue_on_error: bool = False
    dry_run: bool = False

    @classmethod
    def default(cls) -> "InstallOptions":
        return cls()


@dataclass
class AddonOutcome:
    name: str
    status: str                 # "OK" | "FAILED" | "DRY_RUN"
    manifests_applied: int = 0
    phase: Optional[str] = None
    error: Optional[str] = None
    duration_ms: int = 0


@dataclass
class InstallReport:
    order: List[str] = field(default_factory=list)
    outcomes: List[AddonOutcome] = field(default_factory=list)

    def add(self, outcome: AddonOutcome) -> None:
        self.outcomes.append(outcome)

    def count(self, status: str) -> int:
        return sum(1 for o in self.outcomes if o.status == status)

    @property
    def failed(self) -> List[AddonOutcome]:
        return [o for o in self.outcomes if o.status == "FAILED"]

    @property
    def ok(self) -> bool:
        return not self.failed

    def summary(self) -> str:
        return f"OK={self.count('OK')} FAILED={self.count('FAILED')} DRY_RUN={self.count('DRY_RUN')}"


class AddonInstallError(RuntimeError):
    def __init__(self, addon: str, phase: InstallPhase, cause: BaseException, report: InstallReport):
        self.addon = addon
        self.phase = phase
        self.report = report
        super().__init__(f"failed to install addon {addon} ({phase.value}): {cause}")


def _emit_summary(bus: EventBus, report: InstallReport, run_ctx: dict) -> None:
    bus.emit(
        InstallSummary(
            ok=report.count("OK"),
            failed=report.count("FAILED"),
            dry_run=report.count("DRY_RUN"),
            **run_ctx,
        )
    )


def _install_one(
    addon: Addon,
    client: ClusterClient,
    options: InstallOptions,
    ctx: ExecutionContext,
    outcome: AddonOutcome,
    bus: EventBus,
    run_ctx: dict,
) -> None:
    """Generate, apply and verify one addon. ``outcome.phase`` tracks progress."""
    outcome.phase = InstallPhase.GENERATE.value
    ctx.check()
    manifests = addon.generate_manifests(ctx)

    outcome.phase = InstallPhase.APPLY.value
    total = len(manifests)
    for i, manifest in enumerate(manifests, start=1):
        if not manifest or count_documents(manifest) == 0:
            log.debug("Skipping manifest %d/%d for addon %s: no objects", i, total, addon.name)
            continue
        if ctx.dry_run:
            log.info("[dry-run] would apply manifest %d/%d for addon %s", i, total, addon.name)
            continue
        ctx.check()
        log.info("Applying manifest %d/%d for addon %s", i, total, addon.name)
        client.apply(manifest, ctx)
        outcome.manifests_applied += 1
        bus.emit(ManifestApplied(name=addon.name, index=i, total=total, **run_ctx))

    if options.verify and not ctx.dry_run:
        outcome.phase = InstallPhase.VERIFY.value
        log.info("Verifying addon %s installation...", addon.name)
        addon.verify(ctx, client)
        bus.emit(AddonVerified(name=addon.name, **run_ctx))
        log.info("Addon %s verified successfully", addon.name)

    outcome.phase = None


def install_all(
    addons: Iterable[Addon],
    client: ClusterClient,
    options: Optional[InstallOptions] = None,
    observers: Optional[List] = None,
    ctx: Optional[ExecutionContext] = None,
    *,
    env: str = "dev",
    kube_context: Optional[str] = None,
    run_id: Optional[str] = None,
) -> InstallReport:
    """
    Install enabled addons one at a time in dependency order.

    - A dependency cycle aborts before anything is applied.
    - A generate/apply/verify failure either aborts the run with
      AddonInstallError (default) or, with ``continue_on_error``, is
      recorded and the next addon starts. Nothing is rolled back.
    - InstallCancelled (deadline or cancel) always aborts.
    """
    options = options or InstallOptions.default()
    report = InstallReport()

    # Observer bus & run context
    bus = EventBus(observers or [])
    run_ctx = new_ctx(env=env, context=kube_context, run_id=run_id)

    enabled = [a for a in addons if a.enabled]
    if not enabled:
        log.info("No addons enabled, skipping addon installation")
        return report

    # planner also emits PlanComputed/PlanFailed
    ordered = resolve(enabled, bus=bus, run_ctx=run_ctx)
    report.order = [a.name for a in ordered]
    log.info("Installing %d addons in order: %s", len(ordered), report.order)

    if ctx is None:
        ctx = ExecutionContext.with_timeout(options.timeout_seconds, dry_run=options.dry_run)
    elif options.dry_run and not ctx.dry_run:
        ctx = ExecutionContext(dry_run=True, deadline=ctx.deadline, cancel_event=ctx.cancel_event)

    for addon in ordered:
        log.info("Installing addon: %s", addon.name)
        bus.emit(AddonStarted(name=addon.name, **run_ctx))

        outcome = AddonOutcome(name=addon.name, status="FAILED")
        t0 = time.monotonic()
        try:
            _install_one(addon, client, options, ctx, outcome, bus, run_ctx)
        except InstallCancelled as e:
            outcome.error = str(e)
            outcome.duration_ms = int((time.monotonic() - t0) * 1000)
            report.add(outcome)
            log.error("Install of addon %s cancelled: %s", addon.name, e)
            bus.emit(AddonFailed(name=addon.name, phase=outcome.phase or "", error=str(e), continued=False, **run_ctx))
            _emit_summary(bus, report, run_ctx)
            raise
        except Exception as e:
            phase = InstallPhase(outcome.phase or InstallPhase.GENERATE.value)
            outcome.error = str(e)
            outcome.duration_ms = int((time.monotonic() - t0) * 1000)
            report.add(outcome)
            bus.emit(
                AddonFailed(
                    name=addon.name,
                    phase=phase.value,
                    error=str(e),
                    continued=options.continue_on_error,
                    **run_ctx,
                )
            )
            if options.continue_on_error:
                log.error("Error installing addon %s during %s: %s (continuing)", addon.name, phase.value, e)
                continue
            log.error("Error installing addon %s during %s: %s", addon.name, phase.value, e)
            _emit_summary(bus, report, run_ctx)
            raise AddonInstallError(addon.name, phase, e, report) from e

        outcome.status = "DRY_RUN" if ctx.dry_run else "OK"
        outcome.duration_ms = int((time.monotonic() - t0) * 1000)
        report.add(outcome)
        bus.emit(AddonSucceeded(name=addon.name, duration_ms=outcome.duration_ms, **run_ctx))
        log.info("Addon %s installed successfully", addon.name)

    _emit_summary(bus, report, run_ctx)
    if report.failed:
        log.warning("Addon installation finished with failures: %s", report.summary())
    else:
        log.info("All addons installed successfully")
    return report
