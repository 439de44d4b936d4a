# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/addonctl/deploy/planner.py

from __future__ import annotations

import heapq
import logging
from typing import Dict, Iterable, List, Optional, Set

from ..addons.base import Addon

# Observer bits
from ..observers.dispatcher import EventBus
from ..observers.events import DependencySkipped, PlanComputed, PlanFailed, new_ctx

log = logging.getLogger("addonctl")


class CyclicDependencyError(ValueError):
    def __init__(self, unresolved: Iterable[str]):
        self.unresolved = sorted(unresolved)
        super().__init__(
            "circular dependency detected among addons: " + ", ".join(self.unresolved)
        )


class DuplicateAddonError(ValueError):
    pass


def resolve(
    addons: Iterable[Addon],
    bus: Optional[EventBus] = None,
    run_ctx: Optional[dict] = None,
) -> List[Addon]:
    """
    Deterministic topological order of the *enabled* addons (Kahn's algorithm).

    - A dependency on a disabled or unknown addon is logged and ignored.
    - Among addons whose dependencies are all placed, the smallest name
      goes next, so the result does not depend on input order.
    - Raises CyclicDependencyError naming every addon left unplaced.

    Emits DependencySkipped / PlanComputed / PlanFailed if an EventBus is provided.
    """
    ctx = run_ctx or new_ctx(env="dev", context=None)
    try:
        enabled: Dict[str, Addon] = {}
        for a in addons:
            if not a.enabled:
                continue
            if a.name in enabled:
                raise DuplicateAddonError(f"duplicate addon name '{a.name}'")
            enabled[a.name] = a

        # snapshot: later changes to an addon's dependency list are ignored
        indeg: Dict[str, int] = {n: 0 for n in enabled}
        dependents: Dict[str, List[str]] = {n: [] for n in enabled}

        for name in sorted(enabled):
            for dep in sorted(set(enabled[name].dependencies)):
                if dep not in enabled:
                    log.warning("addon %s depends on %s which is not enabled, ignoring", name, dep)
                    if bus:
                        bus.emit(DependencySkipped(addon=name, dependency=dep, **ctx))
                    continue
                dependents[dep].append(name)
                indeg[name] += 1

        ready = [n for n, deg in indeg.items() if deg == 0]
        heapq.heapify(ready)
        order: List[Addon] = []

        while ready:
            n = heapq.heappop(ready)
            order.append(enabled[n])
            for m in dependents[n]:
                indeg[m] -= 1
                if indeg[m] == 0:
                    heapq.heappush(ready, m)

        if len(order) != len(enabled):
            placed: Set[str] = {a.name for a in order}
            raise CyclicDependencyError(n for n in enabled if n not in placed)

        names = [a.name for a in order]
        log.debug("resolved addon order: %s", names)
        if bus:
            bus.emit(PlanComputed(order=names, **ctx))
        return order

    except Exception as e:
        if bus:
            bus.emit(PlanFailed(error=str(e), **ctx))
        raise
