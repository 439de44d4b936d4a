# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/addonctl/deploy/steps.py

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List


@dataclass(frozen=True)
class OrderedStep:
    name: str
    order: int


def dependencies_from_order(steps: Iterable[OrderedStep]) -> Dict[str, List[str]]:
    """
    Express a fixed install order as dependencies.

    Each step depends on every step with a strictly lower order; steps
    sharing an order value have no edge between them and fall back to the
    resolver's name tie-break.
    """
    steps = list(steps)
    deps: Dict[str, List[str]] = {}
    for s in steps:
        deps[s.name] = sorted(o.name for o in steps if o.order < s.order)
    return deps


def merge_dependencies(explicit: Iterable[str], implied: Iterable[str]) -> List[str]:
    merged: List[str] = []
    for d in list(explicit) + list(implied):
        if d not in merged:
            merged.append(d)
    return merged
