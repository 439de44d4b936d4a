# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/addonctl/helm/interface.py
from __future__ import annotations

from typing import Any, Dict, Optional, Protocol

from ..execution import ExecutionContext


class ChartRenderer(Protocol):
    """Given a chart, a namespace and a value tree, produce a manifest stream."""

    def render(
        self,
        chart: str,
        namespace: str,
        values: Dict[str, Any],
        *,
        release_name: Optional[str] = None,
        version: Optional[str] = None,
        repo_url: Optional[str] = None,
        ctx: Optional[ExecutionContext] = None,
    ) -> bytes: ...
