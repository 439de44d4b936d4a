# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/addonctl/addons/base.py

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

import yaml

from ..execution import ExecutionContext
from ..helm.interface import ChartRenderer
from ..kube.interface import ClusterClient
from ..manifests.patch import Patch, apply_patches
from .assets import AssetBundle

log = logging.getLogger("addonctl")

# always present, never created or labelled by an addon
SYSTEM_NAMESPACES = ("kube-system", "kube-public", "kube-node-lease", "default")


@dataclass
class Addon(ABC):
    """
    One independently installable cluster component.

    ``dependencies`` names other addons that must be installed first.
    """

    name: str
    enabled: bool = True
    dependencies: List[str] = field(default_factory=list)

    @abstractmethod
    def generate_manifests(self, ctx: ExecutionContext) -> List[bytes]:
        """Return manifest streams, applied in order."""

    def verify(self, ctx: ExecutionContext, client: ClusterClient) -> None:
        """Optional hook. Default: do nothing."""
        pass


@dataclass
class HelmAddon(Addon):
    """
    Addon rendered from a Helm chart.

    Static manifests from the asset bundle are emitted first, then the
    rendered chart with every patch applied to it. Verification waits for
    the listed workloads to roll out.
    """

    chart: Optional[str] = None
    namespace: str = "kube-system"
    renderer: Optional[ChartRenderer] = None
    values: Dict[str, Any] = field(default_factory=dict)
    version: Optional[str] = None
    repo_url: Optional[str] = None
    release_name: Optional[str] = None
    create_namespace: bool = True
    patches: List[Patch] = field(default_factory=list)
    assets: Optional[AssetBundle] = None
    manifest_files: List[str] = field(default_factory=list)
    # (kind, namespace, name)
    wait_for: List[Tuple[str, str, str]] = field(default_factory=list)
    verify_timeout: float = 300.0

    def _namespace_manifest(self) -> bytes:
        ns = {
            "apiVersion": "v1",
            "kind": "Namespace",
            "metadata": {
                "name": self.namespace,
                "labels": {"app.kubernetes.io/managed-by": "addonctl"},
            },
        }
        return yaml.safe_dump(ns, sort_keys=False).encode("utf-8")

    def generate_manifests(self, ctx: ExecutionContext) -> List[bytes]:
        out: List[bytes] = []

        if self.create_namespace and self.namespace not in SYSTEM_NAMESPACES:
            out.append(self._namespace_manifest())

        if self.manifest_files:
            if self.assets is None:
                raise RuntimeError(f"{self.name}: manifests configured but no asset bundle")
            for path in self.manifest_files:
                out.append(self.assets.read_bytes(path))

        if self.chart:
            if self.renderer is None:
                raise RuntimeError(f"{self.name}: chart configured but no renderer")
            ctx.check()
            rendered = self.renderer.render(
                self.chart,
                self.namespace,
                self.values,
                release_name=self.release_name or self.name,
                version=self.version,
                repo_url=self.repo_url,
                ctx=ctx,
            )
            if self.patches:
                log.debug("[%s] applying %d manifest patch(es)", self.name, len(self.patches))
                rendered = apply_patches(rendered, self.patches)
            out.append(rendered)

        return out

    def verify(self, ctx: ExecutionContext, client: ClusterClient) -> None:
        for kind, namespace, workload in self.wait_for:
            ctx.check()
            log.info("[%s] waiting for %s %s/%s", self.name, kind, namespace, workload)
            if kind == "DaemonSet":
                client.wait_for_daemonset(namespace, workload, self.verify_timeout, ctx)
            elif kind == "Deployment":
                client.wait_for_deployment(namespace, workload, self.verify_timeout, ctx)
            else:
                raise ValueError(f"{self.name}: cannot wait for kind {kind!r}")
