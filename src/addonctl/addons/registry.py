# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/addonctl/addons/registry.py

from __future__ import annotations

from typing import List, Optional

from ..config.models import AddonsConfig, AddonSpec, PatchSpec
from ..deploy.steps import OrderedStep, dependencies_from_order, merge_dependencies
from ..helm.interface import ChartRenderer
from ..manifests.patch import Patch
from ..manifests.patchers import dns_policy_patch, host_network_api_patch
from .assets import AssetBundle
from .base import Addon, HelmAddon


def build_patch(spec: PatchSpec) -> Patch:
    if spec.type == "dns-policy":
        return dns_policy_patch(spec.target, spec.value)
    if spec.type == "host-network-api":
        return host_network_api_patch(spec.target)
    raise ValueError(f"unknown patch type: {spec.type}")


def _build_one(
    spec: AddonSpec,
    *,
    dependencies: List[str],
    renderer: Optional[ChartRenderer],
    assets: Optional[AssetBundle],
    verify_timeout: float,
) -> HelmAddon:
    return HelmAddon(
        name=spec.name,
        enabled=spec.enabled,
        dependencies=dependencies,
        chart=spec.chart,
        namespace=spec.namespace,
        renderer=renderer,
        values=dict(spec.values),
        version=spec.version,
        repo_url=spec.repo_url,
        release_name=spec.release_name,
        create_namespace=spec.create_namespace,
        patches=[build_patch(p) for p in spec.patches],
        assets=assets,
        manifest_files=list(spec.manifests),
        wait_for=[(w.kind, w.namespace or spec.namespace, w.name) for w in spec.verify],
        verify_timeout=float(verify_timeout),
    )


def build_addons(
    cfg: AddonsConfig,
    *,
    renderer: Optional[ChartRenderer] = None,
    assets: Optional[AssetBundle] = None,
) -> List[Addon]:
    """
    Turn configured addons into installable units.

    An ``order`` on an enabled addon becomes a dependency on every enabled
    addon with a lower order, on top of its explicit ``dependencies``.
    """
    if assets is None and cfg.assets_dir:
        assets = AssetBundle(cfg.assets_dir)

    implied = dependencies_from_order(
        OrderedStep(name=a.name, order=a.order)
        for a in cfg.addons
        if a.enabled and a.order is not None
    )

    return [
        _build_one(
            spec,
            dependencies=merge_dependencies(spec.dependencies, implied.get(spec.name, [])),
            renderer=renderer,
            assets=assets,
            verify_timeout=cfg.install.verify_timeout_seconds,
        )
        for spec in cfg.addons
    ]
