# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/addonctl/manifests/patchers.py

"""
Concrete corrections for rendered third-party charts.

Charts are consumed as rendered output only, so these locate the target
workload by kind and name and edit a known sub-path.
"""

from __future__ import annotations

from typing import Any, Dict, List, Union

from .document import ManifestDocument
from .errors import MutationError
from .patch import Patch, patch_manifest_objects

API_HOST_ENV = "KUBERNETES_SERVICE_HOST"
API_PORT_ENV = "KUBERNETES_SERVICE_PORT"

LOCAL_API_HOST = "localhost"
LOCAL_API_PORT = "6443"

_WORKLOAD_KINDS = ("DaemonSet", "Deployment")


# ------------------------- DNS policy -------------------------

def dns_policy_patch(deployment_name: str, dns_policy: str) -> Patch:
    def matches(doc: ManifestDocument) -> bool:
        return doc.kind == "Deployment" and doc.name == deployment_name

    def mutate(doc: ManifestDocument) -> None:
        try:
            doc.set("spec.template.spec.dnsPolicy", dns_policy)
        except TypeError as e:
            raise MutationError(f"cannot set dnsPolicy on {doc.ref}: {e}") from e

    return Patch(
        description=f"Deployment/{deployment_name}",
        matches=matches,
        mutate=mutate,
    )


def patch_deployment_dns_policy(
    manifests: Union[bytes, str],
    deployment_name: str,
    dns_policy: str,
) -> bytes:
    """Set ``spec.template.spec.dnsPolicy`` on the named Deployment."""
    return dns_policy_patch(deployment_name, dns_policy).apply(manifests)


# ------------------------- host network API access -------------------------

def _rebuild_env(env: Any) -> List[Dict[str, Any]]:
    kept = [
        e for e in (env or [])
        if not (isinstance(e, dict) and e.get("name") in (API_HOST_ENV, API_PORT_ENV))
    ]
    kept.append({"name": API_HOST_ENV, "value": LOCAL_API_HOST})
    kept.append({"name": API_PORT_ENV, "value": LOCAL_API_PORT})
    return kept


def host_network_api_patch(workload_name: str) -> Patch:
    """
    Point every container of a hostNetwork workload at the local API server.

    Existing KUBERNETES_SERVICE_HOST/PORT entries are dropped before the
    fixed ones are appended, so the patch is idempotent.
    """

    def matches(doc: ManifestDocument) -> bool:
        return doc.kind in _WORKLOAD_KINDS and doc.name == workload_name

    def mutate(doc: ManifestDocument) -> None:
        containers = doc.get("spec.template.spec.containers")
        if not isinstance(containers, list) or not containers:
            raise MutationError(f"no containers found in {doc.kind}/{doc.name}")

        for i, container in enumerate(containers):
            if not isinstance(container, dict):
                raise MutationError(
                    f"container {i} in {doc.kind}/{doc.name} is not an object"
                )
            container["env"] = _rebuild_env(container.get("env"))

    return Patch(
        description=f"DaemonSet or Deployment {workload_name}",
        matches=matches,
        mutate=mutate,
    )


def patch_host_network_api_access(manifests: Union[bytes, str], workload_name: str) -> bytes:
    p = host_network_api_patch(workload_name)
    return patch_manifest_objects(manifests, p.description, p.matches, p.mutate)
