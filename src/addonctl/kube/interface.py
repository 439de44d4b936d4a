# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/addonctl/kube/interface.py

from __future__ import annotations

from typing import Dict, List, Optional, Protocol, Union

from ..execution import ExecutionContext


class ClusterClient(Protocol):
    """
    Cluster operations consumed by the installer and by addon Verify hooks.

    ``apply`` must be create-or-update so re-applying the same manifest is safe.
    """

    def apply(self, manifest: Union[bytes, str], ctx: Optional[ExecutionContext] = None) -> None: ...

    def create_secret(
        self,
        namespace: str,
        name: str,
        data: Dict[str, bytes],
        ctx: Optional[ExecutionContext] = None,
    ) -> None: ...

    def delete_secret(self, namespace: str, name: str, ctx: Optional[ExecutionContext] = None) -> None: ...

    def secret_exists(self, namespace: str, name: str, ctx: Optional[ExecutionContext] = None) -> bool: ...

    def wait_for_deployment(
        self, namespace: str, name: str, timeout: float, ctx: Optional[ExecutionContext] = None
    ) -> None: ...

    def wait_for_daemonset(
        self, namespace: str, name: str, timeout: float, ctx: Optional[ExecutionContext] = None
    ) -> None: ...

    def get_pods(
        self, namespace: str, label_selector: str, ctx: Optional[ExecutionContext] = None
    ) -> List[dict]: ...
