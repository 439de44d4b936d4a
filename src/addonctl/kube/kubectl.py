# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/addonctl/kube/kubectl.py

from __future__ import annotations

import base64
import json
import math
import logging
import subprocess
from typing import Dict, List, Optional, Union

import yaml

from ..execution import ExecutionContext, InstallCancelled
from ..utils.retry import retry, RetryError

log = logging.getLogger("addonctl")


class KubectlError(RuntimeError):
    pass


class KubectlClient:
    """
    ClusterClient backed by the local ``kubectl`` binary.

    - Manifests are piped to ``kubectl apply --server-side -f -``.
    - Every call is bounded by the ExecutionContext deadline when one is given.
    - Testable by mocking subprocess.run.
    """

    def __init__(
        self,
        *,
        kubeconfig: Optional[str] = None,
        context: Optional[str] = None,
        field_manager: str = "addonctl",
        apply_retries: int = 2,
        retry_delay: float = 2.0,
    ):
        self.kubeconfig = kubeconfig
        self.context = context
        self.field_manager = field_manager
        self.apply_retries = apply_retries
        self.retry_delay = retry_delay

    # ------------------------- internal helpers -------------------------

    def _base(self) -> list[str]:
        cmd = ["kubectl"]
        if self.kubeconfig:
            cmd += ["--kubeconfig", self.kubeconfig]
        if self.context:
            cmd += ["--context", self.context]
        return cmd

    def _run(
        self,
        args: List[str],
        *,
        stdin: Optional[bytes] = None,
        ctx: Optional[ExecutionContext] = None,
        allow_rc: set[int] | None = None,
    ) -> tuple[int, str, str]:
        """
        Run a kubectl command.

        Returns:
            (rc, stdout, stderr)
        """
        allow_rc = allow_rc or {0}
        timeout = None
        if ctx is not None:
            ctx.check()
            timeout = ctx.remaining()

        argv = self._base() + args
        log.debug("[kubectl] %s", " ".join(argv))
        try:
            cp = subprocess.run(
                argv,
                input=stdin,
                capture_output=True,
                check=False,
                timeout=timeout,
            )
        except subprocess.TimeoutExpired as e:
            raise InstallCancelled(f"kubectl {' '.join(args)} exceeded the install deadline") from e

        out = _text(cp.stdout)
        err = _text(cp.stderr)
        if cp.returncode not in allow_rc:
            raise KubectlError(
                f"kubectl {' '.join(args)} failed (rc={cp.returncode}): {err.strip() or out.strip()}"
            )
        return cp.returncode, out, err

    # ------------------------- ClusterClient -------------------------

    def apply(self, manifest: Union[bytes, str], ctx: Optional[ExecutionContext] = None) -> None:
        data = manifest.encode("utf-8") if isinstance(manifest, str) else manifest
        args = [
            "apply",
            "--server-side",
            "--force-conflicts",
            f"--field-manager={self.field_manager}",
            "-f",
            "-",
        ]

        def _on_retry(attempt: int, exc: Exception) -> None:
            log.warning("[kubectl] apply attempt %d failed: %s", attempt, exc)

        @retry(
            attempts=self.apply_retries + 1,
            delay=self.retry_delay,
            backoff=2.0,
            retry_on=(KubectlError,),
            on_retry=_on_retry,
        )
        def _apply() -> None:
            self._run(args, stdin=data, ctx=ctx)

        try:
            _apply()
        except RetryError as e:
            raise KubectlError(str(e)) from e.last_error

    def create_secret(
        self,
        namespace: str,
        name: str,
        data: Dict[str, bytes],
        ctx: Optional[ExecutionContext] = None,
    ) -> None:
        secret = {
            "apiVersion": "v1",
            "kind": "Secret",
            "metadata": {"name": name, "namespace": namespace},
            "type": "Opaque",
            "data": {k: base64.b64encode(v).decode("ascii") for k, v in data.items()},
        }
        self.apply(yaml.safe_dump(secret, sort_keys=False), ctx=ctx)

    def delete_secret(self, namespace: str, name: str, ctx: Optional[ExecutionContext] = None) -> None:
        self._run(["delete", "secret", name, "-n", namespace, "--ignore-not-found"], ctx=ctx)

    def secret_exists(self, namespace: str, name: str, ctx: Optional[ExecutionContext] = None) -> bool:
        rc, out, err = self._run(
            ["get", "secret", name, "-n", namespace, "-o", "name"],
            ctx=ctx,
            allow_rc={0, 1},
        )
        if rc == 0:
            return True
        if "NotFound" in err or "not found" in err:
            return False
        raise KubectlError(f"kubectl get secret {namespace}/{name} failed: {err.strip() or out.strip()}")

    def _rollout_status(
        self, kind: str, namespace: str, name: str, timeout: float, ctx: Optional[ExecutionContext]
    ) -> None:
        if ctx is not None and ctx.remaining() is not None:
            timeout = min(timeout, ctx.remaining())
        self._run(
            ["rollout", "status", f"{kind}/{name}", "-n", namespace, f"--timeout={max(1, math.ceil(timeout))}s"],
            ctx=ctx,
        )

    def wait_for_deployment(
        self, namespace: str, name: str, timeout: float, ctx: Optional[ExecutionContext] = None
    ) -> None:
        self._rollout_status("deployment", namespace, name, timeout, ctx)

    def wait_for_daemonset(
        self, namespace: str, name: str, timeout: float, ctx: Optional[ExecutionContext] = None
    ) -> None:
        self._rollout_status("daemonset", namespace, name, timeout, ctx)

    def get_pods(
        self, namespace: str, label_selector: str, ctx: Optional[ExecutionContext] = None
    ) -> List[dict]:
        _, out, _ = self._run(
            ["get", "pods", "-n", namespace, "-l", label_selector, "-o", "json"],
            ctx=ctx,
        )
        return json.loads(out or "{}").get("items", [])


def _text(value) -> str:
    if value is None:
        return ""
    if isinstance(value, bytes):
        return value.decode("utf-8", "replace")
    return value
