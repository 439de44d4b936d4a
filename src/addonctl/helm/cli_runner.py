# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/addonctl/helm/cli_runner.py

from __future__ import annotations

import logging
import os
import subprocess
import tempfile
from typing import Any, Dict, List, Optional

import yaml

from .errors import HelmError, ChartNotFoundError
from ..addons.assets import AssetBundle
from ..execution import ExecutionContext, InstallCancelled

log = logging.getLogger("addonctl")

LOCAL_PREFIX = "local:"


class HelmTemplateRenderer:
    """
    A pragmatic wrapper around ``helm template``.
    - Charts are "repo/chart", "oci://..." or "local:<path in asset bundle>".
    - Values are written to a temporary YAML file passed with -f.
    - Testable by mocking subprocess.run.
    """

    def __init__(
        self,
        *,
        assets: Optional[AssetBundle] = None,
        kube_version: Optional[str] = None,
        env: dict[str, str] | None = None,
    ):
        self.assets = assets
        self.kube_version = kube_version
        self.env = env or {}

    # ------------------------- internal helpers -------------------------

    def _chart_ref(self, chart: str) -> str:
        if not chart.startswith(LOCAL_PREFIX):
            return chart
        name = chart[len(LOCAL_PREFIX):]
        if self.assets is None:
            raise ChartNotFoundError(f"local chart {name!r} requested but no asset bundle is configured")
        try:
            return str(self.assets.path(name))
        except (FileNotFoundError, ValueError) as e:
            raise ChartNotFoundError(str(e)) from e

    def _run(self, argv: List[str], ctx: Optional[ExecutionContext]) -> subprocess.CompletedProcess:
        timeout = None
        if ctx is not None:
            ctx.check()
            timeout = ctx.remaining()

        log.debug("[helm] %s", " ".join(argv))
        try:
            cp = subprocess.run(
                argv,
                check=False,
                capture_output=True,
                env={**os.environ, **self.env} if self.env else None,
                timeout=timeout,
            )
        except subprocess.TimeoutExpired as e:
            raise InstallCancelled("helm template exceeded the install deadline") from e

        if cp.returncode != 0:
            stderr = cp.stderr.decode("utf-8", "replace") if isinstance(cp.stderr, bytes) else (cp.stderr or "")
            raise HelmError(
                f"helm template failed (rc={cp.returncode}) for {argv!r}\n{stderr}",
                returncode=cp.returncode,
                stderr=stderr,
            )
        return cp

    # ------------------------- ChartRenderer -------------------------

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
    ) -> bytes:
        chart_ref = self._chart_ref(chart)
        release = release_name or chart.rsplit("/", 1)[-1].removeprefix(LOCAL_PREFIX)

        with tempfile.NamedTemporaryFile("w", suffix=".yaml", delete=False) as tf:
            yaml.safe_dump(values or {}, tf)
            values_file = tf.name

        try:
            argv = [
                "helm", "template", release, chart_ref,
                "--namespace", namespace,
                "--include-crds",
                "-f", values_file,
            ]
            if version:
                argv += ["--version", version]
            if repo_url:
                argv += ["--repo", repo_url]
            if self.kube_version:
                argv += ["--kube-version", self.kube_version]

            cp = self._run(argv, ctx)
        finally:
            os.unlink(values_file)

        out = cp.stdout
        return out.encode("utf-8") if isinstance(out, str) else (out or b"")
