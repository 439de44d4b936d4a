# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/addonctl/config/models.py

from typing import Any, Dict, List, Optional, Literal
from pydantic import BaseModel, Field, model_validator


class PatchSpec(BaseModel):
    """A post-render correction applied to an addon's manifest stream."""
    type: Literal["dns-policy", "host-network-api"]
    target: str
    value: Optional[str] = None      # dnsPolicy for "dns-policy"

    @model_validator(mode="after")
    def _value_required_for_dns(self) -> "PatchSpec":
        if self.type == "dns-policy" and not self.value:
            raise ValueError(f"dns-policy patch for '{self.target}' requires a value")
        return self


class WorkloadRef(BaseModel):
    kind: Literal["Deployment", "DaemonSet"]
    name: str
    namespace: Optional[str] = None  # defaults to the addon namespace


class AddonSpec(BaseModel):
    name: str
    enabled: bool = True
    namespace: str = "kube-system"
    chart: Optional[str] = None      # repo/chart, oci:// uri or local:<asset path>
    version: Optional[str] = None
    repo_url: Optional[str] = None
    release_name: Optional[str] = None
    create_namespace: bool = True
    values: Dict[str, Any] = Field(default_factory=dict)
    manifests: List[str] = Field(default_factory=list)     # asset paths applied before the chart
    dependencies: List[str] = Field(default_factory=list)  # addon names this one depends on
    order: Optional[int] = None      # fixed install order, lower first
    patches: List[PatchSpec] = Field(default_factory=list)
    verify: List[WorkloadRef] = Field(default_factory=list)

    @model_validator(mode="after")
    def _has_content(self) -> "AddonSpec":
        if not self.chart and not self.manifests:
            raise ValueError(f"addon '{self.name}' needs a chart or manifests")
        if self.patches and not self.chart:
            raise ValueError(f"addon '{self.name}' declares patches but no chart")
        return self


class InstallSettings(BaseModel):
    continue_on_error: bool = False
    verify: bool = True
    timeout_seconds: int = 600
    verify_timeout_seconds: int = 300
    dry_run: bool = False
    apply_retries: int = 2
    field_manager: str = "addonctl"


class AddonsConfig(BaseModel):
    environment: Literal["dev", "staging", "prod"] = "dev"
    context: Optional[str] = None       # Kubernetes context to use
    kubeconfig: Optional[str] = None
    assets_dir: Optional[str] = None
    install: InstallSettings = Field(default_factory=InstallSettings)
    addons: List[AddonSpec] = Field(default_factory=list)

    @model_validator(mode="after")
    def _unique_names(self) -> "AddonsConfig":
        seen: set[str] = set()
        for a in self.addons:
            if a.name in seen:
                raise ValueError(f"duplicate addon name '{a.name}'")
            seen.add(a.name)
        return self
