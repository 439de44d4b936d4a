# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/addonctl/config/loader.py

import logging
import os
import yaml
from pathlib import Path
from .models import AddonsConfig

log = logging.getLogger("addonctl")


def _deep_merge(base: dict, override: dict) -> dict:
    """
    Recursively merge *override* into *base* (mutates base).
    Only overwrites when the override value is non-empty.
    """
    for key, value in override.items():
        if (
            key in base
            and isinstance(base[key], dict)
            and isinstance(value, dict)
        ):
            _deep_merge(base[key], value)
        else:
            if value not in (None, ""):
                base[key] = value
    return base


def _find_secrets_file(config_path: Path) -> Path | None:
    """
    Locate secrets.yaml using this priority:

    1. ADDONCTL_SECRETS_FILE environment variable (explicit override)
    2. secrets.yaml in the same directory as the addons config
    """
    env = os.environ.get("ADDONCTL_SECRETS_FILE")
    if env:
        p = Path(env)
        if p.is_file():
            return p
        log.warning("ADDONCTL_SECRETS_FILE=%s does not exist, skipping", env)
        return None

    p = config_path.parent / "secrets.yaml"
    if p.is_file():
        return p

    return None


def _load_yaml(path: Path) -> dict:
    """Load a YAML file, expanding ${ENV_VAR} references."""
    raw = path.read_text()
    expanded = os.path.expandvars(raw)
    return yaml.safe_load(expanded) or {}


def _merge_addon_lists(data: dict, secrets: dict) -> None:
    # addons are a list keyed by name; merge entry-by-entry instead of replacing
    overrides = secrets.pop("addons", None)
    if not overrides:
        return
    by_name = {a.get("name"): a for a in data.setdefault("addons", [])}
    for entry in overrides:
        target = by_name.get(entry.get("name"))
        if target is None:
            log.warning("secrets file references unknown addon %r, ignoring", entry.get("name"))
            continue
        _deep_merge(target, entry)


def load_config(path: str | Path) -> AddonsConfig:
    """
    Load and validate an addons YAML config.

    ``${ENV_VAR}`` placeholders are expanded at load time. A secrets file
    (``ADDONCTL_SECRETS_FILE`` or ``secrets.yaml`` next to the config) with
    the same structure is deep-merged before validation; its ``addons``
    entries are matched to configured addons by name.
    """
    path = Path(path)
    data = _load_yaml(path)

    secrets_path = _find_secrets_file(path)
    if secrets_path:
        log.debug("Merging secrets from %s", secrets_path)
        secrets = _load_yaml(secrets_path)
        _merge_addon_lists(data, secrets)
        _deep_merge(data, secrets)
    else:
        log.debug("No secrets.yaml found, proceeding without secrets merge")

    return AddonsConfig.model_validate(data)
