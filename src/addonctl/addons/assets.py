# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/addonctl/addons/assets.py

from __future__ import annotations

from pathlib import Path


class AssetBundle:
    """
    Read-only bundle of static chart directories and manifests, resolved by
    relative path under a root directory.
    """

    def __init__(self, root: str | Path):
        self.root = Path(root).resolve()

    def __repr__(self) -> str:
        return f"AssetBundle({str(self.root)!r})"

    def path(self, name: str) -> Path:
        p = (self.root / name).resolve()
        if p != self.root and self.root not in p.parents:
            raise ValueError(f"asset path escapes bundle root: {name}")
        if not p.exists():
            raise FileNotFoundError(f"asset not found in {self.root}: {name}")
        return p

    def exists(self, name: str) -> bool:
        try:
            self.path(name)
        except (FileNotFoundError, ValueError):
            return False
        return True

    def read_bytes(self, name: str) -> bytes:
        p = self.path(name)
        if not p.is_file():
            raise IsADirectoryError(f"asset is a directory: {name}")
        return p.read_bytes()
