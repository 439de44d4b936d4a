# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/addonctl/helm/errors.py
from typing import Optional


class HelmError(RuntimeError):
    """``helm template`` exited non-zero; carries the exit code and stderr."""

    def __init__(self, message: str, *, returncode: Optional[int] = None, stderr: str = ""):
        super().__init__(message)
        self.returncode = returncode
        self.stderr = stderr


class ChartNotFoundError(HelmError):
    """A ``local:`` chart reference that the asset bundle cannot resolve."""
