# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/addonctl/manifests/errors.py


class ManifestError(RuntimeError):
    """Base class for manifest stream failures."""


class DecodeError(ManifestError):
    """Raised when a document in a manifest stream cannot be parsed."""


class NoMatchError(ManifestError):
    """Raised when a patch predicate matched no document in the stream."""

    def __init__(self, description: str):
        self.description = description
        super().__init__(f"{description} not found in manifests")


class MutationError(ManifestError):
    """Raised by a patch when a matched document has an unexpected shape."""
