# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/addonctl/manifests/patch.py

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Iterable, Tuple, Union

from .document import ManifestDocument
from .errors import NoMatchError
from .stream import decode_stream, encode_stream

log = logging.getLogger("addonctl")

Matcher = Callable[[ManifestDocument], bool]
Mutator = Callable[[ManifestDocument], None]


@dataclass(frozen=True)
class Patch:
    """
    A predicate-guarded, in-place mutation of a rendered manifest stream.

    ``description`` only appears in the error raised when nothing matches,
    e.g. "Deployment/hcloud-csi-controller".
    """

    description: str
    matches: Matcher
    mutate: Mutator

    def apply(self, manifests: Union[bytes, str]) -> bytes:
        return patch_manifest_objects(manifests, self.description, self.matches, self.mutate)


def patch_manifest_stream(
    manifests: Union[bytes, str, None],
    description: str,
    matches: Matcher,
    mutate: Mutator,
) -> Tuple[bytes, int]:
    """
    Run ``mutate`` on every document for which ``matches`` is true.

    Returns the re-serialized stream (all documents, original order) and
    the number of documents mutated. Exceptions from ``mutate`` propagate
    unchanged and no output is produced. Raises NoMatchError when no
    document matched.
    """
    docs = decode_stream(manifests)

    patched = 0
    for doc in docs:
        if not matches(doc):
            continue
        mutate(doc)
        patched += 1
        log.debug("[patch] %s: mutated %s", description, doc.ref)

    if patched == 0:
        raise NoMatchError(description)

    log.debug("[patch] %s: %d of %d document(s) patched", description, patched, len(docs))
    return encode_stream(docs), patched


def patch_manifest_objects(
    manifests: Union[bytes, str, None],
    description: str,
    matches: Matcher,
    mutate: Mutator,
) -> bytes:
    out, _ = patch_manifest_stream(manifests, description, matches, mutate)
    return out


def apply_patches(manifests: Union[bytes, str], patches: Iterable[Patch]) -> bytes:
    """Apply several patches in sequence; the first failure aborts."""
    out = manifests if isinstance(manifests, bytes) else manifests.encode("utf-8")
    for p in patches:
        out = p.apply(out)
    return out
