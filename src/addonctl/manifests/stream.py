# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/addonctl/manifests/stream.py

from __future__ import annotations

from typing import Iterable, List, Union

import yaml

from .document import ManifestDocument
from .errors import DecodeError

DELIMITER = "---\n"


class _ManifestDumper(yaml.SafeDumper):
    """SafeDumper that never emits anchors/aliases for shared sub-trees."""

    def ignore_aliases(self, data) -> bool:
        return True


def _as_text(stream: Union[bytes, str, None]) -> str:
    if stream is None:
        return ""
    if isinstance(stream, bytes):
        try:
            return stream.decode("utf-8")
        except UnicodeDecodeError as e:
            raise DecodeError(f"failed to decode manifest stream: {e}") from e
    return stream


def decode_stream(stream: Union[bytes, str, None]) -> List[ManifestDocument]:
    """
    Decode a YAML (or JSON) multi-document stream.

    Empty documents (leading/trailing/consecutive ``---``, whitespace or
    comment-only segments, ``{}``) are skipped. Any document that does not
    parse, or parses to something other than a map, raises DecodeError.
    """
    text = _as_text(stream)
    docs: List[ManifestDocument] = []

    index = 0
    loader = yaml.safe_load_all(text)
    while True:
        try:
            obj = next(loader)
        except StopIteration:
            break
        except yaml.YAMLError as e:
            raise DecodeError(f"failed to decode manifest document {index}: {e}") from e

        if obj is None or obj == {}:
            index += 1
            continue
        if not isinstance(obj, dict):
            raise DecodeError(
                f"failed to decode manifest document {index}: "
                f"expected an object, got {type(obj).__name__}"
            )
        docs.append(ManifestDocument(obj))
        index += 1

    return docs


def encode_document(doc: ManifestDocument) -> str:
    return yaml.dump(
        doc.obj,
        Dumper=_ManifestDumper,
        default_flow_style=False,
        sort_keys=False,
        allow_unicode=True,
    )


def encode_stream(docs: Iterable[ManifestDocument]) -> bytes:
    """Serialize documents in order, joined by the ``---`` delimiter."""
    return DELIMITER.join(encode_document(d) for d in docs).encode("utf-8")


def count_documents(stream: Union[bytes, str, None]) -> int:
    return len(decode_stream(stream))
