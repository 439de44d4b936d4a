# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/addonctl/manifests/document.py

from __future__ import annotations

from typing import Any, Dict, Optional, Sequence, Union

PathKey = Union[str, int]

_MISSING = object()


def _split(path: Union[str, Sequence[PathKey]]) -> list[PathKey]:
    if isinstance(path, str):
        return [p for p in path.split(".") if p]
    return list(path)


def get_path(tree: Any, path: Union[str, Sequence[PathKey]], default: Any = None) -> Any:
    """
    Read a nested value.

    ``path`` is either a dotted string ("spec.template.spec") or a sequence
    mixing map keys and list indices (("spec", "containers", 0, "env")).
    Returns ``default`` when any segment is absent or has the wrong type.
    """
    node = tree
    for key in _split(path):
        if isinstance(key, int):
            if not isinstance(node, list) or not -len(node) <= key < len(node):
                return default
            node = node[key]
        else:
            if not isinstance(node, dict) or key not in node:
                return default
            node = node[key]
    return node


def set_path(tree: Dict[str, Any], path: Union[str, Sequence[PathKey]], value: Any) -> None:
    """
    Write a nested value, creating intermediate maps for missing string keys.

    List indices must already exist. A non-map value sitting where an
    intermediate map is needed raises TypeError rather than being replaced.
    """
    keys = _split(path)
    if not keys:
        raise ValueError("empty path")

    node: Any = tree
    for key in keys[:-1]:
        if isinstance(key, int):
            if not isinstance(node, list):
                raise TypeError(f"expected list at index {key}, got {type(node).__name__}")
            node = node[key]
            continue
        if not isinstance(node, dict):
            raise TypeError(f"expected map at '{key}', got {type(node).__name__}")
        child = node.get(key)
        if child is None:
            child = {}
            node[key] = child
        node = child

    last = keys[-1]
    if isinstance(last, int):
        if not isinstance(node, list):
            raise TypeError(f"expected list at index {last}, got {type(node).__name__}")
        node[last] = value
    else:
        if not isinstance(node, dict):
            raise TypeError(f"expected map at '{last}', got {type(node).__name__}")
        node[last] = value


def delete_path(tree: Dict[str, Any], path: Union[str, Sequence[PathKey]]) -> bool:
    keys = _split(path)
    if not keys:
        return False
    parent = get_path(tree, keys[:-1], default=_MISSING)
    last = keys[-1]
    if isinstance(parent, dict) and not isinstance(last, int) and last in parent:
        del parent[last]
        return True
    if isinstance(parent, list) and isinstance(last, int) and -len(parent) <= last < len(parent):
        del parent[last]
        return True
    return False


class ManifestDocument:
    """
    One Kubernetes-style object decoded from a manifest stream.

    The underlying tree is a plain ``dict`` of YAML/JSON values and is
    mutated in place by patches.
    """

    __slots__ = ("obj",)

    def __init__(self, obj: Optional[Dict[str, Any]] = None):
        self.obj: Dict[str, Any] = obj if obj is not None else {}

    def __repr__(self) -> str:
        return f"ManifestDocument({self.ref})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ManifestDocument):
            return NotImplemented
        return self.obj == other.obj

    # ------------------------- identity -------------------------

    @property
    def kind(self) -> str:
        return self.get("kind") or ""

    @property
    def api_version(self) -> str:
        return self.get("apiVersion") or ""

    @property
    def name(self) -> str:
        return self.get("metadata.name") or ""

    @name.setter
    def name(self, value: str) -> None:
        self.set("metadata.name", value)

    @property
    def namespace(self) -> str:
        return self.get("metadata.namespace") or ""

    @namespace.setter
    def namespace(self, value: str) -> None:
        self.set("metadata.namespace", value)

    @property
    def labels(self) -> Dict[str, str]:
        return dict(self.get("metadata.labels") or {})

    @labels.setter
    def labels(self, value: Dict[str, str]) -> None:
        self.set("metadata.labels", dict(value))

    @property
    def ref(self) -> str:
        """Kind/namespace/name, used in log lines and error messages."""
        if self.namespace:
            return f"{self.kind}/{self.namespace}/{self.name}"
        return f"{self.kind}/{self.name}"

    # ------------------------- nested access -------------------------

    def get(self, path: Union[str, Sequence[PathKey]], default: Any = None) -> Any:
        return get_path(self.obj, path, default)

    def set(self, path: Union[str, Sequence[PathKey]], value: Any) -> None:
        set_path(self.obj, path, value)

    def delete(self, path: Union[str, Sequence[PathKey]]) -> bool:
        return delete_path(self.obj, path)
