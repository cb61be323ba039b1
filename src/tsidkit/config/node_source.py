"""
Node id discovery strategies.

The builder only consumes ``Optional[int]`` values from a ``NodeIdSource``;
where they come from (environment, fixed values, anything else) is up to the
strategy.
"""

from __future__ import annotations

import os
from abc import ABC, abstractmethod
from threading import Lock
from typing import Dict, Mapping, Optional

__all__ = [
    "NodeIdSource",
    "StaticNodeIdSource",
    "EnvironmentNodeIdSource",
    "parse_int",
]


def parse_int(value: Optional[str]) -> Optional[int]:
    """Parse decimal or prefixed (``0x``, ``0o``, ``0b``) integers; None if invalid."""
    if value is None:
        return None
    value = value.strip()
    if not value:
        return None
    try:
        return int(value, 0)
    except ValueError:
        return None


class NodeIdSource(ABC):
    @abstractmethod
    def get_node(self) -> Optional[int]:
        """Configured node id, or None."""
        pass

    @abstractmethod
    def get_node_count(self) -> Optional[int]:
        """Expected number of nodes (sizes the node field), or None."""
        pass


class StaticNodeIdSource(NodeIdSource):
    def __init__(self, node: Optional[int] = None, node_count: Optional[int] = None):
        self._node = node
        self._node_count = node_count

    def get_node(self) -> Optional[int]:
        return self._node

    def get_node_count(self) -> Optional[int]:
        return self._node_count


class EnvironmentNodeIdSource(NodeIdSource):
    """
    Reads ``tsidcreator.node`` / ``tsidcreator.node.count``.

    Lookup order for a key:
        1. in-process override (``set_node()``, ``set_node_count()``)
        2. environment variable, key upper-cased with dots replaced by
           underscores (``TSIDCREATOR_NODE``, ``TSIDCREATOR_NODE_COUNT``)

    Empty or malformed values count as "not configured".
    """

    NODE = "tsidcreator.node"
    NODE_COUNT = "tsidcreator.node.count"

    def __init__(self, environ: Optional[Mapping[str, str]] = None):
        self._environ = environ
        self._overrides: Dict[str, str] = {}
        self._lock = Lock()

    @staticmethod
    def env_name(key: str) -> str:
        return key.upper().replace(".", "_")

    def get_property(self, key: str) -> Optional[str]:
        with self._lock:
            value = self._overrides.get(key)
        if value:
            return value
        environ = os.environ if self._environ is None else self._environ
        value = environ.get(self.env_name(key))
        return value or None

    def get_int(self, key: str) -> Optional[int]:
        return parse_int(self.get_property(key))

    def get_node(self) -> Optional[int]:
        return self.get_int(self.NODE)

    def get_node_count(self) -> Optional[int]:
        return self.get_int(self.NODE_COUNT)

    def set_node(self, node: int) -> None:
        with self._lock:
            self._overrides[self.NODE] = str(node)

    def set_node_count(self, node_count: int) -> None:
        with self._lock:
            self._overrides[self.NODE_COUNT] = str(node_count)

    def clear(self) -> None:
        with self._lock:
            self._overrides.clear()
