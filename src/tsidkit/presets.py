"""
Shared generators per node bit-width preset.

Each preset is built on first use (node id from ``TSIDCREATOR_NODE``, random
otherwise) and kept for the lifetime of the process. Generators hold no
external resources, so there is nothing to tear down; ``reset_presets()``
exists for tests.

Applications that care about node ids should build and own a generator with
``TsidGeneratorBuilder`` instead.
"""

from __future__ import annotations

import threading
from typing import Dict, Optional

from tsidkit.config.builder import TsidGeneratorBuilder
from tsidkit.config.node_source import EnvironmentNodeIdSource
from tsidkit.core.constants import NODE_BITS_256, NODE_BITS_1024, NODE_BITS_4096
from tsidkit.core.tsid import Tsid
from tsidkit.generator.engine import TsidGenerator

_lock = threading.Lock()
_generators: Dict[Optional[int], TsidGenerator] = {}
node_source = EnvironmentNodeIdSource()


def get_generator(node_bits: Optional[int] = None) -> TsidGenerator:
    """
    Shared generator for ``node_bits``.

    ``None`` sizes the node field from ``TSIDCREATOR_NODE_COUNT`` (10 bits when
    unset).
    """
    generator = _generators.get(node_bits)
    if generator is None:
        with _lock:
            generator = _generators.get(node_bits)
            if generator is None:
                generator = (
                    TsidGeneratorBuilder()
                    .with_node_bits(node_bits)
                    .with_node_source(node_source)
                    .build()
                )
                _generators[node_bits] = generator
    return generator


def reset_presets() -> None:
    with _lock:
        _generators.clear()


def get_tsid() -> Tsid:
    return get_generator().create()


def get_tsid256() -> Tsid:
    """TSID from the 256-node preset (16384 TSIDs/ms)."""
    return get_generator(NODE_BITS_256).create()


def get_tsid1024() -> Tsid:
    """TSID from the 1024-node preset (4096 TSIDs/ms)."""
    return get_generator(NODE_BITS_1024).create()


def get_tsid4096() -> Tsid:
    """TSID from the 4096-node preset (1024 TSIDs/ms)."""
    return get_generator(NODE_BITS_4096).create()


__all__ = [
    "get_generator",
    "reset_presets",
    "get_tsid",
    "get_tsid256",
    "get_tsid1024",
    "get_tsid4096",
    "node_source",
]
