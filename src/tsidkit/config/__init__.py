"""Generator configuration: settings, node id sources, builder."""

from .builder import TsidGeneratorBuilder, node_bits_for_count
from .node_source import EnvironmentNodeIdSource, NodeIdSource, StaticNodeIdSource
from .settings import GeneratorSettings

__all__ = [
    "TsidGeneratorBuilder",
    "node_bits_for_count",
    "GeneratorSettings",
    "NodeIdSource",
    "StaticNodeIdSource",
    "EnvironmentNodeIdSource",
]
