from __future__ import annotations

import random as _random
from datetime import datetime
from typing import Callable, Optional, Union

from tsidkit.config.node_source import EnvironmentNodeIdSource, NodeIdSource
from tsidkit.config.settings import GeneratorSettings
from tsidkit.core.constants import DEFAULT_NODE_BITS
from tsidkit.core.exceptions import ConfigurationError
from tsidkit.core.tsid import check_node_bits, epoch_to_millis
from tsidkit.generator.clock import Clock, as_clock
from tsidkit.generator.engine import OverflowPolicy, TsidGenerator
from tsidkit.generator.random_source import (
    ByteRandom,
    IntRandom,
    RandomSource,
    as_random_source,
)
from tsidkit.utils.logging import get_logger

logger = get_logger(__name__)


def node_bits_for_count(node_count: int) -> int:
    """Smallest bit width able to hold ``node_count`` node ids."""
    if node_count < 1:
        raise ConfigurationError(f"node_count must be >= 1, got {node_count}")
    return (node_count - 1).bit_length()


class TsidGeneratorBuilder:
    """
    Fluent builder for ``TsidGenerator``.

    Node id precedence:
        with_node() -> settings.node -> node source -> random draw

    Ids from a node source or the random draw are masked to ``node_bits``;
    explicit ones must fit.

    Node bits precedence:
        with_node_bits() -> settings.node_bits -> node count (settings, then
        node source) -> 10

    Everything is validated in ``build()``; invalid values raise
    ``ConfigurationError`` there and never during generation.

    Example:
        generator = (
            TsidGeneratorBuilder()
            .with_node_bits(8)
            .with_node(42)
            .build()
        )
        tsid = generator.create()
    """

    def __init__(self) -> None:
        self._node: Optional[int] = None
        self._node_bits: Optional[int] = None
        self._custom_epoch: Optional[int] = None
        self._clock: Optional[Clock] = None
        self._random: Optional[RandomSource] = None
        self._drift_tolerance: Optional[int] = None
        self._overflow_policy: Optional[OverflowPolicy] = None
        self._settings: Optional[GeneratorSettings] = None
        self._node_source: Optional[NodeIdSource] = None

    @classmethod
    def from_environment(cls) -> "TsidGeneratorBuilder":
        """Builder reading settings and node id from TSIDCREATOR_* variables."""
        return (
            cls()
            .with_settings(GeneratorSettings.from_env())
            .with_node_source(EnvironmentNodeIdSource())
        )

    def with_node(self, node: Optional[int]) -> "TsidGeneratorBuilder":
        self._node = node
        return self

    def with_node_bits(self, node_bits: Optional[int]) -> "TsidGeneratorBuilder":
        self._node_bits = node_bits
        return self

    def with_custom_epoch(
        self, custom_epoch: Union[int, datetime]
    ) -> "TsidGeneratorBuilder":
        """Epoch as Unix milliseconds or datetime (naive = UTC)."""
        self._custom_epoch = epoch_to_millis(custom_epoch)
        return self

    def with_clock(
        self, clock: Union[Clock, Callable[[], int]]
    ) -> "TsidGeneratorBuilder":
        """Clock object or zero-arg callable returning Unix milliseconds."""
        self._clock = as_clock(clock)
        return self

    def with_random(
        self, random: Union[RandomSource, _random.Random]
    ) -> "TsidGeneratorBuilder":
        self._random = as_random_source(random)
        return self

    def with_random_function(
        self, func: Callable[[], int]
    ) -> "TsidGeneratorBuilder":
        """Random function returning an integer."""
        self._random = IntRandom(func)
        return self

    def with_random_bytes_function(
        self, func: Callable[[int], Optional[bytes]]
    ) -> "TsidGeneratorBuilder":
        """
        Random function returning ``length`` bytes.

        It may return a fixed value: ``lambda n: bytes(n)`` (or None) resets the
        counter to zero at every new millisecond.
        """
        self._random = ByteRandom(func)
        return self

    def with_drift_tolerance(self, drift_tolerance_ms: int) -> "TsidGeneratorBuilder":
        self._drift_tolerance = drift_tolerance_ms
        return self

    def with_overflow_policy(
        self, policy: Union[OverflowPolicy, str]
    ) -> "TsidGeneratorBuilder":
        try:
            self._overflow_policy = OverflowPolicy(policy)
        except ValueError as exc:
            raise ConfigurationError(f"Unknown overflow policy: {policy!r}") from exc
        return self

    def with_settings(self, settings: GeneratorSettings) -> "TsidGeneratorBuilder":
        self._settings = settings
        return self

    def with_node_source(self, source: NodeIdSource) -> "TsidGeneratorBuilder":
        self._node_source = source
        return self

    def _resolve_node_bits(self, settings: GeneratorSettings) -> int:
        if self._node_bits is not None:
            return check_node_bits(self._node_bits)
        if settings.node_bits is not None:
            return check_node_bits(settings.node_bits)

        node_count = settings.node_count
        if node_count is None and self._node_source is not None:
            node_count = self._node_source.get_node_count()
        if node_count is not None:
            return check_node_bits(node_bits_for_count(node_count))
        return DEFAULT_NODE_BITS

    def _resolve_node(
        self, settings: GeneratorSettings, node_bits: int, random: RandomSource
    ) -> int:
        if self._node is not None:
            return self._node
        if settings.node is not None:
            return settings.node
        node_mask = (1 << node_bits) - 1
        if self._node_source is not None:
            node = self._node_source.get_node()
            if node is not None:
                # discovered ids are folded into the node field, not rejected
                if node & node_mask != node:
                    logger.warning(
                        "tsid_node_masked",
                        node=node,
                        masked=node & node_mask,
                        node_bits=node_bits,
                    )
                return node & node_mask

        node = random.next_int() & node_mask
        logger.info("tsid_node_randomly_assigned", node=node, node_bits=node_bits)
        return node

    def build(self) -> TsidGenerator:
        settings = self._settings or GeneratorSettings()
        random = self._random or ByteRandom()

        node_bits = self._resolve_node_bits(settings)
        node = self._resolve_node(settings, node_bits, random)

        custom_epoch = (
            self._custom_epoch
            if self._custom_epoch is not None
            else settings.custom_epoch
        )
        drift_tolerance = (
            self._drift_tolerance
            if self._drift_tolerance is not None
            else settings.drift_tolerance_ms
        )
        policy = self._overflow_policy or settings.overflow_policy

        generator = TsidGenerator(
            node=node,
            node_bits=node_bits,
            custom_epoch=custom_epoch,
            clock=self._clock,
            random=random,
            drift_tolerance=drift_tolerance,
            overflow_policy=policy,
        )
        logger.info(
            "tsid_generator_built",
            node=node,
            node_bits=node_bits,
            counter_bits=generator.counter_bits,
            custom_epoch=custom_epoch,
            overflow_policy=policy.value,
        )
        return generator


__all__ = ["TsidGeneratorBuilder", "node_bits_for_count"]
