"""Tests for TsidGeneratorBuilder."""

import random
from datetime import datetime, timezone

import pytest

from tsidkit.config.builder import TsidGeneratorBuilder, node_bits_for_count
from tsidkit.config.node_source import StaticNodeIdSource
from tsidkit.config.settings import GeneratorSettings
from tsidkit.core.constants import DEFAULT_DRIFT_TOLERANCE_MS, TSID_EPOCH_MILLIS
from tsidkit.core.exceptions import ConfigurationError
from tsidkit.generator.engine import OverflowPolicy

from conftest import BASE_MS


@pytest.mark.unit
def test_defaults():
    gen = TsidGeneratorBuilder().build()
    assert gen.node_bits == 10
    assert gen.counter_bits == 12
    assert 0 <= gen.node < 1024
    assert gen.custom_epoch == TSID_EPOCH_MILLIS
    assert gen.drift_tolerance == DEFAULT_DRIFT_TOLERANCE_MS
    assert gen.overflow_policy is OverflowPolicy.CARRY_FORWARD


@pytest.mark.unit
@pytest.mark.parametrize("node_bits", [0, 1, 8, 10, 12, 20])
def test_node_bits_split(node_bits):
    gen = TsidGeneratorBuilder().with_node_bits(node_bits).with_node(0).build()
    assert gen.node_bits + gen.counter_bits == 22


@pytest.mark.unit
@pytest.mark.parametrize("node_bits", [-1, 21, 64])
def test_invalid_node_bits(node_bits):
    with pytest.raises(ConfigurationError, match="node_bits must be in"):
        TsidGeneratorBuilder().with_node_bits(node_bits).build()


@pytest.mark.unit
def test_node_out_of_range():
    with pytest.raises(ConfigurationError, match="node must be in"):
        TsidGeneratorBuilder().with_node_bits(8).with_node(256).build()
    with pytest.raises(ConfigurationError):
        TsidGeneratorBuilder().with_node(-1).build()


@pytest.mark.unit
def test_node_precedence_explicit_first():
    gen = (
        TsidGeneratorBuilder()
        .with_node(1)
        .with_settings(GeneratorSettings(node=2))
        .with_node_source(StaticNodeIdSource(node=3))
        .build()
    )
    assert gen.node == 1


@pytest.mark.unit
def test_node_precedence_settings_then_source():
    gen = (
        TsidGeneratorBuilder()
        .with_settings(GeneratorSettings(node=2))
        .with_node_source(StaticNodeIdSource(node=3))
        .build()
    )
    assert gen.node == 2

    gen = TsidGeneratorBuilder().with_node_source(StaticNodeIdSource(node=3)).build()
    assert gen.node == 3


@pytest.mark.unit
def test_random_node_uses_random_source():
    gen = (
        TsidGeneratorBuilder()
        .with_node_bits(8)
        .with_random_function(lambda: 0x12345)
        .build()
    )
    assert gen.node == 0x45


@pytest.mark.unit
@pytest.mark.parametrize(
    "count,bits", [(1, 0), (2, 1), (50, 6), (256, 8), (1000, 10), (1024, 10), (1025, 11)]
)
def test_node_bits_for_count(count, bits):
    assert node_bits_for_count(count) == bits


@pytest.mark.unit
def test_node_bits_for_count_invalid():
    with pytest.raises(ConfigurationError):
        node_bits_for_count(0)


@pytest.mark.unit
def test_node_bits_from_node_count():
    gen = TsidGeneratorBuilder().with_node_source(StaticNodeIdSource(node_count=50)).build()
    assert gen.node_bits == 6

    gen = TsidGeneratorBuilder().with_settings(GeneratorSettings(node_count=300)).build()
    assert gen.node_bits == 9

    # explicit bits win over node count
    gen = (
        TsidGeneratorBuilder()
        .with_node_bits(12)
        .with_node_source(StaticNodeIdSource(node_count=50))
        .build()
    )
    assert gen.node_bits == 12


@pytest.mark.unit
def test_node_count_too_large():
    with pytest.raises(ConfigurationError):
        TsidGeneratorBuilder().with_node_source(
            StaticNodeIdSource(node_count=(1 << 20) + 1)
        ).build()


@pytest.mark.unit
def test_custom_epoch_datetime_and_millis(fixed_clock):
    epoch = datetime(2025, 1, 1, tzinfo=timezone.utc)
    gen = TsidGeneratorBuilder().with_custom_epoch(epoch).with_clock(fixed_clock).build()
    assert gen.custom_epoch == 1735689600000
    assert gen.create().time == BASE_MS - 1735689600000

    gen = TsidGeneratorBuilder().with_custom_epoch(1000).build()
    assert gen.custom_epoch == 1000

    # naive datetimes are UTC
    gen = TsidGeneratorBuilder().with_custom_epoch(datetime(2025, 1, 1)).build()
    assert gen.custom_epoch == 1735689600000


@pytest.mark.unit
def test_clock_callable():
    gen = TsidGeneratorBuilder().with_clock(lambda: BASE_MS).build()
    assert gen.create().unix_millis() == BASE_MS


@pytest.mark.unit
def test_with_random_instances(fixed_clock):
    gen = (
        TsidGeneratorBuilder()
        .with_random(random.Random(5))
        .with_clock(fixed_clock)
        .build()
    )
    assert gen.create() < gen.create()

    gen = TsidGeneratorBuilder().with_random(random.SystemRandom()).build()
    assert gen.create() < gen.create()


@pytest.mark.unit
def test_with_random_rejects_unknown():
    with pytest.raises(TypeError):
        TsidGeneratorBuilder().with_random(object())


@pytest.mark.unit
def test_unknown_overflow_policy():
    with pytest.raises(ConfigurationError):
        TsidGeneratorBuilder().with_overflow_policy("drop")


@pytest.mark.unit
def test_settings_drive_generator():
    settings = GeneratorSettings(
        node=9,
        node_bits=4,
        custom_epoch=0,
        drift_tolerance_ms=500,
        overflow_policy="raise",
    )
    gen = TsidGeneratorBuilder().with_settings(settings).build()
    assert gen.node == 9
    assert gen.node_bits == 4
    assert gen.custom_epoch == 0
    assert gen.drift_tolerance == 500
    assert gen.overflow_policy is OverflowPolicy.RAISE


@pytest.mark.unit
def test_from_environment(monkeypatch):
    monkeypatch.setenv("TSIDCREATOR_NODE", "0x1F")
    monkeypatch.setenv("TSIDCREATOR_NODE_COUNT", "64")

    gen = TsidGeneratorBuilder.from_environment().build()

    assert gen.node == 31
    assert gen.node_bits == 6


@pytest.mark.unit
def test_node_from_source_masked_to_node_bits():
    gen = (
        TsidGeneratorBuilder()
        .with_node_bits(8)
        .with_node_source(StaticNodeIdSource(node=300))
        .build()
    )
    assert gen.node == 300 & 0xFF


@pytest.mark.unit
def test_explicit_node_not_masked():
    builder = (
        TsidGeneratorBuilder()
        .with_node_bits(8)
        .with_node(300)
        .with_node_source(StaticNodeIdSource(node=3))
    )
    with pytest.raises(ConfigurationError, match="node must be in"):
        builder.build()


@pytest.mark.unit
def test_future_custom_epoch_rejected_at_build(fixed_clock):
    builder = (
        TsidGeneratorBuilder()
        .with_clock(fixed_clock)
        .with_custom_epoch(fixed_clock.now_millis() + 1)
    )
    with pytest.raises(ConfigurationError, match="custom_epoch"):
        builder.build()
