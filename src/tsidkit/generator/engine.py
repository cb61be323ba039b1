from __future__ import annotations

import threading
from enum import Enum
from typing import Optional, Tuple

from tsidkit.core.constants import (
    DEFAULT_DRIFT_TOLERANCE_MS,
    DEFAULT_NODE_BITS,
    RANDOM_BITS,
    RANDOM_MASK,
    TIME_BITS,
    TSID_EPOCH_MILLIS,
)
from tsidkit.core.exceptions import CapacityExceededError, ConfigurationError
from tsidkit.core.tsid import Tsid, check_node_bits
from tsidkit.generator.clock import Clock, SystemClock
from tsidkit.generator.random_source import ByteRandom, RandomSource
from tsidkit.monitoring.metrics import (
    CLOCK_REGRESSIONS,
    COUNTER_OVERFLOWS,
    IDS_CREATED,
)
from tsidkit.utils.logging import get_logger

logger = get_logger(__name__)

# (outcome, clock high-water, clock reading), recorded under the lock
Regression = Tuple[str, int, int]


class OverflowPolicy(str, Enum):
    """What happens when the counter runs out within one millisecond."""

    CARRY_FORWARD = "carry_forward"  # borrow the next millisecond
    RAISE = "raise"  # CapacityExceededError, caller retries


class TsidGenerator:
    """
    Generates monotonically increasing TSIDs for one node.

    Each ``create()`` reads the clock and, under a single lock:

    - clock at or behind the previous TSID's time, and less than
      ``drift_tolerance`` ms behind the highest clock reading seen since
      the time was last reset: treated as the same millisecond, counter += 1
    - otherwise: take the new time, counter = random value

    Regressions are measured against real clock readings, not against the
    TSID time, so milliseconds borrowed on overflow never count as clock
    drift. A clock that stops while TSIDs keep being requested makes the
    time run ahead of it; the time resumes from the clock once it passes the
    last borrowed millisecond.

    A counter overflow is resolved by the overflow policy. With
    ``CARRY_FORWARD`` the time advances by one millisecond and the counter is
    re-randomised, so the sequence stays strictly increasing.

    The time field holds 42 bits (about 139 years past the epoch); the clock
    must not read earlier than ``custom_epoch``.

    Use one instance per node and reuse it; usually built with
    ``TsidGeneratorBuilder``.
    """

    def __init__(
        self,
        node: int = 0,
        node_bits: int = DEFAULT_NODE_BITS,
        custom_epoch: int = TSID_EPOCH_MILLIS,
        clock: Optional[Clock] = None,
        random: Optional[RandomSource] = None,
        drift_tolerance: int = DEFAULT_DRIFT_TOLERANCE_MS,
        overflow_policy: OverflowPolicy = OverflowPolicy.CARRY_FORWARD,
    ):
        check_node_bits(node_bits)
        node_max = (1 << node_bits) - 1
        if not (0 <= node <= node_max):
            raise ConfigurationError(f"node must be in [0, {node_max}], got {node}")
        if drift_tolerance < 0:
            raise ConfigurationError("drift_tolerance must be >= 0")

        self._clock = clock or SystemClock()
        elapsed = self._clock.now_millis() - custom_epoch
        if not (0 <= elapsed < 1 << TIME_BITS):
            raise ConfigurationError(
                f"Clock reads {elapsed} ms from custom_epoch {custom_epoch}; "
                f"must be in [0, 2^{TIME_BITS})"
            )

        self._node = node
        self._node_bits = node_bits
        self._counter_bits = RANDOM_BITS - node_bits
        self._counter_mask = RANDOM_MASK >> node_bits
        # bytes needed to fill the counter from a byte source
        self._random_bytes = ((self._counter_bits - 1) // 8) + 1

        self._epoch = custom_epoch
        self._random = random or ByteRandom()
        self._drift_tolerance = drift_tolerance
        self._overflow_policy = OverflowPolicy(overflow_policy)

        self._lock = threading.Lock()
        self._last_time: Optional[int] = None
        self._clock_high = 0
        self._counter = 0

        self._created = IDS_CREATED.labels(node_bits=str(node_bits))
        self._overflows = COUNTER_OVERFLOWS.labels(policy=self._overflow_policy.value)
        self._regressions = {
            outcome: CLOCK_REGRESSIONS.labels(outcome=outcome)
            for outcome in ("absorbed", "reset")
        }

    @property
    def node(self) -> int:
        return self._node

    @property
    def node_bits(self) -> int:
        return self._node_bits

    @property
    def counter_bits(self) -> int:
        return self._counter_bits

    @property
    def custom_epoch(self) -> int:
        return self._epoch

    @property
    def drift_tolerance(self) -> int:
        return self._drift_tolerance

    @property
    def overflow_policy(self) -> OverflowPolicy:
        return self._overflow_policy

    def create(self) -> Tsid:
        """
        Return the next TSID.

        Raises:
            CapacityExceededError: counter exhausted under ``OverflowPolicy.RAISE``.
        """
        with self._lock:
            time_ms, overflowed, regression = self._advance()
            counter = self._counter

        if regression is not None:
            self._record_regression(regression)
        if overflowed:
            self._overflows.inc()
            if self._overflow_policy is OverflowPolicy.RAISE:
                logger.warning(
                    "tsid_capacity_exceeded",
                    time=time_ms,
                    node=self._node,
                    capacity=self._counter_mask + 1,
                )
                raise CapacityExceededError(
                    f"More than {self._counter_mask + 1} TSIDs requested in one millisecond"
                )

        self._created.inc()
        return Tsid(
            (time_ms << RANDOM_BITS)
            | (self._node << self._counter_bits)
            | (counter & self._counter_mask)
        )

    def create_number(self) -> int:
        return self.create().to_number()

    def create_string(self) -> str:
        return self.create().to_string()

    def _advance(self) -> Tuple[int, bool, Optional[Regression]]:
        """
        Move {last_time, counter} forward; caller holds the lock.

        Returns the time for the new TSID, whether the counter overflowed and
        the clock regression seen, if any. Under ``RAISE`` an overflow leaves
        the state untouched with the counter saturated.
        """
        now = self._clock.now_millis() - self._epoch
        last = self._last_time
        high = self._clock_high
        regression: Optional[Regression] = None

        if last is not None and now <= last and (
            now >= high or high - now < self._drift_tolerance
        ):
            if now < high:
                regression = ("absorbed", high, now)
            else:
                self._clock_high = now

            if self._counter < self._counter_mask:
                self._counter += 1
                return last, False, regression
            if self._overflow_policy is OverflowPolicy.RAISE:
                return last, True, regression

            self._counter = self._random_counter()
            self._last_time = last + 1
            return last + 1, True, regression

        if last is not None and now < high:
            regression = ("reset", high, now)
        self._clock_high = now
        self._last_time = now
        self._counter = self._random_counter()
        return now, False, regression

    def _record_regression(self, regression: Regression) -> None:
        outcome, high, now = regression
        self._regressions[outcome].inc()
        if outcome == "reset":
            logger.warning(
                "clock_regression_beyond_tolerance",
                clock_high=high,
                now=now,
                drift_tolerance_ms=self._drift_tolerance,
            )

    def _random_counter(self) -> int:
        data = self._random.next_bytes(self._random_bytes)
        if not data:
            return 0
        return int.from_bytes(bytes(data), "big") & self._counter_mask


__all__ = ["OverflowPolicy", "TsidGenerator"]
