import sys
from pathlib import Path

import pytest

# Ensure src/ is on sys.path for local test runs without installation
PROJECT_ROOT = Path(__file__).resolve().parent.parent
SRC_DIR = PROJECT_ROOT / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from tsidkit.config.builder import TsidGeneratorBuilder  # noqa: E402
from tsidkit.core.constants import TSID_EPOCH_MILLIS  # noqa: E402
from tsidkit.generator.clock import FixedClock  # noqa: E402
from tsidkit.presets import reset_presets  # noqa: E402

# 2025-01-01T12:00:00Z
BASE_MS = 1735732800000


def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line("markers", "unit: fast unit tests")
    config.addinivalue_line("markers", "slow: slow-running tests")


@pytest.fixture
def fixed_clock() -> FixedClock:
    """Clock frozen at 2025-01-01T12:00:00Z until moved by the test."""
    return FixedClock(BASE_MS)


@pytest.fixture
def zero_builder(fixed_clock: FixedClock) -> TsidGeneratorBuilder:
    """Builder with a frozen clock and counters reset to zero."""
    return (
        TsidGeneratorBuilder()
        .with_clock(fixed_clock)
        .with_random_bytes_function(lambda length: bytes(length))
    )


@pytest.fixture(autouse=True)
def clean_presets(monkeypatch):
    """Isolate shared preset generators and TSIDCREATOR_* variables."""
    for name in (
        "TSIDCREATOR_NODE",
        "TSIDCREATOR_NODE_COUNT",
        "TSIDCREATOR_NODE_BITS",
        "TSIDCREATOR_CUSTOM_EPOCH",
        "TSIDCREATOR_DRIFT_TOLERANCE",
        "TSIDCREATOR_OVERFLOW_POLICY",
    ):
        monkeypatch.delenv(name, raising=False)
    reset_presets()
    yield
    reset_presets()


@pytest.fixture
def tsid_epoch_ms() -> int:
    return TSID_EPOCH_MILLIS
