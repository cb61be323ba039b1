"""Generator settings (explicit, env or YAML)."""

from __future__ import annotations

import os
from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from tsidkit.config.node_source import parse_int
from tsidkit.core.constants import (
    DEFAULT_DRIFT_TOLERANCE_MS,
    MAX_NODE_BITS,
    MIN_NODE_BITS,
    TSID_EPOCH_MILLIS,
)
from tsidkit.core.exceptions import ConfigurationError
from tsidkit.core.tsid import epoch_to_millis
from tsidkit.generator.engine import OverflowPolicy

ENV_PREFIX = "TSIDCREATOR_"


class GeneratorSettings(BaseModel):
    """
    Settings resolved into a ``TsidGenerator`` by ``TsidGeneratorBuilder``.

    Example YAML:
        tsid:
          node: 7
          node_bits: 8
          custom_epoch: "2024-01-01T00:00:00Z"
          overflow_policy: raise
    """

    model_config = ConfigDict(frozen=True)

    node: Optional[int] = Field(None, ge=0, description="Node id")
    node_bits: Optional[int] = Field(
        None,
        ge=MIN_NODE_BITS,
        le=MAX_NODE_BITS,
        description="Bits reserved for the node id (counter gets 22 - node_bits)",
    )
    node_count: Optional[int] = Field(
        None,
        ge=1,
        description="Expected node count; sizes node_bits when it is not set",
    )
    custom_epoch: int = Field(
        TSID_EPOCH_MILLIS, description="Epoch in Unix milliseconds"
    )
    drift_tolerance_ms: int = Field(
        DEFAULT_DRIFT_TOLERANCE_MS,
        ge=0,
        description="Backward clock movement treated as the same millisecond",
    )
    overflow_policy: OverflowPolicy = Field(
        OverflowPolicy.CARRY_FORWARD,
        description="carry_forward or raise",
    )

    @field_validator("custom_epoch", mode="before")
    @classmethod
    def validate_custom_epoch(cls, v):
        """Accept Unix ms, a datetime or an ISO 8601 string."""
        if isinstance(v, str) and not v.strip().lstrip("-").isdigit():
            v = datetime.fromisoformat(v.strip().replace("Z", "+00:00"))
        if isinstance(v, datetime):
            return epoch_to_millis(v)
        return v

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GeneratorSettings":
        try:
            return cls(**data)
        except (ValidationError, ValueError) as exc:
            raise ConfigurationError(f"Invalid generator settings: {exc}") from exc

    @classmethod
    def from_yaml(cls, path: str) -> "GeneratorSettings":
        """Load settings from a YAML file (top-level ``tsid:`` key optional)."""
        import yaml

        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise ConfigurationError(f"{path}: expected a mapping")
        section = data.get("tsid", data)
        if not isinstance(section, dict):
            raise ConfigurationError(f"{path}: 'tsid' must be a mapping")
        return cls.from_dict(section)

    @classmethod
    def from_env(cls) -> "GeneratorSettings":
        data: Dict[str, Any] = {}

        for field_name, env_suffix in (
            ("node", "NODE"),
            ("node_count", "NODE_COUNT"),
            ("node_bits", "NODE_BITS"),
            ("drift_tolerance_ms", "DRIFT_TOLERANCE"),
        ):
            raw = os.getenv(ENV_PREFIX + env_suffix)
            if raw is None or not raw.strip():
                continue
            value = parse_int(raw)
            if value is None:
                raise ConfigurationError(
                    f"{ENV_PREFIX + env_suffix} must be an integer, got {raw!r}"
                )
            data[field_name] = value

        epoch = os.getenv(ENV_PREFIX + "CUSTOM_EPOCH")
        if epoch:
            data["custom_epoch"] = epoch
        policy = os.getenv(ENV_PREFIX + "OVERFLOW_POLICY")
        if policy:
            data["overflow_policy"] = policy.strip().lower()

        return cls.from_dict(data)


__all__ = ["GeneratorSettings", "ENV_PREFIX"]
