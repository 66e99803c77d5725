"""Engine configuration."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation

from dex.constants import BOOTSTRAP_CLAIM_SUPPLY, DEFAULT_FEE_RATE, RATIO_TOLERANCE_UNITS
from dex.errors import InvalidFeeRate
from dex.math import FixedPoint


@dataclass(frozen=True)
class PoolConfig:
    """Centralized configuration for pool accounting.

    This dataclass holds the protocol parameters every pool in a registry
    shares, making it easy to test with different configurations and
    ensuring consistency across pools.

    Attributes:
        bootstrap_claim_supply: Claim tokens minted when an empty pool is
            funded (default: 100)
        default_fee_rate: Fee used when create_pool is called without one
            (default: 0.003)
        ratio_tolerance: Allowed ratio deviation in raw fixed-point units
            when adding liquidity (default: 1)
    """

    bootstrap_claim_supply: FixedPoint = field(
        default_factory=lambda: FixedPoint.from_decimal(BOOTSTRAP_CLAIM_SUPPLY)
    )
    default_fee_rate: FixedPoint = field(
        default_factory=lambda: FixedPoint.from_decimal(DEFAULT_FEE_RATE)
    )
    ratio_tolerance: int = RATIO_TOLERANCE_UNITS

    def __post_init__(self) -> None:
        if self.bootstrap_claim_supply.is_zero():
            raise ValueError("bootstrap_claim_supply must be positive")
        if self.default_fee_rate >= FixedPoint.one():
            raise InvalidFeeRate(f"Fee rate must be in [0, 1), got {self.default_fee_rate}")
        if self.ratio_tolerance < 0:
            raise ValueError(f"ratio_tolerance cannot be negative: {self.ratio_tolerance}")


# Default configuration instance
DEFAULT_POOL_CONFIG = PoolConfig()


def load_pool_config(environ: Mapping[str, str] | None = None) -> PoolConfig:
    """Build a PoolConfig from environment variables.

    - DEX_DEFAULT_FEE_RATE: Fee fraction for pools created without one
    - DEX_BOOTSTRAP_CLAIM_SUPPLY: Claim tokens minted on first funding
    - DEX_RATIO_TOLERANCE: Ratio tolerance in raw units

    Unset variables fall back to the defaults.

    Raises:
        ValueError: If a variable is set but malformed
        InvalidAmount: If a decimal variable is negative or too precise
    """
    env = os.environ if environ is None else environ
    overrides: dict[str, object] = {}

    try:
        if "DEX_DEFAULT_FEE_RATE" in env:
            overrides["default_fee_rate"] = FixedPoint.from_decimal(
                Decimal(env["DEX_DEFAULT_FEE_RATE"])
            )
        if "DEX_BOOTSTRAP_CLAIM_SUPPLY" in env:
            overrides["bootstrap_claim_supply"] = FixedPoint.from_decimal(
                Decimal(env["DEX_BOOTSTRAP_CLAIM_SUPPLY"])
            )
    except InvalidOperation as err:
        raise ValueError(f"Malformed decimal in pool configuration: {err}") from err

    if "DEX_RATIO_TOLERANCE" in env:
        overrides["ratio_tolerance"] = int(env["DEX_RATIO_TOLERANCE"])

    return PoolConfig(**overrides)  # type: ignore[arg-type]
