"""Shared types for pools and the registry."""

from __future__ import annotations

from collections.abc import Hashable
from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from dex.errors import IdenticalAssets
from dex.instructions import CustodyInstruction
from dex.math import FixedPoint

# Assets are opaque runtime identifiers; any hashable, orderable value works
AssetId = Hashable

# Unordered pair of asset identifiers
PairKey = frozenset


def _sort_key(asset: AssetId) -> tuple[str, Any]:
    # Group by type first so mixed identifier types still order deterministically
    return (type(asset).__name__, asset)


def canonical_pair(asset_a: AssetId, asset_b: AssetId) -> tuple[AssetId, AssetId]:
    """Order two asset identifiers canonically (asset_x, asset_y).

    Raises:
        IdenticalAssets: If both identifiers are the same asset
    """
    if asset_a == asset_b:
        raise IdenticalAssets(f"A pool needs two different assets, got {asset_a!r} twice")
    first, second = sorted((asset_a, asset_b), key=_sort_key)
    return first, second


def pair_key(asset_a: AssetId, asset_b: AssetId) -> PairKey:
    """Unordered registry key for an asset pair.

    Raises:
        IdenticalAssets: If both identifiers are the same asset
    """
    if asset_a == asset_b:
        raise IdenticalAssets(f"A pool needs two different assets, got {asset_a!r} twice")
    return frozenset((asset_a, asset_b))


@dataclass(frozen=True)
class PoolSnapshot:
    """Immutable view of a pool's state at one point in the operation order."""

    asset_x: AssetId
    asset_y: AssetId
    reserve_x: FixedPoint
    reserve_y: FixedPoint
    claim_supply: FixedPoint
    fee_rate: FixedPoint

    @property
    def k(self) -> Decimal:
        """The constant product reserve_x * reserve_y, exact."""
        return self.reserve_x.exact_mul(self.reserve_y)

    @property
    def is_empty(self) -> bool:
        return self.claim_supply.is_zero()


@dataclass(frozen=True)
class LiquidityResult:
    """Outcome of creating, funding or redeeming from a pool.

    For deposits, amount_x/amount_y are what the caller paid in and
    claim_amount is what was minted. For redemptions, amount_x/amount_y are
    paid out and claim_amount is what was burned.
    """

    asset_x: AssetId
    asset_y: AssetId
    amount_x: FixedPoint
    amount_y: FixedPoint
    claim_amount: FixedPoint
    instructions: tuple[CustodyInstruction, ...]

    def amount_of(self, asset: AssetId) -> FixedPoint:
        """Amount of one side of the pair, by asset identifier."""
        if asset == self.asset_x:
            return self.amount_x
        if asset == self.asset_y:
            return self.amount_y
        raise KeyError(asset)


__all__ = [
    "AssetId",
    "PairKey",
    "canonical_pair",
    "pair_key",
    "PoolSnapshot",
    "LiquidityResult",
]
