"""Pool registry keyed by unordered asset pair.

PoolRegistry owns every LiquidityPool. Each unordered pair of assets maps to
at most one pool; the registry creates pools on request and routes
liquidity and swap operations to the right one.

Concurrency: the registry table has its own lock, held only for lookup and
insertion. Every pool operation runs while holding that pool's lock, so the
operations on one pool are totally ordered while operations on different
pools proceed in parallel.
"""

from __future__ import annotations

import threading
from collections.abc import Iterator
from contextlib import contextmanager

import structlog

from dex.amm import SwapResult
from dex.config import DEFAULT_POOL_CONFIG, PoolConfig
from dex.errors import PoolAlreadyExists, PoolNotFound
from dex.pools.pool import AmountLike, LiquidityPool
from dex.pools.types import AssetId, LiquidityResult, PairKey, PoolSnapshot, pair_key

logger = structlog.get_logger()


class PoolRegistry:
    """Registry of liquidity pools, one per unordered asset pair.

    The registry is an explicit object: callers own it and pass it to
    whatever needs pool access. Results and errors from pools propagate
    unchanged.
    """

    def __init__(
        self,
        config: PoolConfig = DEFAULT_POOL_CONFIG,
        pools: list[LiquidityPool] | None = None,
    ) -> None:
        """Initialize the registry with optional pre-built pools.

        Args:
            config: Protocol parameters for pools created by this registry
            pools: Initial pools. If None, starts empty.

        Raises:
            PoolAlreadyExists: If two initial pools share an asset pair
        """
        self._config = config
        self._pools: dict[PairKey, LiquidityPool] = {}
        self._lock = threading.Lock()

        if pools:
            for pool in pools:
                self.add_pool(pool)

    @property
    def config(self) -> PoolConfig:
        return self._config

    def __len__(self) -> int:
        return len(self._pools)

    def __contains__(self, pair: tuple[AssetId, AssetId]) -> bool:
        return self.has_pool(*pair)

    # --- Pool lifecycle ---

    def add_pool(self, pool: LiquidityPool) -> None:
        """Register an already-built pool.

        Raises:
            PoolAlreadyExists: If a pool for this pair is already registered
        """
        key = pair_key(pool.asset_x, pool.asset_y)
        with self._lock:
            if key in self._pools:
                raise PoolAlreadyExists(f"Pool {pool.name} already exists")
            self._pools[key] = pool

    def create_pool(
        self,
        asset_a: AssetId,
        asset_b: AssetId,
        amount_a: AmountLike,
        amount_b: AmountLike,
        fee_rate: AmountLike | None = None,
    ) -> LiquidityResult:
        """Create and fund the pool for an asset pair.

        Args:
            asset_a: First asset (any order)
            asset_b: Second asset
            amount_a: Initial reserve of asset_a
            amount_b: Initial reserve of asset_b
            fee_rate: Swap fee fraction in [0, 1). Defaults to
                config.default_fee_rate.

        Returns:
            LiquidityResult of the initial deposit (bootstrap claim supply minted)

        Raises:
            IdenticalAssets: If asset_a == asset_b
            PoolAlreadyExists: If a pool for the pair is already registered
            InvalidAmount: If either amount is not positive
            InvalidFeeRate: If fee_rate is not in [0, 1)
        """
        key = pair_key(asset_a, asset_b)
        if fee_rate is None:
            fee_rate = self._config.default_fee_rate

        # Held across creation so concurrent creates for one pair cannot both succeed
        with self._lock:
            if key in self._pools:
                raise PoolAlreadyExists(f"Pool for {asset_a!r}/{asset_b!r} already exists")
            pool, result = LiquidityPool.create(
                asset_a, asset_b, amount_a, amount_b, fee_rate, config=self._config
            )
            self._pools[key] = pool

        return result

    # --- Lookup ---

    def find_pool(self, asset_a: AssetId, asset_b: AssetId) -> LiquidityPool | None:
        """Get the pool for a pair (order independent), or None."""
        key = pair_key(asset_a, asset_b)
        with self._lock:
            return self._pools.get(key)

    def get_pool(self, asset_a: AssetId, asset_b: AssetId) -> LiquidityPool:
        """Get the pool for a pair (order independent).

        Raises:
            PoolNotFound: If no pool is registered for the pair
        """
        pool = self.find_pool(asset_a, asset_b)
        if pool is None:
            raise PoolNotFound(f"No pool for {asset_a!r}/{asset_b!r}")
        return pool

    def has_pool(self, asset_a: AssetId, asset_b: AssetId) -> bool:
        return self.find_pool(asset_a, asset_b) is not None

    def pools(self) -> list[LiquidityPool]:
        """All registered pools, sorted by pair name."""
        with self._lock:
            pools = list(self._pools.values())
        return sorted(pools, key=lambda p: p.name)

    @contextmanager
    def _locked(self, asset_a: AssetId, asset_b: AssetId) -> Iterator[LiquidityPool]:
        pool = self.get_pool(asset_a, asset_b)
        with pool.lock:
            yield pool

    def snapshot(self, asset_a: AssetId, asset_b: AssetId) -> PoolSnapshot:
        """Consistent view of one pool's state.

        Raises:
            PoolNotFound: If no pool is registered for the pair
        """
        with self._locked(asset_a, asset_b) as pool:
            return pool.snapshot()

    def snapshots(self) -> list[PoolSnapshot]:
        result = []
        for pool in self.pools():
            with pool.lock:
                result.append(pool.snapshot())
        return result

    # --- Routed operations ---

    def add_liquidity(
        self,
        asset_a: AssetId,
        asset_b: AssetId,
        amount_a: AmountLike,
        amount_b: AmountLike,
    ) -> LiquidityResult:
        """Deposit amount_a of asset_a and amount_b of asset_b into the pair's pool.

        Raises:
            PoolNotFound: If no pool is registered for the pair
            InvalidAmount: If either amount is not positive
            RatioMismatch: If the amounts do not match the reserve ratio
        """
        with self._locked(asset_a, asset_b) as pool:
            amount_x, amount_y = pool.orient(asset_a, amount_a, amount_b)
            return pool.add_liquidity(amount_x, amount_y)

    def remove_liquidity(
        self,
        asset_a: AssetId,
        asset_b: AssetId,
        claim_amount: AmountLike,
    ) -> LiquidityResult:
        """Redeem claim tokens from the pair's pool.

        Raises:
            PoolNotFound: If no pool is registered for the pair
            InvalidAmount: If claim_amount is not positive
            InsufficientClaim: If claim_amount exceeds the claim supply
        """
        with self._locked(asset_a, asset_b) as pool:
            return pool.remove_liquidity(claim_amount)

    def swap(
        self,
        asset_a: AssetId,
        asset_b: AssetId,
        asset_in: AssetId,
        amount_in: AmountLike,
        min_amount_out: AmountLike | None = None,
    ) -> SwapResult:
        """Swap an exact input through the pair's pool.

        Raises:
            PoolNotFound: If no pool is registered for the pair
            InvalidAmount: If amount_in is not positive
            UnknownAsset: If asset_in is not one of the pair
            InsufficientLiquidity: If the pool is empty
            SlippageExceeded: If the output is below min_amount_out
        """
        with self._locked(asset_a, asset_b) as pool:
            return pool.swap(asset_in, amount_in, min_amount_out=min_amount_out)

    def swap_exact_output(
        self,
        asset_a: AssetId,
        asset_b: AssetId,
        asset_out: AssetId,
        amount_out: AmountLike,
        max_amount_in: AmountLike | None = None,
    ) -> SwapResult:
        """Swap for an exact output through the pair's pool.

        Raises:
            PoolNotFound: If no pool is registered for the pair
            InvalidAmount: If amount_out is not positive
            UnknownAsset: If asset_out is not one of the pair
            InsufficientLiquidity: If amount_out is not below the output reserve
            SlippageExceeded: If the required input exceeds max_amount_in
        """
        with self._locked(asset_a, asset_b) as pool:
            return pool.swap_exact_output(asset_out, amount_out, max_amount_in=max_amount_in)

    def quote(
        self,
        asset_a: AssetId,
        asset_b: AssetId,
        asset_in: AssetId,
        amount_in: AmountLike,
    ) -> SwapResult:
        """Quote an exact-input swap without executing it."""
        with self._locked(asset_a, asset_b) as pool:
            result = pool.quote_amount_out(asset_in, amount_in)
        logger.debug(
            "swap_quoted",
            pool=pool.name,
            asset_in=str(asset_in),
            amount_in=str(result.amount_in),
            amount_out=str(result.amount_out),
        )
        return result

    def quote_amount_in(
        self,
        asset_a: AssetId,
        asset_b: AssetId,
        asset_out: AssetId,
        amount_out: AmountLike,
    ) -> SwapResult:
        """Quote the input an exact-output swap would need, without executing it."""
        with self._locked(asset_a, asset_b) as pool:
            return pool.quote_amount_in(asset_out, amount_out)


def build_registry(config: PoolConfig | None = None) -> PoolRegistry:
    """Create an empty registry with the given (or default) configuration."""
    return PoolRegistry(config=config or DEFAULT_POOL_CONFIG)
