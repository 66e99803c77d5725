"""Tests for PoolRegistry."""

import pytest

from dex.config import PoolConfig
from dex.errors import (
    IdenticalAssets,
    InvalidAmount,
    PoolAlreadyExists,
    PoolNotFound,
    RatioMismatch,
    UnknownAsset,
)
from dex.math import FixedPoint
from dex.pools import LiquidityPool, PoolRegistry, build_registry, canonical_pair, pair_key
from tests.helpers import BTC, ETH, USDC, fp, make_pool


class TestPairKeys:
    """Tests for pair normalization."""

    def test_pair_key_unordered(self):
        """Both orders of a pair give the same key."""
        assert pair_key(ETH, USDC) == pair_key(USDC, ETH)

    def test_canonical_pair_sorted(self):
        """canonical_pair orders the assets deterministically."""
        assert canonical_pair(USDC, ETH) == (ETH, USDC)
        assert canonical_pair(ETH, USDC) == (ETH, USDC)

    def test_canonical_pair_mixed_types(self):
        """Identifiers of different types still order without error."""
        assert canonical_pair("A", 1) == canonical_pair(1, "A")

    def test_identical_assets(self):
        """A pair of one asset is rejected."""
        with pytest.raises(IdenticalAssets):
            pair_key(ETH, ETH)
        with pytest.raises(IdenticalAssets):
            canonical_pair(ETH, ETH)


class TestPoolRegistryLifecycle:
    """Tests for creating and registering pools."""

    def test_empty_registry(self, empty_registry):
        """A new registry has no pools."""
        assert len(empty_registry) == 0
        assert empty_registry.pools() == []

    def test_create_pool(self, empty_registry):
        """create_pool registers a funded pool."""
        result = empty_registry.create_pool(ETH, USDC, "10", "20000", fee_rate="0.003")
        assert result.claim_amount == fp("100")
        assert len(empty_registry) == 1
        assert (USDC, ETH) in empty_registry

    def test_create_pool_default_fee(self, empty_registry):
        """Pools created without a fee use the configured default."""
        empty_registry.create_pool(ETH, USDC, "10", "20000")
        assert empty_registry.get_pool(ETH, USDC).fee_rate == fp("0.003")

    def test_create_pool_uses_registry_config(self):
        """The registry's configuration reaches the pools it creates."""
        registry = PoolRegistry(PoolConfig(bootstrap_claim_supply=fp("1000")))
        result = registry.create_pool(ETH, USDC, "10", "20000")
        assert result.claim_amount == fp("1000")

    def test_duplicate_pair_rejected(self, registry):
        """A second pool for a pair (in either order) is rejected."""
        with pytest.raises(PoolAlreadyExists):
            registry.create_pool(USDC, ETH, "1", "1")
        assert len(registry) == 1

    def test_identical_assets_rejected(self, empty_registry):
        """create_pool rejects identical assets."""
        with pytest.raises(IdenticalAssets):
            empty_registry.create_pool(ETH, ETH, "1", "1")
        assert len(empty_registry) == 0

    def test_failed_create_registers_nothing(self, empty_registry):
        """Invalid initial amounts leave the registry unchanged."""
        with pytest.raises(InvalidAmount):
            empty_registry.create_pool(ETH, USDC, "0", "1")
        assert not empty_registry.has_pool(ETH, USDC)

    def test_add_pool(self, empty_registry):
        """Pre-built pools can be registered once."""
        pool = make_pool(asset_x=BTC, asset_y=ETH)
        empty_registry.add_pool(pool)
        assert empty_registry.get_pool(ETH, BTC) is pool
        with pytest.raises(PoolAlreadyExists):
            empty_registry.add_pool(make_pool(asset_x=ETH, asset_y=BTC))

    def test_initial_pools(self):
        """Pools passed to the constructor are registered."""
        registry = PoolRegistry(pools=[make_pool(), make_pool(asset_x=BTC, asset_y=ETH)])
        assert len(registry) == 2
        assert [p.name for p in registry.pools()] == ["BTC/ETH", "X/Y"]

    def test_build_registry(self):
        """build_registry returns an empty registry."""
        registry = build_registry()
        assert isinstance(registry, PoolRegistry)
        assert len(registry) == 0


class TestPoolRegistryLookup:
    """Tests for finding pools."""

    def test_lookup_order_independent(self, registry):
        """Either asset order finds the same pool."""
        assert registry.get_pool(ETH, USDC) is registry.get_pool(USDC, ETH)
        assert isinstance(registry.find_pool(USDC, ETH), LiquidityPool)

    def test_missing_pool(self, registry):
        """Unknown pairs return None or raise PoolNotFound."""
        assert registry.find_pool(ETH, BTC) is None
        assert not registry.has_pool(ETH, BTC)
        with pytest.raises(PoolNotFound):
            registry.get_pool(ETH, BTC)

    def test_snapshots(self, registry):
        """snapshots lists every pool's state."""
        registry.create_pool(BTC, ETH, "1", "15")
        snapshots = registry.snapshots()
        assert [(s.asset_x, s.asset_y) for s in snapshots] == [(BTC, ETH), (ETH, USDC)]
        assert registry.snapshot(USDC, ETH).reserve_y == fp("20000")


class TestPoolRegistryRouting:
    """Tests for operations routed through the registry."""

    def test_add_liquidity_orients_amounts(self, registry):
        """Amounts follow the caller's asset order, not the canonical one."""
        result = registry.add_liquidity(USDC, ETH, "2000", "1")
        assert result.claim_amount == fp("10")
        pool = registry.get_pool(ETH, USDC)
        assert pool.reserve_x == fp("11")
        assert pool.reserve_y == fp("22000")

    def test_add_liquidity_ratio_mismatch(self, registry):
        """Ratio errors from the pool propagate unchanged."""
        with pytest.raises(RatioMismatch):
            registry.add_liquidity(ETH, USDC, "2000", "1")

    def test_remove_liquidity(self, registry):
        """Redemptions are routed to the pair's pool."""
        result = registry.remove_liquidity(USDC, ETH, "50")
        assert result.amount_of(ETH) == fp("5")
        assert result.amount_of(USDC) == fp("10000")

    def test_swap(self, registry):
        """Swaps are routed and change only that pool."""
        registry.create_pool(BTC, ETH, "1", "15")
        btc_before = registry.snapshot(BTC, ETH)
        result = registry.swap(USDC, ETH, ETH, "1")
        assert result.asset_out == USDC
        assert result.amount_out > FixedPoint.zero()
        assert registry.snapshot(BTC, ETH) == btc_before

    def test_swap_unknown_pool(self, registry):
        """Swaps on an unregistered pair raise PoolNotFound."""
        with pytest.raises(PoolNotFound):
            registry.swap(ETH, BTC, ETH, "1")

    def test_swap_asset_outside_pair(self, registry):
        """The input asset must belong to the pair."""
        with pytest.raises(UnknownAsset):
            registry.swap(ETH, USDC, BTC, "1")

    def test_swap_exact_output(self, registry):
        """Exact-output swaps are routed."""
        result = registry.swap_exact_output(ETH, USDC, USDC, "100")
        assert result.amount_out >= fp("100")
        assert result.asset_in == ETH

    def test_quotes_do_not_mutate(self, registry):
        """Quotes leave the pool unchanged."""
        before = registry.snapshot(ETH, USDC)
        out = registry.quote(ETH, USDC, ETH, "1")
        needed = registry.quote_amount_in(ETH, USDC, USDC, out.amount_out)
        assert registry.snapshot(ETH, USDC) == before
        assert needed.amount_in <= fp("1")
