"""Tests for LiquidityPool."""

from decimal import Decimal

import pytest

from dex.errors import (
    IdenticalAssets,
    InsufficientClaim,
    InsufficientLiquidity,
    InvalidAmount,
    InvalidFeeRate,
    RatioMismatch,
    SlippageExceeded,
    UnknownAsset,
)
from dex.instructions import InstructionKind
from dex.math import FixedPoint
from dex.pools import LiquidityPool, validate_fee_rate
from tests.helpers import LOW_FEE, X, Y, d, floor18, fp, make_pool


class TestPoolCreation:
    """Tests for creating and funding a pool."""

    def test_create_mints_bootstrap_supply(self):
        """A new pool holds the deposit and 100 claim tokens."""
        pool, result = LiquidityPool.create(X, Y, "1000", "50", LOW_FEE)
        assert pool.reserve_x == fp("1000")
        assert pool.reserve_y == fp("50")
        assert pool.claim_supply == fp("100")
        assert result.claim_amount == fp("100")

    def test_create_orders_assets_canonically(self):
        """Assets given in reverse order are stored as (X, Y) with amounts swapped."""
        pool, result = LiquidityPool.create(Y, X, "50", "1000", LOW_FEE)
        assert pool.assets == (X, Y)
        assert pool.reserve_x == fp("1000")
        assert pool.reserve_y == fp("50")
        assert result.amount_of(X) == fp("1000")
        assert result.amount_of(Y) == fp("50")

    def test_create_instructions(self):
        """Creation asks custody to collect both assets and mint the claims."""
        _, result = LiquidityPool.create(X, Y, "1000", "50", LOW_FEE)
        kinds = [(i.kind, i.asset, i.amount) for i in result.instructions]
        assert kinds == [
            (InstructionKind.TRANSFER_IN, X, fp("1000")),
            (InstructionKind.TRANSFER_IN, Y, fp("50")),
            (InstructionKind.MINT_CLAIM, "X/Y:claim", fp("100")),
        ]

    def test_identical_assets_rejected(self):
        """A pool needs two distinct assets."""
        with pytest.raises(IdenticalAssets):
            LiquidityPool.create(X, X, "1", "1", LOW_FEE)

    def test_zero_amount_rejected(self):
        """Both initial reserves must be positive."""
        with pytest.raises(InvalidAmount):
            LiquidityPool.create(X, Y, "0", "50", LOW_FEE)
        with pytest.raises(InvalidAmount):
            LiquidityPool.create(X, Y, "1000", "0", LOW_FEE)

    @pytest.mark.parametrize("fee_rate", ["1", "1.5", "-0.01", "abc"])
    def test_bad_fee_rate_rejected(self, fee_rate):
        """Fee rate must be a decimal in [0, 1)."""
        with pytest.raises(InvalidFeeRate):
            LiquidityPool.create(X, Y, "1000", "50", fee_rate)

    def test_zero_fee_allowed(self):
        """A zero fee is valid."""
        pool = make_pool(fee_rate="0")
        assert pool.fee_rate == FixedPoint.zero()

    def test_validate_fee_rate(self):
        """validate_fee_rate returns the parsed rate."""
        assert validate_fee_rate("0.003") == fp("0.003")
        assert validate_fee_rate(Decimal("0.999999999999999999")) < FixedPoint.one()


class TestPoolAccessors:
    """Tests for read-only views."""

    def test_names(self, pool):
        """Pool and claim token names follow the canonical pair."""
        assert pool.name == "X/Y"
        assert pool.claim_token == "X/Y:claim"

    def test_k(self, pool):
        """k is the exact reserve product."""
        assert pool.k == Decimal(50000)

    def test_other_asset(self, pool):
        """other_asset returns the counterpart."""
        assert pool.other_asset(X) == Y
        assert pool.other_asset(Y) == X
        with pytest.raises(UnknownAsset):
            pool.other_asset("Z")

    def test_reserves_by_asset(self, pool):
        """Reserves can be read by asset or oriented for a swap."""
        assert pool.reserve_of(Y) == fp("50")
        assert pool.get_reserves(X) == (fp("1000"), fp("50"))
        assert pool.get_reserves(Y) == (fp("50"), fp("1000"))

    def test_orient(self, pool):
        """orient maps (asset_a, amount_a, amount_b) to (x, y) order."""
        assert pool.orient(X, "1", "2") == ("1", "2")
        assert pool.orient(Y, "1", "2") == ("2", "1")
        with pytest.raises(UnknownAsset):
            pool.orient("Z", "1", "2")

    def test_spot_price(self, pool):
        """Spot price is the reserve ratio."""
        assert pool.spot_price(X) == Decimal("0.05")
        assert pool.spot_price(Y) == Decimal("20")

    def test_snapshot(self, pool):
        """snapshot captures the current state."""
        snap = pool.snapshot()
        assert snap.reserve_x == fp("1000")
        assert snap.claim_supply == fp("100")
        assert snap.fee_rate == fp(LOW_FEE)
        assert snap.k == pool.k
        assert not snap.is_empty

    def test_repr(self, pool):
        """repr includes the pair and reserves."""
        assert "X/Y" in repr(pool)
        assert "1000" in repr(pool)


class TestAddLiquidity:
    """Tests for proportional deposits."""

    def test_proportional_deposit_mints_share(self, pool):
        """Depositing half the reserves mints half the supply."""
        result = pool.add_liquidity("500", "25")
        assert result.claim_amount == fp("50")
        assert pool.reserve_x == fp("1500")
        assert pool.reserve_y == fp("75")
        assert pool.claim_supply == fp("150")

    def test_deposit_instructions(self, pool):
        """Deposits collect both assets and mint claims."""
        result = pool.add_liquidity("500", "25")
        assert [i.kind for i in result.instructions] == [
            InstructionKind.TRANSFER_IN,
            InstructionKind.TRANSFER_IN,
            InstructionKind.MINT_CLAIM,
        ]

    def test_ratio_mismatch_leaves_state(self, pool):
        """A lopsided deposit is rejected and nothing changes."""
        before = pool.snapshot()
        with pytest.raises(RatioMismatch):
            pool.add_liquidity("10", "1")
        assert pool.snapshot() == before

    def test_zero_amount_rejected(self, pool):
        """Both deposit amounts must be positive."""
        before = pool.snapshot()
        with pytest.raises(InvalidAmount):
            pool.add_liquidity("0", "25")
        assert pool.snapshot() == before

    def test_dust_deposit_rejected(self, pool):
        """A deposit too small to mint any claim is rejected."""
        before = pool.snapshot()
        with pytest.raises(InvalidAmount):
            pool.add_liquidity(FixedPoint.from_raw(1), FixedPoint.from_raw(1))
        assert pool.snapshot() == before

    def test_preserves_price(self, pool):
        """A proportional deposit does not move the spot price."""
        price = pool.spot_price(X)
        pool.add_liquidity("250", "12.5")
        assert pool.spot_price(X) == price


class TestRemoveLiquidity:
    """Tests for redemptions."""

    def test_partial_redemption(self, pool):
        """Redeeming 40% of the supply pays 40% of each reserve."""
        result = pool.remove_liquidity("40")
        assert (result.amount_x, result.amount_y) == (fp("400"), fp("20"))
        assert pool.reserve_x == fp("600")
        assert pool.reserve_y == fp("30")
        assert pool.claim_supply == fp("60")

    def test_redemption_instructions(self, pool):
        """Redemptions burn claims and pay out both assets."""
        result = pool.remove_liquidity("40")
        kinds = [(i.kind, i.asset) for i in result.instructions]
        assert kinds == [
            (InstructionKind.BURN_CLAIM, "X/Y:claim"),
            (InstructionKind.TRANSFER_OUT, X),
            (InstructionKind.TRANSFER_OUT, Y),
        ]

    def test_excess_claim_rejected(self, pool):
        """Redeeming more than the supply fails and nothing changes."""
        before = pool.snapshot()
        with pytest.raises(InsufficientClaim):
            pool.remove_liquidity("100.000000000000000001")
        assert pool.snapshot() == before

    def test_zero_claim_rejected(self, pool):
        """Claim amount must be positive."""
        with pytest.raises(InvalidAmount):
            pool.remove_liquidity("0")

    def test_full_redemption_empties_pool(self, pool):
        """Redeeming the full supply pays the exact reserves."""
        pool.swap(X, "7.3")
        reserves = (pool.reserve_x, pool.reserve_y)
        result = pool.remove_liquidity("100")
        assert (result.amount_x, result.amount_y) == reserves
        assert pool.is_empty
        assert pool.reserve_x.is_zero()
        assert pool.reserve_y.is_zero()
        assert pool.verify_invariants()

    def test_empty_pool_rejects_swaps(self, pool):
        """A drained pool cannot price swaps."""
        pool.remove_liquidity("100")
        with pytest.raises(InsufficientLiquidity):
            pool.swap(X, "1")

    def test_empty_pool_refunds_at_any_ratio(self, pool):
        """Funding a drained pool sets a new ratio and mints the bootstrap supply."""
        pool.remove_liquidity("100")
        result = pool.add_liquidity("10", "1")
        assert result.claim_amount == fp("100")
        assert pool.spot_price(X) == Decimal("0.1")
        assert pool.verify_invariants()


class TestSwap:
    """Tests for exact-input swaps."""

    def test_swap_output(self, pool):
        """Output follows the fee-adjusted constant product formula."""
        result = pool.swap(X, "100")
        expected = floor18(d("99.9975") * 50, d("1099.9975"))
        assert result.amount_out.to_decimal() == expected
        assert result.asset_in == X
        assert result.asset_out == Y

    def test_swap_updates_reserves(self, pool):
        """The full input including fee stays in the pool."""
        result = pool.swap(X, "100")
        assert pool.reserve_x == fp("1100")
        assert pool.reserve_y == fp("50") - result.amount_out
        assert pool.claim_supply == fp("100")

    def test_fee_amount(self, pool):
        """fee_amount is the part of the input not priced."""
        result = pool.swap(X, "100")
        assert result.fee_amount == fp("0.0025")

    def test_swap_instructions(self, pool):
        """Swaps collect the input and pay the output."""
        result = pool.swap(Y, "1")
        assert [(i.kind, i.asset) for i in result.instructions] == [
            (InstructionKind.TRANSFER_IN, Y),
            (InstructionKind.TRANSFER_OUT, X),
        ]

    def test_k_strictly_increases_with_fee(self, pool):
        """With a positive fee every swap, in either direction, strictly grows k."""
        dust = FixedPoint.from_raw(1)
        swaps = [(X, "100"), (Y, "3.3"), (X, "0.000001"), (Y, "40"), (X, dust), (Y, dust)]
        for asset, amount in swaps:
            k_before = pool.k
            pool.swap(asset, amount)
            assert pool.k > k_before

    def test_dust_input_is_all_fee(self, pool):
        """An input whose fee-adjusted amount floors to zero buys nothing but still grows k."""
        k_before = pool.k
        result = pool.swap(X, FixedPoint.from_raw(1))
        assert result.amount_out.is_zero()
        assert result.fee_amount == FixedPoint.from_raw(1)
        assert pool.reserve_x == fp("1000") + FixedPoint.from_raw(1)
        assert pool.k > k_before

    def test_k_never_decreases_without_fee(self):
        """With a zero fee k may stay flat but never shrinks."""
        pool = make_pool(fee_rate="0")
        for asset, amount in [(X, "100"), (Y, "3.3"), (X, "0.000001"), (Y, "40")]:
            k_before = pool.k
            pool.swap(asset, amount)
            assert pool.k >= k_before

    def test_unknown_asset(self, pool):
        """Swapping an asset the pool does not hold fails."""
        before = pool.snapshot()
        with pytest.raises(UnknownAsset):
            pool.swap("Z", "1")
        assert pool.snapshot() == before

    def test_zero_input(self, pool):
        """Zero input is invalid."""
        with pytest.raises(InvalidAmount):
            pool.swap(X, "0")

    def test_min_amount_out(self, pool):
        """A swap below the caller's minimum fails and nothing changes."""
        quote = pool.quote_amount_out(X, "100")
        before = pool.snapshot()
        with pytest.raises(SlippageExceeded):
            pool.swap(X, "100", min_amount_out=quote.amount_out + FixedPoint.from_raw(1))
        assert pool.snapshot() == before
        result = pool.swap_exact_input(X, "100", min_amount_out=quote.amount_out)
        assert result == quote

    def test_quote_matches_swap(self, pool):
        """A quote predicts the swap exactly and does not mutate the pool."""
        before = pool.snapshot()
        quote = pool.quote_amount_out(Y, "2")
        assert pool.snapshot() == before
        assert pool.swap(Y, "2") == quote


class TestSwapExactOutput:
    """Tests for exact-output swaps."""

    def test_receives_requested_output(self, pool):
        """The caller receives at least the requested amount."""
        result = pool.swap_exact_output(Y, "1")
        assert result.amount_out >= fp("1")
        assert result.asset_in == X

    def test_matches_quote(self, pool):
        """The charged input equals quote_amount_in."""
        quote = pool.quote_amount_in(Y, "1")
        assert pool.swap_exact_output(Y, "1") == quote

    def test_max_amount_in(self, pool):
        """An input above the caller's maximum fails and nothing changes."""
        quote = pool.quote_amount_in(Y, "1")
        before = pool.snapshot()
        with pytest.raises(SlippageExceeded):
            pool.swap_exact_output(Y, "1", max_amount_in=quote.amount_in - FixedPoint.from_raw(1))
        assert pool.snapshot() == before

    def test_cannot_drain_reserve(self, pool):
        """Requesting the entire output reserve fails."""
        with pytest.raises(InsufficientLiquidity):
            pool.swap_exact_output(Y, "50")
