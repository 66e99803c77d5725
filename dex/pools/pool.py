"""Two-asset liquidity pool.

A LiquidityPool owns the reserves of one asset pair, the aggregate supply
of its claim token, and a fee rate fixed at creation. It implements:
- Proportional liquidity provisioning (add) and redemption (remove)
- Fee-adjusted constant product swaps, exact-input and exact-output
- Side-effect-free quotes

Every operation validates its inputs and computes all deltas before
committing anything, so a failure leaves the pool exactly as it was. Pools
are not thread-safe on their own: the PoolRegistry serializes access to each
pool through its `lock`.

Invariants maintained across operations:
- reserve_x == 0 <=> reserve_y == 0 <=> claim_supply == 0
- Swaps never decrease reserve_x * reserve_y
- Add/remove keep reserve_x / reserve_y and scale claim_supply in the same
  proportion as the reserves
"""

from __future__ import annotations

import threading
from decimal import Decimal

import structlog

from dex.amm import ConstantProduct, SwapResult, constant_product
from dex.config import DEFAULT_POOL_CONFIG, PoolConfig
from dex.constants import PAIR_SEPARATOR
from dex.errors import (
    InsufficientClaim,
    InsufficientLiquidity,
    InvalidAmount,
    InvalidFeeRate,
    RatioMismatch,
    SlippageExceeded,
    UnknownAsset,
)
from dex.instructions import burn_claim, mint_claim, transfer_in, transfer_out
from dex.math import FixedPoint
from dex.pools.claim_ledger import ClaimTokenLedger
from dex.pools.types import AssetId, LiquidityResult, PoolSnapshot, canonical_pair

logger = structlog.get_logger()

# Anything FixedPoint.parse accepts
AmountLike = FixedPoint | Decimal | int | str


def _positive(value: AmountLike, label: str) -> FixedPoint:
    amount = FixedPoint.parse(value)
    if amount.is_zero():
        raise InvalidAmount(f"{label} must be positive")
    return amount


def validate_fee_rate(fee_rate: AmountLike) -> FixedPoint:
    """Parse a fee rate and check it is in [0, 1).

    Raises:
        InvalidFeeRate: If the rate is malformed, negative, or >= 1
    """
    try:
        rate = FixedPoint.parse(fee_rate)
    except InvalidAmount as err:
        raise InvalidFeeRate(f"Fee rate must be a decimal in [0, 1): {err}") from err
    if rate >= FixedPoint.one():
        raise InvalidFeeRate(f"Fee rate must be in [0, 1), got {rate}")
    return rate


class LiquidityPool:
    """Reserves, claim supply and fee for one unordered asset pair.

    The pair is stored in canonical order (asset_x, asset_y) regardless of
    the order the assets were given in.
    """

    def __init__(
        self,
        asset_a: AssetId,
        asset_b: AssetId,
        fee_rate: AmountLike,
        config: PoolConfig = DEFAULT_POOL_CONFIG,
        amm: ConstantProduct = constant_product,
    ) -> None:
        """Create an empty pool.

        Pools are normally created funded through LiquidityPool.create or
        PoolRegistry.create_pool; an empty pool is only observable after
        it has been fully drained.

        Raises:
            IdenticalAssets: If asset_a == asset_b
            InvalidFeeRate: If fee_rate is not in [0, 1)
        """
        self._asset_x, self._asset_y = canonical_pair(asset_a, asset_b)
        self._fee_rate = validate_fee_rate(fee_rate)
        self._config = config
        self._amm = amm
        self._reserve_x = FixedPoint.zero()
        self._reserve_y = FixedPoint.zero()
        self._claims = ClaimTokenLedger()
        self.lock = threading.Lock()

    @classmethod
    def create(
        cls,
        asset_a: AssetId,
        asset_b: AssetId,
        amount_a: AmountLike,
        amount_b: AmountLike,
        fee_rate: AmountLike,
        config: PoolConfig = DEFAULT_POOL_CONFIG,
        amm: ConstantProduct = constant_product,
    ) -> tuple[LiquidityPool, LiquidityResult]:
        """Create a pool and fund it with its initial reserves.

        Mints config.bootstrap_claim_supply claim tokens regardless of the
        deposit size.

        Returns:
            Tuple of (pool, result of the initial deposit)

        Raises:
            InvalidAmount: If either amount is not positive
            InvalidFeeRate: If fee_rate is not in [0, 1)
            IdenticalAssets: If asset_a == asset_b
        """
        initial_a = _positive(amount_a, "Initial amount")
        initial_b = _positive(amount_b, "Initial amount")
        pool = cls(asset_a, asset_b, fee_rate, config=config, amm=amm)
        amount_x, amount_y = pool.orient(asset_a, initial_a, initial_b)
        result = pool._bootstrap(amount_x, amount_y)

        logger.info(
            "pool_created",
            pool=pool.name,
            reserve_x=str(pool.reserve_x),
            reserve_y=str(pool.reserve_y),
            fee_rate=str(pool.fee_rate),
            claim_supply=str(pool.claim_supply),
        )
        return pool, result

    # --- Accessors ---

    @property
    def asset_x(self) -> AssetId:
        return self._asset_x

    @property
    def asset_y(self) -> AssetId:
        return self._asset_y

    @property
    def assets(self) -> tuple[AssetId, AssetId]:
        return self._asset_x, self._asset_y

    @property
    def reserve_x(self) -> FixedPoint:
        return self._reserve_x

    @property
    def reserve_y(self) -> FixedPoint:
        return self._reserve_y

    @property
    def claim_supply(self) -> FixedPoint:
        return self._claims.total_supply

    @property
    def fee_rate(self) -> FixedPoint:
        return self._fee_rate

    @property
    def name(self) -> str:
        """Human readable pair name, e.g. "X/Y"."""
        return f"{self._asset_x}{PAIR_SEPARATOR}{self._asset_y}"

    @property
    def claim_token(self) -> str:
        """Identifier of this pool's claim token in custody instructions."""
        return f"{self.name}:claim"

    @property
    def k(self) -> Decimal:
        """The constant product reserve_x * reserve_y, exact."""
        return self._reserve_x.exact_mul(self._reserve_y)

    @property
    def is_empty(self) -> bool:
        return self._claims.is_empty()

    def contains(self, asset: AssetId) -> bool:
        """Check whether asset is one of this pool's two assets."""
        return asset == self._asset_x or asset == self._asset_y

    def _require_asset(self, asset: AssetId, label: str) -> None:
        if not self.contains(asset):
            raise UnknownAsset(f"[{label}] Asset {asset!r} does not belong to pool {self.name}")

    def other_asset(self, asset: AssetId) -> AssetId:
        """Return the pool's other asset.

        Raises:
            UnknownAsset: If asset does not belong to this pool
        """
        self._require_asset(asset, "Other Asset")
        return self._asset_y if asset == self._asset_x else self._asset_x

    def reserve_of(self, asset: AssetId) -> FixedPoint:
        """Reserve held of one asset.

        Raises:
            UnknownAsset: If asset does not belong to this pool
        """
        self._require_asset(asset, "Reserve")
        return self._reserve_x if asset == self._asset_x else self._reserve_y

    def get_reserves(self, asset_in: AssetId) -> tuple[FixedPoint, FixedPoint]:
        """Get reserves ordered as (reserve_in, reserve_out).

        Raises:
            UnknownAsset: If asset_in does not belong to this pool
        """
        self._require_asset(asset_in, "Reserves")
        if asset_in == self._asset_x:
            return self._reserve_x, self._reserve_y
        return self._reserve_y, self._reserve_x

    def orient(
        self, asset_a: AssetId, amount_a: AmountLike, amount_b: AmountLike
    ) -> tuple[AmountLike, AmountLike]:
        """Reorder a pair of amounts given for (asset_a, other) into (x, y) order.

        Raises:
            UnknownAsset: If asset_a does not belong to this pool
        """
        self._require_asset(asset_a, "Orient")
        if asset_a == self._asset_x:
            return amount_a, amount_b
        return amount_b, amount_a

    def spot_price(self, asset: AssetId) -> Decimal:
        """Price of one unit of asset in units of the other asset, before fees.

        The division uses the current decimal context precision.

        Raises:
            UnknownAsset: If asset does not belong to this pool
            InsufficientLiquidity: If the pool is empty
        """
        reserve_in, reserve_out = self.get_reserves(asset)
        if reserve_in.is_zero():
            raise InsufficientLiquidity(f"Pool {self.name} has no liquidity")
        return reserve_out.to_decimal() / reserve_in.to_decimal()

    def snapshot(self) -> PoolSnapshot:
        return PoolSnapshot(
            asset_x=self._asset_x,
            asset_y=self._asset_y,
            reserve_x=self._reserve_x,
            reserve_y=self._reserve_y,
            claim_supply=self._claims.total_supply,
            fee_rate=self._fee_rate,
        )

    # --- Liquidity ---

    def _bootstrap(self, amount_x: AmountLike, amount_y: AmountLike) -> LiquidityResult:
        dx = _positive(amount_x, "Deposit amount")
        dy = _positive(amount_y, "Deposit amount")
        minted = self._config.bootstrap_claim_supply

        self._reserve_x = dx
        self._reserve_y = dy
        self._claims.mint(minted)
        return self._deposit_result(dx, dy, minted)

    def _deposit_result(
        self, dx: FixedPoint, dy: FixedPoint, minted: FixedPoint
    ) -> LiquidityResult:
        return LiquidityResult(
            asset_x=self._asset_x,
            asset_y=self._asset_y,
            amount_x=dx,
            amount_y=dy,
            claim_amount=minted,
            instructions=(
                transfer_in(self._asset_x, dx),
                transfer_in(self._asset_y, dy),
                mint_claim(self.claim_token, minted),
            ),
        )

    def add_liquidity(self, amount_x: AmountLike, amount_y: AmountLike) -> LiquidityResult:
        """Deposit both assets in the current reserve ratio for claim tokens.

        The deposit must match reserve_x : reserve_y within the configured
        tolerance; a lopsided deposit is rejected, never re-priced. Claim
        tokens minted = claim_supply * amount_x / reserve_x, computed from
        the pre-deposit state and rounded down.

        A pool that was fully drained is refunded at whatever ratio the
        deposit sets, minting the bootstrap claim supply.

        Args:
            amount_x: Amount of asset_x to deposit
            amount_y: Amount of asset_y to deposit

        Returns:
            LiquidityResult with the deposited amounts and claim tokens minted

        Raises:
            InvalidAmount: If either amount is not positive, or the deposit
                is too small to mint any claim tokens
            RatioMismatch: If the amounts do not match the reserve ratio
        """
        dx = _positive(amount_x, "Deposit amount")
        dy = _positive(amount_y, "Deposit amount")

        if self.is_empty:
            result = self._bootstrap(dx, dy)
            logger.info(
                "pool_refunded",
                pool=self.name,
                reserve_x=str(self._reserve_x),
                reserve_y=str(self._reserve_y),
                claim_minted=str(result.claim_amount),
            )
            return result

        if not self._amm.is_proportional(
            dx, dy, self._reserve_x, self._reserve_y, self._config.ratio_tolerance
        ):
            logger.debug(
                "ratio_mismatch",
                pool=self.name,
                amount_x=str(dx),
                amount_y=str(dy),
                reserve_x=str(self._reserve_x),
                reserve_y=str(self._reserve_y),
            )
            raise RatioMismatch(
                f"Deposit {dx}:{dy} does not match pool {self.name} ratio "
                f"{self._reserve_x}:{self._reserve_y}"
            )

        minted = self._amm.mint_amount(dx, self._reserve_x, self._claims.total_supply)
        if minted.is_zero():
            raise InvalidAmount(f"Deposit {dx}:{dy} is too small to mint claim tokens")

        # Compute every new value before committing any of them
        new_reserve_x = self._reserve_x + dx
        new_reserve_y = self._reserve_y + dy
        new_supply = self._claims.total_supply + minted

        self._reserve_x = new_reserve_x
        self._reserve_y = new_reserve_y
        self._claims.mint(minted)

        logger.info(
            "liquidity_added",
            pool=self.name,
            amount_x=str(dx),
            amount_y=str(dy),
            claim_minted=str(minted),
            claim_supply=str(new_supply),
        )
        return self._deposit_result(dx, dy, minted)

    def remove_liquidity(self, claim_amount: AmountLike) -> LiquidityResult:
        """Burn claim tokens for a proportional share of both reserves.

        Amounts paid out are rounded down; burning the whole supply pays out
        the whole reserves and leaves the pool empty.

        Args:
            claim_amount: Claim tokens to redeem

        Returns:
            LiquidityResult with the amounts paid out and claim tokens burned

        Raises:
            InvalidAmount: If claim_amount is not positive
            InsufficientClaim: If claim_amount exceeds the claim supply
        """
        claim = _positive(claim_amount, "Claim amount")
        supply = self._claims.total_supply
        if claim > supply:
            raise InsufficientClaim(
                f"Cannot redeem {claim} claim tokens from pool {self.name}, supply is {supply}"
            )

        dx = self._amm.redeem_amount(claim, self._reserve_x, supply)
        dy = self._amm.redeem_amount(claim, self._reserve_y, supply)
        new_reserve_x = self._reserve_x - dx
        new_reserve_y = self._reserve_y - dy

        self._reserve_x = new_reserve_x
        self._reserve_y = new_reserve_y
        self._claims.burn(claim)

        logger.info(
            "liquidity_removed",
            pool=self.name,
            claim_burned=str(claim),
            amount_x=str(dx),
            amount_y=str(dy),
            emptied=self.is_empty,
        )
        return LiquidityResult(
            asset_x=self._asset_x,
            asset_y=self._asset_y,
            amount_x=dx,
            amount_y=dy,
            claim_amount=claim,
            instructions=(
                burn_claim(self.claim_token, claim),
                transfer_out(self._asset_x, dx),
                transfer_out(self._asset_y, dy),
            ),
        )

    # --- Quotes ---

    def quote_amount_out(self, asset_in: AssetId, amount_in: AmountLike) -> SwapResult:
        """Output a swap of amount_in would receive, without executing it.

        Raises:
            InvalidAmount: If amount_in is not positive
            UnknownAsset: If asset_in does not belong to this pool
            InsufficientLiquidity: If the pool is empty
        """
        dx = _positive(amount_in, "Swap input")
        reserve_in, reserve_out = self.get_reserves(asset_in)
        dy = self._amm.get_amount_out(dx, reserve_in, reserve_out, self._fee_rate)
        return self._swap_result(asset_in, dx, dy)

    def quote_amount_in(self, asset_out: AssetId, amount_out: AmountLike) -> SwapResult:
        """Minimum input needed to receive at least amount_out, without executing.

        Raises:
            InvalidAmount: If amount_out is not positive
            UnknownAsset: If asset_out does not belong to this pool
            InsufficientLiquidity: If amount_out is not below the output reserve
        """
        dy = _positive(amount_out, "Swap output")
        asset_in = self.other_asset(asset_out)
        reserve_in, reserve_out = self.get_reserves(asset_in)
        dx = self._amm.get_amount_in(dy, reserve_in, reserve_out, self._fee_rate)
        # Forward simulate: rounding may give slightly more than requested
        actual_out = self._amm.get_amount_out(dx, reserve_in, reserve_out, self._fee_rate)
        return self._swap_result(asset_in, dx, actual_out)

    def _swap_result(
        self, asset_in: AssetId, amount_in: FixedPoint, amount_out: FixedPoint
    ) -> SwapResult:
        effective = self._amm.effective_input(amount_in, self._fee_rate)
        return SwapResult(
            asset_in=asset_in,
            asset_out=self.other_asset(asset_in),
            amount_in=amount_in,
            amount_out=amount_out,
            fee_amount=amount_in - effective,
        )

    # --- Swaps ---

    def _commit_swap(self, result: SwapResult) -> SwapResult:
        reserve_in, reserve_out = self.get_reserves(result.asset_in)
        new_in = reserve_in + result.amount_in
        new_out = reserve_out - result.amount_out
        k_before = self.k

        if result.asset_in == self._asset_x:
            self._reserve_x, self._reserve_y = new_in, new_out
        else:
            self._reserve_x, self._reserve_y = new_out, new_in

        logger.info(
            "swap_executed",
            pool=self.name,
            asset_in=str(result.asset_in),
            amount_in=str(result.amount_in),
            amount_out=str(result.amount_out),
            fee=str(result.fee_amount),
            k_before=str(k_before),
            k_after=str(self.k),
        )
        return result

    def swap(
        self,
        asset_in: AssetId,
        amount_in: AmountLike,
        min_amount_out: AmountLike | None = None,
    ) -> SwapResult:
        """Swap an exact input amount for the other asset.

        The full input, fee included, stays in the pool:
        reserve_in += amount_in, reserve_out -= amount_out.

        Args:
            asset_in: Asset paid into the pool
            amount_in: Amount paid in (fee included)
            min_amount_out: Optional minimum acceptable output

        Returns:
            SwapResult with the executed amounts

        Raises:
            InvalidAmount: If amount_in is not positive
            UnknownAsset: If asset_in does not belong to this pool
            InsufficientLiquidity: If the pool is empty
            SlippageExceeded: If the output is below min_amount_out
        """
        result = self.quote_amount_out(asset_in, amount_in)
        if min_amount_out is not None:
            minimum = FixedPoint.parse(min_amount_out)
            if result.amount_out < minimum:
                raise SlippageExceeded(
                    f"Output {result.amount_out} is below minimum {minimum}"
                )
        return self._commit_swap(result)

    def swap_exact_input(
        self, asset_in: AssetId, amount_in: AmountLike, min_amount_out: AmountLike
    ) -> SwapResult:
        """Swap all of amount_in, failing if the output is below min_amount_out."""
        return self.swap(asset_in, amount_in, min_amount_out=min_amount_out)

    def swap_exact_output(
        self,
        asset_out: AssetId,
        amount_out: AmountLike,
        max_amount_in: AmountLike | None = None,
    ) -> SwapResult:
        """Swap for at least amount_out of asset_out, paying the minimum input.

        Args:
            asset_out: Asset to receive
            amount_out: Desired output amount
            max_amount_in: Optional maximum input the caller will pay

        Returns:
            SwapResult with the input charged and the output paid, which may
            exceed amount_out by rounding

        Raises:
            InvalidAmount: If amount_out is not positive
            UnknownAsset: If asset_out does not belong to this pool
            InsufficientLiquidity: If amount_out is not below the output reserve
            SlippageExceeded: If the required input exceeds max_amount_in
        """
        result = self.quote_amount_in(asset_out, amount_out)
        if max_amount_in is not None:
            maximum = FixedPoint.parse(max_amount_in)
            if result.amount_in > maximum:
                raise SlippageExceeded(
                    f"Required input {result.amount_in} exceeds maximum {maximum}"
                )
        return self._commit_swap(result)

    def verify_invariants(self) -> bool:
        """Check that reserves and claim supply are all zero or all positive."""
        empties = {
            self._reserve_x.is_zero(),
            self._reserve_y.is_zero(),
            self._claims.is_empty(),
        }
        return len(empties) == 1

    def __repr__(self) -> str:
        return (
            f"LiquidityPool({self.name}, reserves=({self._reserve_x}, {self._reserve_y}), "
            f"claim_supply={self.claim_supply}, fee_rate={self._fee_rate})"
        )
