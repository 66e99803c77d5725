"""Constant product AMM math.

Pools price swaps with the constant product formula x * y = k, charging a
fee on the input amount. The fee stays in the pool, so k grows with every
swap that pays one.

Liquidity math (claim mint and burn) lives here as well so that every
formula touching reserves is in one place and shares the same rounding
rules: the pool never pays out or mints more than the exact share.
"""

from __future__ import annotations

from dex.amm.base import AMM
from dex.errors import InsufficientLiquidity, InvalidAmount
from dex.math import FixedPoint


class ConstantProduct(AMM):
    """Constant product AMM math with a fee on input.

    Formula: amount_out = (in * (1 - fee) * res_out) / (res_in + in * (1 - fee))

    Equivalent to finding dy in (x + r*dx)(y - dy) = x*y where r = 1 - fee.
    """

    def effective_input(self, amount_in: FixedPoint, fee_rate: FixedPoint) -> FixedPoint:
        """Input amount after the fee is taken, rounded down."""
        return amount_in.mul_down(fee_rate.complement())

    def get_amount_out(
        self,
        amount_in: FixedPoint,
        reserve_in: FixedPoint,
        reserve_out: FixedPoint,
        fee_rate: FixedPoint,
    ) -> FixedPoint:
        """Calculate output amount using the constant product formula.

        Both roundings go against the trader: the fee-adjusted input is
        floored and so is the output.

        Raises:
            InvalidAmount: If amount_in is zero
            InsufficientLiquidity: If either reserve is empty, or the
                output would drain the output reserve
        """
        if amount_in.is_zero():
            raise InvalidAmount("Swap input must be positive")
        if reserve_in.is_zero() or reserve_out.is_zero():
            raise InsufficientLiquidity("Pool has no liquidity")

        effective = self.effective_input(amount_in, fee_rate)
        amount_out = effective.mul_div_down(reserve_out, reserve_in + effective)

        # Unreachable for positive reserves since effective / (x + effective) < 1
        if amount_out >= reserve_out:
            raise InsufficientLiquidity(
                f"Output {amount_out} would exhaust reserve {reserve_out}"
            )
        return amount_out

    def get_amount_in(
        self,
        amount_out: FixedPoint,
        reserve_in: FixedPoint,
        reserve_out: FixedPoint,
        fee_rate: FixedPoint,
    ) -> FixedPoint:
        """Calculate the minimum input that yields at least amount_out.

        Formula: amount_in = ceil(ceil(res_in * out / (res_out - out)) / (1 - fee))

        Raises:
            InvalidAmount: If amount_out is zero
            InsufficientLiquidity: If either reserve is empty or amount_out
                is not strictly below the output reserve
        """
        if amount_out.is_zero():
            raise InvalidAmount("Swap output must be positive")
        if reserve_in.is_zero() or reserve_out.is_zero():
            raise InsufficientLiquidity("Pool has no liquidity")
        if amount_out >= reserve_out:
            raise InsufficientLiquidity(
                f"Requested output {amount_out} is not below reserve {reserve_out}"
            )

        effective_needed = reserve_in.mul_div_up(amount_out, reserve_out - amount_out)
        return effective_needed.div_up(fee_rate.complement())

    # --- Liquidity math ---

    def mint_amount(
        self,
        deposit: FixedPoint,
        reserve: FixedPoint,
        claim_supply: FixedPoint,
    ) -> FixedPoint:
        """Claim tokens owed for a deposit, in proportion to the reserve it joins.

        Uses the pre-deposit reserve and supply; rounds down.
        """
        return claim_supply.mul_div_down(deposit, reserve)

    def redeem_amount(
        self,
        claim_amount: FixedPoint,
        reserve: FixedPoint,
        claim_supply: FixedPoint,
    ) -> FixedPoint:
        """Share of one reserve paid out for burning claim_amount; rounds down.

        Burning the entire supply returns the entire reserve exactly.
        """
        if claim_amount == claim_supply:
            return reserve
        return reserve.mul_div_down(claim_amount, claim_supply)

    def is_proportional(
        self,
        amount_x: FixedPoint,
        amount_y: FixedPoint,
        reserve_x: FixedPoint,
        reserve_y: FixedPoint,
        tolerance: int,
    ) -> bool:
        """Check that amount_x / reserve_x == amount_y / reserve_y within tolerance.

        Compares cross products in raw units. A tolerance of one unit accepts
        a deposit when either amount is within one ulp of the exact
        proportional amount for the other.
        """
        deviation = abs(amount_x.raw * reserve_y.raw - amount_y.raw * reserve_x.raw)
        return deviation <= max(reserve_x.raw, reserve_y.raw) * tolerance


# Singleton instance
constant_product = ConstantProduct()


__all__ = [
    "ConstantProduct",
    "constant_product",
]
