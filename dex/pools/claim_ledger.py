"""Claim token supply accounting.

The ledger tracks only the aggregate supply of a pool's claim token.
Individual holder balances belong to the asset custody collaborator,
which executes the mint and burn instructions the engine returns.
"""

from __future__ import annotations

from dex.errors import InsufficientClaim, InvalidAmount
from dex.math import FixedPoint


class ClaimTokenLedger:
    """Outstanding claim supply for one pool.

    Mint and burn are the only mutations. Both validate before touching the
    counter, so a failed call leaves the supply unchanged.
    """

    __slots__ = ("_total_supply",)

    def __init__(self, total_supply: FixedPoint | None = None) -> None:
        self._total_supply = total_supply if total_supply is not None else FixedPoint.zero()

    @property
    def total_supply(self) -> FixedPoint:
        return self._total_supply

    def is_empty(self) -> bool:
        return self._total_supply.is_zero()

    def mint(self, amount: FixedPoint) -> FixedPoint:
        """Add amount to the supply and return the new total.

        Raises:
            InvalidAmount: If amount is zero
            ArithmeticOverflow: If the supply would exceed the representable range
        """
        if amount.is_zero():
            raise InvalidAmount("Cannot mint zero claim tokens")
        self._total_supply = self._total_supply + amount
        return self._total_supply

    def burn(self, amount: FixedPoint) -> FixedPoint:
        """Remove amount from the supply and return the new total.

        Raises:
            InvalidAmount: If amount is zero
            InsufficientClaim: If amount exceeds the supply
        """
        if amount.is_zero():
            raise InvalidAmount("Cannot burn zero claim tokens")
        if amount > self._total_supply:
            raise InsufficientClaim(
                f"Cannot burn {amount} claim tokens, supply is {self._total_supply}"
            )
        self._total_supply = self._total_supply - amount
        return self._total_supply

    def __repr__(self) -> str:
        return f"ClaimTokenLedger(total_supply={self._total_supply})"
