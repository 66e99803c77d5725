"""Base classes for AMM implementations."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Hashable
from dataclasses import dataclass

from dex.instructions import CustodyInstruction, transfer_in, transfer_out
from dex.math import FixedPoint


@dataclass(frozen=True)
class SwapResult:
    """Result of simulating or executing a swap through a pool."""

    asset_in: Hashable
    asset_out: Hashable
    amount_in: FixedPoint
    amount_out: FixedPoint
    # Portion of amount_in retained by the pool as fee
    fee_amount: FixedPoint

    @property
    def instructions(self) -> tuple[CustodyInstruction, ...]:
        """Transfers that settle this swap."""
        return (
            transfer_in(self.asset_in, self.amount_in),
            transfer_out(self.asset_out, self.amount_out),
        )


class AMM(ABC):
    """Abstract base class for AMM pricing curves.

    Implementations are stateless: reserves and fee are passed in, and the
    caller decides whether to commit the result to a pool.
    """

    @abstractmethod
    def get_amount_out(
        self,
        amount_in: FixedPoint,
        reserve_in: FixedPoint,
        reserve_out: FixedPoint,
        fee_rate: FixedPoint,
    ) -> FixedPoint:
        """Calculate output amount for a given input.

        Args:
            amount_in: Input asset amount (fee included)
            reserve_in: Reserve of input asset in pool
            reserve_out: Reserve of output asset in pool
            fee_rate: Fraction of the input retained as fee

        Returns:
            Output asset amount, rounded down
        """
        ...

    @abstractmethod
    def get_amount_in(
        self,
        amount_out: FixedPoint,
        reserve_in: FixedPoint,
        reserve_out: FixedPoint,
        fee_rate: FixedPoint,
    ) -> FixedPoint:
        """Calculate required input for a desired output.

        Args:
            amount_out: Desired output asset amount
            reserve_in: Reserve of input asset in pool
            reserve_out: Reserve of output asset in pool
            fee_rate: Fraction of the input retained as fee

        Returns:
            Required input amount (fee included), rounded up
        """
        ...
