"""Custody instructions returned by engine operations.

The engine never moves assets itself. Each committed operation returns the
exact transfers and claim mints/burns that the asset custody collaborator
must execute to settle it.
"""

from __future__ import annotations

from collections.abc import Hashable
from dataclasses import dataclass
from enum import Enum

from dex.math import FixedPoint


class InstructionKind(str, Enum):
    """What the custody collaborator must do."""

    TRANSFER_IN = "transfer_in"  # Caller pays the pool
    TRANSFER_OUT = "transfer_out"  # Pool pays the caller
    MINT_CLAIM = "mint_claim"
    BURN_CLAIM = "burn_claim"


@dataclass(frozen=True)
class CustodyInstruction:
    """One settlement step: move or mint/burn `amount` of `asset`."""

    kind: InstructionKind
    asset: Hashable
    amount: FixedPoint


def transfer_in(asset: Hashable, amount: FixedPoint) -> CustodyInstruction:
    return CustodyInstruction(InstructionKind.TRANSFER_IN, asset, amount)


def transfer_out(asset: Hashable, amount: FixedPoint) -> CustodyInstruction:
    return CustodyInstruction(InstructionKind.TRANSFER_OUT, asset, amount)


def mint_claim(claim_token: str, amount: FixedPoint) -> CustodyInstruction:
    return CustodyInstruction(InstructionKind.MINT_CLAIM, claim_token, amount)


def burn_claim(claim_token: str, amount: FixedPoint) -> CustodyInstruction:
    return CustodyInstruction(InstructionKind.BURN_CLAIM, claim_token, amount)


__all__ = [
    "InstructionKind",
    "CustodyInstruction",
    "transfer_in",
    "transfer_out",
    "mint_claim",
    "burn_claim",
]
