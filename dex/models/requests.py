"""Pydantic models for engine requests and responses."""

from __future__ import annotations

from pydantic import BaseModel, Field

from dex.amm import SwapResult
from dex.instructions import CustodyInstruction, InstructionKind
from dex.models.types import AssetSymbol, DecimalAmount
from dex.pools import LiquidityResult, PoolSnapshot

# =============================================================================
# Requests
# =============================================================================


class CreatePoolRequest(BaseModel):
    """Create and fund a pool for an asset pair."""

    asset_a: AssetSymbol = Field(alias="assetA")
    asset_b: AssetSymbol = Field(alias="assetB")
    amount_a: DecimalAmount = Field(alias="amountA", description="Initial reserve of assetA.")
    amount_b: DecimalAmount = Field(alias="amountB", description="Initial reserve of assetB.")
    fee_rate: DecimalAmount | None = Field(
        default=None,
        alias="feeRate",
        description="Swap fee fraction in [0, 1). Defaults to the engine default.",
    )

    model_config = {"populate_by_name": True}


class AddLiquidityRequest(BaseModel):
    """Deposit both assets of a pool, in the order given in the URL."""

    amount_a: DecimalAmount = Field(alias="amountA")
    amount_b: DecimalAmount = Field(alias="amountB")

    model_config = {"populate_by_name": True}


class RemoveLiquidityRequest(BaseModel):
    """Redeem claim tokens for a share of the reserves."""

    claim_amount: DecimalAmount = Field(alias="claimAmount")

    model_config = {"populate_by_name": True}


class SwapRequest(BaseModel):
    """Swap an exact input amount for the pool's other asset."""

    input_asset: AssetSymbol = Field(alias="inputAsset")
    amount_in: DecimalAmount = Field(alias="amountIn", description="Input amount, fee included.")
    min_amount_out: DecimalAmount | None = Field(
        default=None,
        alias="minAmountOut",
        description="Fail instead of returning less than this.",
    )

    model_config = {"populate_by_name": True}


# =============================================================================
# Responses
# =============================================================================


class Instruction(BaseModel):
    """A custody step the caller must execute to settle an operation."""

    kind: InstructionKind
    asset: str
    amount: DecimalAmount

    @classmethod
    def from_instruction(cls, instruction: CustodyInstruction) -> Instruction:
        return cls(
            kind=instruction.kind,
            asset=str(instruction.asset),
            amount=str(instruction.amount),
        )


class PoolResponse(BaseModel):
    """Current state of one pool."""

    asset_x: str = Field(alias="assetX")
    asset_y: str = Field(alias="assetY")
    reserve_x: DecimalAmount = Field(alias="reserveX")
    reserve_y: DecimalAmount = Field(alias="reserveY")
    claim_supply: DecimalAmount = Field(alias="claimSupply")
    fee_rate: DecimalAmount = Field(alias="feeRate")

    model_config = {"populate_by_name": True}

    @classmethod
    def from_snapshot(cls, snapshot: PoolSnapshot) -> PoolResponse:
        return cls(
            asset_x=str(snapshot.asset_x),
            asset_y=str(snapshot.asset_y),
            reserve_x=str(snapshot.reserve_x),
            reserve_y=str(snapshot.reserve_y),
            claim_supply=str(snapshot.claim_supply),
            fee_rate=str(snapshot.fee_rate),
        )


class LiquidityResponse(BaseModel):
    """Amounts moved and claim tokens minted or burned by a liquidity operation."""

    amounts: dict[str, DecimalAmount] = Field(description="Amount per asset.")
    claim_amount: DecimalAmount = Field(alias="claimAmount")
    instructions: list[Instruction]

    model_config = {"populate_by_name": True}

    @classmethod
    def from_result(cls, result: LiquidityResult) -> LiquidityResponse:
        return cls(
            amounts={
                str(result.asset_x): str(result.amount_x),
                str(result.asset_y): str(result.amount_y),
            },
            claim_amount=str(result.claim_amount),
            instructions=[Instruction.from_instruction(i) for i in result.instructions],
        )


class SwapResponse(BaseModel):
    """Executed or quoted swap."""

    input_asset: str = Field(alias="inputAsset")
    output_asset: str = Field(alias="outputAsset")
    amount_in: DecimalAmount = Field(alias="amountIn")
    amount_out: DecimalAmount = Field(alias="amountOut")
    fee_amount: DecimalAmount = Field(alias="feeAmount")
    instructions: list[Instruction] = Field(default_factory=list)

    model_config = {"populate_by_name": True}

    @classmethod
    def from_result(cls, result: SwapResult, include_instructions: bool = True) -> SwapResponse:
        return cls(
            input_asset=str(result.asset_in),
            output_asset=str(result.asset_out),
            amount_in=str(result.amount_in),
            amount_out=str(result.amount_out),
            fee_amount=str(result.fee_amount),
            instructions=(
                [Instruction.from_instruction(i) for i in result.instructions]
                if include_instructions
                else []
            ),
        )


class ErrorResponse(BaseModel):
    """Body returned for engine errors."""

    error: str = Field(description="Stable error code, e.g. 'ratio_mismatch'.")
    detail: str
