"""Pydantic models for the engine's external requests."""

from dex.models.requests import (
    AddLiquidityRequest,
    CreatePoolRequest,
    ErrorResponse,
    Instruction,
    LiquidityResponse,
    PoolResponse,
    RemoveLiquidityRequest,
    SwapRequest,
    SwapResponse,
)
from dex.models.types import AssetSymbol, DecimalAmount

__all__ = [
    # Types
    "AssetSymbol",
    "DecimalAmount",
    # Requests
    "CreatePoolRequest",
    "AddLiquidityRequest",
    "RemoveLiquidityRequest",
    "SwapRequest",
    # Responses
    "Instruction",
    "PoolResponse",
    "LiquidityResponse",
    "SwapResponse",
    "ErrorResponse",
]
