"""API endpoints for the exchange engine.

Handlers are plain functions: FastAPI runs them in its threadpool, and the
registry serializes work per pool with thread locks.
"""

from fastapi import APIRouter, Depends, Query, Request, status

from dex.models import (
    AddLiquidityRequest,
    CreatePoolRequest,
    LiquidityResponse,
    PoolResponse,
    RemoveLiquidityRequest,
    SwapRequest,
    SwapResponse,
)
from dex.pools import PoolRegistry

router = APIRouter(prefix="/pools", tags=["pools"])


def get_registry(request: Request) -> PoolRegistry:
    """Dependency provider for the pool registry.

    The registry lives on the application state. Override this in tests to
    inject a prepared registry:
        app.dependency_overrides[get_registry] = lambda: registry

    Returns:
        The registry holding every pool.
    """
    registry: PoolRegistry = request.app.state.registry
    return registry


@router.post("", status_code=status.HTTP_201_CREATED)
def create_pool(
    body: CreatePoolRequest,
    registry: PoolRegistry = Depends(get_registry),
) -> LiquidityResponse:
    """Create a pool for an asset pair and fund it with its initial reserves.

    Error Handling:
        - Pair already has a pool: 409
        - Identical assets, bad amounts or fee rate: 422
    """
    result = registry.create_pool(
        body.asset_a, body.asset_b, body.amount_a, body.amount_b, fee_rate=body.fee_rate
    )
    return LiquidityResponse.from_result(result)


@router.get("")
def list_pools(registry: PoolRegistry = Depends(get_registry)) -> list[PoolResponse]:
    """List every pool, sorted by pair name."""
    return [PoolResponse.from_snapshot(s) for s in registry.snapshots()]


@router.get("/{asset_a}/{asset_b}")
def get_pool(
    asset_a: str,
    asset_b: str,
    registry: PoolRegistry = Depends(get_registry),
) -> PoolResponse:
    """Current reserves, claim supply and fee rate of one pool."""
    return PoolResponse.from_snapshot(registry.snapshot(asset_a, asset_b))


@router.post("/{asset_a}/{asset_b}/liquidity")
def add_liquidity(
    asset_a: str,
    asset_b: str,
    body: AddLiquidityRequest,
    registry: PoolRegistry = Depends(get_registry),
) -> LiquidityResponse:
    """Deposit amount_a of asset_a and amount_b of asset_b for claim tokens."""
    result = registry.add_liquidity(asset_a, asset_b, body.amount_a, body.amount_b)
    return LiquidityResponse.from_result(result)


@router.post("/{asset_a}/{asset_b}/liquidity/remove")
def remove_liquidity(
    asset_a: str,
    asset_b: str,
    body: RemoveLiquidityRequest,
    registry: PoolRegistry = Depends(get_registry),
) -> LiquidityResponse:
    """Redeem claim tokens for a proportional share of both reserves."""
    result = registry.remove_liquidity(asset_a, asset_b, body.claim_amount)
    return LiquidityResponse.from_result(result)


@router.post("/{asset_a}/{asset_b}/swap")
def swap(
    asset_a: str,
    asset_b: str,
    body: SwapRequest,
    registry: PoolRegistry = Depends(get_registry),
) -> SwapResponse:
    """Swap an exact input amount for the pool's other asset."""
    result = registry.swap(
        asset_a, asset_b, body.input_asset, body.amount_in, min_amount_out=body.min_amount_out
    )
    return SwapResponse.from_result(result)


@router.get("/{asset_a}/{asset_b}/quote")
def quote(
    asset_a: str,
    asset_b: str,
    input_asset: str = Query(description="Asset paid into the pool"),
    amount: str = Query(description="Input amount as a decimal string"),
    registry: PoolRegistry = Depends(get_registry),
) -> SwapResponse:
    """Quote an exact-input swap without executing it."""
    result = registry.quote(asset_a, asset_b, input_asset, amount)
    return SwapResponse.from_result(result, include_instructions=False)
