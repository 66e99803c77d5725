"""Pool management package.

Provides LiquidityPool (one asset pair's reserves and claim supply) and
PoolRegistry (one pool per unordered asset pair).
"""

from .claim_ledger import ClaimTokenLedger
from .pool import LiquidityPool, validate_fee_rate
from .registry import PoolRegistry, build_registry
from .types import AssetId, LiquidityResult, PoolSnapshot, canonical_pair, pair_key

__all__ = [
    "PoolRegistry",
    "build_registry",
    "LiquidityPool",
    "validate_fee_rate",
    "ClaimTokenLedger",
    "AssetId",
    "LiquidityResult",
    "PoolSnapshot",
    "canonical_pair",
    "pair_key",
]
