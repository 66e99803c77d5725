"""DEX Engine - constant product liquidity pools."""

from dex.pools import LiquidityPool, PoolRegistry, build_registry

__version__ = "0.1.0"
__all__ = ["LiquidityPool", "PoolRegistry", "build_registry", "__version__"]
