"""AMM (Automated Market Maker) pricing math."""

from dex.amm.base import AMM, SwapResult
from dex.amm.constant_product import ConstantProduct, constant_product

__all__ = [
    # Base classes
    "AMM",
    "SwapResult",
    # Constant product
    "ConstantProduct",
    "constant_product",
]
