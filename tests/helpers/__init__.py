"""Test helpers module for shared test utilities.

This module consolidates common test utilities to reduce duplication:
- constants: Asset identifiers and common amounts
- factories: Pool and registry factory functions
"""

from tests.helpers.constants import BTC, ETH, LOW_FEE, USDC, X, Y
from tests.helpers.factories import d, floor18, fp, make_pool, make_registry

__all__ = [
    # Constants
    "X",
    "Y",
    "ETH",
    "USDC",
    "BTC",
    "LOW_FEE",
    # Factories
    "d",
    "fp",
    "floor18",
    "make_pool",
    "make_registry",
]
