"""Pytest configuration and fixtures."""

import pytest
from fastapi.testclient import TestClient

from dex.api.main import create_app
from dex.pools import LiquidityPool, PoolRegistry
from tests.helpers import ETH, USDC, make_pool, make_registry


@pytest.fixture
def pool() -> LiquidityPool:
    """Pool X/Y with reserves (1000, 50), fee 0.000025 and supply 100."""
    return make_pool()


@pytest.fixture
def registry() -> PoolRegistry:
    """Registry holding a single ETH/USDC pool with reserves (10, 20000)."""
    return make_registry((ETH, USDC, "10", "20000"))


@pytest.fixture
def empty_registry() -> PoolRegistry:
    """Registry with no pools."""
    return PoolRegistry()


@pytest.fixture
def client(registry: PoolRegistry) -> TestClient:
    """API client serving the `registry` fixture."""
    return TestClient(create_app(registry))
