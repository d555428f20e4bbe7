"""
Pytest fixtures for the FR engine test suite.

Provides:
- A fresh in-memory registry and custody account per test
- A SaleOrchestrator wired to both
- A minted asset with the reference parameters (10, 0.16, 1.19)
- Logging state reset between tests
"""

import pytest

from nfr_kernel.logging_config import LogContext, reset_logging
from nfr_services.custody import CustodyAccount
from nfr_services.registry import InMemoryAssetRegistry
from nfr_services.sale_orchestrator import SaleOrchestrator

MINTER = "minter"

NUM_GENERATIONS = 10
PERCENT_OF_PROFIT = "0.16"
SUCCESSIVE_RATIO = "1.19"


@pytest.fixture(autouse=True)
def _clean_logging():
    reset_logging()
    LogContext.clear()
    yield
    LogContext.clear()
    reset_logging()


@pytest.fixture
def registry() -> InMemoryAssetRegistry:
    return InMemoryAssetRegistry()


@pytest.fixture
def custody() -> CustodyAccount:
    return CustodyAccount()


@pytest.fixture
def orchestrator(registry, custody) -> SaleOrchestrator:
    return SaleOrchestrator(registry, custody)


@pytest.fixture
def asset_id(orchestrator) -> int:
    """Asset minted to MINTER with the reference parameters."""
    return orchestrator.mint(
        MINTER, MINTER, NUM_GENERATIONS, PERCENT_OF_PROFIT, SUCCESSIVE_RATIO
    )
