"""
nfr_services -- the imperative shell around the FR kernel.

Provides the SaleOrchestrator (the protocol's entry points) and the
in-memory reference adapters for the registry and payment rail ports.
"""

from nfr_services.custody import CustodyAccount
from nfr_services.registry import InMemoryAssetRegistry
from nfr_services.sale_orchestrator import SaleOrchestrator, SaleResult

__all__ = [
    "CustodyAccount",
    "InMemoryAssetRegistry",
    "SaleOrchestrator",
    "SaleResult",
]
