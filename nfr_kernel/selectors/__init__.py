"""Read-only projections of FRState."""

from nfr_kernel.selectors.fr_selector import CustodySummary, FRSelector

__all__ = [
    "CustodySummary",
    "FRSelector",
]
