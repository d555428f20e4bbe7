"""Kernel services: the stores that mutate FRState."""

from nfr_kernel.services.claim_ledger import ClaimLedger
from nfr_kernel.services.listing_book import ListingBook
from nfr_kernel.services.royalty_store import RoyaltyStore

__all__ = [
    "ClaimLedger",
    "ListingBook",
    "RoyaltyStore",
]
