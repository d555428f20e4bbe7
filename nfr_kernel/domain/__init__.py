"""Pure domain types of the FR kernel: values, records, events, ports."""

from nfr_kernel.domain.fixed_point import ONE, ZERO, Amount, FixedPoint, Fraction
from nfr_kernel.domain.records import (
    AssetId,
    FRParameters,
    ListingEntry,
    OwnerId,
    RoyaltyRecord,
)

__all__ = [
    "ONE",
    "ZERO",
    "Amount",
    "AssetId",
    "FixedPoint",
    "FRParameters",
    "Fraction",
    "ListingEntry",
    "OwnerId",
    "RoyaltyRecord",
]
