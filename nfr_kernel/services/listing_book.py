"""
ListingBook -- per-asset sale offers.

Responsibility:
    Creates, clears and reads ListingEntries. Authorization is decided by
    the caller (the registry's owner-or-approved query) and passed in as a
    boolean; the book only enforces it.

Architecture position:
    Kernel > Services. Gates priced buys in the SaleOrchestrator.

Failure modes:
    - NotAuthorizedError when the caller check is false.
    - InvalidPriceError for a zero price unless the book was built with
      ``allow_zero_price=True``.
"""

from __future__ import annotations

from nfr_kernel.domain.events import AssetListed, AssetUnlisted
from nfr_kernel.domain.fixed_point import FixedPoint
from nfr_kernel.domain.records import AssetId, ListingEntry, OwnerId
from nfr_kernel.exceptions import InvalidPriceError, NotAuthorizedError
from nfr_kernel.logging_config import get_logger
from nfr_kernel.services.base import BaseService
from nfr_kernel.state import FRState

logger = get_logger("services.listing_book")


class ListingBook(BaseService):
    """Listing store backed by ``FRState.listings``."""

    def __init__(self, state: FRState, *, allow_zero_price: bool = False):
        super().__init__(state)
        self.allow_zero_price = allow_zero_price

    def list(
        self,
        asset_id: AssetId,
        price: FixedPoint,
        seller: OwnerId,
        caller_is_owner_or_approved: bool,
    ) -> ListingEntry:
        """Create or overwrite the listing for ``asset_id``."""
        if not caller_is_owner_or_approved:
            logger.warning("listing_rejected_unauthorized", extra={
                "asset_id": asset_id,
                "caller": seller,
            })
            raise NotAuthorizedError(seller, asset_id, "list")
        if price.is_zero and not self.allow_zero_price:
            logger.warning("listing_rejected_zero_price", extra={"asset_id": asset_id})
            raise InvalidPriceError(asset_id, str(price))

        entry = ListingEntry(price=price, seller=seller, active=True)
        self.state.listings[asset_id] = entry
        self.state.events.record(AssetListed(asset_id=asset_id, price=price, seller=seller))
        logger.info("listing_created", extra={
            "asset_id": asset_id,
            "price": str(price),
            "seller": seller,
        })
        return entry

    def unlist(
        self,
        asset_id: AssetId,
        caller: OwnerId,
        caller_is_owner_or_approved: bool,
    ) -> None:
        if not caller_is_owner_or_approved:
            logger.warning("unlisting_rejected_unauthorized", extra={
                "asset_id": asset_id,
                "caller": caller,
            })
            raise NotAuthorizedError(caller, asset_id, "unlist")
        self.clear(asset_id)

    def get(self, asset_id: AssetId) -> ListingEntry:
        return self.state.listings.get(asset_id, ListingEntry.empty())

    def clear(self, asset_id: AssetId) -> None:
        """Drop the listing. Emits AssetUnlisted only if one was active."""
        entry = self.state.listings.pop(asset_id, None)
        if entry is not None and entry.active:
            self.state.events.record(AssetUnlisted(asset_id=asset_id))
            logger.info("listing_cleared", extra={"asset_id": asset_id})
