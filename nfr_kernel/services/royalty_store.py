"""
RoyaltyStore -- per-asset FR records and the generation window.

Responsibility:
    Creates, reads, shifts and destroys RoyaltyRecords. ``push_owner`` is the
    generation shift: the window is a bounded FIFO capped at
    ``num_generations`` on every push.

Architecture position:
    Kernel > Services. Called by the SaleOrchestrator; read by FRSelector.

Invariants enforced:
    - WINDOW_BOUND: after every push,
      ``len(addresses_in_fr) == min(owner_amount, num_generations)``.

Failure modes:
    - InvalidParametersError from ``create`` (via FRParameters).
    - InvariantViolationError when shifting a record that does not exist.
"""

from __future__ import annotations

from nfr_kernel.domain.fixed_point import FixedPoint
from nfr_kernel.domain.records import (
    AssetId,
    FRParameters,
    OwnerId,
    RoyaltyRecord,
)
from nfr_kernel.exceptions import InvariantViolationError
from nfr_kernel.invariants import KernelInvariant
from nfr_kernel.logging_config import get_logger
from nfr_kernel.services.base import BaseService

logger = get_logger("services.royalty_store")


class RoyaltyStore(BaseService):
    """Royalty record store backed by ``FRState.records``."""

    def create(
        self,
        asset_id: AssetId,
        params: FRParameters,
        initial_owner: OwnerId,
    ) -> RoyaltyRecord:
        """
        Create the record for a freshly minted asset.

        Preconditions:
            - ``params`` is a validated FRParameters.
        Postconditions:
            - ``last_sold_price == 0``, ``owner_amount == 1``,
              ``addresses_in_fr == (initial_owner,)``.
        """
        record = RoyaltyRecord.initial(params, initial_owner)
        self.state.records[asset_id] = record
        logger.info("fr_record_created", extra={
            "asset_id": asset_id,
            "num_generations": params.num_generations,
            "percent_of_profit": str(params.percent_of_profit),
            "successive_ratio": str(params.successive_ratio),
            "initial_owner": initial_owner,
        })
        return record

    def get(self, asset_id: AssetId) -> RoyaltyRecord:
        """Pure read. An absent record is the zero value, not an error."""
        return self.state.records.get(asset_id, RoyaltyRecord.empty())

    def push_owner(self, asset_id: AssetId, new_owner: OwnerId) -> tuple[RoyaltyRecord, OwnerId | None]:
        """
        Append ``new_owner`` to the window and increment ``owner_amount``.

        Returns the updated record and the owner dropped from the front of
        the window, if any.
        """
        record = self.get(asset_id)
        if not record.exists:
            raise InvariantViolationError(
                KernelInvariant.WINDOW_BOUND.value,
                f"cannot shift generations of asset {asset_id} without an FR record",
            )

        window = record.addresses_in_fr + (new_owner,)
        dropped: OwnerId | None = None
        # INVARIANT: WINDOW_BOUND -- strict FIFO, oldest entry leaves first
        if len(window) > record.num_generations:
            dropped = window[0]
            window = window[1:]

        updated = record.evolve(
            owner_amount=record.owner_amount + 1,
            addresses_in_fr=window,
        )
        expected = min(updated.owner_amount, updated.num_generations)
        if len(updated.addresses_in_fr) != expected:
            raise InvariantViolationError(
                KernelInvariant.WINDOW_BOUND.value,
                f"asset {asset_id} window has {len(updated.addresses_in_fr)} "
                f"entries, expected {expected}",
            )

        self.state.records[asset_id] = updated
        logger.info("generation_shifted", extra={
            "asset_id": asset_id,
            "new_owner": new_owner,
            "owner_amount": updated.owner_amount,
            "window_size": len(window),
            "dropped_owner": dropped,
        })
        return updated, dropped

    def set_last_sold_price(self, asset_id: AssetId, price: FixedPoint) -> RoyaltyRecord:
        record = self.get(asset_id)
        updated = record.evolve(last_sold_price=price)
        self.state.records[asset_id] = updated
        logger.debug("last_sold_price_set", extra={
            "asset_id": asset_id,
            "last_sold_price": str(price),
        })
        return updated

    def destroy(self, asset_id: AssetId) -> None:
        """Reset the record to its zero value."""
        self.state.records.pop(asset_id, None)
        logger.info("fr_record_destroyed", extra={"asset_id": asset_id})
