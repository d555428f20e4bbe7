"""
Sale Orchestrator - the FR protocol state machine.

The orchestrator ties together:
- AssetRegistry: ownership, approvals, mint/burn (external collaborator)
- RoyaltyStore: generation windows and sale history
- ListingBook: Unlisted / Listed(price, seller) per asset
- DistributionEngine: profit, pool and weighted shares (pure)
- ClaimLedger: pull-based FR balances
- PaymentRail: value in (buyer payments) and out (proceeds, claims)

Every public mutator runs as one unit of work: the kernel state is
snapshotted on entry, and any exception restores it, runs the registered
compensations (undoing collaborator calls) in reverse order, and drops the
notifications buffered so far. Notifications are published only once the
outermost unit of work completes.

A reentrant lock serializes entry points. A collaborator calling back into
the orchestrator (for example a recipient hook inside a payout) runs as a
nested unit of work on the same thread.
"""

from __future__ import annotations

import threading
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from decimal import Decimal
from pathlib import Path
from typing import Any

from nfr_config import EngineSettings, get_active_settings
from nfr_engines.distribution import DistributionEngine, DistributionResult
from nfr_kernel.domain.events import FRDistributed, GenerationShifted
from nfr_kernel.domain.fixed_point import FixedPoint
from nfr_kernel.domain.ports import (
    AssetRegistry,
    PaymentRail,
    PayoutInstruction,
    PayoutReason,
)
from nfr_kernel.domain.records import AssetId, FRParameters, OwnerId
from nfr_kernel.exceptions import (
    NoDefaultConfiguredError,
    NotAuthorizedError,
    NotListedError,
    PriceMismatchError,
)
from nfr_kernel.logging_config import LogContext, get_logger
from nfr_kernel.selectors.fr_selector import FRSelector
from nfr_kernel.services.claim_ledger import ClaimLedger
from nfr_kernel.services.listing_book import ListingBook
from nfr_kernel.services.royalty_store import RoyaltyStore
from nfr_kernel.state import FRState

logger = get_logger("services.sale_orchestrator")

AmountInput = FixedPoint | Decimal | str | int
Compensation = Callable[[], None]


@dataclass(frozen=True)
class SaleResult:
    """Outcome of a priced sale (listed buy or priced transfer)."""

    asset_id: AssetId
    seller: OwnerId
    buyer: OwnerId
    distribution: DistributionResult
    seller_proceeds: FixedPoint

    @property
    def sale_price(self) -> FixedPoint:
        return self.distribution.sale_price

    @property
    def royalty_amount(self) -> FixedPoint:
        return self.distribution.pool

    @property
    def input_fingerprint(self) -> str:
        return self.distribution.input_fingerprint


class SaleOrchestrator:
    """
    Entry points of the FR engine.

    Reads (``retrieve_*``) are pure projections; every other method is a
    unit of work that either commits entirely or raises with no effect.
    """

    def __init__(
        self,
        registry: AssetRegistry,
        rail: PaymentRail,
        *,
        settings: EngineSettings | None = None,
        state: FRState | None = None,
        engine: DistributionEngine | None = None,
    ):
        """
        Args:
            registry: Ownership registry collaborator.
            rail: Value transport for payments in and payouts out.
            settings: Engine settings. Defaults to built-in defaults
                (no default FR info, zero-price listings rejected).
            state: Kernel state to operate on. A fresh one by default.
            engine: Distribution engine. A fresh one by default.
        """
        self.settings = settings or EngineSettings()
        self.state = state if state is not None else FRState()
        self.registry = registry
        self.rail = rail

        self._records = RoyaltyStore(self.state)
        self._listings = ListingBook(
            self.state, allow_zero_price=self.settings.listing.allow_zero_price
        )
        self._ledger = ClaimLedger(self.state)
        self._selector = FRSelector(self.state)
        self._engine = engine or DistributionEngine()

        if self.settings.default_fr_info is not None and self.state.default_fr is None:
            self.state.default_fr = self.settings.default_fr_info

        self._lock = threading.RLock()
        self._pending_undo: list[list[Compensation]] = []

    @classmethod
    def from_settings(
        cls,
        registry: AssetRegistry,
        rail: PaymentRail,
        config_path: Path | None = None,
    ) -> SaleOrchestrator:
        return cls(registry, rail, settings=get_active_settings(config_path))

    @property
    def events(self):
        return self.state.events

    @property
    def selector(self) -> FRSelector:
        return self._selector

    # =========================================================================
    # Unit of work
    # =========================================================================

    @contextmanager
    def _unit_of_work(self, operation: str, **context: Any) -> Iterator[list[Compensation]]:
        with self._lock, LogContext.bind(operation=operation, **context):
            snapshot = self.state.snapshot()
            compensations: list[Compensation] = []
            self._pending_undo.append(compensations)
            try:
                yield compensations
            except Exception as exc:
                self._pending_undo.pop()
                self.state.restore(snapshot)
                self._compensate(compensations)
                logger.warning("operation_rolled_back", extra={
                    "error_type": type(exc).__name__,
                    "error_code": getattr(exc, "code", None),
                    "compensations": len(compensations),
                })
                raise
            self._pending_undo.pop()
            if self._pending_undo:
                # Nested work is undone if the enclosing operation fails.
                self._pending_undo[-1].extend(compensations)
            else:
                self.state.events.commit()

    def _compensate(self, compensations: list[Compensation]) -> None:
        """Run undo steps newest first; a failing step does not stop the rest."""
        for undo in reversed(compensations):
            try:
                undo()
            except Exception as e:
                logger.error("compensation_failed", extra={
                    "error_type": type(e).__name__,
                    "error_code": getattr(e, "code", None),
                })

    # =========================================================================
    # Configuration and lifecycle
    # =========================================================================

    def set_default_fr_info(
        self,
        num_generations: int,
        percent_of_profit: AmountInput,
        successive_ratio: AmountInput,
    ) -> FRParameters:
        """Set the parameters used by ``mint_with_default``; validates like mint."""
        with self._unit_of_work("set_default_fr_info"):
            params = FRParameters.of(num_generations, percent_of_profit, successive_ratio)
            self.state.default_fr = params
            logger.info("default_fr_info_set", extra={
                "num_generations": params.num_generations,
                "percent_of_profit": str(params.percent_of_profit),
                "successive_ratio": str(params.successive_ratio),
            })
            return params

    def mint(
        self,
        caller: OwnerId,
        owner: OwnerId,
        num_generations: int,
        percent_of_profit: AmountInput,
        successive_ratio: AmountInput,
        metadata: Any = None,
    ) -> AssetId:
        """Mint an asset to ``owner`` with explicit FR parameters."""
        with self._unit_of_work("mint", actor_id=caller) as undo:
            params = FRParameters.of(num_generations, percent_of_profit, successive_ratio)
            return self._mint(caller, owner, params, metadata, undo)

    def mint_with_default(
        self,
        caller: OwnerId,
        owner: OwnerId,
        metadata: Any = None,
    ) -> AssetId:
        """Mint using the default FR info; fails if none has been set."""
        with self._unit_of_work("mint_with_default", actor_id=caller) as undo:
            params = self.state.default_fr
            if params is None:
                logger.warning("mint_rejected_no_default", extra={"owner": owner})
                raise NoDefaultConfiguredError()
            return self._mint(caller, owner, params, metadata, undo)

    def _mint(
        self,
        caller: OwnerId,
        owner: OwnerId,
        params: FRParameters,
        metadata: Any,
        undo: list[Compensation],
    ) -> AssetId:
        if not self.registry.can_mint(caller):
            logger.warning("mint_rejected_unauthorized", extra={"caller": caller})
            raise NotAuthorizedError(caller, None, "mint")
        asset_id = self.registry.mint(owner, metadata)
        undo.append(lambda: self.registry.burn(asset_id))
        self._records.create(asset_id, params, owner)
        return asset_id

    def burn(self, caller: OwnerId, asset_id: AssetId) -> None:
        """Destroy the asset's FR record and listing, then burn it.

        Claim balances already credited are untouched.
        """
        with self._unit_of_work("burn", actor_id=caller, asset_id=asset_id):
            self._require_authorized(caller, asset_id, "burn")
            self._listings.clear(asset_id)
            self._records.destroy(asset_id)
            self.registry.burn(asset_id)

    # =========================================================================
    # Listing
    # =========================================================================

    def list(self, caller: OwnerId, asset_id: AssetId, price: AmountInput) -> None:
        with self._unit_of_work("list", actor_id=caller, asset_id=asset_id):
            self._listings.list(
                asset_id,
                FixedPoint.of(price),
                seller=caller,
                caller_is_owner_or_approved=self.registry.is_authorized(caller, asset_id),
            )

    def unlist(self, caller: OwnerId, asset_id: AssetId) -> None:
        with self._unit_of_work("unlist", actor_id=caller, asset_id=asset_id):
            self._listings.unlist(
                asset_id,
                caller,
                caller_is_owner_or_approved=self.registry.is_authorized(caller, asset_id),
            )

    # =========================================================================
    # Sales and transfers
    # =========================================================================

    def buy(self, caller: OwnerId, asset_id: AssetId, paid: AmountInput) -> SaleResult:
        """Buy a listed asset, paying exactly the listed price."""
        with self._unit_of_work("buy", actor_id=caller, asset_id=asset_id) as undo:
            entry = self._listings.get(asset_id)
            if not entry.active:
                logger.warning("buy_rejected_not_listed", extra={"caller": caller})
                raise NotListedError(asset_id)
            # A listing whose seller lost control of the asset is inert.
            if not self.registry.is_authorized(entry.seller, asset_id):
                logger.warning("buy_rejected_stale_listing", extra={
                    "caller": caller,
                    "seller": entry.seller,
                })
                raise NotListedError(asset_id)

            paid_amount = FixedPoint.of(paid)
            if paid_amount != entry.price:
                logger.warning("buy_rejected_price_mismatch", extra={
                    "price": str(entry.price),
                    "paid": str(paid_amount),
                })
                raise PriceMismatchError(asset_id, str(entry.price), str(paid_amount))

            seller = self.registry.owner_of(asset_id)
            return self._settle_sale(asset_id, seller, caller, entry.price, caller, undo)

    def transfer_with_price(
        self,
        caller: OwnerId,
        from_owner: OwnerId,
        to_owner: OwnerId,
        asset_id: AssetId,
        price: AmountInput,
        paid: AmountInput,
    ) -> SaleResult:
        """Direct sale bypassing the listing book."""
        with self._unit_of_work("transfer_with_price", actor_id=caller, asset_id=asset_id) as undo:
            self._require_authorized(caller, asset_id, "transfer_with_price")
            self._require_owner(from_owner, asset_id, "transfer_with_price")

            sale_price = FixedPoint.of(price)
            paid_amount = FixedPoint.of(paid)
            if paid_amount != sale_price:
                logger.warning("transfer_rejected_price_mismatch", extra={
                    "price": str(sale_price),
                    "paid": str(paid_amount),
                })
                raise PriceMismatchError(asset_id, str(sale_price), str(paid_amount))

            return self._settle_sale(asset_id, from_owner, to_owner, sale_price, caller, undo)

    def transfer_zero_profit(
        self,
        caller: OwnerId,
        from_owner: OwnerId,
        to_owner: OwnerId,
        asset_id: AssetId,
    ) -> None:
        """Plain ownership transfer: the window advances, nothing is distributed.

        Treated as a sale at ``last_sold_price``, so profit is zero and the
        recorded price does not change. No FRDistributed is emitted.
        """
        with self._unit_of_work("transfer_zero_profit", actor_id=caller, asset_id=asset_id) as undo:
            self._require_authorized(caller, asset_id, "transfer")
            self._require_owner(from_owner, asset_id, "transfer")

            self._shift_generation(asset_id, to_owner)
            self._listings.clear(asset_id)
            self._transfer_ownership(from_owner, to_owner, asset_id, undo)
            logger.info("zero_profit_transfer_applied", extra={
                "from_owner": from_owner,
                "to_owner": to_owner,
            })

    def _settle_sale(
        self,
        asset_id: AssetId,
        seller: OwnerId,
        buyer: OwnerId,
        sale_price: FixedPoint,
        payer: OwnerId,
        undo: list[Compensation],
    ) -> SaleResult:
        """Distribute, shift, transfer, and move value for one priced sale."""
        record = self._records.get(asset_id)
        result = self._engine.distribute(record=record, sale_price=sale_price)

        for share in result.shares:
            self._ledger.credit(share.owner, share.amount)
        self.state.total_pooled = self.state.total_pooled + result.pool

        self._records.set_last_sold_price(asset_id, sale_price)
        self._shift_generation(asset_id, buyer)
        self._listings.clear(asset_id)

        self._transfer_ownership(seller, buyer, asset_id, undo)

        self.rail.receive(payer, sale_price)
        undo.append(lambda: self.rail.send(PayoutInstruction(
            recipient=payer,
            amount=sale_price,
            reason=PayoutReason.REFUND,
            asset_id=asset_id,
        )))

        # The whole pool stays in custody; dust included.
        proceeds = sale_price - result.pool
        if proceeds.is_positive:
            payout = PayoutInstruction(
                recipient=seller,
                amount=proceeds,
                reason=PayoutReason.SALE_PROCEEDS,
                asset_id=asset_id,
            )
            self.rail.send(payout)
            undo.append(lambda: self.rail.reverse(payout))

        self.state.events.record(FRDistributed(
            asset_id=asset_id,
            sale_price=sale_price,
            royalty_amount=result.pool,
        ))
        logger.info("sale_settled", extra={
            "seller": seller,
            "buyer": buyer,
            "sale_price": str(sale_price),
            "profit": str(result.profit),
            "pool": str(result.pool),
            "allocated": str(result.allocated),
            "seller_proceeds": str(proceeds),
            "recipients": len(result.shares),
            "input_fingerprint": result.input_fingerprint,
        })
        return SaleResult(
            asset_id=asset_id,
            seller=seller,
            buyer=buyer,
            distribution=result,
            seller_proceeds=proceeds,
        )

    def _shift_generation(self, asset_id: AssetId, new_owner: OwnerId) -> None:
        record, dropped = self._records.push_owner(asset_id, new_owner)
        self.state.events.record(GenerationShifted(
            asset_id=asset_id,
            new_owner=new_owner,
            owner_amount=record.owner_amount,
            dropped_owner=dropped,
        ))

    def _transfer_ownership(
        self,
        from_owner: OwnerId,
        to_owner: OwnerId,
        asset_id: AssetId,
        undo: list[Compensation],
    ) -> None:
        self.registry.transfer(from_owner, to_owner, asset_id)
        undo.append(lambda: self.registry.transfer(to_owner, from_owner, asset_id))

    def _require_authorized(self, caller: OwnerId, asset_id: AssetId, action: str) -> None:
        if not self.registry.is_authorized(caller, asset_id):
            logger.warning("operation_rejected_unauthorized", extra={
                "caller": caller,
                "action": action,
            })
            raise NotAuthorizedError(caller, asset_id, action)

    def _require_owner(self, from_owner: OwnerId, asset_id: AssetId, action: str) -> None:
        if self.registry.owner_of(asset_id) != from_owner:
            logger.warning("operation_rejected_incorrect_owner", extra={
                "from_owner": from_owner,
                "action": action,
            })
            raise NotAuthorizedError(from_owner, asset_id, f"{action} from incorrect owner")

    # =========================================================================
    # Claims
    # =========================================================================

    def release_fr(self, owner: OwnerId) -> FixedPoint:
        """Pay out everything allotted to ``owner``. Anyone may trigger it."""
        with self._unit_of_work("release_fr", actor_id=owner) as undo:
            amount = self._ledger.release(owner, self.rail)
            undo.append(lambda: self.rail.reverse(PayoutInstruction(
                recipient=owner,
                amount=amount,
                reason=PayoutReason.FR_CLAIM,
            )))
            return amount

    # =========================================================================
    # Reads
    # =========================================================================

    def retrieve_fr_info(self, asset_id: AssetId) -> tuple:
        return self._selector.retrieve_fr_info(asset_id)

    def retrieve_allotted_fr(self, owner: OwnerId) -> FixedPoint:
        return self._selector.retrieve_allotted_fr(owner)

    def retrieve_list_info(self, asset_id: AssetId) -> tuple:
        return self._selector.retrieve_list_info(asset_id)
