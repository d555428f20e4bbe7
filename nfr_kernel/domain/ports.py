"""
Ports -- protocols for the collaborators the FR kernel depends on.

The asset registry owns ownership and approval bookkeeping; the payment rail
moves value out of the engine's custody. Both are supplied by the caller.
Concrete in-memory adapters live in ``nfr_services``.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Protocol, runtime_checkable

from nfr_kernel.domain.fixed_point import FixedPoint
from nfr_kernel.domain.records import AssetId, OwnerId


@runtime_checkable
class AssetRegistry(Protocol):
    """Ownership registry consumed by the orchestrator."""

    def owner_of(self, asset_id: AssetId) -> OwnerId: ...

    def exists(self, asset_id: AssetId) -> bool: ...

    def is_authorized(self, caller: OwnerId, asset_id: AssetId) -> bool: ...

    def can_mint(self, caller: OwnerId) -> bool: ...

    def mint(self, owner: OwnerId, metadata: Any = None) -> AssetId: ...

    def burn(self, asset_id: AssetId) -> None: ...

    def transfer(self, from_owner: OwnerId, to_owner: OwnerId, asset_id: AssetId) -> None: ...


class PayoutReason(str, Enum):
    FR_CLAIM = "fr_claim"
    SALE_PROCEEDS = "sale_proceeds"
    REFUND = "refund"


@dataclass(frozen=True)
class PayoutInstruction:
    """Command to move value out of custody to a recipient."""

    recipient: OwnerId
    amount: FixedPoint
    reason: PayoutReason
    asset_id: AssetId | None = None


@runtime_checkable
class PaymentRail(Protocol):
    """Value transport. ``receive`` takes a buyer's payment into custody,
    ``send`` executes a payout and ``reverse`` takes an executed payout
    back into custody. Any of them may raise to refuse."""

    def receive(self, payer: OwnerId, amount: FixedPoint) -> None: ...

    def send(self, instruction: PayoutInstruction) -> None: ...

    def reverse(self, instruction: PayoutInstruction) -> None: ...
