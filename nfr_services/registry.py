"""
InMemoryAssetRegistry -- reference adapter for the ``AssetRegistry`` port.

Responsibility:
    Minimal ownership registry: owners, single-asset approvals, operator
    approvals, mint/burn with sequential ids, opaque metadata. Enough to
    drive the SaleOrchestrator end to end in tests and embedding code.

Non-goals:
    - Enumeration, metadata URIs, safe-transfer callbacks, bulk operations.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from nfr_kernel.domain.records import AssetId, OwnerId
from nfr_kernel.exceptions import AssetNotFoundError, NotAuthorizedError
from nfr_kernel.logging_config import get_logger

logger = get_logger("services.registry")


class InMemoryAssetRegistry:
    """Dictionary-backed registry; asset ids start at 1."""

    def __init__(self, minters: Iterable[OwnerId] | None = None):
        self._owners: dict[AssetId, OwnerId] = {}
        self._approvals: dict[AssetId, OwnerId] = {}
        self._operators: dict[OwnerId, set[OwnerId]] = {}
        self._metadata: dict[AssetId, Any] = {}
        self._minters = frozenset(minters) if minters is not None else None
        self._next_id = 1

    # -- queries --------------------------------------------------------------

    def exists(self, asset_id: AssetId) -> bool:
        return asset_id in self._owners

    def owner_of(self, asset_id: AssetId) -> OwnerId:
        try:
            return self._owners[asset_id]
        except KeyError:
            raise AssetNotFoundError(asset_id) from None

    def get_approved(self, asset_id: AssetId) -> OwnerId | None:
        self.owner_of(asset_id)
        return self._approvals.get(asset_id)

    def is_approved_for_all(self, owner: OwnerId, operator: OwnerId) -> bool:
        return operator in self._operators.get(owner, set())

    def is_authorized(self, caller: OwnerId, asset_id: AssetId) -> bool:
        """Owner, approved address, or operator of the owner."""
        owner = self._owners.get(asset_id)
        if owner is None:
            return False
        return (
            caller == owner
            or self._approvals.get(asset_id) == caller
            or self.is_approved_for_all(owner, caller)
        )

    def can_mint(self, caller: OwnerId) -> bool:
        return self._minters is None or caller in self._minters

    def metadata_of(self, asset_id: AssetId) -> Any:
        self.owner_of(asset_id)
        return self._metadata.get(asset_id)

    def balance_of(self, owner: OwnerId) -> int:
        return sum(1 for o in self._owners.values() if o == owner)

    # -- approvals ------------------------------------------------------------

    def approve(self, caller: OwnerId, approved: OwnerId | None, asset_id: AssetId) -> None:
        owner = self.owner_of(asset_id)
        if caller != owner and not self.is_approved_for_all(owner, caller):
            raise NotAuthorizedError(caller, asset_id, "approve")
        if approved is None:
            self._approvals.pop(asset_id, None)
        else:
            self._approvals[asset_id] = approved

    def set_approval_for_all(self, owner: OwnerId, operator: OwnerId, approved: bool) -> None:
        operators = self._operators.setdefault(owner, set())
        if approved:
            operators.add(operator)
        else:
            operators.discard(operator)

    # -- lifecycle ------------------------------------------------------------

    def mint(self, owner: OwnerId, metadata: Any = None) -> AssetId:
        if not owner:
            raise ValueError("Cannot mint to an empty owner id")
        asset_id = self._next_id
        self._next_id += 1
        self._owners[asset_id] = owner
        if metadata is not None:
            self._metadata[asset_id] = metadata
        logger.info("asset_minted", extra={"asset_id": asset_id, "owner": owner})
        return asset_id

    def burn(self, asset_id: AssetId) -> None:
        self.owner_of(asset_id)
        del self._owners[asset_id]
        self._approvals.pop(asset_id, None)
        self._metadata.pop(asset_id, None)
        logger.info("asset_burned", extra={"asset_id": asset_id})

    def transfer(self, from_owner: OwnerId, to_owner: OwnerId, asset_id: AssetId) -> None:
        owner = self.owner_of(asset_id)
        if owner != from_owner:
            raise NotAuthorizedError(from_owner, asset_id, "transfer from incorrect owner")
        if not to_owner:
            raise ValueError("Cannot transfer to an empty owner id")
        self._owners[asset_id] = to_owner
        self._approvals.pop(asset_id, None)
        logger.debug("asset_transferred", extra={
            "asset_id": asset_id,
            "from_owner": from_owner,
            "to_owner": to_owner,
        })
