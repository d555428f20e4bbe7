"""
Module: nfr_kernel.selectors.fr_selector
Responsibility: Read-only projections of royalty state: FR info per asset,
    allotted FR per owner, listing info per asset, custody totals, an
    invariant audit and a canonical state hash.
Architecture position: Kernel > Selectors.

Invariants enforced:
    - Idempotent reads: repeated calls return identical results absent
      intervening writes.
    - WINDOW_BOUND and DUST_SHORTFALL are re-checked by audit_invariants().

Audit relevance:
    canonical_hash() is a deterministic SHA-256 over sorted state. Two
    engines that replayed the same operations produce the same hash.
"""

from __future__ import annotations

import hashlib
import json
from dataclasses import dataclass

from nfr_kernel.domain.fixed_point import FixedPoint, fixed_sum
from nfr_kernel.domain.records import AssetId, ListingEntry, OwnerId, RoyaltyRecord
from nfr_kernel.invariants import KernelInvariant
from nfr_kernel.selectors.base import BaseSelector


@dataclass(frozen=True)
class CustodySummary:
    """Pooled royalty versus what is still owed to recipients."""

    total_pooled: FixedPoint
    total_allotted: FixedPoint
    recipients: int

    @property
    def unattributed_dust(self) -> FixedPoint:
        """Outstanding pool value not attributed to any open balance.

        Claimed amounts also leave ``total_allotted``, so this is only pure
        dust while nothing has been claimed.
        """
        return self.total_pooled.saturating_sub(self.total_allotted)


@dataclass(frozen=True)
class InvariantViolation:
    invariant: KernelInvariant
    detail: str


class FRSelector(BaseSelector):
    """Projections consumed by SaleOrchestrator reads and by tests."""

    def retrieve_fr_info(self, asset_id: AssetId) -> tuple:
        """(numGenerations, percentOfProfit, successiveRatio, lastSoldPrice,
        ownerAmount, addressesInFR); zero values when the asset has no record."""
        return self.record(asset_id).as_tuple()

    def record(self, asset_id: AssetId) -> RoyaltyRecord:
        return self.state.records.get(asset_id, RoyaltyRecord.empty())

    def retrieve_allotted_fr(self, owner: OwnerId) -> FixedPoint:
        return self.state.allotted.get(owner, FixedPoint.zero())

    def retrieve_list_info(self, asset_id: AssetId) -> tuple:
        """(price, seller, active); ``(0, None, False)`` when unlisted."""
        return self.state.listings.get(asset_id, ListingEntry.empty()).as_tuple()

    def custody_summary(self) -> CustodySummary:
        return CustodySummary(
            total_pooled=self.state.total_pooled,
            total_allotted=fixed_sum(self.state.allotted.values()),
            recipients=sum(1 for v in self.state.allotted.values() if v.is_positive),
        )

    def audit_invariants(self) -> list[InvariantViolation]:
        """Re-check structural invariants; an empty list means healthy."""
        violations: list[InvariantViolation] = []
        for asset_id, record in sorted(self.state.records.items()):
            expected = min(record.owner_amount, record.num_generations)
            if len(record.addresses_in_fr) != expected:
                violations.append(InvariantViolation(
                    KernelInvariant.WINDOW_BOUND,
                    f"asset {asset_id}: window {len(record.addresses_in_fr)} != {expected}",
                ))

        summary = self.custody_summary()
        if summary.total_allotted > summary.total_pooled:
            violations.append(InvariantViolation(
                KernelInvariant.DUST_SHORTFALL,
                f"allotted {summary.total_allotted} exceeds pooled {summary.total_pooled}",
            ))
        return violations

    def canonical_hash(self) -> str:
        """Deterministic SHA-256 of records, listings and balances."""
        payload = {
            "records": [
                [
                    asset_id,
                    r.num_generations,
                    r.percent_of_profit.raw,
                    r.successive_ratio.raw,
                    r.last_sold_price.raw,
                    r.owner_amount,
                    list(r.addresses_in_fr),
                ]
                for asset_id, r in sorted(self.state.records.items())
            ],
            "listings": [
                [asset_id, e.price.raw, e.seller, e.active]
                for asset_id, e in sorted(self.state.listings.items())
            ],
            "allotted": sorted(
                [owner, amount.raw] for owner, amount in self.state.allotted.items()
            ),
            "total_pooled": self.state.total_pooled.raw,
        }
        canonical = json.dumps(payload, sort_keys=True, separators=(",", ":"))
        return hashlib.sha256(canonical.encode("utf-8")).hexdigest()
