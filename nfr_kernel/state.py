"""
FRState -- the in-process store behind every kernel service and selector.

Responsibility:
    Holds the four shared resources of the engine (royalty records,
    listings, claim balances, default FR info) plus the running total of
    pooled royalty used by the dust audit. Services mutate it; selectors
    read it; the orchestrator owns one instance.

Architecture position:
    Kernel -- plays the role a database session plays for a persistent
    ledger. Values stored are immutable, so a snapshot is a shallow copy
    of each mapping.

Invariants enforced:
    - ``restore(snapshot)`` returns every resource to exactly the state it
      had at ``snapshot()``; this is what makes an operation atomic.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from nfr_kernel.domain.events import EventRecorder
from nfr_kernel.domain.fixed_point import ZERO, FixedPoint
from nfr_kernel.domain.records import (
    AssetId,
    FRParameters,
    ListingEntry,
    OwnerId,
    RoyaltyRecord,
)


@dataclass(frozen=True)
class StateSnapshot:
    records: dict[AssetId, RoyaltyRecord]
    listings: dict[AssetId, ListingEntry]
    allotted: dict[OwnerId, FixedPoint]
    default_fr: FRParameters | None
    total_pooled: FixedPoint
    event_mark: int


@dataclass
class FRState:
    records: dict[AssetId, RoyaltyRecord] = field(default_factory=dict)
    listings: dict[AssetId, ListingEntry] = field(default_factory=dict)
    allotted: dict[OwnerId, FixedPoint] = field(default_factory=dict)
    default_fr: FRParameters | None = None
    total_pooled: FixedPoint = ZERO
    events: EventRecorder = field(default_factory=EventRecorder)

    def snapshot(self) -> StateSnapshot:
        return StateSnapshot(
            records=dict(self.records),
            listings=dict(self.listings),
            allotted=dict(self.allotted),
            default_fr=self.default_fr,
            total_pooled=self.total_pooled,
            event_mark=self.events.mark(),
        )

    def restore(self, snapshot: StateSnapshot) -> None:
        self.records = dict(snapshot.records)
        self.listings = dict(snapshot.listings)
        self.allotted = dict(snapshot.allotted)
        self.default_fr = snapshot.default_fr
        self.total_pooled = snapshot.total_pooled
        self.events.discard(snapshot.event_mark)
