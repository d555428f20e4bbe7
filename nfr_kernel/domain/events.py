"""
Notifications emitted by the FR kernel, and the recorder that publishes them.

Events are buffered while an operation runs and published only when the
operation commits. A rolled-back operation publishes nothing.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from nfr_kernel.domain.fixed_point import FixedPoint
from nfr_kernel.domain.records import AssetId, OwnerId
from nfr_kernel.logging_config import get_logger

logger = get_logger("domain.events")


@dataclass(frozen=True)
class FRDistributed:
    """Emitted on every priced sale, including sales that produced no royalty."""

    asset_id: AssetId
    sale_price: FixedPoint
    royalty_amount: FixedPoint


@dataclass(frozen=True)
class FRClaimed:
    owner: OwnerId
    amount: FixedPoint


@dataclass(frozen=True)
class AssetListed:
    asset_id: AssetId
    price: FixedPoint
    seller: OwnerId


@dataclass(frozen=True)
class AssetUnlisted:
    asset_id: AssetId


@dataclass(frozen=True)
class GenerationShifted:
    asset_id: AssetId
    new_owner: OwnerId
    owner_amount: int
    dropped_owner: OwnerId | None = None


FREvent = FRDistributed | FRClaimed | AssetListed | AssetUnlisted | GenerationShifted

Subscriber = Callable[[FREvent], None]


class EventRecorder:
    """
    Buffers events per operation and publishes them on commit.

    Contract:
        ``record`` appends to the pending buffer. ``commit`` moves the buffer
        to history and notifies subscribers in emission order. ``discard``
        drops the buffer.
    Guarantees:
        - Subscribers never observe events from a rolled-back operation.
    """

    def __init__(self) -> None:
        self._pending: list[FREvent] = []
        self._history: list[FREvent] = []
        self._subscribers: list[Subscriber] = []

    def subscribe(self, subscriber: Subscriber) -> None:
        self._subscribers.append(subscriber)

    def record(self, event: FREvent) -> None:
        self._pending.append(event)

    def mark(self) -> int:
        """Position in the pending buffer, for nested rollback."""
        return len(self._pending)

    def discard(self, mark: int = 0) -> None:
        del self._pending[mark:]

    def commit(self) -> None:
        published, self._pending = self._pending, []
        self._history.extend(published)
        for event in published:
            logger.debug("event_published", extra={"event_type": type(event).__name__})
            for subscriber in self._subscribers:
                subscriber(event)

    @property
    def pending(self) -> tuple[FREvent, ...]:
        return tuple(self._pending)

    @property
    def history(self) -> tuple[FREvent, ...]:
        return tuple(self._history)

    def of_type(self, event_type: type) -> list[FREvent]:
        return [e for e in self._history if isinstance(e, event_type)]
