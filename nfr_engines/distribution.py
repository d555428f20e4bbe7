"""
Module: nfr_engines.distribution
Responsibility:
    Compute the royalty ("FR") of a sale and split it across the asset's
    generation window with geometric weights.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import nfr_kernel domain types and kernel logging.

Algorithm:
    profit  = max(0, sale_price - last_sold_price)
    pool    = floor(profit * percent_of_profit)
    weight  = successive_ratio ** (n - 1 - i) for window position i
              (0 = oldest), built by repeated truncating multiplication
              from 1.0 at the newest position
    share_i = floor(pool * weight_i / sum(weights))

Invariants enforced:
    - DUST_SHORTFALL: sum(shares) <= pool; the difference is dust and is
      reported, never distributed.
    - Oldest owners get the largest share (successive_ratio >= 1).
    - Purity: the record is read, never mutated. The caller applies the
      result (credits, price update, generation shift).

Failure modes:
    - InvariantViolationError for an empty window (unreachable after mint).

Usage:
    engine = DistributionEngine()
    result = engine.distribute(record=record, sale_price=FixedPoint.of("1"))
    for share in result.shares:
        ledger.credit(share.owner, share.amount)
"""

from __future__ import annotations

from dataclasses import dataclass

from nfr_engines.tracer import sale_fingerprint, traced_engine
from nfr_kernel.domain.fixed_point import ONE, ZERO, FixedPoint, Fraction, fixed_sum
from nfr_kernel.domain.records import OwnerId, RoyaltyRecord
from nfr_kernel.exceptions import InvariantViolationError
from nfr_kernel.invariants import KernelInvariant
from nfr_kernel.logging_config import get_logger

logger = get_logger("engines.distribution")


@dataclass(frozen=True)
class RoyaltyShare:
    """One window position's cut of the pool."""

    owner: OwnerId
    position: int
    weight: FixedPoint
    amount: FixedPoint


@dataclass(frozen=True)
class DistributionResult:
    """
    Outcome of one sale.

    Contract:
        Frozen summary the orchestrator applies to the stores.
    Guarantees:
        - ``allocated + dust == pool``
        - ``shares`` is empty when ``pool`` is zero.
        - ``input_fingerprint`` identifies the record and price it was
          computed from.
    """

    sale_price: FixedPoint
    previous_price: FixedPoint
    profit: FixedPoint
    pool: FixedPoint
    shares: tuple[RoyaltyShare, ...]
    allocated: FixedPoint
    dust: FixedPoint
    input_fingerprint: str

    @property
    def has_royalty(self) -> bool:
        return self.pool.is_positive

    def amount_for(self, owner: OwnerId) -> FixedPoint:
        """Total credited to ``owner`` (an owner may hold several positions)."""
        return fixed_sum(s.amount for s in self.shares if s.owner == owner)


class DistributionEngine:
    """
    Profit, pool and geometric share calculation.

    Contract:
        Pure functions with floor truncation on every product and quotient.
        No I/O, no state.
    """

    @traced_engine("distribution", "1.0")
    def distribute(
        self,
        *,
        record: RoyaltyRecord,
        sale_price: FixedPoint,
    ) -> DistributionResult:
        """
        Split the royalty of a sale at ``sale_price`` over ``record``'s window.

        Preconditions:
            - ``record`` is the state *before* the buyer joins the window.
        """
        window = record.addresses_in_fr
        if not window:
            logger.error("distribution_empty_window", extra={
                "sale_price": str(sale_price),
            })
            raise InvariantViolationError(
                KernelInvariant.WINDOW_BOUND.value,
                "distribution requested for an asset with an empty generation window",
            )

        previous = record.last_sold_price
        profit = self.profit(sale_price, previous)
        pool = self.pool(profit, record.percent_of_profit)

        if pool.is_zero:
            logger.info("distribution_no_royalty", extra={
                "sale_price": str(sale_price),
                "last_sold_price": str(previous),
                "profit": str(profit),
            })
            return DistributionResult(
                sale_price=sale_price,
                previous_price=previous,
                profit=profit,
                pool=ZERO,
                shares=(),
                allocated=ZERO,
                dust=ZERO,
                input_fingerprint=sale_fingerprint(record, sale_price),
            )

        weights = self.weights(record.successive_ratio, len(window))
        total_weight = fixed_sum(weights)

        shares = tuple(
            RoyaltyShare(
                owner=owner,
                position=i,
                weight=weight,
                amount=pool.mul_div(weight, total_weight),
            )
            for i, (owner, weight) in enumerate(zip(window, weights))
        )
        allocated = fixed_sum(s.amount for s in shares)
        # INVARIANT: DUST_SHORTFALL -- floor truncation never over-allocates
        if allocated > pool:
            raise InvariantViolationError(
                KernelInvariant.DUST_SHORTFALL.value,
                f"allocated {allocated} exceeds pool {pool}",
            )
        dust = pool - allocated

        logger.info("distribution_computed", extra={
            "sale_price": str(sale_price),
            "profit": str(profit),
            "pool": str(pool),
            "allocated": str(allocated),
            "dust_raw": dust.raw,
            "window_size": len(window),
        })

        return DistributionResult(
            sale_price=sale_price,
            previous_price=previous,
            profit=profit,
            pool=pool,
            shares=shares,
            allocated=allocated,
            dust=dust,
            input_fingerprint=sale_fingerprint(record, sale_price),
        )

    @staticmethod
    def profit(sale_price: FixedPoint, last_sold_price: FixedPoint) -> FixedPoint:
        """``max(0, sale_price - last_sold_price)``; a loss is not an error."""
        return sale_price.saturating_sub(last_sold_price)

    @staticmethod
    def pool(profit: FixedPoint, percent_of_profit: Fraction) -> FixedPoint:
        return profit.mul(percent_of_profit)

    @staticmethod
    def weights(successive_ratio: Fraction, window_size: int) -> tuple[FixedPoint, ...]:
        """
        Geometric weights, oldest position first.

        The newest position weighs exactly 1.0; each older position weighs
        the next newer one times ``successive_ratio`` (truncated).
        """
        newest_first: list[FixedPoint] = []
        weight = ONE
        for _ in range(window_size):
            newest_first.append(weight)
            weight = weight.mul(successive_ratio)
        return tuple(reversed(newest_first))
