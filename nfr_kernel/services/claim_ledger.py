"""
ClaimLedger -- pull-based FR balances per address.

Responsibility:
    Accumulates FR credited by distributions and pays it out on request.
    One balance per address across all assets.

Architecture position:
    Kernel > Services. Credited by the SaleOrchestrator when applying a
    DistributionResult; drained by ``release``.

Invariants enforced:
    - CLAIM_ONCE: ``release`` zeroes the balance before the payout
      instruction is sent. A reentrant release issued while the payout is
      in flight observes a zero balance and fails with NoPaymentDueError.
    - Release is all-or-nothing: if the rail fails, the balance is put back.

Failure modes:
    - NoPaymentDueError when the balance is zero.
    - PayoutFailedError when the payment rail raises.
"""

from __future__ import annotations

from nfr_kernel.domain.events import FRClaimed
from nfr_kernel.domain.fixed_point import ZERO, FixedPoint, fixed_sum
from nfr_kernel.domain.ports import PaymentRail, PayoutInstruction, PayoutReason
from nfr_kernel.domain.records import OwnerId
from nfr_kernel.exceptions import NoPaymentDueError, PayoutFailedError
from nfr_kernel.logging_config import get_logger
from nfr_kernel.services.base import BaseService

logger = get_logger("services.claim_ledger")


class ClaimLedger(BaseService):
    """Claim balances backed by ``FRState.allotted``."""

    def credit(self, address: OwnerId, amount: FixedPoint) -> FixedPoint:
        """Add ``amount`` to the balance of ``address``; returns the new balance."""
        if amount.is_zero:
            return self.balance_of(address)
        balance = self.balance_of(address) + amount
        self.state.allotted[address] = balance
        logger.debug("fr_credited", extra={
            "owner": address,
            "amount": str(amount),
            "balance": str(balance),
        })
        return balance

    def balance_of(self, address: OwnerId) -> FixedPoint:
        return self.state.allotted.get(address, ZERO)

    def total_allotted(self) -> FixedPoint:
        return fixed_sum(self.state.allotted.values())

    def release(self, address: OwnerId, rail: PaymentRail) -> FixedPoint:
        """
        Pay out the whole balance of ``address``.

        Postconditions:
            - The balance is zero and exactly the prior balance was sent.
        Raises:
            NoPaymentDueError: balance is zero.
            PayoutFailedError: the rail raised; the balance is restored.
        """
        amount = self.balance_of(address)
        if amount.is_zero:
            logger.warning("fr_release_nothing_due", extra={"owner": address})
            raise NoPaymentDueError(address)

        # INVARIANT: CLAIM_ONCE -- settle the ledger before the interaction
        self.state.allotted.pop(address, None)

        instruction = PayoutInstruction(
            recipient=address,
            amount=amount,
            reason=PayoutReason.FR_CLAIM,
        )
        try:
            rail.send(instruction)
        except Exception as e:
            self._restore(address, amount)
            logger.error("fr_release_failed", extra={
                "owner": address,
                "amount": str(amount),
                "error_code": getattr(e, "code", type(e).__name__),
            })
            if isinstance(e, PayoutFailedError):
                raise
            raise PayoutFailedError(address, str(amount), str(e)) from e

        self.state.events.record(FRClaimed(owner=address, amount=amount))
        logger.info("fr_released", extra={
            "owner": address,
            "amount": str(amount),
        })
        return amount

    def _restore(self, address: OwnerId, amount: FixedPoint) -> None:
        # Anything credited while the payout was in flight is kept.
        self.state.allotted[address] = self.balance_of(address) + amount
