"""
CustodyAccount -- reference adapter for the ``PaymentRail`` port.

Responsibility:
    Holds the value paid into the engine and executes payouts from it.
    ``held`` is what the engine currently custodies: royalty pools not yet
    claimed, including truncation dust.

Invariants enforced:
    - A payout never exceeds ``held``.
    - A payout whose recipient hook raises is undone in full.
    - A reversal never takes back more than was paid to the recipient.

Recipient hooks model code that runs at the recipient while value
arrives (and may call back into the engine).
"""

from __future__ import annotations

from collections.abc import Callable

from nfr_kernel.domain.fixed_point import ZERO, FixedPoint
from nfr_kernel.domain.ports import PayoutInstruction
from nfr_kernel.domain.records import OwnerId
from nfr_kernel.exceptions import PayoutFailedError
from nfr_kernel.logging_config import get_logger

logger = get_logger("services.custody")

RecipientHook = Callable[[PayoutInstruction], None]


class CustodyAccount:
    """In-memory payment rail."""

    def __init__(self) -> None:
        self.held: FixedPoint = ZERO
        self._paid: dict[OwnerId, FixedPoint] = {}
        self._received: dict[OwnerId, FixedPoint] = {}
        self._hooks: dict[OwnerId, RecipientHook] = {}
        self._refusing: set[OwnerId] = set()
        self.instructions: list[PayoutInstruction] = []
        self.reversals: list[PayoutInstruction] = []

    def receive(self, payer: OwnerId, amount: FixedPoint) -> None:
        self.held = self.held + amount
        self._received[payer] = self._received.get(payer, ZERO) + amount

    def send(self, instruction: PayoutInstruction) -> None:
        recipient, amount = instruction.recipient, instruction.amount
        if recipient in self._refusing:
            raise PayoutFailedError(recipient, str(amount), "recipient refuses payments")
        if amount > self.held:
            raise PayoutFailedError(
                recipient, str(amount), f"custody holds only {self.held}"
            )

        self.held = self.held - amount
        self._paid[recipient] = self.paid_to(recipient) + amount
        self.instructions.append(instruction)

        hook = self._hooks.get(recipient)
        if hook is None:
            return
        try:
            hook(instruction)
        except Exception as e:
            self.held = self.held + amount
            self._paid[recipient] = self.paid_to(recipient) - amount
            self.instructions.pop()
            raise PayoutFailedError(recipient, str(amount), f"recipient hook failed: {e}") from e

    def reverse(self, instruction: PayoutInstruction) -> None:
        """Take an executed payout back into custody."""
        recipient, amount = instruction.recipient, instruction.amount
        if amount > self.paid_to(recipient):
            raise PayoutFailedError(
                recipient, str(amount), f"only {self.paid_to(recipient)} was paid"
            )
        self.held = self.held + amount
        self._paid[recipient] = self.paid_to(recipient) - amount
        self.reversals.append(instruction)
        logger.info("payout_reversed", extra={
            "recipient": recipient,
            "amount": str(amount),
            "reason": instruction.reason.value,
        })

    def paid_to(self, recipient: OwnerId) -> FixedPoint:
        return self._paid.get(recipient, ZERO)

    def received_from(self, payer: OwnerId) -> FixedPoint:
        return self._received.get(payer, ZERO)

    def on_receipt(self, recipient: OwnerId, hook: RecipientHook) -> None:
        """Run ``hook`` whenever ``recipient`` is paid."""
        self._hooks[recipient] = hook

    def refuse_payments_to(self, recipient: OwnerId) -> None:
        self._refusing.add(recipient)
