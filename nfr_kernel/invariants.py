"""
Kernel Invariants Contract.

These invariants are structural law for the royalty state. No configuration
may override them. This module declares them; enforcement is distributed
across RoyaltyStore, ClaimLedger, DistributionEngine and SaleOrchestrator,
and FRSelector.audit_invariants() re-checks them on demand.
"""

from enum import Enum, unique


@unique
class KernelInvariant(str, Enum):
    """Non-configurable invariants enforced by the kernel."""

    WINDOW_BOUND = "window_bound"
    """``len(addresses_in_fr) == min(owner_amount, num_generations)`` for
    every record. Enforced by RoyaltyStore.push_owner."""

    DUST_SHORTFALL = "dust_shortfall"
    """Total allotted FR never exceeds total pooled FR; truncation dust is
    only ever a shortfall. Enforced by DistributionEngine."""

    PAYMENT_EXACTNESS = "payment_exactness"
    """A priced sale settles only when the paid amount equals the quoted
    price. Enforced by SaleOrchestrator."""

    CLAIM_ONCE = "claim_once"
    """A credited balance is paid out at most once; the ledger is zeroed
    before the payout is sent. Enforced by ClaimLedger.release."""

    ATOMIC_OPERATION = "atomic_operation"
    """A rejected operation leaves no partial state change. Enforced by the
    SaleOrchestrator unit of work."""


ALL_KERNEL_INVARIANTS: frozenset[KernelInvariant] = frozenset(KernelInvariant)

# The kernel package may not import from these packages.
# This is enforced by tests/architecture/test_kernel_boundary.py.
FORBIDDEN_KERNEL_IMPORTS: tuple[str, ...] = (
    "nfr_engines",
    "nfr_services",
    "nfr_config",
)
