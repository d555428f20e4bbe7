"""
BaseService -- abstract base for all kernel stores.

Responsibility:
    Provides the common constructor for every service in the kernel
    layer. Each concrete service receives the caller's ``FRState`` and
    mutates it in place.

Invariants enforced:
    Services never snapshot or restore the state themselves. The caller
    (SaleOrchestrator or a test harness) owns the unit of work, so a
    multi-step operation either commits as a whole or not at all.
"""

from abc import ABC

from nfr_kernel.state import FRState


class BaseService(ABC):
    """
    Abstract base class for all kernel services.

    Contract:
        Accepts an ``FRState`` from the caller and mutates it.

    Non-goals:
        - Does NOT manage the unit of work (snapshot/restore).
        - Does NOT provide projections for external callers -- those
          belong in ``nfr_kernel/selectors/``.
    """

    def __init__(self, state: FRState):
        self.state = state
