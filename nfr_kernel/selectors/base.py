"""
Module: nfr_kernel.selectors.base
Responsibility: Abstract base class for all read-only selectors over FRState.
Architecture position: Kernel > Selectors. May import from state and domain.
    MUST NOT import from services/ or outer layers.

Invariants enforced:
    - Read-only access: selectors never assign into FRState.
    - Selectors return immutable values (frozen dataclasses, tuples).
"""

from abc import ABC

from nfr_kernel.state import FRState


class BaseSelector(ABC):
    """
    Abstract base class for all selectors.

    Contract:
        Selectors accept the caller's FRState and perform read-only queries.
    """

    def __init__(self, state: FRState):
        self.state = state
