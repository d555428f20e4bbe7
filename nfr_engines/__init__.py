"""
Module: nfr_engines
Responsibility:
    Package entrypoint re-exporting the pure calculation engines. This is
    the import surface for nfr_services.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import nfr_kernel domain types and kernel logging.
    MUST NOT import nfr_services or nfr_config.

Invariants enforced:
    - Integer fixed-point arithmetic only; floats are forbidden.
    - Determinism: identical inputs always produce identical outputs.

Audit relevance:
    Every engine invocation is traced via ``@traced_engine``
    (see ``nfr_engines.tracer``), emitting NFR_ENGINE_TRACE records.
"""

from nfr_engines.distribution import (
    DistributionEngine,
    DistributionResult,
    RoyaltyShare,
)
from nfr_engines.tracer import sale_fingerprint, traced_engine

__all__ = [
    "DistributionEngine",
    "DistributionResult",
    "RoyaltyShare",
    "sale_fingerprint",
    "traced_engine",
]
