"""
nfr_engines.tracer -- NFR_ENGINE_TRACE records for engine calls.

Responsibility:
    ``@traced_engine`` logs one NFR_ENGINE_TRACE record per call with the
    engine name, version, elapsed time and the input fingerprint carried on
    the result. ``sale_fingerprint`` is the fingerprint the distribution
    engine stamps on every ``DistributionResult``.

Invariants enforced:
    - The fingerprint depends only on the values that drive a distribution:
      the record's parameters, last sold price and window, and the sale
      price. Amounts enter as integer base units, so "1" and "1.0" agree.
    - Tracing never alters the wrapped call's arguments or result.

The same fingerprint appears on the trace record, on the result and in
the orchestrator's ``sale_settled`` log, so the three can be joined.
"""

from __future__ import annotations

import functools
import hashlib
import time
from collections.abc import Callable
from typing import Any

from nfr_kernel.domain.fixed_point import FixedPoint
from nfr_kernel.domain.records import RoyaltyRecord
from nfr_kernel.logging_config import get_logger

_logger = get_logger("engines.tracer")


def sale_fingerprint(record: RoyaltyRecord, sale_price: FixedPoint) -> str:
    """First 16 hex chars of SHA-256 over the inputs of one distribution."""
    canonical = "|".join((
        str(record.num_generations),
        str(record.percent_of_profit.raw),
        str(record.successive_ratio.raw),
        str(record.last_sold_price.raw),
        ",".join(record.addresses_in_fr),
        str(sale_price.raw),
    ))
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()[:16]


def traced_engine(engine_name: str, engine_version: str) -> Callable:
    """Log NFR_ENGINE_TRACE after each successful call of the decorated engine."""

    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            started = time.perf_counter()
            result = func(*args, **kwargs)
            _logger.info("NFR_ENGINE_TRACE", extra={
                "trace_type": "NFR_ENGINE_TRACE",
                "engine_name": engine_name,
                "engine_version": engine_version,
                "input_fingerprint": getattr(result, "input_fingerprint", None),
                "duration_ms": round((time.perf_counter() - started) * 1000, 2),
            })
            return result

        return wrapper

    return decorator
