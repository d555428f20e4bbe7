"""
EngineSettings schema.

The human-authored configuration of an FR engine instance. YAML files are
parsed into these frozen types by ``nfr_config.loader``.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from nfr_kernel.domain.records import FRParameters


@dataclass(frozen=True)
class ListingPolicy:
    """Listing rules."""

    allow_zero_price: bool = False


@dataclass(frozen=True)
class LoggingSettings:
    level: str = "INFO"


@dataclass(frozen=True)
class EngineSettings:
    """Root configuration artifact."""

    version: int = 1
    default_fr_info: FRParameters | None = None
    listing: ListingPolicy = field(default_factory=ListingPolicy)
    logging: LoggingSettings = field(default_factory=LoggingSettings)
    source: str | None = None  # path the settings were loaded from
