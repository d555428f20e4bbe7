"""
nfr_config -- single public entrypoint for engine configuration.

Responsibility:
    Provides the way to obtain settings at runtime through
    ``get_active_settings()``. The orchestrator receives the returned
    ``EngineSettings``; it never reads files itself.

Architecture position:
    Configuration -- sits above ``nfr_kernel`` and below ``nfr_services``.
    The kernel MUST NEVER import from ``nfr_config``.

Failure modes:
    - ``FileNotFoundError`` -- settings file missing.
    - ``ValueError`` / ``KeyError`` -- malformed settings.
    - ``InvalidParametersError`` -- default FR info fails validation.

Audit relevance:
    Every successful ``get_active_settings()`` call emits an
    ``NFR_CONFIG_TRACE`` log entry with the source path and checksum.
"""

from __future__ import annotations

import logging
from pathlib import Path

from nfr_config.loader import compute_checksum, load_settings, parse_settings
from nfr_config.schema import EngineSettings, ListingPolicy, LoggingSettings
from nfr_kernel.logging_config import configure_logging

_logger = logging.getLogger("nfr_kernel.config")

_DEFAULT_SETTINGS_PATH = Path(__file__).parent / "sets" / "default.yaml"


def get_active_settings(config_path: Path | None = None) -> EngineSettings:
    """Load and validate engine settings.

    Args:
        config_path: Override path to a settings YAML file.
            Defaults to nfr_config/sets/default.yaml.
    """
    path = Path(config_path) if config_path is not None else _DEFAULT_SETTINGS_PATH
    settings = load_settings(path)
    fr = settings.default_fr_info

    _logger.info(
        "NFR_CONFIG_TRACE",
        extra={
            "trace_type": "NFR_CONFIG_TRACE",
            "config_source": str(path),
            "config_version": settings.version,
            "checksum": compute_checksum(settings),
            "has_default_fr_info": fr is not None,
            "allow_zero_price": settings.listing.allow_zero_price,
        },
    )
    return settings


def apply_logging_settings(settings: EngineSettings) -> None:
    """Configure the nfr_kernel logger hierarchy at the configured level.

    Idempotent like ``configure_logging``: only the first call takes effect.
    """
    configure_logging(level=settings.logging.level)


__all__ = [
    "EngineSettings",
    "ListingPolicy",
    "LoggingSettings",
    "apply_logging_settings",
    "compute_checksum",
    "get_active_settings",
    "parse_settings",
]
