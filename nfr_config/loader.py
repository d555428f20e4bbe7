"""
Configuration Loader (``nfr_config.loader``).

Responsibility
--------------
Loads a YAML settings file and parses it into the frozen
``nfr_config.schema`` dataclasses.

Invariants enforced
-------------------
* Parse errors raise ``ValueError`` or ``KeyError`` with descriptive
  messages; there are no silent defaults for malformed sections.
* Default FR info is validated exactly like mint parameters
  (``InvalidParametersError``).
* ``compute_checksum`` produces a deterministic SHA-256 hash for
  configuration identity and change detection.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Missing required keys -> ``KeyError`` propagates.
"""

from __future__ import annotations

import hashlib
import json
import logging
from pathlib import Path
from typing import Any

import yaml

from nfr_config.schema import EngineSettings, ListingPolicy, LoggingSettings
from nfr_kernel.domain.records import FRParameters

SUPPORTED_VERSIONS = frozenset({1})


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
        ValueError: if the top level is not a mapping.
    """
    with open(path) as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Settings file {path} must contain a mapping, got {type(data).__name__}")
    return data


def parse_default_fr_info(data: dict[str, Any] | None) -> FRParameters | None:
    """Parse the optional ``default_fr_info`` section.

    Fractions are read as strings so YAML floats never reach fixed-point
    parsing; a bare YAML number is converted through ``str``.
    """
    if data is None:
        return None
    if not isinstance(data, dict):
        raise ValueError("default_fr_info must be a mapping")
    return FRParameters.of(
        num_generations=data["num_generations"],
        percent_of_profit=_fraction_text(data["percent_of_profit"]),
        successive_ratio=_fraction_text(data["successive_ratio"]),
    )


def _fraction_text(value: Any) -> str:
    if isinstance(value, bool):
        raise ValueError(f"Expected a number, got {value!r}")
    if isinstance(value, (int, float, str)):
        return str(value)
    raise ValueError(f"Expected a number, got {value!r}")


def parse_listing(data: dict[str, Any] | None) -> ListingPolicy:
    if data is None:
        return ListingPolicy()
    allow_zero = data.get("allow_zero_price", False)
    if not isinstance(allow_zero, bool):
        raise ValueError("listing.allow_zero_price must be a boolean")
    return ListingPolicy(allow_zero_price=allow_zero)


def parse_logging(data: dict[str, Any] | None) -> LoggingSettings:
    if data is None:
        return LoggingSettings()
    level = str(data.get("level", "INFO")).upper()
    if level not in logging.getLevelNamesMapping():
        raise ValueError(f"Unknown logging level: {level}")
    return LoggingSettings(level=level)


def parse_settings(data: dict[str, Any], source: str | None = None) -> EngineSettings:
    """
    Parse an ``EngineSettings`` from a dict.

    Raises:
        ValueError: unsupported version or malformed section.
        InvalidParametersError: default FR info fails validation.
    """
    version = data.get("version", 1)
    if version not in SUPPORTED_VERSIONS:
        raise ValueError(f"Unsupported settings version: {version}")
    return EngineSettings(
        version=version,
        default_fr_info=parse_default_fr_info(data.get("default_fr_info")),
        listing=parse_listing(data.get("listing")),
        logging=parse_logging(data.get("logging")),
        source=source,
    )


def load_settings(path: Path) -> EngineSettings:
    return parse_settings(load_yaml_file(path), source=str(path))


def compute_checksum(settings: EngineSettings) -> str:
    """Deterministic SHA-256 over the effective settings (source excluded)."""
    fr = settings.default_fr_info
    canonical = {
        "version": settings.version,
        "default_fr_info": None if fr is None else [
            fr.num_generations,
            fr.percent_of_profit.raw,
            fr.successive_ratio.raw,
        ],
        "listing": {"allow_zero_price": settings.listing.allow_zero_price},
        "logging": {"level": settings.logging.level},
    }
    blob = json.dumps(canonical, sort_keys=True, separators=(",", ":"))
    return hashlib.sha256(blob.encode("utf-8")).hexdigest()
