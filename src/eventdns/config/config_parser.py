"""Configuration loading helpers for the eventdns command line tool.

Brief:
  Reads the YAML configuration file, validates its layout and builds the
  DnsFilter it describes.

Inputs:
  - YAML config paths or already-parsed mappings

Outputs:
  - Validated config dicts and constructed DnsFilter instances
"""

from __future__ import annotations

from typing import Any, Dict

import yaml

from eventdns.errors import ConfigurationError
from eventdns.filters.dns_filter import DnsFilter

from .config_schema import CONFIG_SCHEMA, validate_config


def _drop_unknown_keys(value: Any, schema: Dict[str, Any]) -> Any:
    """Brief: Return value without mapping keys the schema does not describe."""
    properties = schema.get("properties")
    if not isinstance(value, dict) or properties is None:
        return value
    return {
        key: _drop_unknown_keys(item, properties[key])
        for key, item in value.items()
        if key in properties
    }


def load_config(path: str, unknown_keys: str = "error") -> Dict[str, Any]:
    """Brief: Read and validate a YAML configuration file.

    Inputs:
      - path: Filesystem path to the YAML document.
      - unknown_keys: "error" (default), "warn" or "ignore" for keys the
        schema does not describe.

    Outputs:
      - dict: Parsed configuration mapping. With the "warn" or "ignore"
        policy, keys the schema does not describe are removed.

    Raises:
      - ConfigurationError: when the file cannot be read or parsed, or fails
        schema validation.

    Example:
      A minimal file::

        dns:
          resolve: [host]
          action: replace
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            cfg = yaml.safe_load(f)
    except OSError as exc:
        raise ConfigurationError(f"Cannot read configuration {path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Cannot parse configuration {path}: {exc}") from exc

    if cfg is None:
        cfg = {}
    if not isinstance(cfg, dict):
        raise ConfigurationError(f"Configuration {path} must be a mapping at the top level")

    validate_config(cfg, config_path=path, unknown_keys=unknown_keys)
    return _drop_unknown_keys(cfg, CONFIG_SCHEMA)


def build_filter(cfg: Dict[str, Any]) -> DnsFilter:
    """Brief: Construct the DnsFilter described by the ``dns`` block of cfg.

    Inputs:
      - cfg: Configuration mapping as returned by load_config().

    Outputs:
      - DnsFilter instance.
    """
    return DnsFilter(cfg.get("dns") or {})
