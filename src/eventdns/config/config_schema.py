"""JSON Schema-based validation for eventdns YAML configuration.

The schema describes the layout of the configuration file (a ``logging``
block and a ``dns`` block holding the filter options). Detailed option
validation, such as the nameserver rules, is performed by DnsFilterConfig when
the filter is constructed.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from jsonschema import Draft202012Validator, ValidationError

from eventdns.errors import ConfigurationError

logger = logging.getLogger(__name__)

_STRING_LIST = {
    "anyOf": [
        {"type": "string"},
        {"type": "array", "items": {"type": "string"}},
    ]
}

_LOGGING_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "level": {"type": "string"},
        "stderr": {"type": "boolean"},
        "file": {"type": "string"},
        "syslog": {"anyOf": [{"type": "boolean"}, {"type": "object"}]},
    },
    "additionalProperties": False,
}

CONFIG_SCHEMA: Dict[str, Any] = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "title": "eventdns configuration",
    "type": "object",
    "properties": {
        "logging": _LOGGING_SCHEMA,
        "dns": {
            "type": "object",
            "properties": {
                "resolve": _STRING_LIST,
                "reverse": _STRING_LIST,
                "action": {"enum": ["append", "replace"]},
                "nameserver": {
                    "anyOf": [
                        {"type": "null"},
                        {"type": "string"},
                        {"type": "array", "items": {"type": "string"}},
                        {"type": "object"},
                    ]
                },
                "timeout": {
                    "anyOf": [
                        {"type": "number", "exclusiveMinimum": 0},
                        {
                            "type": "array",
                            "items": {"type": "number", "exclusiveMinimum": 0},
                            "minItems": 1,
                        },
                    ]
                },
                "max_retries": {"type": "integer", "minimum": 0},
                "retry_backoff": {"type": "number", "minimum": 0},
                "hit_cache_size": {"type": "integer", "minimum": 0},
                "hit_cache_ttl": {"type": "number", "exclusiveMinimum": 0},
                "failed_cache_size": {"type": "integer", "minimum": 0},
                "failed_cache_ttl": {"type": "number", "exclusiveMinimum": 0},
                "hostsfile": _STRING_LIST,
                "tag_on_timeout": _STRING_LIST,
                "logging": _LOGGING_SCHEMA,
            },
            "additionalProperties": False,
        },
    },
    "required": ["dns"],
    "additionalProperties": False,
}


def _format_errors(errors: List[ValidationError], *, config_path: Optional[str]) -> str:
    """Brief: Format jsonschema validation errors into a human-readable string.

    Inputs:
      - errors: List of jsonschema.ValidationError instances.
      - config_path: Optional path to the YAML config being validated.

    Outputs:
      - String suitable for display in logs or CLI output.
    """

    lines: List[str] = [f"Invalid configuration in {config_path or '<config dict>'}:"]
    for err in errors:
        instance_path = "/".join(str(p) for p in err.path) or "<root>"
        lines.append(f"- {instance_path}: {err.message}")
    return "\n".join(lines)


def _split_extra_property_errors(
    errors: List[ValidationError],
) -> tuple[List[ValidationError], List[ValidationError]]:
    """Brief: Partition validation errors into extra-property vs other errors."""

    extra: List[ValidationError] = []
    other: List[ValidationError] = []
    for err in errors:
        if getattr(err, "validator", None) == "additionalProperties":
            extra.append(err)
        else:
            other.append(err)
    return extra, other


def validate_config(
    cfg: Dict[str, Any],
    *,
    config_path: Optional[str] = None,
    unknown_keys: str = "error",
) -> None:
    """Brief: Validate a parsed YAML configuration mapping against CONFIG_SCHEMA.

    Inputs:
      - cfg: Dict loaded from YAML (top-level configuration mapping).
      - config_path: Optional path to the YAML file, used only in messages.
      - unknown_keys: "ignore", "warn" or "error" (default) for keys the
        schema does not describe.

    Outputs:
      - None on success.

    Raises:
      - ConfigurationError: when validation fails.

    Example:
      >>> validate_config({"dns": {"resolve": ["host"], "action": "replace"}})
    """
    if unknown_keys not in {"ignore", "warn", "error"}:
        raise ValueError(
            f"unknown_keys policy must be 'ignore', 'warn', or 'error', got {unknown_keys!r}"
        )

    validator = Draft202012Validator(CONFIG_SCHEMA)
    all_errors = sorted(validator.iter_errors(cfg), key=lambda e: list(e.path))
    if not all_errors:
        return None

    extra_errors, other_errors = _split_extra_property_errors(all_errors)
    if other_errors:
        raise ConfigurationError(
            _format_errors(other_errors + extra_errors, config_path=config_path)
        )

    message = _format_errors(extra_errors, config_path=config_path)
    if unknown_keys == "ignore":
        return None
    if unknown_keys == "warn":
        logger.warning(message)
        return None
    raise ConfigurationError(message)
