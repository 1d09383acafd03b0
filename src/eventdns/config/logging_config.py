from __future__ import annotations

import logging
import logging.handlers
import os
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional

_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "crit": logging.CRITICAL,
    "critical": logging.CRITICAL,
}

_TAGS = {
    logging.DEBUG: "[debug]",
    logging.INFO: "[info]",
    logging.WARNING: "[warn]",
    logging.ERROR: "[error]",
    logging.CRITICAL: "[crit]",
}

DEFAULT_FORMAT = "%(asctime)s %(level_tag)s %(name)s: %(message)s"


class SyslogFormatter(logging.Formatter):
    """Formatter for syslog output without timestamps (syslog adds its own)."""

    def format(self, record):
        """Add level_tag attribute and format without timestamp."""
        record.level_tag = _TAGS.get(record.levelno, f"[lvl{record.levelno}]")
        return f"{record.level_tag} {record.name}: {record.getMessage()}"


class BracketLevelFormatter(logging.Formatter):
    """Custom formatter that adds bracketed lowercase level tags and UTC timestamps."""

    def formatTime(self, record, datefmt=None):
        """Format the record's creation time as UTC ISO-8601 with Z suffix."""
        return datetime.fromtimestamp(record.created, timezone.utc).strftime(
            "%Y-%m-%dT%H:%M:%SZ"
        )

    def format(self, record):
        """Add level_tag attribute and format the record."""
        record.level_tag = _TAGS.get(record.levelno, f"[lvl{record.levelno}]")
        return super().format(record)


def parse_level(value: object, default: int = logging.INFO) -> int:
    """Brief: Map a level name such as "warn" to its logging constant."""
    return _LEVELS.get(str(value).lower(), default)


def _attach_handlers(target: logging.Logger, cfg: Dict[str, Any]) -> None:
    """Brief: Attach stderr/file/syslog handlers described by cfg to target.

    Inputs:
      - target: Logger to configure; existing handlers are removed first.
      - cfg: Mapping with optional stderr, file and syslog keys.

    Outputs:
      - None
    """
    for h in list(target.handlers):
        target.removeHandler(h)

    formatter = BracketLevelFormatter(fmt=DEFAULT_FORMAT)

    # Add stderr handler if requested (default: True)
    if cfg.get("stderr", True):
        stderr_handler = logging.StreamHandler(sys.stderr)
        stderr_handler.setFormatter(formatter)
        target.addHandler(stderr_handler)

    file_path = cfg.get("file")
    if isinstance(file_path, str) and file_path.strip():
        path = os.path.abspath(os.path.expanduser(file_path.strip()))
        os.makedirs(os.path.dirname(path), exist_ok=True)
        file_handler = logging.FileHandler(path, mode="a", encoding="utf-8")
        file_handler.setFormatter(formatter)
        target.addHandler(file_handler)

    syslog_cfg = cfg.get("syslog")
    if syslog_cfg:
        try:
            if isinstance(syslog_cfg, dict):
                address = syslog_cfg.get("address", "/dev/log")
                facility = getattr(
                    logging.handlers.SysLogHandler,
                    f"LOG_{syslog_cfg.get('facility', 'USER').upper()}",
                    logging.handlers.SysLogHandler.LOG_USER,
                )
            else:
                address = "/dev/log"
                facility = logging.handlers.SysLogHandler.LOG_USER

            syslog_handler = logging.handlers.SysLogHandler(
                address=address, facility=facility
            )
            syslog_handler.setFormatter(SyslogFormatter())
            target.addHandler(syslog_handler)
        except (
            OSError,
            ValueError,
        ) as e:  # pragma: no cover - environment-specific: no syslog socket available
            target.warning("Failed to configure syslog: %s", e)


def init_logging(cfg: Optional[Dict[str, Any]]) -> None:
    """
    Initialize root logging configuration based on the provided config.

    Args:
        cfg: Logging configuration dictionary with optional keys:
            - level: debug, info, warn, error, crit (default: info)
            - stderr: boolean to log to stderr (default: True)
            - file: string path to log file (optional)
            - syslog: boolean or dict {address, facility} (optional)

    Example config:
        {
            "level": "info",
            "stderr": True,
            "file": "./eventdns.log",
            "syslog": True
        }
    """
    cfg = cfg or {}

    root = logging.getLogger()
    root.setLevel(parse_level(cfg.get("level", "info")))
    _attach_handlers(root, cfg)

    # Capture warnings to use the same logging configuration
    logging.captureWarnings(True)


def configure_logger(name: str, cfg: Dict[str, Any]) -> logging.Logger:
    """Brief: Configure a dedicated, non-propagating logger from a logging block.

    Inputs:
      - name: Logger name.
      - cfg: Mapping with the same keys accepted by init_logging.

    Outputs:
      - logging.Logger: The configured logger.
    """
    target = logging.getLogger(name)
    target.setLevel(parse_level(cfg.get("level", "info")))
    _attach_handlers(target, cfg)
    target.propagate = False
    return target
