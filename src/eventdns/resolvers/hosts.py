from __future__ import annotations

import ipaddress
import logging
import os
import pathlib
from typing import Dict, Optional

from .base import LookupResult, ResolutionSource

logger = logging.getLogger(__name__)

SYSTEM_HOSTS_PATH = "/etc/hosts"


def _canonical_address(text: str) -> Optional[str]:
    """Brief: Return the canonical text form of an IP address, or None."""
    try:
        return ipaddress.ip_address(text.split("%", 1)[0]).compressed
    except ValueError:
        return None


class HostsFileSource(ResolutionSource):
    """
    Brief: Answer lookups from a single hosts file.

    The file is read once at construction and the mappings are read-only
    afterwards, so lookups need no locking. Within a file the first address
    listed for a name wins, and the first name listed for an address answers
    reverse lookups.

    Inputs:
      - path: Hosts file path (``~`` is expanded).

    Outputs:
      - HostsFileSource instance.

    Example:
      >>> src = HostsFileSource("/etc/hosts")
      >>> src.lookup_address("localhost").is_ok
      True
    """

    kind = "hosts"

    def __init__(self, path: str = SYSTEM_HOSTS_PATH) -> None:
        self.path = os.path.expanduser(str(path))
        self.name2addr: Dict[str, str] = {}
        self.addr2name: Dict[str, str] = {}
        self._load_hosts()

    def _load_hosts(self) -> None:
        """
        Brief: Read the hosts file and build forward and reverse mappings.

        - Supports comments beginning with '#', including inline comments.
        - Lines without at least one hostname after the address are skipped.
        - Multiple hostnames per line map to the same address.
        - Names are matched case-insensitively.

        Inputs:
          - None (uses self.path)
        Outputs:
          - None (populates self.name2addr and self.addr2name)
        """
        hosts_path = pathlib.Path(self.path)
        logger.debug("reading hostfile: %s", hosts_path)
        try:
            # Undecodable bytes become U+FFFD; such names never match a lookup.
            f = hosts_path.open("r", encoding="utf-8", errors="replace")
        except FileNotFoundError:
            logger.warning("hosts file %s not found; treating it as empty", hosts_path)
            return
        except OSError as exc:
            logger.warning("hosts file %s unreadable (%s); treating it as empty", hosts_path, exc)
            return

        with f:
            for lineno, raw_line in enumerate(f, start=1):
                # Remove inline comments and surrounding whitespace
                line = raw_line.split("#", 1)[0].strip()
                if not line:
                    continue

                parts = line.split()
                address = _canonical_address(parts[0])
                if len(parts) < 2 or address is None:
                    logger.warning(
                        "hosts file %s: skipping malformed line %d: %r",
                        hosts_path,
                        lineno,
                        raw_line.rstrip("\n"),
                    )
                    continue

                for name in parts[1:]:
                    self.name2addr.setdefault(name.rstrip(".").lower(), address)
                self.addr2name.setdefault(address, parts[1].rstrip("."))

    def lookup_address(self, name: str) -> LookupResult:
        address = self.name2addr.get(name.rstrip(".").lower())
        if address is None:
            return LookupResult.no_answer()
        return LookupResult.ok(address)

    def lookup_name(self, address: str) -> LookupResult:
        key = _canonical_address(address)
        hostname = self.addr2name.get(key) if key is not None else None
        if hostname is None:
            return LookupResult.no_answer()
        return LookupResult.ok(hostname)

    def __repr__(self) -> str:
        return f"<HostsFileSource {self.path}>"
