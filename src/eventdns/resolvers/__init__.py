"""Resolution sources and chain construction for eventdns."""

from .base import LookupResult, LookupStatus, ResolutionSource, classify_exception
from .chain import ResolutionChain, build_resolution_chain, normalise_nameserver
from .dns_source import DnsSource, NameserverSpec
from .hosts import HostsFileSource

__all__ = [
    "DnsSource",
    "HostsFileSource",
    "LookupResult",
    "LookupStatus",
    "NameserverSpec",
    "ResolutionChain",
    "ResolutionSource",
    "build_resolution_chain",
    "classify_exception",
    "normalise_nameserver",
]
