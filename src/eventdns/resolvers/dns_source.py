from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional, Sequence, Tuple

import dns.exception
import dns.name
import dns.rdatatype
import dns.resolver
import dns.reversename

from .base import LookupResult, ResolutionSource

logger = logging.getLogger(__name__)

MAX_SEARCH_DOMAINS = 6


@dataclass(frozen=True)
class NameserverSpec:
    """
    Brief: Normalised nameserver configuration for a DnsSource.

    Inputs:
      - addresses: One or more nameserver IP addresses, in preference order.
      - search: Up to six search domains, tried in order for short names.
      - ndots: Dot-count threshold below which search domains are tried first.

    Outputs:
      - NameserverSpec instance.
    """

    addresses: Tuple[str, ...]
    search: Tuple[str, ...] = field(default_factory=tuple)
    ndots: int = 1


class DnsSource(ResolutionSource):
    """Brief: Resolution source backed by a dnspython stub resolver.

    Inputs:
      - spec: NameserverSpec, or None to read the system configuration
        (/etc/resolv.conf: nameserver, domain, search and ndots directives).
      - timeouts: Ordered per-attempt timeouts in seconds. Each attempt is
        bounded by its own timeout; when every attempt times out the lookup
        reports TIMEOUT.

    Outputs:
      - DnsSource instance.

    Notes:
      - Forward lookups ask for A records first and fall back to AAAA when the
        name exists without A records.
      - Names with fewer than ``ndots`` dots are tried with each search domain
        appended before being tried as given; longer names are tried as given
        first.
    """

    kind = "dns"

    def __init__(
        self,
        spec: Optional[NameserverSpec] = None,
        timeouts: Sequence[float] = (0.5,),
        resolver: Optional[dns.resolver.Resolver] = None,
    ) -> None:
        self.spec = spec
        self.timeouts: Tuple[float, ...] = tuple(float(t) for t in timeouts)
        if not self.timeouts or any(t <= 0 for t in self.timeouts):
            raise ValueError("DnsSource timeouts must be a non-empty list of positive numbers")
        self.resolver = resolver if resolver is not None else self._build_resolver(spec)
        self.resolver.timeout = max(self.timeouts)
        self.resolver.lifetime = sum(self.timeouts)

    @staticmethod
    def _build_resolver(spec: Optional[NameserverSpec]) -> dns.resolver.Resolver:
        """Brief: Create the dnspython resolver for a spec (or the system config)."""
        if spec is None:
            try:
                resolver = dns.resolver.Resolver(configure=True)
            except dns.resolver.NoResolverConfiguration as exc:
                logger.warning(
                    "no usable system resolver configuration (%s); using 127.0.0.1",
                    exc,
                )
                resolver = dns.resolver.Resolver(configure=False)
                resolver.nameservers = ["127.0.0.1"]
        else:
            resolver = dns.resolver.Resolver(configure=False)
            resolver.nameservers = list(spec.addresses)
            resolver.search = [dns.name.from_text(domain) for domain in spec.search]
            resolver.ndots = spec.ndots
        resolver.use_search_by_default = True
        return resolver

    def _query(self, qname: object, rdtype: dns.rdatatype.RdataType) -> dns.resolver.Answer:
        """Brief: Run one query, giving each configured timeout its own attempt.

        Inputs:
          - qname: Query name (text or dns.name.Name).
          - rdtype: Record type to ask for.

        Outputs:
          - dns.resolver.Answer

        Raises:
          - dns.resolver.LifetimeTimeout when every attempt timed out; other
            dnspython exceptions propagate unchanged.
        """
        for lifetime in self.timeouts[:-1]:
            try:
                return self.resolver.resolve(qname, rdtype, lifetime=lifetime)
            except dns.exception.Timeout:
                logger.debug("query %s %s timed out after %.3fs", qname, rdtype.name, lifetime)
        return self.resolver.resolve(qname, rdtype, lifetime=self.timeouts[-1])

    def lookup_address(self, name: str) -> LookupResult:
        try:
            try:
                answer = self._query(name, dns.rdatatype.A)
            except dns.resolver.NoAnswer:
                answer = self._query(name, dns.rdatatype.AAAA)
        except Exception as exc:
            return LookupResult.from_exception(exc)
        for rdata in answer:
            return LookupResult.ok(str(rdata.address))
        return LookupResult.no_answer()

    def lookup_name(self, address: str) -> LookupResult:
        try:
            answer = self._query(dns.reversename.from_address(address), dns.rdatatype.PTR)
        except Exception as exc:
            return LookupResult.from_exception(exc)
        for rdata in answer:
            return LookupResult.ok(rdata.target.to_text(omit_final_dot=True))
        return LookupResult.no_answer()

    def __repr__(self) -> str:
        servers = ",".join(str(ns) for ns in self.resolver.nameservers)
        return f"<DnsSource nameservers={servers} timeouts={list(self.timeouts)}>"
