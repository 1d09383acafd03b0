"""Resolution chain construction.

Brief:
  Builds the ordered list of resolution sources a DnsFilter consults, and
  validates the ``nameserver`` option on the way. The chain is built once per
  filter instance and is read-only afterwards.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from eventdns.errors import ConfigurationError

from .base import LookupResult, LookupStatus, ResolutionSource
from .dns_source import MAX_SEARCH_DOMAINS, DnsSource, NameserverSpec
from .hosts import SYSTEM_HOSTS_PATH, HostsFileSource

logger = logging.getLogger(__name__)

NameserverOption = Union[None, str, Sequence[str], Mapping[str, Any]]


class ResolutionChain:
    """Brief: Ordered resolution sources; the first source with an answer wins.

    Inputs:
      - sources: Iterable of ResolutionSource in precedence order.

    Outputs:
      - ResolutionChain instance.

    Notes:
      - A source reporting NO_ANSWER passes the lookup to the next source.
      - Any other failure (timeout, transport, parse) stops the chain and is
        returned as-is so the caller can classify it.
    """

    def __init__(self, sources: Iterable[ResolutionSource]) -> None:
        self.sources: Tuple[ResolutionSource, ...] = tuple(sources)

    def lookup_address(self, name: str) -> LookupResult:
        return self._first_answer(lambda source: source.lookup_address(name))

    def lookup_name(self, address: str) -> LookupResult:
        return self._first_answer(lambda source: source.lookup_name(address))

    def _first_answer(self, attempt) -> LookupResult:
        for source in self.sources:
            result = attempt(source)
            if result.status is not LookupStatus.NO_ANSWER:
                return result
        return LookupResult.no_answer()

    def __len__(self) -> int:
        return len(self.sources)

    def __repr__(self) -> str:
        return f"<ResolutionChain {list(self.sources)!r}>"


def _as_text_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return [str(v) for v in value]
    return [str(value)]


def normalise_nameserver(nameserver: NameserverOption) -> Optional[NameserverSpec]:
    """Brief: Validate and normalise the ``nameserver`` option.

    Inputs:
      - nameserver: None, an address string, a list of address strings, or a
        mapping with a required ``address`` key (string or list) and optional
        ``search`` (string or list, at most six domains) and ``ndots``
        (positive integer, default 1) keys.

    Outputs:
      - NameserverSpec, or None when nameserver is None.

    Raises:
      - ConfigurationError for a mapping without ``address``, an empty address
        list, more than six search domains, a non-positive or non-integer
        ndots, or unknown mapping keys.

    Example:
      >>> normalise_nameserver("8.8.8.8")
      NameserverSpec(addresses=('8.8.8.8',), search=(), ndots=1)
      >>> normalise_nameserver({"address": ["10.0.0.1"], "search": "corp"}).search
      ('corp',)
    """
    if nameserver is None or isinstance(nameserver, NameserverSpec):
        return nameserver

    if isinstance(nameserver, Mapping):
        options = dict(nameserver)
        if "address" not in options:
            raise ConfigurationError(
                f"`nameserver` mapping must include `address` (got {nameserver!r})"
            )
    else:
        options = {"address": nameserver}

    addresses = _as_text_list(options.pop("address", None))
    if not addresses:
        raise ConfigurationError(
            f"`nameserver` addresses, when specified, cannot be empty (got {nameserver!r})"
        )

    search = _as_text_list(options.pop("search", None))
    if len(search) > MAX_SEARCH_DOMAINS:
        raise ConfigurationError(
            f"A maximum of {MAX_SEARCH_DOMAINS} `search` domains are accepted (got {nameserver!r})"
        )

    raw_ndots = options.pop("ndots", None)
    if raw_ndots is None:
        raw_ndots = 1
    try:
        if isinstance(raw_ndots, bool):
            raise TypeError("boolean ndots")
        ndots = int(raw_ndots)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"`ndots` must be an integer (got {nameserver!r})") from exc
    if ndots <= 0:
        raise ConfigurationError(f"`ndots` must be positive (got {nameserver!r})")

    if options:
        raise ConfigurationError(f"Unknown `nameserver` argument(s): {options!r}")

    return NameserverSpec(addresses=tuple(addresses), search=tuple(search), ndots=ndots)


def build_resolution_chain(
    nameserver: NameserverOption = None,
    hostsfile: Optional[Sequence[str]] = None,
    timeouts: Sequence[float] = (0.5,),
) -> ResolutionChain:
    """Brief: Build the ordered resolution chain from filter options.

    Inputs:
      - nameserver: Raw ``nameserver`` option (see normalise_nameserver).
      - hostsfile: Optional list of hosts file paths.
      - timeouts: Ordered per-attempt DNS timeouts in seconds.

    Outputs:
      - ResolutionChain:
          * neither option set: [system hosts file, system-configured DNS]
          * otherwise: [one source per hosts file, in order] followed by a DNS
            source for the configured nameservers (when nameserver is set)

    Raises:
      - ConfigurationError when nameserver is malformed.
    """
    spec = normalise_nameserver(nameserver)

    if spec is None and hostsfile is None:
        sources: List[ResolutionSource] = [
            HostsFileSource(SYSTEM_HOSTS_PATH),
            DnsSource(None, timeouts),
        ]
    else:
        sources = [HostsFileSource(path) for path in hostsfile or []]
        if spec is not None:
            sources.append(DnsSource(spec, timeouts))

    chain = ResolutionChain(sources)
    logger.debug("built resolution chain %r", chain)
    return chain
