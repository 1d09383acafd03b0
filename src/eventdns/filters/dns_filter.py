from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional, Tuple

from pydantic import BaseModel, Field, ValidationError, validator

from eventdns.cache import LookupCache
from eventdns.config.logging_config import configure_logger
from eventdns.errors import ConfigurationError
from eventdns.event import Event
from eventdns.resolvers.chain import (
    ResolutionChain,
    build_resolution_chain,
    normalise_nameserver,
)
from eventdns.resolvers.dns_source import NameserverSpec
from eventdns.retry import RetryExecutor

from .fields import (
    ACTION_APPEND,
    ACTION_REPLACE,
    FieldProcessor,
    ForwardFieldProcessor,
    ReverseFieldProcessor,
)

logger = logging.getLogger(__name__)


def _as_list(v: Any) -> Any:
    if v is None:
        return []
    if isinstance(v, str):
        return [v]
    return v


class DnsFilterConfig(BaseModel):
    """Brief: Typed configuration model for DnsFilter.

    Inputs:
      - resolve: Fields to forward-resolve (hostname -> address).
      - reverse: Fields to reverse-resolve (address -> hostname).
      - action: "append" (default) or "replace".
      - nameserver: None, an address, a list of addresses, or a mapping with
        address/search/ndots keys; normalised into a NameserverSpec.
      - timeout: Per-attempt timeout in seconds, or an ordered list of them.
      - max_retries: Additional attempts after a transient failure.
      - retry_backoff: Optional exponential backoff base in seconds.
      - hit_cache_size / hit_cache_ttl: Success cache capacity (0 disables)
        and entry lifetime in seconds.
      - failed_cache_size / failed_cache_ttl: Failure cache capacity
        (0 disables) and entry lifetime in seconds.
      - hostsfile: Optional list of hosts file paths.
      - tag_on_timeout: Tags added to events whose lookup timed out.
      - logging: Optional per-filter logging block (level, stderr, file, syslog).

    Outputs:
      - DnsFilterConfig instance with normalized field types.
    """

    resolve: List[str] = Field(default_factory=list)
    reverse: List[str] = Field(default_factory=list)
    action: str = Field(default=ACTION_APPEND)
    nameserver: Optional[NameserverSpec] = None
    timeout: Tuple[float, ...] = (0.5,)
    max_retries: int = Field(default=2, ge=0)
    retry_backoff: float = Field(default=0.0, ge=0)
    hit_cache_size: int = Field(default=0, ge=0)
    hit_cache_ttl: float = Field(default=60, gt=0)
    failed_cache_size: int = Field(default=0, ge=0)
    failed_cache_ttl: float = Field(default=5, gt=0)
    hostsfile: Optional[List[str]] = None
    tag_on_timeout: List[str] = Field(default_factory=lambda: ["_dnstimeout"])
    logging: Optional[Dict[str, Any]] = None

    @validator("resolve", "reverse", "tag_on_timeout", pre=True)
    def _listify(cls, v):  # type: ignore[no-untyped-def]
        """Brief: Accept a single string wherever a list of strings is expected."""
        return _as_list(v)

    @validator("hostsfile", pre=True)
    def _listify_hostsfile(cls, v):  # type: ignore[no-untyped-def]
        return None if v is None else _as_list(v)

    @validator("action", pre=True)
    def _check_action(cls, v):  # type: ignore[no-untyped-def]
        s = str(v).strip().lower()
        if s not in {ACTION_APPEND, ACTION_REPLACE}:
            raise ValueError(f"action must be 'append' or 'replace' (got {v!r})")
        return s

    @validator("nameserver", pre=True)
    def _normalise_nameserver(cls, v):  # type: ignore[no-untyped-def]
        return normalise_nameserver(v)

    @validator("timeout", pre=True)
    def _normalise_timeout(cls, v):  # type: ignore[no-untyped-def]
        """Brief: Accept one timeout or an ordered list; all must be positive."""
        values = v if isinstance(v, (list, tuple)) else [v]
        if not values:
            raise ValueError("timeout must not be empty")
        out = []
        for item in values:
            if isinstance(item, bool) or not isinstance(item, (int, float)):
                raise ValueError(f"timeout {item!r} is not numeric")
            if item <= 0:
                raise ValueError(f"timeout={item} must be positive")
            out.append(float(item))
        return tuple(out)

    class Config:
        extra = "forbid"
        frozen = True


class DnsFilter:
    """
    Brief: Enrich events with forward and/or reverse DNS lookups.

    Forward fields are processed first, in configured order, followed by the
    reverse fields. A field that cannot be resolved keeps its original value;
    resolver failures never propagate out of filter().

    Inputs:
      - config: Mapping of filter options (see DnsFilterConfig) or a
        DnsFilterConfig instance.
      - chain: Optional pre-built ResolutionChain; built from the config
        when omitted.

    Outputs:
      - DnsFilter instance.

    Raises:
      - ConfigurationError: when the options are invalid.

    Example use:
        >>> from eventdns.event import DictEvent
        >>> dns_filter = DnsFilter({"resolve": ["host"], "action": "replace"})
        >>> event = DictEvent({"host": "localhost"})
        >>> dns_filter.filter(event)
        True
    """

    def __init__(
        self,
        config: Optional[Mapping[str, Any] | DnsFilterConfig] = None,
        *,
        chain: Optional[ResolutionChain] = None,
    ) -> None:
        if isinstance(config, DnsFilterConfig):
            self.config = config
        else:
            try:
                self.config = DnsFilterConfig(**dict(config or {}))
            except ValidationError as exc:
                raise ConfigurationError(f"Invalid dns filter configuration: {exc}") from exc
        cfg = self.config

        self.logger = logging.getLogger(__name__)
        if isinstance(cfg.logging, dict):
            # One logger per instance.
            self.logger = configure_logger(f"{__name__}.{id(self):x}", cfg.logging)

        self.chain = (
            chain
            if chain is not None
            else build_resolution_chain(cfg.nameserver, cfg.hostsfile, cfg.timeout)
        )

        self.hit_cache: Optional[LookupCache] = None
        if cfg.hit_cache_size > 0:
            self.hit_cache = LookupCache(cfg.hit_cache_size, cfg.hit_cache_ttl, name="hit")

        self.failed_cache: Optional[LookupCache] = None
        if cfg.failed_cache_size > 0:
            self.failed_cache = LookupCache(
                cfg.failed_cache_size, cfg.failed_cache_ttl, name="failed"
            )

        self.retry = RetryExecutor(cfg.max_retries, backoff=cfg.retry_backoff)

        shared = dict(
            hit_cache=self.hit_cache,
            failed_cache=self.failed_cache,
            action=cfg.action,
            tag_on_timeout=cfg.tag_on_timeout,
            logger=self.logger,
        )
        self.forward: FieldProcessor = ForwardFieldProcessor(self.chain, self.retry, **shared)
        self.reverse: FieldProcessor = ReverseFieldProcessor(self.chain, self.retry, **shared)

        logger.debug(
            "dns filter ready: resolve=%s reverse=%s action=%s chain=%r",
            cfg.resolve,
            cfg.reverse,
            cfg.action,
            self.chain,
        )

    def filter(self, event: Event) -> bool:
        """Brief: Resolve the configured fields of one event in place.

        Inputs:
          - event: Event exposing get/set/tag.

        Outputs:
          - bool: True when both phases completed (the event matched); False
            when a phase aborted, in which case later fields are untouched.
        """
        if self.config.resolve and not self.forward.process(event, self.config.resolve):
            return False
        if self.config.reverse and not self.reverse.process(event, self.config.reverse):
            return False
        return True

    def cache_stats(self) -> Dict[str, Dict[str, int]]:
        """Brief: Counters for the active caches, keyed by "hit" and "failed".

        Inputs:
          - None

        Outputs:
          - dict: LookupCache.stats() per active cache; empty when both are off.
        """
        stats: Dict[str, Dict[str, int]] = {}
        for cache in (self.hit_cache, self.failed_cache):
            if cache is not None:
                stats[cache.name] = cache.stats()
        return stats
