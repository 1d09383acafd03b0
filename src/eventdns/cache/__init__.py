"""Lookup caches used by the DNS filter."""

from .lookup_cache import LookupCache

__all__ = ["LookupCache"]
