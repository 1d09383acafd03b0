"""Exception types raised by eventdns.

Brief:
  Configuration problems are fatal at filter construction; codec problems are
  classified by the field processors as terminal parse errors.
"""

from __future__ import annotations


class ConfigurationError(ValueError):
    """Brief: Raised when filter options are invalid; the filter is unusable."""


class IdnaCodecError(ValueError):
    """Brief: Raised when a hostname label cannot be converted by the IDN codec."""
