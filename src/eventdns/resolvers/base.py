from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import ClassVar, Optional

import dns.exception
import dns.name
import dns.resolver

from eventdns.errors import IdnaCodecError


class LookupStatus(str, enum.Enum):
    """Brief: Outcome kinds of a single resolution attempt."""

    OK = "ok"
    NO_ANSWER = "no_answer"
    TIMEOUT = "timeout"
    TRANSPORT_ERROR = "transport_error"
    PARSE_ERROR = "parse_error"
    UNEXPECTED = "unexpected"


# Failure classes worth another attempt.
TRANSIENT_STATUSES = frozenset({LookupStatus.TIMEOUT, LookupStatus.TRANSPORT_ERROR})


@dataclass(frozen=True)
class LookupResult:
    """
    Brief: Explicit result of a forward or reverse lookup.

    Inputs:
      - status: LookupStatus describing the outcome.
      - value: Resolved address or hostname when status is OK.
      - error: Underlying exception for error statuses (best-effort).

    Outputs:
      - LookupResult instance.

    Example use:
        >>> LookupResult.ok("192.0.2.1").is_ok
        True
        >>> LookupResult.no_answer().value is None
        True
    """

    status: LookupStatus
    value: Optional[str] = None
    error: Optional[BaseException] = None

    @classmethod
    def ok(cls, value: str) -> "LookupResult":
        return cls(LookupStatus.OK, value=value)

    @classmethod
    def no_answer(cls) -> "LookupResult":
        return cls(LookupStatus.NO_ANSWER)

    @classmethod
    def from_exception(cls, exc: BaseException) -> "LookupResult":
        return cls(classify_exception(exc), error=exc)

    @property
    def is_ok(self) -> bool:
        return self.status is LookupStatus.OK

    @property
    def is_transient(self) -> bool:
        return self.status in TRANSIENT_STATUSES

    @property
    def message(self) -> str:
        if self.error is None:
            return ""
        return str(self.error) or self.error.__class__.__name__


def classify_exception(exc: BaseException) -> LookupStatus:
    """Brief: Map a resolver-layer exception onto a LookupStatus.

    Inputs:
      - exc: Exception raised while resolving.

    Outputs:
      - LookupStatus: TIMEOUT, NO_ANSWER, TRANSPORT_ERROR, PARSE_ERROR or
        UNEXPECTED.

    Notes:
      - dns.resolver.LifetimeTimeout subclasses dns.exception.Timeout, so both
        map to TIMEOUT.
      - NoNameservers means every nameserver failed (SERVFAIL, refused or
        unreachable); it is a transport-level failure and therefore retried.
    """
    if isinstance(exc, (dns.exception.Timeout, TimeoutError)):
        return LookupStatus.TIMEOUT
    if isinstance(exc, (dns.resolver.NXDOMAIN, dns.resolver.NoAnswer, dns.resolver.YXDOMAIN)):
        return LookupStatus.NO_ANSWER
    if isinstance(exc, (dns.resolver.NoNameservers, OSError)):
        return LookupStatus.TRANSPORT_ERROR
    if isinstance(
        exc,
        (
            dns.name.EmptyLabel,
            dns.name.LabelTooLong,
            dns.name.NameTooLong,
            dns.exception.SyntaxError,
            IdnaCodecError,
            UnicodeError,
            ValueError,
        ),
    ):
        return LookupStatus.PARSE_ERROR
    return LookupStatus.UNEXPECTED


class ResolutionSource:
    """Brief: Base class for one member of a resolution chain.

    Subclasses answer forward (hostname -> address) and reverse
    (address -> hostname) lookups and report the outcome as a LookupResult.
    They must not raise for resolver failures; NO_ANSWER tells the chain to
    consult the next source.

    Inputs:
      - None.

    Outputs:
      - ResolutionSource instance.
    """

    kind: ClassVar[str] = "source"

    def lookup_address(self, name: str) -> LookupResult:
        """Brief: Resolve an ASCII hostname to its first address.

        Inputs:
          - name: Hostname already converted to ASCII transport form.

        Outputs:
          - LookupResult with the address as value on success.
        """
        raise NotImplementedError(
            "ResolutionSource.lookup_address() must be implemented by a subclass"
        )

    def lookup_name(self, address: str) -> LookupResult:
        """Brief: Resolve an address to its first hostname (ASCII form).

        Inputs:
          - address: IPv4 or IPv6 address text.

        Outputs:
          - LookupResult with the hostname as value on success.
        """
        raise NotImplementedError(
            "ResolutionSource.lookup_name() must be implemented by a subclass"
        )

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} {self.kind}>"
