"""
Brief: Global pytest configuration and shared fixtures for eventdns tests.

Inputs:
  - None

Outputs:
  - None
"""

import os
import signal
import sys
from typing import Dict, List, Optional

import pytest

# Ensure 'src' is on sys.path so 'eventdns' package is importable in tests
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))
SRC_DIR = os.path.join(ROOT, "src")
if SRC_DIR not in sys.path:
    sys.path.insert(0, SRC_DIR)

from eventdns.filters.dns_filter import DnsFilter  # noqa: E402
from eventdns.resolvers.base import LookupResult, ResolutionSource  # noqa: E402
from eventdns.resolvers.chain import ResolutionChain  # noqa: E402


def _alarm_handler(signum, frame):
    """
    Brief: Signal handler that raises TimeoutError when alarm triggers.

    Inputs:
      - signum: signal number (int)
      - frame: current frame (ignored)

    Outputs:
      - None: Raises TimeoutError to fail the test
    """
    raise TimeoutError("Test exceeded 10 seconds")


# Install handler if supported on this platform
if hasattr(signal, "SIGALRM"):
    signal.signal(signal.SIGALRM, _alarm_handler)


@pytest.fixture(autouse=True)
def enforce_test_timeout():
    """
    Brief: Enforce a hard 10-second timeout for each test.

    Inputs:
      - None

    Outputs:
      - None: Cancels alarm after test
    """
    if hasattr(signal, "SIGALRM"):
        signal.alarm(10)
        try:
            yield
        finally:
            signal.alarm(0)
    else:
        # Fallback: no-op on platforms without SIGALRM
        yield


class ScriptedSource(ResolutionSource):
    """Brief: In-memory resolution source that records every lookup.

    Inputs:
      - addresses: name -> address answers for forward lookups.
      - names: address -> hostname answers for reverse lookups.
      - script: Optional list of LookupResult returned in order (the last one
        repeats); overrides the mappings when given.

    Outputs:
      - ScriptedSource instance with a ``calls`` list of looked-up values.
    """

    kind = "scripted"

    def __init__(
        self,
        addresses: Optional[Dict[str, str]] = None,
        names: Optional[Dict[str, str]] = None,
        script: Optional[List[LookupResult]] = None,
    ) -> None:
        self.addresses = dict(addresses or {})
        self.names = dict(names or {})
        self.script = list(script or [])
        self.calls: List[str] = []

    def _next(self, key: str, mapping: Dict[str, str]) -> LookupResult:
        self.calls.append(key)
        if self.script:
            return self.script.pop(0) if len(self.script) > 1 else self.script[0]
        if key in mapping:
            return LookupResult.ok(mapping[key])
        return LookupResult.no_answer()

    def lookup_address(self, name: str) -> LookupResult:
        return self._next(name, self.addresses)

    def lookup_name(self, address: str) -> LookupResult:
        return self._next(address, self.names)


@pytest.fixture
def scripted_source():
    """Brief: Expose the ScriptedSource class to tests."""
    return ScriptedSource


@pytest.fixture
def make_filter():
    """
    Brief: Factory building a DnsFilter over in-memory sources.

    Inputs:
      - config: Filter options mapping.
      - *sources: ResolutionSource instances forming the chain.

    Outputs:
      - DnsFilter
    """

    def _make(config, *sources):
        return DnsFilter(config, chain=ResolutionChain(sources))

    return _make
