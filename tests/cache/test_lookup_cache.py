"""
Brief: Tests for eventdns.cache.lookup_cache.LookupCache.

Inputs:
  - None

Outputs:
  - None
"""

import threading

import pytest

from eventdns.cache import LookupCache


class FakeClock:
    """Brief: Manually advanced monotonic clock."""

    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


def test_get_returns_stored_value_and_counts_hits():
    """
    Brief: A stored value is returned and counted as a hit.

    Inputs:
      - None

    Outputs:
      - None: Asserts value and counters
    """
    cache = LookupCache(maxsize=3, ttl=60)
    cache.set("carrera.databits.net", "199.192.228.250")

    assert cache.get("carrera.databits.net") == "199.192.228.250"
    assert cache.get("other.example") is None
    assert cache.cache_hits == 1
    assert cache.cache_misses == 1
    assert cache.calls_total == 2


def test_entry_older_than_ttl_reads_as_miss():
    """
    Brief: Entries expire once their age reaches the ttl.

    Inputs:
      - None

    Outputs:
      - None: Asserts expiry via injected clock
    """
    clock = FakeClock()
    cache = LookupCache(maxsize=3, ttl=5, timer=clock)
    cache.set("host", True)

    clock.now += 4
    assert "host" in cache
    clock.now += 2
    assert "host" not in cache
    assert cache.get("host") is None
    assert len(cache) == 0


def test_capacity_evicts_least_recently_used():
    """
    Brief: Overflow evicts the least recently used entry, not the oldest insert.

    Inputs:
      - None

    Outputs:
      - None: Asserts which keys survive
    """
    cache = LookupCache(maxsize=2, ttl=60)
    cache.set("a", "1")
    cache.set("b", "2")
    # Touch "a" so that "b" becomes least recently used.
    assert cache.get("a") == "1"
    cache.set("c", "3")

    assert "a" in cache
    assert "b" not in cache
    assert "c" in cache
    assert len(cache) == 2


def test_size_never_exceeds_capacity():
    """
    Brief: Many inserts keep the cache at its capacity.

    Inputs:
      - None

    Outputs:
      - None: Asserts len bounded
    """
    cache = LookupCache(maxsize=3, ttl=60)
    for i in range(20):
        cache.set(f"host{i}", str(i))
        assert len(cache) <= 3
    assert "host19" in cache


def test_stats_snapshot_excludes_expired_entries():
    """
    Brief: stats() reports counters and the live (unexpired) size.

    Inputs:
      - None

    Outputs:
      - None: Asserts counter values and size
    """
    clock = FakeClock()
    cache = LookupCache(maxsize=5, ttl=1, timer=clock)
    cache.set("a", "1")
    cache.set("b", "2")
    cache.get("a")
    clock.now += 10
    cache.get("b")
    assert cache.stats() == {
        "calls_total": 2,
        "cache_hits": 1,
        "cache_misses": 1,
        "size": 0,
    }


@pytest.mark.parametrize("maxsize,ttl", [(0, 60), (-1, 60), (3, 0)])
def test_invalid_bounds_rejected(maxsize, ttl):
    """
    Brief: Non-positive capacity or ttl is rejected.

    Inputs:
      - maxsize, ttl: invalid bounds

    Outputs:
      - None: Asserts ValueError
    """
    with pytest.raises(ValueError):
        LookupCache(maxsize=maxsize, ttl=ttl)


def test_concurrent_inserts_are_safe():
    """
    Brief: Concurrent writers never push the cache past its capacity.

    Inputs:
      - None

    Outputs:
      - None: Asserts no errors and bounded size
    """
    cache = LookupCache(maxsize=50, ttl=60)
    errors = []

    def _worker(prefix: str) -> None:
        try:
            for i in range(500):
                cache.set(f"{prefix}-{i}", i)
                cache.get(f"{prefix}-{i // 2}")
        except Exception as exc:  # pragma: no cover - only on failure
            errors.append(exc)

    threads = [threading.Thread(target=_worker, args=(f"t{n}",)) for n in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert not errors
    assert len(cache) <= 50
