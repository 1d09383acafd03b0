from __future__ import annotations

import logging
import time
from typing import Callable

from eventdns.resolvers.base import LookupResult

logger = logging.getLogger(__name__)


class RetryExecutor:
    """Brief: Run a lookup attempt with bounded retry on transient failures.

    Inputs:
      - max_retries: Additional attempts after the first (total attempts is
        max_retries + 1).
      - backoff: Optional base delay in seconds; attempt n (0-based) waits
        ``backoff * 2**n`` before retrying. 0 disables delays.
      - sleep: Sleep callable, injectable for tests.

    Outputs:
      - RetryExecutor instance.

    Notes:
      - TIMEOUT and TRANSPORT_ERROR results are retried; every other result
        (success, NO_ANSWER, parse and unexpected errors) is returned at once.
      - When attempts are exhausted the last result is returned.

    Example use:
        >>> executor = RetryExecutor(max_retries=2)
        >>> executor.run(lambda: LookupResult.ok("192.0.2.1")).value
        '192.0.2.1'
    """

    def __init__(
        self,
        max_retries: int = 2,
        backoff: float = 0.0,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if max_retries < 0:
            raise ValueError("max_retries must be >= 0")
        self.max_retries = int(max_retries)
        self.backoff = max(0.0, float(backoff))
        self._sleep = sleep

    def run(self, attempt: Callable[[], LookupResult]) -> LookupResult:
        tries = 0
        while True:
            result = attempt()
            if not result.is_transient or tries >= self.max_retries:
                return result
            if self.backoff:
                self._sleep(self.backoff * (2**tries))
            tries += 1
            logger.debug(
                "retrying lookup after %s (attempt %d of %d)",
                result.status.value,
                tries + 1,
                self.max_retries + 1,
            )
