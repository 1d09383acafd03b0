"""Per-field lookup and write-back for the DNS filter.

Brief:
  A FieldProcessor walks one direction's field list (forward or reverse) for a
  single event. Each field is classified, looked up through the caches, the
  retry executor and the resolution chain, and written back according to the
  configured action.

Outputs:
  - process() returns True when every field was handled (resolved or skipped)
    and False when the direction was aborted early.
"""

from __future__ import annotations

import enum
import ipaddress
import logging
from dataclasses import dataclass
from typing import Any, ClassVar, Optional, Sequence

from eventdns import idn
from eventdns.cache import LookupCache
from eventdns.errors import IdnaCodecError
from eventdns.event import Event
from eventdns.resolvers.base import LookupResult, LookupStatus
from eventdns.resolvers.chain import ResolutionChain
from eventdns.retry import RetryExecutor

ACTION_APPEND = "append"
ACTION_REPLACE = "replace"


class FieldShape(str, enum.Enum):
    """Brief: Shape of a field value as seen by the filter."""

    ABSENT = "absent"
    SCALAR = "scalar"
    SINGLE_ARRAY = "single_array"
    MULTI_ARRAY = "multi_array"
    NON_TEXT = "non_text"


@dataclass(frozen=True)
class FieldValue:
    """
    Brief: Classified field value.

    Inputs:
      - shape: FieldShape of the stored value.
      - text: Unwrapped text for SCALAR and SINGLE_ARRAY shapes, else None.
      - raw: Value exactly as read from the event.

    Outputs:
      - FieldValue instance.
    """

    shape: FieldShape
    text: Optional[str] = None
    raw: Any = None

    @property
    def is_array(self) -> bool:
        return self.shape is FieldShape.SINGLE_ARRAY


def classify_field(raw: Any) -> FieldValue:
    """Brief: Classify a raw event value into a FieldValue.

    Inputs:
      - raw: Value returned by Event.get().

    Outputs:
      - FieldValue

    Example:
      >>> classify_field(["a.example"]).shape
      <FieldShape.SINGLE_ARRAY: 'single_array'>
      >>> classify_field({"ip": "1.2.3.4"}).shape
      <FieldShape.NON_TEXT: 'non_text'>
    """
    if raw is None:
        return FieldValue(FieldShape.ABSENT, raw=raw)
    if isinstance(raw, (list, tuple)):
        if len(raw) > 1:
            return FieldValue(FieldShape.MULTI_ARRAY, raw=raw)
        if len(raw) == 1 and isinstance(raw[0], str):
            return FieldValue(FieldShape.SINGLE_ARRAY, text=raw[0], raw=raw)
        return FieldValue(FieldShape.NON_TEXT, raw=raw)
    if isinstance(raw, str):
        return FieldValue(FieldShape.SCALAR, text=raw, raw=raw)
    return FieldValue(FieldShape.NON_TEXT, raw=raw)


class FieldProcessor:
    """Brief: Shared lookup flow for one direction of the DNS filter.

    Inputs:
      - chain: ResolutionChain consulted on cache misses.
      - retry: RetryExecutor wrapping each lookup.
      - hit_cache: Optional LookupCache of successful lookups.
      - failed_cache: Optional LookupCache of failed lookups.
      - action: "append" or "replace".
      - tag_on_timeout: Tags added to the event when a lookup times out.
      - logger: Logger used for per-field diagnostics.

    Outputs:
      - FieldProcessor instance.
    """

    direction: ClassVar[str] = "resolve"
    missing_message: ClassVar[str] = "DNS filter could not resolve missing field"
    no_answer_message: ClassVar[str] = "DNS: couldn't resolve the hostname."
    timeout_message: ClassVar[str] = "DNS: timeout on resolving the hostname."

    def __init__(
        self,
        chain: ResolutionChain,
        retry: RetryExecutor,
        *,
        hit_cache: Optional[LookupCache] = None,
        failed_cache: Optional[LookupCache] = None,
        action: str = ACTION_APPEND,
        tag_on_timeout: Sequence[str] = ("_dnstimeout",),
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.chain = chain
        self.retry = retry
        self.hit_cache = hit_cache
        self.failed_cache = failed_cache
        self.action = action
        self.tag_on_timeout = tuple(tag_on_timeout)
        self.logger = logger or logging.getLogger(__name__)

    def process(self, event: Event, fields: Sequence[str]) -> bool:
        """Brief: Handle every configured field; stop at the first abort.

        Inputs:
          - event: Event to read and mutate.
          - fields: Field references in configured order.

        Outputs:
          - bool: False when processing stopped early, True otherwise.
        """
        for field in fields:
            if not self.process_field(event, field):
                return False
        return True

    def process_field(self, event: Event, field: str) -> bool:
        """Brief: Look up and write back one field.

        Inputs:
          - event: Event to read and mutate.
          - field: Field reference.

        Outputs:
          - bool: True to continue with the next field, False to abort the
            remaining fields of this direction.
        """
        value = classify_field(event.get(field))

        if value.shape is FieldShape.ABSENT:
            self.logger.warning("%s: field=%s", self.missing_message, field)
            return True
        if value.shape is FieldShape.MULTI_ARRAY:
            self.logger.warning(
                "DNS: skipping %s, can't deal with multiple values: field=%s value=%r",
                self.direction,
                field,
                value.raw,
            )
            return False
        # Only SCALAR and SINGLE_ARRAY carry text.
        if value.text is None:
            self.logger.warning(
                "DNS: skipping %s, can't deal with non-string values: field=%s value=%r",
                self.direction,
                field,
                value.raw,
            )
            return False

        raw = value.text
        if not self.accepts(raw):
            self.logger.debug("DNS: not an address: field=%s value=%r", field, value.raw)
            return True

        # Recently failed lookup: skip without a new attempt.
        if self.failed_cache is not None and raw in self.failed_cache:
            return False

        result = self.cached_lookup(raw)

        if result.status is LookupStatus.OK:
            self.write_back(event, field, value, str(result.value))
            return True

        if result.status is LookupStatus.NO_ANSWER:
            self._remember_failure(raw)
            self.logger.debug("%s field=%s value=%r", self.no_answer_message, field, raw)
        elif result.status is LookupStatus.TIMEOUT:
            self._remember_failure(raw)
            self.logger.debug("%s field=%s value=%r", self.timeout_message, field, raw)
            for tag in self.tag_on_timeout:
                event.tag(tag)
        elif result.status is LookupStatus.TRANSPORT_ERROR:
            self.logger.error(
                "DNS: Encountered transport error: field=%s value=%r message=%s",
                field,
                raw,
                result.message,
            )
        elif result.status is LookupStatus.PARSE_ERROR:
            self.logger.error(
                "DNS: Unable to parse value: field=%s value=%r message=%s",
                field,
                raw,
                result.message,
            )
        else:
            self.logger.error(
                "DNS: Unexpected Error: field=%s value=%r message=%s",
                field,
                raw,
                result.message,
            )
        return False

    def accepts(self, raw: str) -> bool:
        """Brief: Return True when raw is a candidate for lookup."""
        return True

    def lookup(self, raw: str) -> LookupResult:
        """Brief: Perform one uncached lookup attempt for raw."""
        raise NotImplementedError("FieldProcessor.lookup() must be implemented by a subclass")

    def cached_lookup(self, raw: str) -> LookupResult:
        """Brief: Consult the hit cache, else run the retried lookup.

        Inputs:
          - raw: Unwrapped field text.

        Outputs:
          - LookupResult; successful results are stored in the hit cache.
        """
        if self.hit_cache is not None:
            cached = self.hit_cache.get(raw)
            if cached is not None:
                return LookupResult.ok(cached)

        result = self.retry.run(lambda: self.lookup(raw))
        if result.is_ok and self.hit_cache is not None:
            self.hit_cache.set(raw, result.value)
        return result

    def _remember_failure(self, raw: str) -> None:
        if self.failed_cache is not None:
            self.failed_cache.set(raw, True)

    def write_back(self, event: Event, field: str, value: FieldValue, resolved: str) -> None:
        """Brief: Store the resolved value according to the configured action.

        Inputs:
          - event: Event to mutate.
          - field: Field reference.
          - value: Classified original value.
          - resolved: Address or hostname returned by the lookup.

        Outputs:
          - None
        """
        if self.action == ACTION_REPLACE:
            event.set(field, [resolved] if value.is_array else resolved)
        elif value.is_array:
            event.set(field, list(value.raw) + [resolved])
        else:
            event.set(field, [value.raw, resolved])


class ForwardFieldProcessor(FieldProcessor):
    """Brief: Hostname -> address lookups; names are IDN-encoded first."""

    def lookup(self, raw: str) -> LookupResult:
        try:
            name = idn.to_ascii(raw)
        except IdnaCodecError as exc:
            return LookupResult.from_exception(exc)
        return self.chain.lookup_address(name)


class ReverseFieldProcessor(FieldProcessor):
    """Brief: Address -> hostname lookups; answers are IDN-decoded."""

    direction = "reverse"
    missing_message = "DNS filter could not perform reverse lookup on missing field"
    no_answer_message = "DNS: couldn't resolve the address."
    timeout_message = "DNS: timeout on resolving address."

    def accepts(self, raw: str) -> bool:
        try:
            ipaddress.ip_address(raw)
        except ValueError:
            return False
        return True

    def lookup(self, raw: str) -> LookupResult:
        result = self.chain.lookup_name(raw)
        if not result.is_ok:
            return result
        try:
            return LookupResult.ok(idn.to_unicode(str(result.value)))
        except IdnaCodecError as exc:
            return LookupResult.from_exception(exc)
