"""IDN codec for hostnames.

Brief:
  Convert hostnames between their Unicode presentation form and the
  ASCII-compatible (punycode) form used on the wire. Conversion is done label
  by label with the standard library ``idna`` codec so that plain ASCII labels
  (including ones the codec would reject, such as over-long labels or labels
  with underscores) pass through untouched and are left for the resolver to
  judge.
"""

from __future__ import annotations

from typing import List

from eventdns.errors import IdnaCodecError

ACE_PREFIX = "xn--"


def to_ascii(name: str) -> str:
    """Brief: Encode every non-ASCII label of ``name`` into punycode form.

    Inputs:
      - name: Hostname in Unicode presentation form (may already be ASCII).

    Outputs:
      - str: Hostname whose labels are all ASCII.

    Raises:
      - IdnaCodecError: when a label cannot be encoded.

    Example:
      >>> to_ascii("müller.com")
      'xn--mller-kva.com'
    """
    labels: List[str] = []
    for label in name.split("."):
        if label.isascii():
            labels.append(label)
            continue
        try:
            labels.append(label.encode("idna").decode("ascii"))
        except UnicodeError as exc:
            raise IdnaCodecError(f"cannot encode label {label!r}: {exc}") from exc
    return ".".join(labels)


def to_unicode(name: str) -> str:
    """Brief: Decode every punycode (``xn--``) label of ``name`` to Unicode.

    Inputs:
      - name: Hostname as returned by a resolver.

    Outputs:
      - str: Hostname in Unicode presentation form.

    Raises:
      - IdnaCodecError: when a punycode label is malformed.

    Example:
      >>> to_unicode("xn--mller-kva.com")
      'müller.com'
    """
    labels: List[str] = []
    for label in name.split("."):
        if not label.lower().startswith(ACE_PREFIX):
            labels.append(label)
            continue
        try:
            labels.append(label.encode("ascii").decode("idna"))
        except UnicodeError as exc:
            raise IdnaCodecError(f"cannot decode label {label!r}: {exc}") from exc
    return ".".join(labels)
