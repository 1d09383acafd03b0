"""Event abstraction consumed by the DNS filter.

Brief:
  The filter only needs to read and write named fields and to add tags. The
  Event protocol captures that surface; DictEvent is a plain-dict
  implementation used by the command line tool and the tests.
"""

from __future__ import annotations

import re
from typing import Any, Dict, List, Optional, Protocol

_FIELD_REF = re.compile(r"\[([^\[\]]+)\]")


class Event(Protocol):
    """Brief: Narrow event interface used by the DNS filter."""

    def get(self, field: str) -> Optional[Any]: ...

    def set(self, field: str, value: Any) -> None: ...

    def tag(self, name: str) -> None: ...


def parse_field_reference(field: str) -> List[str]:
    """Brief: Split a field reference into its path components.

    Inputs:
      - field: Either a plain top-level name ("host") or a bracketed path
        ("[source][ip]").

    Outputs:
      - list[str]: Path components, outermost first.

    Example:
      >>> parse_field_reference("[source][ip]")
      ['source', 'ip']
      >>> parse_field_reference("host")
      ['host']
    """
    text = str(field)
    if text.startswith("["):
        parts = _FIELD_REF.findall(text)
        if parts and "".join(f"[{p}]" for p in parts) == text:
            return parts
    return [text]


class DictEvent:
    """Brief: Event backed by a (possibly nested) dict.

    Inputs:
      - data: Optional initial mapping; it is used as-is, not copied.

    Outputs:
      - DictEvent instance.

    Example use:
        >>> ev = DictEvent({"source": {"ip": "192.0.2.1"}})
        >>> ev.get("[source][ip]")
        '192.0.2.1'
        >>> ev.tag("_dnstimeout"); ev.get("tags")
        ['_dnstimeout']
    """

    TAGS_FIELD = "tags"

    def __init__(self, data: Optional[Dict[str, Any]] = None) -> None:
        self.data: Dict[str, Any] = data if data is not None else {}

    def get(self, field: str) -> Optional[Any]:
        node: Any = self.data
        for part in parse_field_reference(field):
            if not isinstance(node, dict) or part not in node:
                return None
            node = node[part]
        return node

    def set(self, field: str, value: Any) -> None:
        path = parse_field_reference(field)
        node = self.data
        for part in path[:-1]:
            child = node.get(part)
            if not isinstance(child, dict):
                child = {}
                node[part] = child
            node = child
        node[path[-1]] = value

    def tag(self, name: str) -> None:
        tags = self.data.get(self.TAGS_FIELD)
        if tags is None:
            tags = []
        elif not isinstance(tags, list):
            tags = [tags]
        if name not in tags:
            tags.append(name)
        self.data[self.TAGS_FIELD] = tags

    def to_dict(self) -> Dict[str, Any]:
        return self.data

    def __repr__(self) -> str:
        return f"DictEvent({self.data!r})"
