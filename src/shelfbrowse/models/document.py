"""Solr document accessor — the one place raw field values are coerced.

Solr hands back loosely typed records: a field may be missing, a string, a
number, or a list of any of those.  ``SolrDocument`` turns every shape into an
ordered list of strings so nothing past this module deals with raw values.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from typing import Any


def _render_scalar(value: Any) -> str | None:
    """String form of one scalar, or None for values that have no string form."""
    if isinstance(value, bool):
        return None
    if isinstance(value, str):
        return value
    if isinstance(value, float):
        return f"{value:.8f}"
    if isinstance(value, int):
        return str(value)
    return None


class SolrDocument(Mapping[str, Any]):
    """Read-only view over one Solr result document.

    Example:
        >>> doc = SolrDocument({"title_a": ["Moby Dick"], "score": 3.5})
        >>> doc.get_first_value("title_a")
        'Moby Dick'
        >>> doc.get_values("score")
        ['3.50000000']
    """

    def __init__(self, fields: Mapping[str, Any] | None = None) -> None:
        self._fields: dict[str, Any] = dict(fields or {})

    def __getitem__(self, key: str) -> Any:
        return self._fields[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._fields)

    def __len__(self) -> int:
        return len(self._fields)

    def __repr__(self) -> str:
        return f"SolrDocument({self._fields!r})"

    def get_values(self, field: str) -> list[str]:
        """All values of ``field`` as strings, in stored order.

        Missing fields and values of unsupported kinds yield an empty list;
        ``None`` members of a list are dropped.
        """
        raw = self._fields.get(field)

        if isinstance(raw, (list, tuple)):
            values = []
            for member in raw:
                rendered = _render_scalar(member)
                if rendered is not None:
                    values.append(rendered)
            return values

        rendered = _render_scalar(raw)
        if rendered is None:
            return []
        return [rendered]

    def get_first_value(self, field: str) -> str:
        """First value of ``field``, or an empty string.

        Shortcut for multi-valued fields that really only ever hold one value.
        """
        values = self.get_values(field)
        return values[0] if values else ""
