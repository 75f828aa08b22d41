"""Implementors tables: namespace key → ordered implementor entries.

A table is what one generated fragment contributes. Key order and entry
order are both kept exactly as given; that order is the declaration order
in the documented crate and is the only ordering anything relies on.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from typing import Any

from doc_implementors.entry import ImplementorEntry


class ImplementorsTable(Mapping[str, tuple[ImplementorEntry, ...]]):
    """Ordered, read-only mapping of namespace to implementor entries.

    Accepts raw markup strings or ``ImplementorEntry`` values. Two tables
    are equal when they hold the same keys mapped to the same entries in
    the same order.

    Example:
        >>> table = ImplementorsTable({"couchdb": ["impl A for B", "impl A for C"]})
        >>> [e.markup for e in table["couchdb"]]
        ['impl A for B', 'impl A for C']
    """

    __slots__ = ("_data",)

    def __init__(
        self,
        data: Mapping[str, Iterable[ImplementorEntry | str]] | Iterable[tuple[str, Iterable[ImplementorEntry | str]]] | None = None,
    ):
        self._data: dict[str, tuple[ImplementorEntry, ...]] = {}
        if data is None:
            return
        items = data.items() if isinstance(data, Mapping) else data
        for namespace, entries in items:
            if not isinstance(namespace, str):
                raise TypeError(f"Namespace keys must be str, got {type(namespace).__name__}")
            if isinstance(entries, (str, ImplementorEntry)):
                raise TypeError(f"Entries for '{namespace}' must be a sequence, not a single entry")
            self._data[namespace] = tuple(ImplementorEntry.coerce(e) for e in entries)

    def __getitem__(self, namespace: str) -> tuple[ImplementorEntry, ...]:
        return self._data[namespace]

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, ImplementorsTable):
            return list(self._data.items()) == list(other._data.items())
        if isinstance(other, Mapping):
            try:
                return self == ImplementorsTable(other)
            except TypeError:
                return False
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        counts = ", ".join(f"{k!r}: {len(v)}" for k, v in self._data.items())
        return f"ImplementorsTable({{{counts}}})"

    @property
    def entry_count(self) -> int:
        """Total number of entries across all namespaces."""
        return sum(len(entries) for entries in self._data.values())

    def merged(self, other: ImplementorsTable) -> ImplementorsTable:
        """New table with ``other``'s keys replacing this table's."""
        combined = dict(self._data)
        combined.update(other.items())
        return ImplementorsTable(combined)

    def to_dict(self) -> dict[str, list[str]]:
        """Plain ``{namespace: [markup, ...]}`` form."""
        return {k: [e.markup for e in v] for k, v in self._data.items()}

    def describe(self) -> dict[str, Any]:
        """Decoded form for display and JSON export."""
        return {k: [e.to_dict() for e in v] for k, v in self._data.items()}


__all__ = ["ImplementorsTable"]
