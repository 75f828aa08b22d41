"""Implementor Registry: aggregates implementor tables across fragments.

Manifesto:
    Every generated fragment hands its table to one aggregator. The
    aggregator is an explicit object rather than an ambient global: it is
    created by whoever renders the page, attached to a host, and drains
    anything that arrived before it existed.

ARCHITECTURE
────────────
::

    ImplementorRegistry(policy)
      ├── .register(namespace, entries)  ─ merge one namespace (policy)
      ├── .register_table(table)         ─ registrar installed on a host
      ├── .get(namespace) / .find()      ─ lookup by key
      ├── .attach(host)                  ─ install registrar + drain pending
      ├── .drain_pending(host)           ─ drain only
      └── .detach(host)                  ─ remove registrar

    MergePolicy: what a second register() of the same namespace does
      REPLACE     entries become exactly the new entries (default)
      APPEND      new entries appended, markup already present skipped
      KEEP_FIRST  first registration wins

    get_default_registry()     ─ module-level singleton, attached to the default host
    reset_default_registry()   ─ clear for testing

Tags:
    registry, implementors, aggregator, drain

Doc-Types:
    api-reference
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from enum import Enum

from doc_implementors.entry import ImplementorEntry
from doc_implementors.errors import UnknownNamespaceError
from doc_implementors.loader import RegistryHost, get_default_host, reset_default_host
from doc_implementors.logging import get_logger
from doc_implementors.table import ImplementorsTable

logger = get_logger(__name__)


class MergePolicy(str, Enum):
    """How a registry merges a namespace it already holds."""

    REPLACE = "replace"
    APPEND = "append"
    KEEP_FIRST = "keep_first"


class ImplementorRegistry:
    """Injectable aggregator of implementor tables.

    Example:
        >>> registry = ImplementorRegistry()
        >>> registry.register("couchdb", ["impl A for B"])
        >>> [e.markup for e in registry.get("couchdb")]
        ['impl A for B']
    """

    def __init__(self, policy: MergePolicy | str = MergePolicy.REPLACE):
        self.policy = MergePolicy(policy)
        self._entries: dict[str, tuple[ImplementorEntry, ...]] = {}
        self.merge_count = 0

    def register(self, namespace: str, entries: Iterable[ImplementorEntry | str]) -> None:
        """Merge one namespace's entries according to the registry's policy.

        Args:
            namespace: Namespace (crate) key
            entries: Entries in declaration order
        """
        incoming = tuple(ImplementorEntry.coerce(e) for e in entries)
        self.merge_count += 1
        existing = self._entries.get(namespace)

        if existing is None:
            self._entries[namespace] = incoming
            action = "added"
        elif self.policy is MergePolicy.REPLACE:
            self._entries[namespace] = incoming
            action = "replaced"
        elif self.policy is MergePolicy.APPEND:
            seen = set(existing)
            fresh = []
            for entry in incoming:
                if entry not in seen:
                    seen.add(entry)
                    fresh.append(entry)
            self._entries[namespace] = existing + tuple(fresh)
            action = "appended"
        else:
            action = "kept"

        logger.debug(
            "implementors_merged",
            namespace=namespace,
            entries=len(incoming),
            policy=self.policy.value,
            action=action,
        )

    def register_table(self, table: ImplementorsTable | Mapping) -> None:
        """Register every namespace of ``table`` in table order."""
        if not isinstance(table, ImplementorsTable):
            table = ImplementorsTable(table)
        for namespace, entries in table.items():
            self.register(namespace, entries)

    def get(self, namespace: str) -> tuple[ImplementorEntry, ...]:
        """Get the entries registered under ``namespace``.

        Raises:
            UnknownNamespaceError: If nothing was registered under it
        """
        if namespace not in self._entries:
            raise UnknownNamespaceError(namespace, list(self._entries))
        return self._entries[namespace]

    def find(self, namespace: str) -> tuple[ImplementorEntry, ...] | None:
        """Like ``get`` but returns None for an unknown namespace."""
        return self._entries.get(namespace)

    def namespaces(self) -> list[str]:
        """Registered namespaces in first-registration order."""
        return list(self._entries)

    def snapshot(self) -> ImplementorsTable:
        """Current aggregate as an immutable table."""
        return ImplementorsTable(self._entries)

    def __contains__(self, namespace: object) -> bool:
        return namespace in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def attach(self, host: RegistryHost) -> int:
        """Install this registry as ``host``'s registrar and drain its pending slot.

        Returns:
            Number of pending tables drained
        """
        host.registrar = self.register_table
        drained = self.drain_pending(host)
        logger.debug("registry_attached", drained=drained)
        return drained

    def drain_pending(self, host: RegistryHost) -> int:
        """Register every table waiting in ``host``'s pending slot, oldest first."""
        tables = host.pending.drain()
        for table in tables:
            self.register_table(table)
        if tables:
            logger.info(
                "pending_implementors_drained",
                tables=len(tables),
                namespaces=len(self._entries),
            )
        return len(tables)

    def detach(self, host: RegistryHost) -> bool:
        """Remove this registry from ``host``. Returns False if it was not attached."""
        if host.registrar == self.register_table:
            host.registrar = None
            return True
        return False

    def clear(self) -> None:
        """Clear all entries (for testing)."""
        self._entries.clear()
        self.merge_count = 0


# === GLOBAL DEFAULT REGISTRY ===

_default_registry: ImplementorRegistry | None = None


def get_default_registry() -> ImplementorRegistry:
    """Get the global default registry.

    Creates it lazily on first access and attaches it to the default host,
    so tables loaded without an explicit host land here. Tables the default
    host deferred before the first call are drained on attach.
    """
    global _default_registry
    if _default_registry is None:
        _default_registry = ImplementorRegistry()
    host = get_default_host()
    if not host.ready:
        _default_registry.attach(host)
    return _default_registry


def reset_default_registry() -> None:
    """Reset the global registry together with the default host (for testing)."""
    global _default_registry
    _default_registry = None
    reset_default_host()


__all__ = [
    "MergePolicy",
    "ImplementorRegistry",
    "get_default_registry",
    "reset_default_registry",
]
