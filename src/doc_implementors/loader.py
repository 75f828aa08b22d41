"""
Implementor Registry Loader.

A generated fragment does one thing when it runs: it hands its constant
table to the registrar if one is available, and otherwise leaves the table
in the pending slot. This module holds that two-state branch together with
the host object that owns the two locations involved.

Manifesto:
    The loader never fails and never retries. If no registrar exists the
    table waits; draining it is the registry's job (``attach``). Exactly
    one of the two host locations is touched per load.

Architecture:
    ::

        load_implementors(table, host)
              │
              ├── host.registrar is set ──► registrar(table)   → REGISTERED
              │
              └── otherwise ─────────────► host.pending.put(table) → DEFERRED

        ImplementorRegistry.attach(host)
              │
              ├── host.registrar = registry.register_table
              └── registry.drain_pending(host)  (oldest table first)

Examples:
    >>> host = RegistryHost()
    >>> load_implementors(ImplementorsTable({"couchdb": ["impl A for B"]}), host)
    <LoadOutcome.DEFERRED: 'deferred'>
    >>> registry = ImplementorRegistry()
    >>> registry.attach(host)
    1

Tags:
    loader, pending, registrar, startup

Doc-Types:
    - API Reference
    - ARCHITECTURE (section: "Loading", priority: 9)
"""

from __future__ import annotations

from collections import deque
from collections.abc import Callable, Mapping
from enum import Enum
from pathlib import Path

from doc_implementors.fragment import read_fragment
from doc_implementors.logging import get_logger
from doc_implementors.table import ImplementorsTable

logger = get_logger(__name__)

Registrar = Callable[[ImplementorsTable], None]


class LoadOutcome(str, Enum):
    """Which branch a load took."""

    REGISTERED = "registered"
    DEFERRED = "deferred"


class PendingSlot:
    """FIFO holding area for tables loaded before a registrar exists."""

    def __init__(self):
        self._tables: deque[ImplementorsTable] = deque()

    def put(self, table: ImplementorsTable) -> None:
        self._tables.append(table)

    def drain(self) -> list[ImplementorsTable]:
        """Remove and return every pending table, oldest first."""
        tables = list(self._tables)
        self._tables.clear()
        return tables

    def peek(self) -> ImplementorsTable:
        """Merged view of the pending tables; later keys replace earlier ones."""
        merged = ImplementorsTable()
        for table in self._tables:
            merged = merged.merged(table)
        return merged

    def __len__(self) -> int:
        return len(self._tables)

    def __bool__(self) -> bool:
        return bool(self._tables)

    def __repr__(self) -> str:
        return f"PendingSlot(tables={len(self._tables)})"


class RegistryHost:
    """The environment a fragment loads into: a registrar slot and a pending slot."""

    def __init__(self, registrar: Registrar | None = None):
        self.registrar: Registrar | None = registrar
        self.pending = PendingSlot()

    @property
    def ready(self) -> bool:
        return self.registrar is not None

    def __repr__(self) -> str:
        return f"RegistryHost(ready={self.ready}, pending={len(self.pending)})"


def load_implementors(
    table: ImplementorsTable | Mapping,
    host: RegistryHost | None = None,
) -> LoadOutcome:
    """Hand ``table`` to the host's registrar, or park it in the pending slot.

    Args:
        table: The fragment's implementors table
        host: Target host (the default host if omitted)

    Returns:
        LoadOutcome.REGISTERED or LoadOutcome.DEFERRED
    """
    if not isinstance(table, ImplementorsTable):
        table = ImplementorsTable(table)
    target = host if host is not None else get_default_host()

    if target.registrar is not None:
        target.registrar(table)
        logger.debug(
            "implementors_registered",
            namespaces=list(table),
            entries=table.entry_count,
        )
        return LoadOutcome.REGISTERED

    target.pending.put(table)
    logger.debug(
        "implementors_deferred",
        namespaces=list(table),
        entries=table.entry_count,
        pending=len(target.pending),
    )
    return LoadOutcome.DEFERRED


def load_fragment_file(path: Path | str, host: RegistryHost | None = None) -> LoadOutcome:
    """Read a generated fragment file and load its table.

    Raises:
        FragmentReadError: File missing or unreadable
        FragmentParseError: File contents malformed
    """
    return load_implementors(read_fragment(path), host)


# === GLOBAL DEFAULT HOST ===

_default_host: RegistryHost | None = None


def get_default_host() -> RegistryHost:
    """Get the process-wide host, created lazily."""
    global _default_host
    if _default_host is None:
        _default_host = RegistryHost()
    return _default_host


def reset_default_host() -> None:
    """Reset the process-wide host (for testing)."""
    global _default_host
    _default_host = None


__all__ = [
    "LoadOutcome",
    "PendingSlot",
    "RegistryHost",
    "Registrar",
    "load_implementors",
    "load_fragment_file",
    "get_default_host",
    "reset_default_host",
]
