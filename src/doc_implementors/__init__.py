"""
Trait Implementors Registry

Loads the implementors fragments a documentation generator emits for each
trait page, aggregates them in an explicit registry, and indexes a whole
documentation tree for trait/type queries.

Example:
    >>> from doc_implementors import ImplementorRegistry, RegistryHost, load_implementors
    >>> host = RegistryHost()
    >>> load_implementors({"couchdb": ["impl PartialOrd for Revision"]}, host)
    <LoadOutcome.DEFERRED: 'deferred'>
    >>> registry = ImplementorRegistry()
    >>> registry.attach(host)
    1
"""

__version__ = "0.3.1"

from doc_implementors.entry import ImplementorEntry
from doc_implementors.table import ImplementorsTable
from doc_implementors.registry import ImplementorRegistry, MergePolicy
from doc_implementors.loader import (
    LoadOutcome,
    PendingSlot,
    RegistryHost,
    load_fragment_file,
    load_implementors,
)
from doc_implementors.fragment import parse_fragment, read_fragment
from doc_implementors.index import TraitIndex

__all__ = [
    "ImplementorEntry",
    "ImplementorsTable",
    "ImplementorRegistry",
    "MergePolicy",
    "LoadOutcome",
    "PendingSlot",
    "RegistryHost",
    "load_implementors",
    "load_fragment_file",
    "parse_fragment",
    "read_fragment",
    "TraitIndex",
    "__version__",
]
