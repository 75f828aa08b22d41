"""
Trait index over a generated documentation tree.

Builds one registry per trait from every fragment under ``implementors/``
and answers the two questions a documentation browser asks: which types
implement a trait, and which traits a type implements.

Example:
    >>> index = TraitIndex.scan(Path("target/doc"))
    >>> index.traits()
    ['core::cmp::PartialOrd']
    >>> [e.type_name for e in index.implementors_of("PartialOrd")][:2]
    ['Database', 'DatabasePath']
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from doc_implementors.entry import ImplementorEntry
from doc_implementors.errors import DocImplementorsError, FragmentReadError, UnknownTraitError
from doc_implementors.loader import RegistryHost, load_fragment_file, load_implementors
from doc_implementors.logging import get_logger
from doc_implementors.registry import ImplementorRegistry, MergePolicy
from doc_implementors.table import ImplementorsTable

logger = get_logger(__name__)

IMPLEMENTORS_DIR = "implementors"
FRAGMENT_GLOB = "trait.*.js"


def trait_path_for(fragment: Path, implementors_root: Path) -> str:
    """Derive a trait path from a fragment's location.

    ``implementors/core/cmp/trait.PartialOrd.js`` → ``core::cmp::PartialOrd``
    """
    relative = fragment.relative_to(implementors_root)
    name = relative.name[len("trait."):-len(".js")]
    return "::".join([*relative.parent.parts, name])


class TraitIndex:
    """Per-trait implementor registries built from fragment files.

    Manifesto:
        Each trait page in the browser owns its own aggregator and loads
        exactly one fragment. The index reproduces that: the fragment is
        loaded into a fresh host first, then the trait's registry attaches
        and drains it.

    Architecture:
        ```
        doc_root/implementors/**/trait.*.js
              │
              ▼
        for each fragment:
              ├──► RegistryHost()            (not ready)
              ├──► load_fragment_file()      → DEFERRED
              └──► registry.attach(host)     → drained into registry
        ```

    Guardrails:
        - Do NOT abort the scan on one bad fragment
          ✅ Read/parse errors are collected in ``errors``
    """

    def __init__(self, policy: MergePolicy | str = MergePolicy.REPLACE):
        self.policy = MergePolicy(policy)
        self.registries: dict[str, ImplementorRegistry] = {}
        self.sources: dict[str, Path] = {}
        self.errors: list[dict[str, Any]] = []

    @classmethod
    def scan(
        cls,
        doc_root: Path | str,
        policy: MergePolicy | str = MergePolicy.REPLACE,
        strict: bool = False,
    ) -> TraitIndex:
        """Build an index from every fragment under ``doc_root``.

        Args:
            doc_root: Documentation root, or its ``implementors`` directory
            policy: Merge policy for each trait's registry
            strict: Raise instead of returning an empty index when the
                ``implementors`` directory does not exist

        Returns:
            Populated TraitIndex

        Raises:
            FragmentReadError: ``strict`` and no ``implementors`` directory
        """
        index = cls(policy=policy)
        root = Path(doc_root)
        implementors_root = root if root.name == IMPLEMENTORS_DIR else root / IMPLEMENTORS_DIR

        if not implementors_root.is_dir():
            if strict:
                raise FragmentReadError(
                    f"No implementors directory under {root}", path=implementors_root
                )
            logger.warning("implementors_dir_missing", path=str(implementors_root))
            return index

        for fragment in sorted(implementors_root.rglob(FRAGMENT_GLOB)):
            trait = trait_path_for(fragment, implementors_root)
            try:
                index.add_fragment(trait, fragment)
            except DocImplementorsError as e:
                index.errors.append({"trait": trait, "path": str(fragment), **e.to_dict()})
                logger.warning("fragment_skipped", trait=trait, path=str(fragment), error=str(e))

        logger.info(
            "trait_index_built",
            doc_root=str(root),
            traits=len(index.registries),
            errors=len(index.errors),
        )
        return index

    def _registry_for(self, trait: str) -> ImplementorRegistry:
        if trait not in self.registries:
            self.registries[trait] = ImplementorRegistry(self.policy)
        return self.registries[trait]

    def add_fragment(self, trait: str, path: Path | str) -> None:
        """Load one fragment file for ``trait`` the way a trait page does."""
        host = RegistryHost()
        load_fragment_file(path, host)
        self._registry_for(trait).attach(host)
        self.sources[trait] = Path(path)

    def add_table(self, trait: str, table: ImplementorsTable) -> None:
        """Register an already-parsed table for ``trait``."""
        host = RegistryHost()
        self._registry_for(trait).attach(host)
        load_implementors(table, host)

    def resolve_trait(self, trait: str) -> str:
        """Resolve a full trait path or an unambiguous short name.

        Raises:
            UnknownTraitError: No trait, or several traits, match
        """
        if trait in self.registries:
            return trait
        candidates = [t for t in self.registries if t.split("::")[-1] == trait]
        if len(candidates) == 1:
            return candidates[0]
        error = UnknownTraitError(trait)
        if candidates:
            error.message = f"Trait '{trait}' is ambiguous: {', '.join(sorted(candidates))}"
            error.with_context(candidates=sorted(candidates))
        raise error

    def registry(self, trait: str) -> ImplementorRegistry:
        return self.registries[self.resolve_trait(trait)]

    def traits(self) -> list[str]:
        return sorted(self.registries)

    def namespaces(self) -> list[str]:
        found = set()
        for registry in self.registries.values():
            found.update(registry.namespaces())
        return sorted(found)

    def implementors_of(self, trait: str, namespace: str | None = None) -> list[ImplementorEntry]:
        """Entries implementing ``trait``, in namespace then declaration order."""
        registry = self.registry(trait)
        if namespace is not None:
            return list(registry.find(namespace) or ())
        return [entry for ns in registry.namespaces() for entry in registry.get(ns)]

    def traits_for(self, type_name: str) -> list[str]:
        """Traits with at least one entry for ``type_name`` (name or full path)."""
        result = []
        for trait, registry in sorted(self.registries.items()):
            snapshot = registry.snapshot()
            if any(entry.matches_type(type_name) for entries in snapshot.values() for entry in entries):
                result.append(trait)
        return result

    def stats(self) -> dict[str, Any]:
        return {
            "traits": len(self.registries),
            "namespaces": len(self.namespaces()),
            "entries": sum(r.snapshot().entry_count for r in self.registries.values()),
            "errors": len(self.errors),
        }

    def to_dict(self) -> dict[str, Any]:
        """Serializable form for JSON export."""
        return {
            "traits": {
                trait: {
                    "source": str(self.sources[trait]) if trait in self.sources else None,
                    "implementors": self.registries[trait].snapshot().to_dict(),
                }
                for trait in self.traits()
            },
            "errors": self.errors,
            "stats": self.stats(),
        }


__all__ = ["TraitIndex", "trait_path_for", "IMPLEMENTORS_DIR", "FRAGMENT_GLOB"]
