"""
Shared pytest fixtures for doc-implementors tests.

This module provides:
- Paths to the fragment fixtures under ``tests/fixtures``
- Isolation fixtures that reset the default host, default registry,
  cached settings and structlog configuration after every test
"""

import logging
from pathlib import Path

import pytest
import structlog

from doc_implementors.config import reset_settings
from doc_implementors.entry import ImplementorEntry
from doc_implementors.loader import reset_default_host
from doc_implementors.registry import reset_default_registry
from doc_implementors.table import ImplementorsTable


# =============================================================================
# Isolation
# =============================================================================


@pytest.fixture(autouse=True)
def _isolate_globals(monkeypatch):
    """Keep process-wide state from leaking between tests."""
    for key in ("DOC_IMPLEMENTORS_DOC_ROOT", "DOC_IMPLEMENTORS_MERGE_POLICY",
                "DOC_IMPLEMENTORS_LOG_LEVEL", "DOC_IMPLEMENTORS_LOG_JSON"):
        monkeypatch.delenv(key, raising=False)
    yield
    reset_default_host()
    reset_default_registry()
    reset_settings()
    structlog.reset_defaults()
    root = logging.getLogger()
    for handler in [h for h in root.handlers if type(h) is logging.StreamHandler]:
        root.removeHandler(handler)


# =============================================================================
# Paths
# =============================================================================


@pytest.fixture(scope="session")
def fixtures_path() -> Path:
    return Path(__file__).parent / "fixtures"


@pytest.fixture(scope="session")
def doc_root(fixtures_path) -> Path:
    """Documentation tree with PartialOrd and Clone fragments."""
    return fixtures_path / "doc"


@pytest.fixture(scope="session")
def broken_doc_root(fixtures_path) -> Path:
    """Documentation tree with one valid and one truncated fragment."""
    return fixtures_path / "broken_doc"


@pytest.fixture(scope="session")
def partial_ord_path(doc_root) -> Path:
    return doc_root / "implementors" / "core" / "cmp" / "trait.PartialOrd.js"


@pytest.fixture(scope="session")
def clone_path(doc_root) -> Path:
    return doc_root / "implementors" / "core" / "clone" / "trait.Clone.js"


# =============================================================================
# Sample data
# =============================================================================


def _entry(trait: str, type_name: str, crate: str = "couchdb", kind: str = "struct") -> ImplementorEntry:
    return ImplementorEntry(
        f"impl <a class='trait' href='https://doc.rust-lang.org/nightly/core/cmp/trait.{trait}.html' "
        f"title='core::cmp::{trait}'>{trait}</a> for "
        f"<a class='{kind}' href='{crate}/{kind}.{type_name}.html' title='{crate}::{type_name}'>{type_name}</a>"
    )


@pytest.fixture
def couchdb_table() -> ImplementorsTable:
    """Two PartialOrd entries under the couchdb namespace."""
    return ImplementorsTable({
        "couchdb": [
            _entry("PartialOrd", "Database"),
            _entry("PartialOrd", "Revision"),
        ]
    })


@pytest.fixture
def serde_table() -> ImplementorsTable:
    return ImplementorsTable({"serde_json": [_entry("PartialOrd", "Value", crate="serde_json", kind="enum")]})


@pytest.fixture
def make_entry():
    """Factory building entry markup shaped like the generator's output."""
    return _entry
