"""
Structured error types for doc-implementors.

Loading and registering implementor tables never fails on its own. The
errors below cover everything around that path: reading fragment files,
decoding their contents, looking entries up, and loading configuration.

Manifesto:
    - **Typed Error Hierarchy:** One subclass per failure domain
    - **Rich Context:** Errors carry the path, offset or key they concern
    - **Error Chaining:** The original exception is kept as ``cause``

Architecture:
    ::

        ┌─────────────────────────────────────────────────────────┐
        │                 DocImplementorsError                     │
        │           (category, context, cause)                     │
        ├─────────────────────────────────────────────────────────┤
        │  FragmentParseError   FragmentReadError                  │
        │  (PARSE)              (SOURCE)                           │
        │                                                          │
        │  UnknownNamespaceError   UnknownTraitError   ConfigError │
        │  (LOOKUP)                (LOOKUP)            (CONFIG)    │
        └─────────────────────────────────────────────────────────┘

Examples:
    >>> error = FragmentParseError("unterminated string", offset=120)
    >>> error.category
    <ErrorCategory.PARSE: 'PARSE'>
    >>> error.context.offset
    120

Tags:
    error-handling, exception-hierarchy, error-context

Doc-Types:
    - API Reference
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any


class ErrorCategory(str, Enum):
    """Standard error categories for classification."""

    PARSE = "PARSE"  # Malformed fragment text
    SOURCE = "SOURCE"  # Fragment file missing or unreadable
    LOOKUP = "LOOKUP"  # Unknown namespace or trait
    CONFIG = "CONFIG"  # Invalid settings
    INTERNAL = "INTERNAL"  # Bugs, unexpected state


@dataclass
class ErrorContext:
    """
    Structured metadata attached to an error.

    Only fields that are set end up in ``to_dict()``; anything not covered
    by a typed field goes into ``metadata``.

    Attributes:
        path: Fragment file or config file involved
        offset: Character offset into the fragment text
        namespace: Namespace (crate) key involved
        trait: Trait path involved
        metadata: Additional key-value pairs
    """

    path: str | None = None
    offset: int | None = None
    namespace: str | None = None
    trait: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result = {}
        for key in ["path", "offset", "namespace", "trait"]:
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        if self.metadata:
            result.update(self.metadata)
        return result


class DocImplementorsError(Exception):
    """
    Base exception for all doc-implementors errors.

    Subclasses set ``default_category``; callers may override it per
    instance. ``with_context()`` adds metadata fluently and returns the
    error, so it can be used directly in a ``raise`` statement.

    Examples:
        >>> error = DocImplementorsError("boom")
        >>> error.category
        <ErrorCategory.INTERNAL: 'INTERNAL'>
        >>> error.with_context(namespace="couchdb").context.namespace
        'couchdb'
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        context: ErrorContext | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.context = context or ErrorContext()
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> DocImplementorsError:
        """
        Add context to this error (fluent API).

        Usage:
            raise UnknownTraitError("no such trait").with_context(
                trait="core::cmp::Ord"
            )
        """
        for key, value in kwargs.items():
            if hasattr(self.context, key) and key != "metadata":
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result: dict[str, Any] = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
        }
        context_dict = self.context.to_dict()
        if context_dict:
            result["context"] = context_dict
        if self.cause is not None:
            result["cause"] = str(self.cause)
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


# =============================================================================
# FRAGMENT ERRORS
# =============================================================================


class FragmentParseError(DocImplementorsError):
    """Fragment text could not be decoded into an implementors table."""

    default_category = ErrorCategory.PARSE

    def __init__(self, message: str, *, offset: int | None = None, **kwargs: Any):
        super().__init__(message, **kwargs)
        if offset is not None:
            self.context.offset = offset

    def __str__(self) -> str:
        if self.context.offset is not None:
            return f"{self.message} (at offset {self.context.offset})"
        return self.message


class FragmentReadError(DocImplementorsError):
    """Fragment file does not exist or could not be read."""

    default_category = ErrorCategory.SOURCE

    def __init__(self, message: str, *, path: str | Path | None = None, **kwargs: Any):
        super().__init__(message, **kwargs)
        if path is not None:
            self.context.path = str(path)


# =============================================================================
# LOOKUP ERRORS
# =============================================================================


class UnknownNamespaceError(DocImplementorsError, KeyError):
    """No implementors have been registered under the namespace."""

    default_category = ErrorCategory.LOOKUP

    def __init__(self, namespace: str, available: list[str] | None = None):
        listing = ", ".join(available) if available else "none"
        super().__init__(f"Namespace '{namespace}' not registered. Available: {listing}")
        self.context.namespace = namespace

    def __str__(self) -> str:
        return self.message


class UnknownTraitError(DocImplementorsError, KeyError):
    """The trait index holds no fragment for the trait."""

    default_category = ErrorCategory.LOOKUP

    def __init__(self, trait: str):
        super().__init__(f"Trait '{trait}' not found in index")
        self.context.trait = trait

    def __str__(self) -> str:
        return self.message


# =============================================================================
# CONFIG ERRORS
# =============================================================================


class ConfigError(DocImplementorsError):
    """Settings could not be loaded or failed validation."""

    default_category = ErrorCategory.CONFIG


__all__ = [
    "ErrorCategory",
    "ErrorContext",
    "DocImplementorsError",
    "FragmentParseError",
    "FragmentReadError",
    "UnknownNamespaceError",
    "UnknownTraitError",
    "ConfigError",
]
