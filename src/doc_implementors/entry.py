"""
Implementor entries: one trait implementation as rendered by the doc tool.

An entry wraps the markup exactly as the generator produced it, e.g.::

    impl <a class='trait' href='...' title='core::cmp::PartialOrd'>PartialOrd</a>
    for <a class='struct' href='couchdb/struct.Revision.html'
    title='couchdb::Revision'>Revision</a>

The markup is the payload and is never rewritten. ``ImplementorEntry.details``
decodes it on first access into the trait, the implementing type, the
generic parameters and the where-clause. Decoding is tolerant: anything
that cannot be found comes back as ``None``.

Manifesto:
    Entries are opaque to the registry. Decoding exists for queries
    ("which traits does Revision implement?") and for display, so it must
    never reject markup the generator emitted.

Architecture:
    ::

        markup ──► _scan_links()      ─► [Link(kind, title, href, name, span)]
               ──► _top_level_for()   ─► offset of " for " outside generics
               ──► _where_clause()    ─► text of <span class='where'>
               ──► _leading_generics()─► text between impl< and >
                          │
                          ▼
                    ImplDetails (frozen)

Tags:
    entry, markup, implementors, decoding

Doc-Types:
    - API Reference
"""

from __future__ import annotations

import html
import re
from dataclasses import dataclass, field
from functools import cached_property
from typing import Any

_ANCHOR_RE = re.compile(r"<a\s+([^>]*)>(.*?)</a>", re.S | re.I)
_ATTR_RE = re.compile(r"""([\w-]+)\s*=\s*(?:'([^']*)'|"([^"]*)")""")
_TAG_RE = re.compile(r"<[^>]*>")
_WHERE_RE = re.compile(
    r"""<span\s+class\s*=\s*(['"])[^'"]*\bwhere\b[^'"]*\1[^>]*>(.*?)</span>""", re.S | re.I
)
# Tokens that matter when looking for the top-level " for " keyword
_FOR_SCAN_RE = re.compile(r"<[^>]*>|&lt;|&gt;| for ")
_WS_RE = re.compile(r"\s+")


def markup_to_text(markup: str) -> str:
    """Strip tags, unescape entities and collapse whitespace."""
    text = html.unescape(_TAG_RE.sub("", markup))
    return _WS_RE.sub(" ", text).strip()


@dataclass(frozen=True)
class Link:
    """One ``<a>`` element inside an entry."""

    kind: str | None
    title: str | None
    href: str | None
    name: str
    start: int = field(default=0, compare=False)
    end: int = field(default=0, compare=False)

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind, "title": self.title, "href": self.href, "name": self.name}


@dataclass(frozen=True)
class ImplDetails:
    """Decoded view of an entry's markup."""

    text: str
    trait_name: str | None = None
    trait_path: str | None = None
    type_name: str | None = None
    type_path: str | None = None
    type_kind: str | None = None
    generics: str | None = None
    where_clause: str | None = None
    negative: bool = False
    links: tuple[Link, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "text": self.text,
            "trait_name": self.trait_name,
            "trait_path": self.trait_path,
            "type_name": self.type_name,
            "type_path": self.type_path,
            "type_kind": self.type_kind,
            "generics": self.generics,
            "where_clause": self.where_clause,
            "negative": self.negative,
            "links": [link.to_dict() for link in self.links],
        }


def _scan_links(markup: str) -> list[Link]:
    links = []
    for match in _ANCHOR_RE.finditer(markup):
        attrs = {}
        for attr in _ATTR_RE.finditer(match.group(1)):
            value = attr.group(2) if attr.group(2) is not None else attr.group(3)
            attrs[attr.group(1).lower()] = html.unescape(value)
        links.append(
            Link(
                kind=attrs.get("class"),
                title=attrs.get("title"),
                href=attrs.get("href"),
                name=markup_to_text(match.group(2)),
                start=match.start(),
                end=match.end(),
            )
        )
    return links


def _top_level_for(markup: str, limit: int) -> int | None:
    """Offset of the first `` for `` that sits outside any ``&lt;...&gt;``."""
    depth = 0
    for token in _FOR_SCAN_RE.finditer(markup, 0, limit):
        value = token.group(0)
        if value == "&lt;":
            depth += 1
        elif value == "&gt;":
            # "-&gt;" is a return arrow, not a closing bracket
            if markup[token.start() - 1:token.start()] != "-":
                depth = max(depth - 1, 0)
        elif value == " for " and depth == 0:
            return token.start()
    return None


def _leading_generics(text: str) -> str | None:
    """Return the parameter list of ``impl<...>``, or None for a plain impl."""
    if not text.startswith("impl<"):
        return None
    depth = 0
    for i, ch in enumerate(text[4:], start=4):
        if ch == "<":
            depth += 1
        elif ch == ">" and text[i - 1] != "-":
            depth -= 1
            if depth == 0:
                return text[5:i].strip()
    return None


def _strip_generics(text: str) -> str:
    return text.split("<", 1)[0].strip()


def decode_markup(markup: str) -> ImplDetails:
    """Decode entry markup into an ``ImplDetails``."""
    text = markup_to_text(markup)
    links = _scan_links(markup)

    where_match = _WHERE_RE.search(markup)
    where_clause = markup_to_text(where_match.group(2)) if where_match else None
    body_end = where_match.start() if where_match else len(markup)

    for_pos = _top_level_for(markup, body_end)
    if for_pos is None:
        # Not shaped like "impl X for Y"; keep the text and links only
        return ImplDetails(text=text, links=tuple(links), where_clause=where_clause or None)

    before = [link for link in links if link.end <= for_pos]
    after = [link for link in links if for_pos <= link.start < body_end]

    trait_links = [link for link in before if link.kind == "trait"]
    trait_link = trait_links[-1] if trait_links else (before[-1] if before else None)

    head_text = markup_to_text(markup[:for_pos])
    generics = _leading_generics(head_text)
    negative = (head_text.split(">")[-1] if generics is not None else head_text[4:]).lstrip().startswith("!")

    if after:
        type_link = after[0]
        type_name = type_link.name
        type_path = type_link.title
        type_kind = type_link.kind
    else:
        # Unlinked target such as a primitive or a reference
        type_name = _strip_generics(markup_to_text(markup[for_pos + len(" for "):body_end])) or None
        type_path = None
        type_kind = None

    return ImplDetails(
        text=text,
        trait_name=trait_link.name if trait_link else None,
        trait_path=trait_link.title if trait_link else None,
        type_name=type_name,
        type_path=type_path,
        type_kind=type_kind,
        generics=generics,
        where_clause=where_clause or None,
        negative=negative,
        links=tuple(links),
    )


@dataclass(frozen=True)
class ImplementorEntry:
    """
    One pre-rendered trait implementation description.

    Immutable; equality and hashing use the markup only.

    Examples:
        >>> entry = ImplementorEntry("impl <a class='trait' title='core::cmp::PartialOrd'>"
        ...                          "PartialOrd</a> for <a class='struct' "
        ...                          "title='couchdb::Revision'>Revision</a>")
        >>> entry.type_name
        'Revision'
        >>> entry.trait_path
        'core::cmp::PartialOrd'
    """

    markup: str

    def __post_init__(self):
        if not isinstance(self.markup, str):
            raise TypeError(f"ImplementorEntry markup must be str, got {type(self.markup).__name__}")

    @classmethod
    def coerce(cls, value: ImplementorEntry | str) -> ImplementorEntry:
        """Accept either an entry or its raw markup."""
        if isinstance(value, cls):
            return value
        return cls(value)

    @cached_property
    def details(self) -> ImplDetails:
        return decode_markup(self.markup)

    @property
    def text(self) -> str:
        return self.details.text

    @property
    def trait_name(self) -> str | None:
        return self.details.trait_name

    @property
    def trait_path(self) -> str | None:
        return self.details.trait_path

    @property
    def type_name(self) -> str | None:
        return self.details.type_name

    @property
    def type_path(self) -> str | None:
        return self.details.type_path

    @property
    def type_kind(self) -> str | None:
        return self.details.type_kind

    @property
    def generics(self) -> str | None:
        return self.details.generics

    @property
    def where_clause(self) -> str | None:
        return self.details.where_clause

    @property
    def links(self) -> tuple[Link, ...]:
        return self.details.links

    def matches_type(self, name: str) -> bool:
        """True if ``name`` is this entry's type name or full type path."""
        return name in (self.type_name, self.type_path)

    def to_dict(self) -> dict[str, Any]:
        data = self.details.to_dict()
        data["markup"] = self.markup
        return data

    def __str__(self) -> str:
        return self.markup


__all__ = ["ImplementorEntry", "ImplDetails", "Link", "decode_markup", "markup_to_text"]
