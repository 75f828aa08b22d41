"""
Fragment reader: generated ``trait.*.js`` implementors files → tables.

A fragment looks like::

    (function() {var implementors = {};
    implementors['couchdb'] = ["impl ... for ...", "impl ... for ...",];
    if (window.register_implementors) { ... } else { ... }
    })()

Only the ``implementors[KEY] = [STRING, ...]`` assignments carry data. They
are read in file order; a key assigned twice keeps the later list, as the
script itself would. Both quote styles and the usual backslash escapes are
understood, and a trailing comma before ``]`` is allowed.

Example:
    >>> table = parse_fragment("implementors['a'] = ['impl X for Y',];")
    >>> table.to_dict()
    {'a': ['impl X for Y']}
"""

from __future__ import annotations

import re
from pathlib import Path

from doc_implementors.errors import FragmentParseError, FragmentReadError
from doc_implementors.logging import get_logger
from doc_implementors.table import ImplementorsTable

logger = get_logger(__name__)

_ASSIGNMENT_RE = re.compile(r"\bimplementors\s*\[")
_SIMPLE_ESCAPES = {
    "n": "\n",
    "t": "\t",
    "r": "\r",
    "b": "\b",
    "f": "\f",
    "v": "\v",
    "0": "\0",
}


class _Scanner:
    """Cursor over fragment text with just enough JS lexing for the data."""

    def __init__(self, text: str, pos: int = 0):
        self.text = text
        self.pos = pos

    def skip_ws(self) -> None:
        while self.pos < len(self.text) and self.text[self.pos].isspace():
            self.pos += 1

    def peek(self) -> str:
        return self.text[self.pos] if self.pos < len(self.text) else ""

    def expect(self, char: str) -> None:
        self.skip_ws()
        if self.peek() != char:
            found = self.peek() or "end of input"
            raise FragmentParseError(f"Expected '{char}', found {found!r}", offset=self.pos)
        self.pos += 1

    def string(self) -> str:
        """Read one quoted JS string literal."""
        self.skip_ws()
        start = self.pos
        quote = self.peek()
        if quote not in ("'", '"'):
            found = quote or "end of input"
            raise FragmentParseError(f"Expected string literal, found {found!r}", offset=start)
        self.pos += 1
        out = []
        text = self.text
        while True:
            if self.pos >= len(text):
                raise FragmentParseError("Unterminated string literal", offset=start)
            ch = text[self.pos]
            if ch == quote:
                self.pos += 1
                return "".join(out)
            if ch in ("\n", "\r"):
                raise FragmentParseError("Newline in string literal", offset=self.pos)
            if ch == "\\":
                out.append(self._escape(start))
                continue
            out.append(ch)
            self.pos += 1

    def _escape(self, start: int) -> str:
        text = self.text
        self.pos += 1
        if self.pos >= len(text):
            raise FragmentParseError("Unterminated string literal", offset=start)
        ch = text[self.pos]
        self.pos += 1
        if ch in _SIMPLE_ESCAPES:
            return _SIMPLE_ESCAPES[ch]
        if ch in ("\n", "\r"):
            # Line continuation, LF, CRLF or bare CR
            if ch == "\r" and text[self.pos:self.pos + 1] == "\n":
                self.pos += 1
            return ""
        if ch in ("x", "u"):
            width = 2 if ch == "x" else 4
            digits = text[self.pos:self.pos + width]
            if len(digits) != width or not all(c in "0123456789abcdefABCDEF" for c in digits):
                raise FragmentParseError(f"Invalid \\{ch} escape", offset=self.pos - 2)
            self.pos += width
            return chr(int(digits, 16))
        return ch

    def string_array(self) -> list[str]:
        """Read ``[ "a", 'b', ]`` into a list of strings."""
        self.expect("[")
        items: list[str] = []
        while True:
            self.skip_ws()
            if self.peek() == "]":
                self.pos += 1
                return items
            items.append(self.string())
            self.skip_ws()
            if self.peek() == ",":
                self.pos += 1
            elif self.peek() != "]":
                found = self.peek() or "end of input"
                raise FragmentParseError(f"Expected ',' or ']', found {found!r}", offset=self.pos)


def parse_fragment(text: str) -> ImplementorsTable:
    """Parse fragment text into an implementors table.

    Args:
        text: Contents of a generated implementors file

    Returns:
        ImplementorsTable in file order (empty if there are no assignments)

    Raises:
        FragmentParseError: An assignment is malformed
    """
    assignments: dict[str, list[str]] = {}
    pos = 0
    while True:
        match = _ASSIGNMENT_RE.search(text, pos)
        if match is None:
            break
        scanner = _Scanner(text, match.end())
        namespace = scanner.string()
        scanner.expect("]")
        scanner.expect("=")
        entries = scanner.string_array()
        # JS assignment: a repeated key replaces the earlier list in place
        assignments[namespace] = entries
        pos = scanner.pos

    table = ImplementorsTable(assignments)
    logger.debug("fragment_parsed", namespaces=len(table), entries=table.entry_count)
    return table


def read_fragment(path: Path | str) -> ImplementorsTable:
    """Read and parse a fragment file.

    Raises:
        FragmentReadError: File missing or unreadable
        FragmentParseError: File contents malformed (context carries the path)
    """
    file_path = Path(path)
    try:
        text = file_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise FragmentReadError(f"Cannot read fragment {file_path}", path=file_path, cause=e)

    try:
        return parse_fragment(text)
    except FragmentParseError as e:
        raise e.with_context(path=str(file_path))


__all__ = ["parse_fragment", "read_fragment"]
