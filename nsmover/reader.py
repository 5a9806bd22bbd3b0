"""A small s-expression reader for Clojure ``ns`` declarations.

Only what is needed to pull the ``ns`` form out of a source file and write
it back is supported: lists, vectors, maps, sets, strings, symbols,
keywords, metadata and the common ``#`` dispatch forms (reader
conditionals, discards, var quotes, regexes, tagged literals).  Forms keep
their source text where it matters (strings, numbers, regexes) so that
rendering them again does not change their meaning.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Tuple, Union

from .errors import ReaderError

__all__ = [
    "Symbol",
    "Keyword",
    "String",
    "Token",
    "Seq",
    "Meta",
    "Tagged",
    "Form",
    "Reader",
    "read_string",
    "iter_forms",
    "render",
    "unwrap",
]


@dataclass(frozen=True)
class Symbol:
    name: str


@dataclass(frozen=True)
class Keyword:
    # without the leading colon; ``::foo`` is stored as ``:foo``
    name: str


@dataclass(frozen=True)
class String:
    value: str
    raw: str


@dataclass(frozen=True)
class Token:
    """Any other atom (numbers, ``nil``, booleans, characters, regexes)."""

    text: str


@dataclass(frozen=True)
class Seq:
    kind: str  # "list", "vector", "map" or "set"
    items: Tuple["Form", ...]


@dataclass(frozen=True)
class Meta:
    meta: "Form"
    form: "Form"


@dataclass(frozen=True)
class Tagged:
    """A form behind a reader prefix: ``'x``, ``#?(...)``, ``#_x``, ``#inst "..."``."""

    prefix: str
    form: "Form"
    sep: str = ""


Form = Union[Symbol, Keyword, String, Token, Seq, Meta, Tagged]

_OPENERS = {"(": ("list", ")"), "[": ("vector", "]"), "{": ("map", "}")}
_BRACKETS = {"list": ("(", ")"), "vector": ("[", "]"), "map": ("{", "}"), "set": ("#{", "}")}
_WHITESPACE = " \t\r\n,"
_TERMINATORS = _WHITESPACE + "()[]{}\";"
_QUOTES = {"'": "'", "`": "`", "@": "@"}


def _is_literal_atom(text: str) -> bool:
    if text in ("nil", "true", "false"):
        return True
    head = text[1:] if text[:1] in "+-" and len(text) > 1 else text
    return head[:1].isdigit()


class Reader:
    """Reads forms one at a time from ``text``, tracking the offset."""

    def __init__(self, text: str, pos: int = 0) -> None:
        self.text = text
        self.pos = pos

    def at_end(self) -> bool:
        self.skip_whitespace()
        return self.pos >= len(self.text)

    def skip_whitespace(self) -> None:
        text = self.text
        while self.pos < len(text):
            char = text[self.pos]
            if char in _WHITESPACE:
                self.pos += 1
            elif char == ";":
                newline = text.find("\n", self.pos)
                self.pos = len(text) if newline == -1 else newline + 1
            else:
                break

    def read(self) -> Form:
        self.skip_whitespace()
        text = self.text
        if self.pos >= len(text):
            raise ReaderError("Unexpected end of input", self.pos)
        char = text[self.pos]
        if char in _OPENERS:
            kind, close = _OPENERS[char]
            self.pos += 1
            return self._read_seq(kind, close)
        if char in ")]}":
            raise ReaderError(f"Unmatched delimiter {char!r}", self.pos)
        if char == '"':
            return self._read_string()
        if char == "^":
            self.pos += 1
            meta = self.read()
            return Meta(meta, self.read())
        if char == "~":
            prefix = "~@" if text.startswith("~@", self.pos) else "~"
            self.pos += len(prefix)
            return Tagged(prefix, self.read())
        if char in _QUOTES:
            self.pos += 1
            return Tagged(_QUOTES[char], self.read())
        if char == "#":
            return self._read_dispatch()
        if char == "\\":
            return self._read_char()
        return self._read_atom()

    def _read_seq(self, kind: str, close: str) -> Seq:
        start = self.pos - 1
        items = []
        while True:
            self.skip_whitespace()
            if self.pos >= len(self.text):
                raise ReaderError(f"Unterminated {kind}", start)
            if self.text[self.pos] == close:
                self.pos += 1
                return Seq(kind, tuple(items))
            items.append(self.read())

    def _read_string(self) -> String:
        text = self.text
        start = self.pos
        pos = start + 1
        chars = []
        while pos < len(text):
            char = text[pos]
            if char == "\\" and pos + 1 < len(text):
                chars.append(text[pos + 1])
                pos += 2
                continue
            if char == '"':
                self.pos = pos + 1
                return String("".join(chars), text[start:self.pos])
            chars.append(char)
            pos += 1
        raise ReaderError("Unterminated string", start)

    def _read_char(self) -> Token:
        start = self.pos
        # the character right after the backslash is always part of the literal
        self.pos += 2
        while self.pos < len(self.text) and self.text[self.pos] not in _TERMINATORS:
            self.pos += 1
        return Token(self.text[start:self.pos])

    def _read_atom_text(self) -> str:
        start = self.pos
        while self.pos < len(self.text) and self.text[self.pos] not in _TERMINATORS:
            self.pos += 1
        return self.text[start:self.pos]

    def _read_atom(self) -> Form:
        start = self.pos
        atom = self._read_atom_text()
        if not atom:
            raise ReaderError(f"Unexpected character {self.text[start]!r}", start)
        if atom.startswith(":"):
            return Keyword(atom[1:])
        if _is_literal_atom(atom):
            return Token(atom)
        return Symbol(atom)

    def _read_dispatch(self) -> Form:
        text = self.text
        start = self.pos
        self.pos += 1
        if self.pos >= len(text):
            raise ReaderError("Unexpected end of input after '#'", start)
        char = text[self.pos]
        if char == "{":
            self.pos += 1
            return self._read_seq("set", "}")
        if char == '"':
            raw = self._read_string().raw
            return Token("#" + raw)
        if char == "_":
            self.pos += 1
            return Tagged("#_", self.read())
        if char == "'":
            self.pos += 1
            return Tagged("#'", self.read())
        if char == "?":
            prefix = "#?@" if text.startswith("#?@", start) else "#?"
            self.pos = start + len(prefix)
            return Tagged(prefix, self.read())
        if char == "(":
            return Tagged("#", self.read())
        tag = self._read_atom_text()
        if not tag:
            raise ReaderError(f"Unsupported dispatch '#{char}'", start)
        # namespaced maps (#:ns{...}) sit flush against their map, tagged literals take a space
        sep = "" if tag.startswith(":") else " "
        return Tagged("#" + tag, self.read(), sep)


def read_string(text: str) -> Form:
    """Read the first form in ``text``."""
    return Reader(text).read()


def iter_forms(text: str) -> Iterator[Tuple[Form, int, int]]:
    """Yield ``(form, start, end)`` for each top-level form of ``text``."""
    reader = Reader(text)
    while not reader.at_end():
        start = reader.pos
        form = reader.read()
        yield form, start, reader.pos


def render(form: Form) -> str:
    """Write ``form`` back as text on a single line."""
    if isinstance(form, Symbol):
        return form.name
    if isinstance(form, Keyword):
        return ":" + form.name
    if isinstance(form, String):
        return form.raw
    if isinstance(form, Token):
        return form.text
    if isinstance(form, Seq):
        opening, closing = _BRACKETS[form.kind]
        return opening + " ".join(render(item) for item in form.items) + closing
    if isinstance(form, Meta):
        return f"^{render(form.meta)} {render(form.form)}"
    if isinstance(form, Tagged):
        return form.prefix + form.sep + render(form.form)
    raise TypeError(f"Not a form: {form!r}")


def unwrap(form: Form) -> Tuple[Form, Tuple[Form, ...]]:
    """Strip metadata from ``form``, returning ``(form, metadata_forms)``."""
    metas = []
    while isinstance(form, Meta):
        metas.append(form.meta)
        form = form.form
    return form, tuple(metas)
