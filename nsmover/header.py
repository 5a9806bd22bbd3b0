"""Typed view of a ``ns`` declaration and the codec that reads and writes it.

:func:`parse` turns the leading ``(ns ...)`` form of a file into a
:class:`DeclarationHeader`; :func:`serialize` writes one back out in the
usual layout::

    (ns my-app.core
      "Docstring."
      (:require [my-app.util :as util :refer [slurp-lines]]
                my-app.db)
      (:import [my_app.util Reader Writer]
               java.io.File))

Only the parts nsmover needs to understand are typed: the dependency
clauses of ``:require``/``:use`` style references and the class names of
``:import``.  Everything else (``:gen-class``, ``:refer-clojure``, reader
conditionals, reload flags) is carried as reader forms and written back
unchanged.  Prefix lists such as ``[clojure [set] [string :as str]]`` are
expanded into one clause per library, so they come back out flattened.
"""

from __future__ import annotations

from collections import OrderedDict
from dataclasses import dataclass, field, replace
from typing import List, Optional, Set, Tuple, Union

from .errors import HeaderParseError, ReaderError
from .reader import Form, Keyword, Seq, String, Symbol, iter_forms, render, unwrap

__all__ = [
    "CLAUSE_KINDS",
    "DependencyClause",
    "ClauseGroup",
    "ImportGroup",
    "DeclarationHeader",
    "split_source",
    "parse",
    "has_header",
    "serialize",
]

CLAUSE_KINDS = ("require", "use", "require-macros", "use-macros")


@dataclass(frozen=True)
class DependencyClause:
    """One library referenced from a ``:require``-style section."""

    target: str
    alias: Optional[str] = None
    refer: Optional[Tuple[str, ...]] = None
    refer_all: bool = False
    # every other option pair, e.g. (:rename {...}) or (:include-macros true)
    options: Tuple[Tuple[Form, Form], ...] = ()
    bare: bool = False

    def retarget(self, target: str) -> "DependencyClause":
        return replace(self, target=target)


@dataclass
class ClauseGroup:
    kind: str
    entries: List[Union[DependencyClause, Form]] = field(default_factory=list)


@dataclass
class ImportGroup:
    classes: List[str] = field(default_factory=list)
    extras: List[Form] = field(default_factory=list)


Section = Union[ClauseGroup, ImportGroup, Form]


@dataclass
class DeclarationHeader:
    module_name: str
    name_meta: Tuple[Form, ...] = ()
    preamble: List[Form] = field(default_factory=list)
    sections: List[Section] = field(default_factory=list)

    @property
    def clauses(self) -> List[DependencyClause]:
        return [
            entry
            for section in self.sections
            if isinstance(section, ClauseGroup)
            for entry in section.entries
            if isinstance(entry, DependencyClause)
        ]

    @property
    def interop(self) -> List[str]:
        return [name for section in self.sections if isinstance(section, ImportGroup) for name in section.classes]

    def dependencies(self) -> Set[str]:
        """Names of every module this header depends on."""
        return {clause.target for clause in self.clauses}


# -- parsing -----------------------------------------------------------------


def _name(form: Form) -> str:
    if isinstance(form, Symbol):
        return form.name
    return render(form)


def _parse_options(target: str, options: Tuple[Form, ...], bare: bool = False) -> Optional[DependencyClause]:
    if len(options) % 2:
        return None
    alias = None
    refer = None
    refer_all = False
    extra = []
    for key, value in zip(options[::2], options[1::2]):
        if not isinstance(key, Keyword):
            return None
        if key.name == "as" and isinstance(value, Symbol):
            alias = value.name
        elif key.name == "refer" and isinstance(value, Keyword) and value.name == "all":
            refer_all = True
        elif key.name == "refer" and isinstance(value, Seq) and value.kind in ("vector", "list"):
            refer = tuple(_name(item) for item in value.items)
        else:
            extra.append((key, value))
    return DependencyClause(target, alias, refer, refer_all, tuple(extra), bare)


def _parse_libspec(form: Form, prefix: str = "") -> Optional[List[DependencyClause]]:
    """Return the clauses ``form`` stands for, or ``None`` if it is not a libspec."""
    if isinstance(form, Symbol):
        return [DependencyClause(prefix + form.name, bare=True)]
    if not (isinstance(form, Seq) and form.kind in ("vector", "list") and form.items):
        return None
    head, rest = form.items[0], form.items[1:]
    if not isinstance(head, Symbol):
        return None
    if not rest or isinstance(rest[0], Keyword):
        clause = _parse_options(prefix + head.name, rest)
        return None if clause is None else [clause]
    # prefix list
    clauses: List[DependencyClause] = []
    for item in rest:
        parsed = _parse_libspec(item, f"{prefix}{head.name}.")
        if parsed is None:
            return None
        clauses.extend(parsed)
    return clauses


def _parse_clause_group(kind: str, items: Tuple[Form, ...]) -> ClauseGroup:
    group = ClauseGroup(kind)
    for item in items:
        parsed = _parse_libspec(item)
        if parsed is None:
            group.entries.append(item)
        else:
            group.entries.extend(parsed)
    return group


def _parse_import_group(items: Tuple[Form, ...]) -> ImportGroup:
    group = ImportGroup()
    for item in items:
        if isinstance(item, Symbol):
            group.classes.append(item.name)
        elif (
            isinstance(item, Seq)
            and item.kind in ("vector", "list")
            and item.items
            and all(isinstance(part, Symbol) for part in item.items)
        ):
            package = item.items[0].name
            if len(item.items) == 1:
                group.classes.append(package)
            group.classes.extend(f"{package}.{part.name}" for part in item.items[1:])
        else:
            group.extras.append(item)
    return group


def _header_from_form(form: Seq) -> DeclarationHeader:
    if len(form.items) < 2:
        raise HeaderParseError("ns form without a name")
    name, metas = unwrap(form.items[1])
    if not isinstance(name, Symbol):
        raise HeaderParseError(f"ns name must be a symbol, got {render(name)}")
    header = DeclarationHeader(name.name, metas)
    for item in form.items[2:]:
        if isinstance(item, Seq) and item.kind == "list" and item.items and isinstance(item.items[0], Keyword):
            keyword = item.items[0].name
            if keyword in CLAUSE_KINDS:
                header.sections.append(_parse_clause_group(keyword, item.items[1:]))
                continue
            if keyword == "import":
                header.sections.append(_parse_import_group(item.items[1:]))
                continue
        if not header.sections and (isinstance(item, String) or (isinstance(item, Seq) and item.kind == "map")):
            header.preamble.append(item)
        else:
            header.sections.append(item)
    return header


def _is_ns_form(form: Form) -> bool:
    form, _ = unwrap(form)
    if not (isinstance(form, Seq) and form.kind == "list" and form.items):
        return False
    head = form.items[0]
    return isinstance(head, Symbol) and head.name in ("ns", "clojure.core/ns")


def split_source(text: str) -> Tuple[str, DeclarationHeader, str]:
    """Split ``text`` into ``(before, header, after)``.

    ``before`` is whatever precedes the ``ns`` form (comments, a license
    block) and ``after`` is everything following its closing paren.

    Raises
    ------
    HeaderParseError
        If no ``ns`` form can be read from ``text``.
    """
    try:
        for form, start, end in iter_forms(text):
            if _is_ns_form(form):
                form, _ = unwrap(form)
                return text[:start], _header_from_form(form), text[end:]
    except ReaderError as exc:
        raise HeaderParseError(f"Could not read ns form: {exc}") from exc
    raise HeaderParseError("No ns form found")


def parse(text: str) -> DeclarationHeader:
    return split_source(text)[1]


def has_header(text: str) -> bool:
    try:
        split_source(text)
    except HeaderParseError:
        return False
    return True


# -- serialization -----------------------------------------------------------


def render_clause(clause: DependencyClause) -> str:
    if clause.bare and clause.alias is None and clause.refer is None and not clause.refer_all and not clause.options:
        return clause.target
    parts = [clause.target]
    if clause.alias is not None:
        parts += [":as", clause.alias]
    if clause.refer_all:
        parts += [":refer", ":all"]
    elif clause.refer is not None:
        parts += [":refer", "[" + " ".join(clause.refer) + "]"]
    for key, value in clause.options:
        parts += [render(key), render(value)]
    return "[" + " ".join(parts) + "]"


def _render_imports(group: ImportGroup) -> List[str]:
    packages: "OrderedDict[str, List[str]]" = OrderedDict()
    entries = []
    for name in group.classes:
        package, dot, simple = name.rpartition(".")
        if not dot:
            entries.append(name)
            continue
        if package not in packages:
            packages[package] = []
            entries.append(package)
        packages[package].append(simple)
    rendered = []
    for entry in entries:
        names = packages.get(entry)
        if names is None:
            rendered.append(entry)
        elif len(names) == 1:
            rendered.append(f"{entry}.{names[0]}")
        else:
            rendered.append("[" + " ".join([entry] + names) + "]")
    rendered.extend(render(extra) for extra in group.extras)
    return rendered


def _reference_lines(keyword: str, entries: List[str]) -> List[str]:
    head = f"  (:{keyword}"
    if not entries:
        return [head + ")"]
    indent = " " * (len(head) + 1)
    lines = [f"{head} {entries[0]}"] + [indent + entry for entry in entries[1:]]
    lines[-1] += ")"
    return lines


def serialize(header: DeclarationHeader) -> str:
    """Render ``header`` as ``ns`` form text, without a trailing newline."""
    meta = "".join(f"^{render(form)} " for form in header.name_meta)
    lines = [f"(ns {meta}{header.module_name}"]
    lines.extend("  " + render(form) for form in header.preamble)
    for section in header.sections:
        if isinstance(section, ClauseGroup):
            entries = [
                render_clause(entry) if isinstance(entry, DependencyClause) else render(entry)
                for entry in section.entries
            ]
            lines.extend(_reference_lines(section.kind, entries))
        elif isinstance(section, ImportGroup):
            lines.extend(_reference_lines("import", _render_imports(section)))
        else:
            lines.append("  " + render(section))
    return "\n".join(lines) + ")"
