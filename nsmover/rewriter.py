"""Rewriting of files that depend on a renamed module.

The ``ns`` form is rewritten structurally: clauses naming the old module
are retargeted and imported class names under the old package are moved to
the new one.  The rest of the file only gets a literal search and replace
of ``old.module/`` style qualified references.  That replacement does not
know about Clojure syntax, so a reference written through an alias is not
touched and a longer name that happens to end in the old module name is.
"""

from __future__ import annotations

import logging
import re
from dataclasses import replace

from .fs import LocalFileSystem
from .header import ClauseGroup, DeclarationHeader, DependencyClause, ImportGroup, serialize, split_source

__all__ = ["flattened_prefix", "replace_prefix", "ReferenceRewriter"]

logger = logging.getLogger(__name__)


def flattened_prefix(module: str) -> str:
    """Munged form of a module name used for JVM class names.

    >>> flattened_prefix("my-app.core")
    'my_app.core'
    """
    return module.replace("-", "_")


def replace_prefix(name: str, old_prefix: str, new_prefix: str) -> str:
    """Swap the leading ``old_prefix`` of a dotted name.

    Only whole segments match: ``my_app.core.Thing`` is under
    ``my_app.core`` but ``my_app.core2.Thing`` is not.
    """
    if name == old_prefix:
        return new_prefix
    if name.startswith(old_prefix + "."):
        return new_prefix + name[len(old_prefix):]
    return name


def rewrite_header(header: DeclarationHeader, old_module: str, new_module: str) -> DeclarationHeader:
    old_prefix = flattened_prefix(old_module)
    new_prefix = flattened_prefix(new_module)
    sections = []
    for section in header.sections:
        if isinstance(section, ClauseGroup):
            section = ClauseGroup(
                section.kind,
                [
                    entry.retarget(new_module)
                    if isinstance(entry, DependencyClause) and entry.target == old_module
                    else entry
                    for entry in section.entries
                ],
            )
        elif isinstance(section, ImportGroup):
            section = ImportGroup(
                [replace_prefix(name, old_prefix, new_prefix) for name in section.classes],
                list(section.extras),
            )
        sections.append(section)
    return replace(header, sections=sections)


def rewrite_body(body: str, old_module: str, new_module: str) -> str:
    replacements = {
        old_module + "/": new_module + "/",
        flattened_prefix(old_module) + "/": flattened_prefix(new_module) + "/",
    }
    # one pass, so replaced text is never matched again
    pattern = re.compile("|".join(re.escape(old) for old in sorted(replacements, key=len, reverse=True)))
    return pattern.sub(lambda match: replacements[match.group(0)], body)


class ReferenceRewriter:
    """Computes the new content of a dependent file; never writes."""

    def __init__(self, fs: LocalFileSystem | None = None) -> None:
        self.fs = fs or LocalFileSystem()

    def rewrite(self, path: str, old_module: str, new_module: str) -> str:
        logger.debug("Rewriting references to %s in %s", old_module, path)
        return self.rewrite_text(self.fs.read(path), old_module, new_module)

    @staticmethod
    def rewrite_text(text: str, old_module: str, new_module: str) -> str:
        before, header, body = split_source(text)
        new_header = rewrite_header(header, old_module, new_module)
        return before + serialize(new_header) + rewrite_body(body, old_module, new_module)
