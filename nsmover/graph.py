"""Dependency graph of every module below the source roots.

The graph is rebuilt from disk each time it is asked for.  A directory
rename moves files one at a time and every move rewrites the very headers
the graph is made of, so a cached graph would be stale after the first
file.
"""

from __future__ import annotations

import logging
import posixpath
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Sequence, Set

from .errors import HeaderParseError
from .fs import LocalFileSystem
from .header import parse
from .paths import normalize_path
from .roots import SourceRootProvider

__all__ = [
    "DEFAULT_EXTENSIONS",
    "DependencyGraph",
    "DependencyGraphBuilder",
    "invert",
    "dependents_of",
]

logger = logging.getLogger(__name__)

DEFAULT_EXTENSIONS = (".clj", ".cljc", ".cljs")


def invert(dependencies: Dict[str, Set[str]]) -> Dict[str, Set[str]]:
    """For every edge ``a -> b`` record ``b -> a``."""
    inverted: Dict[str, Set[str]] = {}
    for module, targets in dependencies.items():
        for target in targets:
            inverted.setdefault(target, set()).add(module)
    return inverted


@dataclass
class DependencyGraph:
    """Modules, the files declaring them and who depends on whom.

    ``module_files`` keeps one file per module.  ``module_paths`` keeps
    every file declaring a module, since ``.clj``/``.cljs`` twins commonly
    share one ``ns`` name, and ``file_dependencies`` records what each of
    those files requires on its own.
    """

    module_files: Dict[str, str] = field(default_factory=dict)
    module_paths: Dict[str, List[str]] = field(default_factory=dict)
    file_dependencies: Dict[str, Set[str]] = field(default_factory=dict)
    dependencies: Dict[str, Set[str]] = field(default_factory=dict)
    dependents: Dict[str, Set[str]] = field(default_factory=dict)

    @property
    def file_modules(self) -> Dict[str, str]:
        return {path: module for module, paths in self.module_paths.items() for path in paths}

    def file_of(self, module: str) -> str:
        return self.module_files[module]


class DependencyGraphBuilder:
    """Scans every source file under the roots and parses its ``ns`` form."""

    def __init__(
        self,
        roots: SourceRootProvider,
        fs: LocalFileSystem | None = None,
        extensions: Sequence[str] = DEFAULT_EXTENSIONS,
    ) -> None:
        self.roots = roots
        self.fs = fs or LocalFileSystem()
        self.extensions = tuple(extensions)

    def is_source_file(self, path: str) -> bool:
        return path.lower().endswith(self.extensions)

    def source_files(self) -> Iterable[str]:
        seen: Set[str] = set()
        for root in self.roots.list_roots():
            if not self.fs.is_directory(root):
                logger.debug("Skipping missing source root %s", root)
                continue
            for path in self.fs.walk_files(root):
                path = normalize_path(path)
                # nested roots list the same file more than once
                if path in seen or not self.is_source_file(path):
                    continue
                seen.add(path)
                yield path

    def build(self) -> DependencyGraph:
        graph = DependencyGraph()
        for path in self.source_files():
            try:
                header = parse(self.fs.read(path))
            except (HeaderParseError, UnicodeDecodeError) as exc:
                logger.debug("Skipping %s: %s", path, exc)
                continue
            module = header.module_name
            previous = graph.module_files.get(module)
            if previous is not None and posixpath.splitext(previous)[1] == posixpath.splitext(path)[1]:
                logger.warning("Module %s is declared by both %s and %s", module, previous, path)
            graph.module_files[module] = path
            graph.module_paths.setdefault(module, []).append(path)
            graph.file_dependencies[path] = header.dependencies()
            graph.dependencies.setdefault(module, set()).update(graph.file_dependencies[path])
        graph.dependents = invert(graph.dependencies)
        logger.debug("Built dependency graph of %d modules", len(graph.module_files))
        return graph


def dependents_of(graph: DependencyGraph, module: str) -> List[str]:
    """Return the files that depend directly on ``module``.

    Every file declaring a dependent module is checked on its own, so of
    two twins sharing a ``ns`` name only the ones requiring ``module`` are
    returned.  Only one hop is followed: a module that reaches ``module``
    through another module is not included.
    """
    paths = []
    for dependent in graph.dependents.get(module, ()):
        for path in graph.module_paths.get(dependent, ()):
            if module in graph.file_dependencies.get(path, ()):
                paths.append(path)
    return sorted(paths)
