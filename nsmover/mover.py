"""
Core routines for renaming source files and directories.

This module implements the functionality behind the CLI exposed in
``nsmover.cli``.  Renaming a file that declares a module goes like this:

1. work out the old module name from the file's ``ns`` form and the new
   one from the destination path;
2. build the dependency graph of the whole tree and compute the new content
   of every file that depends directly on the old module, in memory;
3. move the file, prune the directories it leaves empty, fix its own ``ns``
   name and finally write the dependents.

Everything that can fail without touching the disk (resolution of the new
name, reading and parsing dependents) happens before the first write.
There is no rollback: an I/O error after the move leaves the tree half
renamed and the caller has to recover, e.g. from version control.

A directory is renamed file by file.  Each file goes through the steps
above with a freshly built graph, and the destination directories come into
existence as files are moved into them.
"""

from __future__ import annotations

import logging
import os
import posixpath
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Sequence, Set, Union

from .errors import HeaderParseError, InvalidArgument
from .fs import LocalFileSystem
from .graph import DEFAULT_EXTENSIONS, DependencyGraphBuilder, dependents_of
from .header import parse
from .paths import ModulePathResolver, normalize_path
from .roots import SourceRootProvider, as_provider
from .rewriter import ReferenceRewriter

__all__ = [
    "RenamePlan",
    "RenameExecutor",
    "DirectoryRenamer",
    "NamespaceMover",
    "rename_file_or_dir",
]

logger = logging.getLogger(__name__)

PathArg = Union[str, os.PathLike]


@dataclass
class RenamePlan:
    """Everything a single file rename will write, computed up front."""

    old_path: str
    new_path: str
    old_module: str
    new_module: str
    rewrites: Dict[str, str] = field(default_factory=dict)


class RenameExecutor:
    """Renames one file and updates the files depending on it."""

    def __init__(
        self,
        roots: SourceRootProvider,
        fs: LocalFileSystem,
        resolver: ModulePathResolver,
        builder: DependencyGraphBuilder,
        rewriter: ReferenceRewriter,
    ) -> None:
        self.roots = roots
        self.fs = fs
        self.resolver = resolver
        self.builder = builder
        self.rewriter = rewriter

    def rename(self, old_path: str, new_path: str) -> Set[str]:
        """Move ``old_path`` to ``new_path`` and return every file written.

        Raises
        ------
        ResolutionError
            If ``new_path`` is not below a source root.  Nothing has been
            modified at that point.
        """
        old_module = self._declared_module(old_path)
        if old_module is None:
            self.move(old_path, new_path)
            return {new_path}

        plan = self.plan(old_path, new_path, old_module)
        self.move(plan.old_path, plan.new_path)
        self._rename_own_module(plan)
        for path, content in plan.rewrites.items():
            logger.info("Updating %s", path)
            self.fs.write(path, content)
        return set(plan.rewrites) | {plan.new_path}

    def plan(self, old_path: str, new_path: str, old_module: str) -> RenamePlan:
        new_module = self.resolver.resolve(new_path)
        plan = RenamePlan(old_path, new_path, old_module, new_module)
        graph = self.builder.build()
        for path in dependents_of(graph, old_module):
            plan.rewrites[path] = self.rewriter.rewrite(path, old_module, new_module)
        logger.debug(
            "Renaming %s to %s touches %d dependent(s)", old_module, new_module, len(plan.rewrites)
        )
        return plan

    def move(self, old_path: str, new_path: str) -> None:
        """Move a file, creating parents of the target and pruning the source dirs."""
        logger.info("Moving %s to %s", old_path, new_path)
        self.fs.mkdirs(posixpath.dirname(new_path))
        self.fs.move(old_path, new_path)
        self.prune(posixpath.dirname(old_path))

    def prune(self, directory: str) -> None:
        """Delete ``directory`` and its ancestors while they are empty.

        Stops at the first non-empty directory, at a source root or at the
        top of the filesystem.
        """
        # roots are matched without regard to case, as in ModulePathResolver
        boundaries = {normalize_path(root).lower() for root in self.roots.list_roots()}
        while directory.lower() not in boundaries and self.fs.is_directory(directory):
            if self.fs.list_children(directory):
                break
            logger.debug("Removing empty directory %s", directory)
            self.fs.delete_empty_directory(directory)
            parent = posixpath.dirname(directory)
            if parent == directory:
                break
            directory = parent

    def _declared_module(self, path: str) -> str | None:
        if not self.builder.is_source_file(path):
            return None
        try:
            return parse(self.fs.read(path)).module_name
        except HeaderParseError:
            logger.warning("%s has no ns declaration, moving it as a plain file", path)
            return None
        except UnicodeDecodeError:
            logger.warning("%s is not valid UTF-8, moving it as a plain file", path)
            return None

    def _rename_own_module(self, plan: RenamePlan) -> None:
        content = self.fs.read(plan.new_path)
        self.fs.write(plan.new_path, content.replace(plan.old_module, plan.new_module, 1))


class DirectoryRenamer:
    """Renames every file below a directory, one at a time."""

    def __init__(self, executor: RenameExecutor, fs: LocalFileSystem) -> None:
        self.executor = executor
        self.fs = fs

    def rename(self, old_dir: str, new_dir: str) -> Set[str]:
        old_dir = old_dir.rstrip("/") + "/"
        new_dir = new_dir.rstrip("/") + "/"
        # snapshot first, the tree changes under us as files move
        work = [
            (path, new_dir + path[len(old_dir):])
            for path in (normalize_path(p) for p in self.fs.walk_files(old_dir))
        ]
        modified: Set[str] = set()
        for old_path, new_path in work:
            modified |= self.executor.rename(old_path, new_path)
        # a dependent rewritten in place may have been moved by a later step
        moved = dict(work)
        return {moved.get(path, path) for path in modified}


class NamespaceMover:
    """Entry point wiring the resolver, graph builder and rewriter together.

    Parameters
    ----------
    roots:
        A :class:`~nsmover.roots.SourceRootProvider` or an iterable of
        source root directories.
    fs:
        Filesystem primitives, defaults to :class:`LocalFileSystem`.
    extensions:
        File extensions treated as source files.
    """

    def __init__(
        self,
        roots: Union[SourceRootProvider, Iterable[PathArg]],
        fs: LocalFileSystem | None = None,
        extensions: Sequence[str] = DEFAULT_EXTENSIONS,
    ) -> None:
        self.roots = as_provider(roots)
        self.fs = fs or LocalFileSystem()
        self.resolver = ModulePathResolver(self.roots)
        self.builder = DependencyGraphBuilder(self.roots, self.fs, extensions)
        self.rewriter = ReferenceRewriter(self.fs)
        self.executor = RenameExecutor(self.roots, self.fs, self.resolver, self.builder, self.rewriter)
        self.directories = DirectoryRenamer(self.executor, self.fs)

    def rename(self, old_path: PathArg, new_path: PathArg) -> List[str]:
        """Rename a file or directory and return the sorted list of files written.

        Raises
        ------
        InvalidArgument
            If either path is blank or ``old_path`` does not exist.
        ResolutionError
            If a destination is outside every source root.
        """
        for value in (old_path, new_path):
            if value is None or not os.fspath(value).strip():
                raise InvalidArgument("Paths must not be blank")
        old = normalize_path(old_path)
        new = normalize_path(new_path)
        if self.fs.is_directory(old):
            modified = self.directories.rename(old, new)
        elif self.fs.is_file(old):
            modified = self.executor.rename(old, new) | {new}
        else:
            raise InvalidArgument(f"{old} is neither a file nor a directory")
        return sorted(normalize_path(path) for path in modified)


def rename_file_or_dir(
    old_path: PathArg,
    new_path: PathArg,
    roots: Union[SourceRootProvider, Iterable[PathArg]],
    *,
    fs: LocalFileSystem | None = None,
    extensions: Sequence[str] = DEFAULT_EXTENSIONS,
) -> List[str]:
    """Rename a file or directory, updating every file that depends on it.

    Returns the sorted list of files that were written, as absolute paths
    using ``/`` separators.
    """
    return NamespaceMover(roots, fs=fs, extensions=extensions).rename(old_path, new_path)
