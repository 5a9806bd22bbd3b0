"""Conversion between file paths and module names.

A module ``my-app.util.text`` lives at ``my_app/util/text.clj`` below one of
the configured source roots: name segments become directories and hyphens
become underscores on disk.  Nothing here touches the filesystem, so the
functions work just as well for a rename target that does not exist yet.
"""

from __future__ import annotations

import os
import posixpath
from typing import TYPE_CHECKING, Optional, Union

from .errors import ResolutionError

if TYPE_CHECKING:
    from .roots import SourceRootProvider

__all__ = [
    "normalize_path",
    "module_to_relative_path",
    "relative_path_to_module",
    "ModulePathResolver",
]


def normalize_path(path: Union[str, os.PathLike]) -> str:
    """Return ``path`` as an absolute path using ``/`` as the separator."""
    absolute = os.path.normpath(os.path.abspath(os.fspath(path)))
    return absolute.replace("\\", "/")


def relative_path_to_module(relative: str) -> str:
    """``my_app/util/text.clj`` -> ``my-app.util.text``."""
    relative = relative.replace("\\", "/").strip("/")
    stem, _ = posixpath.splitext(relative)
    return stem.replace("/", ".").replace("_", "-")


def module_to_relative_path(module: str, extension: str = ".clj") -> str:
    """``my-app.util.text`` -> ``my_app/util/text.clj``."""
    return module.replace("-", "_").replace(".", "/") + extension


class ModulePathResolver:
    """Maps absolute paths onto module names using the configured roots."""

    def __init__(self, roots: "SourceRootProvider") -> None:
        self.roots = roots

    def resolve(self, path: Union[str, os.PathLike]) -> str:
        """Return the module name for ``path``.

        Every root that is a prefix of the path (compared case-insensitively
        and only on a directory boundary) is a candidate; with nested roots
        the one leaving the shortest remainder, i.e. the deepest root, wins.

        Raises
        ------
        ResolutionError
            If no root contains ``path``.
        """
        target = normalize_path(path)
        lowered = target.lower()
        remainders = []
        for root in self.roots.list_roots():
            prefix = normalize_path(root).rstrip("/") + "/"
            if lowered.startswith(prefix.lower()):
                remainders.append(target[len(prefix):])
        if not remainders:
            raise ResolutionError(f"Can't find a source root containing {target}")
        relative = min(remainders, key=len).strip("/")
        if not relative:
            raise ResolutionError(f"{target} is a source root, not a module path")
        return relative_path_to_module(relative)

    def path_for(self, module: str, root: Optional[str] = None, extension: str = ".clj") -> str:
        """Return the absolute path ``module`` would have under ``root``.

        ``root`` defaults to the first configured root.
        """
        if root is None:
            roots = list(self.roots.list_roots())
            if not roots:
                raise ResolutionError("No source roots configured")
            root = roots[0]
        base = normalize_path(root).rstrip("/")
        return f"{base}/{module_to_relative_path(module, extension)}"
