"""Source root providers.

A source root is a directory under which file paths map onto module names.
Roots are always handed to the rest of the package through a provider
object so the list is explicit configuration rather than global state.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Iterable, List, Protocol, Sequence, Union

from .paths import normalize_path

logger = logging.getLogger(__name__)

DEFAULT_SOURCE_DIRS = ("src", "test", "dev")


class SourceRootProvider(Protocol):
    def list_roots(self) -> Sequence[str]:
        """Return absolute, normalized source root directories."""


class StaticRoots:
    """A fixed list of source roots."""

    def __init__(self, roots: Iterable[Union[str, os.PathLike]]) -> None:
        self._roots: List[str] = []
        for root in roots:
            normalized = normalize_path(root)
            if normalized not in self._roots:
                self._roots.append(normalized)

    def list_roots(self) -> Sequence[str]:
        return list(self._roots)

    def __repr__(self) -> str:
        return f"StaticRoots({self._roots!r})"


class ProjectRoots:
    """Conventional source directories found under a project directory.

    Every name in ``source_dirs`` that exists as a directory below
    ``project_root`` is a root.  When none of them exist the project root
    itself is used, which suits flat checkouts.
    """

    def __init__(
        self,
        project_root: Union[str, os.PathLike],
        source_dirs: Sequence[str] = DEFAULT_SOURCE_DIRS,
    ) -> None:
        self.project_root = Path(project_root)
        self.source_dirs = tuple(source_dirs)

    def list_roots(self) -> Sequence[str]:
        found = [
            normalize_path(self.project_root / name)
            for name in self.source_dirs
            if (self.project_root / name).is_dir()
        ]
        if not found:
            logger.debug("No conventional source dirs under %s, using it as the root", self.project_root)
            found = [normalize_path(self.project_root)]
        return found

    def __repr__(self) -> str:
        return f"ProjectRoots({str(self.project_root)!r}, {self.source_dirs!r})"


def as_provider(roots: Union[SourceRootProvider, Iterable[Union[str, os.PathLike]]]) -> SourceRootProvider:
    """Wrap a plain iterable of directories into a :class:`StaticRoots`."""
    if hasattr(roots, "list_roots"):
        return roots  # type: ignore[return-value]
    if isinstance(roots, (str, os.PathLike)):
        return StaticRoots([roots])
    return StaticRoots(roots)
