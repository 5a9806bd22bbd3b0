"""Run configuration shared by the CLI and library callers."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Tuple

from .graph import DEFAULT_EXTENSIONS
from .roots import DEFAULT_SOURCE_DIRS, ProjectRoots, SourceRootProvider, StaticRoots


@dataclass(frozen=True)
class Settings:
    """Where the sources live and which files count as sources.

    ``source_roots`` wins when given; otherwise the conventional source
    directories (``src``, ``test``, ``dev``) under ``project_root`` are
    used.  Relative roots are taken relative to ``project_root``.
    """

    project_root: Path
    source_roots: Tuple[Path, ...] = ()
    extensions: Tuple[str, ...] = DEFAULT_EXTENSIONS
    source_dirs: Tuple[str, ...] = DEFAULT_SOURCE_DIRS

    def __post_init__(self) -> None:
        extensions = tuple(ext if ext.startswith(".") else f".{ext}" for ext in self.extensions)
        object.__setattr__(self, "extensions", extensions)

    def root_provider(self) -> SourceRootProvider:
        if self.source_roots:
            return StaticRoots(
                root if root.is_absolute() else self.project_root / root for root in self.source_roots
            )
        return ProjectRoots(self.project_root, self.source_dirs)
