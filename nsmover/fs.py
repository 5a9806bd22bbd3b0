"""Filesystem primitives used while renaming.

The rename code never touches ``os``/``shutil`` directly; it goes through a
:class:`LocalFileSystem` instance so tests can observe or replace the
individual operations.  None of these methods retry.
"""

from __future__ import annotations

import os
import shutil
from pathlib import Path
from typing import Iterator, List, Union

PathArg = Union[str, os.PathLike]


class LocalFileSystem:
    """Thin wrapper over the local disk.

    Text is read and written as UTF-8 with ``newline=""`` so line endings
    survive a rewrite unchanged.
    """

    encoding = "utf-8"

    def read(self, path: PathArg) -> str:
        with open(path, "r", encoding=self.encoding, newline="") as fh:
            return fh.read()

    def write(self, path: PathArg, content: str) -> None:
        with open(path, "w", encoding=self.encoding, newline="") as fh:
            fh.write(content)

    def move(self, src: PathArg, dst: PathArg) -> None:
        shutil.move(str(src), str(dst))

    def mkdirs(self, path: PathArg) -> None:
        Path(path).mkdir(parents=True, exist_ok=True)

    def list_children(self, path: PathArg) -> List[str]:
        return sorted(os.listdir(path))

    def exists(self, path: PathArg) -> bool:
        return Path(path).exists()

    def is_file(self, path: PathArg) -> bool:
        return Path(path).is_file()

    def is_directory(self, path: PathArg) -> bool:
        return Path(path).is_dir()

    def delete_empty_directory(self, path: PathArg) -> None:
        # rmdir refuses non-empty directories, which is exactly what we want
        os.rmdir(path)

    def walk_files(self, path: PathArg) -> Iterator[str]:
        """Yield every non-directory below ``path`` in sorted order."""
        for root, dirs, files in os.walk(path):
            dirs.sort()
            for filename in sorted(files):
                yield os.path.join(root, filename)
