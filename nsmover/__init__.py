"""
Rename Clojure source files and directories without breaking the tree.

Moving ``src/my_app/util.clj`` to ``src/my_app/text/util.clj`` changes the
module ``my-app.util`` into ``my-app.text.util``.  nsmover performs the move,
fixes the ``ns`` form of the moved file and rewrites every file that
requires the old module: its ``ns`` clauses, its ``:import`` class names and
fully qualified ``my-app.util/some-var`` references in its body.

Example::

    # Rename a module and fix its dependents
    nsmover rename src/my_app/util.clj src/my_app/text/util.clj

    # Rename a whole package directory
    nsmover rename src/my_app/db src/my_app/storage

The CLI is built on top of :mod:`click`; see ``nsmover.cli`` for details.
The same operation is available as :func:`rename_file_or_dir`.
"""

__all__ = [
    "NamespaceMover",
    "rename_file_or_dir",
    "RenameError",
    "InvalidArgument",
    "ResolutionError",
    "HeaderParseError",
]

from .errors import HeaderParseError, InvalidArgument, RenameError, ResolutionError  # noqa: F401
from .mover import NamespaceMover, rename_file_or_dir  # noqa: F401
