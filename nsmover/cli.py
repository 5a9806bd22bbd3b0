"""
Command‑line interface for the nsmover package.

This module exposes three commands using :mod:`click`:

* ``rename`` – rename a source file or a whole directory and update every
  file that depends on the renamed modules.
* ``dependents`` – list the files that directly depend on a module.
* ``module-name`` – print the module name a path maps to.

All commands accept ``--project-root`` (defaults to the current working
directory), a repeatable ``--source-root`` and a repeatable
``--extension``.  Source roots determine how files are converted into
module names: with the root ``src`` the file ``src/my_app/core.clj`` is the
module ``my-app.core``.  Without ``--source-root`` the ``src``, ``test`` and
``dev`` directories of the project root are used.
"""

from __future__ import annotations

import logging
import os
import pathlib
import sys
from typing import Sequence

import click

from .config import Settings
from .errors import HeaderParseError, RenameError
from .graph import DependencyGraphBuilder, dependents_of
from .header import parse
from .mover import rename_file_or_dir
from .paths import ModulePathResolver

logger = logging.getLogger(__name__)


def make_settings(
    project_root: str | None, source_roots: Sequence[pathlib.Path], extensions: Sequence[str]
) -> Settings:
    """Build :class:`Settings` from command line options.

    ``project_root`` defaults to the current working directory and must be
    an existing directory.
    """
    root = pathlib.Path(project_root) if project_root else pathlib.Path.cwd()
    if not root.is_dir():
        raise click.UsageError(f"Project root {root!s} does not exist or is not a directory")
    root = root.absolute()
    if extensions:
        return Settings(root, tuple(source_roots), tuple(extensions))
    return Settings(root, tuple(source_roots))


def source_options(func):
    """Options shared by every command that needs to know the source roots."""
    func = click.option(
        "--extension", "extensions", multiple=True,
        help="Extension of source files, repeatable (defaults to .clj, .cljc and .cljs).",
    )(func)
    func = click.option(
        "--source-root", "source_roots", multiple=True, envvar="NSMOVER_SOURCE_ROOTS",
        type=click.Path(file_okay=False, path_type=pathlib.Path),
        help="Source root directory, repeatable.  Read from NSMOVER_SOURCE_ROOTS when not given.",
    )(func)
    func = click.option(
        "--project-root", "project_root", type=click.Path(), default=None,
        help="Root directory of the project (defaults to current working directory).",
    )(func)
    return func


@click.group()
@click.version_option(package_name="nsmover")
@click.option("-v", "--verbose", count=True, help="Log progress; repeat for debug output.")
def cli(verbose: int) -> None:
    """Rename Clojure files or directories and update the code depending on them.

    Use one of the subcommands to relocate code within your project while
    automatically rewriting ``ns`` declarations and qualified references in
    all affected source files.
    """
    level = logging.WARNING
    if verbose == 1:
        level = logging.INFO
    elif verbose > 1:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


@cli.command("rename", help="Rename a source file or directory and update dependents.")
@click.argument("old", type=click.Path(exists=True))
@click.argument("new", type=click.Path())
@source_options
def rename_cmd(
    old: str, new: str, project_root: str | None, source_roots: Sequence[pathlib.Path], extensions: Sequence[str]
) -> None:
    """Rename OLD to NEW and fix every file that depends on it.

    ``OLD`` is a source file, a resource file or a directory.  ``NEW`` is the
    path it should have afterwards; intermediate directories are created.
    When OLD is a file and NEW is an existing directory (or ends with a path
    separator) the file keeps its name inside NEW.  Every modified file is
    printed, one per line.
    """
    settings = make_settings(project_root, source_roots, extensions)
    roots = settings.root_provider()
    logger.debug("Source roots: %s", ", ".join(roots.list_roots()))
    old_path = pathlib.Path(old)
    new_path = pathlib.Path(new)
    if old_path.is_file() and (new.endswith(("/", os.path.sep)) or new_path.is_dir()):
        new_path = new_path / old_path.name
    click.echo(f"Renaming {old_path} to {new_path} and updating dependents…", err=True)
    try:
        modified = rename_file_or_dir(
            old_path, new_path, roots, extensions=settings.extensions
        )
    except (RenameError, OSError, UnicodeDecodeError) as exc:
        raise click.ClickException(str(exc)) from exc
    for path in modified:
        click.echo(path)


@cli.command("dependents", help="List files that depend directly on a module.")
@click.argument("target")
@source_options
def dependents_cmd(
    target: str, project_root: str | None, source_roots: Sequence[pathlib.Path], extensions: Sequence[str]
) -> None:
    """Print the files whose ``ns`` form requires TARGET.

    ``TARGET`` is either a module name or the path of a source file, in
    which case the module it declares is used.
    """
    settings = make_settings(project_root, source_roots, extensions)
    module = target
    if os.path.isfile(target):
        try:
            module = parse(pathlib.Path(target).read_text(encoding="utf-8")).module_name
        except (HeaderParseError, UnicodeDecodeError) as exc:
            raise click.ClickException(f"{target}: {exc}") from exc
    builder = DependencyGraphBuilder(settings.root_provider(), extensions=settings.extensions)
    for path in dependents_of(builder.build(), module):
        click.echo(path)


@cli.command("module-name", help="Print the module name a path maps to.")
@click.argument("path", type=click.Path())
@source_options
def module_name_cmd(
    path: str, project_root: str | None, source_roots: Sequence[pathlib.Path], extensions: Sequence[str]
) -> None:
    """Print the module name PATH has (or would have) below the source roots."""
    settings = make_settings(project_root, source_roots, extensions)
    try:
        click.echo(ModulePathResolver(settings.root_provider()).resolve(path))
    except RenameError as exc:
        raise click.ClickException(str(exc)) from exc


def main(argv: list[str] | None = None) -> None:
    """Entrypoint for console_scripts.

    Allows the CLI to be executed via ``python -m nsmover`` or when
    installed through a ``console_scripts`` entry point.  Click runs in
    standalone mode, so errors are reported on stderr and turned into the
    exit status rather than raised.
    """
    cli.main(args=argv, prog_name="nsmover")


if __name__ == "__main__":  # pragma: no cover
    main(sys.argv[1:])
