"""End to end tests for renaming files and directories."""

import logging

import pytest

from nsmover.errors import InvalidArgument, ResolutionError
from nsmover.fs import LocalFileSystem
from nsmover.mover import NamespaceMover, rename_file_or_dir
from nsmover.roots import StaticRoots


def read(path):
    return path.read_text(encoding="utf-8")


def test_rename_without_dependents(src, mover, write_source, norm):
    old = write_source(src / "pkg" / "a.clj", "(ns pkg.a)\n\n(defn f [] 1)\n")
    write_source(src / "pkg" / "other.clj", "(ns pkg.other)\n")
    new = src / "pkg" / "a2.clj"

    assert mover.rename(old, new) == [norm(new)]
    assert not old.exists()
    assert read(new) == "(ns pkg.a2)\n\n(defn f [] 1)\n"
    assert read(src / "pkg" / "other.clj") == "(ns pkg.other)\n"


def test_rename_updates_dependents(src, mover, write_source, norm):
    old = write_source(src / "pkg" / "a.clj", "(ns pkg.a)\n(defn foo [] 1)\n")
    dependent = write_source(
        src / "pkg" / "b.clj",
        "(ns pkg.b\n  (:require [pkg.a :as x]))\n\n(defn bar [] (x/foo) (pkg.a/foo) (pkg.abc/foo))\n",
    )
    new = src / "util" / "a.clj"

    assert mover.rename(old, new) == [norm(dependent), norm(new)]
    assert read(new) == "(ns util.a)\n(defn foo [] 1)\n"
    assert read(dependent) == (
        "(ns pkg.b\n  (:require [util.a :as x]))\n\n(defn bar [] (x/foo) (util.a/foo) (pkg.abc/foo))\n"
    )


def test_only_direct_dependents_are_updated(src, mover, write_source, norm):
    old = write_source(src / "pkg" / "a.clj", "(ns pkg.a)\n(defn f [])\n")
    direct = write_source(src / "pkg" / "b.clj", "(ns pkg.b (:require pkg.a))\n(def g pkg.a/f)\n")
    indirect_text = "(ns pkg.c (:require pkg.b))\n(def h pkg.b/g)\n;; pkg.a/f reached through pkg.b\n"
    indirect = write_source(src / "pkg" / "c.clj", indirect_text)
    new = src / "pkg" / "a2.clj"

    assert mover.rename(old, new) == [norm(new), norm(direct)]
    assert "pkg.a2/f" in read(direct)
    assert read(indirect) == indirect_text


def test_resource_rename_never_builds_the_graph(src, mover, write_source, norm, monkeypatch):
    old = write_source(src / "pkg" / "data.edn", "{:a 1}\n")

    def fail():
        raise AssertionError("dependency graph should not be built")

    monkeypatch.setattr(mover.builder, "build", fail)
    new = src / "res" / "data.edn"

    assert mover.rename(old, new) == [norm(new)]
    assert read(new) == "{:a 1}\n"
    assert not (src / "pkg").exists()


def test_resource_outside_roots_is_moved(tmp_path, src, mover, write_source, norm):
    old = write_source(tmp_path / "resources" / "logo.txt", "logo\n")
    new = tmp_path / "assets" / "logo.txt"

    assert mover.rename(old, new) == [norm(new)]
    assert not (tmp_path / "resources").exists()
    assert src.exists()


def test_source_file_without_ns_is_moved_as_is(src, mover, write_source, norm, caplog):
    old = write_source(src / "scripts" / "build.clj", "(println \"build\")\n")
    new = src / "tools" / "build.clj"
    caplog.set_level(logging.WARNING, logger="nsmover.mover")

    assert mover.rename(old, new) == [norm(new)]
    assert read(new) == "(println \"build\")\n"
    assert "no ns declaration" in caplog.text


def test_unresolvable_destination_aborts_before_any_change(tmp_path, src, mover, write_source):
    old = write_source(src / "pkg" / "a.clj", "(ns pkg.a)\n")
    dependent_text = "(ns pkg.b (:require pkg.a))\n"
    dependent = write_source(src / "pkg" / "b.clj", dependent_text)

    with pytest.raises(ResolutionError):
        mover.rename(old, tmp_path / "elsewhere" / "a.clj")
    assert read(old) == "(ns pkg.a)\n"
    assert read(dependent) == dependent_text
    assert not (tmp_path / "elsewhere").exists()


@pytest.mark.parametrize("old, new", [("", "x.clj"), ("   ", "x.clj"), ("x.clj", ""), (None, "x.clj")])
def test_blank_arguments_are_rejected(mover, old, new):
    with pytest.raises(InvalidArgument):
        mover.rename(old, new)


def test_missing_source_is_rejected(src, mover):
    with pytest.raises(InvalidArgument):
        mover.rename(src / "nope.clj", src / "yes.clj")


def test_empty_ancestors_are_pruned(src, mover, write_source):
    old = write_source(src / "x" / "y" / "z" / "m.clj", "(ns x.y.z.m)\n")
    write_source(src / "x" / "other.clj", "(ns x.other)\n")

    mover.rename(old, src / "m.clj")
    assert not (src / "x" / "y").exists()
    assert (src / "x" / "other.clj").exists()


def test_pruning_stops_at_a_source_root(tmp_path, src, write_source, norm):
    test_root = tmp_path / "test"
    mover = NamespaceMover([src, test_root])
    old = write_source(src / "only.clj", "(ns only)\n")

    assert mover.rename(old, test_root / "only.clj") == [norm(test_root / "only.clj")]
    assert src.is_dir()
    assert list(src.iterdir()) == []


def test_rename_directory(src, mover, write_source, norm):
    write_source(src / "pkg" / "a.clj", "(ns pkg.a)\n")
    write_source(src / "pkg" / "b.clj", "(ns pkg.b\n  (:require pkg.a))\n\n(pkg.a/x)\n")

    result = mover.rename(src / "pkg", src / "pkg2")

    assert result == [norm(src / "pkg2" / "a.clj"), norm(src / "pkg2" / "b.clj")]
    assert not (src / "pkg").exists()
    assert read(src / "pkg2" / "a.clj") == "(ns pkg2.a)\n"
    assert read(src / "pkg2" / "b.clj") == "(ns pkg2.b\n  (:require pkg2.a))\n\n(pkg2.a/x)\n"


def test_rename_nested_directory_with_outside_dependent(src, mover, write_source, norm):
    write_source(src / "app" / "core.clj", "(ns app.core (:require app.util.text))\n")
    write_source(src / "app" / "util" / "text.clj", "(ns app.util.text)\n")
    write_source(src / "app" / "util" / "words.txt", "words\n")
    (src / "app" / "empty").mkdir()
    main = write_source(src / "main.clj", "(ns main (:require [app.core :as core]))\n(core/run) (app.core/run)\n")

    result = mover.rename(str(src / "app") + "/", src / "lib" / "app")

    target = src / "lib" / "app"
    assert result == sorted(
        [
            norm(target / "core.clj"),
            norm(target / "util" / "text.clj"),
            norm(target / "util" / "words.txt"),
            norm(main),
        ]
    )
    assert read(target / "core.clj") == "(ns lib.app.core\n  (:require lib.app.util.text))\n"
    assert read(target / "util" / "text.clj") == "(ns lib.app.util.text)\n"
    assert read(target / "util" / "words.txt") == "words\n"
    assert read(main) == "(ns main\n  (:require [lib.app.core :as core]))\n(core/run) (lib.app.core/run)\n"
    # directories are never recreated on their own
    assert not (target / "empty").exists()


class FailingWrites(LocalFileSystem):
    def __init__(self, fail_on):
        self.fail_on = fail_on

    def write(self, path, content):
        if path == self.fail_on:
            raise PermissionError(path)
        super().write(path, content)


def test_failure_after_move_is_not_rolled_back(src, write_source, norm):
    old = write_source(src / "pkg" / "a.clj", "(ns pkg.a)\n")
    dependent_text = "(ns pkg.b (:require pkg.a))\n"
    dependent = write_source(src / "pkg" / "b.clj", dependent_text)
    mover = NamespaceMover([src], fs=FailingWrites(norm(dependent)))

    with pytest.raises(PermissionError):
        mover.rename(old, src / "pkg" / "a2.clj")
    assert not old.exists()
    assert read(src / "pkg" / "a2.clj") == "(ns pkg.a2)\n"
    assert read(dependent) == dependent_text


def test_rename_file_or_dir_accepts_plain_paths(src, write_source, norm):
    old = write_source(src / "my_app" / "old_name.clj", "(ns my-app.old-name)\n")
    dependent = write_source(
        src / "my_app" / "web.clj",
        "(ns my-app.web\n  (:require [my-app.old-name :as old])\n  (:import my_app.old_name.Rec))\n\n"
        "(my_app.old_name/->Rec) (my-app.old-name/f)\n",
    )

    result = rename_file_or_dir(str(old), str(src / "my_app" / "new_name.clj"), StaticRoots([str(src)]))

    assert result == [norm(src / "my_app" / "new_name.clj"), norm(dependent)]
    assert all("\\" not in path for path in result)
    assert read(src / "my_app" / "new_name.clj") == "(ns my-app.new-name)\n"
    assert read(dependent) == (
        "(ns my-app.web\n  (:require [my-app.new-name :as old])\n  (:import my_app.new_name.Rec))\n\n"
        "(my_app.new_name/->Rec) (my-app.new-name/f)\n"
    )


def test_file_that_is_not_utf8_does_not_block_a_rename(src, mover, write_source, norm):
    (src / "legacy").mkdir()
    (src / "legacy" / "old.clj").write_bytes(b"(ns legacy.old)\n; caf\xe9\n")
    old = write_source(src / "pkg" / "a.clj", "(ns pkg.a)\n")
    dependent = write_source(src / "pkg" / "b.clj", "(ns pkg.b (:require pkg.a))\n")

    assert mover.rename(old, src / "pkg" / "a2.clj") == [norm(src / "pkg" / "a2.clj"), norm(dependent)]
    assert read(dependent) == "(ns pkg.b\n  (:require pkg.a2))\n"
    assert (src / "legacy" / "old.clj").read_bytes() == b"(ns legacy.old)\n; caf\xe9\n"


def test_file_that_is_not_utf8_is_moved_as_is(src, mover, norm, caplog):
    (src / "legacy").mkdir()
    old = src / "legacy" / "old.clj"
    old.write_bytes(b"(ns legacy.old)\n; caf\xe9\n")
    new = src / "kept" / "old.clj"
    caplog.set_level(logging.WARNING, logger="nsmover.mover")

    assert mover.rename(old, new) == [norm(new)]
    assert new.read_bytes() == b"(ns legacy.old)\n; caf\xe9\n"
    assert "not valid UTF-8" in caplog.text


def test_twin_dependents_are_both_rewritten(src, mover, write_source, norm):
    old = write_source(src / "pkg" / "a.clj", "(ns pkg.a)\n")
    clj = write_source(src / "pkg" / "b.clj", "(ns pkg.b (:require pkg.a))\n")
    cljs = write_source(src / "pkg" / "b.cljs", "(ns pkg.b (:require [pkg.a :as a]))\n")
    new = src / "pkg" / "a2.clj"

    assert mover.rename(old, new) == [norm(new), norm(clj), norm(cljs)]
    assert read(clj) == "(ns pkg.b\n  (:require pkg.a2))\n"
    assert read(cljs) == "(ns pkg.b\n  (:require [pkg.a2 :as a]))\n"


def test_pruning_matches_roots_regardless_of_case(tmp_path, src, norm):
    mover = NamespaceMover([str(tmp_path) + "/SRC"])

    mover.executor.prune(norm(src))
    assert src.is_dir()
