"""Tests for the click command line interface."""

import pytest
from click.testing import CliRunner

from nsmover.cli import cli, main
from nsmover.paths import normalize_path


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def project(tmp_path, write_source):
    src = tmp_path / "src"
    write_source(src / "my_app" / "util.clj", "(ns my-app.util)\n(defn trim [s] s)\n")
    write_source(
        src / "my_app" / "core.clj",
        "(ns my-app.core\n  (:require [my-app.util :as util]))\n\n(my-app.util/trim \"x\")\n",
    )
    return tmp_path


def test_rename_prints_modified_files(runner, project):
    src = project / "src"
    result = runner.invoke(
        cli,
        ["rename", str(src / "my_app" / "util.clj"), str(src / "my_app" / "text" / "util.clj"),
         "--source-root", str(src)],
    )
    assert result.exit_code == 0, result.output
    assert normalize_path(src / "my_app" / "text" / "util.clj") in result.output
    assert normalize_path(src / "my_app" / "core.clj") in result.output
    assert "[my-app.text.util :as util]" in (src / "my_app" / "core.clj").read_text(encoding="utf-8")


def test_rename_uses_conventional_dirs_of_the_project_root(runner, project):
    src = project / "src"
    result = runner.invoke(
        cli,
        ["rename", str(src / "my_app" / "util.clj"), str(src / "my_app" / "strings.clj"),
         "--project-root", str(project)],
    )
    assert result.exit_code == 0, result.output
    assert (src / "my_app" / "strings.clj").read_text(encoding="utf-8").startswith("(ns my-app.strings)")


def test_rename_into_directory_keeps_the_file_name(runner, project):
    src = project / "src"
    (src / "lib").mkdir()
    result = runner.invoke(
        cli, ["rename", str(src / "my_app" / "util.clj"), str(src / "lib"), "--source-root", str(src)]
    )
    assert result.exit_code == 0, result.output
    assert (src / "lib" / "util.clj").read_text(encoding="utf-8").startswith("(ns lib.util)")


def test_rename_outside_roots_fails_cleanly(runner, project):
    src = project / "src"
    result = runner.invoke(
        cli,
        ["rename", str(src / "my_app" / "util.clj"), str(project / "other" / "util.clj"),
         "--source-root", str(src)],
    )
    assert result.exit_code == 1
    assert "Can't find a source root" in result.output
    assert (src / "my_app" / "util.clj").exists()


def test_source_roots_from_environment(runner, project):
    src = project / "src"
    result = runner.invoke(
        cli, ["module-name", str(src / "my_app" / "core.clj")], env={"NSMOVER_SOURCE_ROOTS": str(src)}
    )
    assert result.exit_code == 0, result.output
    assert result.output.strip() == "my-app.core"


def test_module_name_for_new_path(runner, project):
    src = project / "src"
    result = runner.invoke(
        cli, ["module-name", str(src / "my_app" / "brand_new.cljs"), "--source-root", str(src)]
    )
    assert result.exit_code == 0, result.output
    assert result.output.strip() == "my-app.brand-new"


def test_dependents_by_module_and_by_file(runner, project):
    src = project / "src"
    expected = normalize_path(src / "my_app" / "core.clj")
    by_name = runner.invoke(cli, ["dependents", "my-app.util", "--source-root", str(src)])
    by_file = runner.invoke(cli, ["dependents", str(src / "my_app" / "util.clj"), "--source-root", str(src)])
    assert by_name.exit_code == 0, by_name.output
    assert by_name.output.strip() == expected
    assert by_file.output.strip() == expected


def test_extension_option_limits_source_files(runner, project):
    src = project / "src"
    result = runner.invoke(
        cli, ["dependents", "my-app.util", "--source-root", str(src), "--extension", "cljs"]
    )
    assert result.exit_code == 0, result.output
    assert result.output.strip() == ""


def test_missing_project_root_is_a_usage_error(runner, project):
    result = runner.invoke(cli, ["module-name", "x.clj", "--project-root", str(project / "missing")])
    assert result.exit_code == 2
    assert "does not exist" in result.output


def test_rename_ignores_files_that_are_not_utf8(runner, project):
    src = project / "src"
    (src / "legacy").mkdir()
    (src / "legacy" / "old.clj").write_bytes(b"(ns legacy.old)\n; caf\xe9\n")
    result = runner.invoke(
        cli,
        ["rename", str(src / "my_app" / "util.clj"), str(src / "my_app" / "strings.clj"),
         "--source-root", str(src)],
    )
    assert result.exit_code == 0, result.output
    assert normalize_path(src / "my_app" / "core.clj") in result.output


def test_dependents_of_a_file_that_is_not_utf8_fails_cleanly(runner, project):
    src = project / "src"
    target = src / "legacy.clj"
    target.write_bytes(b"(ns legacy)\n; caf\xe9\n")
    result = runner.invoke(cli, ["dependents", str(target), "--source-root", str(src)])
    assert result.exit_code == 1
    assert "Error:" in result.output


def test_main_reports_errors_through_the_exit_status(project, capsys):
    src = project / "src"
    with pytest.raises(SystemExit) as ok:
        main(["module-name", str(src / "my_app" / "core.clj"), "--source-root", str(src)])
    assert ok.value.code == 0
    assert capsys.readouterr().out.strip() == "my-app.core"

    with pytest.raises(SystemExit) as failed:
        main(["module-name", str(project / "other.clj"), "--source-root", str(src)])
    assert failed.value.code == 1
    assert "Error:" in capsys.readouterr().err
