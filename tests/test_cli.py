"""
Tests for the vigil command line.
"""

from click.testing import CliRunner

from vigil.cli.__main__ import cli

from conftest import write_source


def invoke(*args):
    return CliRunner().invoke(cli, list(args), obj={})


class TestLevels:

    def test_lists_labels(self):
        result = invoke("levels")
        assert result.exit_code == 0
        lines = result.output.splitlines()
        assert any(line.split()[:2] == ["2", "WARNING"] for line in lines)
        assert "Catchable Fatal Error" in result.output
        assert "ALL" not in result.output.split()

    def test_unlabelled_level_shown(self):
        result = invoke("levels")
        line = next(line for line in result.output.splitlines() if "CORE_WARNING" in line)
        assert line.split()[:3] == ["32", "CORE_WARNING", "-"]


class TestDiagnose:

    def test_missing_class(self, tmp_path):
        write_source(tmp_path, "Models/User.php", "<?php\nclass App_Models_User {}\n")
        result = invoke(
            "diagnose",
            'Class "App\\Models\\User" not found',
            "--root", f"App\\={tmp_path}",
            "--file", "index.php",
            "--line", "3",
        )
        assert result.exit_code == 0
        assert result.output.startswith(
            'Attempted to load class "User" from namespace "App\\Models" in index.php line 3.'
        )
        assert "  - App_Models_User\n" in result.output

    def test_undefined_function(self):
        result = invoke("-v", "diagnose", "Call to undefined function foo()", "-f", "Lib\\foo")
        assert result.exit_code == 0
        assert 'Did you mean to call: "\\Lib\\foo"?' in result.output
        assert "kind: function" in result.output

    def test_unrecognized_message(self):
        result = invoke("diagnose", "Allowed memory size exhausted")
        assert result.exit_code == 1

    def test_bad_root(self):
        result = invoke("diagnose", 'Class "X" not found', "--root", "nodir")
        assert result.exit_code == 2
        assert "PREFIX=DIR" in result.output
