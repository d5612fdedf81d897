"""Integration tests for CLI commands."""

from pathlib import Path

from typer.testing import CliRunner

from psoutline import __version__
from psoutline.cli import app


runner = CliRunner()


class TestShowCommand:
    """Tests for 'psoutline show'."""

    def test_show_directory(self, sample_project_path: Path):
        result = runner.invoke(app, ["show", str(sample_project_path)])

        assert result.exit_code == 0
        assert "Deploy.ps1" in result.stdout
        assert "Get-DeployTarget" in result.stdout
        assert "InventoryItem" in result.stdout
        assert "Functions: 6" in result.stdout

    def test_show_collapsed_hides_children(self, sample_project_path: Path):
        result = runner.invoke(app, ["show", str(sample_project_path), "--collapsed"])

        assert result.exit_code == 0
        assert "config" in result.stdout
        assert "Get-DeployTarget" not in result.stdout

    def test_show_without_variables(self, sample_project_path: Path):
        script = sample_project_path / "Deploy.ps1"

        with_vars = runner.invoke(app, ["show", str(script)])
        without_vars = runner.invoke(app, ["show", str(script), "--no-vars"])

        assert "Variables (2)" in with_vars.stdout
        assert "Variables" not in without_vars.stdout
        assert "Parameters (2)" in without_vars.stdout

    def test_show_empty_directory(self, temp_dir: Path):
        result = runner.invoke(app, ["show", str(temp_dir)])

        assert result.exit_code == 0
        assert "No outline found" in result.stdout

    def test_show_nonexistent_path(self):
        result = runner.invoke(app, ["show", "/nonexistent/path"])

        assert result.exit_code != 0

    def test_config_changes_output(self, sample_project_path: Path):
        runner.invoke(app, ["config", "set", "show_parameters", "false"])

        result = runner.invoke(app, ["show", str(sample_project_path / "Deploy.ps1")])

        assert result.exit_code == 0
        assert "Parameters" not in result.stdout
        assert "Variables (2)" in result.stdout


class TestJsonCommand:
    """Tests for 'psoutline json'."""

    def test_json_outline(self, sample_project_path: Path):
        result = runner.invoke(app, ["json", str(sample_project_path / "config" / "settings.json")])

        assert result.exit_code == 0
        assert "name: inventory" in result.stdout
        assert "Array with 2 items" in result.stdout

    def test_json_error(self, sample_project_path: Path):
        result = runner.invoke(app, ["json", str(sample_project_path / "config" / "broken.json")])

        assert result.exit_code == 1
        assert "Invalid JSON" in result.stdout

    def test_json_deeply_nested(self, temp_dir: Path):
        deep = temp_dir / "deep.json"
        deep.write_text("[" * 600 + "]" * 600)

        result = runner.invoke(app, ["json", str(deep)])

        assert result.exit_code == 0
        assert "[0]" in result.stdout
        assert "(+1)" in result.stdout

    def test_json_ignores_parse_settings(self, sample_project_path: Path, monkeypatch):
        def _unexpected(*args, **kwargs):
            raise AssertionError("parse options were loaded")

        monkeypatch.setattr("psoutline.config_manager.load_parse_options", _unexpected)

        result = runner.invoke(app, ["json", str(sample_project_path / "config" / "settings.json")])

        assert result.exit_code == 0
        assert "name: inventory" in result.stdout


class TestFileCommand:

    def test_file_outline(self, sample_project_path: Path):
        result = runner.invoke(app, ["file", str(sample_project_path / "modules" / "Inventory.psm1")])

        assert result.exit_code == 0
        assert "[void] Restock" in result.stdout
        assert "amount : int" in result.stdout

    def test_file_without_structure(self, temp_dir: Path):
        script = temp_dir / "plain.ps1"
        script.write_text("Write-Host 'hello'\n")

        result = runner.invoke(app, ["file", str(script)])

        assert result.exit_code == 0
        assert "No structure recognised" in result.stdout


class TestBrowseCommand:
    """Tests for 'psoutline browse' driven through stdin."""

    def test_browse_toggle_and_quit(self, sample_project_path: Path):
        script = sample_project_path / "Deploy.ps1"
        # row 2 is the first function once the file row is expanded
        result = runner.invoke(app, ["browse", str(script)], input="2\nq\n")

        assert result.exit_code == 0
        assert "Get-DeployTarget" in result.stdout
        assert "Parameters (2)" in result.stdout
        assert "Goodbye" in result.stdout

    def test_browse_rejects_unknown_choice(self, sample_project_path: Path):
        script = sample_project_path / "Deploy.ps1"
        result = runner.invoke(app, ["browse", str(script)], input="zz\n99\nq\n")

        assert result.exit_code == 0
        assert "Unknown choice" in result.stdout

    def test_browse_expand_all(self, sample_project_path: Path):
        script = sample_project_path / "Deploy.ps1"
        result = runner.invoke(app, ["browse", str(script)], input="a\nq\n")

        assert result.exit_code == 0
        assert "selected" in result.stdout


class TestConfigCommands:
    """Tests for 'psoutline config'."""

    def test_config_show_defaults(self):
        result = runner.invoke(app, ["config", "show"])

        assert result.exit_code == 0
        assert "[parsing]" in result.stdout
        assert "show_variables" in result.stdout
        assert "using defaults" in result.stdout

    def test_config_set_and_show(self):
        result = runner.invoke(app, ["config", "set", "show_variables", "no"])

        assert result.exit_code == 0
        assert "parsing.show_variables = False" in result.stdout

        shown = runner.invoke(app, ["config", "show"])
        assert "False" in shown.stdout

    def test_config_set_unknown_key(self):
        result = runner.invoke(app, ["config", "set", "bogus", "1"])

        assert result.exit_code == 1
        assert "Unknown config key" in result.stdout

    def test_config_reset(self, _isolated_config: Path):
        runner.invoke(app, ["config", "set", "show_variables", "no"])

        result = runner.invoke(app, ["config", "reset"])

        assert result.exit_code == 0
        assert "reset" in result.stdout
        assert "show_variables" not in _isolated_config.read_text()


def test_version():
    result = runner.invoke(app, ["--version"])

    assert result.exit_code == 0
    assert __version__ in result.stdout
