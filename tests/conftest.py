"""Pytest configuration and fixtures for psoutline tests."""

import shutil
import tempfile
from pathlib import Path
from typing import Generator

import pytest

from psoutline.models import ParseOptions


@pytest.fixture(autouse=True)
def _isolated_config(tmp_path: Path, monkeypatch):
    """Point the config file at a per-test location.

    Keeps tests from reading or writing the user's ~/.psoutline/config.toml.
    """
    config_file = tmp_path / "psoutline-home" / "config.toml"
    monkeypatch.setattr("psoutline.config_manager.CONFIG_FILE", config_file)
    return config_file


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    tmp = Path(tempfile.mkdtemp())
    yield tmp
    shutil.rmtree(tmp, ignore_errors=True)


@pytest.fixture
def sample_project_path() -> Path:
    """Get path to sample test project."""
    return Path(__file__).parent / "fixtures" / "sample_project"


@pytest.fixture
def all_options() -> ParseOptions:
    """Every parsing toggle enabled, bodies kept on function nodes."""
    return ParseOptions(
        parse_parameter_types=True,
        parse_variable_assignments=True,
        expand_function_details=True,
        show_parameters=True,
        show_variables=True,
        show_function_names=False,
    )


@pytest.fixture
def class_script() -> str:
    """A small PowerShell class with a constructor, methods and control flow."""
    return '''class Greeter {
    [string]$Prefix

    Greeter([string]$prefix) {
        $this.Prefix = $prefix
    }

    [string] Greet([string]$name, [int]$times) {
        $text = "$($this.Prefix) $name"
        if ($times -gt 1) {
            $text = $text * $times
        }
        foreach ($n in 1..$times) {
            $count = $n
        }
        return $text
    }
}

function Get-Greeter {
    param(
        [Parameter(Mandatory)]
        [string]$Prefix
    )
    $greeter = [Greeter]::new($Prefix)
    return $greeter
}
'''
