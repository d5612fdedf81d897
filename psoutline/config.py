"""Configuration paths and scan defaults for psoutline."""

from __future__ import annotations

import os
from pathlib import Path

BASE_DIR = Path(os.environ.get("PSOUTLINE_HOME", str(Path.home() / ".psoutline"))).expanduser()
SCRIPT_EXTENSIONS = {".ps1", ".psm1"}
JSON_EXTENSIONS = {".json"}
DEFAULT_EXTENSIONS = sorted(SCRIPT_EXTENSIONS | JSON_EXTENSIONS)

SKIP_DIRS = {
    ".git", ".vs", ".vscode", ".idea", "node_modules", "bin", "obj",
    "__pycache__", ".venv", "venv", "dist", "build",
}
