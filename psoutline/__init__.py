"""psoutline - navigable outlines of PowerShell scripts and JSON files."""

__version__ = "0.1.0"
