"""
LibScout package initializer.
Defines package version and exposes CLI.
"""
__version__ = "0.1.0"

# Expose CLI entry point; keep ``lib_scout.cli`` bound to the module
from lib_scout.cli import cli as main_cli  # noqa: E402

__all__ = ["__version__", "main_cli"]
