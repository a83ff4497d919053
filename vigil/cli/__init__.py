"""
Vigil CLI.

Usage:
    vigil levels
    vigil diagnose 'Class "App\\Models\\User" not found' --root 'App\\=src'
"""

from .. import __version__

__cli_name__ = "vigil"
