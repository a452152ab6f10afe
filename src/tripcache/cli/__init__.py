"""
Command-line interface for tripcache.

Provides Click-based commands for city lookups and cache maintenance.
"""

from tripcache.cli.main import cli

__all__ = ["cli"]
