"""
CLI entry point for running tripcache as a module.

Usage: python -m tripcache [OPTIONS] COMMAND [ARGS]...
"""

from tripcache.cli.main import cli

if __name__ == "__main__":
    cli()
