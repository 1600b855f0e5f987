"""CLI package for oauth2-cli

This package provides the command-line entry point that runs a single
OAuth2 authorization-code flow and prints the resulting token.
"""

from cli.main import main, run

__all__ = [
    "main",
    "run",
]
