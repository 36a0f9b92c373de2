"""ZKBallot command-line tools."""

from .tools import cli, main

__all__ = ["cli", "main"]
