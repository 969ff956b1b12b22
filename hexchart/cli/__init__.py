"""Command-line interface for hexchart."""

from hexchart.cli.main import app, main

__all__ = ["app", "main"]
