"""CLI command modules."""

from . import config_cmd, run_cmd, validate_cmd

__all__ = ["config_cmd", "run_cmd", "validate_cmd"]
