"""Loaders turning YAML and TOML documents into kernel objects."""

from hexchart.compiler.config_loader import ConfigLoader, load_config
from hexchart.compiler.machine_loader import MachineLoader, load_machine

__all__ = ["ConfigLoader", "MachineLoader", "load_config", "load_machine"]
