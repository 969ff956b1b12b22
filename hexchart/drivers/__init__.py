"""Drivers: host adapter and I/O clients."""

from hexchart.drivers.host import MachineHost
from hexchart.drivers.http_client import HttpClientDriver

__all__ = ["HttpClientDriver", "MachineHost"]
