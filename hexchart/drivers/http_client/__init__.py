"""HTTP client driver."""

from hexchart.drivers.http_client.http_client import HttpClientDriver

__all__ = ["HttpClientDriver"]
