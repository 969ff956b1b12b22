"""Typed configuration produced by :mod:`hexchart.compiler.config_loader`."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal

from hexchart.kernel.exceptions import ValidationError


@dataclass(frozen=True, slots=True)
class LoggingConfig:
    """Arguments for :func:`hexchart.kernel.logging.configure_logging`.

    Read from the ``logging`` section; each field can be overridden with a
    ``HEXCHART_LOG_*`` environment variable (``LEVEL``, ``FORMAT``, ``FILE``,
    ``COLOR``, ``TIMESTAMP``)::

        [tool.hexchart.logging]
        level = "DEBUG"
        format = "rich"
    """

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    format: Literal["console", "json", "structured", "rich"] = "structured"
    output_file: str | None = None
    use_color: bool = True
    include_timestamp: bool = True


@dataclass(frozen=True, slots=True)
class NewsletterConfig:
    """Settings for the newsletter signup component.

    Attributes
    ----------
    url : str
        Endpoint the signup request is sent to.
    timeout : float
        Request timeout in seconds.
    """

    url: str = "https://my-json-server.typicode.com/chancestrickland/state-machine-from-scratch/posts/1"
    timeout: float = 10.0

    def __post_init__(self) -> None:
        if not self.url:
            raise ValidationError("newsletter.url", "cannot be empty")
        if self.timeout <= 0:
            raise ValidationError("newsletter.timeout", "must be positive", self.timeout)


@dataclass(slots=True)
class HexChartConfig:
    """Everything a ``kind: Config`` manifest or ``[tool.hexchart]`` can set.

    ``machines`` lists ``kind: Machine`` files of the project; ``settings``
    holds free-form keys that hexchart passes through untouched.
    """

    machines: list[str] = field(default_factory=list)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    newsletter: NewsletterConfig = field(default_factory=NewsletterConfig)
    settings: dict[str, Any] = field(default_factory=dict)
