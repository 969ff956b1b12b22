"""Loguru setup shared by the interpreter, the loaders and the CLI.

Modules take a bound logger once at import time::

    from hexchart.kernel.logging import get_logger

    logger = get_logger(__name__)
    logger.debug("Service {name} started", name="toggle")

The first :func:`get_logger` call installs a stderr handler whose level and
format come from ``HEXCHART_LOG_LEVEL`` and ``HEXCHART_LOG_FORMAT``.
:func:`configure_logging` replaces it explicitly; calling it again with the
same settings changes nothing.
"""

from __future__ import annotations

import os
import sys
from collections.abc import Callable
from contextlib import suppress
from functools import lru_cache
from pathlib import Path
from typing import TYPE_CHECKING, Any, Literal

from loguru import logger
from rich.logging import RichHandler

if TYPE_CHECKING:
    from loguru import Logger

    from hexchart.kernel.config.models import LoggingConfig

LogLevel = Literal["TRACE", "DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
LogFormat = Literal["console", "json", "structured", "rich"]

_CURRENT_CONFIG: dict[str, Any] | None = None
_HANDLER_IDS: list[int] = []


# ---------------------------------------------------------------------------
# Handler options per format
# ---------------------------------------------------------------------------


def _timestamp(settings: dict[str, Any], markup: str = "{time:YYYY-MM-DD HH:mm:ss}") -> str:
    return f"{markup} " if settings["include_timestamp"] else ""


def _console_handler(settings: dict[str, Any]) -> dict[str, Any]:
    line = _timestamp(settings) + "{level: <8} | {name} | {message}"
    return {"sink": sys.stderr, "format": line, "colorize": False}


def _json_handler(settings: dict[str, Any]) -> dict[str, Any]:
    return {"sink": sys.stderr, "serialize": True}


def _structured_handler(settings: dict[str, Any]) -> dict[str, Any]:
    colorize = settings["use_color"] and sys.stderr.isatty()
    level = "<level>{level: <8}</level>" if colorize else "{level: <8}"
    line = (
        _timestamp(settings, "<green>{time:YYYY-MM-DD HH:mm:ss}</green>")
        + f"[{level}]<cyan>{{name}}:{{function}}:{{line}}</cyan> | <level>{{message}}</level>"
    )
    return {"sink": sys.stderr, "format": line, "colorize": colorize}


def _rich_handler(settings: dict[str, Any]) -> dict[str, Any]:
    sink = RichHandler(
        rich_tracebacks=True,
        markup=True,
        show_time=settings["include_timestamp"],
        show_path=True,
    )
    return {"sink": sink, "format": "{message}"}


_HANDLER_BUILDERS: dict[str, Callable[[dict[str, Any]], dict[str, Any]]] = {
    "console": _console_handler,
    "json": _json_handler,
    "structured": _structured_handler,
    "rich": _rich_handler,
}


def _drop_own_handlers() -> None:
    # handlers added by other code (pytest capture, user sinks) stay installed
    while _HANDLER_IDS:
        with suppress(ValueError):
            logger.remove(_HANDLER_IDS.pop())


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def configure_logging(
    level: LogLevel = "INFO",
    format: LogFormat = "structured",
    output_file: str | Path | None = None,
    use_color: bool = True,
    include_timestamp: bool = True,
    force_reconfigure: bool = False,
) -> None:
    """Install hexchart's log handlers, replacing any it installed before.

    Parameters
    ----------
    level : LogLevel
        Minimum level written by every handler.
    format : LogFormat
        ``"console"`` plain lines, ``"json"`` one serialized record per line,
        ``"structured"`` coloured lines with the call site, ``"rich"`` a
        :class:`rich.logging.RichHandler`. Unknown names fall back to console.
    output_file : str | Path | None
        Extra JSON handler writing to this file, rotated at 10 MB.
    use_color : bool
        Colour the structured format; ignored when stderr is not a TTY.
    include_timestamp : bool
        Prefix lines with the time.
    force_reconfigure : bool
        Reinstall handlers even when the settings are unchanged.
    """
    global _CURRENT_CONFIG

    settings: dict[str, Any] = {
        "level": level,
        "format": format,
        "output_file": str(output_file) if output_file else None,
        "use_color": use_color,
        "include_timestamp": include_timestamp,
    }
    if settings == _CURRENT_CONFIG and not force_reconfigure:
        return

    _drop_own_handlers()
    build = _HANDLER_BUILDERS.get(format, _console_handler)
    _HANDLER_IDS.append(logger.add(level=level, **build(settings)))

    if output_file:
        path = Path(output_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        _HANDLER_IDS.append(
            logger.add(path, level=level, serialize=True, rotation="10 MB", retention="1 week")
        )

    _CURRENT_CONFIG = settings


def configure_from_config(config: LoggingConfig) -> None:
    """Apply the ``logging`` section of a loaded :class:`HexChartConfig`."""
    configure_logging(
        level=config.level,
        format=config.format,
        output_file=config.output_file,
        use_color=config.use_color,
        include_timestamp=config.include_timestamp,
    )


@lru_cache(maxsize=256)
def get_logger(name: str) -> Logger:
    """Return the shared loguru logger bound with ``module=name``."""
    if _CURRENT_CONFIG is None:
        configure_logging(
            level=os.getenv("HEXCHART_LOG_LEVEL", "INFO").upper(),  # type: ignore[arg-type]
            format=os.getenv("HEXCHART_LOG_FORMAT", "structured").lower(),  # type: ignore[arg-type]
        )
    return logger.bind(module=name)
