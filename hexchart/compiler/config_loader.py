"""Project configuration for hexchart.

Configuration comes from one of two places:

- a ``kind: Config`` YAML manifest, named explicitly or via
  ``HEXCHART_CONFIG_PATH``;
- the ``[tool.hexchart]`` table of the nearest ``pyproject.toml``.

``${VAR}`` placeholders in string values are filled from the environment and
``HEXCHART_LOG_*`` variables override the ``logging`` section. Parsed files
are cached by absolute path until :func:`clear_config_cache` is called.

Example manifest::

    kind: Config
    spec:
      machines: [machines/toggle.yaml]
      logging:
        level: DEBUG
      newsletter:
        url: https://${SIGNUP_HOST}/posts/1
        timeout: 5
"""

from __future__ import annotations

import os
import re
import tomllib
from collections.abc import Callable, Iterator
from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml

from hexchart.kernel.config.models import HexChartConfig, LoggingConfig, NewsletterConfig
from hexchart.kernel.exceptions import ConfigurationError
from hexchart.kernel.logging import get_logger

logger = get_logger(__name__)

CONFIG_PATH_ENV = "HEXCHART_CONFIG_PATH"

_PLACEHOLDER = re.compile(r"\$\{([^}]+)\}")
_TRUE_WORDS = frozenset({"true", "1", "yes", "on", "enabled"})
_FALSE_WORDS = frozenset({"false", "0", "no", "off", "disabled"})


def _parse_bool_env(value: str) -> bool:
    """Read a boolean flag written the way people write them in shells.

    Raises
    ------
    ValueError
        If ``value`` is none of the accepted words.
    """
    word = value.strip().lower()
    if word in _TRUE_WORDS or word in _FALSE_WORDS:
        return word in _TRUE_WORDS
    accepted = sorted(_TRUE_WORDS | _FALSE_WORDS)
    raise ValueError(f"Invalid boolean value: {value!r}. Expected one of: {accepted}")


def _expand_placeholders(data: Any) -> Any:
    """Replace ``${VAR}`` in every string of a nested structure.

    Variables missing from the environment are left as written.
    """
    if isinstance(data, dict):
        return {key: _expand_placeholders(value) for key, value in data.items()}
    if isinstance(data, list):
        return [_expand_placeholders(item) for item in data]
    if not isinstance(data, str):
        return data

    def lookup(match: re.Match[str]) -> str:
        value = os.environ.get(match.group(1))
        if value is None:
            logger.debug("No environment value for {placeholder}", placeholder=match.group(0))
            return match.group(0)
        return value

    return _PLACEHOLDER.sub(lookup, data)


def _has_hexchart_table(pyproject: Path) -> bool:
    with pyproject.open("rb") as f:
        return "hexchart" in tomllib.load(f).get("tool", {})


# ---------------------------------------------------------------------------
# Environment overrides for the logging section
# ---------------------------------------------------------------------------

_LOGGING_OVERRIDES: tuple[tuple[str, str, Callable[[str], Any]], ...] = (
    ("HEXCHART_LOG_LEVEL", "level", str.upper),
    ("HEXCHART_LOG_FORMAT", "format", str.lower),
    ("HEXCHART_LOG_FILE", "output_file", str),
    ("HEXCHART_LOG_COLOR", "use_color", _parse_bool_env),
    ("HEXCHART_LOG_TIMESTAMP", "include_timestamp", _parse_bool_env),
)


def _logging_config(section: dict[str, Any]) -> LoggingConfig:
    options = {
        "level": section.get("level", "INFO"),
        "format": section.get("format", "structured"),
        "output_file": section.get("output_file"),
        "use_color": section.get("use_color", True),
        "include_timestamp": section.get("include_timestamp", True),
    }
    for variable, option, convert in _LOGGING_OVERRIDES:
        raw = os.getenv(variable)
        if not raw:
            continue
        try:
            options[option] = convert(raw)
        except ValueError as e:
            logger.warning("Ignoring {variable}: {error}", variable=variable, error=e)
            continue
        logger.debug("logging.{option} taken from {variable}", option=option, variable=variable)
    return LoggingConfig(**options)


def _newsletter_config(section: dict[str, Any]) -> NewsletterConfig:
    defaults = NewsletterConfig()
    return NewsletterConfig(
        url=section.get("url", defaults.url),
        timeout=float(section.get("timeout", defaults.timeout)),
    )


# ---------------------------------------------------------------------------
# Loader
# ---------------------------------------------------------------------------


class ConfigLoader:
    """Locates, reads and parses a hexchart configuration file."""

    def load_config_file(self, path: str | Path | None = None) -> HexChartConfig:
        """Load the configuration at ``path``, or the first one discovered.

        Raises
        ------
        FileNotFoundError
            If ``path`` does not exist, or nothing was discovered.
        ConfigurationError
            If a YAML file is not a ``kind: Config`` manifest.
        """
        return _parse_cached(str(self._locate(path).absolute()))

    def parse(self, config_path: Path) -> HexChartConfig:
        """Read ``config_path`` without consulting the cache."""
        logger.info("Loading configuration from {path}", path=config_path)
        if config_path.suffix in {".yaml", ".yml"}:
            section = self._yaml_section(config_path)
        else:
            section = self._toml_section(config_path)
        if section is None:
            return get_default_config()
        return self._build(_expand_placeholders(section))

    def _locate(self, path: str | Path | None) -> Path:
        if path:
            explicit = Path(path)
            if not explicit.exists():
                raise FileNotFoundError(f"Configuration file not found: {explicit}")
            return explicit
        if (discovered := next(self._candidates(), None)) is not None:
            return discovered
        raise FileNotFoundError(
            "No configuration file found. Provide a kind: Config YAML path, "
            f"set {CONFIG_PATH_ENV}, or add [tool.hexchart] to pyproject.toml"
        )

    def _candidates(self) -> Iterator[Path]:
        """Yield discovered files: the env path, ./pyproject.toml, then ancestors."""
        if env_path := os.getenv(CONFIG_PATH_ENV):
            if Path(env_path).exists():
                yield Path(env_path)
            else:
                logger.warning(
                    "{var} points to a missing file: {path}", var=CONFIG_PATH_ENV, path=env_path
                )
        if Path("pyproject.toml").exists():
            yield Path("pyproject.toml")
        for directory in Path.cwd().parents:
            pyproject = directory / "pyproject.toml"
            if pyproject.exists() and _has_hexchart_table(pyproject):
                yield pyproject

    def _yaml_section(self, config_path: Path) -> dict[str, Any]:
        document = yaml.safe_load(config_path.read_text(encoding="utf-8"))
        source = config_path.name
        if not isinstance(document, dict):
            raise ConfigurationError(source, f"expected a mapping, got {type(document).__name__}")
        if (kind := document.get("kind")) != "Config":
            raise ConfigurationError(
                source, f"must use 'kind: Config' manifest format, got 'kind: {kind}'"
            )
        spec = document.get("spec", {})
        if not isinstance(spec, dict):
            raise ConfigurationError(source, "'spec' must be a mapping")
        return spec

    def _toml_section(self, config_path: Path) -> dict[str, Any] | None:
        with config_path.open("rb") as f:
            document = tomllib.load(f)
        section = document.get("tool", {}).get("hexchart")
        if section:
            return section
        if config_path.name == "pyproject.toml":
            logger.warning("pyproject.toml has no [tool.hexchart] table, using defaults")
            return None
        return document

    def _build(self, data: dict[str, Any]) -> HexChartConfig:
        config = HexChartConfig(logging=_logging_config(data.get("logging", {})))
        if "machines" in data:
            config.machines = list(data["machines"])
        if "newsletter" in data:
            config.newsletter = _newsletter_config(data["newsletter"])
        if "settings" in data:
            config.settings = data["settings"]
        logger.debug(
            "Parsed configuration with {machines} machines and {settings} settings",
            machines=len(config.machines),
            settings=len(config.settings),
        )
        return config


@lru_cache(maxsize=32)
def _parse_cached(path: str) -> HexChartConfig:
    return ConfigLoader().parse(Path(path))


def load_config(path: str | Path | None = None) -> HexChartConfig:
    """Load configuration, falling back to defaults when no file is found."""
    try:
        return ConfigLoader().load_config_file(path)
    except FileNotFoundError:
        logger.info("No configuration file found, using defaults")
        return get_default_config()


def clear_config_cache() -> None:
    """Forget cached files, e.g. after a configuration file was edited."""
    _parse_cached.cache_clear()


def get_default_config() -> HexChartConfig:
    return HexChartConfig()
