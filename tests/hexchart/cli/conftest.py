"""Fixtures shared by the CLI tests."""

import pytest
from typer.testing import CliRunner

SWITCH_YAML = """
apiVersion: hexchart/v1
kind: Machine
metadata:
  name: switch
spec:
  initial: "OFF"
  context:
    last: none
  events: [FLIP]
  states:
    "OFF":
      on:
        FLIP:
          target: "ON"
          actions:
            - assign_values: {last: "on"}
    "ON":
      on:
        FLIP:
          target: "OFF"
          actions:
            - assign_values: {last: "off"}
"""


@pytest.fixture
def runner():
    """Fixture providing a Typer CLI test runner."""
    return CliRunner()


@pytest.fixture
def switch_file(tmp_path):
    """A valid kind: Machine file."""
    path = tmp_path / "switch.yaml"
    path.write_text(SWITCH_YAML)
    return path


@pytest.fixture
def project_config(tmp_path, monkeypatch):
    """Write a kind: Config file and point HEXCHART_CONFIG_PATH at it."""
    from hexchart.compiler.config_loader import clear_config_cache

    for name in ("HEXCHART_LOG_LEVEL", "HEXCHART_LOG_FORMAT", "HEXCHART_LOG_FILE"):
        monkeypatch.delenv(name, raising=False)
    path = tmp_path / "hexchart.yaml"

    def write(spec: str):
        path.write_text(f"kind: Config\nspec:\n{spec}")
        monkeypatch.setenv("HEXCHART_CONFIG_PATH", str(path))
        clear_config_cache()
        return path

    yield write
    clear_config_cache()
