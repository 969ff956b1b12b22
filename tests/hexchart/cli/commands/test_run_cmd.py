"""Tests for hexchart.cli.commands.run_cmd."""

import pytest
import typer

from hexchart.cli.commands.run_cmd import parse_event
from hexchart.cli.main import app


class TestParseEvent:
    def test_plain_word(self):
        event = parse_event(" FLIP ")

        assert event.type == "FLIP"
        assert dict(event.data) == {}

    def test_flow_mapping_payload(self):
        event = parse_event("{type: SUBMIT, email: cool@cool.com}")

        assert event.type == "SUBMIT"
        assert event["email"] == "cool@cool.com"

    def test_mapping_without_type(self):
        with pytest.raises(typer.BadParameter):
            parse_event("{email: cool@cool.com}")

    def test_broken_mapping(self):
        with pytest.raises(typer.BadParameter):
            parse_event("{type: [unclosed")


class TestRun:
    """Test the run command."""

    def test_runs_event_sequence(self, runner, switch_file):
        result = runner.invoke(
            app, ["run", str(switch_file), "-e", "FLIP", "-e", "FLIP", "-e", "UNKNOWN"]
        )

        assert result.exit_code == 0
        assert "Machine: switch" in result.output
        assert "(start)" in result.output
        assert "UNKNOWN" in result.output
        assert "last='on'" in result.output
        assert "last='off'" in result.output

    def test_no_events_shows_initial_state(self, runner, switch_file):
        result = runner.invoke(app, ["run", str(switch_file)])

        assert result.exit_code == 0
        assert "last='none'" in result.output

    def test_payload_event(self, runner, switch_file):
        result = runner.invoke(app, ["run", str(switch_file), "-e", "{type: FLIP, by: cli}"])

        assert result.exit_code == 0
        assert "last='on'" in result.output

    def test_bad_event_is_usage_error(self, runner, switch_file):
        result = runner.invoke(app, ["run", str(switch_file), "-e", "{by: cli}"])

        assert result.exit_code == 2

    def test_load_failure_exits_with_error(self, runner, tmp_path):
        path = tmp_path / "broken.yaml"
        path.write_text("kind: Machine\nspec:\n  initial: A\n  states: {}\n")

        result = runner.invoke(app, ["run", str(path), "-e", "GO"])

        assert result.exit_code == 1
        assert "Run failed" in result.output


class TestRunConfiguredMachine:
    def test_runs_the_configured_machine(self, runner, switch_file, project_config):
        project_config(f"  machines: [{switch_file}]\n")

        result = runner.invoke(app, ["run", "-e", "FLIP"])

        assert result.exit_code == 0
        assert "switch" in result.output
        assert "FLIP" in result.output

    def test_several_configured_machines_need_an_argument(
        self, runner, switch_file, project_config
    ):
        project_config(f"  machines:\n    - {switch_file}\n    - {switch_file}\n")

        result = runner.invoke(app, ["run", "-e", "FLIP"])

        assert result.exit_code == 1
        assert "Several machines" in result.output
