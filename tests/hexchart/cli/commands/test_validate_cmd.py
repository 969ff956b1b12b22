"""Tests for hexchart.cli.commands.validate_cmd."""

from hexchart.cli.main import app


class TestValidate:
    """Test the validate command."""

    def test_valid_machine(self, runner, switch_file):
        result = runner.invoke(app, ["validate", str(switch_file)])

        assert result.exit_code == 0
        assert "Validation successful" in result.output
        assert "switch" in result.output

    def test_states_table(self, runner, switch_file):
        result = runner.invoke(app, ["validate", str(switch_file), "--states"])

        assert result.exit_code == 0
        assert "FLIP" in result.output
        assert "initial" in result.output

    def test_invalid_machine_exits_with_error(self, runner, tmp_path):
        path = tmp_path / "broken.yaml"
        path.write_text('kind: Machine\nspec:\n  initial: "B"\n  states:\n    "A": {}\n')

        result = runner.invoke(app, ["validate", str(path)])

        assert result.exit_code == 1
        assert "Validation failed" in result.output

    def test_missing_file_is_usage_error(self, runner, tmp_path):
        result = runner.invoke(app, ["validate", str(tmp_path / "missing.yaml")])

        assert result.exit_code == 2


class TestValidateConfiguredMachines:
    """validate without a file argument uses the project's machines list."""

    def test_validates_every_configured_machine(self, runner, switch_file, project_config):
        project_config(f"  machines:\n    - {switch_file}\n")

        result = runner.invoke(app, ["validate"])

        assert result.exit_code == 0
        assert "Validation successful" in result.output
        assert "switch" in result.output

    def test_missing_configured_machine_fails(
        self, runner, switch_file, project_config, tmp_path
    ):
        project_config(f"  machines:\n    - {switch_file}\n    - {tmp_path / 'gone.yaml'}\n")

        result = runner.invoke(app, ["validate"])

        assert result.exit_code == 1
        assert "Validation successful" in result.output
        assert "Validation failed" in result.output

    def test_nothing_given_and_nothing_configured(self, runner, project_config):
        project_config("  settings: {}\n")

        result = runner.invoke(app, ["validate"])

        assert result.exit_code == 1
        assert "No machine file given" in result.output
