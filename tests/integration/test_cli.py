"""
Integration tests for the svcgen command-line tool.
"""

import pytest
from click.testing import CliRunner

from servicegen import __version__
from servicegen.cli.cli import cli

CONFLICTING_SVC = '''
service Items
  def get_item(self, id: str) -> str
  def fetch_item(self, id: str) -> str
end
'''


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def users_model(examples_dir):
    return str(examples_dir / "users" / "users.svc")


class TestValidate:
    def test_valid_model(self, runner, users_model):
        result = runner.invoke(cli, ["validate", users_model])

        assert result.exit_code == 0, result.output
        assert "Model validation success!" in result.output

    def test_extraction_errors(self, runner, write_svc_file):
        result = runner.invoke(cli, ["validate", str(write_svc_file(CONFLICTING_SVC))])

        assert result.exit_code == 1
        assert "Validation failed for 'Items'" in result.output
        assert "DuplicateRouteConflict" in result.output

    def test_syntax_error(self, runner, write_svc_file):
        result = runner.invoke(cli, ["validate", str(write_svc_file("service S\n  def (self)\nend\n"))])

        assert result.exit_code == 1
        assert "Validation failed" in result.output

    def test_missing_file(self, runner, temp_output_dir):
        result = runner.invoke(cli, ["validate", str(temp_output_dir / "nope.svc")])

        assert result.exit_code == 1


class TestInspect:
    def test_table(self, runner, users_model):
        result = runner.invoke(cli, ["inspect", users_model])

        assert result.exit_code == 0, result.output
        assert "UserService" in result.output


class TestGenerate:
    def test_targets(self, runner, users_model, temp_output_dir):
        result = runner.invoke(cli, [
            "generate", users_model, "-t", "grpc", "-t", "markdown", "--out", str(temp_output_dir),
        ])

        assert result.exit_code == 0, result.output
        assert sorted(p.name for p in temp_output_dir.iterdir()) == ["user_service.md", "user_service.proto"]

    def test_unknown_target(self, runner, users_model, temp_output_dir):
        result = runner.invoke(cli, ["generate", users_model, "-t", "soap", "--out", str(temp_output_dir)])

        assert result.exit_code == 1
        assert "UnknownBackend" in result.output

    def test_streaming_unsupported(self, runner, examples_dir, temp_output_dir):
        model = str(examples_dir / "events" / "events.svc")

        result = runner.invoke(cli, ["generate", model, "-t", "mcp", "--out", str(temp_output_dir / "out")])

        assert result.exit_code == 1
        assert "StreamingUnsupportedByBackend" in result.output
        assert not (temp_output_dir / "out").exists()


class TestCheck:
    @pytest.fixture
    def emitted(self, runner, users_model, temp_output_dir):
        runner.invoke(cli, ["generate", users_model, "-t", "openapi", "--out", str(temp_output_dir)])
        return temp_output_dir / "user_service.openapi.yaml"

    def test_up_to_date(self, runner, users_model, emitted):
        result = runner.invoke(cli, ["check", users_model, "--target", "openapi", "--against", str(emitted)])

        assert result.exit_code == 0, result.output

    def test_drift(self, runner, users_model, emitted):
        emitted.write_text(emitted.read_text().replace("Users API", "Old API"))

        result = runner.invoke(cli, ["check", users_model, "--target", "openapi", "--against", str(emitted)])

        assert result.exit_code == 1
        assert "Schema drift detected" in result.output

    def test_unknown_service(self, runner, users_model, emitted):
        result = runner.invoke(cli, [
            "check", users_model, "--target", "openapi", "--against", str(emitted), "--service", "Nope",
        ])

        assert result.exit_code == 2

    def test_missing_artifact(self, runner, users_model, temp_output_dir):
        result = runner.invoke(cli, [
            "check", users_model, "--target", "openapi", "--against", str(temp_output_dir / "missing.yaml"),
        ])

        assert result.exit_code == 2


class TestMisc:
    def test_backends(self, runner):
        result = runner.invoke(cli, ["backends"])

        assert result.exit_code == 0
        assert "smithy" in result.output
        assert "jsonrpc" in result.output

    def test_version(self, runner):
        assert f"svcgen, version {__version__}" in runner.invoke(cli, ["--version"]).output
