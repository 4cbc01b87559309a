"""
Integration tests for the generated click command-line module.
"""

import json

import pytest
from click.testing import CliRunner

from servicegen import Failure
from servicegen.api.generators import render_cli
from servicegen.config import get_settings


@pytest.fixture
def cli_files(extract, users_svc):
    return render_cli(extract(users_svc), get_settings())


@pytest.fixture
def cli_module(cli_files, load_generated):
    return load_generated(cli_files["user_service_cli.py"], "user_service_cli")


@pytest.fixture
def run(cli_module, users_impl):
    runner = CliRunner()

    def _run(*args):
        return runner.invoke(cli_module.cli, list(args), obj=users_impl)
    return _run


class TestCommandTree:
    def test_files(self, cli_files):
        assert set(cli_files) == {"user_service_cli.py", "user_service.cli.json"}

    def test_tree(self, cli_files):
        tree = json.loads(cli_files["user_service.cli.json"])

        assert (tree["name"], tree["version"], tree["about"]) == ("users", "2.0.0", "Manage users")
        assert [c["name"] for c in tree["commands"]] == [
            "create-user", "get-user", "list-users", "delete-user", "ping", "reset",
        ]

    def test_arguments_and_options(self, cli_files):
        commands = {c["name"]: c for c in json.loads(cli_files["user_service.cli.json"])["commands"]}

        assert [a["name"] for a in commands["get-user"]["arguments"]] == ["id"]
        assert [o["flag"] for o in commands["create-user"]["options"]] == ["--name", "--email"]
        assert commands["list-users"]["options"][0]["required"] is False
        assert commands["ping"]["options"] == []
        assert commands["reset"]["hidden"] is True

    def test_module_carries_the_tree(self, cli_module, cli_files):
        assert cli_module.COMMAND_TREE == json.loads(cli_files["user_service.cli.json"])


class TestGeneratedCli:
    def test_create_and_get(self, run):
        created = run("create-user", "--name", "Ada", "--email", "ada@example.com")
        fetched = run("get-user", "1")

        assert created.exit_code == 0, created.output
        assert json.loads(created.output)["name"] == "Ada"
        assert json.loads(fetched.output)["email"] == "ada@example.com"

    def test_absent_value(self, run):
        result = run("get-user", "42")

        assert result.exit_code == 0
        assert result.output.strip() == "null"

    def test_failure_value_exits_with_its_code(self, run):
        result = run("create-user", "--name", "Ada", "--email", "nope")

        assert result.exit_code == 2
        assert "invalid_email" in result.output

    @pytest.mark.parametrize("payload,exit_code", [
        ({"code": "user_not_found"}, 1),
        ({"code": "permission_denied"}, 3),
        ({"code": "email_exists"}, 4),
        ({"code": "throttled"}, 5),
        ({"message": "unclassified"}, 1),
    ])
    def test_exit_code_follows_error_code(self, run, users_impl, payload, exit_code):
        users_impl.create_user = lambda name, email: Failure(payload)

        result = run("create-user", "--name", "Ada", "--email", "ada@example.com")

        assert result.exit_code == exit_code

    def test_missing_required_option(self, run):
        result = run("create-user", "--name", "Ada")

        assert result.exit_code == 2
        assert "--email" in result.output

    def test_typed_option(self, run):
        for name in ("a", "b", "c"):
            run("create-user", "--name", name, "--email", f"{name}@x")

        assert len(json.loads(run("list-users", "--limit", "2").output)) == 2
        assert len(json.loads(run("list-users").output)) == 3
        assert run("list-users", "--limit", "many").exit_code == 2

    def test_unit_result(self, run):
        result = run("delete-user", "1")

        assert result.exit_code == 0
        assert json.loads(result.output) == {}

    def test_async_method(self, run, users_impl):
        result = run("ping")

        assert result.exit_code == 0
        assert result.output.strip() == '"pong"'
        assert users_impl.seen_context.request_id

    def test_hidden_command(self, run):
        assert "reset" not in run("--help").output
        assert run("reset").exit_code == 0

    def test_suppressed_method_has_no_command(self, run):
        assert run("internal-stats").exit_code == 2

    def test_version(self, run):
        assert "users, version 2.0.0" in run("--version").output

    def test_main(self, cli_module, users_impl, capsys):
        with pytest.raises(SystemExit) as info:
            cli_module.main(users_impl, ["reset"])

        assert info.value.code == 0
        assert capsys.readouterr().out.strip() == "0"


class TagsImpl:
    def tag_user(self, id, tags, notify=None):
        return {"id": id, "tags": tags, "notify": notify}

    def watch_tags(self, id):
        yield from ["a", "b"]


TAGS_SVC = '''
service TagService
  def tag_user(self, id: str, tags: List[str], notify: Optional[bool]) -> Dict[str, str]
  def watch_tags(self, id: str) -> Iterator[str]
end
'''


class TestStructuredOptions:
    @pytest.fixture
    def run_tags(self, extract, load_generated):
        files = render_cli(extract(TAGS_SVC), get_settings())
        module = load_generated(files["tag_service_cli.py"], "tag_service_cli")
        runner = CliRunner()

        def _run(*args):
            return runner.invoke(module.cli, list(args), obj=TagsImpl())
        return _run

    def test_json_option(self, run_tags):
        result = run_tags("tag-user", "7", "--tags", '["x", "y"]', "--notify")

        assert result.exit_code == 0, result.output
        assert json.loads(result.output) == {"id": "7", "tags": ["x", "y"], "notify": True}

    def test_bad_json(self, run_tags):
        result = run_tags("tag-user", "7", "--tags", "[x")

        assert result.exit_code == 2
        assert "expected JSON" in result.output

    def test_stream_prints_one_line_per_item(self, run_tags):
        result = run_tags("watch-tags", "7")

        assert result.output.splitlines() == ['"a"', '"b"']
