"""
Integration tests for generated code in a block that declares its own
`record Context` next to methods taking `servicegen.Context`.

The user record is an ordinary structured value everywhere; only the
qualified spelling is injected by the transport.
"""

import asyncio
import json

import pytest
from click.testing import CliRunner
from fastapi import FastAPI
from fastapi.testclient import TestClient
from pydantic import BaseModel

from servicegen.api.generators import render_cli, render_http, render_jsonrpc, render_mcp, render_ws
from servicegen.api.pipeline import extract_services
from servicegen.config import get_settings
from servicegen.language import build_model
from servicegen.runtime import Context

CONVERSATION = {"topic": "rust", "history": ["hi", "hello"]}


class Chat:
    def handler(self, ctx, message):
        return f"{ctx.topic}: {message} ({len(ctx.history)} before)"

    def whoami(self, request):
        return request.user_id

    def ping(self):
        return "pong"


@pytest.fixture
def chat_service(examples_dir):
    return extract_services(build_model(str(examples_dir / "chat" / "chat.svc")))[0]


@pytest.fixture
def generated(chat_service, load_generated):
    def _build(render):
        files = render(chat_service, get_settings())
        [filename] = [name for name in files if name.endswith(".py")]
        return load_generated(files[filename], filename[:-3])
    return _build


class TestHttp:
    @pytest.fixture
    def client(self, generated):
        module = generated(render_http)
        return TestClient(module.create_app(Chat()))

    def test_record_is_a_pydantic_model(self, generated):
        module = generated(render_http)

        assert issubclass(module.Context, BaseModel)
        assert set(module.Context.model_fields) == {"topic", "history"}

    def test_qualified_context_is_injected(self, client):
        response = client.post("/rpc/whoami", headers={"x-user-id": "u1"})

        assert response.status_code == 200, response.text
        assert response.json() == "u1"

    def test_record_context_comes_from_the_body(self, client):
        response = client.post("/rpc/handler", json={"ctx": CONVERSATION, "message": "yo"})

        assert response.status_code == 200, response.text
        assert response.json() == "rust: yo (2 before)"

    def test_unrelated_method(self, client):
        assert client.post("/rpc/ping").json() == "pong"


class TestJsonRpc:
    @pytest.fixture
    def module(self, generated):
        return generated(render_jsonrpc)

    def test_default_context(self, module):
        response = module.handle_request(Chat(), {"jsonrpc": "2.0", "method": "whoami", "id": 1})

        assert response == {"jsonrpc": "2.0", "result": None, "id": 1}

    def test_transport_context(self, module):
        context = Context.from_headers({"x-user-id": "u1"})

        response = module.handle_request(Chat(), {"jsonrpc": "2.0", "method": "whoami", "id": 1}, context)

        assert response["result"] == "u1"

    def test_record_argument(self, module):
        params = {"ctx": CONVERSATION, "message": "yo"}

        assert module.dispatch(Chat(), "handler", params) == "rust: yo (2 before)"
        assert module.dispatch(Chat(), "ping") == "pong"

    def test_http_endpoint(self, module):
        app = FastAPI()
        app.include_router(module.create_router(Chat()))

        response = TestClient(app).post(
            "/rpc", json={"jsonrpc": "2.0", "method": "whoami", "id": 7}, headers={"x-user-id": "u9"},
        )

        assert response.json()["result"] == "u9"


class TestWebSocket:
    def test_handle_message(self, generated):
        module = generated(render_ws)
        context = Context.from_headers({"x-user-id": "u2"})

        whoami = asyncio.run(module.handle_message(Chat(), {"id": 1, "method": "whoami"}, context))
        handled = asyncio.run(module.handle_message(
            Chat(), {"id": 2, "method": "handler", "params": {"ctx": CONVERSATION, "message": "yo"}},
        ))

        assert whoami == {"id": 1, "result": "u2"}
        assert handled == {"id": 2, "result": "rust: yo (2 before)"}


class TestMcp:
    def test_tools(self, generated):
        module = generated(render_mcp)

        result = module.call_tool(Chat(), "handler", {"ctx": CONVERSATION, "message": "yo"})
        whoami = module.call_tool(Chat(), "whoami")

        assert result == {"content": [{"type": "text", "text": '"rust: yo (2 before)"'}], "isError": False}
        assert whoami["isError"] is False
        assert json.loads(whoami["content"][0]["text"]) is None


class TestCli:
    @pytest.fixture
    def run(self, generated):
        module = generated(render_cli)
        runner = CliRunner()

        def _run(*args):
            return runner.invoke(module.cli, list(args), obj=Chat())
        return _run

    def test_record_option(self, run):
        result = run("handler", "--ctx", json.dumps(CONVERSATION), "--message", "yo")

        assert result.exit_code == 0, result.output
        assert json.loads(result.output) == "rust: yo (2 before)"

    def test_context_is_not_an_option(self, run):
        result = run("whoami")

        assert result.exit_code == 0, result.output
        assert json.loads(result.output) is None
        assert run("whoami", "--request", "{}").exit_code == 2
