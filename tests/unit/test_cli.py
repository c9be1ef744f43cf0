# tests/unit/test_cli.py

from __future__ import annotations
import sys
from pathlib import Path
from typer.testing import CliRunner

# Ensure "src" is importable
sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

import dify_dispatch.cli as cli  # Typer app lives here
from dify_dispatch.core.errors import TransportError
from dify_dispatch.core.payload import ResponseMode
from dify_dispatch.core.responses import BufferedResponse


# -------- fakes --------

class FakeStream:
    status = 200
    ok = True

    def __init__(self, chunks):
        self._chunks = chunks
        self.closed = False

    async def iter_chunks(self):
        for c in self._chunks:
            yield c

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        self.closed = True


class FakeChat:
    def __init__(self, result=None, error=None):
        self.calls = []
        self.result = result
        self.error = error

    async def create_chat_message(self, inputs, query, user, mode, conversation_id=None):
        self.calls.append((inputs, query, user, mode, conversation_id))
        if self.error:
            raise self.error
        return self.result


class FakeDify:
    def __init__(self):
        self.closed = False

    async def close(self):
        self.closed = True


def install(monkeypatch, app_client):
    dify = FakeDify()
    seen = {}

    def fake_build_client(config, app=None):
        seen["app"] = app
        return {"cfg": {"logging": {"level": "WARNING"}}, "dify_client": dify, "app_client": app_client}

    monkeypatch.setattr(cli, "build_client", fake_build_client)
    monkeypatch.setattr(cli, "init_logging", lambda *a, **k: None)
    return dify, seen


# -------- tests --------

def test_chat_block_prints_body(monkeypatch):
    chat = FakeChat(result=BufferedResponse(status=200, body=b'{"answer": "hi"}'))
    dify, seen = install(monkeypatch, chat)

    result = CliRunner().invoke(cli.app, ["chat", "hello", "--user", "u-1", "--inputs", '{"a": 1}'])

    assert result.exit_code == 0, result.output
    assert '{"answer": "hi"}' in result.output
    assert chat.calls == [({"a": 1}, "hello", "u-1", ResponseMode.BLOCK, None)]
    assert seen["app"] == "chat"
    assert dify.closed


def test_chat_stream_prints_chunks(monkeypatch):
    stream = FakeStream([b"data: one\n\n", b"data: two\n\n"])
    chat = FakeChat(result=stream)
    install(monkeypatch, chat)

    result = CliRunner().invoke(cli.app, ["chat", "hello", "--stream", "--conversation-id", "c-1"])

    assert result.exit_code == 0, result.output
    assert "data: one" in result.output and "data: two" in result.output
    assert chat.calls[0][3] is ResponseMode.STREAM
    assert chat.calls[0][4] == "c-1"
    assert stream.closed


def test_non_success_status_exits_1(monkeypatch):
    chat = FakeChat(result=BufferedResponse(status=400, body=b'{"error":"bad"}'))
    install(monkeypatch, chat)

    result = CliRunner().invoke(cli.app, ["chat", "hello"])

    assert result.exit_code == 1
    assert '{"error":"bad"}' in result.output


def test_transport_error_exits_2(monkeypatch):
    install(monkeypatch, FakeChat(error=TransportError("connection refused")))

    result = CliRunner().invoke(cli.app, ["chat", "hello"])

    assert result.exit_code == 2


def test_inputs_must_be_json_object(monkeypatch):
    install(monkeypatch, FakeChat())

    result = CliRunner().invoke(cli.app, ["chat", "hello", "--inputs", "[1, 2]"])

    assert result.exit_code != 0


def test_missing_config_file_exits_2(tmp_path: Path):
    result = CliRunner().invoke(cli.app, ["parameters", "--config", str(tmp_path / "nope.yaml")])
    assert result.exit_code == 2


def test_bad_secrets_method_exits_2(tmp_path: Path):
    cfg = tmp_path / "default.yaml"
    cfg.write_text("dify: { app: chat }\nsecrets: { method: vault }\n", encoding="utf-8")
    result = CliRunner().invoke(cli.app, ["parameters", "--config", str(cfg)])
    assert result.exit_code == 2


def test_malformed_yaml_config_exits_2(tmp_path: Path):
    cfg = tmp_path / "default.yaml"
    cfg.write_text("dify: { app: chat\n  base_url: [\n", encoding="utf-8")
    result = CliRunner().invoke(cli.app, ["parameters", "--config", str(cfg)])
    assert result.exit_code == 2
