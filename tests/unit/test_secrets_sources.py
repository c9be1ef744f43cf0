# tests/unit/test_secrets_sources.py

from __future__ import annotations
import sys
from pathlib import Path
import pytest

# Make "src" importable
sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

from dify_dispatch.secrets.sources import (
    SecretsResolver,
    build_secret_sources,
)


def test_method_string_and_list(monkeypatch):
    # exact env var name via mapping
    monkeypatch.setenv("DIFY_API_KEY", "app-env")
    r1 = SecretsResolver(method="env", mapping={"dify": {"api_key": "DIFY_API_KEY"}})
    assert r1.secret("dify") == "app-env"

    # service name -> derived env var
    r2 = SecretsResolver(method=["env"], mapping={"dify": {"api_key": "dify"}})
    assert r2.secret("dify") == "app-env"

    # no mapping at all falls back to the service name
    assert SecretsResolver(method="env").secret() == "app-env"


def test_missing_secret_is_none(monkeypatch):
    monkeypatch.delenv("DIFY_API_KEY", raising=False)
    monkeypatch.delenv("DIFY", raising=False)
    assert SecretsResolver(method="env").secret("dify") is None


def test_unknown_method_raises():
    with pytest.raises(ValueError):
        build_secret_sources("nope")


def test_keyring_then_env(monkeypatch):
    monkeypatch.setenv("DIFY_API_KEY", "app-from-env")

    # Fake keyring that returns a value first
    class FakeKeyring:
        def get_credential(self, service, _):
            class Cred:
                password = "app-from-keyring"
            return Cred()
        def get_password(self, *args, **kwargs):
            return None

    import dify_dispatch.secrets.sources as src
    monkeypatch.setattr(src, "_keyring", FakeKeyring(), raising=True)

    r = SecretsResolver(method=["keyring", "env"], mapping={"dify": {"api_key": "dify"}})
    assert r.secret("dify") == "app-from-keyring"

    # Now make keyring miss -> env wins
    class KR2:
        def get_credential(self, *_): return None
        def get_password(self, *_): return None
    monkeypatch.setattr(src, "_keyring", KR2(), raising=True)

    r2 = SecretsResolver(method=["keyring", "env"], mapping={"dify": {"api_key": "dify"}})
    assert r2.secret("dify") == "app-from-env"


def test_broken_keyring_backend_counts_as_miss(monkeypatch):
    monkeypatch.setenv("DIFY_API_KEY", "app-from-env")

    class Broken:
        def get_credential(self, *_): raise RuntimeError("no backend")
        def get_password(self, *_): raise RuntimeError("no backend")

    import dify_dispatch.secrets.sources as src
    monkeypatch.setattr(src, "_keyring", Broken(), raising=True)
    r = SecretsResolver(method=["keyring", "env"])
    assert r.secret("dify") == "app-from-env"
