from __future__ import annotations
import os
from pathlib import Path
from typing import Any, Dict, Optional

import aiohttp
from dotenv import load_dotenv

from .config_loader import load_config, ConfigError
from .apps.registry import AppRegistry
from .client import DifyClient
from .secrets.sources import SecretsResolver

BASE_URL_ENV = "DIFY_BASE_API"


def build_timeout(timeout_cfg: Optional[Dict[str, Any]]) -> Optional[aiohttp.ClientTimeout]:
    # Connect and per-read limits only; no cap on total duration.
    if not timeout_cfg:
        return None
    return aiohttp.ClientTimeout(
        total=None,
        connect=timeout_cfg.get("connect"),
        sock_read=timeout_cfg.get("read"),
    )


def build_client(config_path: Path, app: Optional[str] = None) -> Dict[str, Any]:
    """
    Composition root: load YAML and .env, resolve the API key, and build the
    app client named by dify.app (or the `app` override).
    Returns: dict with cfg, dify_client, app_client.
    """
    load_dotenv()
    cfg = load_config(config_path)
    dify_cfg = cfg["dify"]
    if app:
        dify_cfg["app"] = str(app).lower()

    secrets_cfg = cfg.get("secrets") or {}
    method = secrets_cfg.get("method", "env")
    mapping = secrets_cfg.get("mapping", {})
    resolver = SecretsResolver(method=method, mapping=mapping)

    api_key = resolver.secret("dify", "api_key")
    if not api_key:
        raise ConfigError("No API key for 'dify' (set DIFY_API_KEY or configure secrets)")

    # Config wins, then the environment, then the vendor default inside DifyClient.
    base_url = dify_cfg.get("base_url") or os.getenv(BASE_URL_ENV) or None

    client = DifyClient(api_key, base_url, timeout=build_timeout(dify_cfg.get("timeout")))

    AppRegistry.ensure_imports()  # make sure built-ins register
    try:
        App = AppRegistry.get(dify_cfg["app"])
    except KeyError as e:
        raise ConfigError(str(e)) from e
    app_client = App.create(client=client, app_cfg=dify_cfg)

    return {
        "cfg": cfg,
        "dify_client": client,
        "app_client": app_client,
    }
