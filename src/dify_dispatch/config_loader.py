# src/dify_dispatch/config_loader.py

from __future__ import annotations
from pathlib import Path
from typing import Any, Dict, Optional
import yaml

from .secrets.sources import build_secret_sources

APP_TYPES = ("chat", "completion", "workflow", "knowledge")


class ConfigError(ValueError):
    pass


def _require(d: Dict[str, Any], dotted: str, typ: type) -> Any:
    cur: Any = d
    for k in dotted.split("."):
        if not isinstance(cur, dict) or k not in cur:
            raise ConfigError(f"Missing config key: {dotted}")
        cur = cur[k]
    if typ is str and not isinstance(cur, str):
        raise ConfigError(f"'{dotted}' must be a string")
    return cur


def _optional_seconds(section: Dict[str, Any], key: str, dotted: str) -> Optional[float]:
    val = section.get(key)
    if val is None:
        return None
    if isinstance(val, bool) or not isinstance(val, (int, float)) or val <= 0:
        raise ConfigError(f"'{dotted}' must be a positive number of seconds")
    return float(val)


def load_config(path: Path) -> Dict[str, Any]:
    if not path or not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")
    try:
        raw = yaml.safe_load(path.read_text())
    except yaml.YAMLError as e:
        raise ConfigError(f"Config is not valid YAML: {path}: {e}") from e
    if not isinstance(raw, dict) or not raw:
        raise ConfigError(f"Config is empty or invalid YAML: {path}")

    # Required keys (no defaults here)
    _require(raw, "dify.app", str)

    dify = raw["dify"]
    app = str(dify["app"]).lower()
    if app not in APP_TYPES:
        raise ConfigError(f"Unknown dify.app '{app}' (expected one of {', '.join(APP_TYPES)}).")
    dify["app"] = app

    base_url = dify.get("base_url")
    if base_url is not None and not isinstance(base_url, str):
        raise ConfigError("'dify.base_url' must be a string")

    timeout = dify.get("timeout")
    if timeout is not None:
        if not isinstance(timeout, dict):
            raise ConfigError("'dify.timeout' must be a mapping with 'connect' and/or 'read'")
        dify["timeout"] = {
            "connect": _optional_seconds(timeout, "connect", "dify.timeout.connect"),
            "read": _optional_seconds(timeout, "read", "dify.timeout.read"),
        }

    secrets = raw.get("secrets")
    if secrets is not None and not isinstance(secrets, dict):
        raise ConfigError("'secrets' must be a mapping")
    if secrets and secrets.get("method") is not None:
        try:
            build_secret_sources(secrets["method"])
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Invalid secrets.method: {e}") from e

    level = (raw.get("logging") or {}).get("level")
    if level is not None:
        if not isinstance(level, str):
            raise ConfigError("'logging.level' must be a string")
        raw["logging"]["level"] = level.upper()

    return raw
