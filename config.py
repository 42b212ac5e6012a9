from __future__ import annotations

import os
import yaml
from pathlib import Path
from typing import Dict, Any

DEFAULT_API_URL = "http://localhost:5000/api"
DEFAULT_TIMEOUT_SECONDS = 30.0


def user_config_path() -> Path:
    override = os.environ.get("TASKDECK_CONFIG", "").strip()
    return Path(override).expanduser() if override else Path.home() / ".taskdeck_config.yaml"


def _load_config(path: Path | None = None) -> Dict[str, Any]:
    path = path or user_config_path()
    if not path.exists():
        return {}
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except (OSError, yaml.YAMLError):
        return {}
    return data if isinstance(data, dict) else {}


def _save_config(data: Dict[str, Any], path: Path | None = None) -> None:
    path = path or user_config_path()
    if not data:
        if path.exists():
            path.unlink()
        return
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(yaml.safe_dump(data, allow_unicode=True), encoding="utf-8")


def get_user_token(path: Path | None = None) -> str:
    return str(_load_config(path).get("token", "") or "")


def set_user_token(value: str, path: Path | None = None) -> None:
    data = _load_config(path)
    value = (value or "").strip()
    if value:
        data["token"] = value
    else:
        data.pop("token", None)
    _save_config(data, path)


def get_api_url(path: Path | None = None) -> str:
    env = os.environ.get("TASKDECK_API_URL", "").strip()
    if env:
        return env.rstrip("/")
    value = str(_load_config(path).get("api_url", "") or "").strip()
    return (value or DEFAULT_API_URL).rstrip("/")


def set_api_url(value: str, path: Path | None = None) -> None:
    data = _load_config(path)
    value = (value or "").strip()
    if value:
        data["api_url"] = value
    else:
        data.pop("api_url", None)
    _save_config(data, path)


def get_request_timeout(path: Path | None = None) -> float:
    raw = os.environ.get("TASKDECK_TIMEOUT", "").strip() or _load_config(path).get("timeout")
    try:
        value = float(raw) if raw not in (None, "") else DEFAULT_TIMEOUT_SECONDS
    except (TypeError, ValueError):
        return DEFAULT_TIMEOUT_SECONDS
    return value if value > 0 else DEFAULT_TIMEOUT_SECONDS
