from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

from .urls import DEFAULT_BRIDGE_URL, normalize_bridge_url

APP = "mcpbridge"


def config_dir() -> Path:
    """
    Cross-platform config directory:
      - Windows: %APPDATA%\\mcpbridge
      - macOS/Linux: $XDG_CONFIG_HOME/mcpbridge or ~/.config/mcpbridge
    """
    if os.name == "nt":
        base = os.environ.get("APPDATA") or str(Path.home())
        return Path(base) / APP
    return Path(os.environ.get("XDG_CONFIG_HOME", str(Path.home() / ".config"))) / APP


def config_path() -> Path:
    return config_dir() / "config.json"


def default_store_path() -> Path:
    return config_dir() / "keyval-store.json"


def _str_or(value: Any, default: str) -> str:
    return value if isinstance(value, str) else default


def _float_or(value: Any, default: float) -> float:
    if isinstance(value, bool):
        return default
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


@dataclass
class Settings:
    store_path: str = ""          # key-value store file; empty = default location
    timeout_s: float = 30.0       # HTTP timeout for catalog fetches; stubs get at least 120s
    default_bridge_url: str = DEFAULT_BRIDGE_URL

    @staticmethod
    def load(path: Optional[Path] = None) -> "Settings":
        path = path or config_path()

        data: dict = {}

        if path.exists():
            try:
                data = json.loads(path.read_text(encoding="utf-8"))
            except Exception:
                data = {}
            if not isinstance(data, dict):
                data = {}

        s = Settings(
            store_path=_str_or(data.get("store_path"), Settings.store_path),
            timeout_s=_float_or(data.get("timeout_s"), Settings.timeout_s),
            default_bridge_url=_str_or(data.get("default_bridge_url"), Settings.default_bridge_url),
        )

        # Environment overrides (highest priority)
        s.store_path = os.environ.get("MCPBRIDGE_STORE", s.store_path)
        timeout = os.environ.get("MCPBRIDGE_TIMEOUT")
        if timeout:
            s.timeout_s = _float_or(timeout, s.timeout_s)
        s.default_bridge_url = os.environ.get("MCP_BRIDGE_URL", s.default_bridge_url)

        s.default_bridge_url = normalize_bridge_url(s.default_bridge_url)

        return s

    def resolved_store_path(self) -> Path:
        if self.store_path:
            return Path(self.store_path).expanduser()
        return default_store_path()

    def save(self, path: Optional[Path] = None) -> Path:
        path = path or config_path()
        path.parent.mkdir(parents=True, exist_ok=True)

        payload = {
            "store_path": self.store_path,
            "timeout_s": self.timeout_s,
            "default_bridge_url": self.default_bridge_url,
        }
        path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        return path
