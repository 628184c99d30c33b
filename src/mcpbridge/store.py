"""Key-value persistence for the bridge URL and the plugin collection.

The host keeps both records in one key-value store. ``JsonFileStore`` keeps
that store in a single JSON file; ``MemoryStore`` is for embedding and tests.
``PluginRepository`` is the only thing sync code talks to: it reads and
writes whole snapshots, never single records.
"""

from __future__ import annotations

import copy
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, Optional, Sequence, Tuple

from .errors import PersistenceError
from .plugins.models import PluginRecord
from .urls import DEFAULT_BRIDGE_URL, normalize_bridge_url

logger = logging.getLogger(__name__)

BRIDGE_URL_KEY = "MCP_BRIDGE_URL"
PLUGINS_KEY = "TM_useInstalledPlugins"


class KeyValueStore:
    """Minimal durable key-value interface."""

    def get(self, key: str, default: Any = None) -> Any:
        raise NotImplementedError

    def put(self, key: str, value: Any) -> None:
        raise NotImplementedError


class MemoryStore(KeyValueStore):
    """In-process store. Values are deep-copied in and out."""

    def __init__(self, data: Optional[Dict[str, Any]] = None):
        self._data: Dict[str, Any] = copy.deepcopy(data or {})

    def get(self, key: str, default: Any = None) -> Any:
        if key not in self._data:
            return default
        return copy.deepcopy(self._data[key])

    def put(self, key: str, value: Any) -> None:
        self._data[key] = copy.deepcopy(value)


class JsonFileStore(KeyValueStore):
    """Store backed by one JSON object on disk.

    A missing file is an empty store. A file that can't be read or decoded
    raises PersistenceError instead of being treated as empty, so a sync
    never overwrites data it failed to read.
    """

    def __init__(self, path: Path):
        self.path = Path(path)

    def _read(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            raise PersistenceError(f"Cannot read store {self.path}: {e}")
        if not isinstance(data, dict):
            raise PersistenceError(f"Store {self.path} is not a JSON object")
        return data

    def get(self, key: str, default: Any = None) -> Any:
        return self._read().get(key, default)

    def put(self, key: str, value: Any) -> None:
        data = self._read()
        data[key] = value
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            # Write-then-rename so a failed write leaves the old file intact
            fd, tmp_name = tempfile.mkstemp(dir=str(self.path.parent), prefix=".keyval-", suffix=".json")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as fh:
                    json.dump(data, fh, indent=2, ensure_ascii=False)
                os.replace(tmp_name, self.path)
            except BaseException:
                if os.path.exists(tmp_name):
                    os.unlink(tmp_name)
                raise
        except (OSError, TypeError, ValueError) as e:
            raise PersistenceError(f"Cannot write store {self.path}: {e}")
        logger.debug("Wrote key %s to %s", key, self.path)


class PluginRepository:
    """Typed access to the two records the sync reads and writes."""

    def __init__(self, store: KeyValueStore, default_bridge_url: str = DEFAULT_BRIDGE_URL):
        self.store = store
        self.default_bridge_url = default_bridge_url

    def get_bridge_url(self) -> str:
        """Stored bridge URL, or the default when unset or blank."""
        value = self.store.get(BRIDGE_URL_KEY)
        if not isinstance(value, str) or not value.strip():
            return normalize_bridge_url(self.default_bridge_url)
        return normalize_bridge_url(value, default=self.default_bridge_url)

    def set_bridge_url(self, url: str) -> str:
        """Normalise and store the bridge URL; returns what was stored."""
        normalized = normalize_bridge_url(url, default=self.default_bridge_url)
        self.store.put(BRIDGE_URL_KEY, normalized)
        return normalized

    def load_plugins(self) -> Tuple[PluginRecord, ...]:
        """Snapshot of the persisted plugin collection."""
        raw = self.store.get(PLUGINS_KEY)
        if raw is None:
            return ()
        if not isinstance(raw, list):
            raise PersistenceError(f"Stored value for {PLUGINS_KEY} is not a list")

        plugins = []
        for item in raw:
            if not isinstance(item, dict):
                raise PersistenceError(f"Stored plugin entry is not an object: {item!r}")
            plugins.append(PluginRecord.from_dict(item))
        return tuple(plugins)

    def save_plugins(self, plugins: Sequence[PluginRecord]) -> Tuple[PluginRecord, ...]:
        """Replace the whole persisted collection."""
        snapshot = tuple(plugins)
        self.store.put(PLUGINS_KEY, [p.to_dict() for p in snapshot])
        return snapshot
