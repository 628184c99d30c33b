"""Sync orchestration.

Glue between the bridge, the reconciler and the store:

    bridge URL (store) -> catalog (HTTP) -> reconcile -> plugins (store) -> notifier

Every operation that rewrites the plugin collection runs under one lock, so
two syncs started close together (a manual sync and a watch tick, say) run
one after the other instead of overwriting each other's result. The store is
written only after a reconciliation succeeded; any failure is logged,
reported to the notifier and returned as a failed SyncReport.
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Optional

from rich.console import Console

from .catalog.client import CatalogClient
from .errors import BridgeError
from .plugins.reconcile import ReconcileResult, format_summary, reconcile, remove_owned
from .store import PluginRepository
from .urls import normalize_bridge_url

logger = logging.getLogger(__name__)

ClientFactory = Callable[[str, float], CatalogClient]


class Notifier:
    """Receives user-facing status messages."""

    def notify(self, message: str, level: str = "info") -> None:
        raise NotImplementedError


class ConsoleNotifier(Notifier):
    """Prints status messages with rich markup."""

    _STYLES = {
        "info": "cyan",
        "success": "green",
        "error": "red",
    }

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console()

    def notify(self, message: str, level: str = "info") -> None:
        style = self._STYLES.get(level, "")
        self.console.print(message, style=style, markup=False, highlight=False)


class NullNotifier(Notifier):
    def notify(self, message: str, level: str = "info") -> None:
        pass


@dataclass
class SyncReport:
    """What a sync-family operation did."""
    success: bool
    message: str
    bridge_url: str = ""
    result: Optional[ReconcileResult] = None
    tool_count: int = 0


def _default_client_factory(url: str, timeout_s: float) -> CatalogClient:
    return CatalogClient(url, timeout_s=timeout_s)


class SyncOrchestrator:
    """Runs syncs against one repository and reports to one notifier."""

    def __init__(
        self,
        repository: PluginRepository,
        notifier: Optional[Notifier] = None,
        client_factory: Optional[ClientFactory] = None,
        timeout_s: float = 30.0,
    ):
        self.repository = repository
        self.notifier = notifier or NullNotifier()
        self._client_factory = client_factory or _default_client_factory
        self.timeout_s = timeout_s
        # Reentrant: save_url_and_sync holds it across its nested sync()
        self._lock = threading.RLock()

    def _fail(self, prefix: str, error: Exception, url: str = "") -> SyncReport:
        message = f"{prefix}: {error}"
        self.notifier.notify(message, "error")
        return SyncReport(success=False, message=message, bridge_url=url)

    def sync(self, url: Optional[str] = None) -> SyncReport:
        """Fetch the catalog and rewrite the owned part of the plugin collection.

        Args:
            url: Bridge URL to sync from; defaults to the stored one
        """
        with self._lock:
            bridge_url = ""
            try:
                bridge_url = normalize_bridge_url(url) if url else self.repository.get_bridge_url()
                self.notifier.notify(f"Syncing plugins from {bridge_url}...")

                catalog = self._client_factory(bridge_url, self.timeout_s).fetch_catalog()
                previous = self.repository.load_plugins()
                result = reconcile(previous, catalog, bridge_url, call_timeout_s=max(self.timeout_s, 120.0))
                self.repository.save_plugins(result.updated_plugins)
            except BridgeError as e:
                logger.warning("Sync from %s failed: %s", bridge_url or "<unknown>", e)
                return self._fail("Sync failed", e, bridge_url)
            except Exception as e:
                logger.exception("Unexpected error during sync")
                return self._fail("Sync failed", e, bridge_url)

            logger.info("Sync from %s complete: %s", bridge_url, result.to_dict())
            summary = format_summary(result)
            self.notifier.notify(summary, "success")
            return SyncReport(
                success=True,
                message=summary,
                bridge_url=bridge_url,
                result=result,
                tool_count=result.tool_count,
            )

    def test_connection(self, url: Optional[str] = None) -> SyncReport:
        """Fetch the catalog and count its tools without persisting anything."""
        bridge_url = ""
        try:
            bridge_url = normalize_bridge_url(url) if url else self.repository.get_bridge_url()
            self.notifier.notify("Testing connection...")
            count = self._client_factory(bridge_url, self.timeout_s).test_connection()
        except BridgeError as e:
            logger.warning("Connection test against %s failed: %s", bridge_url or "<unknown>", e)
            return self._fail("Connection failed", e, bridge_url)

        message = f"Connection successful! Found {count} tools."
        self.notifier.notify(message, "success")
        return SyncReport(success=True, message=message, bridge_url=bridge_url, tool_count=count)

    def save_url_and_sync(self, url: str) -> SyncReport:
        """Store a new bridge URL, then sync from it."""
        with self._lock:
            try:
                stored = self.repository.set_bridge_url(url)
            except BridgeError as e:
                logger.warning("Saving bridge URL failed: %s", e)
                return self._fail("Error saving settings", e)

            self.notifier.notify("Settings saved. Syncing plugins...")
            return self.sync(stored)

    def unsync(self) -> SyncReport:
        """Remove every bridge-owned plugin, keeping foreign ones."""
        with self._lock:
            try:
                result = remove_owned(self.repository.load_plugins())
                self.repository.save_plugins(result.updated_plugins)
            except BridgeError as e:
                logger.warning("Unsync failed: %s", e)
                return self._fail("Unsync failed", e)

            message = f"Removed {len(result.removed)} MCP plugin(s)."
            self.notifier.notify(message, "success")
            return SyncReport(success=True, message=message, result=result)

    def watch(
        self,
        interval_s: float,
        iterations: Optional[int] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> int:
        """Re-sync every *interval_s* seconds.

        Failed syncs are reported and retried on the next tick. Runs forever
        unless *iterations* is given. Returns the number of failed syncs.
        """
        failures = 0
        count = 0
        while iterations is None or count < iterations:
            if not self.sync().success:
                failures += 1
            count += 1
            if iterations is not None and count >= iterations:
                break
            sleep(interval_s)
        return failures
