"""Tests for the command line interface."""

from unittest.mock import MagicMock, patch

import pytest

from mcpbridge import cli
from mcpbridge.catalog.client import CatalogClient
from mcpbridge.catalog.models import Catalog
from mcpbridge.plugins.models import PluginRecord
from mcpbridge.store import BRIDGE_URL_KEY, PLUGINS_KEY, MemoryStore, PluginRepository
from mcpbridge.sync import NullNotifier, SyncOrchestrator


def _orchestrator(store, catalog_json=None):
    client = MagicMock(spec=CatalogClient)
    catalog = Catalog.from_api(catalog_json or {})
    client.fetch_catalog.return_value = catalog
    client.test_connection.return_value = catalog.tool_count
    return SyncOrchestrator(PluginRepository(store), NullNotifier(), client_factory=lambda url, t: client)


def _run(argv, orchestrator):
    args = cli.build_parser().parse_args(argv)
    return args.func(args, orchestrator)


class TestCommands:
    """Tests for individual commands."""

    def test_url_show_and_set(self):
        store = MemoryStore()
        orchestrator = _orchestrator(store)

        assert _run(["url"], orchestrator) == 0
        assert _run(["url", "bridge:9000"], orchestrator) == 0
        assert store.get(BRIDGE_URL_KEY) == "http://bridge:9000"

    def test_sync_with_url_saves_it(self):
        store = MemoryStore()
        orchestrator = _orchestrator(store, {"web": {"tools": [{"name": "search"}]}})

        assert _run(["sync", "--url", "http://b:1"], orchestrator) == 0
        assert store.get(BRIDGE_URL_KEY) == "http://b:1"
        assert [p["id"] for p in store.get(PLUGINS_KEY)] == ["mcp_search"]

    def test_test_command(self):
        orchestrator = _orchestrator(MemoryStore(), {"web": {"tools": [{"name": "a"}, {"name": "b"}]}})
        assert _run(["test"], orchestrator) == 0

    def test_plugins_lists(self):
        store = MemoryStore()
        PluginRepository(store).save_plugins([PluginRecord(id="mcp_a", uuid="u1", title="A"), PluginRecord(id="x")])
        assert _run(["plugins"], _orchestrator(store)) == 0

    def test_unsync_force(self):
        store = MemoryStore({PLUGINS_KEY: [{"id": "mcp_a"}, {"id": "x"}]})
        assert _run(["unsync", "--force"], _orchestrator(store)) == 0
        assert store.get(PLUGINS_KEY) == [{"id": "x"}]

    def test_unsync_cancelled(self):
        store = MemoryStore({PLUGINS_KEY: [{"id": "mcp_a"}]})
        with patch.object(cli.console, "input", return_value="n"):
            assert _run(["unsync"], _orchestrator(store)) == 0
        assert store.get(PLUGINS_KEY) == [{"id": "mcp_a"}]

    def test_watch_count(self):
        orchestrator = _orchestrator(MemoryStore(), {"web": {"tools": []}})
        with patch.object(orchestrator, "watch", return_value=0) as mock_watch:
            assert _run(["watch", "-i", "5", "-n", "2"], orchestrator) == 0
        mock_watch.assert_called_once_with(5.0, iterations=2)


class TestMain:
    """Tests for main()."""

    def test_no_command_prints_help(self):
        with pytest.raises(SystemExit) as exc_info:
            cli.main([])
        assert exc_info.value.code == 0

    @patch("mcpbridge.cli.build_orchestrator")
    @patch("mcpbridge.cli._setup_logging")
    def test_dispatches(self, mock_logging, mock_build):
        mock_build.return_value = _orchestrator(MemoryStore())
        with pytest.raises(SystemExit) as exc_info:
            cli.main(["-v", "url"])
        assert exc_info.value.code == 0
        mock_logging.assert_called_once_with(True)
