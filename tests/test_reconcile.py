"""Tests for the plugin reconciliation module."""

import itertools

import pytest

from mcpbridge.catalog.models import Catalog
from mcpbridge.plugins.models import PluginRecord
from mcpbridge.plugins.reconcile import (
    ReconcileResult,
    format_summary,
    partition_plugins,
    reconcile,
    remove_owned,
)

BRIDGE = "http://localhost:8000"


def _uuids():
    counter = itertools.count(1)
    return lambda: f"new-{next(counter)}"


def _catalog(data):
    return Catalog.from_api(data)


@pytest.fixture
def web_catalog():
    return _catalog({
        "web": {
            "tools": [
                {"name": "search", "description": "d", "inputSchema": {"required": ["q"]}},
                {"name": "fetch", "description": "d2", "inputSchema": {"required": []}},
            ]
        }
    })


@pytest.fixture
def previous():
    return [
        PluginRecord(id="mcp_search", uuid="u1", title="Old title", code="old code"),
        PluginRecord(id="other_x", uuid="u2", title="Someone else's", extra={"custom": True}),
    ]


class TestPartition:
    """Tests for partition_plugins."""

    def test_exhaustive_and_exclusive(self):
        """Every record lands in exactly one partition."""
        plugins = [
            PluginRecord(id="mcp_a"),
            PluginRecord(id="b"),
            PluginRecord(id="mcpb"),
            PluginRecord(id="mcp_c"),
        ]
        owned, foreign = partition_plugins(plugins)
        assert [p.id for p in owned] == ["mcp_a", "mcp_c"]
        assert [p.id for p in foreign] == ["b", "mcpb"]


class TestReconcile:
    """Tests for reconcile."""

    def test_example_scenario(self, previous, web_catalog):
        """Search keeps its uuid, fetch is added, foreign passes through."""
        result = reconcile(previous, web_catalog, BRIDGE, uuid_factory=_uuids())

        assert [p.id for p in result.added] == ["mcp_fetch"]
        assert result.removed == []
        assert result.unchanged_count == 1
        assert result.category_count == 1

        by_id = {p.id: p for p in result.updated_plugins}
        assert by_id["mcp_search"].uuid == "u1"
        assert by_id["mcp_fetch"].uuid == "new-1"
        assert by_id["other_x"] is previous[1]

    def test_owned_fields_are_regenerated(self, previous, web_catalog):
        """Only the uuid survives from the old owned record."""
        result = reconcile(previous, web_catalog, BRIDGE)
        search = next(p for p in result.updated_plugins if p.id == "mcp_search")

        assert search.title == "Search"
        assert search.code != "old code"
        assert "http://localhost:8000/mcp/tools/search/call" in search.code
        assert search.spec.name == "search"
        assert search.spec.parameters == {"required": ["q"]}

    def test_foreign_first_then_catalog_order(self, previous, web_catalog):
        """Foreign records come first, owned follow catalog order."""
        result = reconcile(previous, web_catalog, BRIDGE)
        assert [p.id for p in result.updated_plugins] == ["other_x", "mcp_search", "mcp_fetch"]

    def test_empty_catalog_removes_all_owned(self, previous):
        """An empty catalog removes owned records and keeps foreign ones."""
        result = reconcile(previous, Catalog(), BRIDGE)

        assert [p.id for p in result.removed] == ["mcp_search"]
        assert result.added == []
        assert result.unchanged_count == 0
        assert result.category_count == 0
        assert result.updated_plugins == [previous[1]]

    def test_removal(self, previous, web_catalog):
        """A tool missing from the next catalog is reported removed."""
        first = reconcile(previous, web_catalog, BRIDGE)
        smaller = _catalog({"web": {"tools": [{"name": "fetch"}]}})

        second = reconcile(first.updated_plugins, smaller, BRIDGE)

        assert [p.id for p in second.removed] == ["mcp_search"]
        assert "mcp_search" not in [p.id for p in second.updated_plugins]

    def test_idempotent(self, previous, web_catalog):
        """A second run over the first run's output changes nothing."""
        first = reconcile(previous, web_catalog, BRIDGE)
        second = reconcile(first.updated_plugins, web_catalog, BRIDGE)

        assert second.added == []
        assert second.removed == []
        assert second.unchanged_count == len(second.owned_plugins)
        assert [p.to_dict() for p in second.updated_plugins] == [p.to_dict() for p in first.updated_plugins]

    def test_invalid_categories_skipped(self):
        """Categories without a tools list are skipped and not counted."""
        catalog = _catalog({
            "a": {"tools": [{"name": "one"}]},
            "b": {"tools": "nope"},
            "c": {},
            "d": None,
            "e": {"tools": []},
        })
        result = reconcile([], catalog, BRIDGE)

        assert [p.id for p in result.updated_plugins] == ["mcp_one"]
        # "a" and "e" have a tools list, even though "e" is empty
        assert result.category_count == 2

    def test_name_collision_last_wins(self):
        """Same tool name in two categories collapses to one record."""
        catalog = _catalog({
            "first": {"tools": [{"name": "dup", "description": "from first"}]},
            "second": {"tools": [{"name": "dup", "description": "from second"}]},
        })
        result = reconcile([], catalog, BRIDGE, uuid_factory=_uuids())

        assert len(result.updated_plugins) == 1
        record = result.updated_plugins[0]
        assert record.spec.description == "from second"
        assert record.uuid == "new-1"
        assert len(result.added) == 1
        assert result.category_count == 2

    def test_duplicate_previous_records_do_not_crash(self):
        """Duplicate ids in stored state: first uuid wins."""
        previous = [
            PluginRecord(id="mcp_a", uuid="first"),
            PluginRecord(id="mcp_a", uuid="second"),
        ]
        catalog = _catalog({"cat": {"tools": [{"name": "a"}]}})
        result = reconcile(previous, catalog, BRIDGE)

        assert [p.uuid for p in result.updated_plugins] == ["first"]
        assert result.added == []
        assert result.unchanged_count == 1

    def test_ids_unique_and_partition_complete(self):
        """added + unchanged covers every owned record, ids are unique."""
        previous = [PluginRecord(id="mcp_b", uuid="ub"), PluginRecord(id="mcp_gone", uuid="ug")]
        catalog = _catalog({
            "x": {"tools": [{"name": "a"}, {"name": "b"}]},
            "y": {"tools": [{"name": "a"}, {"name": "c"}]},
        })
        result = reconcile(previous, catalog, BRIDGE)

        owned_ids = [p.id for p in result.owned_plugins]
        assert len(owned_ids) == len(set(owned_ids)) == 3
        assert len(result.added) + result.unchanged_count == len(owned_ids)
        assert [p.id for p in result.removed] == ["mcp_gone"]

    def test_size_invariant(self, previous, web_catalog):
        """Collection size is foreign count plus distinct tool ids."""
        result = reconcile(previous, web_catalog, BRIDGE)
        assert len(result.updated_plugins) == 1 + 2

    def test_inputs_not_mutated(self, previous, web_catalog):
        """The previous collection is left as it was."""
        before = [p.to_dict() for p in previous]
        reconcile(previous, web_catalog, BRIDGE)
        assert [p.to_dict() for p in previous] == before

    def test_tool_without_required_is_tolerated(self):
        """Tools missing inputSchema.required still produce records."""
        catalog = _catalog({"cat": {"tools": [{"name": "bare"}, {"name": "odd", "inputSchema": {"required": "q"}}]}})
        result = reconcile([], catalog, BRIDGE)
        assert [p.id for p in result.updated_plugins] == ["mcp_bare", "mcp_odd"]


class TestRemoveOwned:
    """Tests for remove_owned."""

    def test_keeps_foreign(self, previous):
        result = remove_owned(previous)
        assert result.updated_plugins == [previous[1]]
        assert [p.id for p in result.removed] == ["mcp_search"]


class TestFormatSummary:
    """Tests for format_summary."""

    def test_summary_with_changes(self, previous, web_catalog):
        """Summary names counts and changed tools."""
        result = reconcile(previous, web_catalog, BRIDGE)
        summary = format_summary(result)

        assert summary.startswith("Sync successful! 1 category, 2 tools: 1 added, 1 unchanged, 0 removed.")
        assert "Added: Fetch" in summary
        assert "Removed" not in summary

    def test_summary_pluralises_categories(self):
        result = ReconcileResult(category_count=3)
        assert "3 categories, 0 tools" in format_summary(result)

    def test_to_dict(self, previous):
        result = reconcile(previous, Catalog(), BRIDGE)
        assert result.to_dict() == {
            "added": [],
            "removed": ["mcp_search"],
            "unchanged": 0,
            "categories": 0,
            "total": 1,
        }
