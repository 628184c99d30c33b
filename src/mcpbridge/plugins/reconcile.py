"""Plugin reconciliation.

Computes the new plugin collection from the previously persisted one and a
freshly fetched catalog. Pure: no network, no store, no clock.

Rules:
- Records without the ``mcp_`` prefix are foreign and pass through as-is.
- Owned records are rebuilt from the catalog on every run; only the uuid
  survives, matched on the derived id ``mcp_<tool name>``.
- Two tools with the same name (in any categories) map to one record; the
  one enumerated last wins.
- An empty catalog removes every owned record. Deciding whether an empty
  catalog means "the fetch went wrong" is up to the caller.
"""

from __future__ import annotations

import logging
import uuid as uuid_lib
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Sequence, Set, Tuple

from ..catalog.models import Catalog
from .codegen import DEFAULT_CALL_TIMEOUT_S, build_record
from .models import PluginRecord, is_owned, plugin_id_for

logger = logging.getLogger(__name__)


def _new_uuid() -> str:
    return str(uuid_lib.uuid4())


@dataclass
class ReconcileResult:
    """Outcome of one reconciliation."""
    updated_plugins: List[PluginRecord] = field(default_factory=list)
    added: List[PluginRecord] = field(default_factory=list)
    removed: List[PluginRecord] = field(default_factory=list)
    unchanged_count: int = 0
    category_count: int = 0

    @property
    def owned_plugins(self) -> List[PluginRecord]:
        return [p for p in self.updated_plugins if is_owned(p)]

    @property
    def tool_count(self) -> int:
        return self.unchanged_count + len(self.added)

    def to_dict(self) -> dict:
        return {
            "added": [p.id for p in self.added],
            "removed": [p.id for p in self.removed],
            "unchanged": self.unchanged_count,
            "categories": self.category_count,
            "total": len(self.updated_plugins),
        }


def partition_plugins(
    plugins: Sequence[PluginRecord],
) -> Tuple[List[PluginRecord], List[PluginRecord]]:
    """Split records into (owned, foreign) in one pass."""
    owned: List[PluginRecord] = []
    foreign: List[PluginRecord] = []
    for plugin in plugins:
        if is_owned(plugin):
            owned.append(plugin)
        else:
            foreign.append(plugin)
    return owned, foreign


def reconcile(
    previous_plugins: Sequence[PluginRecord],
    catalog: Catalog,
    endpoint_url: str,
    uuid_factory: Callable[[], str] = _new_uuid,
    call_timeout_s: float = DEFAULT_CALL_TIMEOUT_S,
) -> ReconcileResult:
    """Reconcile persisted plugins against a catalog.

    Args:
        previous_plugins: Collection as last persisted (owned and foreign)
        catalog: Freshly fetched catalog
        endpoint_url: Bridge base URL baked into generated stubs
        uuid_factory: Source of fresh uuids for newly seen tools
        call_timeout_s: HTTP timeout baked into generated stubs

    Returns:
        ReconcileResult with foreign records first, then owned records in
        catalog order.
    """
    owned_previous, foreign = partition_plugins(previous_plugins)

    # First match wins if the stored collection somehow holds duplicates
    previous_uuids: Dict[str, str] = {}
    for plugin in owned_previous:
        previous_uuids.setdefault(plugin.id, plugin.uuid)

    # id -> record; re-assigning an existing key keeps its first position
    new_owned: Dict[str, PluginRecord] = {}
    categories_seen: Set[str] = set()

    for category in catalog:
        if category.tools is None:
            logger.debug("Skipping category %r: no tools list", category.name)
            continue
        categories_seen.add(category.name)

        for tool in category.tools:
            plugin_id = plugin_id_for(tool.name)
            uuid = previous_uuids.get(plugin_id)
            if plugin_id in new_owned:
                logger.debug("Tool %r in %r overrides an earlier definition", tool.name, category.name)
                uuid = uuid or new_owned[plugin_id].uuid
            uuid = uuid or uuid_factory()
            new_owned[plugin_id] = build_record(tool, uuid, endpoint_url, timeout_s=call_timeout_s)

    new_owned_list = list(new_owned.values())
    added = [p for p in new_owned_list if p.id not in previous_uuids]

    # Keep every stale record, including duplicates, so none is dropped silently
    removed = [p for p in owned_previous if p.id not in new_owned]

    return ReconcileResult(
        updated_plugins=foreign + new_owned_list,
        added=added,
        removed=removed,
        unchanged_count=len(new_owned_list) - len(added),
        category_count=len(categories_seen),
    )


def remove_owned(previous_plugins: Sequence[PluginRecord]) -> ReconcileResult:
    """Drop every owned record, keeping foreign ones."""
    owned, foreign = partition_plugins(previous_plugins)
    return ReconcileResult(updated_plugins=list(foreign), removed=owned)


def _plural(count: int, singular: str, plural: str = "") -> str:
    return f"{count} {singular if count == 1 else (plural or singular + 's')}"


def format_summary(result: ReconcileResult) -> str:
    """Human-readable summary of a reconciliation."""
    lines = [
        f"Sync successful! {_plural(result.category_count, 'category', 'categories')}, "
        f"{_plural(result.tool_count, 'tool')}: "
        f"{len(result.added)} added, {result.unchanged_count} unchanged, "
        f"{len(result.removed)} removed."
    ]
    if result.added:
        lines.append("Added: " + ", ".join(p.title or p.id for p in result.added))
    if result.removed:
        lines.append("Removed: " + ", ".join(p.title or p.id for p in result.removed))
    return "\n".join(lines)
