"""Plugin records and the bridge-owned part of their lifecycle.

- models     - persisted record shape, owned vs foreign records
- codegen    - callable stub source and presentation fields for a tool
- reconcile  - new collection + change summary from old collection + catalog
"""

from .codegen import build_record, generate_stub, load_stub
from .models import MCP_ID_PREFIX, PluginRecord, PluginSpec, is_owned, plugin_id_for
from .reconcile import ReconcileResult, format_summary, reconcile, remove_owned

__all__ = [
    "MCP_ID_PREFIX",
    "PluginRecord",
    "PluginSpec",
    "ReconcileResult",
    "build_record",
    "format_summary",
    "generate_stub",
    "is_owned",
    "load_stub",
    "plugin_id_for",
    "reconcile",
    "remove_owned",
]
