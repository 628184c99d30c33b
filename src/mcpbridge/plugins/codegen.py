"""Plugin code generation.

Every owned plugin record carries the source of a small Python module whose
``run(args)`` function calls the tool on the bridge. The host loads that
source with :func:`load_stub` (or its own loader) and calls ``run``.

Everything here is pure: no network, no store.
"""

from __future__ import annotations

import re
from typing import Any, Callable, Dict

from ..catalog.models import ToolDescriptor
from ..urls import normalize_bridge_url, tool_call_url
from .models import PluginRecord, PluginSpec, plugin_id_for

DEFAULT_EMOJI = "🔌"
STUB_ENTRYPOINT = "run"
DEFAULT_CALL_TIMEOUT_S = 120.0

_STUB_TEMPLATE = '''\
# MCP bridge stub for tool {name_literal} (category {category_literal})

import requests

from mcpbridge.errors import ToolInvocationError

TOOL_NAME = {name_literal}
CALL_URL = {url_literal}
REQUIRED = {required_literal}
TIMEOUT_S = {timeout_literal}


def {entrypoint}(args):
    # Bare scalars are wrapped under the first required argument
    if REQUIRED and isinstance(args, (str, int, float, bool)):
        args = {{REQUIRED[0]: args}}
    response = requests.post(
        CALL_URL,
        json=args,
        headers={{"Content-Type": "application/json"}},
        timeout=TIMEOUT_S,
    )
    if not response.ok:
        raise ToolInvocationError(response.status_code, response.reason)
    return response.json()
'''


def generate_stub(
    tool: ToolDescriptor,
    endpoint_url: str,
    timeout_s: float = DEFAULT_CALL_TIMEOUT_S,
) -> str:
    """Return the source of a callable stub that invokes *tool* on the bridge.

    Args:
        tool: Tool descriptor from the catalog
        endpoint_url: Bridge base URL (e.g. http://localhost:8000)
        timeout_s: HTTP timeout baked into the stub

    The stub POSTs its argument as JSON to
    ``{endpoint_url}/mcp/tools/{tool.name}/call`` and returns the decoded
    response, raising ToolInvocationError on a non-2xx status.
    """
    # repr() of str/list[str]/float is always a valid Python literal
    return _STUB_TEMPLATE.format(
        name_literal=repr(tool.name),
        category_literal=repr(tool.category),
        url_literal=repr(tool_call_url(normalize_bridge_url(endpoint_url), tool.name)),
        required_literal=repr(tool.required),
        timeout_literal=repr(float(timeout_s)),
        entrypoint=STUB_ENTRYPOINT,
    )


def load_stub(code: str, filename: str = "<mcp-stub>") -> Callable[[Any], Any]:
    """Compile stub source and return its entry point."""
    namespace: Dict[str, Any] = {"__name__": "mcpbridge_stub"}
    exec(compile(code, filename, "exec"), namespace)
    return namespace[STUB_ENTRYPOINT]


def humanize_tool_name(name: str) -> str:
    """'search_web-pages' -> 'Search Web Pages'."""
    words = [w for w in re.split(r"[_\-\s]+", name) if w]
    if not words:
        return name
    return " ".join(w[:1].upper() + w[1:] for w in words)


def render_overview(tool: ToolDescriptor) -> str:
    """Markdown overview shown in the host's plugin detail view."""
    lines = [f"**{humanize_tool_name(tool.name)}**", ""]
    if tool.description:
        lines.extend([tool.description, ""])
    lines.append(f"Category: `{tool.category}` · Tool: `{tool.name}`")
    if tool.required:
        lines.append("")
        lines.append("Required arguments: " + ", ".join(f"`{r}`" for r in tool.required))
    lines.append("")
    lines.append("_Synced from MCP bridge._")
    return "\n".join(lines)


def build_record(
    tool: ToolDescriptor,
    uuid: str,
    endpoint_url: str,
    timeout_s: float = DEFAULT_CALL_TIMEOUT_S,
) -> PluginRecord:
    """Build a fresh plugin record for *tool* under a given uuid.

    All fields except ``uuid`` are derived from the descriptor, so calling
    this again for the same tool and uuid yields an equal record.
    """
    return PluginRecord(
        id=plugin_id_for(tool.name),
        uuid=uuid,
        title=humanize_tool_name(tool.name),
        overview_markdown=render_overview(tool),
        emoji=DEFAULT_EMOJI,
        spec=PluginSpec(
            name=tool.name,
            description=tool.description,
            parameters=tool.to_dict()["inputSchema"],
        ),
        code=generate_stub(tool, endpoint_url, timeout_s=timeout_s),
    )
