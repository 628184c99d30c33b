"""URL helpers.

The bridge exposes two kinds of endpoints under one base URL:

- GET  {base}/mcp/tools               -> tool catalog
- POST {base}/mcp/tools/{name}/call   -> tool invocation

Users type the base in many shapes ("localhost:8000", "http://host:8000/",
"  http://host:8000 "). These helpers normalise it once so every other module
can just append paths.
"""

from __future__ import annotations

from urllib.parse import quote

DEFAULT_BRIDGE_URL = "http://localhost:8000"


def _ensure_scheme(url: str) -> str:
    url = (url or "").strip()
    if not url:
        return url
    # Allow "localhost:8000" style inputs.
    if "://" not in url:
        return "http://" + url
    return url


def normalize_bridge_url(url: str, default: str = DEFAULT_BRIDGE_URL) -> str:
    """Return a bridge base URL without trailing slash.

    Blank input resolves to *default*.
    """
    url = _ensure_scheme(url)
    if not url:
        url = default
    return url.rstrip("/")


def tools_url(base_url: str) -> str:
    """Catalog endpoint for a bridge."""
    return f"{base_url.rstrip('/')}/mcp/tools"


def tool_call_url(base_url: str, tool_name: str) -> str:
    """Invocation endpoint for one tool."""
    return f"{tools_url(base_url)}/{quote(tool_name, safe='')}/call"
