"""Catalog Client.

Fetches the tool catalog from an MCP bridge over HTTP and normalises it into
the catalog model.
"""

from __future__ import annotations

import logging
from typing import Optional

import requests

from ..errors import TransportError
from ..urls import DEFAULT_BRIDGE_URL, normalize_bridge_url, tools_url
from .models import Catalog

logger = logging.getLogger(__name__)


class CatalogClient:
    """Client for the bridge's ``/mcp/tools`` endpoint."""

    def __init__(
        self,
        base_url: str = DEFAULT_BRIDGE_URL,
        timeout_s: float = 30.0,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = normalize_bridge_url(base_url)
        self.timeout_s = timeout_s
        self._session = session or requests.Session()
        self._session.headers["Accept"] = "application/json"

    def fetch_raw(self) -> dict:
        """GET the catalog and return the decoded JSON object."""
        url = tools_url(self.base_url)
        logger.info("Fetching MCP tools from %s", url)

        try:
            response = self._session.get(url, timeout=self.timeout_s)
        except requests.exceptions.Timeout:
            raise TransportError(f"Request timeout after {self.timeout_s}s")
        except requests.exceptions.ConnectionError:
            raise TransportError(f"Cannot connect to MCP bridge at {self.base_url}")
        except requests.exceptions.RequestException as e:
            raise TransportError(f"Request failed: {e}")

        if not response.ok:
            raise TransportError(
                f"Failed to fetch MCP tools: {response.reason or response.status_code}",
                status_code=response.status_code,
            )

        try:
            data = response.json()
        except ValueError:
            raise TransportError("Invalid JSON response from MCP bridge")

        if not isinstance(data, dict):
            raise TransportError("Unexpected catalog format: expected a JSON object")
        return data

    def fetch_catalog(self) -> Catalog:
        """Fetch and parse the catalog."""
        catalog = Catalog.from_api(self.fetch_raw())
        logger.info("Found %d tools in %d categories", catalog.tool_count, len(catalog))
        return catalog

    def test_connection(self) -> int:
        """Fetch the catalog without persisting anything; return the tool count."""
        return self.fetch_catalog().tool_count
