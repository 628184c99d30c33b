"""Catalog module.

Models the tool catalog advertised by an MCP bridge and fetches it over HTTP.
"""

from .client import CatalogClient
from .models import Catalog, CatalogCategory, ToolDescriptor

__all__ = [
    "Catalog",
    "CatalogCategory",
    "CatalogClient",
    "ToolDescriptor",
]
