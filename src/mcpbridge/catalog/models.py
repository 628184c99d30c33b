"""Catalog data model.

A catalog is what the bridge returns from ``GET /mcp/tools``::

    {
        "web": {"tools": [{"name": "search", "description": "...",
                           "inputSchema": {"required": ["q"], ...}}]},
        "files": {"tools": [...]},
    }

Categories whose ``tools`` field is missing or is not a list are kept in the
model with ``tools=None`` so the reconciler can skip them explicitly.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional


@dataclass
class ToolDescriptor:
    """One remotely advertised tool."""
    category: str
    name: str
    description: str = ""
    input_schema: Dict[str, Any] = field(default_factory=dict)

    @property
    def required(self) -> List[str]:
        """Required argument names, tolerating a missing or malformed list."""
        required = self.input_schema.get("required")
        if not isinstance(required, list):
            return []
        return [str(r) for r in required]

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": copy.deepcopy(self.input_schema),
        }

    @classmethod
    def from_api(cls, data: dict, category: str) -> "ToolDescriptor":
        schema = data.get("inputSchema", data.get("input_schema"))
        return cls(
            category=category,
            name=str(data.get("name", "")),
            description=str(data.get("description") or ""),
            input_schema=copy.deepcopy(schema) if isinstance(schema, dict) else {},
        )


@dataclass
class CatalogCategory:
    """A named group of tools. ``tools is None`` marks an unusable entry."""
    name: str
    tools: Optional[List[ToolDescriptor]] = None

    @property
    def is_valid(self) -> bool:
        return self.tools is not None

    @classmethod
    def from_api(cls, name: str, body: Any) -> "CatalogCategory":
        raw_tools = body.get("tools") if isinstance(body, dict) else None
        if not isinstance(raw_tools, list):
            return cls(name=name, tools=None)
        # Entries that aren't objects carry no name to key a plugin on
        tools = [
            ToolDescriptor.from_api(t, name)
            for t in raw_tools
            if isinstance(t, dict)
        ]
        return cls(name=name, tools=tools)


@dataclass
class Catalog:
    """Ordered collection of categories, in the order the bridge sent them."""
    categories: List[CatalogCategory] = field(default_factory=list)

    def __iter__(self) -> Iterator[CatalogCategory]:
        return iter(self.categories)

    def __len__(self) -> int:
        return len(self.categories)

    @property
    def tool_count(self) -> int:
        """Number of tools across all valid categories (duplicates included)."""
        return sum(len(c.tools) for c in self.categories if c.tools is not None)

    def iter_tools(self) -> Iterator[ToolDescriptor]:
        for category in self.categories:
            if category.tools is None:
                continue
            yield from category.tools

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "Catalog":
        return cls(
            categories=[CatalogCategory.from_api(str(name), body) for name, body in data.items()]
        )
