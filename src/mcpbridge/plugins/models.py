"""Plugin record models.

A plugin record is the host's persisted, invocable representation of a tool.
Records whose ``id`` starts with ``mcp_`` are owned by the bridge sync; every
other record belongs to some other producer and is carried through untouched.

Foreign records keep the dict they were read from and are written back from
it verbatim. Owned records are serialized from their fields; unknown keys on
them are kept in ``extra``.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

MCP_ID_PREFIX = "mcp_"


def plugin_id_for(tool_name: str) -> str:
    """Deterministic plugin id for a catalog tool."""
    return f"{MCP_ID_PREFIX}{tool_name}"


@dataclass
class PluginSpec:
    """Function spec the host shows to the model."""
    name: str
    description: str = ""
    parameters: Dict[str, Any] = field(default_factory=dict)
    extra: Dict[str, Any] = field(default_factory=dict, repr=False)

    def to_dict(self) -> dict:
        data = copy.deepcopy(self.extra)
        data.update({
            "name": self.name,
            "description": self.description,
            "parameters": copy.deepcopy(self.parameters),
        })
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "PluginSpec":
        known = {"name", "description", "parameters"}
        return cls(
            name=data.get("name", ""),
            description=data.get("description", ""),
            parameters=copy.deepcopy(data.get("parameters", {})),
            extra={k: copy.deepcopy(v) for k, v in data.items() if k not in known},
        )


_RECORD_KEYS = ("uuid", "id", "title", "overviewMarkdown", "emoji", "spec", "code")


def _as_str(value: Any) -> str:
    return value if isinstance(value, str) else ""


@dataclass
class PluginRecord:
    """A persisted plugin entry."""
    id: str
    uuid: str = ""
    title: Optional[str] = None
    overview_markdown: Optional[str] = None
    emoji: Optional[str] = None
    spec: Optional[PluginSpec] = None
    code: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict, repr=False)
    # Stored form, set by from_dict
    raw: Optional[Dict[str, Any]] = field(default=None, repr=False, compare=False)

    @property
    def is_owned(self) -> bool:
        """True if this record was produced by the bridge sync."""
        return is_owned(self)

    def to_dict(self) -> dict:
        """Serialize for storage. Fields that were never set are omitted."""
        if self.raw is not None and not self.is_owned:
            return copy.deepcopy(self.raw)
        data = copy.deepcopy(self.extra)
        if self.uuid:
            data["uuid"] = self.uuid
        data["id"] = self.id
        if self.title is not None:
            data["title"] = self.title
        if self.overview_markdown is not None:
            data["overviewMarkdown"] = self.overview_markdown
        if self.emoji is not None:
            data["emoji"] = self.emoji
        if self.spec is not None:
            data["spec"] = self.spec.to_dict()
        if self.code is not None:
            data["code"] = self.code
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "PluginRecord":
        spec = data.get("spec")
        return cls(
            id=_as_str(data.get("id")),
            uuid=_as_str(data.get("uuid")),
            title=data.get("title"),
            overview_markdown=data.get("overviewMarkdown"),
            emoji=data.get("emoji"),
            spec=PluginSpec.from_dict(spec) if isinstance(spec, dict) else None,
            code=data.get("code"),
            extra={
                k: copy.deepcopy(v) for k, v in data.items()
                if k not in _RECORD_KEYS or (k == "spec" and not isinstance(v, dict))
            },
            raw=copy.deepcopy(data),
        )


def is_owned(record: PluginRecord) -> bool:
    """Check if a record's id carries the bridge prefix."""
    return record.id.startswith(MCP_ID_PREFIX)
