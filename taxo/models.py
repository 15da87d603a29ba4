# =============================================================================
# taxo/models.py  —  Data Models (the "nouns" of the system)
# =============================================================================
#
# There is no persisted data here.  Every shape below is transient: built
# for one tool call and thrown away afterwards.
#
#   ToolDescriptor  → one entry of the tool catalog (name, text, schema)
#   ToolEnvelope    → the uniform result of a tool call, success or failure
#
# Upstream payloads themselves are NOT modelled.  The Taxo API is the source
# of truth for their shape; we pass them through as plain JSON values.
# =============================================================================

import json
from dataclasses import dataclass, field
from typing import Any


# -----------------------------------------------------------------------------
# ToolDescriptor — what a client sees when it lists tools
# -----------------------------------------------------------------------------
# Frozen: the catalog is defined once at import time and never mutated.
# `properties` maps parameter name → {"type", "description", optional "enum"}.
# -----------------------------------------------------------------------------
@dataclass(frozen=True)
class ToolDescriptor:
    """A callable tool: its name, description and JSON input schema."""

    name: str
    description: str
    properties: dict[str, dict[str, Any]] = field(default_factory=dict)
    required: tuple[str, ...] = ()

    @property
    def input_schema(self) -> dict[str, Any]:
        """Render the JSON schema advertised to MCP clients.

        Tools without parameters advertise an empty object schema with no
        "required" key at all.
        """
        schema: dict[str, Any] = {
            "type": "object",
            "properties": {name: dict(schema) for name, schema in self.properties.items()},
        }
        if self.required:
            schema["required"] = list(self.required)
        return schema


# -----------------------------------------------------------------------------
# ToolEnvelope — the one result shape every tool call converges on
# -----------------------------------------------------------------------------
# A single text block holding pretty-printed JSON, plus an error flag.
# On success the text is the upstream body; on failure it's the error
# payload from taxo/errors.py.  Never both.
# -----------------------------------------------------------------------------
@dataclass(frozen=True)
class ToolEnvelope:
    text: str
    is_error: bool = False

    @classmethod
    def success(cls, payload: Any) -> "ToolEnvelope":
        return cls(text=to_pretty_json(payload), is_error=False)

    @classmethod
    def failure(cls, payload: dict[str, Any]) -> "ToolEnvelope":
        return cls(text=to_pretty_json(payload), is_error=True)

    def to_dict(self) -> dict[str, Any]:
        """The MCP wire shape: ``{"content": [...], "isError": bool}``."""
        return {
            "content": [{"type": "text", "text": self.text}],
            "isError": self.is_error,
        }


def to_pretty_json(payload: Any) -> str:
    # ensure_ascii=False keeps accented Spanish text (Opinión, Situación)
    # readable instead of \u escapes.
    return json.dumps(payload, indent=2, ensure_ascii=False)
