"""Validated configuration and wire contracts.

Endpoint configuration tables and transport messages are pydantic models
so malformed configuration fails at composition time instead of in the
middle of a mapping call.
"""

from __future__ import annotations

from typing import Any, Literal, Mapping

from pydantic import BaseModel, ConfigDict, Field, model_validator


class EndpointConfig(BaseModel):
    """How a method's response is unwrapped and mapped."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="forbid")

    root: str | None = Field(
        default=None, description="Named element unwrapped after the envelope"
    )
    class_name: str | None = Field(
        default=None, alias="class", description="Target type name for the result"
    )
    source: str | None = Field(
        default=None, description="Sub-field holding the payload one level deeper"
    )
    item: str | None = Field(
        default=None, description="Envelope element name; implicit single-key unwrap when unset"
    )


def load_endpoint_config(table: Mapping[str, Any]) -> dict[str, EndpointConfig]:
    """Validate a raw ``{method: {...}}`` table."""
    return {
        str(method): entry if isinstance(entry, EndpointConfig) else EndpointConfig.model_validate(entry or {})
        for method, entry in table.items()
    }


class CallRequest(BaseModel):
    """Outbound call message sent by the WebSocket transport."""

    type: Literal["call"] = "call"
    request_id: str
    method: str
    params: Any = None


class CallResult(BaseModel):
    """Inbound result message for a call."""

    model_config = ConfigDict(extra="ignore")

    type: Literal["result"] = "result"
    request_id: str
    status: Literal["success", "error"]
    data: Any | None = None
    message: str | None = None

    @model_validator(mode="after")
    def _validate_coherence(self) -> "CallResult":
        if self.status == "error" and not self.message:
            raise ValueError("error results must include a message")
        return self

