"""Wire and data models for the Brain Nucleus client.

These are Pydantic models for what the client sends to and reads from the
hub. Payloads and contexts are opaque JSON-like mappings passed through
unchanged.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Optional, Union

from pydantic import BaseModel, Field, field_validator


class Severity(str, Enum):
    """Event severity understood by the hub."""

    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class HttpMethod(str, Enum):
    """Verbs the service gateway forwards."""

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"


class CapabilityStatus(str, Enum):
    """Lifecycle of a declared capability. Only ACTIVE counts as available."""

    PENDING = "pending"
    READY = "ready"
    ACTIVE = "active"


class EventEnvelope(BaseModel):
    """Structured event record sent to ``/api/v1/events``.

    ``event_type`` and ``payload`` are always sent; optional fields are
    omitted from the wire body when absent (never sent as null).
    ``occurred_at`` given as a datetime is serialized with ``isoformat()``;
    given as a string it is passed through unchanged.
    """

    event_type: str
    payload: dict[str, Any]
    severity: Optional[Severity] = None
    fingerprint: Optional[str] = None
    message: Optional[str] = None
    context: Optional[dict[str, Any]] = None
    occurred_at: Optional[Union[datetime, str]] = None

    @field_validator("event_type")
    @classmethod
    def validate_event_type(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("event_type must be a non-empty string")
        return v

    def to_wire(self) -> dict[str, Any]:
        """Build the JSON body for the events endpoint."""
        body: dict[str, Any] = {
            "event_type": self.event_type,
            "payload": self.payload,
        }
        if self.severity is not None:
            body["severity"] = self.severity.value
        for key in ("fingerprint", "message", "context"):
            value = getattr(self, key)
            if value is not None:
                body[key] = value
        if self.occurred_at is not None:
            if isinstance(self.occurred_at, datetime):
                body["occurred_at"] = self.occurred_at.isoformat()
            else:
                body["occurred_at"] = self.occurred_at
        return body


class ServiceRequest(BaseModel):
    """A call forwarded to another service through the hub's gateway."""

    method: HttpMethod
    target_service: str
    path: str = ""
    body: dict[str, Any] = Field(default_factory=dict)

    @field_validator("method", mode="before")
    @classmethod
    def normalize_method(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.upper()
        return v

    @field_validator("target_service")
    @classmethod
    def validate_target(cls, v: str) -> str:
        v = v.strip().strip("/")
        if not v:
            raise ValueError("target_service must be a non-empty string")
        return v

    @field_validator("path")
    @classmethod
    def strip_leading_slash(cls, v: str) -> str:
        return v.lstrip("/")

    def url(self, base_url: str) -> str:
        return f"{base_url.rstrip('/')}/api/v1/proxy/{self.target_service}/{self.path}"


class CapabilityEntry(BaseModel):
    """A data type this client declares it can produce.

    Extra keys reported by the hub or declared in configuration are kept.
    """

    model_config = {"extra": "allow", "use_enum_values": True, "validate_default": True}

    data_type: str
    version: str = "1.0"
    status: CapabilityStatus = CapabilityStatus.READY

    @property
    def is_active(self) -> bool:
        return self.status == CapabilityStatus.ACTIVE.value


class DataTypeInfo(BaseModel):
    """One entry of the hub's data type catalog."""

    model_config = {"extra": "allow"}

    name: str
    endpoint: Optional[str] = None
    required: bool = False


class HubConfig(BaseModel):
    """Configuration advertised by the hub at ``/api/v1/client/config``."""

    model_config = {"extra": "allow"}

    data_types: list[DataTypeInfo] = Field(default_factory=list)

    def endpoint_for(self, data_type: str) -> Optional[str]:
        """Return the POST endpoint for ``data_type``, or None if not listed."""
        for dt in self.data_types:
            if dt.name == data_type:
                return dt.endpoint or None
        return None

    def required_types(self) -> list[str]:
        return [dt.name for dt in self.data_types if dt.required]


class DataTypeSchema(BaseModel):
    """JSON Schema published by the hub for a data type."""

    data_type: str = ""
    required_fields: list[str] = Field(default_factory=list)
    schema_: dict[str, Any] = Field(default_factory=dict, alias="schema")

    model_config = {"extra": "allow", "populate_by_name": True}

    @property
    def properties(self) -> dict[str, dict[str, Any]]:
        props = self.schema_.get("properties")
        return props if isinstance(props, dict) else {}

    @property
    def schema_required(self) -> list[str]:
        required = self.schema_.get("required")
        return list(required) if isinstance(required, (list, tuple, set)) else []


class EventReceipt(BaseModel):
    """Hub acknowledgement for an accepted event."""

    model_config = {"extra": "allow"}

    id: Optional[Union[int, str]] = None
    status: Optional[str] = None


class RegistrationResult(BaseModel):
    """Response of ``/api/v1/client/capabilities``."""

    model_config = {"extra": "allow"}

    registered: int = 0
    results: list[dict[str, Any]] = Field(default_factory=list)


class VersionInfo(BaseModel):
    """Response of ``/api/v1/client/version``."""

    model_config = {"extra": "allow"}

    latest_version: Optional[str] = None
    current_version: Optional[str] = None
    update_required: bool = False


__all__ = [
    "Severity",
    "HttpMethod",
    "CapabilityStatus",
    "EventEnvelope",
    "ServiceRequest",
    "CapabilityEntry",
    "DataTypeInfo",
    "HubConfig",
    "DataTypeSchema",
    "EventReceipt",
    "RegistrationResult",
    "VersionInfo",
]
