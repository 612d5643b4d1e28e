"""Tests for brainclient.models."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from brainclient.models import (
    CapabilityEntry,
    CapabilityStatus,
    DataTypeSchema,
    EventEnvelope,
    HttpMethod,
    HubConfig,
    ServiceRequest,
    Severity,
)


class TestEventEnvelope:
    """Tests for EventEnvelope wire encoding."""

    def test_minimal_wire_body(self) -> None:
        envelope = EventEnvelope(event_type="user.signup", payload={"user_id": 7})
        assert envelope.to_wire() == {"event_type": "user.signup", "payload": {"user_id": 7}}

    def test_optional_fields_included_when_present(self) -> None:
        envelope = EventEnvelope(
            event_type="order.completed",
            payload={"order_id": "ORD-1"},
            severity="warning",
            fingerprint="order-ORD-1",
            message="Order completed",
            context={"tenant": "shop"},
        )
        assert envelope.to_wire() == {
            "event_type": "order.completed",
            "payload": {"order_id": "ORD-1"},
            "severity": "warning",
            "fingerprint": "order-ORD-1",
            "message": "Order completed",
            "context": {"tenant": "shop"},
        }
        assert envelope.severity is Severity.WARNING

    def test_occurred_at_datetime_serialized(self) -> None:
        moment = datetime(2024, 5, 1, 12, 30, tzinfo=timezone.utc)
        from_dt = EventEnvelope(event_type="a.b", payload={}, occurred_at=moment).to_wire()
        from_str = EventEnvelope(event_type="a.b", payload={}, occurred_at=moment.isoformat()).to_wire()
        assert from_dt["occurred_at"] == "2024-05-01T12:30:00+00:00"
        assert from_dt == from_str

    def test_empty_event_type_rejected(self) -> None:
        with pytest.raises(ValidationError):
            EventEnvelope(event_type="  ", payload={})

    def test_unknown_severity_rejected(self) -> None:
        with pytest.raises(ValidationError):
            EventEnvelope(event_type="a.b", payload={}, severity="loud")


class TestServiceRequest:
    """Tests for ServiceRequest."""

    def test_normalization(self) -> None:
        request = ServiceRequest(method="post", target_service=" webforge ", path="/api/scaffolds")
        assert request.method is HttpMethod.POST
        assert request.target_service == "webforge"
        assert request.path == "api/scaffolds"
        assert request.body == {}

    def test_url(self) -> None:
        request = ServiceRequest(method="GET", target_service="domain-monitor", path="api/health")
        assert request.url("https://brain.example.com/") == (
            "https://brain.example.com/api/v1/proxy/domain-monitor/api/health"
        )

    def test_invalid_method(self) -> None:
        with pytest.raises(ValidationError):
            ServiceRequest(method="TRACE", target_service="x")

    def test_empty_target(self) -> None:
        with pytest.raises(ValidationError):
            ServiceRequest(method="GET", target_service="  ")


class TestCapabilityEntry:
    """Tests for CapabilityEntry."""

    def test_defaults(self) -> None:
        entry = CapabilityEntry(data_type="seo_snapshot")
        assert entry.version == "1.0"
        assert entry.status == "ready"
        assert entry.is_active is False

    def test_active(self) -> None:
        assert CapabilityEntry(data_type="x", status=CapabilityStatus.ACTIVE).is_active is True

    def test_extra_keys_kept(self) -> None:
        entry = CapabilityEntry(data_type="x", description="Snapshots")
        assert entry.model_dump()["description"] == "Snapshots"


class TestHubConfig:
    """Tests for HubConfig lookups."""

    def test_endpoint_and_required_types(self) -> None:
        config = HubConfig.model_validate(
            {
                "data_types": [
                    {"name": "seo_snapshot", "endpoint": "/api/v1/seo/snapshots", "required": True},
                    {"name": "uptime", "endpoint": "/api/v1/uptime"},
                    {"name": "draft"},
                ]
            }
        )
        assert config.endpoint_for("seo_snapshot") == "/api/v1/seo/snapshots"
        assert config.endpoint_for("draft") is None
        assert config.endpoint_for("missing") is None
        assert config.required_types() == ["seo_snapshot"]


class TestDataTypeSchema:
    """Tests for DataTypeSchema."""

    def test_schema_alias(self) -> None:
        schema = DataTypeSchema.model_validate(
            {
                "data_type": "seo_snapshot",
                "required_fields": ["url"],
                "schema": {"required": ["score"], "properties": {"url": {"type": "string"}}},
            }
        )
        assert schema.required_fields == ["url"]
        assert schema.schema_required == ["score"]
        assert schema.properties == {"url": {"type": "string"}}
        assert "schema" in schema.model_dump(by_alias=True)

    def test_missing_schema_parts(self) -> None:
        schema = DataTypeSchema()
        assert schema.properties == {}
        assert schema.schema_required == []
