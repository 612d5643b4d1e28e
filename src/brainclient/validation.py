"""Advisory local validation of data type payloads against hub schemas.

The hub is authoritative: ``send_data`` always sends, even when local
validation reports errors, and only logs a warning.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Optional

from .catalog import HubCatalog
from .exceptions import DispatchError, EndpointNotFoundError, InvalidInputError
from .logging import get_brain_logger, log_failure
from .result import Result
from .transport import API_KEY_HEADER

SCHEMA_MISSING_KEY = "_schema"
DATA_KEY = "_data"


def _is_numeric(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, (int, float)):
        return True
    if isinstance(value, str):
        try:
            float(value.strip())
        except ValueError:
            return False
        return bool(value.strip())
    return False


def _is_boolean(value: Any) -> bool:
    if isinstance(value, bool):
        return True
    if isinstance(value, int):
        return value in (0, 1)
    return value in ("0", "1")


def _check_property(field: str, value: Any, rules: Mapping[str, Any]) -> Optional[str]:
    """Return the first violation for one property, or None."""
    expected = rules.get("type")
    if expected == "string":
        if not isinstance(value, str):
            return f"The {field} field must be a string."
    elif expected in ("integer", "number"):
        if not _is_numeric(value):
            return f"The {field} field must be a number."
    elif expected == "array":
        if not isinstance(value, (list, tuple)):
            return f"The {field} field must be an array."
    elif expected == "boolean":
        if not _is_boolean(value):
            return f"The {field} field must be true or false."

    max_length = rules.get("maxLength")
    if isinstance(value, str) and isinstance(max_length, int) and len(value) > max_length:
        return f"The {field} field must not be greater than {max_length} characters."
    return None


class LocalValidator:
    """Validates payloads against the cached schema and sends them to the
    data type's endpoint."""

    def __init__(self, catalog: HubCatalog) -> None:
        self.catalog = catalog

    def validate(self, data_type: str, data: Mapping[str, Any]) -> dict[str, str]:
        """Check ``data`` against the schema published for ``data_type``.

        Returns:
            Field name -> first error message. Empty when valid.
        """
        if not isinstance(data, Mapping):
            return {DATA_KEY: "Data must be a mapping"}
        schema = self.catalog.get_schema(data_type)
        if schema is None:
            return {SCHEMA_MISSING_KEY: "Schema not found for data type"}

        errors: dict[str, str] = {}
        for field in [*schema.required_fields, *schema.schema_required]:
            if field not in errors and data.get(field) is None:
                errors[field] = f"The {field} field is required."

        for field, rules in schema.properties.items():
            if field in errors or data.get(field) is None or not isinstance(rules, Mapping):
                continue
            error = _check_property(field, data[field], rules)
            if error:
                errors[field] = error
        return errors

    def send_data(self, data_type: str, data: Mapping[str, Any]) -> Result[Any]:
        """Validate (advisory), resolve the endpoint and POST ``data`` to it."""
        log = get_brain_logger(__name__, data_type=data_type)
        if not isinstance(data, Mapping):
            return Result.failure(InvalidInputError("data must be a mapping", data_type=data_type))

        errors = self.validate(data_type, data)
        if errors and SCHEMA_MISSING_KEY not in errors:
            log.warning("Brain data validation failed for %s: %s", data_type, errors, extra={"errors": errors})

        endpoint = self.catalog.resolve_endpoint(data_type)
        if not endpoint:
            log.error("Brain data type endpoint not found: %s", data_type)
            return Result.failure(EndpointNotFoundError(f"No endpoint for data type {data_type}", data_type=data_type))

        result = self.catalog.transport.request(
            "POST",
            f"{self.catalog.base_url}{endpoint}",
            headers={API_KEY_HEADER: self.catalog.api_key},
            body=dict(data),
            timeout=self.catalog.timeout,
        )
        if not result.ok:
            log_failure(log, "Brain data send", result.error, data_type=data_type)
            return Result.failure(DispatchError(f"Sending {data_type} failed: {result.error.message}", cause=result.error))
        return result


__all__ = ["LocalValidator", "SCHEMA_MISSING_KEY", "DATA_KEY"]
