"""Event dispatch to the hub's ``/api/v1/events`` endpoint.

Builds the EventEnvelope wire body, sends it through HttpTransport and
returns a Result. Failures are logged once here, with the event type, and
never retried.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any, Optional

from pydantic import ValidationError

from .exceptions import BrainClientError, DispatchError, InvalidInputError
from .logging import get_brain_logger, log_failure
from .models import EventEnvelope, EventReceipt, VersionInfo
from .result import Result
from .tasks import TaskSubmitter, ThreadPoolTaskSubmitter
from .transport import API_KEY_HEADER, HttpTransport

logger = logging.getLogger(__name__)

EVENTS_PATH = "/api/v1/events"
VERSION_PATH = "/api/v1/client/version"
EVENT_REGISTER_PATH = "/api/v1/client/events/register"

ENVELOPE_OPTIONS = ("severity", "fingerprint", "message", "context", "occurred_at")


def build_envelope(
    event_type: str,
    payload: Mapping[str, Any],
    options: Optional[Mapping[str, Any]] = None,
) -> EventEnvelope:
    """Validate caller input and build an envelope.

    Options with a ``None`` value are treated as absent; unknown option keys
    are ignored.

    Raises:
        InvalidInputError: empty event type, non-mapping or non-JSON payload,
            invalid option values.
    """
    if not isinstance(event_type, str) or not event_type.strip():
        raise InvalidInputError("event_type must be a non-empty string", event_type=event_type)
    if not isinstance(payload, Mapping):
        raise InvalidInputError(
            f"payload must be a mapping, got {type(payload).__name__}",
            event_type=event_type,
        )
    if options is not None and not isinstance(options, Mapping):
        raise InvalidInputError("options must be a mapping", event_type=event_type)

    fields = {k: v for k, v in (options or {}).items() if k in ENVELOPE_OPTIONS and v is not None}
    try:
        envelope = EventEnvelope(event_type=event_type, payload=dict(payload), **fields)
        json.dumps(envelope.to_wire())
    except ValidationError as e:
        raise InvalidInputError(f"Invalid event: {e.errors()[0].get('msg', e)}", event_type=event_type)
    except (TypeError, ValueError) as e:
        raise InvalidInputError(f"Event is not JSON-serializable: {e}", event_type=event_type)
    return envelope


class EventDispatcher:
    """Sends events and client-level calls authenticated with the API key.

    Example:
        dispatcher = EventDispatcher("https://brain.example.com", "brain_xxx", HttpTransport())
        result = dispatcher.send("order.completed", {"order_id": "ORD-1"}, {"severity": "info"})
        if result.ok:
            print(result.value.id)
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        transport: HttpTransport,
        submitter: Optional[TaskSubmitter] = None,
        timeout: Optional[float] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.transport = transport
        self.timeout = timeout
        self._submitter = submitter

    @property
    def submitter(self) -> TaskSubmitter:
        if self._submitter is None:
            self._submitter = ThreadPoolTaskSubmitter()
        return self._submitter

    def _headers(self) -> dict[str, str]:
        return {API_KEY_HEADER: self.api_key}

    def send(
        self,
        event_type: str,
        payload: Mapping[str, Any],
        options: Optional[Mapping[str, Any]] = None,
    ) -> Result[EventReceipt]:
        """Send an event to the hub.

        Args:
            event_type: Dot-namespaced type (e.g. "user.signup").
            payload: Event data, sent unchanged.
            options: Optional severity, fingerprint, message, context, occurred_at.

        Returns:
            Result with the hub's receipt (``id``, ``status``) or a
            DispatchError / InvalidInputError.
        """
        log = get_brain_logger(__name__, event_type=event_type)
        try:
            envelope = build_envelope(event_type, payload, options)
        except InvalidInputError as e:
            log.warning("Brain event rejected before send: %s", e.message)
            return Result.failure(e)

        result = self.transport.request(
            "POST",
            f"{self.base_url}{EVENTS_PATH}",
            headers=self._headers(),
            body=envelope.to_wire(),
            timeout=self.timeout,
        )
        if not result.ok:
            log_failure(log, "Brain event send", result.error, event_type=event_type)
            return Result.failure(self._wrap(f"Event {event_type} was not accepted", result.error))

        data = result.value if isinstance(result.value, dict) else {}
        return Result.success(EventReceipt.model_validate(data))

    def send_async(
        self,
        event_type: str,
        payload: Mapping[str, Any],
        options: Optional[Mapping[str, Any]] = None,
    ) -> None:
        """Queue ``send`` on the task submitter and return immediately."""
        payload = dict(payload) if isinstance(payload, Mapping) else payload
        options = dict(options) if isinstance(options, Mapping) else options
        self.submitter.submit(lambda: self.send(event_type, payload, options))

    def check_version(self) -> Result[VersionInfo]:
        """Ask the hub whether a newer client version is available."""
        result = self.transport.request(
            "GET",
            f"{self.base_url}{VERSION_PATH}",
            timeout=self.timeout,
        )
        if not result.ok:
            log_failure(logger, "Brain version check", result.error, level=logging.WARNING)
            return Result.failure(self._wrap("Version check failed", result.error))
        data = result.value if isinstance(result.value, dict) else {}
        return Result.success(VersionInfo.model_validate(data))

    def register_event_type(self, event_type: str, description: str) -> Result[Any]:
        """Declare a custom event type (and its description) to the hub."""
        if not isinstance(event_type, str) or not event_type.strip():
            return Result.failure(InvalidInputError("event_type must be a non-empty string"))
        result = self.transport.request(
            "POST",
            f"{self.base_url}{EVENT_REGISTER_PATH}",
            headers=self._headers(),
            body={"event_type": event_type, "description": description},
            timeout=self.timeout,
        )
        if not result.ok:
            log_failure(
                logger, "Brain event registration", result.error, level=logging.WARNING, event_type=event_type
            )
            return Result.failure(self._wrap(f"Registering {event_type} failed", result.error))
        return result

    @staticmethod
    def _wrap(message: str, error: Optional[BrainClientError]) -> DispatchError:
        return DispatchError(f"{message}: {error.message if error else 'unknown error'}", cause=error)


__all__ = ["EventDispatcher", "build_envelope", "EVENTS_PATH", "ENVELOPE_OPTIONS"]
