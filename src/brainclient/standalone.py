"""Events-only client for scripts and small jobs.

No cache, no capability handling and no background submitter: just
``send`` with a short timeout.

Usage:
    client = StandaloneEventClient.from_env()
    client.send("backup.finished", {"size_mb": 512})
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from typing import Any, Optional

from pydantic import ValidationError

from .config import load_config_from_env
from .events import EventDispatcher
from .exceptions import ConfigurationError
from .models import EventReceipt
from .result import Result
from .tasks import InlineTaskSubmitter
from .transport import HttpTransport

logger = logging.getLogger(__name__)

STANDALONE_TIMEOUT = 5.0
STANDALONE_ENV_VARS = ("BRAIN_BASE_URL", "BRAIN_API_KEY")


class StandaloneEventClient:
    """Sends events with a 5 second timeout.

    A client built without credentials is disabled: ``send`` logs and
    returns a ConfigurationError failure.
    """

    def __init__(
        self,
        base_url: Optional[str],
        api_key: Optional[str],
        transport: Optional[HttpTransport] = None,
        timeout: float = STANDALONE_TIMEOUT,
    ) -> None:
        self.enabled = bool(base_url and api_key)
        self._owns_transport = transport is None
        self.transport = transport or HttpTransport(timeout=timeout)
        self._dispatcher: Optional[EventDispatcher] = None
        if self.enabled:
            self._dispatcher = EventDispatcher(
                base_url,
                api_key,
                self.transport,
                submitter=InlineTaskSubmitter(),
                timeout=timeout,
            )

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None, **kwargs: Any) -> "StandaloneEventClient":
        """Build from BRAIN_BASE_URL / BRAIN_API_KEY; disabled (with a warning) if unset.

        Other BRAIN_* settings are ignored, so a bad value in one of them
        cannot break event sending.
        """
        env = os.environ if environ is None else environ
        try:
            config = load_config_from_env({name: env[name] for name in STANDALONE_ENV_VARS if name in env})
        except (ValidationError, ValueError) as e:
            logger.warning("Invalid Brain settings in environment; Brain events will be skipped: %s", e)
            return cls(None, None, **kwargs)
        if not config.is_configured:
            logger.warning("BRAIN_BASE_URL or BRAIN_API_KEY not set; Brain events will be skipped")
        return cls(config.base_url, config.api_key, **kwargs)

    def send(
        self,
        event_type: str,
        payload: Mapping[str, Any],
        options: Optional[Mapping[str, Any]] = None,
    ) -> Result[EventReceipt]:
        if self._dispatcher is None:
            logger.warning("Brain event %s skipped: client not configured", event_type)
            return Result.failure(ConfigurationError())
        return self._dispatcher.send(event_type, payload, options)

    def close(self) -> None:
        if self._owns_transport:
            self.transport.close()

    def __enter__(self) -> "StandaloneEventClient":
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()


__all__ = ["StandaloneEventClient", "STANDALONE_TIMEOUT"]
