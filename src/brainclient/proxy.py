"""Calls to other services through the hub's gateway.

Usage:
    proxy = ServiceProxy("https://brain.example.com", "brn_svc_xxx", HttpTransport())
    health = proxy.get("domain-monitor", "api/health")
    created = proxy.timeout(60).post("webforge", "api/scaffolds", {"platform": "laravel"})
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Optional

from pydantic import ValidationError

from .exceptions import DispatchError, InvalidInputError
from .logging import log_failure
from .models import ServiceRequest
from .result import Result
from .transport import SERVICE_SECRET_HEADER, HttpTransport

logger = logging.getLogger(__name__)

DEFAULT_PROXY_TIMEOUT = 30.0


class ServiceProxy:
    """Forwards a verb/path/body to a named downstream service.

    GET requests send ``body`` as query parameters; other verbs send it as
    the JSON body.
    """

    def __init__(
        self,
        base_url: str,
        service_secret: str,
        transport: HttpTransport,
        timeout: float = DEFAULT_PROXY_TIMEOUT,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.service_secret = service_secret
        self.transport = transport
        self._timeout = timeout

    def timeout(self, seconds: float) -> "ServiceProxy":
        """Set the default timeout for subsequent calls on this instance."""
        if seconds <= 0:
            raise ValueError("timeout must be positive")
        self._timeout = float(seconds)
        return self

    @property
    def current_timeout(self) -> float:
        return self._timeout

    def call(
        self,
        method: str,
        target_service: str,
        path: str,
        body: Optional[Mapping[str, Any]] = None,
    ) -> Result[Any]:
        """Make a proxied request.

        Returns:
            Result with the downstream service's decoded JSON response, or a
            DispatchError / InvalidInputError.
        """
        try:
            request = ServiceRequest(
                method=method,
                target_service=target_service,
                path=path or "",
                body=dict(body or {}),
            )
        except (ValidationError, TypeError, ValueError) as e:
            logger.warning(
                "Brain proxy request rejected: target=%s path=%s method=%s error=%s",
                target_service,
                path,
                method,
                e,
            )
            return Result.failure(InvalidInputError(f"Invalid proxy request: {e}", target=target_service))

        result = self.transport.request(
            request.method.value,
            request.url(self.base_url),
            headers={SERVICE_SECRET_HEADER: self.service_secret},
            body=request.body,
            timeout=self._timeout,
        )
        if not result.ok:
            log_failure(
                logger,
                "Brain proxy request",
                result.error,
                target=request.target_service,
                path=request.path,
                method=request.method.value,
            )
            return Result.failure(
                DispatchError(
                    f"{request.method.value} {request.target_service}/{request.path} failed: {result.error.message}",
                    cause=result.error,
                )
            )
        return result

    def get(self, target_service: str, path: str, query: Optional[Mapping[str, Any]] = None) -> Result[Any]:
        return self.call("GET", target_service, path, query)

    def post(self, target_service: str, path: str, data: Optional[Mapping[str, Any]] = None) -> Result[Any]:
        return self.call("POST", target_service, path, data)

    def put(self, target_service: str, path: str, data: Optional[Mapping[str, Any]] = None) -> Result[Any]:
        return self.call("PUT", target_service, path, data)

    def patch(self, target_service: str, path: str, data: Optional[Mapping[str, Any]] = None) -> Result[Any]:
        return self.call("PATCH", target_service, path, data)

    def delete(self, target_service: str, path: str, data: Optional[Mapping[str, Any]] = None) -> Result[Any]:
        return self.call("DELETE", target_service, path, data)


__all__ = ["ServiceProxy", "DEFAULT_PROXY_TIMEOUT"]
