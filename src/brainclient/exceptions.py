"""Unified exception hierarchy for the Brain Nucleus client.

All client errors inherit from BrainClientError. This module provides:
- Base exception hierarchy with stable error codes
- ErrorRegistry for mapping codes back to error classes

Errors are carried as values inside ``Result`` by every public client
operation; they are only raised when a caller explicitly asks for it via
``Result.unwrap()`` or when a strict constructor is misconfigured.

Usage:
    from brainclient.exceptions import (
        BrainClientError,
        ConfigurationError,
        HttpStatusError,
    )

    result = client.send("user.signup", {"email": "a@b.c"})
    if not result.ok and isinstance(result.error.cause, HttpStatusError):
        ...
"""

from __future__ import annotations

from typing import Any, Callable, TypeVar, cast

__all__ = [
    # Base hierarchy
    "BrainClientError",
    "InvalidInputError",
    "ConfigurationError",
    "TransportError",
    "HttpStatusError",
    "NetworkError",
    "RequestTimeoutError",
    "DispatchError",
    "EndpointNotFoundError",
    # Registry
    "ErrorRegistry",
    "error_registry",
    "register_error",
]


# ---- Exception Hierarchy ----------------------------------------------------


class BrainClientError(Exception):
    """Base exception for all Brain client failures.

    Attributes:
        code: Stable error code string (e.g. "TRANSPORT_ERROR").
        message: Human-readable error description.
        details: Additional context as keyword arguments.
    """

    code: str = "INTERNAL_ERROR"
    message: str = "An internal error occurred"

    def __init__(self, message: str | None = None, code: str | None = None, **kwargs: Any) -> None:
        self.message = message or self.message
        self.code = code or self.code
        self.details = kwargs
        super().__init__(self.message)


class InvalidInputError(BrainClientError):
    """Caller-supplied data is malformed (detected before any network call)."""

    code: str = "INVALID_INPUT"


class ConfigurationError(BrainClientError):
    """Base URL or credentials are missing or invalid."""

    code: str = "CONFIGURATION_MISSING"
    message: str = "Brain client is not configured"


class TransportError(BrainClientError):
    """HTTP exchange with the hub failed."""

    code: str = "TRANSPORT_ERROR"


class HttpStatusError(TransportError):
    """Hub answered with a non-2xx status."""

    code: str = "HTTP_STATUS"

    def __init__(self, status_code: int, body: str = "", message: str | None = None, **kwargs: Any) -> None:
        self.status_code = status_code
        self.body = body
        super().__init__(message or f"HTTP {status_code}", status_code=status_code, body=body, **kwargs)


class NetworkError(TransportError):
    """Connection could not be established or broke mid-exchange."""

    code: str = "NETWORK_FAILURE"


class RequestTimeoutError(TransportError):
    """Request did not complete within its timeout."""

    code: str = "TIMEOUT"
    message: str = "Request timed out"


class DispatchError(BrainClientError):
    """A client operation failed; ``cause`` holds the underlying error."""

    code: str = "DISPATCH_ERROR"

    def __init__(
        self,
        message: str | None = None,
        cause: BrainClientError | None = None,
        **kwargs: Any,
    ) -> None:
        self.cause = cause
        super().__init__(message, **kwargs)

    @property
    def status_code(self) -> int | None:
        """HTTP status of the underlying failure, if there was one."""
        if isinstance(self.cause, HttpStatusError):
            return self.cause.status_code
        return None


class EndpointNotFoundError(BrainClientError):
    """The hub's catalog has no endpoint for the requested data type."""

    code: str = "ENDPOINT_NOT_FOUND"


# ---- Error Registry ---------------------------------------------------------

_E = TypeVar("_E", bound=type[BrainClientError])


class ErrorRegistry:
    """Registry mapping stable error codes to error classes."""

    def __init__(self) -> None:
        self._errors: dict[str, type[BrainClientError]] = {}

    def register(self, code: str, error_cls: type[BrainClientError]) -> None:
        self._errors[code] = error_cls

    def get(self, code: str) -> type[BrainClientError] | None:
        return self._errors.get(code)

    def all(self) -> dict[str, type[BrainClientError]]:
        return dict(self._errors)


error_registry = ErrorRegistry()


def register_error(code: str) -> Callable[[_E], _E]:
    """Decorator to register a custom error type.

    Usage:
        @register_error("QUOTA_EXCEEDED")
        class QuotaExceededError(BrainClientError):
            code = "QUOTA_EXCEEDED"
    """

    def decorator(cls: _E) -> _E:
        error_registry.register(code, cls)
        return cls

    return cast(Callable[[_E], _E], decorator)


# Register base errors
error_registry.register("INTERNAL_ERROR", BrainClientError)
error_registry.register("INVALID_INPUT", InvalidInputError)
error_registry.register("CONFIGURATION_MISSING", ConfigurationError)
error_registry.register("TRANSPORT_ERROR", TransportError)
error_registry.register("HTTP_STATUS", HttpStatusError)
error_registry.register("NETWORK_FAILURE", NetworkError)
error_registry.register("TIMEOUT", RequestTimeoutError)
error_registry.register("DISPATCH_ERROR", DispatchError)
error_registry.register("ENDPOINT_NOT_FOUND", EndpointNotFoundError)
