"""HTTP transport for the hub.

One authenticated JSON request/response exchange per call. Every failure is
converted to a TransportError carried in a Result; nothing raises past
``HttpTransport.request``. Callers log failures with their own context.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional

import httpx

from .exceptions import (
    HttpStatusError,
    InvalidInputError,
    NetworkError,
    RequestTimeoutError,
)
from .result import Result
from .version import CLIENT_VERSION

CLIENT_VERSION_HEADER = "X-Brain-Client-Version"
API_KEY_HEADER = "X-Brain-Key"
SERVICE_SECRET_HEADER = "X-Brain-Service-Secret"

DEFAULT_TIMEOUT = 10.0


class HttpTransport:
    """Thin wrapper around ``httpx.Client`` with the hub's conventions.

    - ``Content-Type``/``Accept: application/json`` and the client version
      header are sent on every request.
    - GET requests carry ``body`` as query parameters, never as a body.
    - Status in [200, 300) is success; the JSON body is the value (``None``
      for an empty body, raw text if the body is not JSON).
    """

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT,
        client: Optional[httpx.Client] = None,
        client_version: str = CLIENT_VERSION,
    ) -> None:
        self.timeout = timeout
        self.client_version = client_version
        self._owns_client = client is None
        self._client = client or httpx.Client()

    def default_headers(self) -> dict[str, str]:
        return {
            "Content-Type": "application/json",
            "Accept": "application/json",
            CLIENT_VERSION_HEADER: self.client_version,
        }

    def request(
        self,
        method: str,
        url: str,
        *,
        headers: Optional[Mapping[str, str]] = None,
        body: Optional[Mapping[str, Any]] = None,
        params: Optional[Mapping[str, Any]] = None,
        timeout: Optional[float] = None,
    ) -> Result[Any]:
        """Perform one request.

        Args:
            method: HTTP verb.
            url: Absolute URL.
            headers: Extra headers (credentials); merged over the defaults.
            body: JSON body; for GET it is sent as query parameters instead.
            params: Explicit query parameters.
            timeout: Seconds before giving up; defaults to the transport's.

        Returns:
            Result with the decoded response, or a TransportError /
            InvalidInputError on failure.
        """
        method = method.upper()
        merged_headers = self.default_headers()
        merged_headers.update(headers or {})

        query: dict[str, Any] = dict(params or {})
        json_body: Any = None
        if method == "GET":
            query.update(body or {})
        elif body is not None:
            json_body = dict(body)

        try:
            response = self._client.request(
                method,
                url,
                headers=merged_headers,
                params=query or None,
                json=json_body,
                timeout=self.timeout if timeout is None else timeout,
            )
        except httpx.TimeoutException as e:
            return Result.failure(RequestTimeoutError(f"{method} {url} timed out: {e}", url=url))
        except httpx.HTTPError as e:
            return Result.failure(NetworkError(f"{method} {url} failed: {e}", url=url))
        except (httpx.InvalidURL, TypeError, ValueError) as e:
            # URL, body or query parameters could not be encoded
            return Result.failure(InvalidInputError(f"Could not encode request: {e}", url=url))

        if not 200 <= response.status_code < 300:
            return Result.failure(HttpStatusError(response.status_code, response.text, url=url))

        return Result.success(self._decode(response))

    @staticmethod
    def _decode(response: httpx.Response) -> Any:
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            return response.text

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> "HttpTransport":
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()


__all__ = [
    "HttpTransport",
    "CLIENT_VERSION_HEADER",
    "API_KEY_HEADER",
    "SERVICE_SECRET_HEADER",
    "DEFAULT_TIMEOUT",
]
