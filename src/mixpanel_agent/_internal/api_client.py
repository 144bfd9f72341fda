"""Mixpanel API Client.

Low-level HTTP client for the Mixpanel endpoints the agent uses:
- Query API: ``events/`` and ``events/properties/``
- Export API: ``export`` (streaming JSONL)

Handles HTTP Basic authentication, regional endpoint routing and mapping of
error responses onto the exception hierarchy. Requests are never retried;
a rate-limited request raises RateLimitError with the server's Retry-After.

This is a private implementation detail. Users should go through
MixpanelAgent instead of accessing this module directly.
"""

from __future__ import annotations

import base64
import json
import logging
from collections.abc import Iterator
from typing import TYPE_CHECKING, Any

import httpx

from mixpanel_agent._internal.config import Credentials
from mixpanel_agent.exceptions import (
    AuthenticationError,
    MalformedResponseError,
    MixpanelAgentError,
    QueryError,
    RateLimitError,
    ServerError,
)

if TYPE_CHECKING:
    from types import TracebackType

    from mixpanel_agent.types import EventsQuery, ExportQuery

logger = logging.getLogger(__name__)

# Regional endpoint configuration
# Each region has separate URLs for query APIs and export/data APIs
ENDPOINTS: dict[str, dict[str, str]] = {
    "us": {
        "query": "https://mixpanel.com/api/query",
        "export": "https://data.mixpanel.com/api/2.0",
    },
    "eu": {
        "query": "https://eu.mixpanel.com/api/query",
        "export": "https://data-eu.mixpanel.com/api/2.0",
    },
    "in": {
        "query": "https://in.mixpanel.com/api/query",
        "export": "https://data-in.mixpanel.com/api/2.0",
    },
}

DEFAULT_USER_AGENT = "mixpanel-agent"


class MixpanelAPIClient:
    """Low-level HTTP client for Mixpanel APIs.

    The underlying ``httpx.Client`` is created on first use and reused for
    every later request until ``close()``.

    Example:
        ```python
        from mixpanel_agent._internal.config import resolve_credentials
        from mixpanel_agent._internal.api_client import MixpanelAPIClient

        with MixpanelAPIClient(resolve_credentials()) as client:
            data = client.request("events/", {"event": ["Signup"], "type": "general",
                                              "unit": "day", "interval": 7})
        ```
    """

    def __init__(
        self,
        credentials: Credentials,
        *,
        timeout: float = 120.0,
        export_timeout: float = 600.0,
        headers: dict[str, str] | None = None,
        user_agent: str | None = None,
        basic_auth: tuple[str, str] | None = None,
        verify: bool = True,
        _transport: httpx.BaseTransport | None = None,
    ) -> None:
        """Initialize the API client.

        Args:
            credentials: Immutable authentication credentials.
            timeout: Request timeout in seconds for query requests.
            export_timeout: Request timeout for export requests.
            headers: Extra headers sent with every request.
            user_agent: User-Agent header value.
            basic_auth: (user, password) pair used instead of the API secret.
            verify: Whether to verify TLS certificates.
            _transport: Internal parameter for testing with MockTransport.
        """
        self._credentials = credentials
        self._timeout = timeout
        self._export_timeout = export_timeout
        self._headers = dict(headers or {})
        self._user_agent = user_agent or DEFAULT_USER_AGENT
        self._basic_auth = basic_auth
        self._verify = verify
        self._client: httpx.Client | None = None
        self._transport = _transport

    def _get_auth_header(self) -> str:
        """Generate HTTP Basic auth header value.

        The API secret is the username with an empty password, unless an
        explicit basic_auth pair was supplied.

        Returns:
            Base64-encoded "user:password" prefixed with "Basic ".
        """
        if self._basic_auth is not None:
            user, password = self._basic_auth
        else:
            user, password = self._credentials.api_secret.get_secret_value(), ""
        encoded = base64.b64encode(f"{user}:{password}".encode()).decode()
        return f"Basic {encoded}"

    def _build_url(self, api_type: str, path: str) -> str:
        """Build full URL for the given API type and path.

        Args:
            api_type: One of "query" or "export".
            path: API endpoint path (e.g., "events/properties/").

        Returns:
            Full URL for the endpoint.
        """
        base = ENDPOINTS[self._credentials.region][api_type]
        path = path.strip("/")
        return f"{base}/{path}"

    def _build_headers(self) -> dict[str, str]:
        headers = {"User-Agent": self._user_agent}
        headers.update(self._headers)
        headers["Authorization"] = self._get_auth_header()
        return headers

    def _encode_params(self, params: dict[str, Any]) -> dict[str, Any]:
        """Add credential params and JSON-encode list values.

        Mixpanel expects array parameters such as ``event`` and ``values``
        as JSON strings.
        """
        encoded: dict[str, Any] = {}
        for key, value in params.items():
            if isinstance(value, list | tuple):
                encoded[key] = json.dumps(list(value))
            else:
                encoded[key] = value
        if self._credentials.api_key is not None:
            encoded["api_key"] = self._credentials.api_key
        if self._credentials.project_id is not None:
            encoded["project_id"] = self._credentials.project_id
        return encoded

    def _ensure_client(self) -> httpx.Client:
        """Ensure HTTP client is initialized.

        Returns:
            The httpx.Client instance.
        """
        if self._client is None:
            self._client = httpx.Client(
                timeout=self._timeout,
                verify=self._verify,
                transport=self._transport,
            )
        return self._client

    def close(self) -> None:
        """Close the HTTP client and release resources."""
        if self._client is not None:
            self._client.close()
            self._client = None

    def __enter__(self) -> MixpanelAPIClient:
        """Enter context manager."""
        self._ensure_client()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        """Exit context manager, closing client."""
        self.close()

    @property
    def region(self) -> str:
        """The configured region code ('us', 'eu', or 'in')."""
        return self._credentials.region

    def _parse_retry_after(self, response: httpx.Response) -> int | None:
        """Parse Retry-After header if present.

        Args:
            response: HTTP response.

        Returns:
            Seconds to wait, or None if header not present.
        """
        retry_after = response.headers.get("Retry-After")
        if retry_after is not None:
            try:
                return int(retry_after)
            except ValueError:
                pass
        return None

    def _raise_for_status(
        self,
        response: httpx.Response,
        response_body: str | dict[str, Any] | None,
        *,
        request_method: str,
        request_url: str,
        request_params: dict[str, Any],
    ) -> None:
        """Raise the exception matching an error status code.

        Status code handling:
            - 400, 403, 404: QueryError with error message from response body
            - 401: AuthenticationError
            - 429: RateLimitError (not retried)
            - 5xx: ServerError with status code and error details
        """
        status = response.status_code
        if status < 400:
            return

        context: dict[str, Any] = {
            "status_code": status,
            "response_body": response_body,
            "request_method": request_method,
            "request_url": request_url,
            "request_params": request_params,
        }

        if status == 401:
            raise AuthenticationError(
                "Invalid credentials. Check api_key and secret_key.", **context
            )
        if status == 429:
            raise RateLimitError(
                "Rate limit exceeded",
                retry_after=self._parse_retry_after(response),
                **context,
            )
        if status in (400, 403, 404):
            defaults = {
                400: "Unknown error",
                403: "Permission denied",
                404: "Resource not found",
            }
            error_msg = defaults[status]
            if isinstance(response_body, dict):
                error_msg = response_body.get("error", error_msg)
            elif isinstance(response_body, str) and response_body:
                error_msg = response_body[:200]
            raise QueryError(error_msg, **context)
        if status >= 500:
            error_msg = f"Server error: {status}"
            if isinstance(response_body, dict) and "error" in response_body:
                error_msg = f"Server error: {response_body['error']}"
            elif isinstance(response_body, str) and response_body:
                error_msg = f"Server error: {response_body[:200]}"
            raise ServerError(error_msg, **context)

        raise QueryError(f"Unexpected status {status}", **context)

    def request(self, endpoint: str, params: dict[str, Any]) -> Any:
        """Make an authenticated GET request to a Query API endpoint.

        Args:
            endpoint: Endpoint path relative to the query base URL,
                e.g. "events/" or "events/properties/".
            params: Query parameters; list values are JSON-encoded.

        Returns:
            Parsed JSON response.

        Raises:
            AuthenticationError: Invalid credentials (401).
            RateLimitError: Rate limit exceeded (429).
            QueryError: Invalid parameters (400, 403, 404).
            ServerError: Server-side errors (5xx).
            MalformedResponseError: Body is not JSON.
            MixpanelAgentError: Network/connection errors.
        """
        url = self._build_url("query", endpoint)
        encoded = self._encode_params(params)
        client = self._ensure_client()

        logger.debug("request - url: %s, params: %s", url, encoded)

        try:
            response = client.get(url, params=encoded, headers=self._build_headers())
        except httpx.HTTPError as e:
            raise MixpanelAgentError(
                f"HTTP error: {e}",
                code="HTTP_ERROR",
                details={
                    "error": str(e),
                    "request_method": "GET",
                    "request_url": url,
                    "request_params": encoded,
                },
            ) from e

        response_body: str | dict[str, Any] | None
        try:
            response_body = response.json()
        except json.JSONDecodeError:
            response_body = response.text[:500] if response.text else None

        self._raise_for_status(
            response,
            response_body,
            request_method="GET",
            request_url=url,
            request_params=encoded,
        )

        if not isinstance(response_body, dict | list):
            raise MalformedResponseError(
                "Response body is not valid JSON", path="response"
            )
        return response_body

    def query(self, query: EventsQuery) -> Any:
        """Run an events query.

        Args:
            query: PropertyFilteredQuery or UnfilteredQuery.

        Returns:
            Parsed JSON response.
        """
        return self.request(query.endpoint, query.params())

    def export_events(self, query: ExportQuery) -> Iterator[dict[str, Any]]:
        """Stream raw events from the Export API.

        Streams events line by line from Mixpanel's JSONL export endpoint.

        Args:
            query: Export request (event, date range, where expression).

        Yields:
            Event dictionaries with 'event' and 'properties' keys.
            Malformed JSON lines are logged and skipped.

        Raises:
            AuthenticationError: Invalid credentials.
            RateLimitError: Rate limit exceeded.
            QueryError: Invalid parameters.
            ServerError: Server-side errors (5xx).
            MixpanelAgentError: Network/connection errors.
        """
        url = self._build_url("export", query.endpoint)
        encoded = self._encode_params(query.params())
        client = self._ensure_client()
        headers = self._build_headers()
        headers["Accept-Encoding"] = "gzip"

        logger.debug("export - url: %s, params: %s", url, encoded)

        try:
            with client.stream(
                "GET",
                url,
                params=encoded,
                headers=headers,
                timeout=self._export_timeout,
            ) as response:
                if response.status_code >= 400:
                    body = response.read()
                    response_body: str | dict[str, Any] | None = None
                    try:
                        parsed = json.loads(body)
                        response_body = parsed if isinstance(parsed, dict) else None
                    except json.JSONDecodeError:
                        response_body = body.decode()[:500] if body else None
                    self._raise_for_status(
                        response,
                        response_body,
                        request_method="GET",
                        request_url=url,
                        request_params=encoded,
                    )

                for line in response.iter_lines():
                    if not line.strip():
                        continue
                    try:
                        event = json.loads(line)
                    except json.JSONDecodeError:
                        logger.warning("Skipping malformed line: %s", line[:100])
                        continue
                    yield event
        except httpx.HTTPError as e:
            raise MixpanelAgentError(
                f"HTTP error during export: {e}",
                code="HTTP_ERROR",
                details={"error": str(e), "request_url": url},
            ) from e
