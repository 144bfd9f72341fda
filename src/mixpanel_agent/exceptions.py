"""Exception hierarchy for mixpanel_agent.

All agent exceptions inherit from MixpanelAgentError, so the host framework
can record any failure of a check cycle with a single except clause while
callers that care can still tell the error kinds apart:

- ValidationError: bad or missing options, raised before any network call
- InvalidTypeError: the ``type`` option is not a Mixpanel counting method
- UnsupportedValueError: boolean property values need the export fallback
- MalformedResponseError: the API answered with an unexpected shape
- APIError and subclasses: HTTP failures with request/response context

None of these are retried by the agent itself.
"""

from __future__ import annotations

from typing import Any


class MixpanelAgentError(Exception):
    """Base exception for all mixpanel_agent errors.

    All agent exceptions inherit from this class, allowing callers to:
    - Catch all agent errors: except MixpanelAgentError
    - Handle specific errors: except UnsupportedValueError
    - Serialize errors for the host's error log: error.to_dict()
    """

    def __init__(
        self,
        message: str,
        code: str = "UNKNOWN_ERROR",
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize exception.

        Args:
            message: Human-readable error message.
            code: Machine-readable error code for programmatic handling.
            details: Additional structured data about the error.
        """
        super().__init__(message)
        self._message = message
        self._code = code
        self._details = details or {}

    @property
    def code(self) -> str:
        """Machine-readable error code."""
        return self._code

    @property
    def message(self) -> str:
        """Human-readable error message."""
        return self._message

    @property
    def details(self) -> dict[str, Any]:
        """Additional structured error data."""
        return self._details

    def to_dict(self) -> dict[str, Any]:
        """Serialize exception for logging/JSON output.

        Returns:
            Dictionary with keys: code, message, details.
        """
        return {
            "code": self._code,
            "message": self._message,
            "details": self._details,
        }

    def __str__(self) -> str:
        """Return human-readable error message."""
        return self._message

    def __repr__(self) -> str:
        """Return detailed string representation."""
        return (
            f"{self.__class__.__name__}(message={self._message!r}, code={self._code!r})"
        )


# Option Exceptions


class ValidationError(MixpanelAgentError):
    """Agent options are missing or malformed.

    Collects every problem found in one pass so the user can fix all of
    them at once. The individual messages are available through ``errors``.

    Example:
        ```python
        try:
            validate_options({"property": "Page"})
        except ValidationError as e:
            for problem in e.errors:
                print(problem)
        ```
    """

    def __init__(self, errors: list[str] | str) -> None:
        """Initialize ValidationError.

        Args:
            errors: One message or a list of messages describing each problem.
        """
        error_list = [errors] if isinstance(errors, str) else list(errors)
        message = "; ".join(error_list) if error_list else "Invalid options"
        super().__init__(
            message,
            code="VALIDATION_ERROR",
            details={"errors": error_list},
        )

    @property
    def errors(self) -> list[str]:
        """Individual validation messages."""
        errors = self._details.get("errors")
        return errors if isinstance(errors, list) else []


class InvalidTypeError(MixpanelAgentError):
    """The ``type`` option is not one of unique, general or average."""

    def __init__(self, type_name: Any) -> None:
        """Initialize InvalidTypeError.

        Args:
            type_name: The rejected counting method.
        """
        super().__init__(
            f"Invalid type {type_name}",
            code="INVALID_TYPE",
            details={
                "type": type_name,
                "valid_types": ["unique", "general", "average"],
            },
        )

    @property
    def type_name(self) -> Any:
        """The rejected counting method."""
        return self._details.get("type")


class UnsupportedValueError(MixpanelAgentError):
    """Boolean property values cannot be queried through events/properties.

    The Mixpanel events/properties endpoint does not match boolean values.
    Use ``MixpanelAgent.number_for_event_using_export`` instead, which
    filters raw exported events with a boolean expression.
    """

    def __init__(self, property_name: str | None, value: Any) -> None:
        """Initialize UnsupportedValueError.

        Args:
            property_name: Property the filter was requested on.
            value: The boolean value that cannot be queried.
        """
        super().__init__(
            "Mixpanel cannot query boolean property values through "
            "events/properties. Use number_for_event_using_export instead.",
            code="UNSUPPORTED_VALUE",
            details={"property": property_name, "value": value},
        )

    @property
    def property_name(self) -> str | None:
        """Property the filter was requested on."""
        return self._details.get("property")

    @property
    def value(self) -> Any:
        """The unsupported value."""
        return self._details.get("value")


class MalformedResponseError(MixpanelAgentError):
    """API response does not have the expected data.values nesting."""

    def __init__(self, message: str, *, path: str | None = None) -> None:
        """Initialize MalformedResponseError.

        Args:
            message: Human-readable error message.
            path: Dotted location in the response where the shape broke.
        """
        details: dict[str, Any] = {}
        if path is not None:
            details["path"] = path
        super().__init__(message, code="MALFORMED_RESPONSE", details=details)

    @property
    def path(self) -> str | None:
        """Dotted location in the response where the shape broke."""
        return self._details.get("path")


# Configuration Exceptions


class ConfigError(MixpanelAgentError):
    """Credentials could not be resolved from options or environment."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize ConfigError.

        Args:
            message: Human-readable error message.
            details: Additional structured data.
        """
        super().__init__(message, code="CONFIG_ERROR", details=details)


# API Exceptions - Base class for HTTP errors


class APIError(MixpanelAgentError):
    """Base class for Mixpanel API HTTP errors.

    Provides structured access to HTTP request/response context so the
    host's error log shows exactly what was sent and what came back.

    Example:
        ```python
        try:
            agent.check()
        except APIError as e:
            print(f"Status: {e.status_code}")
            print(f"Response: {e.response_body}")
            print(f"Request params: {e.request_params}")
        ```
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: int,
        response_body: str | dict[str, Any] | None = None,
        request_method: str | None = None,
        request_url: str | None = None,
        request_params: dict[str, Any] | None = None,
        code: str = "API_ERROR",
    ) -> None:
        """Initialize APIError.

        Args:
            message: Human-readable error message.
            status_code: HTTP status code from response.
            response_body: Raw response body (string or parsed dict).
            request_method: HTTP method used.
            request_url: Full request URL.
            request_params: Query parameters sent.
            code: Machine-readable error code.
        """
        self._status_code = status_code
        self._response_body = response_body
        self._request_method = request_method
        self._request_url = request_url
        self._request_params = request_params

        details: dict[str, Any] = {
            "status_code": status_code,
        }
        if response_body is not None:
            details["response_body"] = response_body
        if request_method is not None:
            details["request_method"] = request_method
        if request_url is not None:
            details["request_url"] = request_url
        if request_params is not None:
            details["request_params"] = request_params

        super().__init__(message, code=code, details=details)

    @property
    def status_code(self) -> int:
        """HTTP status code from response."""
        return self._status_code

    @property
    def response_body(self) -> str | dict[str, Any] | None:
        """Raw response body (string or parsed dict)."""
        return self._response_body

    @property
    def request_method(self) -> str | None:
        """HTTP method used."""
        return self._request_method

    @property
    def request_url(self) -> str | None:
        """Full request URL."""
        return self._request_url

    @property
    def request_params(self) -> dict[str, Any] | None:
        """Query parameters sent."""
        return self._request_params


class AuthenticationError(APIError):
    """Authentication with Mixpanel API failed (HTTP 401)."""

    def __init__(
        self,
        message: str = "Authentication failed",
        *,
        status_code: int = 401,
        response_body: str | dict[str, Any] | None = None,
        request_method: str | None = None,
        request_url: str | None = None,
        request_params: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message,
            status_code=status_code,
            response_body=response_body,
            request_method=request_method,
            request_url=request_url,
            request_params=request_params,
            code="AUTH_FAILED",
        )


class RateLimitError(APIError):
    """Mixpanel API rate limit exceeded (HTTP 429).

    The agent does not retry; ``retry_after`` is passed on so the host
    scheduler can decide when to run the next check.
    """

    def __init__(
        self,
        message: str = "Rate limit exceeded",
        *,
        retry_after: int | None = None,
        status_code: int = 429,
        response_body: str | dict[str, Any] | None = None,
        request_method: str | None = None,
        request_url: str | None = None,
        request_params: dict[str, Any] | None = None,
    ) -> None:
        """Initialize RateLimitError.

        Args:
            message: Human-readable error message.
            retry_after: Seconds until retry is allowed (from Retry-After header).
            status_code: HTTP status code (default 429).
            response_body: Raw response body.
            request_method: HTTP method used.
            request_url: Full request URL.
            request_params: Query parameters sent.
        """
        self._retry_after = retry_after
        if retry_after is not None:
            message = f"{message}. Retry after {retry_after} seconds."

        super().__init__(
            message,
            status_code=status_code,
            response_body=response_body,
            request_method=request_method,
            request_url=request_url,
            request_params=request_params,
            code="RATE_LIMITED",
        )
        if retry_after is not None:
            self._details["retry_after"] = retry_after

    @property
    def retry_after(self) -> int | None:
        """Seconds until retry is allowed, or None if unknown."""
        return self._retry_after


class QueryError(APIError):
    """Query rejected by Mixpanel (HTTP 400, 403 or 404)."""

    def __init__(
        self,
        message: str = "Query execution failed",
        *,
        status_code: int = 400,
        response_body: str | dict[str, Any] | None = None,
        request_method: str | None = None,
        request_url: str | None = None,
        request_params: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message,
            status_code=status_code,
            response_body=response_body,
            request_method=request_method,
            request_url=request_url,
            request_params=request_params,
            code="QUERY_FAILED",
        )


class ServerError(APIError):
    """Mixpanel server error (HTTP 5xx).

    The response_body often carries actionable details, for example
    complaints about the unit/interval combination.
    """

    def __init__(
        self,
        message: str = "Server error",
        *,
        status_code: int = 500,
        response_body: str | dict[str, Any] | None = None,
        request_method: str | None = None,
        request_url: str | None = None,
        request_params: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message,
            status_code=status_code,
            response_body=response_body,
            request_method=request_method,
            request_url=request_url,
            request_params=request_params,
            code="SERVER_ERROR",
        )
