"""Agent option parsing and validation.

Options arrive from the host framework as a loosely typed mapping. This
module turns them into an immutable ``AgentOptions`` model and reports every
problem it finds as a single ``ValidationError`` before any request is made.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, get_args

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    SecretStr,
    field_validator,
)
from pydantic import ValidationError as PydanticValidationError

from mixpanel_agent._internal.config import RegionType
from mixpanel_agent._literal_types import EventsOrderType, IntervalUnit
from mixpanel_agent.exceptions import ValidationError

logger = logging.getLogger(__name__)

VALID_EVENTS_ORDER_TYPES = get_args(EventsOrderType)
_BOOLEAN_STRINGS = ("true", "false")
_PRECHECKED_FIELDS = (
    "basic_auth",
    "headers",
    "user_agent",
    "disable_ssl_verification",
    "events_order",
)


def is_present(value: Any) -> bool:
    """Return whether an option value counts as supplied.

    ``None``, blank strings and empty collections are absent. Every other
    value, including ``False`` and ``0``, is present.
    """
    if value is None:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    if isinstance(value, list | tuple | dict):
        return len(value) > 0
    return True


class AgentOptions(BaseModel):
    """Validated, immutable agent options.

    Field aliases match the option keys used by the host framework, so a raw
    options mapping can be passed straight to ``model_validate``. Keys the
    agent does not know about are ignored.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    event_name: str | None = None
    property_name: str | None = Field(default=None, alias="property")
    value: str | int | float | bool | None = None
    time: int = Field(default=24, gt=0)
    interval: IntervalUnit = "hour"
    # Checked against the counting methods by build_query, not here
    count_type: Any = Field(default="general", alias="type")

    api_key: str | None = None
    secret_key: SecretStr | None = None
    project_id: str | None = None
    region: RegionType = "us"

    headers: dict[str, str] | None = None
    basic_auth: str | list[str] | None = None
    user_agent: str | None = None
    disable_ssl_verification: bool = False

    events_order: list[list[Any]] | None = None

    @field_validator("property_name", "event_name", "value", mode="before")
    @classmethod
    def blank_to_none(cls, v: Any) -> Any:
        """Treat blank strings as absent."""
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("project_id", mode="before")
    @classmethod
    def project_id_to_str(cls, v: Any) -> Any:
        """Accept numeric project ids."""
        if isinstance(v, int) and not isinstance(v, bool):
            return str(v)
        return v

    @field_validator("region", mode="before")
    @classmethod
    def normalize_region(cls, v: Any) -> Any:
        """Normalize region to lowercase."""
        if v is None:
            return "us"
        return v.lower() if isinstance(v, str) else v

    @field_validator("count_type", mode="before")
    @classmethod
    def default_type(cls, v: Any) -> Any:
        """Fall back to "general" only when type is unset."""
        if v is None:
            return "general"
        return v

    @field_validator("time", mode="before")
    @classmethod
    def default_time(cls, v: Any) -> Any:
        """Fall back to 24 when no time is given; reject booleans."""
        if v is None or (isinstance(v, str) and not v.strip()):
            return 24
        if isinstance(v, bool):
            raise ValueError("time must be an integer")
        return v

    @field_validator("interval", mode="before")
    @classmethod
    def default_interval(cls, v: Any) -> Any:
        """Fall back to "hour" when no interval is given."""
        if v is None or (isinstance(v, str) and not v.strip()):
            return "hour"
        return v

    @field_validator("disable_ssl_verification", mode="before")
    @classmethod
    def parse_boolean(cls, v: Any) -> Any:
        if v is None:
            return False
        return v


def validate_web_request_options(options: Mapping[str, Any]) -> list[str]:
    """Check the HTTP-level options shared by web-requesting agents.

    Args:
        options: Raw options mapping.

    Returns:
        List of error messages; empty when the options are well formed.
    """
    errors: list[str] = []

    basic_auth = options.get("basic_auth")
    if is_present(basic_auth):
        if isinstance(basic_auth, str):
            if ":" not in basic_auth:
                errors.append("basic_auth must be of the form 'user:password'")
        elif isinstance(basic_auth, list | tuple):
            if len(basic_auth) != 2 or not all(
                isinstance(part, str) for part in basic_auth
            ):
                errors.append("basic_auth must be a list of two strings")
        else:
            errors.append(
                "basic_auth must be a 'user:password' string or a list of two strings"
            )

    headers = options.get("headers")
    if headers is not None:
        if not isinstance(headers, Mapping):
            errors.append("if provided, headers must be a hash")
        elif not all(
            isinstance(k, str) and isinstance(v, str) for k, v in headers.items()
        ):
            errors.append("headers keys and values must be strings")

    user_agent = options.get("user_agent")
    if user_agent is not None and not isinstance(user_agent, str):
        errors.append("user_agent must be a string")

    disable_ssl = options.get("disable_ssl_verification")
    if disable_ssl is not None and not isinstance(disable_ssl, bool):
        if not (isinstance(disable_ssl, str) and disable_ssl in _BOOLEAN_STRINGS):
            errors.append(
                "Please set disable_ssl_verification to true or false, or leave it blank"
            )

    return errors


def split_basic_auth(basic_auth: Any) -> tuple[str, str] | None:
    """Split a basic_auth option into a (user, password) pair.

    Accepts "user:password" strings (the password may contain colons) and
    two-element lists. Absent values give None.
    """
    if not is_present(basic_auth):
        return None
    if isinstance(basic_auth, str):
        user, _, password = basic_auth.partition(":")
        return user, password
    user, password = basic_auth
    return str(user), str(password)


def web_request_settings(options: Mapping[str, Any]) -> dict[str, Any]:
    """Return HTTP client settings from the web request options.

    Args:
        options: Raw options mapping.

    Returns:
        Keyword arguments for MixpanelAPIClient: headers, user_agent,
        basic_auth and verify.

    Raises:
        ValidationError: If the web request options are malformed.
    """
    errors = validate_web_request_options(options)
    if errors:
        raise ValidationError(errors)
    disable_ssl = options.get("disable_ssl_verification")
    return {
        "headers": dict(options.get("headers") or {}),
        "user_agent": options.get("user_agent") or None,
        "basic_auth": split_basic_auth(options.get("basic_auth")),
        "verify": not (disable_ssl is True or disable_ssl == "true"),
    }


def _is_boolean_like(value: Any) -> bool:
    return isinstance(value, bool) or (
        isinstance(value, str) and value in _BOOLEAN_STRINGS
    )


def validate_events_order(
    events_order: Any, key: str = "events_order"
) -> list[str]:
    """Check an events_order option.

    Each entry is ``[template, type]`` or ``[template, type, descending]``
    with type one of string, number or time.

    Args:
        events_order: The raw option value; None means "use the default".
        key: Option name used in the error message.

    Returns:
        List of error messages; empty when the option is well formed.
    """
    if events_order is None:
        return []
    if isinstance(events_order, list) and all(
        isinstance(entry, list)
        and 2 <= len(entry) <= 3
        and isinstance(entry[0], str)
        and entry[1] in VALID_EVENTS_ORDER_TYPES
        and (len(entry) < 3 or _is_boolean_like(entry[2]))
        for entry in events_order
    ):
        return []
    return [f"{key} must be an array of arrays"]


def _format_pydantic_errors(
    exc: PydanticValidationError, skip: tuple[str, ...] = ()
) -> list[str]:
    messages = []
    for error in exc.errors():
        if error["loc"] and error["loc"][0] in skip:
            continue
        location = ".".join(str(part) for part in error["loc"])
        messages.append(f"{location}: {error['msg']}")
    return messages


def validate_options(options: Mapping[str, Any]) -> AgentOptions:
    """Validate raw agent options and return the typed form.

    Checks, collecting every failure:
    - event_name is present
    - property and value are both present or both absent
    - web request options (basic_auth, headers, user_agent,
      disable_ssl_verification) are well formed
    - events_order is well formed
    - time, interval and region have valid types and values

    The ``type`` option is not checked here; ``build_query`` rejects unknown
    counting methods with ``InvalidTypeError``.

    Args:
        options: Raw options mapping from the host framework.

    Returns:
        Immutable AgentOptions.

    Raises:
        ValidationError: If any check fails.
    """
    errors: list[str] = []

    if not is_present(options.get("event_name")):
        errors.append("event_name is required")

    has_property = is_present(options.get("property"))
    has_value = is_present(options.get("value"))
    if has_property != has_value:
        errors.append("Please provide both 'property' and 'value', or neither")

    errors.extend(validate_web_request_options(options))
    errors.extend(validate_events_order(options.get("events_order")))

    typed: AgentOptions | None = None
    try:
        typed = AgentOptions.model_validate(dict(options))
    except PydanticValidationError as e:
        # These fields already have their own messages above
        errors.extend(_format_pydantic_errors(e, skip=_PRECHECKED_FIELDS))
        if not errors:
            raise ValidationError(_format_pydantic_errors(e)) from e

    if errors or typed is None:
        logger.debug("Rejected agent options: %s", errors)
        raise ValidationError(errors)
    return typed
