"""Credential resolution for mixpanel_agent.

Credentials come from one of two places:
1. Per-instance agent options (``api_key`` / ``secret_key``)
2. Process environment (``MIXPANEL_API_KEY`` / ``MIXPANEL_SECRET_KEY``)

Options win over the environment, field by field.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, SecretStr, field_validator

from mixpanel_agent.exceptions import ConfigError

# Valid regions for Mixpanel data residency
VALID_REGIONS = ("us", "eu", "in")
RegionType = Literal["us", "eu", "in"]

ENV_API_KEY = "MIXPANEL_API_KEY"
ENV_SECRET_KEY = "MIXPANEL_SECRET_KEY"
ENV_PROJECT_ID = "MIXPANEL_PROJECT_ID"
ENV_REGION = "MIXPANEL_REGION"


class Credentials(BaseModel):
    """Immutable credentials for Mixpanel API authentication.

    This is a frozen Pydantic model that ensures:
    - All fields are validated on construction
    - The secret is never exposed in repr/str output
    - The object cannot be modified after creation
    """

    model_config = ConfigDict(frozen=True)

    api_secret: SecretStr
    """Project API secret, sent as the HTTP Basic username (redacted in output)."""

    api_key: str | None = None
    """Project API key, sent as the ``api_key`` query parameter when set."""

    project_id: str | None = None
    """Mixpanel project identifier, sent with every request when set."""

    region: RegionType = "us"
    """Data residency region (us, eu, or in)."""

    @field_validator("region", mode="before")
    @classmethod
    def validate_region(cls, v: Any) -> str:
        """Validate and normalize region to lowercase."""
        if not isinstance(v, str):
            raise ValueError(f"Region must be a string. Got: {type(v).__name__}")
        v_lower = v.lower()
        if v_lower not in VALID_REGIONS:
            valid = ", ".join(VALID_REGIONS)
            raise ValueError(f"Region must be one of: {valid}. Got: {v}")
        return v_lower

    @field_validator("api_secret")
    @classmethod
    def validate_secret(cls, v: SecretStr) -> SecretStr:
        """Validate the secret is non-empty."""
        if not v.get_secret_value().strip():
            raise ValueError("Field cannot be empty")
        return v

    def __repr__(self) -> str:
        """Return string representation with redacted secret."""
        return (
            f"Credentials(api_key={self.api_key!r}, api_secret=***, "
            f"project_id={self.project_id!r}, region={self.region!r})"
        )

    def __str__(self) -> str:
        """Return string representation with redacted secret."""
        return self.__repr__()


def _first_present(*candidates: Any) -> Any:
    for candidate in candidates:
        if candidate is None:
            continue
        if isinstance(candidate, SecretStr):
            candidate = candidate.get_secret_value()
        if isinstance(candidate, str) and not candidate.strip():
            continue
        return candidate
    return None


def resolve_credentials(
    options: Mapping[str, Any] | None = None,
    environ: Mapping[str, str] | None = None,
) -> Credentials:
    """Resolve credentials from agent options, falling back to the environment.

    Args:
        options: Agent options; ``api_key``, ``secret_key``, ``project_id``
            and ``region`` are consulted.
        environ: Environment mapping. Defaults to ``os.environ``.

    Returns:
        Immutable Credentials object.

    Raises:
        ConfigError: If no API secret is available, or the region is invalid.
    """
    options = options or {}
    env = os.environ if environ is None else environ

    secret = _first_present(options.get("secret_key"), env.get(ENV_SECRET_KEY))
    if secret is None:
        raise ConfigError(
            "No Mixpanel credentials configured. Set the 'api_key' and "
            f"'secret_key' options, or the {ENV_API_KEY} and {ENV_SECRET_KEY} "
            "environment variables.",
            details={"missing": ["secret_key"]},
        )

    region = _first_present(options.get("region"), env.get(ENV_REGION)) or "us"
    if not isinstance(region, str) or region.lower() not in VALID_REGIONS:
        raise ConfigError(
            f"Invalid region: '{region}'. Must be 'us', 'eu', or 'in'.",
            details={"region": region},
        )

    api_key = _first_present(options.get("api_key"), env.get(ENV_API_KEY))
    project_id = _first_present(options.get("project_id"), env.get(ENV_PROJECT_ID))

    return Credentials(
        api_secret=SecretStr(str(secret)),
        api_key=str(api_key) if api_key is not None else None,
        project_id=str(project_id) if project_id is not None else None,
        region=region,
    )
