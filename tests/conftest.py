"""Shared fixtures for mixpanel_agent tests."""

from __future__ import annotations

import os
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

import httpx
import pytest
from hypothesis import Phase, Verbosity, settings
from pydantic import SecretStr

# =============================================================================
# Hypothesis Configuration
# =============================================================================

settings.register_profile(
    "default",
    max_examples=100,
    verbosity=Verbosity.normal,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.target, Phase.shrink],
)

settings.register_profile(
    "ci",
    max_examples=200,
    verbosity=Verbosity.normal,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.target, Phase.shrink],
    derandomize=True,
)

settings.register_profile(
    "dev",
    max_examples=10,
    verbosity=Verbosity.verbose,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.target, Phase.shrink],
)

settings.load_profile(os.getenv("HYPOTHESIS_PROFILE", "default"))

if TYPE_CHECKING:
    from mixpanel_agent._internal.api_client import MixpanelAPIClient
    from mixpanel_agent._internal.config import Credentials
    from mixpanel_agent.agent import MixpanelAgent

Handler = Callable[[httpx.Request], httpx.Response]


@pytest.fixture
def mock_credentials() -> Credentials:
    """Create mock credentials for API client testing."""
    from mixpanel_agent._internal.config import Credentials

    return Credentials(
        api_key="test_key",
        api_secret=SecretStr("test_secret"),
        project_id="12345",
        region="us",
    )


@pytest.fixture
def credential_env() -> dict[str, str]:
    """Environment mapping carrying Mixpanel credentials."""
    return {
        "MIXPANEL_API_KEY": "env_key",
        "MIXPANEL_SECRET_KEY": "env_secret",
    }


@pytest.fixture
def mock_client_factory(
    mock_credentials: Credentials,
) -> Callable[[Handler], MixpanelAPIClient]:
    """Factory for creating mock API clients.

    Usage:
        def test_something(mock_client_factory):
            def handler(request):
                return httpx.Response(200, json={"data": {"values": {}}})

            with mock_client_factory(handler) as client:
                client.request("events/", {"event": ["Signup"]})
    """
    from mixpanel_agent._internal.api_client import MixpanelAPIClient

    def factory(handler: Handler) -> MixpanelAPIClient:
        transport = httpx.MockTransport(handler)
        return MixpanelAPIClient(mock_credentials, _transport=transport)

    return factory


@pytest.fixture
def agent_factory(
    credential_env: dict[str, str],
) -> Callable[..., MixpanelAgent]:
    """Factory for agents whose HTTP traffic goes to a handler.

    Usage:
        def test_something(agent_factory):
            agent = agent_factory({"event_name": "Signup"}, handler)
            agent.check()
    """
    from mixpanel_agent.agent import MixpanelAgent

    def factory(
        options: dict[str, Any],
        handler: Handler,
        **kwargs: Any,
    ) -> MixpanelAgent:
        return MixpanelAgent(
            options,
            environ=credential_env,
            _transport=httpx.MockTransport(handler),
            **kwargs,
        )

    return factory
