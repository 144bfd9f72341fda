"""Shared fixtures for CLI tests."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import httpx
import pytest
from typer.testing import CliRunner

from mixpanel_agent.agent import MixpanelAgent

Handler = Callable[[httpx.Request], httpx.Response]


@pytest.fixture
def cli_runner() -> CliRunner:
    """Create a CLI runner for testing commands."""
    return CliRunner()


@pytest.fixture
def patch_agent(
    monkeypatch: pytest.MonkeyPatch,
) -> Callable[[Handler], list[dict[str, Any]]]:
    """Route agents built by the CLI to a MockTransport handler.

    Returns a function taking the handler; it returns the list that records
    the options each agent was built with.

    Usage:
        def test_something(cli_runner, patch_agent):
            built = patch_agent(handler)
            cli_runner.invoke(app, ["check", "-e", "Signup"])
            assert built[0]["event_name"] == "Signup"
    """

    for name in (
        "MIXPANEL_API_KEY",
        "MIXPANEL_SECRET_KEY",
        "MIXPANEL_PROJECT_ID",
        "MIXPANEL_REGION",
    ):
        monkeypatch.delenv(name, raising=False)

    def install(handler: Handler) -> list[dict[str, Any]]:
        built: list[dict[str, Any]] = []

        def factory(options: dict[str, Any]) -> MixpanelAgent:
            built.append(dict(options))
            return MixpanelAgent(
                options,
                environ={"MIXPANEL_SECRET_KEY": "env_secret"},
                _transport=httpx.MockTransport(handler),
            )

        monkeypatch.setattr("mixpanel_agent.cli.utils.MixpanelAgent", factory)
        return built

    return install
