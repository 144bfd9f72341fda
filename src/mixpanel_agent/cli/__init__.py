"""Command-line interface for mixpanel_agent."""

from mixpanel_agent.cli.main import app

__all__ = ["app"]
