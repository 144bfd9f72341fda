"""Internal implementation modules. Not part of the public API."""

from mixpanel_agent._internal.aggregation import total_for_events
from mixpanel_agent._internal.api_client import MixpanelAPIClient
from mixpanel_agent._internal.config import Credentials, resolve_credentials
from mixpanel_agent._internal.options import AgentOptions, validate_options
from mixpanel_agent._internal.query_builder import build_query

__all__ = [
    "AgentOptions",
    "Credentials",
    "MixpanelAPIClient",
    "build_query",
    "resolve_credentials",
    "total_for_events",
    "validate_options",
]
