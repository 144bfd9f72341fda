"""
mixpanel_agent - Scheduled Mixpanel event-count agent.

Counts a Mixpanel event over a lookback window, optionally restricted to one
property value, and emits the total as an event for the host framework.
"""

from mixpanel_agent._literal_types import CountType, EventsOrderType, IntervalUnit
from mixpanel_agent.agent import EventEmitter, MixpanelAgent
from mixpanel_agent.exceptions import (
    APIError,
    AuthenticationError,
    ConfigError,
    InvalidTypeError,
    MalformedResponseError,
    MixpanelAgentError,
    QueryError,
    RateLimitError,
    ServerError,
    UnsupportedValueError,
    ValidationError,
)
from mixpanel_agent.types import (
    AgentEvent,
    EventsQuery,
    ExportQuery,
    PropertyFilteredQuery,
    UnfilteredQuery,
)

__version__ = "0.1.0"

__all__ = [
    # Core
    "MixpanelAgent",
    "EventEmitter",
    # Type aliases
    "CountType",
    "EventsOrderType",
    "IntervalUnit",
    # Exceptions
    "MixpanelAgentError",
    "ValidationError",
    "InvalidTypeError",
    "UnsupportedValueError",
    "MalformedResponseError",
    "ConfigError",
    "APIError",
    "AuthenticationError",
    "QueryError",
    "RateLimitError",
    "ServerError",
    # Value types
    "AgentEvent",
    "EventsQuery",
    "ExportQuery",
    "PropertyFilteredQuery",
    "UnfilteredQuery",
]
