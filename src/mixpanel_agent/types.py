"""Value types for mixpanel_agent.

All types are immutable frozen dataclasses. Query types describe a single
Mixpanel request (endpoint plus parameters) and are produced by
``build_query``; ``AgentEvent`` is the payload emitted once per check.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar

# =============================================================================
# Query Types
# =============================================================================

QUERY_LIMIT = 5
"""Maximum number of property values Mixpanel returns per query."""


@dataclass(frozen=True, kw_only=True)
class _EventsQuery:
    """Parameters shared by both events query shapes."""

    event_name: str
    type: str
    unit: str
    interval: int
    limit: int = QUERY_LIMIT

    def _base_params(self) -> dict[str, Any]:
        return {
            "type": self.type,
            "unit": self.unit,
            "interval": self.interval,
            "limit": self.limit,
        }


@dataclass(frozen=True, kw_only=True)
class PropertyFilteredQuery(_EventsQuery):
    """Count of one event restricted to one property value.

    Sent to ``events/properties/``. The response buckets are keyed by
    property value.

    Example:
        ```python
        query = PropertyFilteredQuery(
            event_name="Page Visit",
            type="general",
            unit="hour",
            interval=24,
            property_name="Page",
            value="home",
        )
        query.params()
        # {"type": "general", "unit": "hour", "interval": 24, "limit": 5,
        #  "event": "Page Visit", "values": ["home"], "name": "Page"}
        ```
    """

    endpoint: ClassVar[str] = "events/properties/"

    property_name: str
    value: str | int | float

    def params(self) -> dict[str, Any]:
        """Return the request parameters."""
        params = self._base_params()
        params.update(
            {
                "event": self.event_name,
                "values": [self.value],
                "name": self.property_name,
            }
        )
        return params


@dataclass(frozen=True, kw_only=True)
class UnfilteredQuery(_EventsQuery):
    """Total count of one event. Sent to ``events/``."""

    endpoint: ClassVar[str] = "events/"

    def params(self) -> dict[str, Any]:
        """Return the request parameters."""
        params = self._base_params()
        params["event"] = [self.event_name]
        return params


EventsQuery = PropertyFilteredQuery | UnfilteredQuery
"""Either events query shape, resolved once by ``build_query``."""


@dataclass(frozen=True)
class ExportQuery:
    """Raw export request used to count events with a boolean property filter."""

    endpoint: ClassVar[str] = "export"

    event_name: str
    from_date: str
    to_date: str
    where: str

    def params(self) -> dict[str, Any]:
        """Return the request parameters."""
        return {
            "event": [self.event_name],
            "from_date": self.from_date,
            "to_date": self.to_date,
            "where": self.where,
        }


# =============================================================================
# Event Type
# =============================================================================


@dataclass(frozen=True)
class AgentEvent:
    """Event payload produced by one check cycle.

    Ownership passes to the host framework as soon as it is emitted.

    Attributes:
        count: Total number of matching events in the lookback window.
        event_name: Mixpanel event that was counted.
        property: Property filter, if any.
        value: Property value filter, if any.
        time: Lookback window, in units of ``interval``.
        interval: Time unit of the lookback window.
    """

    count: int | float
    event_name: str
    property: str | None = None
    value: Any = None
    time: int = 24
    interval: str = "hour"

    def to_dict(self) -> dict[str, Any]:
        """Serialize the event payload for the host framework.

        Returns:
            Dictionary with count, event_name, property, value, time, interval.
        """
        return {
            "count": self.count,
            "event_name": self.event_name,
            "property": self.property,
            "value": self.value,
            "time": self.time,
            "interval": self.interval,
        }
