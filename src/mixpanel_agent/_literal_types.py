"""Shared Literal type aliases for option validation.

Example:
    from mixpanel_agent import CountType, IntervalUnit

    def describe(type: CountType, interval: IntervalUnit) -> str:
        return f"{type} per {interval}"
"""

from __future__ import annotations

from typing import Literal

# Time units accepted by the events and events/properties endpoints
IntervalUnit = Literal["minute", "hour", "day", "month", "year"]

# Count/aggregation methods ("general" is Mixpanel's term for total)
CountType = Literal["general", "unique", "average"]

# Sort types understood by the host framework's events_order option
EventsOrderType = Literal["string", "number", "time"]

__all__ = ["IntervalUnit", "CountType", "EventsOrderType"]
