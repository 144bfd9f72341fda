"""Translate agent options into a Mixpanel events query."""

from __future__ import annotations

import logging
from typing import get_args

from mixpanel_agent._internal.options import AgentOptions
from mixpanel_agent._literal_types import CountType
from mixpanel_agent.exceptions import (
    InvalidTypeError,
    UnsupportedValueError,
    ValidationError,
)
from mixpanel_agent.types import EventsQuery, PropertyFilteredQuery, UnfilteredQuery

logger = logging.getLogger(__name__)

VALID_COUNT_TYPES = get_args(CountType)


def build_query(options: AgentOptions) -> EventsQuery:
    """Build the events query described by the options.

    With both ``property`` and ``value`` set the count is restricted to that
    property value through ``events/properties/``; with neither set the
    total event count comes from ``events/``.

    Args:
        options: Validated agent options.

    Returns:
        PropertyFilteredQuery or UnfilteredQuery.

    Raises:
        ValidationError: If only one of property/value is set, or
            event_name is missing.
        UnsupportedValueError: If value is a boolean. Use the export
            fallback for boolean filters.
        InvalidTypeError: If type is not unique, general or average.
    """
    property_name, value = options.property_name, options.value

    if (property_name is None) != (value is None):
        raise ValidationError("Must specify both 'property' and 'value' or none")

    if isinstance(value, bool):
        raise UnsupportedValueError(property_name, value)

    if options.event_name is None:
        raise ValidationError("Event name must be provided")

    if options.count_type not in VALID_COUNT_TYPES:
        raise InvalidTypeError(options.count_type)

    query: EventsQuery
    if property_name is not None and value is not None:
        query = PropertyFilteredQuery(
            event_name=options.event_name,
            type=options.count_type,
            unit=options.interval,
            interval=options.time,
            property_name=property_name,
            value=value,
        )
    else:
        query = UnfilteredQuery(
            event_name=options.event_name,
            type=options.count_type,
            unit=options.interval,
            interval=options.time,
        )

    logger.debug("Built %s query: %s", query.endpoint, query.params())
    return query
