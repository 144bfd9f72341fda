"""The Mixpanel agent.

A scheduled agent that counts a Mixpanel event over a lookback window and
emits one event per check. The host framework owns scheduling, event
storage and error logging; it calls ``check()`` and receives the payload
through the ``emit`` callback.

Example:
    ```python
    from mixpanel_agent import MixpanelAgent

    agent = MixpanelAgent(
        {"event_name": "Page Visit", "property": "Page", "value": "home"},
        emit=store.append,
    )
    agent.validate_options()
    event = agent.check()
    print(event.count)
    ```
"""

from __future__ import annotations

import copy
import logging
from collections.abc import Callable, Mapping
from datetime import date
from typing import TYPE_CHECKING, Any

from mixpanel_agent._internal.aggregation import total_for_events
from mixpanel_agent._internal.api_client import MixpanelAPIClient
from mixpanel_agent._internal.config import resolve_credentials
from mixpanel_agent._internal.date_utils import export_date_range
from mixpanel_agent._internal.expressions import boolean_filter_expression
from mixpanel_agent._internal.options import (
    AgentOptions,
    validate_options,
    web_request_settings,
)
from mixpanel_agent._internal.query_builder import build_query
from mixpanel_agent.types import AgentEvent, ExportQuery

if TYPE_CHECKING:
    from types import TracebackType

    import httpx

logger = logging.getLogger(__name__)

EventEmitter = Callable[[dict[str, Any]], None]
"""Callback that hands an event payload to the host framework."""


class MixpanelAgent:
    """Agent that checks Mixpanel for an event count and emits an event.

    Each check is independent: options are validated, one query is sent,
    the response is summed and one event is emitted. The only state kept
    between checks is the HTTP client, created on first use.
    """

    default_schedule = "every_1d"
    can_dry_run = True
    cannot_receive_events = True

    DEFAULT_EVENTS_ORDER: list[list[str]] = [
        ["{{date_published}}", "time"],
        ["{{last_updated}}", "time"],
    ]

    event_description = """\
Events look like:

    {
      "count": 45,
      "event_name": "Page Visit",
      "property": "Page",
      "value": "home",
      "time": 24,
      "interval": "hour"
    }
"""

    def __init__(
        self,
        options: Mapping[str, Any] | None = None,
        *,
        emit: EventEmitter | None = None,
        environ: Mapping[str, str] | None = None,
        client: MixpanelAPIClient | None = None,
        _transport: httpx.BaseTransport | None = None,
    ) -> None:
        """Initialize the agent.

        Args:
            options: Agent options. Defaults to ``default_options()``.
            emit: Callback receiving each event payload. Without it events
                are only returned from ``check()``.
            environ: Environment used for credential fallback.
                Defaults to ``os.environ``.
            client: Pre-built API client, used instead of creating one. The
                caller keeps ownership; ``close()`` leaves it open.
            _transport: Internal parameter for testing with MockTransport.
        """
        self.options: dict[str, Any] = (
            dict(options) if options is not None else self.default_options()
        )
        self._emit = emit
        self._environ = environ
        self._client = client
        self._owns_client = client is None
        self._transport = _transport

    @classmethod
    def default_options(cls) -> dict[str, Any]:
        """Options a new agent starts with."""
        return {
            "event_name": "Page Visit",
            "property": "Page",
            "value": "home",
            "time": 24,
            "interval": "hour",
        }

    @property
    def description(self) -> str:
        """Markdown help text shown by the host framework."""
        return (
            "The Mixpanel Agent checks for analytics data and returns an event.\n\n"
            "# Ordering Events\n\n"
            "Set `events_order` to a list of `[template, type]` or "
            "`[template, type, descending]` entries, where type is one of "
            "`string`, `number` or `time`.\n\n"
            "In this Agent, the default value for `events_order` is "
            f"`{self.DEFAULT_EVENTS_ORDER}`."
        )

    @property
    def events_order(self) -> list[list[Any]]:
        """Configured events_order, or DEFAULT_EVENTS_ORDER when unset."""
        configured = self.options.get("events_order")
        if configured:
            return list(configured)
        return copy.deepcopy(self.DEFAULT_EVENTS_ORDER)

    def validate_options(self) -> AgentOptions:
        """Validate the agent's options.

        Returns:
            Typed options.

        Raises:
            ValidationError: Listing every problem with the options.
        """
        return validate_options(self.options)

    @property
    def client(self) -> MixpanelAPIClient:
        """HTTP client for this agent, created on first access."""
        if self._client is None:
            settings = web_request_settings(self.options)
            credentials = resolve_credentials(self.options, environ=self._environ)
            self._client = MixpanelAPIClient(
                credentials, _transport=self._transport, **settings
            )
            logger.debug("Created Mixpanel client for region %s", credentials.region)
        return self._client

    def close(self) -> None:
        """Release the HTTP client, if the agent created it."""
        if self._client is not None and self._owns_client:
            self._client.close()
            self._client = None

    def __enter__(self) -> MixpanelAgent:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()

    def _build_event(self) -> AgentEvent:
        options = self.validate_options()
        count = self.mixpanel_event_number(options)
        return AgentEvent(
            count=count,
            event_name=options.event_name or "",
            property=options.property_name,
            value=options.value,
            time=options.time,
            interval=options.interval,
        )

    def check(self) -> AgentEvent:
        """Run one check cycle and emit the resulting event.

        Returns:
            The emitted event.

        Raises:
            ValidationError: Options are invalid.
            InvalidTypeError: The type option is unknown.
            UnsupportedValueError: The value option is a boolean.
            MalformedResponseError: Mixpanel answered with an unexpected shape.
            APIError: The request failed.
        """
        event = self._build_event()
        if self._emit is not None:
            self._emit(event.to_dict())
        logger.info("Checked %s: count %s", event.event_name, event.count)
        return event

    def dry_run(self) -> AgentEvent:
        """Run a check without emitting the event."""
        return self._build_event()

    def mixpanel_event_number(self, options: AgentOptions) -> int | float:
        """Query Mixpanel and return the total count for the options.

        Args:
            options: Validated agent options.

        Returns:
            Sum of all counts in the response.
        """
        query = build_query(options)
        data = self.client.query(query)
        total = total_for_events(data)
        logger.debug("%s returned total %s", query.endpoint, total)
        return total

    def number_for_event_using_export(
        self,
        event_name: str,
        property_name: str,
        value: bool,
        num_days: int = 30,
        *,
        today: date | None = None,
    ) -> int:
        """Count events with a boolean property value through the export API.

        The events/properties endpoint cannot filter on boolean values, so
        this downloads the raw events for the last ``num_days`` days with a
        server-side boolean filter and counts them. ``check()`` does not
        use this path.

        Args:
            event_name: Event to count.
            property_name: Boolean property to filter on.
            value: Property value to match.
            num_days: Days to look back from today.
            today: Reference date. Defaults to ``date.today()``.

        Returns:
            Number of matching raw events.
        """
        from_date, to_date = export_date_range(num_days, today)
        query = ExportQuery(
            event_name=event_name,
            from_date=from_date,
            to_date=to_date,
            where=boolean_filter_expression(property_name, value),
        )
        count = sum(1 for _ in self.client.export_events(query))
        logger.debug(
            "export %s..%s for %s returned %d events",
            from_date,
            to_date,
            event_name,
            count,
        )
        return count
