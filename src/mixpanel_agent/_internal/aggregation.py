"""Aggregation of Mixpanel events responses into a single count.

Both the events and events/properties endpoints answer with::

    {"data": {"series": [...], "values": {bucket: {time_unit: count}}}}

where a bucket is an event name or a property value. The grand total is the
sum over every bucket of the sum over its time units.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from mixpanel_agent.exceptions import MalformedResponseError


def _require_mapping(value: Any, path: str) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise MalformedResponseError(
            f"Expected an object at '{path}', got {type(value).__name__}",
            path=path,
        )
    return value


def _bucket_total(bucket: Mapping[str, Any], path: str) -> int | float:
    total: int | float = 0
    for time_unit, count in bucket.items():
        # bool is an int subclass but never a count
        if isinstance(count, bool) or not isinstance(count, int | float):
            raise MalformedResponseError(
                f"Expected a number at '{path}.{time_unit}', "
                f"got {type(count).__name__}",
                path=f"{path}.{time_unit}",
            )
        total += count
    return total


def total_for_events(data: Any) -> int | float:
    """Sum every count in an events response.

    An empty ``values`` mapping, or an empty bucket, contributes zero.

    Args:
        data: Parsed JSON response from events/ or events/properties/.

    Returns:
        Grand total across all buckets and time units.

    Raises:
        MalformedResponseError: If ``data.values`` is missing, a bucket is not
            an object, or a count is not a number.

    Example:
        ```python
        total_for_events({"data": {"values": {"A": {"1": 2, "2": 3}, "B": {"1": 5}}}})
        # 10
        ```
    """
    root = _require_mapping(data, "response")
    if "data" not in root:
        raise MalformedResponseError("Response has no 'data' key", path="data")
    payload = _require_mapping(root["data"], "data")
    if "values" not in payload:
        raise MalformedResponseError(
            "Response has no 'data.values' key", path="data.values"
        )
    values = _require_mapping(payload["values"], "data.values")

    counts_per_bucket = [
        _bucket_total(
            _require_mapping(bucket, f"data.values.{name}"),
            f"data.values.{name}",
        )
        for name, bucket in values.items()
    ]
    return sum(counts_per_bucket)
