"""Unit tests for total_for_events."""

from __future__ import annotations

from typing import Any

import pytest
from hypothesis import given
from hypothesis import strategies as st

from mixpanel_agent._internal.aggregation import total_for_events
from mixpanel_agent.exceptions import MalformedResponseError


class TestTotalForEvents:
    """Tests for summing events responses."""

    def test_sums_buckets_and_time_units(self) -> None:
        """Counts are summed within each bucket and across buckets."""
        data = {"data": {"values": {"A": {"1": 2, "2": 3}, "B": {"1": 5}}}}

        assert total_for_events(data) == 10

    def test_realistic_properties_response(self) -> None:
        """A typical events/properties response sums all hours."""
        data = {
            "data": {
                "series": ["2024-01-31 10:00:00", "2024-01-31 11:00:00"],
                "values": {
                    "home": {
                        "2024-01-31 10:00:00": 40,
                        "2024-01-31 11:00:00": 5,
                    }
                },
            },
            "legend_size": 1,
        }

        assert total_for_events(data) == 45

    def test_empty_values_is_zero(self) -> None:
        """No buckets aggregates to zero."""
        assert total_for_events({"data": {"values": {}}}) == 0

    def test_empty_bucket_is_zero(self) -> None:
        """A bucket with no time units contributes zero."""
        assert total_for_events({"data": {"values": {"A": {}, "B": {"1": 4}}}}) == 4

    def test_float_counts(self) -> None:
        """Averages come back as floats and are summed as floats."""
        data = {"data": {"values": {"A": {"1": 1.5, "2": 2.25}}}}

        assert total_for_events(data) == pytest.approx(3.75)

    @pytest.mark.parametrize(
        ("data", "path"),
        [
            ({}, "data"),
            ({"data": {}}, "data.values"),
            ({"data": []}, "data"),
            ({"data": {"values": [1, 2]}}, "data.values"),
            ({"data": {"values": {"A": 3}}}, "data.values.A"),
            ({"data": {"values": {"A": {"1": "3"}}}}, "data.values.A.1"),
            ({"data": {"values": {"A": {"1": None}}}}, "data.values.A.1"),
            ({"data": {"values": {"A": {"1": True}}}}, "data.values.A.1"),
        ],
    )
    def test_malformed_shapes(self, data: dict[str, Any], path: str) -> None:
        """Unexpected shapes raise MalformedResponseError naming the location."""
        with pytest.raises(MalformedResponseError) as exc_info:
            total_for_events(data)

        assert exc_info.value.path == path
        assert exc_info.value.code == "MALFORMED_RESPONSE"

    def test_non_mapping_response(self) -> None:
        """A list response is malformed."""
        with pytest.raises(MalformedResponseError):
            total_for_events(["Signup"])


class TestTotalForEventsProperties:
    """Property-based tests for total_for_events."""

    @given(
        values=st.dictionaries(
            st.text(max_size=10),
            st.dictionaries(
                st.text(max_size=10),
                st.integers(min_value=0, max_value=10**9),
                max_size=10,
            ),
            max_size=10,
        )
    )
    def test_total_equals_sum_of_all_counts(
        self, values: dict[str, dict[str, int]]
    ) -> None:
        """Property: total equals the sum over every bucket and time unit."""
        expected = sum(sum(bucket.values()) for bucket in values.values())

        assert total_for_events({"data": {"values": values}}) == expected

    @given(
        values=st.dictionaries(
            st.text(max_size=10),
            st.dictionaries(
                st.text(max_size=10),
                st.integers(min_value=0, max_value=1000),
                max_size=5,
            ),
            max_size=5,
        )
    )
    def test_total_is_never_negative(self, values: dict[str, dict[str, int]]) -> None:
        """Property: non-negative counts never sum to a negative total."""
        assert total_for_events({"data": {"values": values}}) >= 0
