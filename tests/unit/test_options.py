"""Unit tests for agent option validation."""

from __future__ import annotations

from typing import Any

import pytest
from hypothesis import given
from hypothesis import strategies as st

from mixpanel_agent._internal.options import (
    AgentOptions,
    is_present,
    split_basic_auth,
    validate_events_order,
    validate_options,
    validate_web_request_options,
    web_request_settings,
)
from mixpanel_agent.exceptions import ValidationError


class TestIsPresent:
    """Tests for is_present."""

    @pytest.mark.parametrize("value", [None, "", "   ", [], {}])
    def test_absent_values(self, value: Any) -> None:
        """None, blank strings and empty collections are absent."""
        assert is_present(value) is False

    @pytest.mark.parametrize("value", ["home", 0, False, True, 1.5, ["x"]])
    def test_present_values(self, value: Any) -> None:
        """Booleans and zero count as present."""
        assert is_present(value) is True


class TestValidateOptions:
    """Tests for validate_options."""

    def test_minimal_options(self) -> None:
        """Only event_name is required; everything else has defaults."""
        options = validate_options({"event_name": "Signup"})

        assert options.event_name == "Signup"
        assert options.property_name is None
        assert options.value is None
        assert options.time == 24
        assert options.interval == "hour"
        assert options.count_type == "general"
        assert options.region == "us"

    def test_full_options(self) -> None:
        """All option keys map onto the typed model."""
        options = validate_options(
            {
                "event_name": "Page Visit",
                "property": "Page",
                "value": "home",
                "time": 7,
                "interval": "day",
                "type": "unique",
                "api_key": "key",
                "secret_key": "secret",
                "region": "EU",
            }
        )

        assert options.property_name == "Page"
        assert options.value == "home"
        assert options.time == 7
        assert options.interval == "day"
        assert options.count_type == "unique"
        assert options.region == "eu"
        assert options.secret_key is not None
        assert options.secret_key.get_secret_value() == "secret"

    def test_blank_event_name_rejected(self) -> None:
        """A blank event_name fails validation."""
        with pytest.raises(ValidationError) as exc_info:
            validate_options({"event_name": "  "})

        assert "event_name is required" in exc_info.value.errors

    def test_missing_event_name_rejected(self) -> None:
        """A missing event_name fails validation."""
        with pytest.raises(ValidationError, match="event_name is required"):
            validate_options({})

    def test_property_without_value_rejected(self) -> None:
        """property alone fails validation."""
        with pytest.raises(ValidationError, match="both 'property' and 'value'"):
            validate_options({"event_name": "Signup", "property": "Page"})

    def test_value_without_property_rejected(self) -> None:
        """value alone fails validation."""
        with pytest.raises(ValidationError, match="both 'property' and 'value'"):
            validate_options({"event_name": "Signup", "value": "home"})

    def test_false_value_counts_as_present(self) -> None:
        """A False value with a property passes validation."""
        options = validate_options(
            {"event_name": "Signup", "property": "Paid", "value": False}
        )

        assert options.value is False

    def test_value_types_preserved(self) -> None:
        """Numeric and boolean values keep their type."""
        assert validate_options(
            {"event_name": "e", "property": "p", "value": 3}
        ).value == 3
        assert (
            validate_options({"event_name": "e", "property": "p", "value": True}).value
            is True
        )
        assert (
            validate_options({"event_name": "e", "property": "p", "value": "true"}).value
            == "true"
        )

    def test_errors_are_collected(self) -> None:
        """Every problem is reported at once."""
        with pytest.raises(ValidationError) as exc_info:
            validate_options({"property": "Page", "headers": "nope"})

        errors = exc_info.value.errors
        assert len(errors) == 3
        assert "event_name is required" in errors
        assert "if provided, headers must be a hash" in errors

    def test_field_errors_collected_with_other_problems(self) -> None:
        """Type errors are reported alongside missing or paired options."""
        with pytest.raises(ValidationError) as exc_info:
            validate_options({"property": "P", "time": "abc"})

        errors = exc_info.value.errors
        assert "event_name is required" in errors
        assert "Please provide both 'property' and 'value', or neither" in errors
        assert any(error.startswith("time:") for error in errors)

    def test_prechecked_fields_reported_once(self) -> None:
        """Malformed web request options give one message each."""
        with pytest.raises(ValidationError) as exc_info:
            validate_options({"event_name": "Signup", "user_agent": 5})

        assert exc_info.value.errors == ["user_agent must be a string"]

    def test_invalid_interval_rejected(self) -> None:
        """interval must be one of the supported units."""
        with pytest.raises(ValidationError, match="interval"):
            validate_options({"event_name": "Signup", "interval": "week"})

    @pytest.mark.parametrize("time", [0, -1, "soon", True])
    def test_invalid_time_rejected(self, time: Any) -> None:
        """time must be a positive integer."""
        with pytest.raises(ValidationError, match="time"):
            validate_options({"event_name": "Signup", "time": time})

    def test_numeric_string_time_accepted(self) -> None:
        """Numeric strings from form input are coerced."""
        assert validate_options({"event_name": "Signup", "time": "48"}).time == 48

    def test_invalid_region_rejected(self) -> None:
        """region must be us, eu or in."""
        with pytest.raises(ValidationError, match="region"):
            validate_options({"event_name": "Signup", "region": "mars"})

    def test_unknown_type_passes_validation(self) -> None:
        """type is checked by build_query, not here."""
        options = validate_options({"event_name": "Signup", "type": "median"})

        assert options.count_type == "median"

    @pytest.mark.parametrize("count_type", ["", 5, ["unique"]])
    def test_blank_and_non_string_types_kept(self, count_type: Any) -> None:
        """Only an unset type defaults to general; anything else is kept."""
        options = validate_options({"event_name": "Signup", "type": count_type})

        assert options.count_type == count_type

    def test_blank_value_is_absent(self) -> None:
        """A blank value with no property is treated as unset."""
        assert validate_options({"event_name": "Signup", "value": "  "}).value is None

    def test_unknown_keys_ignored(self) -> None:
        """Host-framework keys the agent does not use are ignored."""
        options = validate_options(
            {"event_name": "Signup", "expected_update_period_in_days": 2}
        )

        assert options.event_name == "Signup"

    def test_options_are_frozen(self) -> None:
        """AgentOptions cannot be modified after validation."""
        options = validate_options({"event_name": "Signup"})

        with pytest.raises(Exception):
            options.event_name = "Other"  # type: ignore[misc]

    @given(
        prop=st.one_of(st.none(), st.text(min_size=1).filter(str.strip)),
        value=st.one_of(st.none(), st.text(min_size=1).filter(str.strip)),
    )
    def test_property_value_co_required(
        self, prop: str | None, value: str | None
    ) -> None:
        """Property: validation passes iff property and value are both set or both unset."""
        raw: dict[str, Any] = {"event_name": "Signup"}
        if prop is not None:
            raw["property"] = prop
        if value is not None:
            raw["value"] = value

        if (prop is None) != (value is None):
            with pytest.raises(ValidationError):
                validate_options(raw)
        else:
            assert isinstance(validate_options(raw), AgentOptions)


class TestWebRequestOptions:
    """Tests for web request option validation."""

    def test_empty_options_valid(self) -> None:
        """No web request options means no errors."""
        assert validate_web_request_options({}) == []

    def test_valid_options(self) -> None:
        """Well-formed options produce no errors."""
        errors = validate_web_request_options(
            {
                "basic_auth": "user:pass",
                "headers": {"X-Team": "growth"},
                "user_agent": "agent/1.0",
                "disable_ssl_verification": "true",
            }
        )

        assert errors == []

    @pytest.mark.parametrize(
        "basic_auth", ["userpass", ["only-one"], ["a", 1], 42]
    )
    def test_malformed_basic_auth(self, basic_auth: Any) -> None:
        """basic_auth must be user:password or a two-string list."""
        errors = validate_web_request_options({"basic_auth": basic_auth})

        assert len(errors) == 1
        assert "basic_auth" in errors[0]

    def test_headers_must_be_mapping(self) -> None:
        """headers must be a hash."""
        errors = validate_web_request_options({"headers": ["X-Team"]})

        assert errors == ["if provided, headers must be a hash"]

    def test_header_values_must_be_strings(self) -> None:
        """Header values must be strings."""
        errors = validate_web_request_options({"headers": {"X-Count": 1}})

        assert errors == ["headers keys and values must be strings"]

    def test_user_agent_must_be_string(self) -> None:
        """user_agent must be a string."""
        assert validate_web_request_options({"user_agent": 5}) == [
            "user_agent must be a string"
        ]

    def test_disable_ssl_verification_must_be_boolean(self) -> None:
        """disable_ssl_verification must be true or false."""
        errors = validate_web_request_options({"disable_ssl_verification": "maybe"})

        assert len(errors) == 1
        assert "disable_ssl_verification" in errors[0]

    def test_web_request_errors_fail_validation(self) -> None:
        """validate_options reports web request problems."""
        with pytest.raises(ValidationError, match="user_agent must be a string"):
            validate_options({"event_name": "Signup", "user_agent": 5})


class TestWebRequestSettings:
    """Tests for web_request_settings."""

    def test_defaults(self) -> None:
        """No options gives verifying client settings without extras."""
        assert web_request_settings({}) == {
            "headers": {},
            "user_agent": None,
            "basic_auth": None,
            "verify": True,
        }

    def test_settings_from_options(self) -> None:
        """Options are translated into client keyword arguments."""
        settings = web_request_settings(
            {
                "basic_auth": ["user", "pa:ss"],
                "headers": {"X-Team": "growth"},
                "user_agent": "agent/1.0",
                "disable_ssl_verification": True,
            }
        )

        assert settings == {
            "headers": {"X-Team": "growth"},
            "user_agent": "agent/1.0",
            "basic_auth": ("user", "pa:ss"),
            "verify": False,
        }

    def test_malformed_options_raise(self) -> None:
        """Malformed options raise ValidationError."""
        with pytest.raises(ValidationError):
            web_request_settings({"headers": "nope"})


class TestSplitBasicAuth:
    """Tests for split_basic_auth."""

    def test_string_form(self) -> None:
        """Only the first colon separates user from password."""
        assert split_basic_auth("user:pa:ss") == ("user", "pa:ss")

    def test_list_form(self) -> None:
        """Two-element lists are used as-is."""
        assert split_basic_auth(["user", "pass"]) == ("user", "pass")

    def test_absent(self) -> None:
        """Blank or missing values give None."""
        assert split_basic_auth(None) is None
        assert split_basic_auth("") is None


class TestEventsOrder:
    """Tests for validate_events_order."""

    def test_none_is_valid(self) -> None:
        """Unset events_order uses the default."""
        assert validate_events_order(None) == []

    @pytest.mark.parametrize(
        "events_order",
        [
            [["{{date_published}}", "time"]],
            [["{{count}}", "number", True], ["{{title}}", "string", "false"]],
            [],
        ],
    )
    def test_valid_orders(self, events_order: list[Any]) -> None:
        """Two- and three-element entries with known types are valid."""
        assert validate_events_order(events_order) == []

    @pytest.mark.parametrize(
        "events_order",
        [
            "{{date_published}}",
            [["{{date_published}}"]],
            [["{{date_published}}", "date"]],
            [["{{count}}", "number", "yes"]],
            [[1, "number"]],
        ],
    )
    def test_invalid_orders(self, events_order: Any) -> None:
        """Anything else is reported."""
        assert validate_events_order(events_order) == [
            "events_order must be an array of arrays"
        ]

    def test_invalid_order_fails_validation(self) -> None:
        """validate_options reports events_order problems."""
        with pytest.raises(ValidationError, match="events_order"):
            validate_options({"event_name": "Signup", "events_order": "nope"})
