"""
Tests for core.validators module.
"""
import pytest
from datetime import date, datetime

from core.validators import (
    validate_date_string,
    validate_revenue_share_input,
    validate_site_id,
)
from core.exceptions import InvalidInputError, ValidationError


class TestValidateRevenueShareInput:
    """Tests for validate_revenue_share_input function."""

    def test_valid_input_returned(self, make_input):
        """A valid bundle is returned unchanged."""
        params = make_input(
            impression_count=1_000,
            anniversary_on=date(2020, 1, 1),
            display_revenue_share_override=85,
            pro_accepted="declined",
            net30_revenue_share_payments=True,
        )
        assert validate_revenue_share_input(params) is params

    def test_not_an_input_bundle(self):
        """Plain dicts are rejected."""
        with pytest.raises(InvalidInputError) as exc_info:
            validate_revenue_share_input({"target_date": date(2023, 1, 10)})
        assert exc_info.value.field == "input"

    def test_missing_target_date(self, make_input):
        """target_date is required."""
        with pytest.raises(InvalidInputError) as exc_info:
            validate_revenue_share_input(make_input(target_date=None))
        assert exc_info.value.field == "target_date"

    def test_string_target_date(self, make_input):
        """Date strings must be parsed before reaching the engine."""
        with pytest.raises(InvalidInputError):
            validate_revenue_share_input(make_input(target_date="2023-01-10"))

    def test_datetime_truncated_is_valid(self, make_input):
        """Datetimes are truncated at construction so they pass."""
        params = make_input(target_date=datetime(2023, 1, 10, 5, 30))
        assert validate_revenue_share_input(params).target_date == date(2023, 1, 10)

    def test_bad_anniversary(self, make_input):
        """anniversary_on must be a date or None."""
        with pytest.raises(InvalidInputError) as exc_info:
            validate_revenue_share_input(make_input(anniversary_on="2020-01-01"))
        assert exc_info.value.field == "anniversary_on"

    @pytest.mark.parametrize("count", [-1, 1.5, "100", None, True])
    def test_bad_impression_count(self, make_input, count):
        """Counts must be non-negative integers."""
        with pytest.raises(InvalidInputError) as exc_info:
            validate_revenue_share_input(make_input(impression_count=count))
        assert exc_info.value.field == "impression_count"

    @pytest.mark.parametrize("override", [-5, 101, "90", True])
    def test_bad_override(self, make_input, override):
        """Override must be a number of percentage points in [0, 100]."""
        with pytest.raises(InvalidInputError) as exc_info:
            validate_revenue_share_input(make_input(display_revenue_share_override=override))
        assert exc_info.value.field == "display_revenue_share_override"

    @pytest.mark.parametrize("override", [0, 100, 82.5])
    def test_override_bounds_inclusive(self, make_input, override):
        """Both ends of the override range are accepted."""
        validate_revenue_share_input(make_input(display_revenue_share_override=override))

    @pytest.mark.parametrize("value", ["pending", "rejected", "ACCEPTED", ""])
    def test_free_form_pro_accepted(self, make_input, value):
        """Any string is a valid pro_accepted value."""
        validate_revenue_share_input(make_input(pro_accepted=value))

    @pytest.mark.parametrize("value", [1, True, ["accepted"]])
    def test_non_string_pro_accepted(self, make_input, value):
        """Non-strings are rejected."""
        with pytest.raises(InvalidInputError) as exc_info:
            validate_revenue_share_input(make_input(pro_accepted=value))
        assert exc_info.value.field == "pro_accepted"

    @pytest.mark.parametrize("field", ["owned", "premiere_accepted", "loyalty_bonus_disabled"])
    def test_flags_must_be_bool(self, make_input, field):
        """Truthy non-bools are rejected."""
        with pytest.raises(InvalidInputError) as exc_info:
            validate_revenue_share_input(make_input(**{field: 1}))
        assert exc_info.value.field == field

    def test_net30_allows_none(self, make_input):
        """An unset net-30 flag is valid."""
        validate_revenue_share_input(make_input(net30_revenue_share_payments=None))

    def test_net30_rejects_string(self, make_input):
        """Stored strings must be parsed first."""
        with pytest.raises(InvalidInputError):
            validate_revenue_share_input(make_input(net30_revenue_share_payments="true"))

    def test_error_carries_value(self, make_input):
        """The offending value is kept for logs."""
        with pytest.raises(InvalidInputError) as exc_info:
            validate_revenue_share_input(make_input(impression_count=-3))
        assert exc_info.value.value == -3
        assert "-3" in str(exc_info.value)


class TestValidateDateString:
    """Tests for validate_date_string function."""

    def test_valid_date(self):
        """Valid date string should return date object."""
        assert validate_date_string("2023-01-10") == date(2023, 1, 10)

    def test_invalid_format(self):
        """Invalid format should raise ValidationError."""
        with pytest.raises(ValidationError) as exc_info:
            validate_date_string("10-01-2023")
        assert "Invalid date format" in str(exc_info.value)

    def test_invalid_date(self):
        """Invalid date should raise ValidationError."""
        with pytest.raises(ValidationError):
            validate_date_string("2023-02-30")

    def test_empty_string(self):
        """Empty string should raise ValidationError."""
        with pytest.raises(ValidationError) as exc_info:
            validate_date_string("")
        assert "required" in str(exc_info.value).lower()

    def test_non_string(self):
        """Non-string should raise ValidationError."""
        with pytest.raises(ValidationError) as exc_info:
            validate_date_string(20230110)
        assert "string" in str(exc_info.value).lower()


class TestValidateSiteId:
    """Tests for validate_site_id function."""

    def test_valid(self):
        """Positive integers pass through."""
        assert validate_site_id(42) == 42

    def test_none(self):
        """None should raise ValidationError."""
        with pytest.raises(ValidationError):
            validate_site_id(None)

    @pytest.mark.parametrize("value", [0, -1])
    def test_not_positive(self, value):
        """Zero and negatives are rejected."""
        with pytest.raises(ValidationError) as exc_info:
            validate_site_id(value)
        assert "positive" in str(exc_info.value).lower()

    @pytest.mark.parametrize("value", ["42", 4.2, True])
    def test_not_integer(self, value):
        """Non-integers are rejected."""
        with pytest.raises(ValidationError):
            validate_site_id(value)


def test_input_bundle_type_check_precedes_fields():
    """A wrong type is reported before any field."""
    with pytest.raises(InvalidInputError) as exc_info:
        validate_revenue_share_input(None)
    assert exc_info.value.field == "input"
