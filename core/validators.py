"""
Input validation functions.

validate_revenue_share_input guards the engine's contract and raises
InvalidInputError. The remaining validators check raw operator input and
raise ValidationError.
"""

from datetime import date, datetime
from numbers import Real

from core.exceptions import InvalidInputError, ValidationError
from core.models import RevenueShareInput


MAX_OVERRIDE_PERCENT = 100

_BOOLEAN_FIELDS = ("owned", "premiere_accepted", "loyalty_bonus_disabled")


def _is_calendar_date(value) -> bool:
    return isinstance(value, date) and not isinstance(value, datetime)


def validate_revenue_share_input(params: RevenueShareInput) -> RevenueShareInput:
    """
    Check an input bundle against the engine's contract.

    Args:
        params: Input bundle assembled by the caller

    Returns:
        The same bundle, unchanged

    Raises:
        InvalidInputError: If any field is outside its allowed domain
    """
    if not isinstance(params, RevenueShareInput):
        raise InvalidInputError("input", "Must be a RevenueShareInput", type(params).__name__)

    if not _is_calendar_date(params.target_date):
        raise InvalidInputError("target_date", "Must be a calendar date", params.target_date)

    if params.anniversary_on is not None and not _is_calendar_date(params.anniversary_on):
        raise InvalidInputError("anniversary_on", "Must be a calendar date or None", params.anniversary_on)

    count = params.impression_count
    if isinstance(count, bool) or not isinstance(count, int):
        raise InvalidInputError("impression_count", "Must be an integer", count)
    if count < 0:
        raise InvalidInputError("impression_count", "Must be non-negative", count)

    override = params.display_revenue_share_override
    if override is not None:
        if isinstance(override, bool) or not isinstance(override, Real):
            raise InvalidInputError("display_revenue_share_override", "Must be a number", override)
        if not 0 <= override <= MAX_OVERRIDE_PERCENT:
            raise InvalidInputError(
                "display_revenue_share_override",
                f"Must be between 0 and {MAX_OVERRIDE_PERCENT} percentage points",
                override,
            )

    # Free-form setting; unmatched strings take the default share
    if params.pro_accepted is not None and not isinstance(params.pro_accepted, str):
        raise InvalidInputError("pro_accepted", "Must be a string or None", params.pro_accepted)

    for field_name in _BOOLEAN_FIELDS:
        value = getattr(params, field_name)
        if not isinstance(value, bool):
            raise InvalidInputError(field_name, "Must be a boolean", value)

    net30 = params.net30_revenue_share_payments
    if net30 is not None and not isinstance(net30, bool):
        raise InvalidInputError("net30_revenue_share_payments", "Must be a boolean or None", net30)

    return params


def validate_date_string(
    value: str,
    field: str = "date",
    format: str = "%Y-%m-%d"
) -> date:
    """
    Validate and parse a date string.

    Args:
        value: Date string to validate
        field: Field name for error messages
        format: Expected date format (default: YYYY-MM-DD)

    Returns:
        Parsed date object

    Raises:
        ValidationError: If date is invalid or in wrong format
    """
    if not value:
        raise ValidationError(field, "Date is required", value)

    if not isinstance(value, str):
        raise ValidationError(field, "Must be a string", value)

    try:
        return datetime.strptime(value, format).date()
    except ValueError:
        raise ValidationError(
            field,
            f"Invalid date format. Expected {format}",
            value
        )


def validate_site_id(value, field: str = "site_id") -> int:
    """
    Validate a site ID.

    Raises:
        ValidationError: If the ID is not a positive integer
    """
    if value is None:
        raise ValidationError(field, "Site ID is required")

    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(field, "Must be an integer", value)

    if value <= 0:
        raise ValidationError(field, "Must be positive", value)

    return value
