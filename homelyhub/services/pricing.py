"""
Pricing and date arithmetic for stays.
Pure functions: nothing here touches the database or the clock.
"""

from dataclasses import dataclass
from datetime import date, datetime, time, timezone
from decimal import Decimal
from typing import Union
import math

from homelyhub.utils.exceptions import ValidationError

SECONDS_PER_NIGHT = 86400

DateLike = Union[date, datetime]


@dataclass(frozen=True)
class StayQuote:
    """Nights and total charge for a stay."""
    nights: int
    total_amount: Decimal


def normalize_stay_date(value: DateLike) -> datetime:
    """
    Normalize a stay boundary to an aware UTC datetime.

    Plain dates are taken as midnight UTC and naive datetimes are assumed to be UTC.

    Args:
        value: Date or datetime supplied by the client

    Returns:
        Timezone-aware datetime in UTC
    """
    if not isinstance(value, datetime):
        return datetime.combine(value, time.min, tzinfo=timezone.utc)
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def calculate_nights(check_in: DateLike, check_out: DateLike) -> int:
    """
    Number of nights between check-in and check-out.

    A partial day counts as a full night. The result is zero or negative when
    check-out does not fall after check-in.

    Args:
        check_in: Arrival date
        check_out: Departure date

    Returns:
        Night count, rounded up
    """
    delta = normalize_stay_date(check_out) - normalize_stay_date(check_in)
    return math.ceil(delta.total_seconds() / SECONDS_PER_NIGHT)


def calculate_total_amount(nightly_price: Union[Decimal, int, float, str], nights: int) -> Decimal:
    """Total charge for the given number of nights at a nightly rate."""
    return (Decimal(str(nightly_price)) * nights).quantize(Decimal("0.01"))


def quote_stay(
    check_in: DateLike,
    check_out: DateLike,
    nightly_price: Union[Decimal, int, float, str]
) -> StayQuote:
    """
    Price a stay.

    Args:
        check_in: Arrival date
        check_out: Departure date
        nightly_price: Property's nightly rate

    Returns:
        StayQuote with the night count and total amount

    Raises:
        ValidationError: If check-out is not after check-in
    """
    nights = calculate_nights(check_in, check_out)
    if nights <= 0:
        raise ValidationError("Check-out date must be after check-in date")

    return StayQuote(nights=nights, total_amount=calculate_total_amount(nightly_price, nights))
