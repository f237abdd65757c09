"""Booking price calculation.

All amounts are integer paise. The service fee is a flat 12 % of the nightly
subtotal rounded half-up to the nearest paisa, and each pet adds a flat
₹500 per stay.
"""

from dataclasses import dataclass
from datetime import date

SERVICE_FEE_PERCENT = 12
PET_FEE_PAISE = 50_000  # ₹500 per pet per stay


@dataclass(frozen=True)
class BookingQuote:
    """Price breakdown for a stay."""

    nights: int
    nightly_rate: int
    subtotal: int
    service_fee: int
    pet_fee: int
    total: int


def count_nights(check_in: date, check_out: date) -> int:
    """Number of nights between two dates (zero or negative if reversed)."""
    return (check_out - check_in).days


def _percent_half_up(amount: int, percent: int) -> int:
    """Return ``amount * percent / 100`` rounded half-up, without floats."""
    return (amount * percent + 50) // 100


def calculate_quote(
    nightly_rate: int,
    check_in: date,
    check_out: date,
    guests: int = 1,
    pet_count: int = 0,
) -> BookingQuote:
    """Compute nights, subtotal, service fee, pet fee, and total for a stay.

    ``guests`` does not affect the price; it is accepted so callers can pass
    the full booking request through.

    Raises:
        ValueError: If the rate, the night count, or the pet count is negative.
    """
    if nightly_rate < 0:
        raise ValueError("nightly_rate must not be negative")
    if pet_count < 0:
        raise ValueError("pet_count must not be negative")

    nights = count_nights(check_in, check_out)
    if nights < 0:
        raise ValueError("check_out must not be before check_in")

    subtotal = nightly_rate * nights
    service_fee = _percent_half_up(subtotal, SERVICE_FEE_PERCENT)
    pet_fee = pet_count * PET_FEE_PAISE

    return BookingQuote(
        nights=nights,
        nightly_rate=nightly_rate,
        subtotal=subtotal,
        service_fee=service_fee,
        pet_fee=pet_fee,
        total=subtotal + service_fee + pet_fee,
    )
