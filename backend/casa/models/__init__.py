"""SQLAlchemy models for Infiniti Casa.

All models are imported here so that Alembic's autogenerate can discover
them via Base.metadata. If you add a new model, import it in this file.
"""

from casa.models.booking import Booking, BookingPayment
from casa.models.engagement import (
    NewsletterSubscription,
    PropertySuggestion,
    UserActivity,
    UserFavorite,
)
from casa.models.otp import OTPVerification
from casa.models.property import Property
from casa.models.user import UserProfile

__all__ = [
    "Booking",
    "BookingPayment",
    "NewsletterSubscription",
    "OTPVerification",
    "Property",
    "PropertySuggestion",
    "UserActivity",
    "UserFavorite",
    "UserProfile",
]
