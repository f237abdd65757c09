"""Engagement models: favorites, newsletter, activity log, and suggestions."""

import uuid
from datetime import datetime

from sqlalchemy import JSON, ForeignKey, String, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from casa.database import Base, TimestampMixin, UUIDPrimaryKeyMixin


class UserFavorite(UUIDPrimaryKeyMixin, Base):
    """A property saved by a user."""

    __tablename__ = "user_favorites"

    user_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("user_profiles.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    property_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("properties.id", ondelete="CASCADE"),
        nullable=False,
    )
    created_at: Mapped[datetime] = mapped_column(server_default=func.now())

    # Relationships
    user: Mapped["UserProfile"] = relationship(back_populates="favorites", lazy="noload")  # type: ignore[name-defined]  # noqa: F821
    property: Mapped["Property"] = relationship(lazy="selectin")  # type: ignore[name-defined]  # noqa: F821

    __table_args__ = (UniqueConstraint("user_id", "property_id", name="uq_user_favorites_user_property"),)


class NewsletterSubscription(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """An email address on the newsletter list."""

    __tablename__ = "newsletter_subscriptions"

    email: Mapped[str] = mapped_column(String(255), unique=True, index=True, nullable=False)
    full_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    subscription_status: Mapped[str] = mapped_column(
        String(20), nullable=False, default="active"
    )  # active, unsubscribed, bounced
    subscription_source: Mapped[str] = mapped_column(String(50), nullable=False, default="website")


class UserActivity(UUIDPrimaryKeyMixin, Base):
    """Audit trail of user actions. Rows are append-only."""

    __tablename__ = "user_activity_log"

    user_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("user_profiles.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    activity_type: Mapped[str] = mapped_column(String(50), nullable=False)
    activity_data: Mapped[dict] = mapped_column(JSON, default=dict)
    ip_address: Mapped[str | None] = mapped_column(String(64), nullable=True)
    user_agent: Mapped[str | None] = mapped_column(String(512), nullable=True)
    created_at: Mapped[datetime] = mapped_column(server_default=func.now(), index=True)


class PropertySuggestion(UUIDPrimaryKeyMixin, Base):
    """A recorded answer of the property suggestion helper."""

    __tablename__ = "property_suggestions"

    suggested_property_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("properties.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_preferences: Mapped[dict] = mapped_column(JSON, default=dict)
    created_at: Mapped[datetime] = mapped_column(server_default=func.now())

    # Relationships
    property: Mapped["Property"] = relationship(lazy="selectin")  # type: ignore[name-defined]  # noqa: F821
