"""Property model — boutique stays listed for booking."""

from sqlalchemy import JSON, Boolean, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from casa.database import Base, TimestampMixin, UUIDPrimaryKeyMixin


class Property(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """A rentable home with its capacity, nightly rate, and presentation content."""

    __tablename__ = "properties"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    location: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    guests: Mapped[int] = mapped_column(Integer, nullable=False)
    bedrooms: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    bathrooms: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    price_per_night_paise: Mapped[int] = mapped_column(Integer, nullable=False)
    category: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    aesthetic: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    virtual_tour_url: Mapped[str | None] = mapped_column(String(512), default=None)
    video_url: Mapped[str | None] = mapped_column(String(512), default=None)
    images: Mapped[list] = mapped_column(JSON, default=list)
    features: Mapped[dict] = mapped_column(JSON, default=dict)  # PropertyFeatures
    story: Mapped[str] = mapped_column(Text, default="")
    testimonials: Mapped[list] = mapped_column(JSON, default=list)  # list[Testimonial]
    highlights: Mapped[list] = mapped_column(JSON, default=list)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    # Relationships
    bookings: Mapped[list["Booking"]] = relationship(  # type: ignore[name-defined]  # noqa: F821
        back_populates="property", lazy="noload"
    )

    @property
    def pet_friendly(self) -> bool:
        return bool((self.features or {}).get("pet_friendly", False))

    def __repr__(self) -> str:
        return f"<Property(id={self.id}, name={self.name!r}, category={self.category!r})>"
