"""One-time password model for phone verification."""

from datetime import datetime

from sqlalchemy import Boolean, Index, String, func
from sqlalchemy.orm import Mapped, mapped_column

from casa.database import Base, UUIDPrimaryKeyMixin


class OTPVerification(UUIDPrimaryKeyMixin, Base):
    """A hashed, single-use, time-bound code sent to a phone number."""

    __tablename__ = "otp_verifications"

    phone: Mapped[str] = mapped_column(String(20), nullable=False)
    code_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    purpose: Mapped[str] = mapped_column(String(20), nullable=False, default="login")  # login, booking, verification
    expires_at: Mapped[datetime] = mapped_column(nullable=False)
    is_used: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    used_at: Mapped[datetime | None] = mapped_column(nullable=True)
    created_at: Mapped[datetime] = mapped_column(server_default=func.now())

    __table_args__ = (Index("ix_otp_verifications_phone_purpose", "phone", "purpose"),)

    def __repr__(self) -> str:
        return f"<OTPVerification(id={self.id}, phone={self.phone!r}, purpose={self.purpose!r}, used={self.is_used})>"
