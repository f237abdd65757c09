"""One-time code generation, hashing, and phone normalisation.

Codes are hashed with bcrypt directly (same approach as password hashing),
so a leaked ``otp_verifications`` table does not reveal live codes.
"""

import re
import secrets

import bcrypt

from casa.config import settings

_NON_DIGITS = re.compile(r"\D")


def generate_code(length: int | None = None) -> str:
    """Return a random numeric code with no leading-zero loss."""
    length = length or settings.otp_length
    low = 10 ** (length - 1)
    return str(low + secrets.randbelow(9 * low))


def hash_code(code: str) -> str:
    """Hash a one-time code using bcrypt."""
    hashed = bcrypt.hashpw(code.encode("utf-8"), bcrypt.gensalt())
    return hashed.decode("utf-8")


def verify_code(plain_code: str, code_hash: str) -> bool:
    """Check a submitted code against its bcrypt hash."""
    return bcrypt.checkpw(plain_code.encode("utf-8"), code_hash.encode("utf-8"))


def normalize_phone(phone: str) -> str:
    """Normalise a phone number to ``+<country><number>``.

    A bare 10-digit number is assumed to be local and gets the configured
    default country code.

    Raises:
        ValueError: If the number has fewer than 10 or more than 15 digits.
    """
    digits = _NON_DIGITS.sub("", phone)
    if len(digits) == 10:
        digits = settings.default_country_code + digits
    if not 10 <= len(digits) <= 15:
        raise ValueError("phone must contain 10 to 15 digits")
    return f"+{digits}"
