"""Payment method catalogue and gateway fee rates."""

from dataclasses import dataclass

from casa.config import settings


@dataclass(frozen=True)
class PaymentMethod:
    """A way to pay, the gateway that processes it, and its fee."""

    id: str
    name: str
    description: str
    gateway: str  # razorpay, stripe
    fee_basis_points: int  # 1 bp = 0.01 %, e.g. 290 = 2.9 %
    enabled: bool = True


@dataclass(frozen=True)
class PaymentAmount:
    """Booking total plus the gateway fee charged on top (paise)."""

    base_amount: int
    fees: int
    total_amount: int
    currency: str


DEFAULT_FEE_BASIS_POINTS = 200

PAYMENT_METHODS: dict[str, PaymentMethod] = {
    "card": PaymentMethod(
        id="card",
        name="Credit/Debit Cards",
        description="Pay securely with your card",
        gateway="razorpay",
        fee_basis_points=290,
    ),
    "phonepe": PaymentMethod(
        id="phonepe",
        name="PhonePe",
        description="Pay with PhonePe UPI",
        gateway="razorpay",
        fee_basis_points=250,
    ),
    "upi": PaymentMethod(
        id="upi",
        name="UPI",
        description="Pay with any UPI app",
        gateway="razorpay",
        fee_basis_points=100,
    ),
    "netbanking": PaymentMethod(
        id="netbanking",
        name="Net Banking",
        description="Pay with your bank account",
        gateway="razorpay",
        fee_basis_points=DEFAULT_FEE_BASIS_POINTS,
        enabled=False,
    ),
    "stripe": PaymentMethod(
        id="stripe",
        name="International Cards",
        description="Cards issued outside India, via Stripe Checkout",
        gateway="stripe",
        fee_basis_points=290,
    ),
}


def get_payment_method(method_id: str) -> PaymentMethod | None:
    return PAYMENT_METHODS.get(method_id)


def is_available(method: PaymentMethod) -> bool:
    """Enabled in the catalogue and its gateway has credentials."""
    return method.enabled and settings.payment_gateway_status().get(method.gateway, False)


def calculate_payment_amount(base_amount: int, method_id: str) -> PaymentAmount:
    """Add the method's gateway fee to ``base_amount``, rounded half-up to a paisa.

    Unknown methods are charged the default rate.
    """
    method = PAYMENT_METHODS.get(method_id)
    basis_points = method.fee_basis_points if method else DEFAULT_FEE_BASIS_POINTS
    fees = (base_amount * basis_points + 5_000) // 10_000
    return PaymentAmount(
        base_amount=base_amount,
        fees=fees,
        total_amount=base_amount + fees,
        currency=settings.currency,
    )
