"""Payment payload vocabulary used for logging only.

The gateway never validates bodies against these types; they document what
the upstream processor expects and let the handler notice a route label that
disagrees with the body's `paymentMethod`.
"""

from enum import Enum
from typing import Any


class PaymentMethod(str, Enum):
    """Discriminator values understood by the upstream processor."""

    PIX = "PIX"
    CARD = "CARD"
    BOLETO = "BOLETO"


ROUTE_LABELS: dict[str, PaymentMethod] = {
    "pix": PaymentMethod.PIX,
    "card": PaymentMethod.CARD,
    "credit-card": PaymentMethod.CARD,
    "boleto": PaymentMethod.BOLETO,
}


def body_payment_method(body: Any) -> str | None:
    """Return the body's `paymentMethod` value when it is a string field of an object."""

    if isinstance(body, dict):
        value = body.get("paymentMethod")
        if isinstance(value, str):
            return value
    return None


def label_mismatch(label: str, body: Any) -> bool:
    """True when both the route label and `paymentMethod` are known and disagree."""

    expected = ROUTE_LABELS.get(label.lower())
    declared = body_payment_method(body)
    if expected is None or declared is None:
        return False
    return expected.value != declared.upper()


def metric_label(label: str) -> str:
    """Bounded metric label for a caller-chosen route segment."""

    normalized = label.lower()
    return normalized if normalized in ROUTE_LABELS else "other"
