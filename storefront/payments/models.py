"""
Modèle paiement PIX.
- PaymentStatus: énumération fermée {pending, paid, failed, unknown}; paid/failed terminaux
- Payment: artefact PIX (qrCode, copyPaste), montant, expiration et statut local
- build_confirmation_event: événement webhook simulé, déterministe par (paymentId, orderId)
"""
from dataclasses import dataclass, replace
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Optional

from storefront.cart.models import format_amount


class PaymentStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"
    UNKNOWN = "unknown"

    @property
    def is_terminal(self) -> bool:
        return self in (PaymentStatus.PAID, PaymentStatus.FAILED)

    @classmethod
    def from_remote(cls, value: Any) -> "PaymentStatus":
        """paid => PAID, failed => FAILED, toute autre valeur => PENDING (jamais l'ancien statut)."""
        key = str(value or "").strip().lower()
        if key == cls.PAID.value:
            return cls.PAID
        if key == cls.FAILED.value:
            return cls.FAILED
        return cls.PENDING


@dataclass(frozen=True)
class PixArtifact:
    qr_code: str
    copy_paste: str


@dataclass(frozen=True)
class Payment:
    payment_id: str
    order_id: str
    amount: Decimal
    pix: PixArtifact
    expires_at: Optional[datetime]
    status: PaymentStatus = PaymentStatus.PENDING

    def with_status(self, status: PaymentStatus) -> "Payment":
        return replace(self, status=status)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "paymentId": self.payment_id,
            "orderId": self.order_id,
            "amount": format_amount(self.amount),
            "pix": {"qrCode": self.pix.qr_code, "copyPaste": self.pix.copy_paste},
            "expiresAt": self.expires_at.isoformat() if self.expires_at else None,
            "status": self.status.value,
        }

def build_confirmation_event(payment: Payment, order_id: str) -> Dict[str, str]:
    return {
        "paymentId": payment.payment_id,
        "orderId": order_id,
        "status": PaymentStatus.PAID.value,
        "txid": f"SIMULATED-{payment.payment_id}",
    }
