"""
Gestionnaire de session de paiement PIX.
- create_pix_charge: demande la charge PIX d'une commande et conserve le Payment (statut pending)
- Accesseurs purs (copia-e-cola, payload QR, expiration, image QR): NotReadyError tant qu'aucun paiement n'existe
- Le statut n'est avancé que par le StatusReconciler (apply_reconciled_status)
"""
import logging
from decimal import Decimal
from datetime import datetime
from typing import Any, Optional, Set

from storefront.cart.models import to_decimal
from storefront.errors import InvalidStateError, NotReadyError, RemoteError, ValidationError
from storefront.session import SessionContext
from storefront.utils.dates import parse_timestamp
from storefront.utils.qrcode_utils import generate_qr_code
from . import repository
from .models import Payment, PaymentStatus, PixArtifact

logger = logging.getLogger(__name__)

def _build_payment(payload: Any, order_id: str, expected_amount: Optional[Decimal]) -> Payment:
    """
    Construit le Payment depuis la réponse create-pix.
    - paymentId et pix.{qrCode, copyPaste} obligatoires
    - orderId distant, si présent, doit correspondre à la commande demandée
    - amount doit égaler le total de la commande (expected_amount) quand il est connu
    """
    if not isinstance(payload, dict):
        raise RemoteError("Réponse create-pix invalide")
    payment_id = str(payload.get("paymentId") or "").strip()
    pix = payload.get("pix") or {}
    qr_code = str(pix.get("qrCode") or "")
    copy_paste = str(pix.get("copyPaste") or "")
    if not payment_id or not qr_code or not copy_paste:
        raise RemoteError("Réponse create-pix incomplète (paymentId/pix manquant)")

    remote_order_id = str(payload.get("orderId") or order_id).strip()
    if remote_order_id != order_id:
        raise RemoteError(f"Paiement {payment_id} rattaché à la commande {remote_order_id}, attendu {order_id}")

    try:
        amount = to_decimal(payload["amount"]) if payload.get("amount") is not None else expected_amount
    except ValueError as e:
        raise RemoteError(f"Montant PIX invalide: {payload.get('amount')!r}") from e
    if amount is None:
        raise RemoteError("Réponse create-pix sans montant")
    if expected_amount is not None and amount != expected_amount:
        raise RemoteError(f"Montant PIX {amount} différent du total de la commande {expected_amount}")

    expires_at = None
    if payload.get("expiresAt") is not None:
        try:
            expires_at = parse_timestamp(payload["expiresAt"])
        except ValueError as e:
            raise RemoteError(f"Expiration PIX invalide: {payload['expiresAt']!r}") from e

    return Payment(
        payment_id=payment_id,
        order_id=order_id,
        amount=amount,
        pix=PixArtifact(qr_code=qr_code, copy_paste=copy_paste),
        expires_at=expires_at,
        status=PaymentStatus.PENDING,
    )


class PaymentSessionManager:
    def __init__(self, session: SessionContext):
        self._session = session
        self._payment: Optional[Payment] = None
        self._in_flight: Set[str] = set()

    @property
    def payment(self) -> Optional[Payment]:
        return self._payment

    @property
    def status(self) -> PaymentStatus:
        return self._payment.status if self._payment else PaymentStatus.UNKNOWN

    async def create_pix_charge(self, order_id: Any, amount: Optional[Decimal] = None) -> Payment:
        oid = str(order_id or "").strip()
        if not oid:
            raise ValidationError("orderId requis", code="order_id_required")
        if oid in self._in_flight:
            raise InvalidStateError(f"Charge PIX déjà en cours pour la commande {oid}", code="charge_in_flight")

        self._in_flight.add(oid)
        try:
            payload = await repository.create_pix(self._session.client, oid)
        finally:
            self._in_flight.discard(oid)

        payment = _build_payment(payload, oid, amount)
        self._payment = payment
        logger.info("payments.create_pix order_id=%s payment_id=%s amount=%s", oid, payment.payment_id, payment.amount)
        return payment

    def _require_payment(self) -> Payment:
        if self._payment is None:
            raise NotReadyError("Aucun paiement PIX créé", code="payment_not_ready")
        return self._payment

    def get_payment(self) -> Payment:
        return self._require_payment()

    def get_copy_paste_code(self) -> str:
        return self._require_payment().pix.copy_paste

    def get_qr_payload(self) -> str:
        return self._require_payment().pix.qr_code

    def get_expiry(self) -> Optional[datetime]:
        return self._require_payment().expires_at

    def get_qr_image(self) -> str:
        """Image PNG (data URI) du payload QR."""
        return generate_qr_code(self.get_qr_payload())

    def status_of(self, payment: Payment) -> PaymentStatus:
        held = self._payment
        if held is not None and held.payment_id == payment.payment_id:
            return held.status
        return payment.status

    def apply_reconciled_status(self, order_id: str, status: PaymentStatus) -> PaymentStatus:
        """
        Réservé au StatusReconciler: écrase le statut local du paiement de order_id.
        - Aucun paiement détenu pour cette commande: rien n'est stocké, le statut lu est retourné
        - Paiement déjà terminal (paid/failed): inchangé, un désaccord distant est journalisé
        """
        held = self._payment
        if held is None or held.order_id != order_id:
            return status
        if held.status.is_terminal:
            if status != held.status:
                logger.warning(
                    "payments.status terminal kept order_id=%s local=%s remote=%s",
                    order_id, held.status.value, status.value,
                )
            return held.status
        self._payment = held.with_status(status)
        return status
