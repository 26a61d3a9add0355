"""
Réconciliation du statut de paiement avec la source distante (autoritaire).

Machine à états: pending -> {paid, failed} (terminaux), pending -> pending (lecture non concluante).

Ordonnancement: chaque lecture de statut reçoit un numéro de séquence croissant au moment
de son émission; une réponse n'est appliquée que si elle est plus récente que la dernière
appliquée pour la même commande. La requête émise en dernier gagne, une réponse tardive
d'une requête plus ancienne est ignorée.
"""
import itertools
import logging
from typing import Any, Dict

from storefront.errors import InvalidStateError, ValidationError
from storefront.session import SessionContext
from . import repository
from .models import Payment, PaymentStatus, build_confirmation_event
from .service import PaymentSessionManager

logger = logging.getLogger(__name__)


class StatusReconciler:
    def __init__(self, session: SessionContext, payments: PaymentSessionManager):
        self._session = session
        self._payments = payments
        self._sequence = itertools.count(1)
        self._last_applied: Dict[str, int] = {}

    async def refresh_status(self, order_id: Any) -> PaymentStatus:
        """
        Lit le statut distant et l'applique (last-read-wins, sous réserve du fencing).
        - Échec distant: RemoteError, statut local inchangé (jamais remis à unknown)
        """
        oid = str(order_id or "").strip()
        if not oid:
            raise ValidationError("orderId requis", code="order_id_required")

        seq = next(self._sequence)
        payload = await repository.fetch_status(self._session.client, oid)
        raw = payload.get("status") if isinstance(payload, dict) else None
        status = PaymentStatus.from_remote(raw)

        if seq < self._last_applied.get(oid, 0):
            logger.info("payments.reconciler stale response discarded order_id=%s seq=%s status=%s", oid, seq, status.value)
            held = self._payments.payment
            return held.status if held is not None and held.order_id == oid else status

        self._last_applied[oid] = seq
        applied = self._payments.apply_reconciled_status(oid, status)
        logger.info("payments.reconciler refresh order_id=%s seq=%s remote=%r status=%s", oid, seq, raw, applied.value)
        return applied

    async def apply_simulated_confirmation(self, payment: Payment, order_id: Any) -> PaymentStatus:
        """
        Simule la notification du prestataire puis relit le statut autoritaire.
        - Paiement déjà paid: InvalidStateError, aucun webhook émis
        - Le retour du webhook n'est pas interprété: seul refresh_status fait foi
        """
        oid = str(order_id or "").strip()
        if not oid:
            raise ValidationError("orderId requis", code="order_id_required")
        if self._payments.status_of(payment) is PaymentStatus.PAID:
            raise InvalidStateError(f"Paiement {payment.payment_id} déjà confirmé", code="already_paid")

        event = build_confirmation_event(payment, oid)
        await repository.post_webhook(self._session.client, event)
        logger.info("payments.reconciler webhook sent payment_id=%s order_id=%s txid=%s", payment.payment_id, oid, event["txid"])
        return await self.refresh_status(oid)
