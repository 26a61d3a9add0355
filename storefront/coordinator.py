"""
Coordinateur du cycle panier → commande → paiement PIX pour une session acheteur.
Compose CartStore, CheckoutInitiator, PaymentSessionManager, StatusReconciler et OrderHistoryView
autour d'un même SessionContext.
"""
import logging
from typing import Optional, Tuple

from storefront.cart.service import CartStore
from storefront.checkout.service import CheckoutInitiator
from storefront.errors import InvalidStateError, NotReadyError
from storefront.orders.models import Order
from storefront.orders.service import OrderHistoryView
from storefront.payments.models import Payment, PaymentStatus
from storefront.payments.reconciler import StatusReconciler
from storefront.payments.service import PaymentSessionManager
from storefront.session import SessionContext

logger = logging.getLogger(__name__)


class CheckoutCoordinator:
    def __init__(self, session: SessionContext):
        self.session = session
        self.cart = CartStore(session)
        self.checkout = CheckoutInitiator(session)
        self.payments = PaymentSessionManager(session)
        self.reconciler = StatusReconciler(session, self.payments)
        self.orders = OrderHistoryView(session)
        self.order: Optional[Order] = None

    async def checkout_and_charge(self) -> Tuple[Order, Payment]:
        """
        Flux complet:
          1) checkout du panier courant (InvalidStateError si vide)
          2) panier local remis à zéro (la commande le remplace)
          3) charge PIX pour la commande, montant = total de la commande
        Si l'étape 3 échoue, la commande reste disponible (self.order) pour relancer create_pix_charge.
        """
        order = await self.checkout.checkout(self.cart.snapshot())
        self.order = order
        self.cart.mark_checked_out()
        payment = await self.payments.create_pix_charge(order.id, amount=order.total)
        return order, payment

    async def retry_charge(self) -> Payment:
        """Relance la charge PIX de la commande courante (action explicite de l'utilisateur)."""
        if self.order is None:
            raise NotReadyError("Aucune commande en cours", code="order_not_ready")
        held = self.payments.payment
        if held is not None and held.order_id == self.order.id:
            # Une seule charge par commande: la relance ne couvre que l'échec de création
            raise InvalidStateError(
                f"Paiement {held.payment_id} déjà créé pour la commande {self.order.id} (statut {held.status.value})",
                code="payment_exists",
            )
        return await self.payments.create_pix_charge(self.order.id, amount=self.order.total)

    async def refresh_status(self, order_id: Optional[str] = None) -> PaymentStatus:
        return await self.reconciler.refresh_status(order_id or self._current_order_id())

    async def simulate_confirmation(self, order_id: Optional[str] = None) -> PaymentStatus:
        payment = self.payments.payment
        if payment is None:
            raise NotReadyError("Aucun paiement PIX créé", code="payment_not_ready")
        if order_id and order_id != payment.order_id:
            raise InvalidStateError(
                f"Paiement {payment.payment_id} rattaché à la commande {payment.order_id}, pas à {order_id}",
                code="payment_order_mismatch",
            )
        return await self.reconciler.apply_simulated_confirmation(payment, payment.order_id)

    def _current_order_id(self) -> str:
        if self.payments.payment is not None:
            return self.payments.payment.order_id
        if self.order is not None:
            return self.order.id
        raise NotReadyError("Aucune commande en cours", code="order_not_ready")

    async def close(self) -> None:
        await self.session.close()
