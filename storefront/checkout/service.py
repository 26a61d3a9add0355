"""
Cas d'usage 'checkout': transforme le panier courant en commande.
- Panier vide: InvalidStateError, aucun appel distant
- Un seul checkout en vol: une soumission concurrente est rejetée (InvalidStateError)
- Ne vide pas le panier: l'appelant (coordinateur) déclenche mark_checked_out() ou reload()
"""
import logging
from typing import Any

from storefront.cart.models import CartSnapshot, to_decimal
from storefront.errors import InvalidStateError, RemoteError
from storefront.orders.models import Order, OrderStatus, order_id_of
from storefront.session import SessionContext
from . import repository

logger = logging.getLogger(__name__)

def _extract_order(payload: Any) -> dict:
    # Réponse {order: {...}} ou la commande directement
    order = payload.get("order") if isinstance(payload, dict) and isinstance(payload.get("order"), dict) else payload
    if not isinstance(order, dict) or not order_id_of(order):
        raise RemoteError("Réponse checkout sans identifiant de commande")
    return order


class CheckoutInitiator:
    def __init__(self, session: SessionContext):
        self._session = session
        self._in_flight = False

    @property
    def in_flight(self) -> bool:
        return self._in_flight

    async def checkout(self, cart: CartSnapshot) -> Order:
        if cart.is_empty():
            raise InvalidStateError("Impossible de finaliser un panier vide", code="empty_cart")
        if self._in_flight:
            raise InvalidStateError("Checkout déjà en cours", code="checkout_in_flight")

        self._in_flight = True
        try:
            payload = await repository.post_checkout(self._session.client)
        finally:
            self._in_flight = False

        raw = _extract_order(payload)
        total = cart.total
        if raw.get("total") is not None:
            try:
                remote_total = to_decimal(raw["total"])
                if remote_total != total:
                    logger.warning("checkout.total mismatch order_id=%s local=%s remote=%s", order_id_of(raw), total, remote_total)
            except ValueError:
                logger.warning("checkout.total unparsable order_id=%s value=%r", order_id_of(raw), raw["total"])

        order = Order(
            id=order_id_of(raw),
            items=cart.items,
            total=total,
            status=OrderStatus.parse(raw.get("status") or OrderStatus.PENDING.value),
        )
        logger.info("checkout.completed order_id=%s total=%s lines=%s", order.id, order.total, len(order.items))
        return order
