import logging

from fastapi import APIRouter, Depends

from storefront.coordinator import CheckoutCoordinator
from storefront.utils.security import require_coordinator

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/checkout", tags=["Checkout API"])

# module storefront.checkout.views
@router.post("")
async def checkout(coordinator: CheckoutCoordinator = Depends(require_coordinator)):
    """
    Finalise le panier et génère la charge PIX de la commande.
    - 409 si panier vide ou checkout déjà en cours
    - 502 si l'API marketplace échoue (le panier reste intact si le checkout lui-même a échoué)
    Réponse: {"order": {...}, "payment": {...}}
    """
    order, payment = await coordinator.checkout_and_charge()
    logger.info("checkout.views order_id=%s payment_id=%s", order.id, payment.payment_id)
    return {"order": order.to_dict(), "payment": payment.to_dict()}
