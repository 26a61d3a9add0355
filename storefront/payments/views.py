import logging

from fastapi import APIRouter, Depends

from storefront.coordinator import CheckoutCoordinator
from storefront.utils.security import require_coordinator

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/payments", tags=["Payments API"])

# module storefront.payments.views
@router.get("/current")
def get_current_payment(coordinator: CheckoutCoordinator = Depends(require_coordinator)):
    """Paiement PIX courant (copia-e-cola, payload QR, expiration, statut). 404 si aucun."""
    return coordinator.payments.get_payment().to_dict()

@router.get("/current/qrcode")
def get_current_qrcode(coordinator: CheckoutCoordinator = Depends(require_coordinator)):
    """Image PNG du QR code PIX en data URI: {"image": "data:image/png;base64,..."}"""
    return {"image": coordinator.payments.get_qr_image()}

@router.post("/retry")
async def retry_pix_charge(coordinator: CheckoutCoordinator = Depends(require_coordinator)):
    """Relance explicite de la charge PIX pour la commande courante (pas de retry automatique).
    409 si un paiement existe déjà pour cette commande (pending ou terminal).
    """
    payment = await coordinator.retry_charge()
    return payment.to_dict()

@router.post("/{order_id}/refresh")
async def refresh_payment_status(order_id: str, coordinator: CheckoutCoordinator = Depends(require_coordinator)):
    """Relit le statut autoritaire. 502 en cas d'échec: le dernier statut connu est conservé."""
    status = await coordinator.refresh_status(order_id)
    return {"orderId": order_id, "status": status.value}

@router.post("/{order_id}/simulate")
async def simulate_payment_webhook(order_id: str, coordinator: CheckoutCoordinator = Depends(require_coordinator)):
    """
    Simule le webhook du prestataire puis relit le statut.
    - 409 si le paiement est déjà payé (aucun webhook émis)
    - 404 si aucun paiement n'a été créé
    - 409 si order_id n'est pas la commande du paiement courant
    """
    status = await coordinator.simulate_confirmation(order_id)
    return {"orderId": order_id, "status": status.value}
