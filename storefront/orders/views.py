from typing import Optional

from fastapi import APIRouter, Depends

from storefront.coordinator import CheckoutCoordinator
from storefront.utils.security import require_coordinator

router = APIRouter(prefix="/api/v1/orders", tags=["Orders API"])

# module storefront.orders.views
@router.get("")
async def list_orders(status: Optional[str] = None, coordinator: CheckoutCoordinator = Depends(require_coordinator)):
    """Historique des commandes; status optionnel (pending|paid|... ou libellés pendente|pago|todos)."""
    orders = await coordinator.orders.list_orders(status)
    return {"orders": [o.to_dict() for o in orders]}
