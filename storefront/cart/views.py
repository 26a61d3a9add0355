import logging

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from storefront.coordinator import CheckoutCoordinator
from storefront.utils.security import require_coordinator

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/cart", tags=["Cart API"])


class AddItemRequest(BaseModel):
    productRef: str = Field(min_length=1)
    qty: int = 1

# module storefront.cart.views
@router.get("")
async def get_cart(reload: bool = False, coordinator: CheckoutCoordinator = Depends(require_coordinator)):
    """
    Retourne le panier {items, total}.
    - reload=true: resynchronise depuis le service distant avant lecture
    """
    if reload:
        return (await coordinator.cart.reload()).to_dict()
    return coordinator.cart.snapshot().to_dict()

@router.post("/items")
async def add_cart_item(req: AddItemRequest, coordinator: CheckoutCoordinator = Depends(require_coordinator)):
    """Ajoute (ou cumule) une ligne. Erreurs: 400 quantité < 1, 502 échec distant."""
    snapshot = await coordinator.cart.add(req.productRef, req.qty)
    return snapshot.to_dict()

@router.delete("/items/{product_ref}")
async def remove_cart_item(product_ref: str, coordinator: CheckoutCoordinator = Depends(require_coordinator)):
    snapshot = await coordinator.cart.remove(product_ref)
    return snapshot.to_dict()

@router.delete("")
async def clear_cart(coordinator: CheckoutCoordinator = Depends(require_coordinator)):
    snapshot = await coordinator.cart.clear()
    return snapshot.to_dict()
