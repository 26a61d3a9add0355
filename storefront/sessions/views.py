from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from storefront.registry import SessionRegistry
from storefront.utils.security import get_bearer_token, get_registry

router = APIRouter(prefix="/api/v1/session", tags=["Session API"])


class OpenSessionRequest(BaseModel):
    user: Optional[Dict[str, Any]] = None

# module storefront.sessions.views
@router.post("")
async def open_session(
    req: Optional[OpenSessionRequest] = None,
    token: str = Depends(get_bearer_token),
    registry: SessionRegistry = Depends(get_registry),
):
    """
    Initialise la session acheteur (après login côté API marketplace).
    - Idempotent: un token déjà ouvert réutilise son coordinateur (panier/paiement conservés)
    """
    coordinator = await registry.open(token, user=(req.user if req else None))
    return {"status": "open", "user": coordinator.session.user}

@router.delete("")
async def close_session(token: str = Depends(get_bearer_token), registry: SessionRegistry = Depends(get_registry)):
    """Teardown au logout: ferme le client HTTP et oublie panier/commande/paiement locaux."""
    closed = await registry.close(token)
    return {"status": "closed" if closed else "absent"}
