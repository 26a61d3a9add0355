from typing import Optional

from fastapi import Depends, HTTPException, Request

from storefront.coordinator import CheckoutCoordinator
from storefront.registry import SessionRegistry

def get_bearer_token(request: Request) -> str:
    # Token émis par l'API marketplace au login; seul l'en-tête Authorization est accepté
    auth_header = request.headers.get("Authorization", "")
    token: Optional[str] = None
    if auth_header.startswith("Bearer "):
        token = auth_header[7:].strip()
    if not token:
        raise HTTPException(status_code=401, detail="Non authentifié")
    return token

def get_registry(request: Request) -> SessionRegistry:
    return request.app.state.sessions

def require_coordinator(
    token: str = Depends(get_bearer_token),
    registry: SessionRegistry = Depends(get_registry),
) -> CheckoutCoordinator:
    """Coordinateur de la session ouverte pour ce token (NotReadyError => 404 si absente)."""
    return registry.get(token)
