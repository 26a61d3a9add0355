"""
Registre des sessions ouvertes côté BFF: un CheckoutCoordinator par token acheteur.
- open: init au login (idempotent pour un même token)
- get: NotReadyError si la session n'a pas été ouverte
- close / close_all: teardown au logout et à l'arrêt de l'application
"""
import logging
from typing import Any, Dict, Optional

import httpx

from storefront.coordinator import CheckoutCoordinator
from storefront.errors import NotReadyError
from storefront.session import SessionContext

logger = logging.getLogger(__name__)


class SessionRegistry:
    def __init__(self, base_url: Optional[str] = None, transport: Optional[httpx.AsyncBaseTransport] = None):
        self._base_url = base_url
        self._transport = transport
        self._coordinators: Dict[str, CheckoutCoordinator] = {}

    @property
    def base_url(self) -> Optional[str]:
        return self._base_url

    @property
    def transport(self) -> Optional[httpx.AsyncBaseTransport]:
        return self._transport

    def __len__(self) -> int:
        return len(self._coordinators)

    async def open(self, token: str, user: Optional[Dict[str, Any]] = None) -> CheckoutCoordinator:
        existing = self._coordinators.get(token)
        if existing is not None:
            return existing
        session = SessionContext(token, user=user, base_url=self._base_url, transport=self._transport)
        await session.open()
        coordinator = CheckoutCoordinator(session)
        self._coordinators[session.token] = coordinator
        return coordinator

    def get(self, token: str) -> CheckoutCoordinator:
        coordinator = self._coordinators.get(token)
        if coordinator is None:
            raise NotReadyError("Session non ouverte, appelez POST /api/v1/session", code="session_closed")
        return coordinator

    async def close(self, token: str) -> bool:
        coordinator = self._coordinators.pop(token, None)
        if coordinator is None:
            return False
        await coordinator.close()
        return True

    async def close_all(self) -> None:
        for token in list(self._coordinators):
            await self.close(token)
        logger.info("registry.close_all done")
