"""
Contexte de session acheteur explicite (remplace le stockage global token/utilisateur).
- open(): initialisation au login, crée le client HTTP authentifié
- close(): teardown au logout, libère le client
- client: accès au client HTTP, NotReadyError si la session n'est pas ouverte
"""
import logging
from typing import Any, Dict, Optional

import httpx

from storefront.errors import NotReadyError, ValidationError
from storefront.infra.api_client import build_client

logger = logging.getLogger(__name__)


class SessionContext:
    def __init__(
        self,
        token: str,
        user: Optional[Dict[str, Any]] = None,
        base_url: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        if not (token or "").strip():
            raise ValidationError("token is required", code="token_required")
        self.token = token.strip()
        self.user = user or {}
        self._base_url = base_url
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    @property
    def user_id(self) -> Optional[str]:
        return self.user.get("id")

    @property
    def is_open(self) -> bool:
        return self._client is not None

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            raise NotReadyError("Session non ouverte", code="session_closed")
        return self._client

    async def open(self) -> "SessionContext":
        if self._client is None:
            self._client = build_client(self.token, base_url=self._base_url, transport=self._transport)
            logger.info("session.open user_id=%s", self.user_id)
        return self

    async def close(self) -> None:
        if self._client is not None:
            client, self._client = self._client, None
            await client.aclose()
            logger.info("session.close user_id=%s", self.user_id)

    async def __aenter__(self) -> "SessionContext":
        return await self.open()

    async def __aexit__(self, *exc_info) -> None:
        await self.close()
