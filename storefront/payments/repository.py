"""
Accès au service de paiement distant (création PIX, statut, webhook).
"""
from typing import Any, Dict
from urllib.parse import quote

import httpx

from storefront.infra.api_client import request_json

# module storefront.payments.repository
async def create_pix(client: httpx.AsyncClient, order_id: str) -> Dict[str, Any]:
    """POST /payments/create-pix -> {paymentId, orderId, amount, pix:{qrCode, copyPaste}, expiresAt}"""
    return await request_json(client, "POST", "/payments/create-pix", json={"orderId": order_id})

async def fetch_status(client: httpx.AsyncClient, order_id: str) -> Dict[str, Any]:
    """GET /payments/{orderId}/status -> {status}"""
    return await request_json(client, "GET", f"/payments/{quote(order_id, safe='')}/status")

async def post_webhook(client: httpx.AsyncClient, payload: Dict[str, Any]) -> Dict[str, Any]:
    """POST /payments/webhook avec {paymentId, orderId, status, txid}"""
    return await request_json(client, "POST", "/payments/webhook", json=payload)
