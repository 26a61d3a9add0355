from typing import Any, List

import httpx

from storefront.infra.api_client import request_json

# module storefront.orders.repository
async def list_orders(client: httpx.AsyncClient) -> List[dict]:
    """GET /orders -> liste brute (accepte {orders: [...]} ou une liste)."""
    payload: Any = await request_json(client, "GET", "/orders")
    if isinstance(payload, dict):
        payload = payload.get("orders") or []
    return payload if isinstance(payload, list) else []
