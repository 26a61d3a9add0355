"""
Accès au service panier distant (GET/POST/DELETE /cart).
Chaque fonction retourne le payload {items, total} renvoyé par l'API.
"""
from typing import Any, Dict
from urllib.parse import quote

import httpx

from storefront.infra.api_client import request_json

# module storefront.cart.repository
async def fetch_cart(client: httpx.AsyncClient) -> Dict[str, Any]:
    return await request_json(client, "GET", "/cart")

async def add_item(client: httpx.AsyncClient, product_ref: str, qty: int) -> Dict[str, Any]:
    return await request_json(client, "POST", "/cart", json={"productId": product_ref, "qty": qty})

async def remove_item(client: httpx.AsyncClient, product_ref: str) -> Dict[str, Any]:
    return await request_json(client, "DELETE", f"/cart/items/{quote(product_ref, safe='')}")

async def clear_cart(client: httpx.AsyncClient) -> Dict[str, Any]:
    return await request_json(client, "DELETE", "/cart")
