from typing import Any, Dict

import httpx

from storefront.infra.api_client import request_json

# module storefront.checkout.repository
async def post_checkout(client: httpx.AsyncClient) -> Dict[str, Any]:
    """POST /orders/checkout: le backend convertit le panier courant en commande."""
    return await request_json(client, "POST", "/orders/checkout")
