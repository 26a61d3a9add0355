import asyncio
import json
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple

import httpx
import pytest
import pytest_asyncio
from fastapi.testclient import TestClient

from storefront.app_setup.factory import create_app
from storefront.coordinator import CheckoutCoordinator
from storefront.registry import SessionRegistry
from storefront.session import SessionContext

API_URL = "http://marketplace.test/api/v1"
API_PREFIX = "/api/v1"

# Marquage automatique selon le dossier
def pytest_collection_modifyitems(config, items):
    for item in items:
        nodeid = item.nodeid.replace("\\", "/")
        if "/tests/unit/" in nodeid or nodeid.startswith("tests/unit/"):
            item.add_marker(pytest.mark.unit)
        elif "/tests/integration/" in nodeid or nodeid.startswith("tests/integration/"):
            item.add_marker(pytest.mark.integration)


class StatusHold:
    """Retient une réponse GET /payments/{id}/status: statut capturé à l'arrivée, émis à release."""

    def __init__(self):
        self.arrived = asyncio.Event()
        self.release = asyncio.Event()


class FakeMarketplaceApi:
    """
    API marketplace simulée derrière httpx.MockTransport.
    - catalog: productId -> (prix, titre)
    - calls: journal (méthode, chemin, corps) de chaque requête reçue
    - fail(method, path, status, message): la prochaine requête correspondante échoue
    """

    def __init__(self):
        self.catalog: Dict[str, Tuple[float, str]] = {
            "p1": (10.00, "Camiseta"),
            "p2": (5.00, "Caneca"),
            "p3": (42.50, "Mochila"),
        }
        self.cart: Dict[str, int] = {}
        self.orders: List[Dict[str, Any]] = []
        self.statuses: Dict[str, str] = {}
        self.calls: List[Tuple[str, str, Any]] = []
        self.pix_amount_override: Optional[Any] = None
        self._failures: Dict[Tuple[str, str], Tuple[int, str]] = {}
        self._holds: Dict[str, List[StatusHold]] = {}
        self._seq = 0

    # -- outillage de test ------------------------------------------------
    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    def fail(self, method: str, path: str, status: int = 500, message: str = "Erro interno"):
        self._failures[(method, path)] = (status, message)

    def hold_status(self, order_id: str) -> StatusHold:
        hold = StatusHold()
        self._holds.setdefault(order_id, []).append(hold)
        return hold

    def calls_to(self, method: str, path: str) -> List[Any]:
        return [body for (m, p, body) in self.calls if m == method and p == path]

    def seed_order(self, order_id: str, total: float, status: str = "pending", **extra) -> Dict[str, Any]:
        order = {"_id": order_id, "total": total, "status": status, "items": [], **extra}
        self.orders.append(order)
        return order

    # -- rendu ------------------------------------------------------------
    def _cart_payload(self) -> Dict[str, Any]:
        items = []
        total = Decimal("0")
        for ref, qty in self.cart.items():
            price, title = self.catalog[ref]
            items.append({"productId": {"_id": ref, "title": title, "price": price}, "qty": qty})
            total += Decimal(str(price)) * qty
        return {"items": items, "total": float(total)}

    async def handle(self, request: httpx.Request) -> httpx.Response:
        method = request.method
        path = request.url.path
        if path.startswith(API_PREFIX):
            path = path[len(API_PREFIX):]
        body = json.loads(request.content) if request.content else None
        self.calls.append((method, path, body))

        failure = self._failures.pop((method, path), None)
        if failure is not None:
            return httpx.Response(failure[0], json={"message": failure[1]})

        if path == "/cart" and method == "GET":
            return httpx.Response(200, json=self._cart_payload())
        if path == "/cart" and method == "POST":
            ref = body.get("productId")
            if ref not in self.catalog:
                return httpx.Response(404, json={"message": "Produto não encontrado"})
            self.cart[ref] = self.cart.get(ref, 0) + int(body.get("qty") or 1)
            return httpx.Response(200, json=self._cart_payload())
        if path.startswith("/cart/items/") and method == "DELETE":
            self.cart.pop(path.rsplit("/", 1)[1], None)
            return httpx.Response(200, json=self._cart_payload())
        if path == "/cart" and method == "DELETE":
            self.cart.clear()
            return httpx.Response(200, json=self._cart_payload())

        if path == "/orders/checkout" and method == "POST":
            if not self.cart:
                return httpx.Response(400, json={"message": "Carrinho vazio"})
            self._seq += 1
            payload = self._cart_payload()
            order = {"_id": f"ord_{self._seq}", "total": payload["total"], "status": "pendente", "items": payload["items"]}
            self.orders.append(order)
            self.statuses[order["_id"]] = "pending"
            self.cart.clear()
            return httpx.Response(201, json={"order": order})
        if path == "/orders" and method == "GET":
            return httpx.Response(200, json={"orders": self.orders})

        if path == "/payments/create-pix" and method == "POST":
            order_id = body.get("orderId")
            order = next((o for o in self.orders if o["_id"] == order_id), None)
            if order is None:
                return httpx.Response(404, json={"message": "Pedido não encontrado"})
            amount = self.pix_amount_override if self.pix_amount_override is not None else order["total"]
            self.statuses.setdefault(order_id, "pending")
            return httpx.Response(200, json={
                "paymentId": f"pay_{order_id}",
                "orderId": order_id,
                "amount": amount,
                "pix": {"qrCode": f"00020126PIX{order_id}", "copyPaste": f"00020126PIX{order_id}COPY"},
                "expiresAt": 1767225600000,
            })
        if path.startswith("/payments/") and path.endswith("/status") and method == "GET":
            order_id = path.split("/")[2]
            status = self.statuses.get(order_id, "pending")
            holds = self._holds.get(order_id)
            if holds:
                hold = holds.pop(0)
                hold.arrived.set()
                await hold.release.wait()
            return httpx.Response(200, json={"status": status})
        if path == "/payments/webhook" and method == "POST":
            self.statuses[body["orderId"]] = body["status"]
            return httpx.Response(200, json={"received": True})

        return httpx.Response(404, json={"message": f"Rota desconhecida {method} {path}"})


@pytest.fixture
def fake_api() -> FakeMarketplaceApi:
    return FakeMarketplaceApi()

@pytest_asyncio.fixture
async def session(fake_api):
    ctx = SessionContext("buyer-token", user={"id": "u1", "name": "Ana"}, base_url=API_URL, transport=fake_api.transport)
    async with ctx:
        yield ctx

@pytest_asyncio.fixture
async def coordinator(session) -> CheckoutCoordinator:
    return CheckoutCoordinator(session)

@pytest.fixture
def registry(fake_api) -> SessionRegistry:
    return SessionRegistry(base_url=API_URL, transport=fake_api.transport)

@pytest.fixture
def client(registry):
    app = create_app(registry)
    with TestClient(app) as c:
        yield c

@pytest.fixture
def auth_headers() -> Dict[str, str]:
    return {"Authorization": "Bearer buyer-token"}

@pytest.fixture
def open_client(client, auth_headers):
    """Client BFF avec une session acheteur déjà ouverte."""
    resp = client.post("/api/v1/session", json={"user": {"id": "u1"}}, headers=auth_headers)
    assert resp.status_code == 200
    return client
