"""
Modèle panier pur (pas d'HTTP).
- CartItem: ligne figée (produit, quantité, prix unitaire au moment de l'ajout)
- CartSnapshot: vue immuable {items, total}, total toujours recalculé depuis les lignes
- parse_cart_items: normalise le payload distant {items, total}
"""
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Iterable, List, Optional, Tuple

ZERO = Decimal("0.00")

def to_decimal(value: Any) -> Decimal:
    """Convertit str|int|float|Decimal en Decimal (via str pour éviter les artefacts float)."""
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool) or value is None:
        raise ValueError(f"montant invalide: {value!r}")
    try:
        return Decimal(str(value).strip())
    except (InvalidOperation, ValueError) as e:
        raise ValueError(f"montant invalide: {value!r}") from e

def format_amount(value: Decimal) -> str:
    return f"{value:.2f}"


@dataclass(frozen=True)
class CartItem:
    product_ref: str
    quantity: int
    unit_price: Decimal
    title: Optional[str] = None

    def __post_init__(self):
        if not self.product_ref:
            raise ValueError("product_ref requis")
        if self.quantity < 1:
            raise ValueError(f"quantité invalide pour {self.product_ref}: {self.quantity}")
        if self.unit_price < 0:
            raise ValueError(f"prix unitaire négatif pour {self.product_ref}")

    @property
    def subtotal(self) -> Decimal:
        return self.unit_price * self.quantity

    def to_dict(self) -> Dict[str, Any]:
        return {
            "productRef": self.product_ref,
            "quantity": self.quantity,
            "unitPrice": format_amount(self.unit_price),
            "title": self.title,
        }

def compute_total(items: Iterable[CartItem]) -> Decimal:
    return sum((i.unit_price * i.quantity for i in items), ZERO)


@dataclass(frozen=True)
class CartSnapshot:
    items: Tuple[CartItem, ...] = ()

    @property
    def total(self) -> Decimal:
        return compute_total(self.items)

    def is_empty(self) -> bool:
        return not self.items

    def find(self, product_ref: str) -> Optional[CartItem]:
        return next((i for i in self.items if i.product_ref == product_ref), None)

    def to_dict(self) -> Dict[str, Any]:
        return {"items": [i.to_dict() for i in self.items], "total": format_amount(self.total)}

def _product_ref(raw: Dict[str, Any]) -> Tuple[str, Dict[str, Any]]:
    # productId est soit un id, soit le produit peuplé {_id, title, price}
    product = raw.get("productId") if raw.get("productId") is not None else raw.get("productRef")
    if isinstance(product, dict):
        ref = product.get("_id") or product.get("id") or ""
        return str(ref).strip(), product
    return str(product or "").strip(), {}

def _parse_quantity(qty_raw: Any, ref: str) -> int:
    # 2.0 accepté, 2.7 rejeté: jamais de troncature silencieuse
    try:
        qty = to_decimal(qty_raw)
    except ValueError as e:
        raise ValueError(f"quantité invalide pour {ref}: {qty_raw!r}") from e
    if not qty.is_finite() or qty != qty.to_integral_value():
        raise ValueError(f"quantité non entière pour {ref}: {qty_raw!r}")
    return int(qty)

def parse_cart_item(raw: Dict[str, Any]) -> CartItem:
    """
    Normalise une ligne distante.
    - Accepte productId (str ou objet peuplé), qty|quantity, unitPrice (fallback: price du produit)
    - Soulève ValueError si la ligne est inexploitable
    """
    if not isinstance(raw, dict):
        raise ValueError(f"ligne panier invalide: {raw!r}")
    ref, product = _product_ref(raw)
    qty_raw = raw.get("qty") if raw.get("qty") is not None else raw.get("quantity")
    qty = _parse_quantity(qty_raw, ref)
    price_raw = raw.get("unitPrice") if raw.get("unitPrice") is not None else product.get("price")
    return CartItem(
        product_ref=ref,
        quantity=qty,
        unit_price=to_decimal(price_raw),
        title=product.get("title") or raw.get("title"),
    )

def parse_cart_items(payload: Any) -> List[CartItem]:
    """Extrait les lignes d'un payload {items: [...]} (ou d'une liste brute)."""
    raw_items = payload.get("items") if isinstance(payload, dict) else payload
    return [parse_cart_item(raw) for raw in raw_items or []]
