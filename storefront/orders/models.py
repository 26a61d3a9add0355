"""
Modèle commande (miroir local, le backend reste la source de vérité).
- OrderStatus: énumération fermée; libellés historiques en portugais acceptés; inconnu => pending
- Order: commande issue du checkout, snapshot figé des lignes du panier
- OrderSummary: projection lecture seule pour l'historique
"""
import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from storefront.cart.models import CartItem, format_amount, parse_cart_item, to_decimal
from storefront.utils.dates import parse_timestamp

logger = logging.getLogger(__name__)


class OrderStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"
    IN_TRANSIT = "in_transit"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"

    @classmethod
    def lookup(cls, value: Any) -> Optional["OrderStatus"]:
        """Correspondance stricte (valeur ou libellé portugais), None si inconnue."""
        if isinstance(value, cls):
            return value
        return _ORDER_STATUS_ALIASES.get(str(value or "").strip().lower())

    @classmethod
    def parse(cls, value: Any) -> "OrderStatus":
        status = cls.lookup(value)
        if status is None:
            # Bras par défaut explicite: valeur non reconnue => pending
            logger.warning("orders.status unrecognized value=%r normalized=pending", value)
            return cls.PENDING
        return status


_ORDER_STATUS_ALIASES: Dict[str, OrderStatus] = {
    "pending": OrderStatus.PENDING,
    "pendente": OrderStatus.PENDING,
    "paid": OrderStatus.PAID,
    "pago": OrderStatus.PAID,
    "in_transit": OrderStatus.IN_TRANSIT,
    "em_transito": OrderStatus.IN_TRANSIT,
    "delivered": OrderStatus.DELIVERED,
    "entregue": OrderStatus.DELIVERED,
    "cancelled": OrderStatus.CANCELLED,
    "canceled": OrderStatus.CANCELLED,
    "cancelado": OrderStatus.CANCELLED,
}

def order_id_of(raw: Dict[str, Any]) -> str:
    return str(raw.get("id") or raw.get("_id") or "").strip()


@dataclass(frozen=True)
class Order:
    id: str
    items: Tuple[CartItem, ...]
    total: Decimal
    status: OrderStatus = OrderStatus.PENDING

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "items": [i.to_dict() for i in self.items],
            "total": format_amount(self.total),
            "status": self.status.value,
        }


@dataclass(frozen=True)
class OrderSummary:
    id: str
    total: Decimal
    status: OrderStatus
    created_at: Optional[datetime]
    items: Tuple[CartItem, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "total": format_amount(self.total),
            "status": self.status.value,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "items": [i.to_dict() for i in self.items],
        }

def parse_order_summary(raw: Dict[str, Any]) -> OrderSummary:
    """Normalise une commande distante; soulève ValueError si id ou total manquent."""
    oid = order_id_of(raw)
    if not oid:
        raise ValueError(f"commande sans id: {raw!r}")
    items = tuple(parse_cart_item(it) for it in raw.get("items") or [])
    created = raw.get("createdAt") or raw.get("created_at")
    return OrderSummary(
        id=oid,
        total=to_decimal(raw.get("total")),
        status=OrderStatus.parse(raw.get("status")),
        created_at=parse_timestamp(created) if created else None,
        items=items,
    )
