"""
Historique des commandes (lecture seule) de l'acheteur connecté.
"""
import logging
from typing import Any, List, Optional

from storefront.errors import ValidationError
from storefront.session import SessionContext
from . import repository
from .models import OrderStatus, OrderSummary, parse_order_summary

logger = logging.getLogger(__name__)

# Filtre "todos" du front historique
_ALL_FILTERS = (None, "", "all", "todos")

def _wanted_status(status: Any) -> Optional[OrderStatus]:
    # Filtre saisi par l'utilisateur: pas de bras par défaut, un libellé inconnu est rejeté
    if isinstance(status, OrderStatus):
        return status
    key = str(status).strip().lower() if status is not None else None
    if key in _ALL_FILTERS:
        return None
    wanted = OrderStatus.lookup(key)
    if wanted is None:
        raise ValidationError(f"Filtre de statut inconnu: {status!r}", code="invalid_status_filter")
    return wanted


class OrderHistoryView:
    def __init__(self, session: SessionContext):
        self._session = session

    async def list_orders(self, status: Optional[Any] = None) -> List[OrderSummary]:
        """
        Retourne les commandes normalisées, filtrées par statut si demandé.
        - Les lignes distantes inexploitables sont ignorées (journalisées)
        - status accepte OrderStatus ou un libellé (ex: "pago", "pending")
        - Libellé inconnu: ValidationError, aucun appel distant
        """
        wanted = _wanted_status(status)
        summaries: List[OrderSummary] = []
        for raw in await repository.list_orders(self._session.client):
            try:
                summary = parse_order_summary(raw)
            except (ValueError, TypeError, AttributeError):
                logger.warning("orders.list skipped malformed order raw=%r", raw)
                continue
            if wanted is None or summary.status is wanted:
                summaries.append(summary)
        return summaries
