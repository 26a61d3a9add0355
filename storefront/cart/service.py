"""
Cas d'usage 'cart': état local du panier synchronisé avec le service distant.
- Aucune mutation optimiste: l'état local n'est modifié qu'après succès de l'appel distant
- En cas d'échec distant, RemoteError remonte et l'état local reste intact
"""
import logging
from typing import Any, List

from storefront.errors import RemoteError, ValidationError
from storefront.session import SessionContext
from . import repository
from .models import CartItem, CartSnapshot, compute_total, parse_cart_items, to_decimal

logger = logging.getLogger(__name__)

def _clean_ref(product_ref: Any) -> str:
    ref = str(product_ref or "").strip()
    if not ref:
        raise ValidationError("productRef requis", code="product_ref_required")
    return ref

def _remote_items(payload: Any) -> List[CartItem]:
    try:
        return parse_cart_items(payload)
    except ValueError as e:
        raise RemoteError(f"Réponse panier invalide: {e}") from e

def _warn_on_total_mismatch(payload: Any, items: List[CartItem]) -> None:
    # Le total local est toujours dérivé; un écart avec le total distant est seulement signalé
    if not isinstance(payload, dict) or payload.get("total") is None:
        return
    try:
        remote_total = to_decimal(payload["total"])
    except ValueError:
        return
    local_total = compute_total(items)
    if remote_total != local_total:
        logger.warning("cart.total mismatch local=%s remote=%s", local_total, remote_total)


class CartStore:
    def __init__(self, session: SessionContext):
        self._session = session
        self._items: List[CartItem] = []

    def snapshot(self) -> CartSnapshot:
        return CartSnapshot(items=tuple(self._items))

    async def reload(self) -> CartSnapshot:
        """Remplace l'état local par le panier distant (GET /cart)."""
        payload = await repository.fetch_cart(self._session.client)
        items = _remote_items(payload)
        self._items = items
        logger.info("cart.reload items=%s", len(items))
        return self.snapshot()

    async def add(self, product_ref: Any, qty: int = 1) -> CartSnapshot:
        """
        Ajoute qty unités de product_ref.
        - qty >= 1 sinon ValidationError (aucun appel distant)
        - Ligne existante: quantité cumulée, prix unitaire d'origine conservé
        - Nouvelle ligne: prix unitaire lu dans la réponse distante, ajoutée en fin de liste
        """
        ref = _clean_ref(product_ref)
        if isinstance(qty, bool) or not isinstance(qty, int) or qty < 1:
            raise ValidationError(f"Quantité invalide: {qty!r} (minimum 1)", code="invalid_quantity")

        payload = await repository.add_item(self._session.client, ref, qty)

        items = list(self._items)
        index = next((n for n, it in enumerate(items) if it.product_ref == ref), None)
        if index is not None:
            current = items[index]
            items[index] = CartItem(ref, current.quantity + qty, current.unit_price, current.title)
        else:
            remote_line = next((it for it in _remote_items(payload) if it.product_ref == ref), None)
            if remote_line is None:
                raise RemoteError(f"Réponse panier sans ligne pour le produit {ref}")
            items.append(CartItem(ref, qty, remote_line.unit_price, remote_line.title))

        self._items = items
        _warn_on_total_mismatch(payload, items)
        logger.info("cart.add product_ref=%s qty=%s lines=%s", ref, qty, len(items))
        return self.snapshot()

    async def remove(self, product_ref: Any) -> CartSnapshot:
        """Retire la ligne de product_ref; absente => no-op local (pas une erreur)."""
        ref = _clean_ref(product_ref)
        payload = await repository.remove_item(self._session.client, ref)
        items = [it for it in self._items if it.product_ref != ref]
        self._items = items
        _warn_on_total_mismatch(payload, items)
        logger.info("cart.remove product_ref=%s lines=%s", ref, len(items))
        return self.snapshot()

    async def clear(self) -> CartSnapshot:
        await repository.clear_cart(self._session.client)
        self._items = []
        logger.info("cart.clear")
        return self.snapshot()

    def mark_checked_out(self) -> CartSnapshot:
        """Réinitialisation locale après checkout réussi (le backend a déjà consommé le panier)."""
        self._items = []
        return self.snapshot()
