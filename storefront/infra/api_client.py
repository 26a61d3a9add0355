"""
Adaptateur HTTP vers l'API marketplace: centralise la construction du client et les appels.
- build_client: httpx.AsyncClient configuré (base_url, Bearer, timeout)
- request_json: exécute un appel, déballe l'enveloppe {data: ...} et convertit tout échec en RemoteError
"""
import logging
from typing import Any, Dict, Optional

import httpx

from storefront.config import API_BASE_URL, HTTP_TIMEOUT_SECONDS
from storefront.errors import RemoteError

logger = logging.getLogger(__name__)

# module storefront.infra.api_client
def build_client(
    token: Optional[str] = None,
    base_url: Optional[str] = None,
    timeout: Optional[float] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> httpx.AsyncClient:
    """
    Client HTTP asynchrone pour un acheteur.
    - token: ajouté en en-tête Authorization: Bearer <token> si fourni
    - transport: injectable (ex: httpx.MockTransport en tests)
    """
    headers = {"Content-Type": "application/json", "Accept": "application/json"}
    if token:
        headers["Authorization"] = f"Bearer {token}"
    return httpx.AsyncClient(
        base_url=(base_url or API_BASE_URL).rstrip("/"),
        headers=headers,
        timeout=timeout if timeout is not None else HTTP_TIMEOUT_SECONDS,
        transport=transport,
    )

def unwrap(body: Any) -> Any:
    """Retourne body["data"] si la réponse est enveloppée, sinon body tel quel."""
    if isinstance(body, dict) and isinstance(body.get("data"), (dict, list)):
        return body["data"]
    return body

def _error_message(resp: httpx.Response) -> str:
    # Essayer d'extraire un message d'erreur utile
    msg = None
    try:
        body = resp.json()
        if isinstance(body, dict):
            msg = body.get("message") or body.get("error") or body.get("detail") or body.get("msg")
    except ValueError:
        msg = resp.text
    return str(msg or resp.reason_phrase or f"status {resp.status_code}")

async def request_json(
    client: httpx.AsyncClient,
    method: str,
    path: str,
    json: Optional[Dict[str, Any]] = None,
) -> Any:
    """
    Appel JSON vers l'API marketplace.
    - Erreur réseau/timeout: RemoteError sans status
    - Réponse non 2xx: RemoteError(status_code, message extrait du corps)
    - Corps vide: {}
    """
    try:
        resp = await client.request(method, path, json=json)
    except httpx.HTTPError as e:
        logger.warning("api_client.request failed method=%s path=%s error=%s", method, path, e)
        raise RemoteError(f"Erreur réseau {method} {path}: {e}") from e

    if not (200 <= resp.status_code < 300):
        message = _error_message(resp)
        logger.warning("api_client.request rejected method=%s path=%s status=%s message=%s", method, path, resp.status_code, message)
        raise RemoteError(message, status_code=resp.status_code)

    if not resp.content:
        return {}
    try:
        return unwrap(resp.json())
    except ValueError as e:
        raise RemoteError(f"Réponse JSON invalide pour {method} {path}", status_code=resp.status_code) from e
