import logging
import socket
from typing import Any, Dict, Optional
from urllib.parse import urlparse

import httpx

from storefront.config import API_BASE_URL, HTTP_TIMEOUT_SECONDS

logger = logging.getLogger(__name__)


async def upstream_info(base_url: Optional[str] = None, transport: Optional[httpx.AsyncBaseTransport] = None) -> Dict[str, Any]:
    """
    Diagnostic de l'API marketplace: résolution DNS puis requête GET sur l'URL de base.
    - connect_ok: une réponse HTTP a été reçue (quel que soit son status)
    - Avec un transport injecté (tests), l'étape DNS est ignorée
    """
    effective_url = base_url or API_BASE_URL
    parsed = urlparse(effective_url) if effective_url else None
    hostname = parsed.hostname if parsed else None
    dns_ok = None
    dns_error = None
    if hostname and transport is None:
        try:
            socket.getaddrinfo(hostname, parsed.port or (443 if parsed.scheme == "https" else 80))
            dns_ok = True
        except OSError as e:
            dns_ok = False
            dns_error = str(e)

    info = {
        "api_url": effective_url,
        "hostname": hostname,
        "dns_ok": dns_ok,
        "dns_error": dns_error,
        "connect_ok": False,
        "status_code": None,
        "error": None,
    }
    try:
        async with httpx.AsyncClient(timeout=HTTP_TIMEOUT_SECONDS, transport=transport) as client:
            resp = await client.get(effective_url)
        info["status_code"] = resp.status_code
        info["connect_ok"] = True
    except httpx.HTTPError as e:
        logger.warning("health.upstream unreachable url=%s error=%s", effective_url, e)
        info["error"] = str(e)
    return info
