"""
Gestionnaires d'exceptions du BFF.
- Traduit la taxonomie du coordinateur en réponses JSON {"detail", "type", "code"}
- ValidationError -> 400, NotReadyError -> 404, InvalidStateError -> 409, RemoteError -> 502
- Les vues ne capturent pas ces erreurs: elles remontent telles quelles jusqu'ici
"""
import logging
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from storefront.errors import (
    InvalidStateError,
    NotReadyError,
    RemoteError,
    StorefrontError,
    ValidationError,
)

logger = logging.getLogger(__name__)

_STATUS_BY_ERROR = (
    (ValidationError, 400),
    (NotReadyError, 404),
    (InvalidStateError, 409),
    (RemoteError, 502),
)

def status_for(exc: StorefrontError) -> int:
    for error_type, status_code in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return status_code
    return 500

def register_exception_handlers(app: FastAPI) -> None:
    """
    Enregistre le handler StorefrontError.
    - RemoteError: expose aussi le status amont (upstream_status) pour le debug côté front
    """
    @app.exception_handler(StorefrontError)
    async def storefront_error_handler(request: Request, exc: StorefrontError):
        status_code = status_for(exc)
        content = {"detail": exc.message, "type": type(exc).__name__, "code": exc.code}
        if isinstance(exc, RemoteError):
            content["upstream_status"] = exc.status_code
            logger.warning("bff.remote_error path=%s upstream_status=%s detail=%s", request.url.path, exc.status_code, exc.message)
        return JSONResponse(status_code=status_code, content=content)
