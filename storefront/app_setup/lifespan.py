"""
Lifespan FastAPI: initialisation/arrêt des ressources partagées.
- Crée le registre des sessions acheteur (app.state.sessions) si absent
- À l'arrêt, ferme tous les clients HTTP encore ouverts
"""
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI

from storefront.config import API_BASE_URL
from storefront.registry import SessionRegistry

@asynccontextmanager
async def lifespan(app: FastAPI):
    logger = logging.getLogger("uvicorn.error")
    if getattr(app.state, "sessions", None) is None:
        app.state.sessions = SessionRegistry()
    logger.info(f"Storefront BFF ready, marketplace API: {API_BASE_URL}")
    try:
        yield
    finally:
        await app.state.sessions.close_all()
        logger.info("Storefront BFF sessions closed")
