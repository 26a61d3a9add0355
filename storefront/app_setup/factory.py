"""
Factory d'application recommandée pour les entrypoints (ex: storefront.asgi).
Ordonne les étapes d'initialisation de manière lisible et testable.
"""
from typing import Optional

from fastapi import FastAPI
from .lifespan import lifespan
from .middlewares import register_basic_middlewares
from .exceptions import register_exception_handlers
from .routers import register_routers
from storefront.registry import SessionRegistry

def create_app(registry: Optional[SessionRegistry] = None) -> FastAPI:
    """
    Construit l'app FastAPI avec le lifespan et enregistre:
      - middlewares de base (CORS)
      - gestionnaires d'exceptions du coordinateur
      - tous les routers (API v1, health)
    registry: injectable (tests: transport httpx simulé); sinon créé au démarrage.
    """
    app = FastAPI(title="Storefront checkout BFF", lifespan=lifespan)
    if registry is not None:
        app.state.sessions = registry
    register_basic_middlewares(app)
    register_exception_handlers(app)
    register_routers(app)
    return app
