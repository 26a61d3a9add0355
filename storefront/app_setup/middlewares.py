"""
Middlewares transverses du BFF.
- register_basic_middlewares: CORS pour le front navigateur (origines configurables)
"""
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from storefront.config import CORS_ORIGINS

def register_basic_middlewares(app: FastAPI) -> None:
    # allow_credentials est incompatible avec l'origine "*"
    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ORIGINS,
        allow_credentials="*" not in CORS_ORIGINS,
        allow_methods=["*"],
        allow_headers=["*"],
    )
