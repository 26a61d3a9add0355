"""
ASGI entrypoint: expose `app` pour les process managers / déploiements.

- En production, un process manager (ex: gunicorn/uvicorn-workers) importe `storefront.asgi:app`.
- Toute la configuration FastAPI (routes, middlewares, exceptions) est centralisée
  dans storefront.app_setup.factory, ce fichier ne fait qu'exposer l'instance `app`.
"""

from storefront.app_setup.factory import create_app

app = create_app()
