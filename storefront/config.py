# storefront.config
from pathlib import Path
import os
from dotenv import load_dotenv

# Calculer le chemin du projet puis charger .env de manière explicite
BASE_DIR = Path(__file__).resolve().parent.parent
ENV_PATH = BASE_DIR / ".env"
load_dotenv(dotenv_path=ENV_PATH, override=True)

"""
Configuration centrale du client vitrine.

- Charge le fichier .env à la racine du projet (BASE_DIR/.env)
- Expose l'URL de l'API marketplace (panier, commandes, paiements PIX)
- Normalise les paramètres HTTP (timeout), CORS du BFF et rendu des QR codes
"""

def _clean_env(v: str) -> str:
    """
    Nettoie une valeur d'environnement:
    - supprime les espaces et guillemets (simples, doubles) et backticks
    - retourne toujours une chaîne (jamais None)
    """
    return (v or "").strip().strip("'").strip('"').strip("`")

def _int_env(name: str, default: int) -> int:
    try:
        return int(_clean_env(os.getenv(name) or "") or default)
    except ValueError:
        return default

def _float_env(name: str, default: float) -> float:
    try:
        return float(_clean_env(os.getenv(name) or "") or default)
    except ValueError:
        return default

# API marketplace: STOREFRONT_API_URL prioritaire, VITE_API_URL accepté (front historique)
# - Préfixe https:// si le schéma manque, retire le slash final
API_BASE_URL = _clean_env(
    os.getenv("STOREFRONT_API_URL") or os.getenv("VITE_API_URL") or "http://localhost:3000/api/v1"
)
if API_BASE_URL and not API_BASE_URL.startswith("http"):
    API_BASE_URL = "https://" + API_BASE_URL
API_BASE_URL = API_BASE_URL.rstrip("/")

# Timeout (secondes) appliqué à chaque appel distant
HTTP_TIMEOUT_SECONDS = _float_env("HTTP_TIMEOUT_SECONDS", 10.0)

# CORS du BFF (front navigateur)
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]

LOG_LEVEL = _clean_env(os.getenv("LOG_LEVEL") or "info").lower()

# Rendu du QR code PIX (image PNG en data URI)
PIX_QR_BOX_SIZE = _int_env("PIX_QR_BOX_SIZE", 10)
PIX_QR_BORDER = _int_env("PIX_QR_BORDER", 4)
