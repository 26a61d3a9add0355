"""
Module 'payments' (feature-first): point d'entrée public.
Réunit le modèle PIX, le client distant, la session de paiement et la réconciliation de statut.
"""

from .models import Payment, PaymentStatus, PixArtifact, build_confirmation_event
from .repository import create_pix, fetch_status, post_webhook
from .service import PaymentSessionManager
from .reconciler import StatusReconciler

__all__ = [
    # models
    "Payment",
    "PaymentStatus",
    "PixArtifact",
    "build_confirmation_event",
    # repository
    "create_pix",
    "fetch_status",
    "post_webhook",
    # services
    "PaymentSessionManager",
    "StatusReconciler",
]
