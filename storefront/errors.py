"""
Taxonomie des erreurs du coordinateur panier → commande → paiement.
- ValidationError: entrée locale invalide (ex: quantité < 1)
- InvalidStateError: opération interdite dans l'état courant (panier vide, paiement déjà payé, doublon en vol)
- NotReadyError: lecture demandée avant l'écriture préalable (aucun paiement créé, session fermée)
- RemoteError: échec transport ou backend, porte le status HTTP et le message amont
"""
from typing import Optional


class StorefrontError(Exception):
    def __init__(self, message: str, code: str = "error"):
        super().__init__(message)
        self.message = message
        self.code = code


class ValidationError(StorefrontError):
    def __init__(self, message: str, code: str = "invalid"):
        super().__init__(message, code)


class InvalidStateError(StorefrontError):
    def __init__(self, message: str, code: str = "invalid_state"):
        super().__init__(message, code)


class NotReadyError(StorefrontError):
    def __init__(self, message: str, code: str = "not_ready"):
        super().__init__(message, code)


class RemoteError(StorefrontError):
    def __init__(self, message: str, status_code: Optional[int] = None, code: str = "remote_error"):
        super().__init__(message, code)
        self.status_code = status_code

    def __str__(self) -> str:
        if self.status_code is None:
            return self.message
        return f"{self.message} (status={self.status_code})"
