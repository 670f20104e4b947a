"""
Taxonomie des erreurs de TokenQueue.

La file relance toute erreur levee par une action differee, dans la limite
de max_retries. Seule la verification de configuration qu'elle fait
elle-meme avant chaque tentative echoue sans relance :
- ConfigurationError : wallet non connecte, compte absent -> echec immediat
- DependencyNotSatisfiedError : approbation prealable non terminee -> relance
- TransactionError : le wallet a renvoye un statut "error" -> relance

ProvisioningError n'est jamais levee dans la file : elle remonte directement
a l'appelant de queue_composite_operation.
"""

from typing import Optional


class TokenQueueError(Exception):
    """Erreur de base de TokenQueue."""


class ConfigurationError(TokenQueueError):
    """Le wallet ou l'identifiant de compte n'est pas configure."""


class DuplicateOperationError(TokenQueueError, ValueError):
    """Une operation avec le meme identifiant est deja suivie par la file."""

    def __init__(self, operation_id: str) -> None:
        self.operation_id = operation_id
        super().__init__(f"Operation '{operation_id}' is already queued")


class TokenConfigurationError(TokenQueueError, ValueError):
    """La table de configuration des tokens est invalide."""


class TransactionError(TokenQueueError):
    """
    Le wallet a execute la demande mais a renvoye un statut d'erreur.

    Attributes:
        tx_id: Identifiant de transaction renvoye (souvent vide)
    """

    def __init__(self, message: str, tx_id: str = "") -> None:
        self.tx_id = tx_id
        super().__init__(message)


class DependencyNotSatisfiedError(TokenQueueError):
    """
    Une operation prealable n'a pas atteint le statut completed.

    Levee depuis l'action differee de l'operation finale d'un workflow
    composite. Le message nomme l'operation prealable et son statut reel.

    Attributes:
        operation_id: Identifiant de l'operation prealable
        status: Statut observe ("failed", "pending"...) ou None si introuvable
        symbol: Symbole du token concerne
    """

    def __init__(
        self,
        operation_id: str,
        status: Optional[str],
        symbol: Optional[str] = None,
    ) -> None:
        self.operation_id = operation_id
        self.status = status
        self.symbol = symbol
        label = f"{symbol} approval '{operation_id}'" if symbol else f"Operation '{operation_id}'"
        if status is None:
            message = f"{label} not found"
        else:
            message = f"{label} not completed - status: {status}"
        super().__init__(message)


class ProvisioningError(TokenQueueError):
    """Echec d'une verification ou d'une association avant mise en file."""