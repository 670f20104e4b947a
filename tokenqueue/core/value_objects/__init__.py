"""
Objets valeur immutables du domaine.

Exports :
- TransactionResult, TransactionStatus : Reponse du wallet
- Ok, Err, Outcome : Issue discriminee d'une action differee
- QueueStats : Compteurs agreges de la file
- CompositeOperationResult : Identifiants d'un workflow composite
- TokenSymbol, TokenConfig, TokenRequirement : Configuration des tokens
- AssociationResult : Resultat d'association token/compte
"""

from tokenqueue.core.value_objects.result import (
    Err,
    Ok,
    Outcome,
    TransactionResult,
    TransactionStatus,
)
from tokenqueue.core.value_objects.stats import CompositeOperationResult, QueueStats
from tokenqueue.core.value_objects.token import (
    AssociationResult,
    TokenConfig,
    TokenRequirement,
    TokenSymbol,
)

__all__ = [
    "Err",
    "Ok",
    "Outcome",
    "TransactionResult",
    "TransactionStatus",
    "QueueStats",
    "CompositeOperationResult",
    "AssociationResult",
    "TokenConfig",
    "TokenRequirement",
    "TokenSymbol",
]
