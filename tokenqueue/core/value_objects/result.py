"""
Resultats echanges avec le wallet.

TransactionResult est la reponse du wallet a une demande signee.
Ok / Err forment le type discrimine utilise par la file pour brancher
sur l'issue d'une action differee sans inspection au cas par cas.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Union


class TransactionStatus(str, Enum):
    """Statut renvoye par le wallet."""

    SUCCESS = "success"
    ERROR = "error"


@dataclass(frozen=True)
class TransactionResult:
    """
    Reponse du wallet apres signature et execution.

    Attributs :
        tx_id : Identifiant de transaction sur le ledger
        status : success ou error
        error : Message d'erreur quand status vaut error
    """

    tx_id: str
    status: TransactionStatus = TransactionStatus.SUCCESS
    error: Optional[str] = None

    @property
    def is_success(self) -> bool:
        return self.status == TransactionStatus.SUCCESS


@dataclass(frozen=True)
class Ok:
    """Issue reussie d'une action differee."""

    value: Any


@dataclass(frozen=True)
class Err:
    """Issue en echec d'une action differee."""

    error: Exception


Outcome = Union[Ok, Err]
