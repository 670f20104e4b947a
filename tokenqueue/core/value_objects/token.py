"""
Configuration des tokens et resultats d'association.

TokenSymbol enumere les tokens connus ; l'ordre de declaration fixe l'ordre
dans lequel les approbations d'un workflow composite sont mises en file.
"""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Optional


class TokenSymbol(str, Enum):
    """Tokens geres par l'application."""

    SAUCE = "SAUCE"
    CLXY = "CLXY"
    LYNX = "LYNX"


@dataclass(frozen=True)
class TokenConfig:
    """
    Parametres d'un token.

    Attributs :
        symbol : Symbole du token
        token_id : Identifiant Hedera (0.0.X)
        contract_id : Contrat autorise a depenser le token
        decimals : Precision (nombre de decimales de la plus petite unite)
        ratio : Unites requises par unite de produit (0 pour le produit lui-meme)
        delay_ms : Pause apres chaque operation sur ce token
        max_retries : Relances autorisees apres le premier echec
    """

    symbol: TokenSymbol
    token_id: str
    contract_id: str
    decimals: int
    ratio: Decimal = Decimal(0)
    delay_ms: int = 500
    max_retries: int = 2

    @property
    def is_component(self) -> bool:
        """Le token entre dans la composition du produit."""
        return self.ratio > 0


@dataclass(frozen=True)
class TokenRequirement:
    """Montant a approuver pour un token, en plus petite unite."""

    symbol: TokenSymbol
    amount: int


@dataclass(frozen=True)
class AssociationResult:
    """
    Resultat d'une tentative d'association token/compte.

    Attributs :
        success : Le token est associe a l'issue de l'appel
        message : Explication lisible
        transaction_id : Transaction d'association eventuelle
    """

    success: bool
    message: str = ""
    transaction_id: Optional[str] = None
