"""
Interfaces ports pour les collaborateurs externes du ledger.

Le wallet (signature humaine) et le service d'association sont hors du
perimetre de TokenQueue : seuls leurs contrats sont definis ici. La
construction des transactions (frais, gas, encodage) appartient aux
implementations.
"""

from abc import ABC, abstractmethod

from tokenqueue.core.value_objects import AssociationResult, TransactionResult


class ITransactionSigner(ABC):
    """
    Wallet capable de signer et executer des transactions.

    Chaque methode correspond a une demande de signature : la file garantit
    qu'une seule est en cours a la fois. Une methode peut lever (rejet par
    l'utilisateur, popup fermee) ou renvoyer un TransactionResult en erreur.
    """

    @abstractmethod
    async def approve_token(
        self,
        token_id: str,
        contract_id: str,
        amount: int,
        token_name: str,
    ) -> TransactionResult:
        """
        Autorise le contrat a depenser `amount` (plus petite unite) du token.
        """
        ...

    @abstractmethod
    async def mint(self, contract_id: str, amount: int, hbar_tinybars: int) -> TransactionResult:
        """
        Mint `amount` (plus petite unite) du produit en payant `hbar_tinybars`.
        """
        ...

    @abstractmethod
    async def burn(self, contract_id: str, amount: int) -> TransactionResult:
        """Burn `amount` (plus petite unite) du produit."""
        ...

    @abstractmethod
    async def check_supply_key(self, contract_id: str) -> bool:
        """Verifie que le contrat detient la supply key du produit."""
        ...


class IAssociationService(ABC):
    """Consultation et provisionnement des associations token/compte."""

    @abstractmethod
    async def is_associated(self, token_id: str, account_id: str) -> bool:
        """Indique si le compte est associe au token."""
        ...

    @abstractmethod
    async def associate(self, token_id: str, account_id: str) -> AssociationResult:
        """Associe le token au compte, ou explique pourquoi c'est impossible."""
        ...

    async def close(self) -> None:
        """Libere les ressources du service (rien a liberer par defaut)."""
