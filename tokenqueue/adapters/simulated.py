"""
Wallet et service d'association simules, en memoire.

Permettent de derouler un workflow complet sans wallet reel : la CLI les
utilise en mode simulation et les tests s'en servent pour scripter des rejets
de signature (utilisateur qui ferme la popup, solde insuffisant...).

Usage:
    signer = SimulatedSigner(account_id="0.0.1234")
    signer.fail("approve:CLXY", message="insufficient balance")
    result = await signer.approve_token("0.0.5365", "0.0.5758264", 100, "CLXY")
    # -> leve SigningRejectedError("insufficient balance")
"""

import asyncio
from dataclasses import dataclass
from typing import Any, Iterable, Optional

from loguru import logger

from tokenqueue.core.ports import IAssociationService, ITransactionSigner
from tokenqueue.core.value_objects import AssociationResult, TransactionResult, TransactionStatus


class SigningRejectedError(Exception):
    """Le wallet simule a refuse de signer."""


@dataclass
class ScriptedFailure:
    """
    Echec programme pour une action du wallet.

    Attributs :
        remaining : Nombre d'echecs restants (None = echoue toujours)
        message : Message de l'erreur
        as_result : Renvoie un TransactionResult en erreur au lieu de lever
    """

    remaining: Optional[int]
    message: str
    as_result: bool = False


class SimulatedSigner(ITransactionSigner):
    """
    Wallet en memoire qui signe tout, sauf les echecs programmes.

    Les actions sont nommees "approve:<TOKEN>", "mint" et "burn".

    Attributes:
        calls: Historique (action, parametres) de chaque demande de signature
    """

    def __init__(
        self,
        account_id: str = "0.0.1001",
        latency_seconds: float = 0.0,
        has_supply_key: bool = True,
    ) -> None:
        self._account_id = account_id
        self._latency_seconds = latency_seconds
        self._has_supply_key = has_supply_key
        self._failures: dict[str, ScriptedFailure] = {}
        self._counter = 0
        self.calls: list[tuple[str, dict[str, Any]]] = []

    def fail(
        self,
        action: str,
        times: Optional[int] = None,
        message: str = "User rejected the transaction",
        as_result: bool = False,
    ) -> None:
        """Programme `times` echecs (tous si None) pour une action."""
        self._failures[action] = ScriptedFailure(remaining=times, message=message, as_result=as_result)

    def call_count(self, action: str) -> int:
        return sum(1 for name, _ in self.calls if name == action)

    async def approve_token(
        self,
        token_id: str,
        contract_id: str,
        amount: int,
        token_name: str,
    ) -> TransactionResult:
        return await self._sign(
            f"approve:{token_name}",
            {"token_id": token_id, "contract_id": contract_id, "amount": amount},
        )

    async def mint(self, contract_id: str, amount: int, hbar_tinybars: int) -> TransactionResult:
        return await self._sign(
            "mint",
            {"contract_id": contract_id, "amount": amount, "hbar_tinybars": hbar_tinybars},
        )

    async def burn(self, contract_id: str, amount: int) -> TransactionResult:
        return await self._sign("burn", {"contract_id": contract_id, "amount": amount})

    async def check_supply_key(self, contract_id: str) -> bool:
        return self._has_supply_key

    async def _sign(self, action: str, params: dict[str, Any]) -> TransactionResult:
        self.calls.append((action, params))
        if self._latency_seconds:
            await asyncio.sleep(self._latency_seconds)

        failure = self._failures.get(action)
        if failure is not None and failure.remaining != 0:
            if failure.remaining is not None:
                failure.remaining -= 1
            logger.debug(f"Signature simulee refusee pour {action}: {failure.message}")
            if failure.as_result:
                return TransactionResult(tx_id="", status=TransactionStatus.ERROR, error=failure.message)
            raise SigningRejectedError(failure.message)

        self._counter += 1
        tx_id = f"{self._account_id}@{self._counter:010d}"
        logger.debug(f"Signature simulee {action}: {tx_id}")
        return TransactionResult(tx_id=tx_id)


class SimulatedAssociationService(IAssociationService):
    """
    Associations en memoire.

    Avec auto_associate, associate() reussit toujours ; sinon il echoue comme
    le mirror node quand le titulaire du compte doit signer lui-meme.
    """

    def __init__(
        self,
        associated: Iterable[tuple[str, str]] = (),
        auto_associate: bool = True,
    ) -> None:
        self._associated: set[tuple[str, str]] = set(associated)
        self._auto_associate = auto_associate
        self.associate_calls: list[tuple[str, str]] = []

    async def is_associated(self, token_id: str, account_id: str) -> bool:
        return (token_id, account_id) in self._associated

    async def associate(self, token_id: str, account_id: str) -> AssociationResult:
        self.associate_calls.append((token_id, account_id))
        if not self._auto_associate:
            return AssociationResult(
                success=False,
                message="Token association must be performed by the account owner directly.",
            )
        self._associated.add((token_id, account_id))
        return AssociationResult(
            success=True,
            message="Token associated",
            transaction_id=f"{account_id}@assoc-{len(self.associate_calls)}",
        )
