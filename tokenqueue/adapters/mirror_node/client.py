"""
Client mirror node Hedera pour les associations token/compte.

Implemente IAssociationService en lecture seule : le mirror node sait dire si
un compte est associe a un token, mais une association doit etre signee par le
titulaire du compte. associate() ne reussit donc que si l'association existe deja.

Usage:
    client = MirrorNodeClient(base_url="https://testnet.mirrornode.hedera.com")
    associated = await client.is_associated("0.0.5365", "0.0.1234")
    await client.close()
"""

from typing import Optional

import httpx
from loguru import logger

from tokenqueue.adapters.mirror_node.retry import request_with_retry
from tokenqueue.core.ports import IAssociationService
from tokenqueue.core.value_objects import AssociationResult


class MirrorNodeClient(IAssociationService):
    """
    Client REST du mirror node.

    Attributes:
        ACCOUNT_TOKENS_PATH: Endpoint listant les tokens associes a un compte
    """

    ACCOUNT_TOKENS_PATH = "/api/v1/accounts/{account_id}/tokens"

    def __init__(self, base_url: str, timeout: float = 15.0) -> None:
        """
        Initialise le client.

        Args:
            base_url: URL du mirror node (testnet ou mainnet)
            timeout: Timeout HTTP en secondes
        """
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._client: Optional[httpx.AsyncClient] = None

    def _get_client(self) -> httpx.AsyncClient:
        """Retourne le client HTTP, le cree si necessaire (lazy init)."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self._base_url,
                headers={"Accept": "application/json"},
                timeout=self._timeout,
            )
        return self._client

    async def is_associated(self, token_id: str, account_id: str) -> bool:
        """
        Indique si le compte est associe au token.

        Un compte inconnu du mirror node (404) n'est associe a rien.
        """
        if not token_id or not account_id:
            raise ValueError("token_id and account_id are required")

        client = self._get_client()
        try:
            response = await request_with_retry(
                client,
                "GET",
                self.ACCOUNT_TOKENS_PATH.format(account_id=account_id),
                params={"token.id": token_id},
            )
        except httpx.HTTPStatusError as e:
            if e.response.status_code == 404:
                logger.debug(f"Compte {account_id} inconnu du mirror node")
                return False
            raise

        tokens = response.json().get("tokens", [])
        return any(entry.get("token_id") == token_id for entry in tokens)

    async def associate(self, token_id: str, account_id: str) -> AssociationResult:
        if await self.is_associated(token_id, account_id):
            return AssociationResult(success=True, message="Token is already associated")
        return AssociationResult(
            success=False,
            message=(
                "Token association must be performed by the account owner directly. "
                "Please associate the token using your wallet."
            ),
        )

    async def close(self) -> None:
        """Ferme le client HTTP."""
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
        self._client = None
