"""
Relance avec backoff exponentiel pour les appels au mirror node.

Les mirror nodes publics limitent le debit (429) et renvoient parfois des 5xx
transitoires : ces deux cas sont relances avec un delai croissant et du jitter.
Les autres erreurs HTTP remontent immediatement.

Usage:
    response = await request_with_retry(client, "GET", "/api/v1/tokens/0.0.5365")
"""

from typing import Optional

import httpx
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_random_exponential,
)


class MirrorNodeError(Exception):
    """Reponse transitoire du mirror node, candidate a la relance."""


class RateLimitError(MirrorNodeError):
    """
    Le mirror node a repondu 429 Too Many Requests.

    Attributes:
        retry_after: Secondes a attendre (header Retry-After), ou None
    """

    def __init__(self, retry_after: Optional[int] = None) -> None:
        self.retry_after = retry_after
        super().__init__(f"Rate limited. Retry after: {retry_after}s")


class MirrorNodeUnavailableError(MirrorNodeError):
    """Le mirror node a repondu avec une erreur serveur (5xx)."""

    def __init__(self, status_code: int) -> None:
        self.status_code = status_code
        super().__init__(f"Mirror node unavailable (HTTP {status_code})")


def with_retry(max_attempts: int = 4, max_wait: int = 30):
    """
    Decorateur de relance sur MirrorNodeError.

    Args:
        max_attempts: Nombre maximum de tentatives
        max_wait: Delai maximum entre deux tentatives, en secondes
    """
    return retry(
        retry=retry_if_exception_type(MirrorNodeError),
        wait=wait_random_exponential(multiplier=1, min=1, max=max_wait),
        stop=stop_after_attempt(max_attempts),
        reraise=True,
    )


async def request_with_retry(
    client: httpx.AsyncClient,
    method: str,
    url: str,
    max_attempts: int = 4,
    **kwargs,
) -> httpx.Response:
    """
    Execute une requete HTTP en relancant les 429 et les 5xx.

    Raises:
        RateLimitError: 429 persistant apres max_attempts
        MirrorNodeUnavailableError: 5xx persistant apres max_attempts
        httpx.HTTPStatusError: Autres erreurs HTTP (4xx), sans relance
    """

    @with_retry(max_attempts=max_attempts)
    async def _do_request() -> httpx.Response:
        response = await client.request(method, url, **kwargs)
        if response.status_code == 429:
            retry_after_header = response.headers.get("Retry-After")
            retry_after = int(retry_after_header) if retry_after_header else None
            raise RateLimitError(retry_after)
        if response.status_code >= 500:
            raise MirrorNodeUnavailableError(response.status_code)
        response.raise_for_status()
        return response

    return await _do_request()
