"""
Fixtures pytest partagees pour les tests TokenQueue.

Ce module contient les fixtures communes utilisees dans les tests:
- Wallet et service d'association simules
- Table des tokens avec des delais nuls pour des tests rapides
- File de transactions et orchestrateur pre-connectes
"""

from decimal import Decimal

import pytest

from tokenqueue.adapters.simulated import SimulatedAssociationService, SimulatedSigner
from tokenqueue.config import Settings
from tokenqueue.core.value_objects import TokenConfig, TokenSymbol
from tokenqueue.services.token_queue import TokenQueueService
from tokenqueue.services.token_registry import TokenRegistry
from tokenqueue.services.transaction_queue import TransactionQueue

ACCOUNT_ID = "0.0.1234"
CONTRACT_ID = "0.0.5758264"


def make_registry(
    delay_ms: int = 0,
    sauce_retries: int = 2,
    clxy_retries: int = 2,
    lynx_retries: int = 1,
) -> TokenRegistry:
    """Table des tokens par defaut, avec des delais configurables."""
    return TokenRegistry(
        tokens=[
            TokenConfig(
                symbol=TokenSymbol.SAUCE,
                token_id="0.0.1183558",
                contract_id=CONTRACT_ID,
                decimals=6,
                ratio=Decimal(100),
                delay_ms=delay_ms,
                max_retries=sauce_retries,
            ),
            TokenConfig(
                symbol=TokenSymbol.CLXY,
                token_id="0.0.5365",
                contract_id=CONTRACT_ID,
                decimals=6,
                ratio=Decimal(50),
                delay_ms=delay_ms,
                max_retries=clxy_retries,
            ),
            TokenConfig(
                symbol=TokenSymbol.LYNX,
                token_id="0.0.6200902",
                contract_id=CONTRACT_ID,
                decimals=8,
                delay_ms=delay_ms,
                max_retries=lynx_retries,
            ),
        ],
        hbar_ratio_tinybar=10,
    )


@pytest.fixture
def test_settings() -> Settings:
    """Settings isolees de l'environnement et du fichier .env."""
    return Settings(
        _env_file=None,
        account_id=ACCOUNT_ID,
        default_delay_ms=0,
        poll_interval_seconds=0.01,
        log_file="logs/test.log",
    )


@pytest.fixture
def signer() -> SimulatedSigner:
    """Wallet simule qui signe tout par defaut."""
    return SimulatedSigner(account_id=ACCOUNT_ID)


@pytest.fixture
def association_service() -> SimulatedAssociationService:
    """Service d'association qui associe a la demande."""
    return SimulatedAssociationService()


@pytest.fixture
def registry_factory():
    """Fabrique de tables de tokens (delais et relances parametrables)."""
    return make_registry


@pytest.fixture
def registry() -> TokenRegistry:
    return make_registry()


@pytest.fixture
def queue(signer: SimulatedSigner) -> TransactionQueue:
    """File connectee, sans pause entre operations."""
    return TransactionQueue(signer=signer, account_id=ACCOUNT_ID, default_delay_ms=0)


@pytest.fixture
def service(
    queue: TransactionQueue,
    registry: TokenRegistry,
    association_service: SimulatedAssociationService,
    signer: SimulatedSigner,
) -> TokenQueueService:
    """Orchestrateur connecte au wallet simule."""
    return TokenQueueService(
        queue=queue,
        registry=registry,
        association_service=association_service,
        signer=signer,
        account_id=ACCOUNT_ID,
    )
