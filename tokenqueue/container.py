"""
Container d'injection de dependances via dependency-injector.

Assemble la configuration, la table des tokens, le wallet, le service
d'association, la file de transactions et l'orchestrateur.
"""

from dependency_injector import containers, providers

from .adapters.mirror_node import MirrorNodeClient
from .adapters.simulated import SimulatedAssociationService, SimulatedSigner
from .config import Settings
from .core.ports import IAssociationService
from .services.token_queue import TokenQueueService
from .services.token_registry import TokenRegistry
from .services.transaction_queue import TransactionQueue


def build_association_service(settings: Settings) -> IAssociationService:
    """Choisit l'implementation d'IAssociationService selon la configuration."""
    if settings.association_source == "mirror":
        return MirrorNodeClient(base_url=settings.resolved_mirror_node_url)
    return SimulatedAssociationService()


class Container(containers.DeclarativeContainer):
    """Container DI de l'application.

    Utilisation :
        container = Container()
        service = container.token_queue_service()
        service.update_connection(container.signer(), "0.0.1234")
    """

    # Configuration - singleton charge une seule fois
    config = providers.Singleton(Settings)

    # Table des tokens - validee a la premiere resolution
    token_registry = providers.Singleton(TokenRegistry.from_settings, settings=config)

    # Adapters - implementations concretes des ports
    # Aucun wallet reel n'est fourni : la CLI signe avec le wallet simule
    signer = providers.Singleton(SimulatedSigner)
    association_service = providers.Singleton(build_association_service, settings=config)

    # File unique partagee par tous les workflows de la session
    transaction_queue = providers.Singleton(
        TransactionQueue,
        default_delay_ms=config.provided.default_delay_ms,
        default_max_retries=config.provided.default_max_retries,
    )

    token_queue_service = providers.Singleton(
        TokenQueueService,
        queue=transaction_queue,
        registry=token_registry,
        association_service=association_service,
        preassociated_accounts=config.provided.preassociated_accounts,
    )
