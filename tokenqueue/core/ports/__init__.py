"""
Ports (interfaces abstraites) definissant les contrats pour les adaptateurs.

Les ports sont les frontieres de l'architecture hexagonale. Ils definissent
ce dont le domaine a besoin du monde exterieur sans specifier
comment ces besoins sont satisfaits.

- ITransactionSigner : Wallet qui signe et execute les transactions
- IAssociationService : Consultation et provisionnement des associations
"""

from tokenqueue.core.ports.wallet import IAssociationService, ITransactionSigner

__all__ = [
    "IAssociationService",
    "ITransactionSigner",
]
