"""
TokenQueue - Coordination sequentielle des transactions signees par wallet.

Ce package serialise les approbations de tokens et les operations dependantes
(mint/burn LYNX) pour qu'une seule demande de signature soit en cours a la fois.

Architecture : Hexagonale (Ports et Adaptateurs)
- core/ : Couche domaine (entites, ports, objets valeur, erreurs)
- services/ : Couche application (file de transactions, orchestration)
- adapters/ : Couche infrastructure (CLI, mirror node, wallet simule)
"""

__version__ = "0.1.0"
