"""
Couche application : file de transactions et orchestration des workflows.

Reexporte les symboles principaux (from tokenqueue.services import ...).
"""

from .token_queue import CompositeKind, CompositeOperationSpec, TokenQueueService
from .token_registry import TokenRegistry
from .transaction_queue import TransactionQueue

__all__ = [
    "CompositeKind",
    "CompositeOperationSpec",
    "TokenQueueService",
    "TokenRegistry",
    "TransactionQueue",
]
