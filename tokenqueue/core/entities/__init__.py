"""
Entites du domaine.

Exports:
- OperationRequest: Descripteur passe a la file
- QueuedOperation: Operation suivie et mutee par la file
- OperationSnapshot: Vue immutable renvoyee aux appelants
- OperationStatus: pending, processing, completed, failed
"""

from tokenqueue.core.entities.operation import (
    OperationRequest,
    OperationSnapshot,
    OperationStatus,
    QueuedOperation,
)

__all__ = [
    "OperationRequest",
    "OperationSnapshot",
    "OperationStatus",
    "QueuedOperation",
]
