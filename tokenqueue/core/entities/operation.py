"""
Entites operation en file.

Une operation est une unite de travail signee par le wallet. La file est la
seule a muter une QueuedOperation ; les appelants n'en voient que des
OperationSnapshot immutables.
"""

import asyncio
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Awaitable, Callable, Optional

Execute = Callable[[], Awaitable[Any]]
SuccessCallback = Callable[[Any], None]
ErrorCallback = Callable[[Exception], None]


class OperationStatus(str, Enum):
    """Statut d'une operation dans la file."""

    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (OperationStatus.COMPLETED, OperationStatus.FAILED)


@dataclass
class OperationRequest:
    """
    Descripteur fourni a TransactionQueue.enqueue.

    Attributs :
        id : Identifiant unique dans la session, choisi par l'appelant
        name : Libelle lisible (affichage et diagnostic)
        execute : Action differee sans argument, resout un resultat ou leve
        max_retries : Relances apres le premier echec (defaut de la file si None)
        delay_ms : Pause apres l'operation (defaut de la file si None)
        on_success : Appele une fois avec le resultat au passage a completed
        on_error : Appele une fois avec l'erreur au passage a failed
    """

    id: str
    name: str
    execute: Execute
    max_retries: Optional[int] = None
    delay_ms: Optional[int] = None
    on_success: Optional[SuccessCallback] = None
    on_error: Optional[ErrorCallback] = None


@dataclass
class QueuedOperation:
    """
    Operation suivie par la file, avec son etat courant.

    Invariants :
        - attempts est egal au nombre d'appels a execute
        - une fois completed ou failed, status/result/error/attempts ne changent plus
    """

    id: str
    name: str
    execute: Execute
    max_retries: int
    delay_ms: int
    sequence: int
    on_success: Optional[SuccessCallback] = None
    on_error: Optional[ErrorCallback] = None
    status: OperationStatus = OperationStatus.PENDING
    attempts: int = 0
    result: Any = None
    error: Optional[Exception] = None
    enqueued_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    done: asyncio.Event = field(default_factory=asyncio.Event, repr=False)

    def snapshot(self) -> "OperationSnapshot":
        """Copie immutable de l'etat courant."""
        return OperationSnapshot(
            id=self.id,
            name=self.name,
            status=self.status,
            attempts=self.attempts,
            max_retries=self.max_retries,
            delay_ms=self.delay_ms,
            result=self.result,
            error=self.error,
            enqueued_at=self.enqueued_at,
        )


@dataclass(frozen=True)
class OperationSnapshot:
    """Vue en lecture seule d'une operation."""

    id: str
    name: str
    status: OperationStatus
    attempts: int
    max_retries: int
    delay_ms: int
    result: Any = None
    error: Optional[Exception] = None
    enqueued_at: Optional[datetime] = None

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal

    @property
    def error_message(self) -> Optional[str]:
        """Message lisible nommant l'operation en echec."""
        if self.error is None:
            return None
        return f"{self.name}: {self.error}"
