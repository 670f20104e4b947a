"""
Instantanes renvoyes aux appelants qui suivent la progression par polling.
"""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class QueueStats:
    """
    Compteurs agreges de la file.

    pending_transactions compte les operations pending ET processing, de sorte
    que total == completed + failed + pending a tout instant.
    """

    total_transactions: int = 0
    completed_transactions: int = 0
    failed_transactions: int = 0
    pending_transactions: int = 0

    @property
    def is_idle(self) -> bool:
        """Plus aucune operation en attente ni en cours."""
        return self.pending_transactions == 0


@dataclass(frozen=True)
class CompositeOperationResult:
    """
    Identifiants mis en file par un workflow composite.

    Attributs :
        approval_ids : Un identifiant par approbation, dans l'ordre de mise en file
        final_operation_id : Identifiant de l'operation finale (mint/burn)
    """

    approval_ids: list[str] = field(default_factory=list)
    final_operation_id: str = ""

    @property
    def all_ids(self) -> list[str]:
        return [*self.approval_ids, self.final_operation_id]
