"""
Utilitaires partages pour les commandes CLI de TokenQueue.

Ce module fournit :
- console : instance Rich Console partagee
- suppress_loguru : context manager pour couper loguru pendant l'affichage Rich
- with_container : decorateur injectant un container en premier argument
- follow_queue : suivi par polling de la file avec une barre de progression
- render_operations_table : tableau recapitulatif des operations
"""

import asyncio
from contextlib import contextmanager
from functools import wraps

from loguru import logger as loguru_logger
from rich.console import Console
from rich.progress import BarColumn, Progress, SpinnerColumn, TaskProgressColumn, TextColumn
from rich.table import Table

from tokenqueue.container import Container
from tokenqueue.core.entities import OperationSnapshot, OperationStatus
from tokenqueue.services.token_queue import TokenQueueService

console = Console()

STATUS_STYLES = {
    OperationStatus.PENDING: "yellow",
    OperationStatus.PROCESSING: "cyan",
    OperationStatus.COMPLETED: "green",
    OperationStatus.FAILED: "red",
}


@contextmanager
def suppress_loguru():
    """
    Context manager pour desactiver les logs loguru pendant l'affichage Rich.

    Usage:
        with suppress_loguru():
            console.print(...)
    """
    loguru_logger.disable("tokenqueue")
    try:
        yield
    finally:
        loguru_logger.enable("tokenqueue")


def with_container():
    """
    Decorateur qui injecte un container en premier argument.

    Usage:
        @with_container()
        async def my_command(container, ...):
            service = container.token_queue_service()
    """
    def decorator(func):
        @wraps(func)
        async def wrapper(*args, **kwargs):
            container = Container()
            return await func(container, *args, **kwargs)
        return wrapper
    return decorator


async def follow_queue(service: TokenQueueService, poll_interval: float) -> None:
    """
    Interroge les statistiques de la file jusqu'a l'arret du worker.

    Args:
        service: Orchestrateur dont la file est suivie
        poll_interval: Intervalle de polling en secondes
    """
    with suppress_loguru():
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            TaskProgressColumn(),
            console=console,
            transient=True,
        ) as progress:
            task = progress.add_task("[cyan]Signature des transactions...", total=None)
            while True:
                stats = service.get_queue_stats()
                progress.update(
                    task,
                    total=stats.total_transactions,
                    completed=stats.completed_transactions + stats.failed_transactions,
                )
                if not service.is_processing():
                    break
                await asyncio.sleep(poll_interval)

    # Remonte une eventuelle erreur inattendue du worker
    await service.wait_for_completion()


def render_operations_table(operations: list[OperationSnapshot]) -> Table:
    """Tableau Rich des operations suivies."""
    table = Table(title="Operations")
    table.add_column("ID")
    table.add_column("Operation")
    table.add_column("Statut")
    table.add_column("Tentatives", justify="right")
    table.add_column("Resultat / Erreur")

    for op in operations:
        style = STATUS_STYLES[op.status]
        if op.error is not None:
            detail = f"[red]{op.error}[/red]"
        elif op.result is not None:
            detail = getattr(op.result, "tx_id", str(op.result))
        else:
            detail = ""
        table.add_row(
            op.id,
            op.name,
            f"[{style}]{op.status.value}[/{style}]",
            f"{op.attempts}/{op.max_retries + 1}",
            detail,
        )
    return table
