"""
File sequentielle des transactions signees par le wallet.

TransactionQueue garantit qu'une seule demande de signature est en cours a la
fois : un worker asyncio unique traite les operations dans l'ordre d'arrivee,
les relance avec un backoff exponentiel et ne passe a la suivante qu'une fois
la precedente terminee (ou renvoyee en attente pour relance).

Algorithme du worker:
1. Selectionner la premiere operation pending (ordre de mise en file)
2. La passer en processing
3. Verifier que le wallet et le compte sont configures (sinon echec definitif)
4. Incrementer attempts et appeler execute()
5. Succes -> completed, on_success(result)
6. Echec -> pending avec delay_ms x 1.5 tant que attempts <= max_retries,
   sinon failed et on_error(error)
7. Attendre delay_ms avant de reprendre la selection

Une operation relancee garde sa position : elle repasse donc avant toutes les
operations mises en file apres elle.

Usage:
    queue = TransactionQueue(signer=wallet, account_id="0.0.1234")
    op_id = queue.enqueue(OperationRequest(id="a1", name="Approve", execute=approve))
    await queue.wait_for_completion()
    print(queue.get_operation(op_id).status)
"""

import asyncio
import math
from typing import Any, Callable, Optional

from loguru import logger

from tokenqueue.core.entities import (
    OperationRequest,
    OperationSnapshot,
    OperationStatus,
    QueuedOperation,
)
from tokenqueue.core.errors import ConfigurationError, DuplicateOperationError
from tokenqueue.core.value_objects import Err, Ok, Outcome, QueueStats

OperationHook = Callable[[OperationSnapshot], None]
FailureHook = Callable[[OperationSnapshot, Exception], None]


class TransactionQueue:
    """
    File FIFO a worker unique avec relance et backoff.

    La file ne connait rien des tokens : elle execute des actions differees
    fournies par l'appelant et suit leur cycle de vie.

    Attributes:
        DEFAULT_DELAY_MS: Pause par defaut apres chaque operation
        DEFAULT_MAX_RETRIES: Relances par defaut apres le premier echec
        BACKOFF_FACTOR: Multiplicateur applique a delay_ms a chaque relance
    """

    DEFAULT_DELAY_MS: int = 500
    DEFAULT_MAX_RETRIES: int = 2
    BACKOFF_FACTOR: float = 1.5

    def __init__(
        self,
        signer: Optional[Any] = None,
        account_id: Optional[str] = None,
        default_delay_ms: Optional[int] = None,
        default_max_retries: Optional[int] = None,
        on_operation_start: Optional[OperationHook] = None,
        on_operation_complete: Optional[OperationHook] = None,
        on_operation_fail: Optional[FailureHook] = None,
        on_queue_empty: Optional[Callable[[], None]] = None,
    ) -> None:
        """
        Initialise la file.

        Args:
            signer: Wallet lie a la file (requis pour executer une operation)
            account_id: Compte qui signe (requis pour executer une operation)
            default_delay_ms: Pause par defaut (DEFAULT_DELAY_MS si None)
            default_max_retries: Relances par defaut (DEFAULT_MAX_RETRIES si None)
            on_operation_start: Appele quand une operation passe en processing
            on_operation_complete: Appele quand une operation passe en completed
            on_operation_fail: Appele quand une operation passe en failed
            on_queue_empty: Appele quand le worker s'arrete faute de travail
        """
        self._signer = signer
        self._account_id = account_id
        self._default_delay_ms = (
            self.DEFAULT_DELAY_MS if default_delay_ms is None else default_delay_ms
        )
        self._default_max_retries = (
            self.DEFAULT_MAX_RETRIES if default_max_retries is None else default_max_retries
        )
        self._on_operation_start = on_operation_start
        self._on_operation_complete = on_operation_complete
        self._on_operation_fail = on_operation_fail
        self._on_queue_empty = on_queue_empty

        self._operations: list[QueuedOperation] = []
        self._next_sequence = 0
        self._is_processing = False
        self._worker: Optional[asyncio.Task] = None

    # ------------------------------------------------------------------
    # API publique
    # ------------------------------------------------------------------

    def update_connection(self, signer: Optional[Any], account_id: Optional[str]) -> None:
        """Remplace le wallet et le compte utilises pour les prochaines operations."""
        self._signer = signer
        self._account_id = account_id

    def enqueue(self, request: OperationRequest) -> str:
        """
        Ajoute une operation en fin de file et demarre le worker si besoin.

        Args:
            request: Descripteur de l'operation

        Returns:
            L'identifiant de l'operation

        Raises:
            DuplicateOperationError: Si l'identifiant est deja suivi
        """
        if self._find(request.id) is not None:
            raise DuplicateOperationError(request.id)

        operation = QueuedOperation(
            id=request.id,
            name=request.name,
            execute=request.execute,
            max_retries=(
                self._default_max_retries if request.max_retries is None else request.max_retries
            ),
            delay_ms=self._default_delay_ms if request.delay_ms is None else request.delay_ms,
            sequence=self._next_sequence,
            on_success=request.on_success,
            on_error=request.on_error,
        )
        self._next_sequence += 1
        self._operations.append(operation)
        logger.debug(f"Operation {operation.id} ({operation.name}) mise en file")

        self._start_processing()
        return operation.id

    def get_stats(self) -> QueueStats:
        """Compteurs agreges ; pending inclut les operations en cours."""
        completed = failed = pending = 0
        for operation in self._operations:
            if operation.status == OperationStatus.COMPLETED:
                completed += 1
            elif operation.status == OperationStatus.FAILED:
                failed += 1
            else:
                pending += 1
        return QueueStats(
            total_transactions=len(self._operations),
            completed_transactions=completed,
            failed_transactions=failed,
            pending_transactions=pending,
        )

    def get_operation(self, operation_id: str) -> Optional[OperationSnapshot]:
        """Instantane de l'operation, ou None si inconnue ou nettoyee."""
        operation = self._find(operation_id)
        return operation.snapshot() if operation else None

    def list_operations(self) -> list[OperationSnapshot]:
        """Instantanes de toutes les operations suivies, dans l'ordre de mise en file."""
        return [operation.snapshot() for operation in self._operations]

    def clean_queue(self) -> None:
        """Retire les operations terminees (completed ou failed)."""
        before = len(self._operations)
        self._operations = [op for op in self._operations if not op.status.is_terminal]
        logger.debug(f"Nettoyage de la file: {before - len(self._operations)} operation(s) retiree(s)")

    def is_active(self) -> bool:
        """Vrai tant que le worker tourne."""
        return self._is_processing

    async def wait_for_completion(self) -> None:
        """Attend que le worker ait vide la file."""
        self._start_processing()
        while self._worker is not None:
            worker = self._worker
            await worker
            if self._worker is worker:
                self._worker = None

    async def wait_for(self, operation_id: str) -> OperationSnapshot:
        """
        Attend qu'une operation atteigne un etat terminal.

        Raises:
            KeyError: Si l'operation n'est pas suivie
        """
        operation = self._find(operation_id)
        if operation is None:
            raise KeyError(operation_id)
        self._start_processing()
        await operation.done.wait()
        return operation.snapshot()

    # ------------------------------------------------------------------
    # Worker
    # ------------------------------------------------------------------

    def _find(self, operation_id: str) -> Optional[QueuedOperation]:
        for operation in self._operations:
            if operation.id == operation_id:
                return operation
        return None

    def _next_pending(self) -> Optional[QueuedOperation]:
        # La liste est deja triee par ordre de mise en file
        for operation in self._operations:
            if operation.status == OperationStatus.PENDING:
                return operation
        return None

    def _start_processing(self) -> None:
        if self._is_processing or self._next_pending() is None:
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug("Aucune boucle asyncio active, traitement differe")
            return

        self._is_processing = True
        self._worker = loop.create_task(self._process_queue())
        self._worker.add_done_callback(self._on_worker_done)

    def _on_worker_done(self, task: asyncio.Task) -> None:
        if self._worker is task:
            self._worker = None
        if not task.cancelled() and task.exception() is not None:
            logger.opt(exception=task.exception()).error("Arret inattendu du worker de la file")

    async def _process_queue(self) -> None:
        try:
            while True:
                operation = self._next_pending()
                if operation is None:
                    break

                operation.status = OperationStatus.PROCESSING
                self._notify(self._on_operation_start, operation.snapshot())

                await self._process_operation(operation)

                if operation.delay_ms > 0:
                    await asyncio.sleep(operation.delay_ms / 1000)
        finally:
            self._is_processing = False

        if not any(op.status == OperationStatus.PROCESSING for op in self._operations):
            logger.debug("File vide, arret du worker")
            self._notify(self._on_queue_empty)

    async def _process_operation(self, operation: QueuedOperation) -> None:
        logger.debug(
            f"Traitement de l'operation {operation.id} ({operation.name}) "
            f"- tentative {operation.attempts + 1}"
        )

        config_error = self._check_configuration()
        if config_error is not None:
            logger.error(f"Operation {operation.id} impossible: {config_error}")
            self._fail(operation, config_error)
            return

        operation.attempts += 1
        outcome = await self._run(operation)

        if isinstance(outcome, Ok):
            self._complete(operation, outcome.value)
        elif operation.attempts <= operation.max_retries:
            self._schedule_retry(operation, outcome.error)
        else:
            self._fail(operation, outcome.error)

    def _check_configuration(self) -> Optional[ConfigurationError]:
        if self._signer is None:
            return ConfigurationError("Wallet connector not initialized")
        if not self._account_id:
            return ConfigurationError("Account ID not available")
        return None

    async def _run(self, operation: QueuedOperation) -> Outcome:
        try:
            return Ok(await operation.execute())
        except Exception as e:
            logger.warning(f"Echec de l'operation {operation.id} (tentative {operation.attempts}): {e}")
            return Err(e)

    def _complete(self, operation: QueuedOperation, result: Any) -> None:
        operation.status = OperationStatus.COMPLETED
        operation.result = result
        operation.done.set()
        logger.info(f"Operation {operation.id} ({operation.name}) terminee")

        self._notify(self._on_operation_complete, operation.snapshot())
        self._notify(operation.on_success, result)

    def _fail(self, operation: QueuedOperation, error: Exception) -> None:
        operation.status = OperationStatus.FAILED
        operation.error = error
        operation.done.set()
        logger.error(
            f"Operation {operation.id} ({operation.name}) en echec "
            f"apres {operation.attempts} tentative(s): {error}"
        )

        self._notify(self._on_operation_fail, operation.snapshot(), error)
        self._notify(operation.on_error, error)

    def _schedule_retry(self, operation: QueuedOperation, error: Exception) -> None:
        operation.status = OperationStatus.PENDING
        if operation.delay_ms:
            operation.delay_ms = math.floor(operation.delay_ms * self.BACKOFF_FACTOR)
        else:
            operation.delay_ms = self._default_delay_ms
        logger.info(
            f"Relance de l'operation {operation.id} "
            f"({operation.attempts}/{operation.max_retries}) dans {operation.delay_ms}ms"
        )

    def _notify(self, callback: Optional[Callable[..., None]], *args: Any) -> None:
        """Appelle un callback de l'appelant sans laisser ses erreurs atteindre le worker."""
        if callback is None:
            return
        try:
            callback(*args)
        except Exception:
            logger.exception(f"Erreur dans le callback {getattr(callback, '__name__', callback)}")
