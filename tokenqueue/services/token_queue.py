"""
Service d'orchestration des workflows de tokens.

TokenQueueService exprime les workflows metier au-dessus de TransactionQueue :
- une approbation de token = une operation en file
- un mint/burn LYNX = N approbations puis une operation finale qui verifie,
  au moment de son execution, que toutes les approbations sont completed

Les verifications prealables (supply key, associations) sont attendues
directement, hors de la file : si elles echouent il n'y a rien a mettre en file
et l'erreur remonte a l'appelant.

Comme la file est FIFO a worker unique, toute approbation mise en file avant
l'operation finale est terminee quand celle-ci demarre. La verification des
dependances lit le statut final que chaque approbation a enregistre via ses
callbacks : il reste connu meme si clean_queue() l'a retiree de la file.

Usage:
    service = TokenQueueService(queue, registry, association_service)
    service.update_connection(wallet, "0.0.1234")
    ids = await service.queue_mint(5)
    await service.wait_for_completion()
    print(service.get_operation(ids.final_operation_id).status)
"""

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Callable, Iterable, Optional, Union
from uuid import uuid4

from loguru import logger

from tokenqueue.core.entities import OperationRequest, OperationSnapshot, OperationStatus
from tokenqueue.core.errors import (
    ConfigurationError,
    DependencyNotSatisfiedError,
    DuplicateOperationError,
    ProvisioningError,
    TokenQueueError,
    TransactionError,
)
from tokenqueue.core.ports import IAssociationService, ITransactionSigner
from tokenqueue.core.value_objects import (
    CompositeOperationResult,
    QueueStats,
    TokenConfig,
    TokenRequirement,
    TokenSymbol,
    TransactionResult,
)
from tokenqueue.services.token_registry import Quantity, TokenRegistry, to_decimal
from tokenqueue.services.transaction_queue import TransactionQueue

TxIdCallback = Callable[[str], None]
ErrorCallback = Callable[[Exception], None]
ResultCallback = Callable[[TransactionResult], None]


class CompositeKind(str, Enum):
    """Operation finale d'un workflow composite."""

    MINT = "mint"
    BURN = "burn"


@dataclass
class CompositeOperationSpec:
    """
    Description d'un workflow composite.

    Attributs :
        kind : mint ou burn
        quantity : Quantite de produit (en unites entieres du produit)
        requirements : Approbations a mettre en file avant l'operation finale
        approval_ids : Identifiants imposes, alignes sur requirements (optionnel)
        final_operation_id : Identifiant impose de l'operation finale (optionnel)
        on_success : Appele avec le tx_id de l'operation finale
        on_error : Appele si une verification prealable ou l'operation finale echoue
    """

    kind: CompositeKind
    quantity: Quantity
    requirements: list[TokenRequirement] = field(default_factory=list)
    approval_ids: Optional[list[str]] = None
    final_operation_id: Optional[str] = None
    on_success: Optional[TxIdCallback] = None
    on_error: Optional[ErrorCallback] = None


class TokenQueueService:
    """
    Orchestrateur des approbations et des mint/burn dependants.

    Ce service ne signe rien lui-meme : il prepare des actions differees qui
    appellent le wallet (ITransactionSigner) et les confie a la file.
    """

    def __init__(
        self,
        queue: TransactionQueue,
        registry: TokenRegistry,
        association_service: IAssociationService,
        signer: Optional[ITransactionSigner] = None,
        account_id: Optional[str] = None,
        preassociated_accounts: Iterable[str] = (),
    ) -> None:
        """
        Initialise le service.

        Args:
            queue: File de transactions partagee
            registry: Table de configuration des tokens
            association_service: Consultation/provisionnement des associations
            signer: Wallet connecte (optionnel, voir update_connection)
            account_id: Compte connecte (optionnel, voir update_connection)
            preassociated_accounts: Comptes dont les associations ne sont pas verifiees
        """
        self._queue = queue
        self._registry = registry
        self._association_service = association_service
        self._preassociated_accounts = frozenset(preassociated_accounts)
        self._signer: Optional[ITransactionSigner] = None
        self._account_id: Optional[str] = None
        self.update_connection(signer, account_id)

    # ------------------------------------------------------------------
    # Connexion et consultation
    # ------------------------------------------------------------------

    def update_connection(
        self, signer: Optional[ITransactionSigner], account_id: Optional[str]
    ) -> None:
        """Change le wallet et le compte, pour ce service et pour la file."""
        self._signer = signer
        self._account_id = account_id
        self._queue.update_connection(signer, account_id)
        logger.debug(f"Connexion wallet mise a jour (compte: {account_id or 'aucun'})")

    @property
    def is_connected(self) -> bool:
        return self._signer is not None and bool(self._account_id)

    def get_token_config(self, symbol: Union[TokenSymbol, str]) -> Optional[TokenConfig]:
        """Configuration d'un token, ou None s'il est inconnu."""
        try:
            return self._registry.get(symbol)
        except KeyError:
            return None

    def get_token_ratios(self) -> dict[str, Decimal]:
        return self._registry.ratios()

    def calculate_required_hbar(self, lynx_amount: Quantity) -> int:
        """Tinybars a payer pour minter `lynx_amount` LYNX."""
        return self._registry.required_hbar_tinybars(lynx_amount)

    def get_queue_stats(self) -> QueueStats:
        return self._queue.get_stats()

    def get_operation(self, operation_id: str) -> Optional[OperationSnapshot]:
        return self._queue.get_operation(operation_id)

    def list_operations(self) -> list[OperationSnapshot]:
        return self._queue.list_operations()

    def is_processing(self) -> bool:
        return self._queue.is_active()

    def clean_queue(self) -> None:
        """Oublie les operations terminees (completed ou failed)."""
        self._queue.clean_queue()

    async def wait_for_completion(self) -> None:
        await self._queue.wait_for_completion()

    # ------------------------------------------------------------------
    # Approbations
    # ------------------------------------------------------------------

    def queue_token_approval(
        self,
        symbol: Union[TokenSymbol, str],
        amount: int,
        *,
        operation_id: Optional[str] = None,
        on_success: Optional[TxIdCallback] = None,
        on_error: Optional[ErrorCallback] = None,
    ) -> str:
        """
        Met en file une approbation de token pour le contrat configure.

        Args:
            symbol: Token a approuver
            amount: Montant en plus petite unite du token
            operation_id: Identifiant impose (sinon "<token>-approval-<hex>")
            on_success: Appele avec le tx_id de l'approbation
            on_error: Appele avec l'erreur finale

        Returns:
            Identifiant de l'operation en file

        Raises:
            ConfigurationError: Wallet non connecte
            KeyError: Token inconnu
            ValueError: Montant non entier ou non positif
        """
        self._require_connection()
        token = self._registry.get(symbol)
        _check_approval_amount(amount)

        op_id = operation_id or _approval_id(token.symbol)
        self._enqueue_approval(token, amount, op_id, _tx_id_callback(on_success), on_error)
        return op_id

    def _enqueue_approval(
        self,
        token: TokenConfig,
        amount: int,
        op_id: str,
        on_success: Optional[ResultCallback],
        on_error: Optional[ErrorCallback],
    ) -> None:
        name = token.symbol.value

        async def execute() -> TransactionResult:
            logger.debug(f"Demande d'approbation {name} pour {amount} ({op_id})")
            result = await self._current_signer().approve_token(
                token_id=token.token_id,
                contract_id=token.contract_id,
                amount=amount,
                token_name=name,
            )
            return self._ensure_success(result, f"{name} approval failed")

        self._queue.enqueue(
            OperationRequest(
                id=op_id,
                name=f"{name} Approval",
                execute=execute,
                max_retries=token.max_retries,
                delay_ms=token.delay_ms,
                on_success=on_success,
                on_error=on_error,
            )
        )
        logger.info(f"Approbation {name} mise en file: {op_id}")

    # ------------------------------------------------------------------
    # Workflows composites
    # ------------------------------------------------------------------

    async def queue_mint(
        self,
        lynx_amount: Quantity,
        *,
        approval_ids: Optional[list[str]] = None,
        operation_id: Optional[str] = None,
        on_success: Optional[TxIdCallback] = None,
        on_error: Optional[ErrorCallback] = None,
    ) -> CompositeOperationResult:
        """Approbations de chaque token de composition puis mint du produit."""
        return await self.queue_composite_operation(
            self._composite_spec(
                CompositeKind.MINT, lynx_amount, approval_ids, operation_id, on_success, on_error
            )
        )

    async def queue_burn(
        self,
        lynx_amount: Quantity,
        *,
        approval_ids: Optional[list[str]] = None,
        operation_id: Optional[str] = None,
        on_success: Optional[TxIdCallback] = None,
        on_error: Optional[ErrorCallback] = None,
    ) -> CompositeOperationResult:
        """Approbation du produit au contrat puis burn."""
        return await self.queue_composite_operation(
            self._composite_spec(
                CompositeKind.BURN, lynx_amount, approval_ids, operation_id, on_success, on_error
            )
        )

    async def queue_composite_operation(
        self, spec: CompositeOperationSpec
    ) -> CompositeOperationResult:
        """
        Met en file un workflow composite : approbations puis operation finale.

        Etapes :
        1. Verification de la supply key du contrat (attente directe)
        2. Verification et provisionnement des associations (attente directe)
        3. Une approbation en file par token requis, dans l'ordre fixe des tokens
        4. L'operation finale, qui verifie les approbations avant d'agir

        Returns:
            Les identifiants mis en file, pour suivre la progression par polling

        Toute erreur levee avant la mise en file (connexion, quantite,
        identifiants, supply key, associations) est transmise a on_error puis
        relevee : dans ce cas rien n'a ete mis en file.

        Raises:
            ConfigurationError: Wallet non connecte
            DuplicateOperationError: Identifiant repete ou deja suivi par la file
            ProvisioningError: Supply key absente ou association impossible
            ValueError: Quantite, montants ou identifiants invalides
        """
        try:
            self._require_connection()
            product = self._registry.product
            quantity = to_decimal(spec.quantity)
            final_amount = self._registry.to_smallest_unit(product.symbol, quantity)
            ordered = self._ordered_requirements(spec)
            gate = [
                (forced_id or _approval_id(requirement.symbol), requirement)
                for requirement, forced_id in ordered
            ]
            final_id = spec.final_operation_id or (
                f"{spec.kind.value}-{product.symbol.value.lower()}-{uuid4().hex[:8]}"
            )
            self._check_new_ids([approval_id for approval_id, _ in gate] + [final_id])

            logger.info(
                f"Workflow {spec.kind.value} de {quantity} {product.symbol.value}: "
                + ", ".join(f"{req.amount} {req.symbol.value}" for req, _ in ordered)
            )

            await self._verify_supply_key(product)
            await self._ensure_associations(self._provisioning_symbols(spec.kind, ordered))
        except (TokenQueueError, ValueError) as e:
            logger.error(f"Workflow {spec.kind.value} abandonne avant mise en file: {e}")
            _notify_error(spec.on_error, e)
            raise

        outcomes: dict[str, OperationStatus] = {}
        for approval_id, requirement in gate:
            self._enqueue_approval(
                self._registry.get(requirement.symbol),
                requirement.amount,
                approval_id,
                on_success=_record_outcome(outcomes, approval_id, OperationStatus.COMPLETED),
                on_error=_record_outcome(outcomes, approval_id, OperationStatus.FAILED),
            )

        async def execute() -> TransactionResult:
            self._verify_dependencies(gate, outcomes)
            logger.info(f"Approbations verifiees, {spec.kind.value} de {quantity} {product.symbol.value}")
            return await self._run_final(spec.kind, product, final_amount, quantity)

        self._queue.enqueue(
            OperationRequest(
                id=final_id,
                name=f"{spec.kind.value.capitalize()} {quantity} {product.symbol.value}",
                execute=execute,
                max_retries=product.max_retries,
                delay_ms=product.delay_ms,
                on_success=_tx_id_callback(spec.on_success),
                on_error=spec.on_error,
            )
        )
        logger.info(f"Operation finale mise en file: {final_id}")

        return CompositeOperationResult(
            approval_ids=[approval_id for approval_id, _ in gate],
            final_operation_id=final_id,
        )

    # ------------------------------------------------------------------
    # Interne
    # ------------------------------------------------------------------

    def _composite_spec(
        self,
        kind: CompositeKind,
        lynx_amount: Quantity,
        approval_ids: Optional[list[str]],
        operation_id: Optional[str],
        on_success: Optional[TxIdCallback],
        on_error: Optional[ErrorCallback],
    ) -> CompositeOperationSpec:
        try:
            if kind == CompositeKind.MINT:
                requirements = self._registry.mint_requirements(lynx_amount)
            else:
                requirements = self._registry.burn_requirements(lynx_amount)
        except ValueError as e:
            logger.error(f"Workflow {kind.value} abandonne avant mise en file: {e}")
            _notify_error(on_error, e)
            raise
        return CompositeOperationSpec(
            kind=kind,
            quantity=lynx_amount,
            requirements=requirements,
            approval_ids=approval_ids,
            final_operation_id=operation_id,
            on_success=on_success,
            on_error=on_error,
        )

    def _check_new_ids(self, operation_ids: list[str]) -> None:
        seen: set[str] = set()
        for operation_id in operation_ids:
            if operation_id in seen or self._queue.get_operation(operation_id) is not None:
                raise DuplicateOperationError(operation_id)
            seen.add(operation_id)

    def _require_connection(self) -> None:
        if not self.is_connected:
            raise ConfigurationError("Wallet not connected")

    def _current_signer(self) -> ITransactionSigner:
        if self._signer is None:
            raise ConfigurationError("Wallet not connected")
        return self._signer

    @staticmethod
    def _ensure_success(result: TransactionResult, default_message: str) -> TransactionResult:
        if not result.is_success:
            raise TransactionError(result.error or default_message, tx_id=result.tx_id)
        return result

    @staticmethod
    def _ordered_requirements(
        spec: CompositeOperationSpec,
    ) -> list[tuple[TokenRequirement, Optional[str]]]:
        if not spec.requirements:
            raise ValueError("A composite operation needs at least one requirement")
        ids: list[Optional[str]] = list(spec.approval_ids or [None] * len(spec.requirements))
        if len(ids) != len(spec.requirements):
            raise ValueError("approval_ids must match requirements one to one")
        for requirement in spec.requirements:
            _check_approval_amount(requirement.amount)

        order = list(TokenSymbol)
        return sorted(zip(spec.requirements, ids), key=lambda pair: order.index(pair[0].symbol))

    def _provisioning_symbols(
        self,
        kind: CompositeKind,
        ordered: list[tuple[TokenRequirement, Optional[str]]],
    ) -> list[TokenSymbol]:
        # Le burn restitue les tokens de composition : le compte doit pouvoir les recevoir
        symbols = [self._registry.product.symbol]
        if kind == CompositeKind.MINT:
            symbols += [req.symbol for req, _ in ordered]
        else:
            symbols += [token.symbol for token in self._registry.components]
        return list(dict.fromkeys(symbols))

    async def _verify_supply_key(self, product: TokenConfig) -> None:
        try:
            has_supply_key = await self._current_signer().check_supply_key(product.contract_id)
        except ConfigurationError:
            raise
        except Exception as e:
            raise ProvisioningError(f"Supply key check failed: {e}") from e
        if not has_supply_key:
            raise ProvisioningError(
                f"Contract does not have supply key for {product.symbol.value} token"
            )

    async def _ensure_associations(self, symbols: list[TokenSymbol]) -> None:
        account_id = self._account_id or ""
        if account_id in self._preassociated_accounts:
            logger.info(f"Compte {account_id} pre-associe, verification des associations sautee")
            return

        for symbol in symbols:
            token = self._registry.get(symbol)
            try:
                associated = await self._association_service.is_associated(
                    token.token_id, account_id
                )
                logger.debug(f"Association {symbol.value}: {'oui' if associated else 'non'}")
                if associated:
                    continue
                result = await self._association_service.associate(token.token_id, account_id)
            except Exception as e:
                raise ProvisioningError(f"Error with {symbol.value} token: {e}") from e
            if not result.success:
                raise ProvisioningError(
                    f"{symbol.value} token association failed: {result.message}"
                )
            logger.info(f"Token {symbol.value} associe au compte {account_id}")

    def _verify_dependencies(
        self,
        gate: list[tuple[str, TokenRequirement]],
        outcomes: dict[str, OperationStatus],
    ) -> None:
        for approval_id, requirement in gate:
            status = outcomes.get(approval_id)
            if status is None:
                snapshot = self._queue.get_operation(approval_id)
                status = snapshot.status if snapshot else None
            symbol = requirement.symbol.value
            if status is None:
                raise DependencyNotSatisfiedError(approval_id, None, symbol)
            if status != OperationStatus.COMPLETED:
                raise DependencyNotSatisfiedError(approval_id, status.value, symbol)

    async def _run_final(
        self,
        kind: CompositeKind,
        product: TokenConfig,
        amount: int,
        quantity: Decimal,
    ) -> TransactionResult:
        signer = self._current_signer()
        if kind == CompositeKind.MINT:
            hbar_tinybars = self._registry.required_hbar_tinybars(quantity)
            result = await signer.mint(product.contract_id, amount, hbar_tinybars)
        else:
            result = await signer.burn(product.contract_id, amount)
        return self._ensure_success(result, f"{product.symbol.value} {kind.value} failed")


def _approval_id(symbol: TokenSymbol) -> str:
    return f"{symbol.value.lower()}-approval-{uuid4().hex[:8]}"


def _check_approval_amount(amount: int) -> None:
    if isinstance(amount, bool) or not isinstance(amount, int) or amount <= 0:
        raise ValueError(f"Approval amount must be a positive integer, got {amount!r}")


def _record_outcome(
    outcomes: dict[str, OperationStatus], approval_id: str, status: OperationStatus
) -> Callable[..., None]:
    """Callback qui note le statut final d'une approbation pour l'operation finale."""

    def record(*_: object) -> None:
        outcomes[approval_id] = status

    return record


def _notify_error(callback: Optional[ErrorCallback], error: Exception) -> None:
    """Transmet l'erreur a on_error sans laisser une erreur du callback la masquer."""
    if callback is None:
        return
    try:
        callback(error)
    except Exception:
        logger.exception(f"Erreur dans le callback {getattr(callback, '__name__', callback)}")


def _tx_id_callback(callback: Optional[TxIdCallback]) -> Optional[ResultCallback]:
    """Adapte un callback attendant un tx_id au resultat complet renvoye par la file."""
    if callback is None:
        return None

    def on_success(result: TransactionResult) -> None:
        callback(result.tx_id or "unknown")

    return on_success
