"""
Commandes CLI des workflows composites (mint et burn de LYNX).

Chaque commande met en file les approbations puis l'operation finale, suit la
file par polling et affiche le bilan des operations.
"""

import asyncio
from typing import Annotated, Optional

import typer

from tokenqueue.adapters.cli.helpers import (
    console,
    follow_queue,
    render_operations_table,
    with_container,
)
from tokenqueue.core.entities import OperationStatus
from tokenqueue.core.errors import ConfigurationError, ProvisioningError
from tokenqueue.services.token_queue import CompositeKind

AccountOption = Annotated[
    Optional[str],
    typer.Option("--account", "-a", help="Compte qui signe (sinon TOKENQUEUE_ACCOUNT_ID)"),
]
FailOption = Annotated[
    Optional[list[str]],
    typer.Option(
        "--fail",
        help="Action refusee par le wallet simule (approve:SAUCE, approve:CLXY, mint, burn)",
    ),
]
FailTimesOption = Annotated[
    Optional[int],
    typer.Option("--fail-times", help="Nombre de refus par action (toujours si absent)"),
]


def mint(
    amount: Annotated[str, typer.Argument(help="Quantite de LYNX a minter")],
    account: AccountOption = None,
    fail: FailOption = None,
    fail_times: FailTimesOption = None,
) -> None:
    """Approuve SAUCE et CLXY puis minte des LYNX."""
    asyncio.run(_run_workflow_async(CompositeKind.MINT, amount, account, fail or [], fail_times))


def burn(
    amount: Annotated[str, typer.Argument(help="Quantite de LYNX a bruler")],
    account: AccountOption = None,
    fail: FailOption = None,
    fail_times: FailTimesOption = None,
) -> None:
    """Approuve LYNX puis brule des LYNX."""
    asyncio.run(_run_workflow_async(CompositeKind.BURN, amount, account, fail or [], fail_times))


@with_container()
async def _run_workflow_async(
    container,
    kind: CompositeKind,
    amount: str,
    account: Optional[str],
    fail: list[str],
    fail_times: Optional[int],
) -> None:
    """Implementation async des commandes mint et burn."""
    association_service = container.association_service()
    try:
        settings = container.config()
        service = container.token_queue_service()
        signer = container.signer()

        for action in fail:
            signer.fail(action, times=fail_times)

        account_id = account or settings.account_id
        if account_id:
            service.update_connection(signer, account_id)

        console.print(f"[bold cyan]{kind.value.capitalize()} de {amount} LYNX[/bold cyan]")
        if kind == CompositeKind.MINT:
            try:
                hbar = service.calculate_required_hbar(amount)
            except ValueError as e:
                console.print(f"[red]Erreur:[/red] {e}")
                raise typer.Exit(code=1)
            console.print(f"[dim]HBAR requis: {hbar} tinybars[/dim]")

        try:
            if kind == CompositeKind.MINT:
                queued = await service.queue_mint(amount)
            else:
                queued = await service.queue_burn(amount)
        except (ConfigurationError, ProvisioningError, ValueError) as e:
            console.print(f"[red]Erreur:[/red] {e}")
            raise typer.Exit(code=1)

        await follow_queue(service, settings.poll_interval_seconds)
        console.print(render_operations_table(service.list_operations()))

        final = service.get_operation(queued.final_operation_id)
        if final is None or final.status != OperationStatus.COMPLETED:
            console.print(f"[red]{kind.value.capitalize()} en echec.[/red]")
            raise typer.Exit(code=1)

        console.print(f"[green]{kind.value.capitalize()} termine:[/green] {final.result.tx_id}")
    finally:
        await association_service.close()
