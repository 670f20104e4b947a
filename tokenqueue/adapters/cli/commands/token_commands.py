"""
Commandes CLI unitaires sur les tokens : approbation isolee et ratios.
"""

import asyncio
from typing import Annotated, Optional

import typer
from rich.table import Table

from tokenqueue.adapters.cli.commands.workflow_commands import (
    AccountOption,
    FailOption,
    FailTimesOption,
)
from tokenqueue.adapters.cli.helpers import (
    console,
    follow_queue,
    render_operations_table,
    with_container,
)
from tokenqueue.core.entities import OperationStatus
from tokenqueue.core.errors import ConfigurationError


def approve(
    token: Annotated[str, typer.Argument(help="Token a approuver (SAUCE, CLXY, LYNX)")],
    amount: Annotated[str, typer.Argument(help="Montant en unites entieres du token")],
    account: AccountOption = None,
    fail: FailOption = None,
    fail_times: FailTimesOption = None,
) -> None:
    """Approuve un montant de token pour le contrat."""
    asyncio.run(_approve_async(token, amount, account, fail or [], fail_times))


@with_container()
async def _approve_async(
    container,
    token: str,
    amount: str,
    account: Optional[str],
    fail: list[str],
    fail_times: Optional[int],
) -> None:
    """Implementation async de la commande approve."""
    association_service = container.association_service()
    try:
        settings = container.config()
        service = container.token_queue_service()
        registry = container.token_registry()
        signer = container.signer()

        for action in fail:
            signer.fail(action, times=fail_times)

        account_id = account or settings.account_id
        if account_id:
            service.update_connection(signer, account_id)

        try:
            config = registry.get(token)
            smallest = registry.to_smallest_unit(config.symbol, amount)
            op_id = service.queue_token_approval(config.symbol, smallest)
        except KeyError:
            console.print(f"[red]Token inconnu:[/red] {token}")
            raise typer.Exit(code=1)
        except (ConfigurationError, ValueError) as e:
            console.print(f"[red]Erreur:[/red] {e}")
            raise typer.Exit(code=1)

        console.print(
            f"[bold cyan]Approbation {config.symbol.value}[/bold cyan]: "
            f"{amount} ({smallest} en plus petite unite)"
        )
        await follow_queue(service, settings.poll_interval_seconds)
        console.print(render_operations_table(service.list_operations()))

        operation = service.get_operation(op_id)
        if operation is None or operation.status != OperationStatus.COMPLETED:
            raise typer.Exit(code=1)
    finally:
        await association_service.close()


def ratios(
    amount: Annotated[
        Optional[str],
        typer.Option("--amount", "-n", help="Quantite de LYNX pour le calcul des montants"),
    ] = None,
) -> None:
    """Affiche les ratios de composition d'un LYNX."""
    asyncio.run(_ratios_async(amount))


@with_container()
async def _ratios_async(container, amount: Optional[str]) -> None:
    """Implementation async de la commande ratios."""
    registry = container.token_registry()

    table = Table(title="Composition d'un LYNX")
    table.add_column("Token")
    table.add_column("Token ID")
    table.add_column("Ratio", justify="right")
    if amount is not None:
        table.add_column(f"Pour {amount} LYNX", justify="right")

    try:
        requirements = (
            {req.symbol: req.amount for req in registry.mint_requirements(amount)}
            if amount is not None
            else {}
        )
        hbar = registry.required_hbar_tinybars(amount) if amount is not None else None
    except ValueError as e:
        console.print(f"[red]Erreur:[/red] {e}")
        raise typer.Exit(code=1)

    for token in registry.components:
        row = [token.symbol.value, token.token_id, str(token.ratio)]
        if amount is not None:
            row.append(str(requirements[token.symbol]))
        table.add_row(*row)

    hbar_row = ["HBAR (tinybar)", "-", str(registry.hbar_ratio_tinybar)]
    if hbar is not None:
        hbar_row.append(str(hbar))
    table.add_row(*hbar_row)

    console.print(table)
