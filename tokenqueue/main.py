"""
Point d'entree CLI de TokenQueue.

Initialise le container DI, configure le logging et fournit les commandes CLI.
"""

from typing import Annotated

import typer
from loguru import logger

from . import __version__
from .adapters.cli.commands import approve, burn, mint, ratios
from .config import Settings
from .container import Container
from .logging_config import configure_logging

app = typer.Typer(
    name="tokenqueue",
    help="File sequentielle de transactions Hedera (approbations, mint et burn de LYNX)",
)
container = Container()

# Etat global pour les options de verbosite
state = {"verbose": 0, "quiet": False}


@app.callback()
def main_callback(
    verbose: Annotated[
        int,
        typer.Option(
            "--verbose", "-v", count=True, help="Augmenter la verbosite (-v pour DEBUG)"
        ),
    ] = 0,
    quiet: Annotated[
        bool,
        typer.Option("--quiet", "-q", help="Mode silencieux (aucun log console)"),
    ] = False,
) -> None:
    """TokenQueue - Signature sequentielle des transactions de tokens."""
    if quiet:
        state["quiet"] = True
    else:
        state["verbose"] = verbose

    if quiet or verbose:
        settings = get_config()
        configure_logging(
            log_level="DEBUG" if verbose else settings.log_level,
            log_file=settings.log_file,
            rotation_size=settings.log_rotation_size,
            retention_count=settings.log_retention_count,
            console=not quiet,
        )


# Monter les commandes depuis commands/
app.command()(mint)
app.command()(burn)
app.command()(approve)
app.command()(ratios)


def get_config() -> Settings:
    """Recupere les parametres de l'application depuis le container DI."""
    return container.config()


@app.command()
def info() -> None:
    """Affiche la configuration actuelle."""
    config = get_config()
    logger.info("Configuration TokenQueue")
    typer.echo(f"Reseau : {config.network}")
    typer.echo(f"Mirror node : {config.resolved_mirror_node_url}")
    typer.echo(f"Associations : {config.association_source}")
    typer.echo(f"Compte : {config.account_id or 'non configure'}")
    typer.echo(f"Contrat : {config.contract_id}")
    typer.echo(f"SAUCE : {config.sauce_token_id} (ratio {config.sauce_ratio})")
    typer.echo(f"CLXY : {config.clxy_token_id} (ratio {config.clxy_ratio})")
    typer.echo(f"LYNX : {config.lynx_token_id}")
    typer.echo(f"Delai par defaut : {config.default_delay_ms} ms")
    typer.echo(f"Relances par defaut : {config.default_max_retries}")
    typer.echo(f"Niveau de log : {config.log_level}")


@app.command()
def version() -> None:
    """Affiche les informations de version."""
    typer.echo(f"TokenQueue v{__version__}")


def main() -> None:
    """Point d'entree de l'application."""
    # Charge la configuration et configure le logging
    settings = container.config()
    configure_logging(
        log_level=settings.log_level,
        log_file=settings.log_file,
        rotation_size=settings.log_rotation_size,
        retention_count=settings.log_retention_count,
    )

    logger.info("Demarrage de TokenQueue", version=__version__)

    # Lance la CLI
    app()


if __name__ == "__main__":
    main()
