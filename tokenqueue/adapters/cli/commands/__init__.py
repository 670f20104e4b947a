"""Sous-package CLI commands - re-exporte les commandes publiques."""

from tokenqueue.adapters.cli.commands.token_commands import approve, ratios
from tokenqueue.adapters.cli.commands.workflow_commands import burn, mint

__all__ = [
    # workflow
    "mint",
    "burn",
    # tokens
    "approve",
    "ratios",
]
