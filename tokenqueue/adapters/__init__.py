"""
Adaptateurs : implementations concretes des ports et interface CLI.

- mirror_node/ : IAssociationService via l'API REST du mirror node Hedera
- simulated : ITransactionSigner et IAssociationService en memoire
- cli/ : Commandes typer et affichage rich
"""
