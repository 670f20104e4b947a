"""
Configuration de l'application via pydantic-settings.

La configuration est chargee depuis les variables d'environnement avec le prefixe TOKENQUEUE_,
et peut optionnellement etre fournie via un fichier .env.

Les identifiants de tokens et de contrat ont des valeurs par defaut pour le testnet Hedera.
"""

from decimal import Decimal
from pathlib import Path
from typing import Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Trouver le fichier .env a la racine du projet (parent de tokenqueue/)
_PROJECT_ROOT = Path(__file__).parent.parent
_ENV_FILE = _PROJECT_ROOT / ".env"

MIRROR_NODE_URLS = {
    "mainnet": "https://mainnet-public.mirrornode.hedera.com",
    "testnet": "https://testnet.mirrornode.hedera.com",
}


class Settings(BaseSettings):
    """Parametres de l'application avec support des variables d'environnement.

    Tous les parametres peuvent etre surcharges via des variables d'environnement
    avec le prefixe TOKENQUEUE_.
    Exemple : TOKENQUEUE_DEFAULT_DELAY_MS=250

    Les listes (preassociated_accounts) se passent en JSON :
    TOKENQUEUE_PREASSOCIATED_ACCOUNTS='["0.0.4372449"]'
    """

    model_config = SettingsConfigDict(
        env_prefix="TOKENQUEUE_",
        env_file=_ENV_FILE if _ENV_FILE.exists() else ".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Reseau
    network: Literal["mainnet", "testnet"] = Field(default="testnet")
    mirror_node_url: str = Field(default="")
    association_source: Literal["mirror", "simulated"] = Field(default="simulated")

    # Compte qui signe (OPTIONNEL - les operations echouent si absent)
    account_id: Optional[str] = Field(default=None)
    # Comptes dont les tokens sont deja associes (verification sautee)
    preassociated_accounts: list[str] = Field(default_factory=list)

    # File de transactions
    default_delay_ms: int = Field(default=1000, ge=0)
    default_max_retries: int = Field(default=2, ge=0)

    # Contrat et tokens
    contract_id: str = Field(default="0.0.5758264")
    hbar_ratio_tinybar: int = Field(default=10, ge=0)

    sauce_token_id: str = Field(default="0.0.1183558")
    sauce_decimals: int = Field(default=6, ge=0)
    sauce_ratio: Decimal = Field(default=Decimal(100), ge=0)
    sauce_delay_ms: int = Field(default=500, ge=0)
    sauce_max_retries: int = Field(default=2, ge=0)

    clxy_token_id: str = Field(default="0.0.5365")
    clxy_decimals: int = Field(default=6, ge=0)
    clxy_ratio: Decimal = Field(default=Decimal(50), ge=0)
    clxy_delay_ms: int = Field(default=500, ge=0)
    clxy_max_retries: int = Field(default=2, ge=0)

    lynx_token_id: str = Field(default="0.0.6200902")
    lynx_decimals: int = Field(default=8, ge=0)
    lynx_delay_ms: int = Field(default=500, ge=0)
    lynx_max_retries: int = Field(default=1, ge=0)

    # Polling CLI
    poll_interval_seconds: float = Field(default=1.0, gt=0)

    # Logging (fichier + stderr, rotation 10MB, 5 fichiers de retention)
    log_level: str = Field(default="INFO")
    log_file: Path = Field(default=Path("logs/tokenqueue.log"))
    log_rotation_size: str = Field(default="10 MB")
    log_retention_count: int = Field(default=5)

    @field_validator("log_file", mode="before")
    @classmethod
    def expand_path(cls, v: str | Path) -> Path:
        """Etend ~ vers le repertoire home dans les chemins."""
        return Path(v).expanduser()

    @property
    def resolved_mirror_node_url(self) -> str:
        """URL du mirror node, deduite du reseau si non fournie."""
        return self.mirror_node_url or MIRROR_NODE_URLS[self.network]
