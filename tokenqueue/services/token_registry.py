"""
Table de configuration des tokens et calcul des montants.

TokenRegistry regroupe, par symbole, les identifiants, decimales, ratios et
parametres de relance de chaque token. La table est validee a la construction
pour qu'une configuration incoherente echoue au demarrage plutot qu'au milieu
d'un workflow.

Tous les montants sont calcules en Decimal puis convertis en entiers dans la
plus petite unite du token : une quantite dont le montant ne tombe pas sur
une unite entiere est refusee.
"""

from decimal import Decimal, InvalidOperation
from typing import TYPE_CHECKING, Iterable, Union

from tokenqueue.core.errors import TokenConfigurationError
from tokenqueue.core.value_objects import TokenConfig, TokenRequirement, TokenSymbol

if TYPE_CHECKING:
    from tokenqueue.config import Settings

Quantity = Union[int, Decimal, str]


def to_decimal(quantity: Quantity) -> Decimal:
    """
    Convertit une quantite en Decimal strictement positif.

    Les float sont refuses pour eviter toute accumulation d'erreurs d'arrondi.

    Raises:
        ValueError: Quantite invalide, nulle ou negative
    """
    if isinstance(quantity, (float, bool)):
        raise ValueError(f"Quantity must be an int, Decimal or str, got {type(quantity).__name__}")
    try:
        value = Decimal(quantity)
    except (InvalidOperation, TypeError) as e:
        raise ValueError(f"Invalid quantity: {quantity!r}") from e
    if not value.is_finite() or value <= 0:
        raise ValueError(f"Quantity must be positive: {quantity!r}")
    return value


def scale_to_smallest_unit(amount: Decimal, decimals: int) -> int:
    """
    Convertit un montant en plus petite unite (amount x 10^decimals).

    Raises:
        ValueError: Si le resultat n'est pas entier
    """
    scaled = amount.scaleb(decimals)
    if scaled != scaled.to_integral_value():
        raise ValueError(f"Amount {amount} is not representable with {decimals} decimals")
    return int(scaled)


class TokenRegistry:
    """
    Table des tokens indexee par symbole.

    Example:
        registry = TokenRegistry.from_settings(settings)
        registry.mint_requirements(5)
        # [TokenRequirement(SAUCE, 500000000), TokenRequirement(CLXY, 250000000)]
    """

    def __init__(
        self,
        tokens: Iterable[TokenConfig],
        product: TokenSymbol = TokenSymbol.LYNX,
        hbar_ratio_tinybar: int = 10,
    ) -> None:
        """
        Initialise et valide la table.

        Args:
            tokens: Configuration de chaque token
            product: Token produit par mint et detruit par burn
            hbar_ratio_tinybar: Tinybars payes par unite de produit mintee

        Raises:
            TokenConfigurationError: Si la table est incoherente
        """
        self._tokens: dict[TokenSymbol, TokenConfig] = {}
        for token in tokens:
            if token.symbol in self._tokens:
                raise TokenConfigurationError(f"Duplicate token configuration: {token.symbol.value}")
            self._tokens[token.symbol] = token
        self._product = product
        self._hbar_ratio_tinybar = hbar_ratio_tinybar
        self._validate()

    @classmethod
    def from_settings(cls, settings: "Settings") -> "TokenRegistry":
        """Construit la table depuis les parametres de l'application."""
        contract_id = settings.contract_id
        return cls(
            tokens=[
                TokenConfig(
                    symbol=TokenSymbol.SAUCE,
                    token_id=settings.sauce_token_id,
                    contract_id=contract_id,
                    decimals=settings.sauce_decimals,
                    ratio=settings.sauce_ratio,
                    delay_ms=settings.sauce_delay_ms,
                    max_retries=settings.sauce_max_retries,
                ),
                TokenConfig(
                    symbol=TokenSymbol.CLXY,
                    token_id=settings.clxy_token_id,
                    contract_id=contract_id,
                    decimals=settings.clxy_decimals,
                    ratio=settings.clxy_ratio,
                    delay_ms=settings.clxy_delay_ms,
                    max_retries=settings.clxy_max_retries,
                ),
                TokenConfig(
                    symbol=TokenSymbol.LYNX,
                    token_id=settings.lynx_token_id,
                    contract_id=contract_id,
                    decimals=settings.lynx_decimals,
                    delay_ms=settings.lynx_delay_ms,
                    max_retries=settings.lynx_max_retries,
                ),
            ],
            product=TokenSymbol.LYNX,
            hbar_ratio_tinybar=settings.hbar_ratio_tinybar,
        )

    def _validate(self) -> None:
        if self._product not in self._tokens:
            raise TokenConfigurationError(f"Product token {self._product.value} is not configured")
        if self._tokens[self._product].ratio != 0:
            raise TokenConfigurationError("Product token must not require itself (ratio must be 0)")
        if self._hbar_ratio_tinybar < 0:
            raise TokenConfigurationError("HBAR ratio must not be negative")

        for token in self._tokens.values():
            if not token.token_id:
                raise TokenConfigurationError(f"{token.symbol.value}: token_id is required")
            if not token.contract_id:
                raise TokenConfigurationError(f"{token.symbol.value}: contract_id is required")
            if token.decimals < 0:
                raise TokenConfigurationError(f"{token.symbol.value}: decimals must not be negative")
            if token.ratio < 0:
                raise TokenConfigurationError(f"{token.symbol.value}: ratio must not be negative")
            if token.delay_ms < 0 or token.max_retries < 0:
                raise TokenConfigurationError(
                    f"{token.symbol.value}: delay_ms and max_retries must not be negative"
                )

        if not self.components:
            raise TokenConfigurationError("At least one component token needs a positive ratio")

    # ------------------------------------------------------------------
    # Consultation
    # ------------------------------------------------------------------

    def get(self, symbol: Union[TokenSymbol, str]) -> TokenConfig:
        """
        Configuration d'un token (symbole insensible a la casse).

        Raises:
            KeyError: Token inconnu
        """
        try:
            key = symbol if isinstance(symbol, TokenSymbol) else TokenSymbol(symbol.upper())
            return self._tokens[key]
        except (ValueError, KeyError) as e:
            raise KeyError(f"Unknown token: {symbol}") from e

    @property
    def product(self) -> TokenConfig:
        return self._tokens[self._product]

    @property
    def components(self) -> list[TokenConfig]:
        """Tokens de composition, dans l'ordre de declaration de TokenSymbol."""
        return [
            self._tokens[symbol]
            for symbol in TokenSymbol
            if symbol in self._tokens and self._tokens[symbol].is_component
        ]

    @property
    def hbar_ratio_tinybar(self) -> int:
        return self._hbar_ratio_tinybar

    def ratios(self) -> dict[str, Decimal]:
        """Ratios par unite de produit, HBAR (en tinybar) inclus."""
        ratios = {token.symbol.value: token.ratio for token in self.components}
        ratios["HBAR"] = Decimal(self._hbar_ratio_tinybar)
        return ratios

    # ------------------------------------------------------------------
    # Montants
    # ------------------------------------------------------------------

    def to_smallest_unit(self, symbol: Union[TokenSymbol, str], quantity: Quantity) -> int:
        """Quantite d'un token convertie dans sa plus petite unite."""
        return scale_to_smallest_unit(to_decimal(quantity), self.get(symbol).decimals)

    def mint_requirements(self, quantity: Quantity) -> list[TokenRequirement]:
        """Approbations necessaires pour minter `quantity` unites de produit."""
        value = to_decimal(quantity)
        return [
            TokenRequirement(
                symbol=token.symbol,
                amount=scale_to_smallest_unit(value * token.ratio, token.decimals),
            )
            for token in self.components
        ]

    def burn_requirements(self, quantity: Quantity) -> list[TokenRequirement]:
        """Approbation du produit lui-meme, necessaire pour le burn."""
        return [
            TokenRequirement(
                symbol=self._product,
                amount=self.to_smallest_unit(self._product, quantity),
            )
        ]

    def required_hbar_tinybars(self, quantity: Quantity) -> int:
        """Tinybars a payer pour minter `quantity` unites de produit."""
        return scale_to_smallest_unit(to_decimal(quantity) * self._hbar_ratio_tinybar, 0)
