"""
Tests unitaires pour TokenRegistry et la conversion des montants.
"""

from decimal import Decimal

import pytest

from tokenqueue.config import Settings
from tokenqueue.core.errors import TokenConfigurationError
from tokenqueue.core.value_objects import TokenConfig, TokenRequirement, TokenSymbol
from tokenqueue.services.token_registry import (
    TokenRegistry,
    scale_to_smallest_unit,
    to_decimal,
)


class TestToDecimal:
    """Tests de to_decimal."""

    def test_accepts_int_str_and_decimal(self):
        assert to_decimal(5) == Decimal(5)
        assert to_decimal("2.5") == Decimal("2.5")
        assert to_decimal(Decimal("0.1")) == Decimal("0.1")

    @pytest.mark.parametrize("value", [0, -1, "0", "-3.2"])
    def test_rejects_non_positive(self, value):
        with pytest.raises(ValueError):
            to_decimal(value)

    def test_rejects_float(self):
        """Les float sont refuses (arrondis binaires)."""
        with pytest.raises(ValueError):
            to_decimal(1.5)

    def test_rejects_garbage(self):
        with pytest.raises(ValueError):
            to_decimal("abc")


class TestScaleToSmallestUnit:
    """Tests de scale_to_smallest_unit."""

    def test_scales_by_decimals(self):
        assert scale_to_smallest_unit(Decimal("1.5"), 6) == 1_500_000

    def test_no_float_drift(self):
        """0.1 + 0.2 ne pose pas de probleme en Decimal."""
        assert scale_to_smallest_unit(Decimal("0.1") + Decimal("0.2"), 8) == 30_000_000

    def test_rejects_sub_unit_amount(self):
        with pytest.raises(ValueError):
            scale_to_smallest_unit(Decimal("0.0000001"), 6)


class TestTokenRegistry:
    """Tests de la table des tokens."""

    def test_mint_requirements(self, registry):
        """5 LYNX -> 500 SAUCE et 250 CLXY en plus petite unite."""
        assert registry.mint_requirements(5) == [
            TokenRequirement(TokenSymbol.SAUCE, 500_000_000),
            TokenRequirement(TokenSymbol.CLXY, 250_000_000),
        ]

    def test_mint_requirements_fractional_quantity(self, registry):
        assert registry.mint_requirements("0.5") == [
            TokenRequirement(TokenSymbol.SAUCE, 50_000_000),
            TokenRequirement(TokenSymbol.CLXY, 25_000_000),
        ]

    def test_burn_requirements(self, registry):
        """Le burn approuve le produit lui-meme."""
        assert registry.burn_requirements(2) == [
            TokenRequirement(TokenSymbol.LYNX, 200_000_000),
        ]

    def test_required_hbar(self, registry):
        assert registry.required_hbar_tinybars(5) == 50

    def test_required_hbar_rejects_fractional_tinybar(self, registry):
        with pytest.raises(ValueError):
            registry.required_hbar_tinybars("0.05")

    def test_ratios_include_hbar(self, registry):
        assert registry.ratios() == {
            "SAUCE": Decimal(100),
            "CLXY": Decimal(50),
            "HBAR": Decimal(10),
        }

    def test_get_is_case_insensitive(self, registry):
        assert registry.get("clxy").token_id == "0.0.5365"
        assert registry.get(TokenSymbol.LYNX).decimals == 8

    def test_get_unknown_raises_key_error(self, registry):
        with pytest.raises(KeyError):
            registry.get("DOGE")

    def test_components_follow_symbol_order(self, registry):
        assert [t.symbol for t in registry.components] == [TokenSymbol.SAUCE, TokenSymbol.CLXY]
        assert registry.product.symbol == TokenSymbol.LYNX

    def test_from_settings_uses_defaults(self):
        """La table construite depuis Settings reprend les identifiants par defaut."""
        registry = TokenRegistry.from_settings(Settings(_env_file=None))

        assert registry.get("SAUCE").token_id == "0.0.1183558"
        assert registry.get("CLXY").token_id == "0.0.5365"
        assert registry.get("LYNX").token_id == "0.0.6200902"
        assert registry.get("LYNX").max_retries == 1
        assert registry.product.contract_id == "0.0.5758264"


class TestTokenRegistryValidation:
    """Tests de validation de la configuration."""

    def _token(self, symbol, **overrides):
        values = dict(
            symbol=symbol,
            token_id="0.0.1",
            contract_id="0.0.2",
            decimals=6,
            ratio=Decimal(0) if symbol == TokenSymbol.LYNX else Decimal(1),
        )
        values.update(overrides)
        return TokenConfig(**values)

    def test_missing_product_rejected(self):
        with pytest.raises(TokenConfigurationError):
            TokenRegistry([self._token(TokenSymbol.SAUCE)])

    def test_duplicate_symbol_rejected(self):
        with pytest.raises(TokenConfigurationError):
            TokenRegistry(
                [
                    self._token(TokenSymbol.SAUCE),
                    self._token(TokenSymbol.SAUCE),
                    self._token(TokenSymbol.LYNX),
                ]
            )

    def test_product_with_ratio_rejected(self):
        with pytest.raises(TokenConfigurationError):
            TokenRegistry(
                [self._token(TokenSymbol.SAUCE), self._token(TokenSymbol.LYNX, ratio=Decimal(1))]
            )

    def test_no_component_rejected(self):
        with pytest.raises(TokenConfigurationError):
            TokenRegistry([self._token(TokenSymbol.LYNX)])

    def test_empty_token_id_rejected(self):
        with pytest.raises(TokenConfigurationError):
            TokenRegistry(
                [self._token(TokenSymbol.SAUCE, token_id=""), self._token(TokenSymbol.LYNX)]
            )

    def test_configuration_error_is_value_error(self):
        """TokenConfigurationError reste capturable comme ValueError."""
        with pytest.raises(ValueError):
            TokenRegistry([self._token(TokenSymbol.LYNX)])
