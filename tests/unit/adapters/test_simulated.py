"""
Tests unitaires pour le wallet et le service d'association simules.
"""

import pytest

from tokenqueue.adapters.simulated import (
    SigningRejectedError,
    SimulatedAssociationService,
    SimulatedSigner,
)
from tokenqueue.core.ports import IAssociationService, ITransactionSigner
from tokenqueue.core.value_objects import TransactionStatus


class TestSimulatedSigner:
    """Tests de SimulatedSigner."""

    def test_implements_interface(self):
        assert isinstance(SimulatedSigner(), ITransactionSigner)

    @pytest.mark.asyncio
    async def test_signs_with_sequential_tx_ids(self):
        signer = SimulatedSigner(account_id="0.0.42")

        first = await signer.approve_token("0.0.5365", "0.0.9", 100, "CLXY")
        second = await signer.burn("0.0.9", 5)

        assert first.tx_id == "0.0.42@0000000001"
        assert second.tx_id == "0.0.42@0000000002"
        assert first.is_success

    @pytest.mark.asyncio
    async def test_scripted_failure_raises_then_recovers(self):
        signer = SimulatedSigner()
        signer.fail("mint", times=1, message="closed popup")

        with pytest.raises(SigningRejectedError, match="closed popup"):
            await signer.mint("0.0.9", 100, 10)
        result = await signer.mint("0.0.9", 100, 10)

        assert result.is_success
        assert signer.call_count("mint") == 2

    @pytest.mark.asyncio
    async def test_scripted_failure_as_result(self):
        signer = SimulatedSigner()
        signer.fail("approve:SAUCE", message="insufficient balance", as_result=True)

        result = await signer.approve_token("0.0.1", "0.0.9", 1, "SAUCE")

        assert result.status == TransactionStatus.ERROR
        assert result.error == "insufficient balance"

    @pytest.mark.asyncio
    async def test_failure_scoped_to_action(self):
        """Un echec programme sur CLXY n'affecte pas SAUCE."""
        signer = SimulatedSigner()
        signer.fail("approve:CLXY")

        result = await signer.approve_token("0.0.1", "0.0.9", 1, "SAUCE")

        assert result.is_success

    @pytest.mark.asyncio
    async def test_supply_key(self):
        assert await SimulatedSigner().check_supply_key("0.0.9") is True
        assert await SimulatedSigner(has_supply_key=False).check_supply_key("0.0.9") is False


class TestSimulatedAssociationService:
    """Tests de SimulatedAssociationService."""

    def test_implements_interface(self):
        assert isinstance(SimulatedAssociationService(), IAssociationService)

    @pytest.mark.asyncio
    async def test_auto_associate(self):
        service = SimulatedAssociationService()

        assert await service.is_associated("0.0.1", "0.0.2") is False
        result = await service.associate("0.0.1", "0.0.2")

        assert result.success is True
        assert result.transaction_id is not None
        assert await service.is_associated("0.0.1", "0.0.2") is True

    @pytest.mark.asyncio
    async def test_association_refused(self):
        service = SimulatedAssociationService(auto_associate=False)

        result = await service.associate("0.0.1", "0.0.2")

        assert result.success is False
        assert await service.is_associated("0.0.1", "0.0.2") is False
