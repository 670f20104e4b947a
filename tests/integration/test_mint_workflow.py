"""
Tests d'integration du workflow de mint complet.

Scenario reel avec les delais par defaut reduits : deux approbations puis le
mint, suivis par polling de get_queue_stats comme le ferait une interface.
"""

import asyncio

import pytest

from tokenqueue.adapters.simulated import SimulatedAssociationService, SimulatedSigner
from tokenqueue.core.entities import OperationStatus
from tokenqueue.core.value_objects import QueueStats
from tokenqueue.services.token_queue import TokenQueueService
from tokenqueue.services.transaction_queue import TransactionQueue

ACCOUNT_ID = "0.0.1234"


@pytest.fixture
def workflow(registry_factory):
    """Wallet, associations et orchestrateur avec de petits delais reels."""
    signer = SimulatedSigner(account_id=ACCOUNT_ID, latency_seconds=0.001)
    associations = SimulatedAssociationService()
    queue = TransactionQueue(signer=signer, account_id=ACCOUNT_ID, default_delay_ms=5)
    registry = registry_factory(delay_ms=5, clxy_retries=0)
    service = TokenQueueService(queue, registry, associations, signer, ACCOUNT_ID)
    return service, signer


async def poll_until_idle(service: TokenQueueService, interval: float = 0.005) -> list[QueueStats]:
    """Interroge les statistiques jusqu'a l'arret du worker."""
    seen = [service.get_queue_stats()]
    while service.is_processing():
        await asyncio.sleep(interval)
        seen.append(service.get_queue_stats())
    return seen


class TestMintWorkflow:

    @pytest.mark.asyncio
    async def test_mint_completes_after_both_approvals(self, workflow):
        """sauce-approval, clxy-approval puis m1, tous completed."""
        service, signer = workflow
        minted = []

        queued = await service.queue_mint(
            5,
            approval_ids=["sauce-approval", "clxy-approval"],
            operation_id="m1",
            on_success=minted.append,
        )
        history = await poll_until_idle(service)

        assert queued.all_ids == ["sauce-approval", "clxy-approval", "m1"]
        assert service.get_queue_stats() == QueueStats(3, 3, 0, 0)
        for stats in history:
            assert stats.total_transactions == (
                stats.completed_transactions
                + stats.failed_transactions
                + stats.pending_transactions
            )
        assert [name for name, _ in signer.calls] == ["approve:SAUCE", "approve:CLXY", "mint"]
        assert minted == [service.get_operation("m1").result.tx_id]

    @pytest.mark.asyncio
    async def test_failed_approval_blocks_mint(self, workflow):
        """CLXY refuse sans relance : m1 echoue sans jamais appeler mint."""
        service, signer = workflow
        signer.fail("approve:CLXY", message="insufficient balance")
        errors = []

        await service.queue_mint(
            5,
            approval_ids=["sauce-approval", "clxy-approval"],
            operation_id="m1",
            on_error=errors.append,
        )
        await service.wait_for_completion()

        clxy = service.get_operation("clxy-approval")
        assert clxy.status == OperationStatus.FAILED
        assert clxy.attempts == 1
        assert "insufficient balance" in clxy.error_message

        final = service.get_operation("m1")
        assert final.status == OperationStatus.FAILED
        assert "clxy-approval" in str(final.error)
        assert "failed" in str(final.error)
        assert signer.call_count("mint") == 0
        assert len(errors) == 1
        assert service.get_queue_stats() == QueueStats(3, 1, 2, 0)

    @pytest.mark.asyncio
    async def test_clean_queue_after_workflow(self, workflow):
        """Apres nettoyage, la file repart a zero et accepte les memes identifiants."""
        service, _ = workflow
        await service.queue_mint(1, approval_ids=["s", "c"], operation_id="m1")
        await service.wait_for_completion()

        service.clean_queue()

        assert service.get_queue_stats() == QueueStats()
        await service.queue_mint(1, approval_ids=["s", "c"], operation_id="m1")
        await service.wait_for_completion()
        assert service.get_operation("m1").status == OperationStatus.COMPLETED
