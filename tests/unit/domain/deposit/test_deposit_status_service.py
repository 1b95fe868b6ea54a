"""Unit tests for DepositStatusService."""

from unittest.mock import AsyncMock

import pytest

from pds.config import RepositoryConfig
from pds.domain.critical.service.interaction import CriticalInteraction
from pds.domain.deposit.model.aggregate import Deposit, Repository, RepositoryCopy, Submission
from pds.domain.deposit.model.registry import RepositoryConfigRegistry
from pds.domain.deposit.model.value import CopyStatus, DepositStatus
from pds.domain.deposit.service.deposit_status import DepositStatusService
from pds.domain.deposit.service.status_resolver import AtomStatementResolver
from pds.domain.shared.error import DepositServiceError, RemedialDepositError, StatusResolutionError
from pds.infrastructure.memory.entity_store import InMemoryEntityStore

REF = "https://repo.example.org/swordv2/statement/1.atom"


async def _seed(
    store: InMemoryEntityStore,
    status: DepositStatus | None = DepositStatus.SUBMITTED,
    ref: str | None = REF,
    repository_key: str | None = "DSpace",
) -> None:
    await store.create(Repository(id="r1", name="JScholarship", repository_key=repository_key))
    await store.create(
        RepositoryCopy(id="c1", copy_status=CopyStatus.IN_PROGRESS, repository="r1")
    )
    await store.create(Submission(id="s1", submitted=True, repositories=["r1"]))
    await store.create(
        Deposit(
            id="d1",
            deposit_status=status,
            deposit_status_ref=ref,
            submission="s1",
            repository="r1",
            repository_copy="c1",
        )
    )


def _make_service(store: InMemoryEntityStore, resolved=None, error=None):
    resolver = AsyncMock(spec=AtomStatementResolver)
    if error is not None:
        resolver.resolve.side_effect = error
    else:
        resolver.resolve.return_value = resolved
    service = DepositStatusService(
        store=store,
        critical=CriticalInteraction(store=store),
        resolver=resolver,
        repositories=RepositoryConfigRegistry.from_configs([RepositoryConfig(key="dspace")]),
    )
    return service, resolver


class TestProcessDepositStatus:
    @pytest.mark.asyncio
    async def test_accepted_completes_deposit_and_copy(self, store: InMemoryEntityStore):
        await _seed(store)
        service, resolver = _make_service(store, DepositStatus.ACCEPTED)

        result = await service.process_deposit_status("d1")

        assert result.success
        assert result.result == DepositStatus.ACCEPTED
        assert (await store.get("d1", Deposit)).deposit_status == DepositStatus.ACCEPTED
        assert (await store.get("c1", RepositoryCopy)).copy_status == CopyStatus.COMPLETE
        resolver.resolve.assert_awaited_once()
        ref, config = resolver.resolve.await_args.args
        assert ref == REF
        assert config.key == "dspace"

    @pytest.mark.asyncio
    async def test_rejected_rejects_deposit_and_copy(self, store: InMemoryEntityStore):
        await _seed(store)
        service, _ = _make_service(store, DepositStatus.REJECTED)

        result = await service.process_deposit_status("d1")

        assert result.success
        assert (await store.get("d1", Deposit)).deposit_status == DepositStatus.REJECTED
        assert (await store.get("c1", RepositoryCopy)).copy_status == CopyStatus.REJECTED

    @pytest.mark.asyncio
    async def test_non_terminal_remote_status_leaves_deposit(self, store: InMemoryEntityStore):
        await _seed(store)
        service, _ = _make_service(store, DepositStatus.SUBMITTED)

        result = await service.process_deposit_status("d1")

        assert result.success
        assert (await store.get("d1", Deposit)).deposit_status == DepositStatus.SUBMITTED
        assert (await store.get("c1", RepositoryCopy)).copy_status == CopyStatus.IN_PROGRESS

    @pytest.mark.asyncio
    async def test_unmapped_status_raises_without_change(self, store: InMemoryEntityStore):
        await _seed(store)
        service, _ = _make_service(store, None)

        with pytest.raises(DepositServiceError) as exc_info:
            await service.process_deposit_status("d1")

        assert exc_info.value.deposit_id == "d1"
        stored = await store.get("d1", Deposit)
        assert stored.deposit_status == DepositStatus.SUBMITTED
        assert stored.version == 1

    @pytest.mark.asyncio
    async def test_resolution_failure_never_changes_status(self, store: InMemoryEntityStore):
        await _seed(store)
        service, _ = _make_service(store, error=StatusResolutionError("timeout", reference=REF))

        with pytest.raises(DepositServiceError) as exc_info:
            await service.process_deposit_status("d1")

        assert isinstance(exc_info.value.__cause__, StatusResolutionError)
        stored = await store.get("d1", Deposit)
        assert stored.deposit_status == DepositStatus.SUBMITTED
        assert stored.version == 1

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "status,ref",
        [
            (DepositStatus.ACCEPTED, REF),
            (DepositStatus.REJECTED, REF),
            (DepositStatus.SUBMITTED, None),
        ],
    )
    async def test_ineligible_deposit_is_not_resolved(self, store: InMemoryEntityStore, status, ref):
        await _seed(store, status=status, ref=ref)
        service, resolver = _make_service(store, DepositStatus.ACCEPTED)

        result = await service.process_deposit_status("d1")

        assert not result.success
        assert result.error is None
        resolver.resolve.assert_not_awaited()
        assert (await store.get("d1", Deposit)).version == 1

    @pytest.mark.asyncio
    async def test_unconfigured_repository_is_logged_not_raised(
        self, store: InMemoryEntityStore, caplog
    ):
        await _seed(store, repository_key="unknown")
        service, resolver = _make_service(store, DepositStatus.ACCEPTED)

        result = await service.process_deposit_status("d1")

        assert not result.success
        assert isinstance(result.error, RemedialDepositError)
        resolver.resolve.assert_not_awaited()
        assert "d1" in caplog.text
