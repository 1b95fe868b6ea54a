"""End-to-end reconciliation passes wired through the DI container.

Uses the in-memory entity store with a fake status document source and a
fake transport in place of the remote repositories.
"""

import asyncio

import pytest
import pytest_asyncio
from dishka import provide

from pds.application.di import create_container
from pds.config import Config, RepositoryConfig, StoreConfig
from pds.domain.critical.service.interaction import CriticalInteraction
from pds.domain.deposit.model.aggregate import Deposit, Repository, RepositoryCopy, Submission
from pds.domain.deposit.model.registry import TransportRegistry
from pds.domain.deposit.model.value import AggregatedDepositStatus, CopyStatus, DepositStatus
from pds.domain.deposit.port.status_document import StatusDocumentFetcher
from pds.domain.deposit.schedule.deposit_status import DepositStatusSchedule
from pds.domain.deposit.schedule.failed_deposit_retry import FailedDepositRetrySchedule
from pds.domain.deposit.schedule.submission_status import SubmissionStatusSchedule
from pds.domain.shared.error import ExternalServiceError
from pds.domain.shared.port.entity_store import EntityStore
from pds.util.di.base import Provider
from pds.util.di.scope import Scope

ARCHIVED = "http://dspace.org/state/archived"


class FakeStatusDocuments(StatusDocumentFetcher):
    """Serves statements from a dict; unknown references fail like a network error."""

    def __init__(self) -> None:
        self.documents: dict[str, bytes] = {}
        self.requests: list[str] = []

    async def fetch_document(self, reference: str, repository: RepositoryConfig) -> bytes:
        self.requests.append(reference)
        if reference not in self.documents:
            raise ExternalServiceError(f"connection refused: {reference}")
        return self.documents[reference]


class FakeTransport:
    def __init__(self, reference: str | None = "https://repo.example.org/statement/new") -> None:
        self.reference = reference
        self.transfers: list[str] = []

    async def attempt_transfer(self, submission, repository, deposit) -> str | None:
        self.transfers.append(deposit.id)
        return self.reference


class FakeRemoteProvider(Provider):
    def __init__(self, documents: FakeStatusDocuments, transport: FakeTransport) -> None:
        super().__init__()
        self._documents = documents
        self._transport = transport

    @provide(scope=Scope.APP)
    def get_fetcher(self) -> StatusDocumentFetcher:
        return self._documents

    @provide(scope=Scope.APP)
    def get_transports(self) -> TransportRegistry:
        return TransportRegistry({"dspace": self._transport})


@pytest.fixture
def documents() -> FakeStatusDocuments:
    return FakeStatusDocuments()


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest_asyncio.fixture
async def container(documents, transport):
    config = Config(
        store=StoreConfig(backend="memory"),
        repositories=[RepositoryConfig(key="dspace")],
    )
    container = create_container(config, FakeRemoteProvider(documents, transport))
    yield container
    await container.close()


async def _seed(
    store: EntityStore, *deposits: tuple[str, DepositStatus | None, str | None]
) -> None:
    await store.create(Repository(id="r1", name="JScholarship", repository_key="dspace"))
    await store.create(
        Submission(
            id="s1",
            submitted=True,
            aggregated_deposit_status=AggregatedDepositStatus.IN_PROGRESS,
            repositories=["r1"],
        )
    )
    for deposit_id, status, ref in deposits:
        await store.create(
            RepositoryCopy(id=f"c-{deposit_id}", copy_status=CopyStatus.IN_PROGRESS, repository="r1")
        )
        await store.create(
            Deposit(
                id=deposit_id,
                deposit_status=status,
                deposit_status_ref=ref,
                submission="s1",
                repository="r1",
                repository_copy=f"c-{deposit_id}",
            )
        )


async def _run(container, schedule_type) -> None:
    async with container(scope=Scope.UOW) as uow:
        schedule = await uow.get(schedule_type)
        await schedule.run()


class TestReconciliationScenarios:
    @pytest.mark.asyncio
    async def test_archived_statement_accepts_deposit(self, container, documents, make_statement):
        store = await container.get(EntityStore)
        await _seed(store, ("d1", DepositStatus.SUBMITTED, "https://repo/statement/1"))
        documents.documents["https://repo/statement/1"] = make_statement(ARCHIVED)

        await _run(container, DepositStatusSchedule)

        deposit = await store.get("d1", Deposit)
        assert deposit.deposit_status == DepositStatus.ACCEPTED
        assert (await store.get("c-d1", RepositoryCopy)).copy_status == CopyStatus.COMPLETE

        # Terminal deposits are not revisited
        await _run(container, DepositStatusSchedule)
        assert documents.requests == ["https://repo/statement/1"]
        assert (await store.get("d1", Deposit)).version == deposit.version

    @pytest.mark.asyncio
    async def test_deposit_without_status_is_resolved(self, container, documents, make_statement):
        store = await container.get(EntityStore)
        await _seed(store, ("d1", None, "https://repo/statement/1"))
        documents.documents["https://repo/statement/1"] = make_statement(ARCHIVED)

        await _run(container, DepositStatusSchedule)

        deposit = await store.get("d1", Deposit)
        assert deposit.deposit_status == DepositStatus.ACCEPTED
        assert documents.requests == ["https://repo/statement/1"]

    @pytest.mark.asyncio
    async def test_failed_deposit_is_resubmitted(self, container, transport):
        store = await container.get(EntityStore)
        await _seed(store, ("d1", DepositStatus.FAILED, None))

        await _run(container, FailedDepositRetrySchedule)

        deposit = await store.get("d1", Deposit)
        assert deposit.deposit_status == DepositStatus.SUBMITTED
        assert deposit.deposit_status_ref == transport.reference
        assert transport.transfers == ["d1"]

    @pytest.mark.asyncio
    async def test_partially_accepted_submission_is_in_progress(self, container):
        store = await container.get(EntityStore)
        await _seed(
            store,
            ("d1", DepositStatus.ACCEPTED, "https://repo/statement/1"),
            ("d2", DepositStatus.SUBMITTED, "https://repo/statement/2"),
        )
        submission = await store.get("s1", Submission)
        submission.aggregated_deposit_status = AggregatedDepositStatus.NOT_STARTED
        await store.update(submission)

        await _run(container, SubmissionStatusSchedule)

        stored = await store.get("s1", Submission)
        assert stored.aggregated_deposit_status == AggregatedDepositStatus.IN_PROGRESS

    @pytest.mark.asyncio
    async def test_all_accepted_completes_submission(self, container, documents, make_statement):
        store = await container.get(EntityStore)
        await _seed(
            store,
            ("d1", DepositStatus.ACCEPTED, "https://repo/statement/1"),
            ("d2", DepositStatus.SUBMITTED, "https://repo/statement/2"),
        )
        documents.documents["https://repo/statement/2"] = make_statement(ARCHIVED)

        await _run(container, DepositStatusSchedule)
        await _run(container, SubmissionStatusSchedule)

        stored = await store.get("s1", Submission)
        assert stored.aggregated_deposit_status == AggregatedDepositStatus.ACCEPTED

    @pytest.mark.asyncio
    async def test_deposit_finished_elsewhere_is_a_no_op(self, container, documents, make_statement):
        store = await container.get(EntityStore)
        await _seed(store, ("d1", DepositStatus.SUBMITTED, "https://repo/statement/1"))
        documents.documents["https://repo/statement/1"] = make_statement(ARCHIVED)

        async with container(scope=Scope.UOW) as uow:
            schedule = await uow.get(DepositStatusSchedule)
            candidates = await store.query(Deposit, {"deposit_status": DepositStatus.SUBMITTED})
            assert [d.id for d in candidates] == ["d1"]

            # Another path accepts the deposit after it was selected
            deposit = await store.get("d1", Deposit)
            deposit.deposit_status = DepositStatus.ACCEPTED
            await store.update(deposit)
            version = (await store.get("d1", Deposit)).version

            result = await schedule.service.process_deposit_status("d1")

        assert not result.success
        assert documents.requests == []
        assert (await store.get("d1", Deposit)).version == version

    @pytest.mark.asyncio
    async def test_resolution_failure_leaves_deposit_and_run_continues(
        self, container, documents, make_statement
    ):
        store = await container.get(EntityStore)
        await _seed(
            store,
            ("d1", DepositStatus.SUBMITTED, "https://repo/statement/unreachable"),
            ("d2", DepositStatus.SUBMITTED, "https://repo/statement/2"),
        )
        documents.documents["https://repo/statement/2"] = make_statement(ARCHIVED)

        await _run(container, DepositStatusSchedule)

        assert (await store.get("d1", Deposit)).deposit_status == DepositStatus.SUBMITTED
        assert (await store.get("d2", Deposit)).deposit_status == DepositStatus.ACCEPTED

    @pytest.mark.asyncio
    async def test_concurrent_writers_on_one_deposit(self, container):
        store = await container.get(EntityStore)
        critical = await container.get(CriticalInteraction)
        await _seed(store, ("d1", DepositStatus.FAILED, None))

        def resubmit(ref: str):
            async def body(d: Deposit) -> str:
                await asyncio.sleep(0)
                d.deposit_status = DepositStatus.SUBMITTED
                d.deposit_status_ref = ref
                return ref

            return body

        def still_failed(d: Deposit) -> bool:
            return d.deposit_status == DepositStatus.FAILED

        results = await asyncio.gather(
            critical.perform_critical("d1", Deposit, still_failed, lambda d: True, resubmit("a")),
            critical.perform_critical("d1", Deposit, still_failed, lambda d: True, resubmit("b")),
        )

        assert [r.success for r in results].count(True) == 1
        stored = await store.get("d1", Deposit)
        assert stored.deposit_status_ref in {"a", "b"}
        assert stored.version == 2
