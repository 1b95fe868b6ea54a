import logging

from dishka import from_context, provide

from pds.config import Config
from pds.domain.critical.service.interaction import CriticalInteraction
from pds.domain.deposit.model.registry import RepositoryConfigRegistry, TransportRegistry
from pds.domain.deposit.port.status_document import StatusDocumentFetcher
from pds.domain.deposit.schedule.deposit_status import DepositStatusSchedule
from pds.domain.deposit.schedule.failed_deposit_retry import FailedDepositRetrySchedule
from pds.domain.deposit.schedule.submission_status import SubmissionStatusSchedule
from pds.domain.deposit.service.deposit_status import DepositStatusService
from pds.domain.deposit.service.processor import DepositProcessor
from pds.domain.deposit.service.retry import FailedDepositRetryService
from pds.domain.deposit.service.status_resolver import AtomStatementResolver
from pds.domain.deposit.service.submission_status import SubmissionStatusService
from pds.domain.shared.port.entity_store import EntityStore
from pds.util.di.base import Provider
from pds.util.di.scope import Scope

logger = logging.getLogger(__name__)


class DepositProvider(Provider):
    """Deposit reconciliation services and schedules.

    Registries and the critical interaction engine are APP-scoped; services
    and schedules are built fresh for every run (UOW).
    """

    config = from_context(provides=Config, scope=Scope.APP)

    @provide(scope=Scope.APP)
    def get_repository_configs(self, config: Config) -> RepositoryConfigRegistry:
        registry = RepositoryConfigRegistry.from_configs(config.repositories)
        logger.info("Configured repositories: %s", ", ".join(registry.keys()) or "(none)")
        return registry

    @provide(scope=Scope.APP)
    def get_transports(self) -> TransportRegistry:
        """Transports are registered by deployments; none are built in."""
        return TransportRegistry({})

    @provide(scope=Scope.APP)
    def get_critical_interaction(self, store: EntityStore) -> CriticalInteraction:
        return CriticalInteraction(store=store)

    @provide(scope=Scope.UOW)
    def get_resolver(self, fetcher: StatusDocumentFetcher) -> AtomStatementResolver:
        return AtomStatementResolver(fetcher=fetcher)

    @provide(scope=Scope.UOW)
    def get_deposit_status_service(
        self,
        store: EntityStore,
        critical: CriticalInteraction,
        resolver: AtomStatementResolver,
        repositories: RepositoryConfigRegistry,
    ) -> DepositStatusService:
        return DepositStatusService(
            store=store,
            critical=critical,
            resolver=resolver,
            repositories=repositories,
        )

    @provide(scope=Scope.UOW)
    def get_submission_status_service(
        self, store: EntityStore, critical: CriticalInteraction
    ) -> SubmissionStatusService:
        return SubmissionStatusService(store=store, critical=critical)

    @provide(scope=Scope.UOW)
    def get_retry_service(
        self,
        store: EntityStore,
        critical: CriticalInteraction,
        transports: TransportRegistry,
    ) -> FailedDepositRetryService:
        return FailedDepositRetryService(store=store, critical=critical, transports=transports)

    @provide(scope=Scope.UOW)
    def get_processor(
        self,
        store: EntityStore,
        status_service: DepositStatusService,
        submission_service: SubmissionStatusService,
    ) -> DepositProcessor:
        return DepositProcessor(
            store=store,
            status_service=status_service,
            submission_service=submission_service,
        )

    submission_status_schedule = provide(SubmissionStatusSchedule, scope=Scope.UOW)
    deposit_status_schedule = provide(DepositStatusSchedule, scope=Scope.UOW)
    failed_deposit_retry_schedule = provide(FailedDepositRetrySchedule, scope=Scope.UOW)
