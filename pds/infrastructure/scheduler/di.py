"""Dependency injection provider for the periodic drivers."""

import logging

from dishka import AsyncContainer, provide

from pds.config import Config
from pds.domain.deposit.schedule.deposit_status import DepositStatusSchedule
from pds.domain.deposit.schedule.failed_deposit_retry import FailedDepositRetrySchedule
from pds.domain.deposit.schedule.submission_status import SubmissionStatusSchedule
from pds.domain.shared.schedule import Schedule
from pds.infrastructure.scheduler.driver import DriverPool, ScheduleConfig, ScheduleConfigs
from pds.util.di.base import Provider
from pds.util.di.scope import Scope

logger = logging.getLogger(__name__)

# In startup order
SCHEDULES: list[type[Schedule]] = [
    SubmissionStatusSchedule,
    DepositStatusSchedule,
    FailedDepositRetrySchedule,
]


def schedule_by_name(name: str) -> type[Schedule] | None:
    for schedule_type in SCHEDULES:
        if schedule_type.__schedule_name__ == name:
            return schedule_type
    return None


class SchedulerProvider(Provider):
    @provide(scope=Scope.APP)
    def get_schedule_configs(self, config: Config) -> ScheduleConfigs:
        """Enabled schedules with their configured timing."""
        configs = []
        for schedule_type in SCHEDULES:
            job = config.jobs.for_schedule(schedule_type.__schedule_name__)
            if not job.enabled:
                logger.info("Schedule %s disabled", schedule_type.__schedule_name__)
                continue
            configs.append(ScheduleConfig(schedule_type=schedule_type, job=job))
        return ScheduleConfigs(configs)

    @provide(scope=Scope.APP)
    def get_driver_pool(
        self, container: AsyncContainer, schedules: ScheduleConfigs
    ) -> DriverPool:
        return DriverPool(container, schedules)
