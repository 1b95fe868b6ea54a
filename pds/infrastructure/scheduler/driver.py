"""DriverPool - runs the reconciliation schedules on an APScheduler scheduler."""

import asyncio
import logging
from contextlib import AsyncExitStack
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import Any, NewType

from apscheduler import AsyncScheduler
from apscheduler.triggers.interval import IntervalTrigger
from dishka import AsyncContainer

from pds.config import JobConfig
from pds.domain.shared.schedule import Schedule
from pds.util.di.scope import Scope

logger = logging.getLogger(__name__)

# Consecutive failures after which a schedule is reported as critical
FAILURE_ALERT_THRESHOLD = 5


@dataclass
class ScheduleConfig:
    """A schedule type with its timing."""

    schedule_type: type[Schedule]
    job: JobConfig
    params: dict[str, Any] = field(default_factory=dict)

    @property
    def name(self) -> str:
        return self.schedule_type.__schedule_name__

    def trigger(self, now: datetime | None = None) -> IntervalTrigger:
        """Fires every ``delay`` seconds, the first time ``initial_delay`` from now."""
        start = (now or datetime.now(UTC)) + timedelta(seconds=self.job.initial_delay)
        return IntervalTrigger(seconds=self.job.delay, start_time=start)


ScheduleConfigs = NewType("ScheduleConfigs", list[ScheduleConfig])


@dataclass
class ScheduleState:
    runs: int = 0
    skipped: int = 0
    consecutive_failures: int = 0
    last_run_at: datetime | None = None
    last_error: BaseException | None = None


class DriverPool:
    """Registers every configured schedule with one AsyncScheduler.

    Each firing resolves the schedule in a fresh UOW scope. A run that is
    still in progress when its trigger fires again is not overlapped; the
    firing is skipped.

    Usage:
        pool = DriverPool(container, schedules)
        async with pool:
            await stop_event.wait()
    """

    def __init__(self, container: AsyncContainer, schedules: ScheduleConfigs) -> None:
        self._container = container
        self._schedules = schedules
        self._states = {config.name: ScheduleState() for config in schedules}
        self._running: set[str] = set()
        self._scheduler: AsyncScheduler | None = None
        self._exit_stack: AsyncExitStack | None = None

    @property
    def schedules(self) -> ScheduleConfigs:
        return self._schedules

    @property
    def running(self) -> bool:
        return self._scheduler is not None

    def get_state(self, name: str) -> ScheduleState | None:
        return self._states.get(name)

    async def start(self) -> None:
        self._exit_stack = AsyncExitStack()
        await self._exit_stack.__aenter__()

        self._scheduler = AsyncScheduler()
        await self._exit_stack.enter_async_context(self._scheduler)

        now = datetime.now(UTC)
        for config in self._schedules:
            await self._scheduler.add_schedule(
                self.run_schedule,
                config.trigger(now),
                id=config.name,
                kwargs={"config": config},
            )
            logger.debug(
                "Registered schedule %s (initial delay %ss, every %ss)",
                config.name,
                config.job.initial_delay,
                config.job.delay,
            )

        await self._scheduler.start_in_background()
        logger.info("DriverPool started with %d schedules", len(self._schedules))

    async def stop(self) -> None:
        if self._exit_stack:
            await self._exit_stack.__aexit__(None, None, None)
            self._exit_stack = None
        self._scheduler = None
        logger.info("DriverPool stopped")

    async def run_schedule(self, config: ScheduleConfig) -> bool:
        """Run one pass of ``config`` in UOW scope. Returns True on success."""
        state = self._states.setdefault(config.name, ScheduleState())
        if config.name in self._running:
            state.skipped += 1
            logger.info("Schedule %s still running, skipping this firing", config.name)
            return False

        self._running.add(config.name)
        state.runs += 1
        state.last_run_at = datetime.now(UTC)
        try:
            async with self._container(scope=Scope.UOW) as scope:
                schedule = await scope.get(config.schedule_type)
                await schedule.run(**config.params)
        except (asyncio.CancelledError, SystemExit, KeyboardInterrupt):
            raise
        except Exception as e:
            state.consecutive_failures += 1
            state.last_error = e
            failures = state.consecutive_failures
            logger.error("Failed to run schedule %s (failures: %d): %s", config.name, failures, e)
            if failures >= FAILURE_ALERT_THRESHOLD:
                logger.critical("Schedule %s has failed %d consecutive times", config.name, failures)
            return False
        finally:
            self._running.discard(config.name)

        state.consecutive_failures = 0
        state.last_error = None
        logger.debug("Ran schedule %s", config.name)
        return True

    async def __aenter__(self) -> "DriverPool":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:  # noqa: ANN001
        await self.stop()
