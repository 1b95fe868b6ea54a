"""Jobs commands - run the reconciliation drivers."""

import asyncio
import signal
import sys

import cyclopts
import logfire

from pds.application.di import create_container
from pds.cli.console import get_console
from pds.config import Config, configure_logging
from pds.infrastructure.persistence.migrate import run_migrations
from pds.infrastructure.scheduler.di import SCHEDULES, schedule_by_name
from pds.infrastructure.scheduler.driver import DriverPool, ScheduleConfig, ScheduleConfigs

app = cyclopts.App(name="jobs", help="Run deposit reconciliation jobs")


def _prepare() -> Config:
    config = Config()  # type: ignore[call-arg]
    configure_logging(config.logging)
    logfire.configure(send_to_logfire="if-token-present", console=False)
    logfire.instrument_httpx()
    if config.store.backend == "sql" and config.database.auto_migrate:
        run_migrations(config.database.url)
    return config


async def _run_forever(config: Config) -> None:
    container = create_container(config)
    stop = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, stop.set)

    try:
        pool = await container.get(DriverPool)
        async with pool:
            await stop.wait()
    finally:
        await container.close()


async def _run_once(config: Config, schedule_name: str) -> bool:
    schedule_type = schedule_by_name(schedule_name)
    if schedule_type is None:
        raise ValueError(schedule_name)

    container = create_container(config)
    try:
        job = config.jobs.for_schedule(schedule_name)
        schedule = ScheduleConfig(schedule_type=schedule_type, job=job)
        pool = DriverPool(container, ScheduleConfigs([schedule]))
        return await pool.run_schedule(schedule)
    finally:
        await container.close()


@app.command
def run() -> None:
    """Run all enabled reconciliation drivers until interrupted."""
    console = get_console()
    config = _prepare()
    enabled = [
        s.__schedule_name__ for s in SCHEDULES if config.jobs.for_schedule(s.__schedule_name__).enabled
    ]
    console.info(f"Starting drivers: {', '.join(enabled) or '(none)'}")
    asyncio.run(_run_forever(config))
    console.success("Drivers stopped")


@app.command
def once(name: str) -> None:
    """Run a single pass of one driver.

    Args:
        name: Driver name (submission-status, deposit-status, failed-deposit-retry).
    """
    console = get_console()
    if schedule_by_name(name) is None:
        names = ", ".join(s.__schedule_name__ for s in SCHEDULES)
        console.error(f"Unknown job '{name}'", hint=f"Available jobs: {names}")
        sys.exit(2)

    config = _prepare()
    if asyncio.run(_run_once(config, name)):
        console.success(f"Job '{name}' completed")
    else:
        console.error(f"Job '{name}' failed", hint="See the log output for details")
        sys.exit(1)


@app.command(name="list")
def list_jobs() -> None:
    """Show the configured drivers and their timing."""
    config = Config()  # type: ignore[call-arg]
    rows = []
    for schedule_type in SCHEDULES:
        job = config.jobs.for_schedule(schedule_type.__schedule_name__)
        rows.append(
            {
                "name": schedule_type.__schedule_name__,
                "enabled": "yes" if job.enabled else "no",
                "initial_delay": f"{job.initial_delay:g}s",
                "delay": f"{job.delay:g}s",
            }
        )
    get_console().table(
        rows,
        [("name", "Job"), ("enabled", "Enabled"), ("initial_delay", "Initial delay"), ("delay", "Delay")],
        title="Reconciliation jobs",
    )
