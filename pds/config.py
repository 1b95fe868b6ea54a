import logging
import os
import sys
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource

from pds.domain.deposit.model.value import DepositStatus

# =============================================================================
# Repository Configuration
# =============================================================================

SWORD_STATE_ARCHIVED = "http://dspace.org/state/archived"
SWORD_STATE_WITHDRAWN = "http://dspace.org/state/withdrawn"
SWORD_STATE_INPROGRESS = "http://dspace.org/state/inprogress"
SWORD_STATE_INREVIEW = "http://dspace.org/state/inreview"


def _dspace_status_mapping() -> dict[str, DepositStatus]:
    return {
        SWORD_STATE_ARCHIVED: DepositStatus.ACCEPTED,
        SWORD_STATE_WITHDRAWN: DepositStatus.REJECTED,
        SWORD_STATE_INPROGRESS: DepositStatus.SUBMITTED,
        SWORD_STATE_INREVIEW: DepositStatus.SUBMITTED,
    }


class BasicAuthConfig(BaseModel):
    """Credentials used when fetching status documents."""

    username: str
    password: str


class RepositoryConfig(BaseModel):
    """Configuration for one remote repository.

    ``key`` matches ``Repository.repository_key`` case-insensitively.
    ``status_mapping`` translates remote state terms (e.g. SWORD statement
    states) into deposit statuses; terms it does not list resolve to nothing.
    """

    key: str
    status_mapping: dict[str, DepositStatus] = Field(default_factory=_dspace_status_mapping)
    auth: BasicAuthConfig | None = None
    timeout: float = 30.0  # Seconds allowed for fetching a status document
    # Some repositories advertise statement URIs under a host that is not
    # reachable from here; the prefix is swapped before fetching.
    statement_uri_prefix: str | None = None
    statement_uri_replacement: str | None = None

    @field_validator("key")
    @classmethod
    def normalize_key(cls, value: str) -> str:
        return value.strip().lower()


# =============================================================================
# Job Configuration
# =============================================================================


class JobConfig(BaseModel):
    """Timing of one periodic reconciliation driver (seconds)."""

    enabled: bool = True
    delay: float = Field(default=600.0, gt=0)  # Interval between run starts
    initial_delay: float = Field(default=0.0, ge=0)


class JobsConfig(BaseModel):
    """Reconciliation drivers (nested in Config, uses env_nested_delimiter).

    Initial delays are staggered so the drivers do not all hit the store at
    the same moment after startup.
    """

    submission_status: JobConfig = JobConfig(initial_delay=5.0)
    deposit_status: JobConfig = JobConfig(initial_delay=10.0)
    failed_deposit_retry: JobConfig = JobConfig(initial_delay=15.0)

    def for_schedule(self, name: str) -> JobConfig:
        """Look up driver timing by schedule name (e.g. ``deposit-status``)."""
        return getattr(self, name.replace("-", "_"))


# =============================================================================
# Application Configuration
# =============================================================================


class YamlConfigSettingsSource(PydanticBaseSettingsSource):
    """Load settings from YAML file specified by PDS_CONFIG_FILE env var."""

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        yaml_data = self._load_yaml_config()
        field_value = yaml_data.get(field_name)
        return field_value, field_name, False

    def __call__(self) -> dict[str, Any]:
        return self._load_yaml_config()

    def _load_yaml_config(self) -> dict[str, Any]:
        config_file = os.environ.get("PDS_CONFIG_FILE")
        if config_file:
            path = Path(config_file)
            if path.exists():
                return yaml.safe_load(path.read_text()) or {}
        return {}


class DatabaseConfig(BaseModel):
    """Database configuration (nested in Config, uses env_nested_delimiter)."""

    url: str = "sqlite+aiosqlite:///~/.local/share/pds/pds.db"
    echo: bool = False
    auto_migrate: bool = True  # Run Alembic migrations before the drivers start


class StoreConfig(BaseModel):
    """Entity store backend selection."""

    backend: Literal["sql", "memory"] = "sql"


class LoggingConfig(BaseModel):
    """Logging configuration (nested in Config, uses env_nested_delimiter)."""

    level: str = "INFO"
    format: str = "%(asctime)s %(levelname)-8s [%(name)s] %(message)s"
    date_format: str = "%Y-%m-%d %H:%M:%S"

    @property
    def file(self) -> str | None:
        """Get log file path from PDS_LOG_FILE env var."""
        return os.environ.get("PDS_LOG_FILE")


class Config(BaseSettings):
    database: DatabaseConfig = DatabaseConfig()
    store: StoreConfig = StoreConfig()
    logging: LoggingConfig = LoggingConfig()
    jobs: JobsConfig = JobsConfig()
    repositories: list[RepositoryConfig] = []

    model_config = {
        "env_prefix": "PDS_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "env_nested_delimiter": "__",  # Allows PDS_DATABASE__URL override
    }

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Priority (highest to lowest): init, env, .env, PDS_CONFIG_FILE yaml, secrets."""
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            YamlConfigSettingsSource(settings_cls),
            file_secret_settings,
        )


def configure_logging(config: LoggingConfig) -> None:
    """Configure Python logging based on config.

    Should be called early in startup so all loggers pick up the configuration.
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(config.level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    formatter = logging.Formatter(config.format, datefmt=config.date_format)

    if config.file:
        log_path = Path(config.file).expanduser()
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handler: logging.Handler = logging.FileHandler(log_path)
    else:
        handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(config.level)
    handler.setFormatter(formatter)
    root_logger.addHandler(handler)

    # Reduce noise from third-party libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("asyncio").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)
    logging.getLogger("apscheduler").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
