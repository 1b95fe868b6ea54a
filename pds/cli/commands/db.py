"""Database commands."""

import sys

import cyclopts
from alembic.util.exc import CommandError
from sqlalchemy.exc import SQLAlchemyError

from pds.cli.console import get_console
from pds.config import Config, configure_logging
from pds.infrastructure.persistence.migrate import run_migrations

app = cyclopts.App(name="db", help="Manage the entity store database")


@app.command
def upgrade(revision: str = "head") -> None:
    """Apply schema migrations.

    Args:
        revision: Target Alembic revision.
    """
    console = get_console()
    config = Config()  # type: ignore[call-arg]
    configure_logging(config.logging)

    try:
        run_migrations(config.database.url, revision)
    except (CommandError, SQLAlchemyError) as e:
        console.error(f"Migration failed: {e}", hint=f"Database: {config.database.url}")
        sys.exit(1)
    console.success(f"Database upgraded to {revision}")
