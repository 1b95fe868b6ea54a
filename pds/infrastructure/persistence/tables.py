"""SQLAlchemy table definitions - dialect-agnostic (works with SQLite and PostgreSQL).

Every entity table carries an integer ``version`` column used for
optimistic concurrency: updates match on (id, version) and bump it.
"""

from sqlalchemy import Boolean, Column, Index, Integer, MetaData, String, Table
from sqlalchemy.types import JSON

metadata = MetaData()

# ============================================================================
# SUBMISSIONS TABLE
# ============================================================================
submissions_table = Table(
    "submissions",
    metadata,
    Column("id", String, primary_key=True),
    Column("version", Integer, nullable=False),
    Column("aggregated_deposit_status", String(32), nullable=True),
    Column("submitted", Boolean, nullable=False, default=False),
    Column("repositories", JSON, nullable=False),
)

Index(
    "idx_submissions_status",
    submissions_table.c.submitted,
    submissions_table.c.aggregated_deposit_status,
)


# ============================================================================
# DEPOSITS TABLE
# ============================================================================
deposits_table = Table(
    "deposits",
    metadata,
    Column("id", String, primary_key=True),
    Column("version", Integer, nullable=False),
    Column("deposit_status", String(32), nullable=True),
    Column("deposit_status_ref", String, nullable=True),  # Remote status document URI
    Column("submission", String, nullable=False),
    Column("repository", String, nullable=True),
    Column("repository_copy", String, nullable=True),
)

Index("idx_deposits_status", deposits_table.c.deposit_status)
Index("idx_deposits_submission", deposits_table.c.submission)


# ============================================================================
# REPOSITORIES TABLE
# ============================================================================
repositories_table = Table(
    "repositories",
    metadata,
    Column("id", String, primary_key=True),
    Column("version", Integer, nullable=False),
    Column("name", String, nullable=False),
    Column("repository_key", String, nullable=True),
)


# ============================================================================
# REPOSITORY COPIES TABLE
# ============================================================================
repository_copies_table = Table(
    "repository_copies",
    metadata,
    Column("id", String, primary_key=True),
    Column("version", Integer, nullable=False),
    Column("copy_status", String(32), nullable=True),
    Column("repository", String, nullable=True),
    Column("access_url", String, nullable=True),
    Column("external_ids", JSON, nullable=False),
)
