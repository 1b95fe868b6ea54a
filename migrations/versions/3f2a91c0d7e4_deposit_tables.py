"""deposit_tables

Revision ID: 3f2a91c0d7e4
Revises:
Create Date: 2026-10-19 09:12:41.218334

"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "3f2a91c0d7e4"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    # SUBMISSIONS
    op.create_table(
        "submissions",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("version", sa.Integer(), nullable=False),
        sa.Column("aggregated_deposit_status", sa.String(32), nullable=True),
        sa.Column("submitted", sa.Boolean(), nullable=False),
        sa.Column("repositories", sa.JSON(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "idx_submissions_status", "submissions", ["submitted", "aggregated_deposit_status"]
    )

    # DEPOSITS
    op.create_table(
        "deposits",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("version", sa.Integer(), nullable=False),
        sa.Column("deposit_status", sa.String(32), nullable=True),
        sa.Column("deposit_status_ref", sa.String(), nullable=True),
        sa.Column("submission", sa.String(), nullable=False),
        sa.Column("repository", sa.String(), nullable=True),
        sa.Column("repository_copy", sa.String(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_deposits_status", "deposits", ["deposit_status"])
    op.create_index("idx_deposits_submission", "deposits", ["submission"])

    # REPOSITORIES
    op.create_table(
        "repositories",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("version", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("repository_key", sa.String(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )

    # REPOSITORY COPIES
    op.create_table(
        "repository_copies",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("version", sa.Integer(), nullable=False),
        sa.Column("copy_status", sa.String(32), nullable=True),
        sa.Column("repository", sa.String(), nullable=True),
        sa.Column("access_url", sa.String(), nullable=True),
        sa.Column("external_ids", sa.JSON(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table("repository_copies")
    op.drop_table("repositories")
    op.drop_index("idx_deposits_submission", table_name="deposits")
    op.drop_index("idx_deposits_status", table_name="deposits")
    op.drop_table("deposits")
    op.drop_index("idx_submissions_status", table_name="submissions")
    op.drop_table("submissions")
