"""add substitution overlap exclusion constraint

Revision ID: 20261018_0002
Revises: 20261018_0001
Create Date: 2026-10-18 00:00:01.000000

"""
from alembic import op

revision = "20261018_0002"
down_revision = "20261018_0001"
branch_labels = None
depends_on = None


def upgrade() -> None:
    if op.get_bind().dialect.name != "postgresql":
        return
    op.execute("CREATE EXTENSION IF NOT EXISTS btree_gist")
    op.execute(
        "ALTER TABLE faculty_substitutions "
        "ADD CONSTRAINT faculty_substitutions_no_overlap "
        "EXCLUDE USING gist (batch_id WITH =, daterange(start_date, end_date, '[]') WITH &&)"
    )


def downgrade() -> None:
    if op.get_bind().dialect.name != "postgresql":
        return
    op.execute("ALTER TABLE faculty_substitutions DROP CONSTRAINT IF EXISTS faculty_substitutions_no_overlap")
