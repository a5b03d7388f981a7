"""add is_active to category

Revision ID: 8c41e5b2a9d3
Revises: 3f2a9c1d7b10
Create Date: 2026-10-21 10:15:24.481203

"""

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "8c41e5b2a9d3"
down_revision = "3f2a9c1d7b10"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.add_column(
        "category",
        sa.Column(
            "is_active", sa.Boolean(), nullable=False, server_default=sa.true()
        ),
    )


def downgrade() -> None:
    with op.batch_alter_table("category") as batch_op:
        batch_op.drop_column("is_active")
