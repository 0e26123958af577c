"""Add content_multicat bridge table

Revision ID: 5c1e8a2d4b7f
Revises: initial_schema
Create Date: 2026-10-19 09:30:12.418207

"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "5c1e8a2d4b7f"
down_revision = "initial_schema"
branch_labels = None
depends_on = None


def upgrade() -> None:
    # Additional categories per content item; rows are replaced wholesale on save
    op.create_table(
        "content_multicat",
        sa.Column("content_id", sa.Integer(), nullable=False),
        sa.Column("category_id", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(["content_id"], ["articles.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(
            ["category_id"], ["categories.id"], ondelete="CASCADE"
        ),
        sa.PrimaryKeyConstraint("content_id", "category_id"),
    )
    op.create_index(
        "ix_content_multicat_category_id",
        "content_multicat",
        ["category_id"],
        unique=False,
    )


def downgrade() -> None:
    op.drop_index("ix_content_multicat_category_id", table_name="content_multicat")
    op.drop_table("content_multicat")
