"""adventure categories

Revision ID: 0002_adventure_categories
Revises: 0001_initial
Create Date: 2026-10-18
"""

from alembic import op
import sqlalchemy as sa

revision = "0002_adventure_categories"
down_revision = "0001_initial"
branch_labels = None
depends_on = None

def upgrade():
    op.create_table(
        "adventure_categories",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("slug", sa.String(length=200), nullable=False),
        sa.Column("title", sa.String(length=200), nullable=False),
        sa.Column("description", sa.Text(), nullable=False, server_default=""),
        sa.Column("image", sa.String(length=500), nullable=False, server_default=""),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_adventure_categories_slug", "adventure_categories", ["slug"], unique=True)

    with op.batch_alter_table("adventures") as b:
        b.add_column(sa.Column("category_id", sa.String(length=36), nullable=True))
        b.create_index("ix_adventures_category_id", ["category_id"])

def downgrade():
    with op.batch_alter_table("adventures") as b:
        b.drop_index("ix_adventures_category_id")
        b.drop_column("category_id")
    op.drop_index("ix_adventure_categories_slug", table_name="adventure_categories")
    op.drop_table("adventure_categories")
