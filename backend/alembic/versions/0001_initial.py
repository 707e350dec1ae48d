"""inquiries and visits

Revision ID: 0001_initial
Revises: 
Create Date: 2025-01-01 00:00:00
"""
from alembic import op
import sqlalchemy as sa

revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "inquiries",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("phone", sa.String(length=20), nullable=False),
        sa.Column("postcode", sa.String(length=10), nullable=False),
        sa.Column("email", sa.String(length=255)),
        sa.Column("selected_model", sa.String(length=16)),
        sa.Column("ref", sa.String(length=50)),
        sa.Column("epc", sa.String(length=5)),
        sa.Column("source", sa.String(length=50)),
        sa.Column("notes", sa.Text()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_inquiries_created_at", "inquiries", ["created_at"])
    op.create_index("ix_inquiries_ref", "inquiries", ["ref"])

    op.create_table(
        "visits",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("ref", sa.String(length=50)),
        sa.Column("epc", sa.String(length=5)),
        sa.Column("page", sa.String(length=50), nullable=False),
        sa.Column("user_agent", sa.String(length=1024)),
        sa.Column("ip", sa.String(length=45)),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_visits_page_created_at", "visits", ["page", "created_at"])


def downgrade() -> None:
    op.drop_index("ix_visits_page_created_at", table_name="visits")
    op.drop_table("visits")
    op.drop_index("ix_inquiries_ref", table_name="inquiries")
    op.drop_index("ix_inquiries_created_at", table_name="inquiries")
    op.drop_table("inquiries")
