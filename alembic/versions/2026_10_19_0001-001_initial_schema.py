"""initial schema

Revision ID: 001
Revises:
Create Date: 2026-10-19

All 3 tables as defined in app/models/database_models.py:
accounts, templates, sows.
"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    # ── accounts ──────────────────────────────────────────────────────────
    op.create_table(
        "accounts",
        sa.Column("id", sa.Integer, primary_key=True, index=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("company", sa.String(255), nullable=True),
        sa.Column("account_contact", sa.String(255), nullable=True),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("phone", sa.String(64), nullable=True),
        sa.Column("address", sa.Text, nullable=True),
        sa.Column("notes", sa.Text, nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )

    # ── templates ─────────────────────────────────────────────────────────
    op.create_table(
        "templates",
        sa.Column("id", sa.Integer, primary_key=True, index=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("file_path", sa.String(512), nullable=False),
        sa.Column("file_type", sa.String(16), nullable=False),
        sa.Column("content", sa.Text, nullable=True),
        sa.Column("uploaded_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )

    # ── sows ──────────────────────────────────────────────────────────────
    op.create_table(
        "sows",
        sa.Column("id", sa.Integer, primary_key=True, index=True),
        sa.Column(
            "account_id", sa.Integer,
            sa.ForeignKey("accounts.id", ondelete="CASCADE"), nullable=False, index=True,
        ),
        sa.Column(
            "template_id", sa.Integer,
            sa.ForeignKey("templates.id", ondelete="SET NULL"), nullable=True, index=True,
        ),
        sa.Column("project_notes", sa.Text, nullable=False),
        sa.Column("deliverables", sa.Text, nullable=False),
        sa.Column("content", sa.Text, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )


def downgrade() -> None:
    op.drop_table("sows")
    op.drop_table("templates")
    op.drop_table("accounts")
