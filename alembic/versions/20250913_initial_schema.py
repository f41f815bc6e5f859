"""accounts, profiles, user roles, hazard reports, alerts

Revision ID: 20250913_initial_schema
Revises:
Create Date: 2025-09-13 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

revision = "20250913_initial_schema"
down_revision = None
branch_labels = None
depends_on = None

HAZARD_TYPES = (
    "Coastal Flooding", "High Waves", "Storm Surge", "Erosion",
    "Tsunami Warning", "Strong Winds", "Other",
)

def _ts(name):
    return sa.Column(name, sa.DateTime(timezone=True), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=False)

def upgrade():
    op.create_table(
        "accounts",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("email", sa.String(255), nullable=False, unique=True),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        _ts("created_at"),
    )
    op.create_index("ix_accounts_email", "accounts", ["email"])

    op.create_table(
        "profiles",
        sa.Column("id", sa.Uuid(), sa.ForeignKey("accounts.id", ondelete="CASCADE"), primary_key=True),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("full_name", sa.String(255), nullable=True),
        _ts("created_at"),
        _ts("updated_at"),
    )

    op.create_table(
        "user_roles",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("user_id", sa.Uuid(), sa.ForeignKey("accounts.id", ondelete="CASCADE"), nullable=False),
        sa.Column("role", sa.Enum("citizen", "authority", "admin", name="user_role", native_enum=False), nullable=False, server_default="citizen"),
        _ts("created_at"),
        _ts("updated_at"),
        sa.UniqueConstraint("user_id", "role", name="uq_user_roles_user_role"),
    )
    op.create_index("ix_user_roles_user_id", "user_roles", ["user_id"])

    op.create_table(
        "hazard_reports",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("user_id", sa.Uuid(), sa.ForeignKey("accounts.id", ondelete="CASCADE"), nullable=False),
        sa.Column("hazard_type", sa.Enum(*HAZARD_TYPES, name="hazard_type", native_enum=False), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("location", sa.Text(), nullable=False),
        sa.Column("latitude", sa.Float(), nullable=True),
        sa.Column("longitude", sa.Float(), nullable=True),
        sa.Column("contact_number", sa.String(64), nullable=True),
        sa.Column("image_url", sa.Text(), nullable=True),
        sa.Column("urgency", sa.Enum("low", "medium", "high", name="urgency", native_enum=False), nullable=False, server_default="medium"),
        sa.Column("status", sa.Enum("submitted", "under_review", "resolved", "dismissed", name="report_status", native_enum=False), nullable=False, server_default="submitted"),
        sa.Column("credibility_score", sa.Numeric(3, 2), nullable=False, server_default="0.50"),
        _ts("created_at"),
        _ts("updated_at"),
        sa.CheckConstraint("credibility_score >= 0 AND credibility_score <= 1", name="ck_hazard_reports_score_range"),
    )
    op.create_index("ix_hazard_reports_user_id", "hazard_reports", ["user_id"])
    op.create_index("ix_hazard_reports_status", "hazard_reports", ["status"])
    op.create_index("ix_hazard_reports_created_at", "hazard_reports", ["created_at"])
    op.create_index("ix_hazard_reports_coordinates", "hazard_reports", ["latitude", "longitude"])

    op.create_table(
        "alerts",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("report_id", sa.Uuid(), sa.ForeignKey("hazard_reports.id", ondelete="SET NULL"), nullable=True),
        sa.Column("alert_message", sa.Text(), nullable=False),
        sa.Column("sent_to", sa.String(64), nullable=True),
        sa.Column("sender_id", sa.Uuid(), sa.ForeignKey("accounts.id"), nullable=False),
        _ts("created_at"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
    )
    op.create_index("ix_alerts_report_id", "alerts", ["report_id"])
    op.create_index("ix_alerts_sender_id", "alerts", ["sender_id"])
    op.create_index("ix_alerts_created_at", "alerts", ["created_at"])

    op.create_table(
        "refresh_tokens",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("user_id", sa.Uuid(), sa.ForeignKey("accounts.id", ondelete="CASCADE"), nullable=False),
        sa.Column("token_hash", sa.String(128), nullable=False, unique=True),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("revoked", sa.Boolean(), nullable=False, server_default=sa.false()),
        _ts("created_at"),
    )
    op.create_index("ix_refresh_tokens_user_id", "refresh_tokens", ["user_id"])

    # system_settings (single row, id=1)
    op.create_table(
        "system_settings",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("telegram_enabled", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("telegram_chat_id", sa.String(255), nullable=True),
        _ts("updated_at"),
    )
    op.execute("INSERT INTO system_settings (id, telegram_enabled) VALUES (1, true)")

def downgrade():
    op.drop_table("system_settings")
    op.drop_index("ix_refresh_tokens_user_id", table_name="refresh_tokens")
    op.drop_table("refresh_tokens")
    op.drop_index("ix_alerts_created_at", table_name="alerts")
    op.drop_index("ix_alerts_sender_id", table_name="alerts")
    op.drop_index("ix_alerts_report_id", table_name="alerts")
    op.drop_table("alerts")
    op.drop_index("ix_hazard_reports_coordinates", table_name="hazard_reports")
    op.drop_index("ix_hazard_reports_created_at", table_name="hazard_reports")
    op.drop_index("ix_hazard_reports_status", table_name="hazard_reports")
    op.drop_index("ix_hazard_reports_user_id", table_name="hazard_reports")
    op.drop_table("hazard_reports")
    op.drop_index("ix_user_roles_user_id", table_name="user_roles")
    op.drop_table("user_roles")
    op.drop_table("profiles")
    op.drop_index("ix_accounts_email", table_name="accounts")
    op.drop_table("accounts")
