"""Initial schema - principal directory, permission, permission_event.

Revision ID: 001
Revises:
Create Date: 2026-10-16

"""

from collections.abc import Sequence

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "principal",
        sa.Column("name", sa.String(32), primary_key=True),
        sa.Column("display_name", sa.String(255), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )

    op.create_table(
        "permission",
        sa.Column("id", sa.UUID(), primary_key=True),
        sa.Column("principal", sa.String(32), nullable=False),
        sa.Column("host", sa.String(64), nullable=False),
        sa.Column("resource", sa.String(129), nullable=False),
        sa.Column("privilege_kind", sa.String(20), nullable=False),
        sa.Column("start_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("end_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("status", sa.String(20), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("created_by", sa.String(255), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("approved_by", sa.String(255), nullable=True),
        sa.Column("approved_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("revoked_by", sa.String(255), nullable=True),
        sa.Column("revoked_at", sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint("end_time > start_time", name="ck_permission_time_range"),
        sa.CheckConstraint(
            "privilege_kind IN ('READ', 'WRITE', 'DELETE', 'EXECUTE', 'ADMIN')",
            name="ck_permission_privilege_kind",
        ),
        sa.CheckConstraint(
            "status IN ('PENDING', 'APPROVED', 'ACTIVE', 'EXPIRED', 'REVOKED')",
            name="ck_permission_status",
        ),
    )
    op.create_index("ix_permission_principal", "permission", ["principal"])
    op.create_index("ix_permission_status_end_time", "permission", ["status", "end_time"])

    op.create_table(
        "permission_event",
        sa.Column("id", sa.UUID(), primary_key=True),
        sa.Column(
            "permission_id",
            sa.UUID(),
            sa.ForeignKey("permission.id"),
            nullable=False,
        ),
        sa.Column("kind", sa.String(20), nullable=False),
        sa.Column("actor", sa.String(255), nullable=False),
        sa.Column("detail", sa.Text(), nullable=False),
        sa.Column("event_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_permission_event_permission_id", "permission_event", ["permission_id"])
    op.create_index("ix_permission_event_event_time", "permission_event", ["event_time"])


def downgrade() -> None:
    op.drop_index("ix_permission_event_event_time", table_name="permission_event")
    op.drop_index("ix_permission_event_permission_id", table_name="permission_event")
    op.drop_table("permission_event")
    op.drop_index("ix_permission_status_end_time", table_name="permission")
    op.drop_index("ix_permission_principal", table_name="permission")
    op.drop_table("permission")
    op.drop_table("principal")
