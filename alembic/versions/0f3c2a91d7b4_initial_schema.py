"""initial schema

Revision ID: 0f3c2a91d7b4
Revises:
Create Date: 2026-10-18 09:12:40.118204
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "0f3c2a91d7b4"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # identity provider
    op.create_table(
        "auth_identities",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("email", sa.String(320), nullable=False),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("user_metadata", sa.JSON(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_auth_identities_email", "auth_identities", ["email"], unique=True)

    op.create_table(
        "auth_sessions",
        sa.Column("access_token", sa.String(128), primary_key=True),
        sa.Column("refresh_token", sa.String(128), nullable=False),
        sa.Column(
            "identity_id",
            sa.Uuid(),
            sa.ForeignKey("auth_identities.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("revoked_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_auth_sessions_refresh_token", "auth_sessions", ["refresh_token"], unique=True)
    op.create_index("ix_auth_sessions_identity_id", "auth_sessions", ["identity_id"])

    # portal
    op.create_table(
        "users",
        sa.Column("user_id", sa.Uuid(), primary_key=True),
        sa.Column("email", sa.String(320), nullable=False),
        sa.Column("role", sa.String(20), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("last_login", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_users_email", "users", ["email"])

    op.create_table(
        "departments",
        sa.Column("department_id", sa.Uuid(), primary_key=True),
        sa.Column("department_name", sa.String(150), nullable=False, unique=True),
    )

    op.create_table(
        "positions",
        sa.Column("position_id", sa.Uuid(), primary_key=True),
        sa.Column("position_title", sa.String(150), nullable=False),
        sa.Column(
            "department_id",
            sa.Uuid(),
            sa.ForeignKey("departments.department_id", ondelete="SET NULL"),
            nullable=True,
        ),
    )

    op.create_table(
        "employees",
        sa.Column("employee_id", sa.Uuid(), primary_key=True),
        sa.Column(
            "user_id",
            sa.Uuid(),
            sa.ForeignKey("users.user_id", ondelete="SET NULL"),
            nullable=True,
            unique=True,
        ),
        sa.Column("first_name", sa.String(100), nullable=False),
        sa.Column("last_name", sa.String(100), nullable=False),
        sa.Column("employee_code", sa.String(50), nullable=False),
        sa.Column("join_date", sa.Date(), nullable=False),
        sa.Column("employment_status", sa.String(20), nullable=False),
        sa.Column(
            "department_id",
            sa.Uuid(),
            sa.ForeignKey("departments.department_id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column(
            "position_id",
            sa.Uuid(),
            sa.ForeignKey("positions.position_id", ondelete="SET NULL"),
            nullable=True,
        ),
    )
    op.create_index("ix_employees_employee_code", "employees", ["employee_code"], unique=True)

    op.create_table(
        "attendance",
        sa.Column("attendance_id", sa.Uuid(), primary_key=True),
        sa.Column(
            "employee_id",
            sa.Uuid(),
            sa.ForeignKey("employees.employee_id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("status", sa.String(20), nullable=False),
        sa.Column("hours_worked", sa.Numeric(5, 2), nullable=True),
        sa.UniqueConstraint("employee_id", "date", name="uq_attendance_employee_date"),
    )
    op.create_index("ix_attendance_employee_id", "attendance", ["employee_id"])
    op.create_index("ix_attendance_date", "attendance", ["date"])

    op.create_table(
        "leave_balances",
        sa.Column("balance_id", sa.Uuid(), primary_key=True),
        sa.Column(
            "employee_id",
            sa.Uuid(),
            sa.ForeignKey("employees.employee_id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("leave_type", sa.String(50), nullable=False),
        sa.Column("year", sa.Integer(), nullable=False),
        sa.Column("available_days", sa.Numeric(5, 1), nullable=True),
    )
    op.create_index("ix_leave_balances_employee_id", "leave_balances", ["employee_id"])

    op.create_table(
        "leave_requests",
        sa.Column("request_id", sa.Uuid(), primary_key=True),
        sa.Column(
            "employee_id",
            sa.Uuid(),
            sa.ForeignKey("employees.employee_id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("leave_type", sa.String(50), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=False),
        sa.Column("status", sa.String(20), nullable=False),
    )
    op.create_index("ix_leave_requests_employee_id", "leave_requests", ["employee_id"])

    op.create_table(
        "performance_reviews",
        sa.Column("review_id", sa.Uuid(), primary_key=True),
        sa.Column(
            "employee_id",
            sa.Uuid(),
            sa.ForeignKey("employees.employee_id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("review_date", sa.Date(), nullable=False),
        sa.Column("overall_rating", sa.Numeric(3, 1), nullable=True),
        sa.Column("status", sa.String(20), nullable=False),
    )
    op.create_index("ix_performance_reviews_employee_id", "performance_reviews", ["employee_id"])

    op.create_table(
        "performance_goals",
        sa.Column("goal_id", sa.Uuid(), primary_key=True),
        sa.Column(
            "employee_id",
            sa.Uuid(),
            sa.ForeignKey("employees.employee_id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("status", sa.String(20), nullable=False),
    )
    op.create_index("ix_performance_goals_employee_id", "performance_goals", ["employee_id"])

    op.create_table(
        "payroll",
        sa.Column("payroll_id", sa.Uuid(), primary_key=True),
        sa.Column(
            "employee_id",
            sa.Uuid(),
            sa.ForeignKey("employees.employee_id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("pay_period_start", sa.Date(), nullable=False),
        sa.Column("pay_period_end", sa.Date(), nullable=False),
        sa.Column("gross_salary", sa.Numeric(12, 2), nullable=True),
        sa.Column("net_salary", sa.Numeric(12, 2), nullable=True),
        sa.Column("status", sa.String(20), nullable=False),
    )
    op.create_index("ix_payroll_employee_id", "payroll", ["employee_id"])

    op.create_table(
        "job_postings",
        sa.Column("job_posting_id", sa.Uuid(), primary_key=True),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("status", sa.String(20), nullable=False),
    )

    op.create_table(
        "applications",
        sa.Column("application_id", sa.Uuid(), primary_key=True),
        sa.Column(
            "job_posting_id",
            sa.Uuid(),
            sa.ForeignKey("job_postings.job_posting_id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("applicant_name", sa.String(200), nullable=False),
        sa.Column("status", sa.String(20), nullable=False),
    )
    op.create_index("ix_applications_job_posting_id", "applications", ["job_posting_id"])


def downgrade() -> None:
    op.drop_table("applications")
    op.drop_table("job_postings")
    op.drop_table("payroll")
    op.drop_table("performance_goals")
    op.drop_table("performance_reviews")
    op.drop_table("leave_requests")
    op.drop_table("leave_balances")
    op.drop_table("attendance")
    op.drop_table("employees")
    op.drop_table("positions")
    op.drop_table("departments")
    op.drop_table("users")
    op.drop_table("auth_sessions")
    op.drop_table("auth_identities")
