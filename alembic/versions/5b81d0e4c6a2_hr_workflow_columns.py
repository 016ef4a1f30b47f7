"""hr workflow columns

Revision ID: 5b81d0e4c6a2
Revises: 0f3c2a91d7b4
Create Date: 2026-10-18 15:41:07.552913
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "5b81d0e4c6a2"
down_revision: Union[str, None] = "0f3c2a91d7b4"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # batch mode so the foreign keys can be added on SQLite as well
    with op.batch_alter_table("attendance") as batch_op:
        batch_op.add_column(sa.Column("check_in_time", sa.DateTime(timezone=True), nullable=True))
        batch_op.add_column(sa.Column("check_out_time", sa.DateTime(timezone=True), nullable=True))

    with op.batch_alter_table("leave_requests") as batch_op:
        batch_op.add_column(sa.Column("total_days", sa.Numeric(5, 1), nullable=True))
        batch_op.add_column(sa.Column("reason", sa.String(500), nullable=True))
        batch_op.add_column(sa.Column("applied_date", sa.Date(), nullable=True))
        batch_op.add_column(sa.Column("reviewed_by", sa.Uuid(), nullable=True))
        batch_op.add_column(sa.Column("reviewed_date", sa.DateTime(timezone=True), nullable=True))
        batch_op.add_column(sa.Column("reviewer_comments", sa.String(500), nullable=True))
        batch_op.create_foreign_key(
            "fk_leave_requests_reviewed_by",
            "employees",
            ["reviewed_by"],
            ["employee_id"],
            ondelete="SET NULL",
        )

    with op.batch_alter_table("payroll") as batch_op:
        batch_op.add_column(sa.Column("payment_method", sa.String(30), nullable=True))
        batch_op.add_column(sa.Column("transaction_reference", sa.String(100), nullable=True))
        batch_op.add_column(sa.Column("payment_date", sa.Date(), nullable=True))

    with op.batch_alter_table("performance_reviews") as batch_op:
        batch_op.add_column(sa.Column("reviewer_id", sa.Uuid(), nullable=True))
        batch_op.add_column(sa.Column("comments", sa.String(1000), nullable=True))
        batch_op.create_foreign_key(
            "fk_performance_reviews_reviewer_id",
            "employees",
            ["reviewer_id"],
            ["employee_id"],
            ondelete="SET NULL",
        )

    with op.batch_alter_table("performance_goals") as batch_op:
        batch_op.add_column(sa.Column("description", sa.String(1000), nullable=True))
        batch_op.add_column(sa.Column("target_date", sa.Date(), nullable=True))
        batch_op.add_column(sa.Column("completion_date", sa.Date(), nullable=True))

    with op.batch_alter_table("applications") as batch_op:
        batch_op.add_column(sa.Column("current_stage", sa.String(50), nullable=True))
        batch_op.add_column(sa.Column("notes", sa.String(1000), nullable=True))


def downgrade() -> None:
    with op.batch_alter_table("applications") as batch_op:
        batch_op.drop_column("notes")
        batch_op.drop_column("current_stage")

    with op.batch_alter_table("performance_goals") as batch_op:
        batch_op.drop_column("completion_date")
        batch_op.drop_column("target_date")
        batch_op.drop_column("description")

    with op.batch_alter_table("performance_reviews") as batch_op:
        batch_op.drop_constraint("fk_performance_reviews_reviewer_id", type_="foreignkey")
        batch_op.drop_column("comments")
        batch_op.drop_column("reviewer_id")

    with op.batch_alter_table("payroll") as batch_op:
        batch_op.drop_column("payment_date")
        batch_op.drop_column("transaction_reference")
        batch_op.drop_column("payment_method")

    with op.batch_alter_table("leave_requests") as batch_op:
        batch_op.drop_constraint("fk_leave_requests_reviewed_by", type_="foreignkey")
        batch_op.drop_column("reviewer_comments")
        batch_op.drop_column("reviewed_date")
        batch_op.drop_column("reviewed_by")
        batch_op.drop_column("applied_date")
        batch_op.drop_column("reason")
        batch_op.drop_column("total_days")

    with op.batch_alter_table("attendance") as batch_op:
        batch_op.drop_column("check_out_time")
        batch_op.drop_column("check_in_time")
