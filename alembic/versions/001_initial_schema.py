"""Initial schema: users, projects, judge assignments and audit log.

Revision ID: 001
Revises:
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

LEVELS = ("Sub-County", "County", "Regional", "National")


def upgrade() -> None:
    # Create users table
    op.create_table(
        "users",
        sa.Column("id", sa.Uuid(as_uuid=True), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column(
            "role",
            sa.Enum(
                "Super Admin",
                "National Admin",
                "Regional Admin",
                "County Admin",
                "Sub-County Admin",
                "Judge",
                "Coordinator",
                "Patron",
                name="user_role",
            ),
            nullable=False,
        ),
        sa.Column("api_key_hash", sa.String(64), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, default=True),
        sa.Column("school", sa.String(255), nullable=True),
        sa.Column("region", sa.String(100), nullable=True),
        sa.Column("county", sa.String(100), nullable=True),
        sa.Column("sub_county", sa.String(100), nullable=True),
        sa.Column("zone", sa.String(100), nullable=True),
        sa.Column("coordinated_category", sa.String(100), nullable=True),
        sa.Column("last_active_at", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("email"),
        sa.UniqueConstraint("api_key_hash"),
    )
    op.create_index("ix_users_email", "users", ["email"])

    # Create projects table
    op.create_table(
        "projects",
        sa.Column("id", sa.Uuid(as_uuid=True), nullable=False),
        sa.Column("title", sa.String(500), nullable=False),
        sa.Column("registration_number", sa.String(50), nullable=False),
        sa.Column("category", sa.String(100), nullable=False),
        sa.Column("students", postgresql.JSONB(), nullable=False, default=[]),
        sa.Column("school", sa.String(255), nullable=False),
        sa.Column("zone", sa.String(100), nullable=False),
        sa.Column("sub_county", sa.String(100), nullable=False),
        sa.Column("county", sa.String(100), nullable=False),
        sa.Column("region", sa.String(100), nullable=False),
        sa.Column("patron_id", sa.Uuid(as_uuid=True), nullable=True),
        sa.Column(
            "status",
            sa.Enum(
                "Not Started",
                "In Progress",
                "Completed",
                "Review Pending",
                "Waiting for Judging",
                name="project_status",
            ),
            nullable=False,
        ),
        sa.Column("current_level", sa.Enum(*LEVELS, name="competition_level"), nullable=False),
        sa.Column("is_eliminated", sa.Boolean(), nullable=False, default=False),
        sa.Column("override_score_a", sa.Numeric(precision=5, scale=2), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["patron_id"], ["users.id"]),
        sa.UniqueConstraint("registration_number"),
    )
    op.create_index("ix_projects_title", "projects", ["title"])
    op.create_index("ix_projects_category", "projects", ["category"])
    op.create_index("ix_projects_school", "projects", ["school"])
    op.create_index("ix_projects_patron_id", "projects", ["patron_id"])

    # Create judge_assignments table
    op.create_table(
        "judge_assignments",
        sa.Column("id", sa.Uuid(as_uuid=True), nullable=False),
        sa.Column("project_id", sa.Uuid(as_uuid=True), nullable=False),
        sa.Column("judge_id", sa.Uuid(as_uuid=True), nullable=False),
        sa.Column("section", sa.Enum("Part A", "Part B & C", name="judging_section"), nullable=False),
        sa.Column(
            "status",
            sa.Enum("Not Started", "In Progress", "Completed", name="assignment_status"),
            nullable=False,
        ),
        sa.Column("state", sa.Enum("active", "archived", name="assignment_state"), nullable=False),
        sa.Column("score", sa.Numeric(precision=5, scale=2), nullable=True),
        sa.Column("score_breakdown", postgresql.JSONB(), nullable=True),
        sa.Column("comments", sa.Text(), nullable=True),
        sa.Column("recommendations", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["project_id"], ["projects.id"]),
        sa.ForeignKeyConstraint(["judge_id"], ["users.id"]),
    )
    op.create_index("ix_judge_assignments_project_id", "judge_assignments", ["project_id"])
    op.create_index("ix_judge_assignments_judge_id", "judge_assignments", ["judge_id"])
    op.create_index("ix_assignment_project_section", "judge_assignments", ["project_id", "section"])
    op.create_index("ix_assignment_judge_state", "judge_assignments", ["judge_id", "state"])

    # Create audit_logs table
    op.create_table(
        "audit_logs",
        sa.Column("id", sa.Uuid(as_uuid=True), nullable=False),
        sa.Column(
            "action",
            sa.Enum(
                "publish_results",
                "resolve_tie",
                "arbitration_score",
                "reassign_judge",
                name="audit_action",
            ),
            nullable=False,
        ),
        sa.Column("performing_user_id", sa.Uuid(as_uuid=True), nullable=False),
        sa.Column("target", sa.String(500), nullable=True),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("level", sa.String(50), nullable=True),
        sa.Column("region", sa.String(100), nullable=True),
        sa.Column("county", sa.String(100), nullable=True),
        sa.Column("sub_county", sa.String(100), nullable=True),
        sa.Column("details", postgresql.JSONB(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["performing_user_id"], ["users.id"]),
    )
    op.create_index("ix_audit_logs_performing_user_id", "audit_logs", ["performing_user_id"])


def downgrade() -> None:
    op.drop_table("audit_logs")
    op.drop_table("judge_assignments")
    op.drop_table("projects")
    op.drop_table("users")
    op.execute("DROP TYPE IF EXISTS audit_action")
    op.execute("DROP TYPE IF EXISTS assignment_state")
    op.execute("DROP TYPE IF EXISTS assignment_status")
    op.execute("DROP TYPE IF EXISTS judging_section")
    op.execute("DROP TYPE IF EXISTS competition_level")
    op.execute("DROP TYPE IF EXISTS project_status")
    op.execute("DROP TYPE IF EXISTS user_role")
