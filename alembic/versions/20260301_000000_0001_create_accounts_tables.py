"""Create accounts tables read by roommate matching

Revision ID: 0001
Revises:
Create Date: 2026-03-01 00:00:00.000000

"""
from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create universities and users."""
    op.execute("CREATE TYPE gender_enum AS ENUM ('male', 'female', 'other')")
    op.execute("CREATE TYPE user_role_enum AS ENUM ('student', 'landlord', 'admin')")

    op.create_table(
        "universities",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("city", sa.String(100), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )

    op.create_table(
        "users",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("email", sa.String(255), nullable=False, unique=True),
        sa.Column("first_name", sa.String(100), nullable=False),
        sa.Column("last_name", sa.String(100), nullable=False),
        sa.Column("avatar_url", sa.Text(), nullable=True),
        sa.Column(
            "gender",
            postgresql.ENUM("male", "female", "other", name="gender_enum", create_type=False),
            nullable=True,
        ),
        sa.Column(
            "role",
            postgresql.ENUM("student", "landlord", "admin", name="user_role_enum", create_type=False),
            nullable=False,
            server_default="student",
        ),
        sa.Column("university_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("is_blocked", sa.Boolean(), nullable=False, server_default="false"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(["university_id"], ["universities.id"], ondelete="SET NULL"),
    )
    op.create_index("idx_users_role", "users", ["role"])


def downgrade() -> None:
    """Drop accounts tables and enum types."""
    op.drop_table("users")
    op.drop_table("universities")

    op.execute("DROP TYPE IF EXISTS user_role_enum")
    op.execute("DROP TYPE IF EXISTS gender_enum")
