"""Create roommate profiles, matches and notifications

Revision ID: 0002
Revises: 0001
Create Date: 2026-03-01 00:00:01.000000

"""
from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "0002"
down_revision: Union[str, None] = "0001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create roommate tables."""
    op.execute("CREATE TYPE sleep_schedule_enum AS ENUM ('early', 'normal', 'late')")
    op.execute("CREATE TYPE study_habits_enum AS ENUM ('home', 'library', 'mixed')")
    op.execute("CREATE TYPE guest_frequency_enum AS ENUM ('never', 'sometimes', 'often')")
    op.execute("CREATE TYPE roommate_match_status_enum AS ENUM ('pending', 'accepted', 'rejected')")

    op.create_table(
        "roommate_profiles",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), nullable=False, unique=True),
        sa.Column("university_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("min_budget", sa.Numeric(10, 2), nullable=True),
        sa.Column("max_budget", sa.Numeric(10, 2), nullable=True),
        sa.Column("cleanliness_level", sa.Integer(), nullable=True),
        sa.Column("noise_level", sa.Integer(), nullable=True),
        sa.Column(
            "sleep_schedule",
            postgresql.ENUM("early", "normal", "late", name="sleep_schedule_enum", create_type=False),
            nullable=True,
        ),
        sa.Column(
            "study_habits",
            postgresql.ENUM("home", "library", "mixed", name="study_habits_enum", create_type=False),
            nullable=True,
        ),
        sa.Column("smoking_allowed", sa.Boolean(), nullable=False, server_default="false"),
        sa.Column("pets_allowed", sa.Boolean(), nullable=False, server_default="false"),
        sa.Column(
            "guests_allowed",
            postgresql.ENUM("never", "sometimes", "often", name="guest_frequency_enum", create_type=False),
            nullable=False,
            server_default="sometimes",
        ),
        sa.Column("bio", sa.Text(), nullable=True),
        sa.Column("major", sa.String(100), nullable=True),
        sa.Column("interests", sa.JSON(), nullable=False, server_default="[]"),
        sa.Column("move_in_date", sa.Date(), nullable=True),
        sa.Column("preferred_areas", sa.JSON(), nullable=False, server_default="[]"),
        sa.Column("matching_priorities", sa.JSON(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default="true"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["university_id"], ["universities.id"], ondelete="SET NULL"),
        sa.CheckConstraint(
            "cleanliness_level IS NULL OR (cleanliness_level >= 1 AND cleanliness_level <= 5)",
            name="check_cleanliness_level_range",
        ),
        sa.CheckConstraint(
            "noise_level IS NULL OR (noise_level >= 1 AND noise_level <= 5)",
            name="check_noise_level_range",
        ),
    )
    op.create_index("idx_roommate_profiles_active", "roommate_profiles", ["is_active"])
    op.create_index("idx_roommate_profiles_university_id", "roommate_profiles", ["university_id"])

    op.create_table(
        "roommate_matches",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("requester_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("target_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("pair_low_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("pair_high_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("compatibility_score", sa.Integer(), nullable=True),
        sa.Column(
            "status",
            postgresql.ENUM(
                "pending", "accepted", "rejected",
                name="roommate_match_status_enum", create_type=False
            ),
            nullable=False,
            server_default="pending",
        ),
        sa.Column("message", sa.Text(), nullable=True),
        sa.Column("responded_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(["requester_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["target_id"], ["users.id"], ondelete="CASCADE"),
        sa.CheckConstraint(
            "compatibility_score IS NULL OR (compatibility_score >= 0 AND compatibility_score <= 100)",
            name="check_compatibility_score_range",
        ),
        sa.CheckConstraint("requester_id <> target_id", name="check_no_self_match"),
        sa.UniqueConstraint("pair_low_id", "pair_high_id", name="uq_roommate_match_pair"),
    )
    op.create_index("idx_roommate_matches_requester_id", "roommate_matches", ["requester_id"])
    op.create_index("idx_roommate_matches_target_id", "roommate_matches", ["target_id"])
    op.create_index("idx_roommate_matches_status", "roommate_matches", ["status"])

    op.create_table(
        "notifications",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("related_entity_type", sa.String(50), nullable=True),
        sa.Column("related_entity_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("action_url", sa.String(255), nullable=True),
        sa.Column("is_read", sa.Boolean(), nullable=False, server_default="false"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
    )
    op.create_index("idx_notifications_user_id", "notifications", ["user_id"])
    op.create_index(
        "idx_notifications_related_entity",
        "notifications",
        ["related_entity_type", "related_entity_id"],
    )


def downgrade() -> None:
    """Drop roommate tables and enum types."""
    op.drop_table("notifications")
    op.drop_table("roommate_matches")
    op.drop_table("roommate_profiles")

    op.execute("DROP TYPE IF EXISTS roommate_match_status_enum")
    op.execute("DROP TYPE IF EXISTS guest_frequency_enum")
    op.execute("DROP TYPE IF EXISTS study_habits_enum")
    op.execute("DROP TYPE IF EXISTS sleep_schedule_enum")
