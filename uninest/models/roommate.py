import enum
import uuid
from datetime import date, datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Any, Optional

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    Date,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from uninest.core.database import BaseModel

if TYPE_CHECKING:
    from uninest.models.university import University
    from uninest.models.user import User

class SleepScheduleEnum(str, enum.Enum):

    EARLY = "early"
    NORMAL = "normal"
    LATE = "late"

class StudyHabitsEnum(str, enum.Enum):

    HOME = "home"
    LIBRARY = "library"
    MIXED = "mixed"

class GuestFrequencyEnum(str, enum.Enum):

    NEVER = "never"
    SOMETIMES = "sometimes"
    OFTEN = "often"

class RoommateMatchStatusEnum(str, enum.Enum):

    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


def canonical_pair(user_a: uuid.UUID, user_b: uuid.UUID) -> tuple[uuid.UUID, uuid.UUID]:
    """Order-independent key for a pair of users."""
    return (user_a, user_b) if user_a.int <= user_b.int else (user_b, user_a)


class RoommateProfile(BaseModel):

    __tablename__ = "roommate_profiles"

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        unique=True,
        nullable=False,
    )
    university_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("universities.id", ondelete="SET NULL"),
        nullable=True,
    )

    min_budget: Mapped[Optional[Decimal]] = mapped_column(
        Numeric(10, 2),
        nullable=True,
    )
    max_budget: Mapped[Optional[Decimal]] = mapped_column(
        Numeric(10, 2),
        nullable=True,
    )

    cleanliness_level: Mapped[Optional[int]] = mapped_column(
        Integer,
        nullable=True,
    )
    noise_level: Mapped[Optional[int]] = mapped_column(
        Integer,
        nullable=True,
    )
    sleep_schedule: Mapped[Optional[SleepScheduleEnum]] = mapped_column(
        Enum(SleepScheduleEnum, name="sleep_schedule_enum", values_callable=lambda x: [e.value for e in x]),
        nullable=True,
    )
    study_habits: Mapped[Optional[StudyHabitsEnum]] = mapped_column(
        Enum(StudyHabitsEnum, name="study_habits_enum", values_callable=lambda x: [e.value for e in x]),
        nullable=True,
    )

    smoking_allowed: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        nullable=False,
    )
    pets_allowed: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        nullable=False,
    )
    guests_allowed: Mapped[GuestFrequencyEnum] = mapped_column(
        Enum(GuestFrequencyEnum, name="guest_frequency_enum", values_callable=lambda x: [e.value for e in x]),
        default=GuestFrequencyEnum.SOMETIMES,
        nullable=False,
    )

    bio: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
    )
    major: Mapped[Optional[str]] = mapped_column(
        String(100),
        nullable=True,
    )
    interests: Mapped[list[str]] = mapped_column(
        JSON,
        default=list,
        nullable=False,
    )
    move_in_date: Mapped[Optional[date]] = mapped_column(
        Date,
        nullable=True,
    )
    preferred_areas: Mapped[list[str]] = mapped_column(
        JSON,
        default=list,
        nullable=False,
    )

    # Per-criterion weights 1-5. Persisted for personalization, not read by the scorer.
    matching_priorities: Mapped[Optional[dict[str, Any]]] = mapped_column(
        JSON,
        nullable=True,
    )

    is_active: Mapped[bool] = mapped_column(
        Boolean,
        default=True,
        nullable=False,
    )

    user: Mapped["User"] = relationship(
        "User",
        lazy="selectin",
    )
    university: Mapped[Optional["University"]] = relationship(
        "University",
        lazy="selectin",
    )

    __table_args__ = (
        CheckConstraint(
            "cleanliness_level IS NULL OR (cleanliness_level >= 1 AND cleanliness_level <= 5)",
            name="check_cleanliness_level_range",
        ),
        CheckConstraint(
            "noise_level IS NULL OR (noise_level >= 1 AND noise_level <= 5)",
            name="check_noise_level_range",
        ),
        Index("idx_roommate_profiles_active", "is_active"),
        Index("idx_roommate_profiles_university_id", "university_id"),
    )

    def __repr__(self) -> str:
        return f"<RoommateProfile(user_id={self.user_id}, is_active={self.is_active})>"


class RoommateMatch(BaseModel):

    __tablename__ = "roommate_matches"

    requester_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    target_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )

    # Canonical pair key: (min, max) of the two user ids.
    pair_low_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        nullable=False,
    )
    pair_high_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        nullable=False,
    )

    compatibility_score: Mapped[Optional[int]] = mapped_column(
        Integer,
        nullable=True,
    )

    status: Mapped[RoommateMatchStatusEnum] = mapped_column(
        Enum(
            RoommateMatchStatusEnum,
            name="roommate_match_status_enum",
            values_callable=lambda x: [e.value for e in x],
        ),
        default=RoommateMatchStatusEnum.PENDING,
        nullable=False,
    )
    message: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
    )
    responded_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    requester: Mapped["User"] = relationship(
        "User",
        foreign_keys=[requester_id],
        lazy="selectin",
    )
    target: Mapped["User"] = relationship(
        "User",
        foreign_keys=[target_id],
        lazy="selectin",
    )

    __table_args__ = (
        CheckConstraint(
            "compatibility_score IS NULL OR (compatibility_score >= 0 AND compatibility_score <= 100)",
            name="check_compatibility_score_range",
        ),
        CheckConstraint("requester_id <> target_id", name="check_no_self_match"),
        UniqueConstraint("pair_low_id", "pair_high_id", name="uq_roommate_match_pair"),
        Index("idx_roommate_matches_requester_id", "requester_id"),
        Index("idx_roommate_matches_target_id", "target_id"),
        Index("idx_roommate_matches_status", "status"),
    )

    def involves(self, user_id: uuid.UUID) -> bool:
        return user_id in (self.requester_id, self.target_id)

    def counterpart_id(self, user_id: uuid.UUID) -> uuid.UUID:
        return self.target_id if user_id == self.requester_id else self.requester_id

    def __repr__(self) -> str:
        return (
            f"<RoommateMatch(id={self.id}, score={self.compatibility_score}, "
            f"status={self.status})>"
        )
