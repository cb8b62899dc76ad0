from datetime import date, datetime
from decimal import Decimal
from typing import Any
from uuid import UUID

from pydantic import Field

from uninest.models.roommate import (
    GuestFrequencyEnum,
    RoommateMatchStatusEnum,
    SleepScheduleEnum,
    StudyHabitsEnum,
)
from uninest.models.user import GenderEnum
from uninest.schemas.common import BaseSchema, IDSchema, IDTimestampSchema

class UniversitySummary(IDSchema):


    name: str
    city: str

class UserSummary(IDSchema):


    first_name: str
    last_name: str
    avatar_url: str | None = None
    gender: GenderEnum | None = None
    university: UniversitySummary | None = None

class ProfileUpsertRequest(BaseSchema):
    """
    Full replacement of the caller's roommate profile.

    Levels, budgets and priorities are range-checked by the profile service
    so their errors carry field-specific messages.
    """

    university_id: UUID | None = None
    min_budget: Decimal | None = None
    max_budget: Decimal | None = None
    cleanliness_level: int | None = None
    noise_level: int | None = None
    sleep_schedule: SleepScheduleEnum | None = None
    study_habits: StudyHabitsEnum | None = None
    smoking_allowed: bool = False
    pets_allowed: bool = False
    guests_allowed: GuestFrequencyEnum | None = None
    bio: str | None = Field(default=None, max_length=2000)
    major: str | None = Field(default=None, max_length=100)
    interests: list[str] = Field(default_factory=list)
    move_in_date: date | None = None
    preferred_areas: list[str] = Field(default_factory=list)
    matching_priorities: dict[str, Any] | None = None
    is_active: bool | None = None

class ProfileResponse(IDTimestampSchema):


    user_id: UUID
    university_id: UUID | None = None
    min_budget: Decimal | None = None
    max_budget: Decimal | None = None
    cleanliness_level: int | None = None
    noise_level: int | None = None
    sleep_schedule: SleepScheduleEnum | None = None
    study_habits: StudyHabitsEnum | None = None
    smoking_allowed: bool
    pets_allowed: bool
    guests_allowed: GuestFrequencyEnum
    bio: str | None = None
    major: str | None = None
    interests: list[str] = Field(default_factory=list)
    move_in_date: date | None = None
    preferred_areas: list[str] = Field(default_factory=list)
    matching_priorities: dict[str, Any] | None = None
    is_active: bool
    university: UniversitySummary | None = None

class PublicProfileSummary(IDSchema):
    """What other students see of a profile: the matching criteria and the free-text fields."""

    user_id: UUID
    min_budget: Decimal | None = None
    max_budget: Decimal | None = None
    cleanliness_level: int | None = None
    noise_level: int | None = None
    sleep_schedule: SleepScheduleEnum | None = None
    study_habits: StudyHabitsEnum | None = None
    smoking_allowed: bool
    pets_allowed: bool
    guests_allowed: GuestFrequencyEnum
    bio: str | None = None
    major: str | None = None
    interests: list[str] = Field(default_factory=list)
    move_in_date: date | None = None
    preferred_areas: list[str] = Field(default_factory=list)

class SearchResultItem(BaseSchema):


    profile: PublicProfileSummary
    user: UserSummary
    compatibility_score: int | None = Field(default=None, ge=0, le=100)
    same_major: bool = False

class MatchCreateRequest(BaseSchema):


    message: str | None = None

class MatchRespondRequest(BaseSchema):


    status: str

class MatchResponse(IDTimestampSchema):


    requester_id: UUID
    target_id: UUID
    compatibility_score: int | None = Field(default=None, ge=0, le=100)
    status: RoommateMatchStatusEnum
    message: str | None = None
    responded_at: datetime | None = None

class MatchListItem(MatchResponse):


    is_sender: bool
    other_user: UserSummary | None = None
    other_profile: PublicProfileSummary | None = None
