from uninest.models.notification import Notification
from uninest.models.roommate import (
    GuestFrequencyEnum,
    RoommateMatch,
    RoommateMatchStatusEnum,
    RoommateProfile,
    SleepScheduleEnum,
    StudyHabitsEnum,
    canonical_pair,
)
from uninest.models.university import University
from uninest.models.user import GenderEnum, User, UserRoleEnum

__all__ = [
    "User",
    "GenderEnum",
    "UserRoleEnum",
    "University",
    "RoommateProfile",
    "RoommateMatch",
    "RoommateMatchStatusEnum",
    "SleepScheduleEnum",
    "StudyHabitsEnum",
    "GuestFrequencyEnum",
    "canonical_pair",
    "Notification",
]
