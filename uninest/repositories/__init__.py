from uninest.repositories.base import BaseRepository
from uninest.repositories.user import UserRepository
from uninest.repositories.roommate import ProfileSearchFilters, RoommateProfileRepository
from uninest.repositories.match import RoommateMatchRepository
from uninest.repositories.notification import NotificationRepository

__all__ = [
    "BaseRepository",
    "UserRepository",
    "ProfileSearchFilters",
    "RoommateProfileRepository",
    "RoommateMatchRepository",
    "NotificationRepository",
]
