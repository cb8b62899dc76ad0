from uninest.services.errors import (
    ConflictError,
    ForbiddenError,
    NotFoundError,
    PreconditionError,
    ServiceError,
    ServiceValidationError,
)
from uninest.services.notification import NotificationRequest, NotificationService, NotificationType
from uninest.services.roommate import ProfileSearchResult, RoommateProfileService
from uninest.services.match import MatchOverview, RoommateMatchService, build_match_service

__all__ = [
    "ServiceError",
    "ServiceValidationError",
    "PreconditionError",
    "ConflictError",
    "NotFoundError",
    "ForbiddenError",
    "NotificationRequest",
    "NotificationService",
    "NotificationType",
    "ProfileSearchResult",
    "RoommateProfileService",
    "MatchOverview",
    "RoommateMatchService",
    "build_match_service",
]
