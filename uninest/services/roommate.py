import logging
import uuid
from dataclasses import dataclass, field
from typing import Any, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from uninest.core.config import get_settings
from uninest.core.validators import (
    sanitize_tags,
    sanitize_text,
    validate_budget,
    validate_budget_range,
    validate_level,
    validate_matching_priorities,
)
from uninest.models.roommate import GuestFrequencyEnum, RoommateProfile
from uninest.models.user import User
from uninest.repositories.roommate import ProfileSearchFilters, RoommateProfileRepository
from uninest.services.errors import NotFoundError, ServiceValidationError
from uninest.services.matching.engine import RankedCandidate, RoommateRankingEngine
from uninest.services.matching.scorer import ProfileData

logger = logging.getLogger(__name__)
settings = get_settings()

INACTIVE_PROFILE_MESSAGE = "Activate your profile to search for roommates"

# Columns a profile upsert writes; anything missing from the input is reset.
PROFILE_FIELDS = (
    "university_id",
    "min_budget",
    "max_budget",
    "cleanliness_level",
    "noise_level",
    "sleep_schedule",
    "study_habits",
    "smoking_allowed",
    "pets_allowed",
    "guests_allowed",
    "bio",
    "major",
    "interests",
    "move_in_date",
    "preferred_areas",
    "matching_priorities",
    "is_active",
)


@dataclass
class ProfileSearchResult:
    profiles: list[tuple[RoommateProfile, RankedCandidate]] = field(default_factory=list)
    total: int = 0
    has_profile: bool = False
    is_profile_active: bool = True
    message: Optional[str] = None
    limit: int = settings.search_default_limit
    offset: int = 0


class RoommateProfileService:
    def __init__(
        self,
        session: AsyncSession,
        engine: Optional[RoommateRankingEngine] = None,
    ):
        self.session = session
        self.repository = RoommateProfileRepository(session)
        self.engine = engine or RoommateRankingEngine()

    async def get_profile(self, user_id: uuid.UUID) -> Optional[RoommateProfile]:
        return await self.repository.get_by_user(user_id)

    def _validate_profile(self, user: User, data: dict[str, Any]) -> dict[str, Any]:
        for level_field, label in (
            ("cleanliness_level", "Cleanliness level"),
            ("noise_level", "Noise level"),
        ):
            value = data.get(level_field)
            if value is not None:
                result = validate_level(value, label)
                if not result.is_valid:
                    raise ServiceValidationError(level_field, result.error_message or f"Invalid {label.lower()}")
                data[level_field] = result.sanitized_value

        for budget_field in ("min_budget", "max_budget"):
            value = data.get(budget_field)
            if value is not None:
                result = validate_budget(value)
                if not result.is_valid:
                    raise ServiceValidationError(budget_field, result.error_message or "Invalid budget")
                data[budget_field] = result.sanitized_value

        range_result = validate_budget_range(data.get("min_budget"), data.get("max_budget"))
        if not range_result.is_valid:
            raise ServiceValidationError("budget_range", range_result.error_message or "Invalid budget range")

        priorities_result = validate_matching_priorities(data.get("matching_priorities"))
        if not priorities_result.is_valid:
            raise ServiceValidationError(
                "matching_priorities",
                priorities_result.error_message or "Invalid matching priorities",
            )
        data["matching_priorities"] = priorities_result.sanitized_value

        for tag_field, label in (("interests", "Interests"), ("preferred_areas", "Preferred areas")):
            result = sanitize_tags(data.get(tag_field), label)
            if not result.is_valid:
                raise ServiceValidationError(tag_field, result.error_message or f"Invalid {label.lower()}")
            data[tag_field] = result.sanitized_value

        for text_field in ("bio", "major"):
            value = data.get(text_field)
            if value is not None:
                data[text_field] = sanitize_text(value).sanitized_value or None

        if not data.get("university_id"):
            data["university_id"] = user.university_id

        if data.get("guests_allowed") is None:
            data["guests_allowed"] = GuestFrequencyEnum.SOMETIMES
        if data.get("is_active") is None:
            data["is_active"] = True
        data["smoking_allowed"] = bool(data.get("smoking_allowed"))
        data["pets_allowed"] = bool(data.get("pets_allowed"))

        return data

    async def save_profile(
        self,
        user: User,
        data: dict[str, Any],
    ) -> tuple[RoommateProfile, bool]:
        """
        Create or replace the user's preference profile.

        Every field is overwritten, so omitted optional fields are cleared.

        Returns:
            Tuple of (profile, created)
        """
        profile_data = self._validate_profile(
            user,
            {name: data.get(name) for name in PROFILE_FIELDS},
        )
        profile, created = await self.repository.upsert(user.id, profile_data)

        logger.info(
            "%s roommate profile for user %s",
            "Created" if created else "Updated",
            user.id,
        )
        return profile, created

    async def deactivate_profile(self, user_id: uuid.UUID) -> RoommateProfile:
        profile = await self.repository.deactivate(user_id)
        if profile is None:
            raise NotFoundError("No roommate profile found")

        logger.info("Deactivated roommate profile for user %s", user_id)
        return profile

    async def search(
        self,
        user: User,
        filters: ProfileSearchFilters,
        *,
        limit: int = settings.search_default_limit,
        offset: int = 0,
    ) -> ProfileSearchResult:
        """
        Find active candidate profiles for the user.

        With a profile of their own, the filtered set is scored and ranked
        before the page is cut, so pagination follows score order. Only the
        newest ``search_candidate_limit`` candidates are loaded for ranking,
        and ``total`` counts those.
        Without one, scores are None and results come newest first.
        """
        limit = max(1, min(limit, settings.search_max_limit))
        offset = max(0, offset)

        my_profile = await self.repository.get_by_user(user.id)

        if my_profile is not None and not my_profile.is_active:
            return ProfileSearchResult(
                has_profile=True,
                is_profile_active=False,
                message=INACTIVE_PROFILE_MESSAGE,
                limit=limit,
                offset=offset,
            )

        if my_profile is None:
            total = await self.repository.count_search(user.id, filters, gender=user.gender)
            profiles = await self.repository.search(
                user.id,
                filters,
                gender=user.gender,
                skip=offset,
                limit=limit,
            )
            ranked = self.engine.rank(None, [ProfileData.from_model(p) for p in profiles])
        else:
            profiles = await self.repository.search(
                user.id,
                filters,
                gender=user.gender,
                limit=settings.search_candidate_limit,
            )
            ranked = self.engine.rank(
                ProfileData.from_model(my_profile),
                [ProfileData.from_model(p) for p in profiles],
            )
            total = len(ranked)
            ranked = ranked[offset:offset + limit]

        by_user = {p.user_id: p for p in profiles}
        return ProfileSearchResult(
            profiles=[(by_user[candidate.user_id], candidate) for candidate in ranked],
            total=total,
            has_profile=my_profile is not None,
            is_profile_active=True,
            limit=limit,
            offset=offset,
        )
