import uuid
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Sequence

from sqlalchemy import and_, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from uninest.models.roommate import (
    RoommateProfile,
    SleepScheduleEnum,
    StudyHabitsEnum,
)
from uninest.models.user import GenderEnum, User
from uninest.repositories.base import BaseRepository


@dataclass
class ProfileSearchFilters:
    university_id: uuid.UUID | None = None
    min_budget: Decimal | None = None
    max_budget: Decimal | None = None
    min_cleanliness: int | None = None
    max_cleanliness: int | None = None
    sleep_schedule: SleepScheduleEnum | None = None
    study_habits: StudyHabitsEnum | None = None
    smoking_allowed: bool | None = None
    pets_allowed: bool | None = None
    major: str | None = None


class RoommateProfileRepository(BaseRepository[RoommateProfile]):
    def __init__(self, session: AsyncSession):
        super().__init__(RoommateProfile, session)

    async def get_by_user(self, user_id: uuid.UUID) -> RoommateProfile | None:
        result = await self.session.execute(
            select(RoommateProfile).where(RoommateProfile.user_id == user_id)
        )
        return result.scalar_one_or_none()

    async def get_active_by_user(self, user_id: uuid.UUID) -> RoommateProfile | None:
        result = await self.session.execute(
            select(RoommateProfile).where(
                and_(
                    RoommateProfile.user_id == user_id,
                    RoommateProfile.is_active.is_(True),
                )
            )
        )
        return result.scalar_one_or_none()

    async def get_by_users(
        self,
        user_ids: Sequence[uuid.UUID],
    ) -> dict[uuid.UUID, RoommateProfile]:
        if not user_ids:
            return {}

        result = await self.session.execute(
            select(RoommateProfile).where(RoommateProfile.user_id.in_(list(user_ids)))
        )
        return {profile.user_id: profile for profile in result.scalars().all()}

    async def upsert(
        self,
        user_id: uuid.UUID,
        data: dict[str, Any],
    ) -> tuple[RoommateProfile, bool]:
        existing = await self.get_by_user(user_id)

        if existing is not None:
            fields = {k: v for k, v in data.items() if k != "user_id"}
            return await self.update(existing, fields), False

        profile = await self.create({"user_id": user_id, **data})
        return profile, True

    async def deactivate(self, user_id: uuid.UUID) -> RoommateProfile | None:
        profile = await self.get_by_user(user_id)
        if profile is None:
            return None

        return await self.update(profile, {"is_active": False})

    def _search_query(
        self,
        exclude_user_id: uuid.UUID,
        filters: ProfileSearchFilters,
        gender: GenderEnum | None,
    ):
        query = (
            select(RoommateProfile)
            .join(User, RoommateProfile.user_id == User.id)
            .where(
                and_(
                    RoommateProfile.user_id != exclude_user_id,
                    RoommateProfile.is_active.is_(True),
                    User.is_blocked.is_(False),
                )
            )
        )

        if gender is not None:
            query = query.where(User.gender == gender)

        if filters.university_id is not None:
            query = query.where(RoommateProfile.university_id == filters.university_id)

        # Budget filters select candidates whose range overlaps the requested one.
        if filters.min_budget is not None:
            query = query.where(RoommateProfile.max_budget >= filters.min_budget)
        if filters.max_budget is not None:
            query = query.where(RoommateProfile.min_budget <= filters.max_budget)

        if filters.min_cleanliness is not None:
            query = query.where(RoommateProfile.cleanliness_level >= filters.min_cleanliness)
        if filters.max_cleanliness is not None:
            query = query.where(RoommateProfile.cleanliness_level <= filters.max_cleanliness)

        if filters.sleep_schedule is not None:
            query = query.where(RoommateProfile.sleep_schedule == filters.sleep_schedule)
        if filters.study_habits is not None:
            query = query.where(RoommateProfile.study_habits == filters.study_habits)
        if filters.smoking_allowed is not None:
            query = query.where(RoommateProfile.smoking_allowed.is_(filters.smoking_allowed))
        if filters.pets_allowed is not None:
            query = query.where(RoommateProfile.pets_allowed.is_(filters.pets_allowed))
        if filters.major:
            query = query.where(RoommateProfile.major == filters.major)

        return query

    async def search(
        self,
        exclude_user_id: uuid.UUID,
        filters: ProfileSearchFilters,
        *,
        gender: GenderEnum | None = None,
        skip: int = 0,
        limit: int | None = None,
    ) -> Sequence[RoommateProfile]:
        query = self._search_query(exclude_user_id, filters, gender).order_by(
            RoommateProfile.created_at.desc()
        )

        if skip:
            query = query.offset(skip)
        if limit is not None:
            query = query.limit(limit)

        result = await self.session.execute(query)
        return result.scalars().all()

    async def count_search(
        self,
        exclude_user_id: uuid.UUID,
        filters: ProfileSearchFilters,
        *,
        gender: GenderEnum | None = None,
    ) -> int:
        subquery = self._search_query(exclude_user_id, filters, gender).subquery()
        result = await self.session.execute(select(func.count()).select_from(subquery))
        return result.scalar_one()
