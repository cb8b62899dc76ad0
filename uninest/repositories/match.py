import logging
import uuid
from datetime import datetime, timezone
from typing import Sequence

from sqlalchemy import and_, or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from uninest.models.roommate import (
    RoommateMatch,
    RoommateMatchStatusEnum,
    canonical_pair,
)
from uninest.repositories.base import BaseRepository

logger = logging.getLogger(__name__)


class RoommateMatchRepository(BaseRepository[RoommateMatch]):
    def __init__(self, session: AsyncSession):
        super().__init__(RoommateMatch, session)

    async def get_between(
        self,
        user_a: uuid.UUID,
        user_b: uuid.UUID,
    ) -> RoommateMatch | None:
        low, high = canonical_pair(user_a, user_b)
        query = select(RoommateMatch).where(
            and_(
                RoommateMatch.pair_low_id == low,
                RoommateMatch.pair_high_id == high,
            )
        )
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def create_match(
        self,
        requester_id: uuid.UUID,
        target_id: uuid.UUID,
        score: int | None,
        message: str | None = None,
    ) -> RoommateMatch | None:
        """Insert a pending match; None when the pair already has a record."""
        existing = await self.get_between(requester_id, target_id)
        if existing is not None:
            return None

        low, high = canonical_pair(requester_id, target_id)
        match = RoommateMatch(
            requester_id=requester_id,
            target_id=target_id,
            pair_low_id=low,
            pair_high_id=high,
            compatibility_score=score,
            status=RoommateMatchStatusEnum.PENDING,
            message=message,
        )

        try:
            async with self.session.begin_nested():
                self.session.add(match)
                await self.session.flush()
        except IntegrityError:
            logger.info(
                "Concurrent match insert rejected for pair %s/%s", low, high
            )
            return None

        await self.session.refresh(match)
        return match

    async def get_matches_for_user(
        self,
        user_id: uuid.UUID,
        *,
        status: RoommateMatchStatusEnum | None = None,
    ) -> Sequence[RoommateMatch]:
        query = select(RoommateMatch).where(
            or_(
                RoommateMatch.requester_id == user_id,
                RoommateMatch.target_id == user_id,
            )
        )

        if status is not None:
            query = query.where(RoommateMatch.status == status)

        query = query.order_by(RoommateMatch.created_at.desc())

        result = await self.session.execute(query)
        return result.scalars().all()

    async def set_response(
        self,
        match: RoommateMatch,
        status: RoommateMatchStatusEnum,
    ) -> RoommateMatch | None:
        """
        Move a pending match to ``status``.

        The write is conditional on the row still being pending, so of two
        concurrent responses only one takes effect. Returns None for the loser.
        """
        now = datetime.now(timezone.utc)
        result = await self.session.execute(
            update(RoommateMatch)
            .where(
                and_(
                    RoommateMatch.id == match.id,
                    RoommateMatch.status == RoommateMatchStatusEnum.PENDING,
                )
            )
            .values(status=status, responded_at=now, updated_at=now)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            logger.info("Match %s was already answered", match.id)
            return None

        await self.session.refresh(match)
        return match
