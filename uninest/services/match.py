import logging
import uuid
from dataclasses import dataclass
from typing import Any, Optional, Protocol, Sequence, Union

from sqlalchemy.ext.asyncio import AsyncSession

from uninest.core.config import get_settings
from uninest.core.validators import sanitize_text
from uninest.models.roommate import RoommateMatch, RoommateMatchStatusEnum, RoommateProfile
from uninest.models.user import User, UserRoleEnum
from uninest.repositories.match import RoommateMatchRepository
from uninest.repositories.roommate import RoommateProfileRepository
from uninest.repositories.user import UserRepository
from uninest.services.errors import (
    ConflictError,
    ForbiddenError,
    NotFoundError,
    PreconditionError,
    ServiceValidationError,
)
from uninest.services.matching.engine import RoommateRankingEngine
from uninest.services.matching.scorer import ProfileData
from uninest.services.notification import (
    NotificationPublisher,
    NotificationRequest,
    NotificationService,
    NotificationType,
)

logger = logging.getLogger(__name__)
settings = get_settings()


class ProfileStore(Protocol):
    async def get_active_by_user(self, user_id: uuid.UUID) -> Optional[RoommateProfile]: ...

    async def get_by_users(
        self, user_ids: Sequence[uuid.UUID]
    ) -> dict[uuid.UUID, RoommateProfile]: ...


class MatchStore(Protocol):
    async def get(self, id: uuid.UUID) -> Optional[RoommateMatch]: ...

    async def get_between(
        self, user_a: uuid.UUID, user_b: uuid.UUID
    ) -> Optional[RoommateMatch]: ...

    async def create_match(
        self,
        requester_id: uuid.UUID,
        target_id: uuid.UUID,
        score: Optional[int],
        message: Optional[str] = None,
    ) -> Optional[RoommateMatch]: ...

    async def get_matches_for_user(
        self,
        user_id: uuid.UUID,
        *,
        status: Optional[RoommateMatchStatusEnum] = None,
    ) -> Sequence[RoommateMatch]: ...

    async def set_response(
        self, match: RoommateMatch, status: RoommateMatchStatusEnum
    ) -> Optional[RoommateMatch]: ...

    async def delete(self, id: uuid.UUID) -> bool: ...


class UserDirectory(Protocol):
    async def get(self, id: uuid.UUID) -> Optional[User]: ...


class NotificationSink(Protocol):
    async def notify(self, request: NotificationRequest) -> Any: ...


@dataclass
class MatchOverview:
    match: RoommateMatch
    is_sender: bool
    other_user: Optional[User]
    other_profile: Optional[RoommateProfile]


RESPONSE_STATUSES = (RoommateMatchStatusEnum.ACCEPTED, RoommateMatchStatusEnum.REJECTED)


class RoommateMatchService:
    """
    Lifecycle of roommate match requests.

    A request is created ``pending`` by the requester and answered once by
    the target (``accepted`` or ``rejected``). Either party may delete it in
    any state. Every precondition is checked before anything is written.
    """

    def __init__(
        self,
        profiles: ProfileStore,
        matches: MatchStore,
        users: UserDirectory,
        notifier: NotificationSink,
        engine: Optional[RoommateRankingEngine] = None,
    ):
        self.profiles = profiles
        self.matches = matches
        self.users = users
        self.notifier = notifier
        self.engine = engine or RoommateRankingEngine()

    def _clean_message(self, message: Optional[str]) -> Optional[str]:
        if message is None:
            return None

        result = sanitize_text(message)
        if not result.is_valid:
            raise ServiceValidationError("message", result.error_message or "Invalid message")

        cleaned = result.sanitized_value
        if len(cleaned) > settings.match_message_max_length:
            raise ServiceValidationError(
                "message",
                f"Message must not exceed {settings.match_message_max_length} characters",
            )
        return cleaned or None

    async def create_match_request(
        self,
        requester: User,
        target_id: uuid.UUID,
        message: Optional[str] = None,
    ) -> RoommateMatch:
        """
        Send a match request from ``requester`` to ``target_id``.

        Raises:
            PreconditionError: self-match, missing profiles, ineligible target
                or gender mismatch
            NotFoundError: the target user does not exist
            ConflictError: a record already exists for the pair, either direction
        """
        cleaned_message = self._clean_message(message)

        if target_id == requester.id:
            raise PreconditionError("SELF_MATCH", "Cannot send match request to yourself")

        requester_profile = await self.profiles.get_active_by_user(requester.id)
        if requester_profile is None:
            raise PreconditionError(
                "PROFILE_REQUIRED",
                "You must create a roommate profile before sending match requests",
            )

        target = await self.users.get(target_id)
        if target is None:
            raise NotFoundError("User not found")
        if target.role != UserRoleEnum.STUDENT:
            raise PreconditionError("TARGET_NOT_ELIGIBLE", "Can only match with students")

        target_profile = await self.profiles.get_active_by_user(target_id)
        if target_profile is None:
            raise PreconditionError(
                "TARGET_PROFILE_REQUIRED",
                "User does not have an active roommate profile",
            )

        if requester.gender and target.gender and requester.gender != target.gender:
            raise PreconditionError(
                "GENDER_MISMATCH",
                "You can only connect with roommates of the same gender",
            )

        if await self.matches.get_between(requester.id, target_id) is not None:
            raise ConflictError("MATCH_EXISTS", "Match request already exists")

        score = self.engine.calculate_match_score(
            ProfileData.from_model(requester_profile),
            ProfileData.from_model(target_profile),
        )

        match = await self.matches.create_match(
            requester_id=requester.id,
            target_id=target_id,
            score=score,
            message=cleaned_message,
        )
        # The storage constraint on the canonical pair caught a concurrent insert.
        if match is None:
            raise ConflictError("MATCH_EXISTS", "Match request already exists")

        logger.info(
            "Created roommate match %s from %s to %s (score %s)",
            match.id,
            requester.id,
            target_id,
            score,
        )

        text = f"{requester.full_name} wants to connect with you as a roommate"
        if cleaned_message:
            text += f': "{cleaned_message}"'

        await self.notifier.notify(NotificationRequest(
            user_id=target_id,
            notification_type=NotificationType.MATCH_REQUEST,
            message=text,
            related_entity_id=match.id,
        ))

        return match

    async def respond_to_match(
        self,
        responder: User,
        match_id: uuid.UUID,
        decision: Union[RoommateMatchStatusEnum, str],
    ) -> RoommateMatch:
        """
        Accept or reject a pending request; only the target may answer.

        Raises:
            ServiceValidationError: decision is not accepted/rejected
            NotFoundError: unknown match
            ForbiddenError: responder is not the target
            PreconditionError: the match was already answered
        """
        try:
            status = RoommateMatchStatusEnum(decision)
        except ValueError:
            status = None
        if status not in RESPONSE_STATUSES:
            raise ServiceValidationError("status", "Status must be 'accepted' or 'rejected'")

        match = await self.matches.get(match_id)
        if match is None:
            raise NotFoundError("Match not found")

        if match.target_id != responder.id:
            raise ForbiddenError(
                "NOT_RECIPIENT",
                "Only the recipient can respond to a match request",
            )

        if match.status != RoommateMatchStatusEnum.PENDING:
            raise PreconditionError(
                "ALREADY_RESPONDED",
                "Match has already been responded to",
            )

        answered = await self.matches.set_response(match, status)
        # Another response landed between the read above and this write.
        if answered is None:
            raise PreconditionError(
                "ALREADY_RESPONDED",
                "Match has already been responded to",
            )
        match = answered
        logger.info("Roommate match %s %s by %s", match.id, status.value, responder.id)

        name = responder.full_name
        if status == RoommateMatchStatusEnum.ACCEPTED:
            request = NotificationRequest(
                user_id=match.requester_id,
                notification_type=NotificationType.MATCH_ACCEPTED,
                message=f"{name} accepted your roommate request! You can now message each other.",
                related_entity_id=match.id,
            )
        else:
            request = NotificationRequest(
                user_id=match.requester_id,
                notification_type=NotificationType.MATCH_DECLINED,
                message=f"{name} declined your roommate request.",
                related_entity_id=match.id,
            )
        await self.notifier.notify(request)

        return match

    async def delete_match(self, actor_id: uuid.UUID, match_id: uuid.UUID) -> None:

        match = await self.matches.get(match_id)
        if match is None:
            raise NotFoundError("Match not found")

        if not match.involves(actor_id):
            raise ForbiddenError(
                "NOT_PARTICIPANT",
                "You are not authorized to remove this match",
            )

        await self.matches.delete(match_id)
        logger.info("Roommate match %s removed by %s", match_id, actor_id)

    async def list_matches(
        self,
        user_id: uuid.UUID,
        *,
        status: Optional[RoommateMatchStatusEnum] = None,
    ) -> list[MatchOverview]:
        """Sent and received matches, newest first, with the counterpart's details."""
        matches = await self.matches.get_matches_for_user(user_id, status=status)

        counterpart_ids = [m.counterpart_id(user_id) for m in matches]
        profiles = await self.profiles.get_by_users(counterpart_ids)

        overviews = []
        for match in matches:
            is_sender = match.requester_id == user_id
            other_id = match.counterpart_id(user_id)
            overviews.append(MatchOverview(
                match=match,
                is_sender=is_sender,
                other_user=match.target if is_sender else match.requester,
                other_profile=profiles.get(other_id),
            ))
        return overviews


def build_match_service(
    session: AsyncSession,
    publisher: Optional[NotificationPublisher] = None,
) -> RoommateMatchService:

    return RoommateMatchService(
        profiles=RoommateProfileRepository(session),
        matches=RoommateMatchRepository(session),
        users=UserRepository(session),
        notifier=NotificationService(session, publisher),
    )
