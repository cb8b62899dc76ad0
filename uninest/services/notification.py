import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional, Protocol
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from uninest.models.notification import Notification
from uninest.repositories.notification import NotificationRepository

logger = logging.getLogger(__name__)

ROOMMATE_MATCH_ENTITY = "roommate_match"
ROOMMATES_ACTION_URL = "/roommates"

class NotificationType(str, Enum):


    MATCH_REQUEST = "roommate_match_request"
    MATCH_ACCEPTED = "roommate_match_accepted"
    MATCH_DECLINED = "roommate_match_declined"

NOTIFICATION_TITLES = {
    NotificationType.MATCH_REQUEST: "New Roommate Request",
    NotificationType.MATCH_ACCEPTED: "Roommate Request Accepted!",
    NotificationType.MATCH_DECLINED: "Roommate Request Declined",
}

@dataclass
class NotificationRequest:

    user_id: UUID
    notification_type: NotificationType
    message: str
    related_entity_id: Optional[UUID] = None
    created_at: datetime = None

    def __post_init__(self):
        if self.created_at is None:
            self.created_at = datetime.now(timezone.utc)

    @property
    def title(self) -> str:
        return NOTIFICATION_TITLES[self.notification_type]

class NotificationPublisher(Protocol):

    async def publish(self, user_id: Any, payload: dict) -> bool: ...

class NotificationService:
    """
    Records user notifications and pushes them live.

    Delivery is best-effort: a failure to store or push a notification is
    logged and never propagates to the caller.
    """

    def __init__(
        self,
        session: AsyncSession,
        publisher: Optional[NotificationPublisher] = None,
    ):

        self.session = session
        self.repository = NotificationRepository(session)
        self.publisher = publisher

    async def notify(self, request: NotificationRequest) -> Optional[Notification]:
        """
        Persist a notification and push it to the user's live connection.

        The insert runs in a SAVEPOINT so a failure here leaves the caller's
        transaction intact.

        Args:
            request: NotificationRequest describing recipient and content

        Returns:
            The stored Notification, or None when storing failed
        """
        try:
            async with self.session.begin_nested():
                notification = await self.repository.create_notification(
                    user_id=request.user_id,
                    title=request.title,
                    message=request.message,
                    related_entity_type=ROOMMATE_MATCH_ENTITY,
                    related_entity_id=request.related_entity_id,
                    action_url=ROOMMATES_ACTION_URL,
                )
        except SQLAlchemyError:
            logger.exception(
                "Failed to store %s notification for user %s",
                request.notification_type.value,
                request.user_id,
            )
            return None

        await self.push(request.user_id, notification.to_payload())
        return notification

    async def push(self, user_id: UUID, payload: dict) -> bool:

        if self.publisher is None:
            return False

        try:
            return await self.publisher.publish(user_id, payload)
        except Exception:
            logger.exception("Failed to push live notification to user %s", user_id)
            return False
