import uuid

from sqlalchemy.ext.asyncio import AsyncSession

from uninest.models.notification import Notification
from uninest.repositories.base import BaseRepository


class NotificationRepository(BaseRepository[Notification]):
    def __init__(self, session: AsyncSession):
        super().__init__(Notification, session)

    async def create_notification(
        self,
        user_id: uuid.UUID,
        title: str,
        message: str,
        *,
        related_entity_type: str | None = None,
        related_entity_id: uuid.UUID | None = None,
        action_url: str | None = None,
    ) -> Notification:
        return await self.create({
            "user_id": user_id,
            "title": title,
            "message": message,
            "related_entity_type": related_entity_type,
            "related_entity_id": related_entity_id,
            "action_url": action_url,
            "is_read": False,
        })
