from sqlalchemy.ext.asyncio import AsyncSession

from uninest.models.user import User
from uninest.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    def __init__(self, session: AsyncSession):
        super().__init__(User, session)
