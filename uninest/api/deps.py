import uuid
from collections.abc import AsyncGenerator
from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from uninest.api.responses import create_error_response
from uninest.core.database import async_session_factory
from uninest.core.security import decode_token
from uninest.models.user import User, UserRoleEnum
from uninest.realtime.sockets import SocketNotificationPublisher
from uninest.repositories.user import UserRepository
from uninest.services.notification import NotificationPublisher

security = HTTPBearer(auto_error=False)

async def get_db() -> AsyncGenerator[AsyncSession, None]:

    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()

DBSession = Annotated[AsyncSession, Depends(get_db)]

async def get_current_user(
    db: DBSession,
    credentials: Annotated[
        HTTPAuthorizationCredentials | None,
        Depends(security)
    ] = None,
) -> User:
    """
    Dependency to get the current authenticated user.

    Args:
        db: Database session
        credentials: HTTP Bearer credentials

    Returns:
        The authenticated User object

    Raises:
        HTTPException: 401 when the token is missing or invalid, 403 when
            the account is blocked
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=create_error_response(
            code="AUTH_REQUIRED",
            message="Could not validate credentials",
        ),
        headers={"WWW-Authenticate": "Bearer"},
    )

    if credentials is None:
        raise credentials_exception

    payload = decode_token(credentials.credentials)
    if payload is None:
        raise credentials_exception

    subject = payload.get("sub")
    if subject is None:
        raise credentials_exception

    try:
        user_id = uuid.UUID(str(subject))
    except ValueError:
        raise credentials_exception

    user = await UserRepository(db).get(user_id)
    if user is None:
        raise credentials_exception

    if user.is_blocked:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=create_error_response(
                code="USER_BLOCKED",
                message="User account is blocked",
            ),
        )

    return user

CurrentUser = Annotated[User, Depends(get_current_user)]

async def require_student(current_user: CurrentUser) -> User:

    if current_user.role != UserRoleEnum.STUDENT:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=create_error_response(
                code="FORBIDDEN",
                message="Roommate matching is available to students only",
            ),
        )
    return current_user

StudentUser = Annotated[User, Depends(require_student)]

def get_notification_publisher() -> NotificationPublisher:

    return SocketNotificationPublisher()

Publisher = Annotated[NotificationPublisher, Depends(get_notification_publisher)]
