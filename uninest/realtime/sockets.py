"""Socket.IO namespace delivering live notifications to each user's room."""

import logging
from typing import Any, Optional

import socketio

from uninest.core.security import decode_token

logger = logging.getLogger(__name__)

NOTIFICATION_EVENT = "notification:new"

_namespace: Optional["NotificationNamespace"] = None


class NotificationNamespace(socketio.AsyncNamespace):
    """Keeps every authenticated connection in its ``user:<id>`` room."""

    def __init__(self) -> None:
        super().__init__("/notifications")
        self._sessions: dict[str, str] = {}

    async def on_connect(self, sid: str, environ: dict, auth: Optional[dict] = None) -> None:
        token = (auth or {}).get("token")
        payload = decode_token(token) if token else None
        user_id = payload.get("sub") if payload else None
        if not user_id:
            raise ConnectionRefusedError("authentication required")

        self._sessions[sid] = user_id
        await self.enter_room(sid, self.user_room(user_id))
        logger.debug("Socket %s joined room for user %s", sid, user_id)

    async def on_disconnect(self, sid: str) -> None:
        user_id = self._sessions.pop(sid, None)
        if user_id:
            await self.leave_room(sid, self.user_room(user_id))

    @staticmethod
    def user_room(user_id: Any) -> str:
        return f"user:{user_id}"


def set_namespace(ns: Optional[NotificationNamespace]) -> None:
    global _namespace
    _namespace = ns


async def emit_to_user(user_id: Any, event: str, payload: dict) -> bool:
    """Emit to a user's room; False when no server is running."""
    if _namespace is None:
        return False
    await _namespace.emit(event, payload, room=NotificationNamespace.user_room(user_id))
    return True


class SocketNotificationPublisher:
    """Publishes notifications through the registered namespace."""

    async def publish(self, user_id: Any, payload: dict) -> bool:
        return await emit_to_user(user_id, NOTIFICATION_EVENT, payload)


def create_socket_server(cors_allowed_origins: list[str] | str) -> socketio.AsyncServer:
    server = socketio.AsyncServer(async_mode="asgi", cors_allowed_origins=cors_allowed_origins)
    namespace = NotificationNamespace()
    server.register_namespace(namespace)
    set_namespace(namespace)
    return server
