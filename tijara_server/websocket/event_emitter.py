"""Event emitter for pushing events to a user's realtime channel.

Every user has a room named after their user id. Anything the server wants
to push to that user (new notifications today) goes through
`EventEmitter.emit_to_user`, which never raises: delivery is best effort
and the durable record always lives in MongoDB.

Usage:
    emitter = EventEmitter(socketio)
    emitter.emit_to_user(user_id, EventEmitter.NOTIFICATION, notification.to_dict())
"""
import logging
from typing import Any, Callable, Dict, Optional

logger = logging.getLogger(__name__)


class EventEmitter:
    """Best-effort emitter bound to one Socket.IO server."""

    # =========================================================================
    # Event Type Constants
    # =========================================================================

    NOTIFICATION = 'notification'
    JOINED = 'joined'
    LEFT = 'left'
    CONNECTED = 'connected'
    ERROR = 'error'

    def __init__(self, socketio=None, is_subscribed: Optional[Callable[[str], bool]] = None):
        self.socketio = socketio
        # Answers "does this process hold a socket joined to the user's room?"
        self._is_subscribed = is_subscribed

    def emit_to_user(self, user_id: str, event: str, data: Dict[str, Any]) -> bool:
        """Emit event to every socket joined to the user's room.

        Returns:
            True if the event was handed to Socket.IO, False if nothing was
            sent (no server, no subscriber in this process, or an emit error).
        """
        if self.socketio is None:
            logger.debug(f"EventEmitter: no Socket.IO server, dropping {event} for {user_id}")
            return False
        if self._is_subscribed is not None and not self._is_subscribed(user_id):
            logger.debug(f"EventEmitter: {user_id} has no joined sockets, {event} not delivered")
            return False
        try:
            self.socketio.emit(event, data, to=user_id)
            logger.debug(f"EventEmitter: {event} -> {user_id}")
            return True
        except Exception as e:
            logger.error(f"EventEmitter: failed to emit {event} to {user_id}: {e}")
            return False
