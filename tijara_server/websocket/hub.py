"""WebSocket hub: the per-user realtime channel.

Clients connect with their JWT, then `join` the room named after their own
user id. The server pushes `notification` events into that room.
"""
import logging
import threading
from typing import Any, Dict, Optional, Set

from flask import Flask, request
from flask_socketio import SocketIO, emit, join_room, leave_room, ConnectionRefusedError

from tijara_server.exception import UnauthorizedError
from tijara_server.security.authentication import AuthSecurity, extract_bearer_token
from tijara_server.utils.time_utils import utc_now, to_iso
from tijara_server.websocket.event_emitter import EventEmitter

logger = logging.getLogger(__name__)


class WebSocketHub:
    """Registers the Socket.IO handlers and publishes events to user rooms."""

    def __init__(self, socketio: SocketIO = None):
        self.socketio = socketio
        # sid -> {'user_id', 'connected_at'}
        self.connected_users: Dict[str, Dict[str, Any]] = {}
        # user id -> sids currently joined to that user's room
        self.user_rooms: Dict[str, Set[str]] = {}
        # Handlers run on Socket.IO worker threads
        self._rooms_lock = threading.Lock()
        self.emitter = EventEmitter(socketio, is_subscribed=self.has_subscribers)
        self._initialized = False

    def init_app(self, app: Flask, socketio: SocketIO):
        """Initialize the WebSocket hub."""
        logger.debug(f"WS_HUB: init app={app.name}, mode={getattr(socketio, 'async_mode', '?')}")
        self.socketio = socketio
        self.emitter.socketio = socketio
        self._register_handlers()
        self._initialized = True

    # =========================================================================
    # Publishing
    # =========================================================================

    def publish(self, user_id: str, event: str, payload: Dict[str, Any]) -> bool:
        """Deliver `event` to every socket in the user's room. Never raises."""
        return self.emitter.emit_to_user(user_id, event, payload)

    def has_subscribers(self, user_id: str) -> bool:
        with self._rooms_lock:
            return bool(self.user_rooms.get(user_id))

    # =========================================================================
    # Internal helpers
    # =========================================================================

    @staticmethod
    def _token_from_request(auth) -> str:
        token = None
        if auth and isinstance(auth, dict):
            token = auth.get('token')
        if not token:
            token = extract_bearer_token(request.headers.get('Authorization'))
        if not token:
            token = request.args.get('token', '')
        return token

    @staticmethod
    def _room_from_payload(data) -> Optional[str]:
        if isinstance(data, dict):
            data = data.get('userId') or data.get('user_id')
        if isinstance(data, str) and data.strip():
            return data.strip()
        return None

    def _get_user_from_socket(self) -> Optional[Dict[str, Any]]:
        return self.connected_users.get(getattr(request, 'sid', None))

    def _add_to_room(self, room: str, sid: str):
        with self._rooms_lock:
            self.user_rooms.setdefault(room, set()).add(sid)

    def _remove_from_room(self, room: str, sid: str):
        with self._rooms_lock:
            sids = self.user_rooms.get(room)
            if sids is None:
                return
            sids.discard(sid)
            if not sids:
                del self.user_rooms[room]

    def _forget_socket(self, sid: str):
        with self._rooms_lock:
            for user_id in list(self.user_rooms):
                sids = self.user_rooms.get(user_id)
                if sids is None:
                    continue
                sids.discard(sid)
                if not sids:
                    del self.user_rooms[user_id]

    def _register_handlers(self):
        """Register WebSocket event handlers."""

        @self.socketio.on_error_default
        def default_error_handler(e):
            logger.error(f"WS error: {e}")

        # =====================================================================
        # Connection Events
        # =====================================================================

        @self.socketio.on('connect')
        def handle_connect(auth=None):
            socket_id = request.sid
            try:
                payload = AuthSecurity.decode_token(self._token_from_request(auth))
            except UnauthorizedError as e:
                logger.warning(f"WS auth failed: sid={socket_id}: {e.message}")
                raise ConnectionRefusedError('unauthorized')

            user_id = payload['user_id']
            self.connected_users[socket_id] = {
                'user_id': user_id,
                'connected_at': to_iso(utc_now())
            }
            logger.info(f"WS connected: user={user_id}, sid={socket_id}")
            emit(EventEmitter.CONNECTED, {'userId': user_id, 'socketId': socket_id})

        @self.socketio.on('disconnect')
        def handle_disconnect(*args):
            socket_id = request.sid
            user_info = self.connected_users.pop(socket_id, None)
            self._forget_socket(socket_id)
            if user_info:
                logger.info(f"WS disconnected: user={user_info['user_id']}, sid={socket_id}")

        # =====================================================================
        # Room Events
        # =====================================================================

        @self.socketio.on('join')
        def handle_join(data=None):
            user_info = self._get_user_from_socket()
            if not user_info:
                emit(EventEmitter.ERROR, {'code': 'UNAUTHORIZED', 'message': 'Not authenticated'})
                return
            room = self._room_from_payload(data)
            if not room:
                emit(EventEmitter.ERROR, {'code': 'INVALID_DATA', 'message': 'userId required'})
                return
            if room != user_info['user_id']:
                logger.warning(f"WS join refused: user={user_info['user_id']} asked for room={room}")
                emit(EventEmitter.ERROR, {'code': 'FORBIDDEN', 'message': 'Cannot join another user\'s channel'})
                return

            join_room(room)
            self._add_to_room(room, request.sid)
            logger.debug(f"WS join: user={room}, sid={request.sid}")
            emit(EventEmitter.JOINED, {'userId': room})

        @self.socketio.on('leave')
        def handle_leave(data=None):
            user_info = self._get_user_from_socket()
            if not user_info:
                emit(EventEmitter.ERROR, {'code': 'UNAUTHORIZED', 'message': 'Not authenticated'})
                return
            room = self._room_from_payload(data) or user_info['user_id']
            leave_room(room)
            self._remove_from_room(room, request.sid)
            logger.debug(f"WS leave: user={room}, sid={request.sid}")
            emit(EventEmitter.LEFT, {'userId': room})
