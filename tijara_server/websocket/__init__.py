"""WebSocket module for the per-user realtime channel.

This module provides:
- WebSocketHub: connect/join/leave handlers and `publish`
- EventEmitter: best-effort emit into a user's room
"""

from tijara_server.websocket.event_emitter import EventEmitter
from tijara_server.websocket.hub import WebSocketHub

__all__ = ['EventEmitter', 'WebSocketHub']
