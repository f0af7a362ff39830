"""Notification data model.

A notification is the durable record of an alert for one user; the realtime
push is only a courtesy copy of it.
"""
from typing import Optional, Dict, Any
from datetime import datetime
from enum import Enum

from tijara_server.utils.time_utils import utc_now, to_iso


class NotificationType(str, Enum):
    NEW_MESSAGE = "NEW_MESSAGE"
    LISTING_INTEREST = "LISTING_INTEREST"
    PRICE_UPDATE = "PRICE_UPDATE"
    LISTING_SOLD = "LISTING_SOLD"
    SYSTEM_NOTICE = "SYSTEM_NOTICE"
    LISTING_CREATED = "LISTING_CREATED"

    @classmethod
    def parse(cls, value) -> Optional['NotificationType']:
        """Return the matching member, or None for anything unrecognized."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            return None


class RelatedKind(str, Enum):
    """Optional tag describing what `related_id` points at. Not enforced."""
    LISTING = "listing"
    CONVERSATION = "conversation"
    MESSAGE = "message"
    USER = "user"


class Notification:
    """Notification document structure."""

    def __init__(
        self,
        notification_id: str,
        user_id: str,
        notification_type: NotificationType,
        content: str,
        read: bool = False,
        related_id: Optional[str] = None,
        related_kind: Optional[str] = None,
        created_at: Optional[datetime] = None
    ):
        self.notification_id = notification_id
        self.user_id = user_id
        self.notification_type = notification_type
        self.content = content
        self.read = read
        self.related_id = related_id
        self.related_kind = related_kind
        self.created_at = created_at or utc_now()

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.notification_id,
            'userId': self.user_id,
            'type': self.notification_type.value,
            'content': self.content,
            'read': self.read,
            'relatedId': self.related_id,
            'relatedKind': self.related_kind,
            'createdAt': to_iso(self.created_at)
        }

    def to_db_doc(self) -> Dict[str, Any]:
        return {
            '_id': self.notification_id,
            'user_id': self.user_id,
            'type': self.notification_type.value,
            'content': self.content,
            'read': self.read,
            'related_id': self.related_id,
            'related_kind': self.related_kind,
            'created_at': self.created_at
        }

    @classmethod
    def from_doc(cls, doc: Dict[str, Any]) -> 'Notification':
        return cls(
            notification_id=str(doc.get('_id')),
            user_id=doc.get('user_id'),
            notification_type=NotificationType(doc.get('type')),
            content=doc.get('content'),
            read=bool(doc.get('read', False)),
            related_id=doc.get('related_id'),
            related_kind=doc.get('related_kind'),
            created_at=doc.get('created_at')
        )
