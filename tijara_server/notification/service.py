"""Notification service: durable per-user alerts plus a realtime courtesy push.

The MongoDB row is the source of truth. Pushing the serialized notification
to the recipient's room happens after the write has returned and can never
undo or fail it.
"""
import logging
import math
from typing import Any, Dict, Optional

from tijara_server.exception import NotFoundError, ValidationError
from tijara_server.notification.models import Notification, NotificationType, RelatedKind
from tijara_server.repository.mongo_helper import persistence_errors
from tijara_server.utils.generator import new_id
from tijara_server.websocket.event_emitter import EventEmitter

logger = logging.getLogger(__name__)


class NotificationService:
    """Create, list, and manage notifications for one user at a time."""

    def __init__(self, notifications, publisher=None, max_page_size: int = 50):
        self.repo = notifications
        # Anything with publish(user_id, event, payload) -> bool; usually the WebSocketHub
        self.publisher = publisher
        self.max_page_size = max_page_size

    # =========================================================================
    # Create
    # =========================================================================

    def build_notification(
        self,
        recipient_id: str,
        notification_type,
        content: str,
        related_id: Optional[str] = None,
        related_kind: Optional[str] = None
    ) -> Notification:
        """Validate input and return an unsaved Notification."""
        ntype = NotificationType.parse(notification_type)
        if ntype is None:
            raise ValidationError('Invalid notification type')
        if not recipient_id:
            raise ValidationError('Recipient is required')
        if not isinstance(content, str) or not content.strip():
            raise ValidationError('Notification content is required')
        if isinstance(related_kind, RelatedKind):
            related_kind = related_kind.value
        return Notification(
            notification_id=new_id(),
            user_id=recipient_id,
            notification_type=ntype,
            content=content.strip(),
            related_id=related_id,
            related_kind=related_kind
        )

    def create_notification(
        self,
        recipient_id: str,
        notification_type,
        related_id: Optional[str] = None,
        content: str = '',
        related_kind: Optional[str] = None
    ) -> Dict[str, Any]:
        """Persist a notification, then push it to the recipient's channel."""
        notification = self.build_notification(recipient_id, notification_type, content, related_id, related_kind)
        with persistence_errors('create notification'):
            self.repo.create_notification(notification)
        logger.info(f"Notification {notification.notification_id} ({notification.notification_type.value}) -> {recipient_id}")
        self.publish(notification)
        return notification.to_dict()

    def publish(self, notification: Notification) -> bool:
        """Best-effort push of a stored notification. Never raises."""
        if self.publisher is None:
            return False
        try:
            return self.publisher.publish(notification.user_id, EventEmitter.NOTIFICATION, notification.to_dict())
        except Exception as e:
            logger.error(f"Failed to publish notification {notification.notification_id}: {e}")
            return False

    # =========================================================================
    # Read
    # =========================================================================

    def get_notifications(self, user_id: str, page: int = 1, page_size: int = 20) -> Dict[str, Any]:
        """Newest-first page of the user's notifications with totals."""
        if page < 1:
            raise ValidationError('page must be >= 1')
        if page_size < 1 or page_size > self.max_page_size:
            raise ValidationError(f'limit must be between 1 and {self.max_page_size}')
        skip = (page - 1) * page_size
        with persistence_errors('fetch notifications'):
            items = self.repo.find_for_user(user_id, skip=skip, limit=page_size)
            total = self.repo.count_for_user(user_id)
            unread = self.repo.unread_count(user_id)
        return {
            'notifications': [n.to_dict() for n in items],
            'pagination': {
                'page': page,
                'limit': page_size,
                'total': total,
                'pages': math.ceil(total / page_size)
            },
            'unreadCount': unread
        }

    def unread_count(self, user_id: str) -> int:
        with persistence_errors('count unread notifications'):
            return self.repo.unread_count(user_id)

    # =========================================================================
    # Update / Delete
    # =========================================================================

    def _get_owned(self, notification_id: str, user_id: str) -> Notification:
        with persistence_errors('fetch notification'):
            notification = self.repo.find_by_id(notification_id)
        # Someone else's notification is reported exactly like a missing one
        if notification is None or notification.user_id != user_id:
            raise NotFoundError('Notification not found')
        return notification

    def mark_as_read(self, notification_id: str, user_id: str) -> Dict[str, Any]:
        notification = self._get_owned(notification_id, user_id)
        if not notification.read:
            with persistence_errors('mark notification read'):
                self.repo.mark_read(notification_id)
            notification.read = True
        return notification.to_dict()

    def mark_all_as_read(self, user_id: str) -> int:
        with persistence_errors('mark notifications read'):
            count = self.repo.mark_all_read(user_id)
        logger.info(f"Marked {count} notifications read for {user_id}")
        return count

    def delete_notification(self, notification_id: str, user_id: str) -> None:
        self._get_owned(notification_id, user_id)
        with persistence_errors('delete notification'):
            deleted = self.repo.delete_notification(notification_id)
        if not deleted:
            raise NotFoundError('Notification not found')

    def clear_all_notifications(self, user_id: str) -> int:
        with persistence_errors('clear notifications'):
            count = self.repo.delete_all_for_user(user_id)
        logger.info(f"Cleared {count} notifications for {user_id}")
        return count
