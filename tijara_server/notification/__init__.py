"""Notifications: durable per-user alerts with a realtime push."""

from tijara_server.notification.models import Notification, NotificationType, RelatedKind
from tijara_server.notification.service import NotificationService

__all__ = ['Notification', 'NotificationType', 'RelatedKind', 'NotificationService']
