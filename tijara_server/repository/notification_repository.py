from typing import List, Optional

from tijara_server.notification.models import Notification
from tijara_server.repository.base_repository import BaseRepository


class NotificationRepository(BaseRepository):
    collection_name = 'notifications'

    def create_notification(self, notification: Notification, session=None) -> str:
        return self.create(notification.to_db_doc(), session=session)

    def find_by_id(self, notification_id: str) -> Optional[Notification]:
        if not isinstance(notification_id, str) or not notification_id:
            return None
        doc = self.find_one({'_id': notification_id})
        return Notification.from_doc(doc) if doc else None

    def find_for_user(self, user_id: str, skip: int, limit: int) -> List[Notification]:
        docs = self.find({'user_id': user_id}, sort=[('created_at', -1), ('_id', -1)], skip=skip, limit=limit)
        return [Notification.from_doc(d) for d in docs]

    def count_for_user(self, user_id: str) -> int:
        return self.count({'user_id': user_id})

    def unread_count(self, user_id: str) -> int:
        return self.count({'user_id': user_id, 'read': False})

    def mark_read(self, notification_id: str) -> int:
        return self.update({'_id': notification_id}, {'read': True})

    def mark_all_read(self, user_id: str) -> int:
        return self.update({'user_id': user_id, 'read': False}, {'read': True}, multi=True)

    def delete_notification(self, notification_id: str) -> int:
        return self.delete({'_id': notification_id})

    def delete_all_for_user(self, user_id: str) -> int:
        return self.delete({'user_id': user_id}, multi=True)
