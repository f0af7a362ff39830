from typing import Dict, List, Optional

from tijara_server.messaging.models import Message
from tijara_server.repository.base_repository import BaseRepository


class MessageRepository(BaseRepository):
    collection_name = 'messages'

    @staticmethod
    def visible_query(conversation_id: str, user_id: str) -> Dict:
        """Messages in the conversation the user sent or received."""
        return {
            'conversation_id': conversation_id,
            '$or': [{'sender_id': user_id}, {'recipient_id': user_id}]
        }

    def create_message(self, message: Message, session=None) -> str:
        return self.create(message.to_db_doc(), session=session)

    def find_by_id(self, message_id: str, session=None) -> Optional[Message]:
        if not isinstance(message_id, str) or not message_id:
            return None
        doc = self.find_one({'_id': message_id}, session=session)
        return Message.from_doc(doc) if doc else None

    def latest_in_conversation(self, conversation_id: str) -> Optional[Message]:
        doc = self.find_one({'conversation_id': conversation_id}, sort=[('created_at', -1), ('_id', -1)])
        return Message.from_doc(doc) if doc else None

    def mark_read(self, conversation_id: str, recipient_id: str) -> int:
        return self.update(
            {'conversation_id': conversation_id, 'recipient_id': recipient_id, 'read': False},
            {'read': True},
            multi=True
        )

    def find_page(self, conversation_id: str, user_id: str, skip: int, limit: int) -> List[Message]:
        """Newest-first window of the visible messages."""
        docs = self.find(
            self.visible_query(conversation_id, user_id),
            sort=[('created_at', -1), ('_id', -1)],
            skip=skip,
            limit=limit
        )
        return [Message.from_doc(d) for d in docs]

    def count_visible(self, conversation_id: str, user_id: str) -> int:
        return self.count(self.visible_query(conversation_id, user_id))

    def delete_message(self, message_id: str, session=None) -> int:
        return self.delete({'_id': message_id}, session=session)
