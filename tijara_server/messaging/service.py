"""Messaging service layer for business logic.

Buyers and sellers talk about a listing through a conversation that is
unique per (participant pair, listing). This service owns the rules for
sending, listing, reading, and deleting messages; the HTTP layer only
parses requests and picks status codes.
"""
import logging
from typing import Any, Dict, List, Optional

from tijara_server.exception import AuthorizationError, NotFoundError, ValidationError
from tijara_server.messaging.models import Message
from tijara_server.repository.mongo_helper import persistence_errors
from tijara_server.utils.generator import new_id
from tijara_server.utils.time_utils import utc_now

logger = logging.getLogger(__name__)


class MessagingService:
    """High-level messaging service."""

    def __init__(self, database, users, listings, conversations, messages, max_page_size: int = 100):
        self.database = database
        self.users = users
        self.listings = listings
        self.conversations = conversations
        self.messages = messages
        self.max_page_size = max_page_size

    # =========================================================================
    # Message Operations
    # =========================================================================

    def send_message(self, sender_id: str, recipient_id: str, listing_id: str, content) -> Dict[str, Any]:
        """Send a message about a listing, creating the conversation on first contact.

        Returns:
            {'message': ..., 'conversation': ..., 'created': bool}
        """
        if not isinstance(content, str) or not content.strip():
            raise ValidationError('Message content is required')
        # Ids reach Mongo filters verbatim; an object here would act as a query operator
        if not isinstance(recipient_id, str) or not recipient_id.strip():
            raise ValidationError('Recipient is required')
        if not isinstance(listing_id, str) or not listing_id.strip():
            raise ValidationError('Listing is required')
        if recipient_id == sender_id:
            raise ValidationError('Cannot send a message to yourself')

        with persistence_errors('send message'):
            if self.users.find_by_id(recipient_id) is None:
                raise NotFoundError('Recipient not found')
            if self.listings.find_by_id(listing_id) is None:
                raise NotFoundError('Listing not found')

            conversation, created = self.conversations.get_or_create(sender_id, recipient_id, listing_id)

            message = Message(
                message_id=new_id(),
                conversation_id=conversation.conversation_id,
                sender_id=sender_id,
                recipient_id=recipient_id,
                content=content
            )
            with self.database.transaction() as session:
                self.messages.create_message(message, session=session)
                self.conversations.update_summary(
                    conversation.conversation_id, message.content, message.created_at, session=session
                )

            conversation = self.conversations.find_by_id(conversation.conversation_id)
            message.sender = self.users.find_public_profiles([sender_id]).get(sender_id)

        logger.info(
            f"Message {message.message_id} {sender_id} -> {recipient_id} "
            f"in {conversation.conversation_id} (new conversation: {created})"
        )
        return {
            'message': message.to_dict(),
            'conversation': conversation.to_dict(),
            'created': created
        }

    def get_messages(self, conversation_id: str, user_id: str, page: int = 1, page_size: int = 20) -> Dict[str, Any]:
        """Return one page of the caller's messages, oldest first, marking them read.

        Unread messages addressed to the caller are marked read before the
        page is fetched, so the returned items already show `read: true`.
        """
        if page < 1:
            raise ValidationError('page must be >= 1')
        if page_size < 1 or page_size > self.max_page_size:
            raise ValidationError(f'limit must be between 1 and {self.max_page_size}')

        with persistence_errors('fetch messages'):
            if self.conversations.find_by_id(conversation_id) is None:
                raise NotFoundError('Conversation not found')

            marked = self.messages.mark_read(conversation_id, user_id)
            skip = (page - 1) * page_size
            items = self.messages.find_page(conversation_id, user_id, skip=skip, limit=page_size)
            total = self.messages.count_visible(conversation_id, user_id)
            profiles = self.users.find_public_profiles(m.sender_id for m in items)

        # Newest-first window, served oldest-first
        items.reverse()
        for m in items:
            m.sender = profiles.get(m.sender_id)

        if marked:
            logger.debug(f"Marked {marked} messages read in {conversation_id} for {user_id}")
        return {
            'messages': [m.to_dict() for m in items],
            'page': page,
            'limit': page_size,
            'total': total,
            'markedRead': marked
        }

    def delete_message(self, message_id: str, caller_id: str) -> None:
        """Hard-delete a message; only its sender may do so."""
        with persistence_errors('delete message'):
            message = self.messages.find_by_id(message_id)
            if message is None:
                raise NotFoundError('Message not found')
            if message.sender_id != caller_id:
                raise AuthorizationError('Not authorized to delete this message')
            self.messages.delete_message(message_id)
        logger.info(f"Message {message_id} deleted by {caller_id}")

    # =========================================================================
    # Conversation Operations
    # =========================================================================

    def get_conversations(self, user_id: str) -> List[Dict[str, Any]]:
        """Conversations the user takes part in, most recently active first."""
        result = []
        with persistence_errors('fetch conversations'):
            for conversation in self.conversations.find_for_user(user_id):
                latest: Optional[Message] = self.messages.latest_in_conversation(conversation.conversation_id)
                item = conversation.to_dict()
                item['latestMessage'] = latest.to_dict() if latest else None
                result.append(item)
        return result
