"""Messaging data models for buyer/seller conversations.

Collections:
- conversations: one thread per (participant pair, listing)
- messages: individual messages inside a conversation
"""
from typing import Optional, Dict, Any, List
from datetime import datetime

from tijara_server.utils.time_utils import utc_now, to_iso


def conversation_pair_key(user_a: str, user_b: str, listing_id: str) -> str:
    """Normalized uniqueness key: the same for (a, b, L) and (b, a, L)."""
    low, high = sorted([user_a, user_b])
    return f"{listing_id}:{low}:{high}"


class Conversation:
    """Conversation document structure."""

    def __init__(
        self,
        conversation_id: str,
        participants: List[str],
        listing_id: str,
        last_message: Optional[str] = None,
        last_message_at: Optional[datetime] = None,
        created_at: Optional[datetime] = None,
        pair_key: Optional[str] = None
    ):
        self.conversation_id = conversation_id
        self.participants = sorted(participants)
        self.listing_id = listing_id
        # Denormalized summary for list views
        self.last_message = last_message
        self.last_message_at = last_message_at or utc_now()
        self.created_at = created_at or self.last_message_at
        self.pair_key = pair_key or conversation_pair_key(participants[0], participants[1], listing_id)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.conversation_id,
            'participants': self.participants,
            'listingId': self.listing_id,
            'lastMessage': self.last_message,
            'lastMessageAt': to_iso(self.last_message_at),
            'createdAt': to_iso(self.created_at)
        }

    def to_db_doc(self) -> Dict[str, Any]:
        return {
            '_id': self.conversation_id,
            'pair_key': self.pair_key,
            'participants': self.participants,
            'listing_id': self.listing_id,
            'last_message': self.last_message,
            'last_message_at': self.last_message_at,
            'created_at': self.created_at
        }

    @classmethod
    def from_doc(cls, doc: Dict[str, Any]) -> 'Conversation':
        return cls(
            conversation_id=str(doc.get('_id')),
            participants=doc.get('participants', []),
            listing_id=doc.get('listing_id'),
            last_message=doc.get('last_message'),
            last_message_at=doc.get('last_message_at'),
            created_at=doc.get('created_at'),
            pair_key=doc.get('pair_key')
        )


class Message:
    """Message document structure."""

    def __init__(
        self,
        message_id: str,
        conversation_id: str,
        sender_id: str,
        recipient_id: str,
        content: str,
        read: bool = False,
        created_at: Optional[datetime] = None,
        sender: Optional[Dict[str, Any]] = None
    ):
        self.message_id = message_id
        self.conversation_id = conversation_id
        self.sender_id = sender_id
        self.recipient_id = recipient_id
        self.content = content
        self.read = read
        self.created_at = created_at or utc_now()
        # Sender public profile {id, username, profilePicture}, attached on read
        self.sender = sender

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.message_id,
            'conversationId': self.conversation_id,
            'senderId': self.sender_id,
            'recipientId': self.recipient_id,
            'content': self.content,
            'read': self.read,
            'createdAt': to_iso(self.created_at),
            'sender': self.sender
        }

    def to_db_doc(self) -> Dict[str, Any]:
        return {
            '_id': self.message_id,
            'conversation_id': self.conversation_id,
            'sender_id': self.sender_id,
            'recipient_id': self.recipient_id,
            'content': self.content,
            'read': self.read,
            'created_at': self.created_at
        }

    @classmethod
    def from_doc(cls, doc: Dict[str, Any]) -> 'Message':
        return cls(
            message_id=str(doc.get('_id')),
            conversation_id=doc.get('conversation_id'),
            sender_id=doc.get('sender_id'),
            recipient_id=doc.get('recipient_id'),
            content=doc.get('content'),
            read=bool(doc.get('read', False)),
            created_at=doc.get('created_at')
        )
