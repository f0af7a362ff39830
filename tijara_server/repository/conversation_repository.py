import logging
from datetime import datetime
from typing import List, Optional, Tuple

from pymongo.errors import DuplicateKeyError

from tijara_server.messaging.models import Conversation, conversation_pair_key
from tijara_server.repository.base_repository import BaseRepository
from tijara_server.utils.generator import new_id

logger = logging.getLogger(__name__)


class ConversationRepository(BaseRepository):
    collection_name = 'conversations'

    def find_by_id(self, conversation_id: str, session=None) -> Optional[Conversation]:
        if not isinstance(conversation_id, str) or not conversation_id:
            return None
        doc = self.find_one({'_id': conversation_id}, session=session)
        return Conversation.from_doc(doc) if doc else None

    def find_by_pair(self, user_a: str, user_b: str, listing_id: str, session=None) -> Optional[Conversation]:
        doc = self.find_one({'pair_key': conversation_pair_key(user_a, user_b, listing_id)}, session=session)
        return Conversation.from_doc(doc) if doc else None

    def get_or_create(self, user_a: str, user_b: str, listing_id: str) -> Tuple[Conversation, bool]:
        """Return (conversation, created) for the pair on this listing.

        Two concurrent first messages race on the unique pair_key index; the
        loser re-reads the winner's row.
        """
        existing = self.find_by_pair(user_a, user_b, listing_id)
        if existing:
            return existing, False

        conversation = Conversation(
            conversation_id=new_id(),
            participants=[user_a, user_b],
            listing_id=listing_id
        )
        try:
            self.create(conversation.to_db_doc())
            logger.info(f"Created conversation {conversation.conversation_id} for listing {listing_id}")
            return conversation, True
        except DuplicateKeyError:
            logger.info(f"Conversation for {conversation.pair_key} created concurrently; reusing it")
            winner = self.find_by_pair(user_a, user_b, listing_id)
            if winner is None:
                raise
            return winner, False

    def update_summary(self, conversation_id: str, content: str, at: datetime, session=None) -> int:
        """Move the summary forward to (content, at); never backwards."""
        return self.collection.update_one(
            {'_id': conversation_id, 'last_message_at': {'$lte': at}},
            {'$set': {'last_message': content, 'last_message_at': at}},
            **self._session_kwargs(session)
        ).modified_count

    def find_for_user(self, user_id: str) -> List[Conversation]:
        docs = self.find({'participants': user_id}, sort=[('last_message_at', -1), ('_id', -1)])
        return [Conversation.from_doc(d) for d in docs]
