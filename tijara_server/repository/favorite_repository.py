import logging
from typing import List

from pymongo.errors import DuplicateKeyError

from tijara_server.repository.base_repository import BaseRepository
from tijara_server.utils.generator import new_id
from tijara_server.utils.time_utils import utc_now

logger = logging.getLogger(__name__)


class FavoriteRepository(BaseRepository):
    """(user, listing) pairs; unique per pair."""
    collection_name = 'favorites'

    def exists(self, user_id: str, listing_id: str, session=None) -> bool:
        return self.find_one({'user_id': user_id, 'listing_id': listing_id}, session=session) is not None

    def add(self, user_id: str, listing_id: str, session=None) -> bool:
        """Insert the pair; returns False when a concurrent request already saved it."""
        try:
            self.create({
                '_id': new_id(),
                'user_id': user_id,
                'listing_id': listing_id,
                'created_at': utc_now()
            }, session=session)
            return True
        except DuplicateKeyError:
            logger.info(f"Favorite {user_id}/{listing_id} saved concurrently; keeping it")
            return False

    def remove(self, user_id: str, listing_id: str, session=None) -> int:
        return self.delete({'user_id': user_id, 'listing_id': listing_id}, session=session)

    def remove_for_listing(self, listing_id: str, session=None) -> int:
        return self.delete({'listing_id': listing_id}, multi=True, session=session)

    def count_for_listing(self, listing_id: str, session=None) -> int:
        return self.count({'listing_id': listing_id}, session=session)

    def listing_ids_for_user(self, user_id: str) -> List[str]:
        docs = self.find({'user_id': user_id}, sort=[('created_at', -1), ('_id', -1)])
        return [d['listing_id'] for d in docs]
