from typing import List, Optional

from tijara_server.dto.listing_dto import ListingDTO
from tijara_server.repository.base_repository import BaseRepository


class ListingRepository(BaseRepository):
    collection_name = 'listings'

    def create_listing(self, listing: ListingDTO, session=None) -> str:
        return self.create(listing.to_db_doc(), session=session)

    def find_by_id(self, listing_id: str, session=None) -> Optional[ListingDTO]:
        if not isinstance(listing_id, str) or not listing_id:
            return None
        doc = self.find_one({'_id': listing_id}, session=session)
        return ListingDTO.from_doc(doc) if doc else None

    def find_by_ids(self, listing_ids: List[str], session=None) -> List[ListingDTO]:
        if not listing_ids:
            return []
        docs = self.find({'_id': {'$in': list(listing_ids)}}, session=session)
        return [ListingDTO.from_doc(d) for d in docs]

    def delete_listing(self, listing_id: str, session=None) -> int:
        return self.delete({'_id': listing_id}, session=session)
