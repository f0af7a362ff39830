from typing import Dict, Iterable, Optional

from tijara_server.dto.user_dto import UserDTO
from tijara_server.repository.base_repository import BaseRepository


class UserRepository(BaseRepository):
    collection_name = 'users'

    def create_user(self, user: UserDTO, session=None) -> str:
        return self.create(user.to_db_doc(), session=session)

    def find_by_id(self, user_id: str, session=None) -> Optional[UserDTO]:
        if not isinstance(user_id, str) or not user_id:
            return None
        doc = self.find_one({'_id': user_id}, session=session)
        return UserDTO.from_doc(doc) if doc else None

    def find_public_profiles(self, user_ids: Iterable[str], session=None) -> Dict[str, Dict]:
        """Map user id -> {id, username, profilePicture} for the given ids."""
        ids = list(set(user_ids))
        if not ids:
            return {}
        docs = self.find({'_id': {'$in': ids}}, session=session)
        return {str(d['_id']): UserDTO.from_doc(d).public_profile() for d in docs}
