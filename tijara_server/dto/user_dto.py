from typing import Optional, Dict, Any
from datetime import datetime

from tijara_server.utils.time_utils import utc_now, to_iso

USER_ROLES = ('USER', 'ADMIN')


class UserDTO:
    def __init__(self, id: str, email: str, username: str, password_hash: Optional[str] = None,
                 name: Optional[str] = None, profile_picture: Optional[str] = None, bio: Optional[str] = None,
                 location: Optional[str] = None, role: str = 'USER', preferences: Optional[Dict[str, Any]] = None,
                 created_at: Optional[datetime] = None, updated_at: Optional[datetime] = None):
        self.id = id
        self.email = email
        self.username = username
        self.password_hash = password_hash
        self.name = name
        self.profile_picture = profile_picture
        self.bio = bio
        self.location = location
        self.role = role if role in USER_ROLES else 'USER'
        self.preferences = preferences or {}
        self.created_at = created_at or utc_now()
        self.updated_at = updated_at or self.created_at

    @classmethod
    def from_doc(cls, doc: Dict[str, Any]) -> 'UserDTO':
        return cls(
            id=str(doc.get('_id')),
            email=doc.get('email'),
            username=doc.get('username'),
            password_hash=doc.get('password_hash'),
            name=doc.get('name'),
            profile_picture=doc.get('profile_picture'),
            bio=doc.get('bio'),
            location=doc.get('location'),
            role=doc.get('role', 'USER'),
            preferences=doc.get('preferences'),
            created_at=doc.get('created_at'),
            updated_at=doc.get('updated_at')
        )

    def to_db_doc(self) -> Dict[str, Any]:
        return {
            '_id': self.id,
            'email': self.email,
            'username': self.username,
            'password_hash': self.password_hash,
            'name': self.name,
            'profile_picture': self.profile_picture,
            'bio': self.bio,
            'location': self.location,
            'role': self.role,
            'preferences': self.preferences,
            'created_at': self.created_at,
            'updated_at': self.updated_at
        }

    def public_profile(self) -> Dict[str, Any]:
        """Fields safe to show other users (attached to messages)."""
        return {
            'id': self.id,
            'username': self.username,
            'profilePicture': self.profile_picture
        }

    def to_dict(self) -> Dict[str, Any]:
        # password_hash is never serialized
        return {
            'id': self.id,
            'email': self.email,
            'username': self.username,
            'name': self.name,
            'profilePicture': self.profile_picture,
            'bio': self.bio,
            'location': self.location,
            'role': self.role,
            'preferences': self.preferences,
            'createdAt': to_iso(self.created_at),
            'updatedAt': to_iso(self.updated_at)
        }
