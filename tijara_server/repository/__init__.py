from tijara_server.repository.mongo_helper import MongoDatabase, persistence_errors
from tijara_server.repository.user_repository import UserRepository
from tijara_server.repository.listing_repository import ListingRepository
from tijara_server.repository.favorite_repository import FavoriteRepository
from tijara_server.repository.conversation_repository import ConversationRepository
from tijara_server.repository.message_repository import MessageRepository
from tijara_server.repository.notification_repository import NotificationRepository

__all__ = [
    'MongoDatabase',
    'persistence_errors',
    'UserRepository',
    'ListingRepository',
    'FavoriteRepository',
    'ConversationRepository',
    'MessageRepository',
    'NotificationRepository',
]
