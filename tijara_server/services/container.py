"""Wires repositories and services onto one MongoDatabase handle.

Built once in `create_app` and stored at `app.extensions['tijara']`; route
handlers reach it through `get_services()`.
"""
from tijara_server.messaging.service import MessagingService
from tijara_server.notification.service import NotificationService
from tijara_server.repository import (
    ConversationRepository, FavoriteRepository, ListingRepository,
    MessageRepository, NotificationRepository, UserRepository
)
from tijara_server.services.listing_service import ListingService


class ServiceContainer:

    def __init__(self, database, settings, hub=None):
        self.database = database
        self.settings = settings
        self.hub = hub

        self.users = UserRepository(database)
        self.listing_repo = ListingRepository(database)
        self.favorite_repo = FavoriteRepository(database)
        self.conversation_repo = ConversationRepository(database)
        self.message_repo = MessageRepository(database)
        self.notification_repo = NotificationRepository(database)

        self.notifications = NotificationService(
            self.notification_repo,
            publisher=hub,
            max_page_size=settings.NOTIFICATIONS_MAX_PAGE_SIZE
        )
        self.messaging = MessagingService(
            database,
            users=self.users,
            listings=self.listing_repo,
            conversations=self.conversation_repo,
            messages=self.message_repo,
            max_page_size=settings.MESSAGES_MAX_PAGE_SIZE
        )
        self.listings = ListingService(
            database,
            users=self.users,
            listings=self.listing_repo,
            favorites=self.favorite_repo,
            notification_repo=self.notification_repo,
            notifications=self.notifications
        )
