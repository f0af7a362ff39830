from tijara_server.services.container import ServiceContainer
from tijara_server.services.listing_service import ListingService

__all__ = ['ServiceContainer', 'ListingService']
