"""Listing flows that touch other users: creation, views, favorites, deletion.

Search and editing are handled elsewhere; this service exists for the
operations that raise notifications or cascade across collections.
"""
import logging
from typing import Any, Dict, List

from tijara_server.dto.listing_dto import ListingDTO
from tijara_server.exception import AuthorizationError, NotFoundError
from tijara_server.notification.models import NotificationType, RelatedKind
from tijara_server.repository.mongo_helper import persistence_errors
from tijara_server.utils.generator import new_id

logger = logging.getLogger(__name__)


class ListingService:

    def __init__(self, database, users, listings, favorites, notification_repo, notifications):
        self.database = database
        self.users = users
        self.listings = listings
        self.favorites = favorites
        self.notification_repo = notification_repo
        self.notifications = notifications

    def _get_listing(self, listing_id: str) -> ListingDTO:
        with persistence_errors('fetch listing'):
            listing = self.listings.find_by_id(listing_id)
        if listing is None:
            raise NotFoundError('Listing not found')
        return listing

    def _notify_owner_of_interest(self, listing: ListingDTO, actor, verb: str):
        """Tell the owner someone looked at or saved their listing. Failures are logged only."""
        try:
            self.notifications.create_notification(
                recipient_id=listing.user_id,
                notification_type=NotificationType.LISTING_INTEREST,
                related_id=listing.id,
                content=f'{actor.username} {verb} your listing "{listing.title}"',
                related_kind=RelatedKind.LISTING
            )
        except Exception as e:
            logger.error(f"Failed to send LISTING_INTEREST for {listing.id}: {e}")

    # =========================================================================
    # Create / Read / Delete
    # =========================================================================

    def create_listing(self, owner_id: str, data: Dict[str, Any]) -> Dict[str, Any]:
        """Insert the listing and the owner's LISTING_CREATED notification together."""
        listing = ListingDTO.from_request(new_id(), owner_id, data)
        notification = self.notifications.build_notification(
            recipient_id=owner_id,
            notification_type=NotificationType.LISTING_CREATED,
            content=f'Your listing "{listing.title}" has been created successfully',
            related_id=listing.id,
            related_kind=RelatedKind.LISTING
        )
        with persistence_errors('create listing'):
            with self.database.transaction() as session:
                self.listings.create_listing(listing, session=session)
                self.notification_repo.create_notification(notification, session=session)
        logger.info(f"Listing {listing.id} created by {owner_id}")
        self.notifications.publish(notification)
        return listing.to_dict()

    def get_listing(self, listing_id: str, viewer=None) -> Dict[str, Any]:
        """Return the listing; a view by someone other than the owner notifies the owner."""
        listing = self._get_listing(listing_id)
        if viewer is not None and viewer.id != listing.user_id:
            self._notify_owner_of_interest(listing, viewer, 'viewed')
        result = listing.to_dict()
        with persistence_errors('count favorites'):
            result['favoriteCount'] = self.favorites.count_for_listing(listing.id)
            if viewer is not None:
                result['isFavorited'] = self.favorites.exists(viewer.id, listing.id)
        return result

    def delete_listing(self, listing_id: str, caller_id: str) -> None:
        """Owner-only; favorites go with the listing."""
        listing = self._get_listing(listing_id)
        if listing.user_id != caller_id:
            raise AuthorizationError('Not authorized to delete this listing')
        with persistence_errors('delete listing'):
            with self.database.transaction() as session:
                removed = self.favorites.remove_for_listing(listing_id, session=session)
                self.listings.delete_listing(listing_id, session=session)
        logger.info(f"Listing {listing_id} deleted by {caller_id} ({removed} favorites removed)")

    # =========================================================================
    # Favorites
    # =========================================================================

    def toggle_favorite(self, listing_id: str, user) -> Dict[str, Any]:
        """Add the favorite if absent, remove it if present."""
        listing = self._get_listing(listing_id)
        with persistence_errors('toggle favorite'):
            added = False
            if self.favorites.exists(user.id, listing_id):
                self.favorites.remove(user.id, listing_id)
                favorited = False
            else:
                # A request that lost the insert race still ends up favorited
                added = self.favorites.add(user.id, listing_id)
                favorited = True
            count = self.favorites.count_for_listing(listing_id)

        if added and user.id != listing.user_id:
            self._notify_owner_of_interest(listing, user, 'saved')
        return {'favorited': favorited, 'favoriteCount': count}

    def get_user_favorites(self, user_id: str) -> List[Dict[str, Any]]:
        """Listings the user has favorited, most recently saved first."""
        with persistence_errors('fetch favorites'):
            ids: List[str] = self.favorites.listing_ids_for_user(user_id)
            by_id: Dict[str, ListingDTO] = {listing.id: listing for listing in self.listings.find_by_ids(ids)}
        return [by_id[i].to_dict() for i in ids if i in by_id]
