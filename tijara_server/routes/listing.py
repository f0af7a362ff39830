"""Listing routes that involve other users.

Endpoints:
- POST   /api/listings                  - create (owner gets LISTING_CREATED)
- GET    /api/listings/favorites        - the caller's favorited listings
- GET    /api/listings/<id>             - read (owner gets LISTING_INTEREST)
- DELETE /api/listings/<id>             - delete (owner only)
- POST   /api/listings/<id>/favorite    - toggle favorite
"""
import logging

from flask import Blueprint, request

from tijara_server.utils.decorators import handle_errors, require_auth
from tijara_server.utils.helpers import respond_success, get_services

logger = logging.getLogger(__name__)

listing_bp = Blueprint('listing', __name__, url_prefix='/api/listings')


@listing_bp.route('', methods=['POST'])
@listing_bp.route('/', methods=['POST'])
@handle_errors
@require_auth
def create_listing(auth_payload):
    """Create a listing.

    Request Body:
        {
            "title": "...", "price": 100, "category": "...", "location": "...",  // Required
            "description": "...", "condition": "...", "listingAction": "SELL|RENT",
            "status": "ACTIVE", "images": [...], "attributes": [...], "features": [...],
            "details": {"vehicles": {...}} or {"realEstate": {...}}
        }
    """
    user_id = auth_payload['user_id']
    logger.info(f"POST /api/listings | user: {user_id}")

    data = request.get_json(silent=True)
    listing = get_services().listings.create_listing(user_id, data)
    return respond_success({'listing': listing}, status=201)


@listing_bp.route('/favorites', methods=['GET'])
@handle_errors
@require_auth
def list_favorites(auth_payload):
    user_id = auth_payload['user_id']
    logger.info(f"GET /api/listings/favorites | user: {user_id}")

    listings = get_services().listings.get_user_favorites(user_id)
    return respond_success({'listings': listings, 'count': len(listings)})


@listing_bp.route('/<listing_id>', methods=['GET'])
@handle_errors
@require_auth
def get_listing(listing_id, auth_payload):
    logger.info(f"GET /api/listings/{listing_id} | user: {auth_payload['user_id']}")

    listing = get_services().listings.get_listing(listing_id, viewer=auth_payload['user'])
    return respond_success({'listing': listing})


@listing_bp.route('/<listing_id>', methods=['DELETE'])
@handle_errors
@require_auth
def delete_listing(listing_id, auth_payload):
    user_id = auth_payload['user_id']
    logger.info(f"DELETE /api/listings/{listing_id} | user: {user_id}")

    get_services().listings.delete_listing(listing_id, user_id)
    return respond_success({'message': 'Listing deleted successfully'})


@listing_bp.route('/<listing_id>/favorite', methods=['POST'])
@handle_errors
@require_auth
def toggle_favorite(listing_id, auth_payload):
    logger.info(f"POST /api/listings/{listing_id}/favorite | user: {auth_payload['user_id']}")

    result = get_services().listings.toggle_favorite(listing_id, auth_payload['user'])
    return respond_success(result)
