"""Notification routes.

Endpoints:
- GET    /api/notifications                  - list (paginated, newest first)
- PUT    /api/notifications/<id>/read        - mark one as read
- PUT    /api/notifications/read-all         - mark all as read
- DELETE /api/notifications/<id>             - delete one
- DELETE /api/notifications                  - clear all

New notifications are pushed to the recipient's Socket.IO room as the
`notification` event when they are created.
"""
import logging

from flask import Blueprint, request

from tijara_server.utils.decorators import handle_errors, require_auth
from tijara_server.utils.helpers import respond_success, get_services, parse_page_args

logger = logging.getLogger(__name__)

notification_bp = Blueprint('notification', __name__, url_prefix='/api/notifications')


@notification_bp.route('', methods=['GET'])
@notification_bp.route('/', methods=['GET'])
@handle_errors
@require_auth
def list_notifications(auth_payload):
    """List notifications for the current user.

    Query Params:
        page: int - clamped to >= 1 (default: 1)
        limit: int - clamped to 1..50 (default: 20)
    """
    user_id = auth_payload['user_id']
    logger.info(f"GET /api/notifications | user: {user_id}")

    services = get_services()
    page, limit = parse_page_args(
        request.args,
        default_limit=services.settings.NOTIFICATIONS_PAGE_SIZE,
        max_limit=services.settings.NOTIFICATIONS_MAX_PAGE_SIZE
    )
    return respond_success(services.notifications.get_notifications(user_id, page=page, page_size=limit))


@notification_bp.route('/read-all', methods=['PUT'])
@handle_errors
@require_auth
def mark_all_read(auth_payload):
    user_id = auth_payload['user_id']
    logger.info(f"PUT /api/notifications/read-all | user: {user_id}")

    count = get_services().notifications.mark_all_as_read(user_id)
    return respond_success({'message': 'All notifications marked as read', 'updatedCount': count})


@notification_bp.route('/<notification_id>/read', methods=['PUT'])
@handle_errors
@require_auth
def mark_read(notification_id, auth_payload):
    user_id = auth_payload['user_id']
    logger.info(f"PUT /api/notifications/{notification_id}/read | user: {user_id}")

    notification = get_services().notifications.mark_as_read(notification_id, user_id)
    return respond_success({'notification': notification})


@notification_bp.route('/<notification_id>', methods=['DELETE'])
@handle_errors
@require_auth
def delete_notification(notification_id, auth_payload):
    user_id = auth_payload['user_id']
    logger.info(f"DELETE /api/notifications/{notification_id} | user: {user_id}")

    get_services().notifications.delete_notification(notification_id, user_id)
    return respond_success({'message': 'Notification deleted successfully'})


@notification_bp.route('', methods=['DELETE'])
@notification_bp.route('/', methods=['DELETE'])
@handle_errors
@require_auth
def clear_notifications(auth_payload):
    user_id = auth_payload['user_id']
    logger.info(f"DELETE /api/notifications | user: {user_id}")

    count = get_services().notifications.clear_all_notifications(user_id)
    return respond_success({'message': 'All notifications cleared', 'deletedCount': count})
