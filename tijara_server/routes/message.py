"""Buyer/seller messaging routes.

Endpoints:
- POST   /api/messages                      - send a message about a listing
- GET    /api/messages/conversations        - the caller's conversations
- GET    /api/messages/<conversation_id>    - one page of messages (marks them read)
- DELETE /api/messages/<message_id>         - delete a message (sender only)
"""
import logging

from flask import Blueprint, request

from tijara_server.exception import ValidationError
from tijara_server.notification.models import NotificationType, RelatedKind
from tijara_server.utils.decorators import handle_errors, require_auth
from tijara_server.utils.helpers import respond_success, get_services

logger = logging.getLogger(__name__)

message_bp = Blueprint('message', __name__, url_prefix='/api/messages')


# =============================================================================
# Helper Functions
# =============================================================================

def _int_arg(name, default):
    raw = request.args.get(name)
    if raw is None or raw == '':
        return default
    try:
        return int(raw)
    except (TypeError, ValueError):
        raise ValidationError(f'{name} must be an integer')


def _notify_recipient(services, sender, result):
    """NEW_MESSAGE for the recipient. The message is already stored, so failures are only logged."""
    message = result['message']
    try:
        services.notifications.create_notification(
            recipient_id=message['recipientId'],
            notification_type=NotificationType.NEW_MESSAGE,
            related_id=message['conversationId'],
            content=f"New message from {sender.username}",
            related_kind=RelatedKind.CONVERSATION
        )
    except Exception as e:
        logger.error(f"Failed to notify recipient of message {message['id']}: {e}")


# =============================================================================
# Message Endpoints (/api/messages/*)
# =============================================================================

@message_bp.route('', methods=['POST'])
@message_bp.route('/', methods=['POST'])
@handle_errors
@require_auth
def send_message(auth_payload):
    """Send a message.

    Request Body:
        {
            "recipientId": "user id",   // Required ("receiverId" also accepted)
            "listingId": "listing id",  // Required
            "content": "text"           // Required
        }
    """
    user_id = auth_payload['user_id']
    logger.info(f"POST /api/messages | user: {user_id}")

    data = request.get_json(silent=True) or {}
    if not isinstance(data, dict):
        raise ValidationError('Request body must be a JSON object')
    recipient_id = data.get('recipientId') or data.get('receiverId')

    services = get_services()
    result = services.messaging.send_message(
        sender_id=user_id,
        recipient_id=recipient_id,
        listing_id=data.get('listingId'),
        content=data.get('content')
    )
    if services.settings.NOTIFY_RECIPIENT_ON_MESSAGE:
        _notify_recipient(services, auth_payload['user'], result)

    return respond_success({
        'message': result['message'],
        'conversation': result['conversation']
    }, status=201)


@message_bp.route('/conversations', methods=['GET'])
@handle_errors
@require_auth
def list_conversations(auth_payload):
    user_id = auth_payload['user_id']
    logger.info(f"GET /api/messages/conversations | user: {user_id}")

    conversations = get_services().messaging.get_conversations(user_id)
    return respond_success({'conversations': conversations})


@message_bp.route('/<conversation_id>', methods=['GET'])
@handle_errors
@require_auth
def get_messages(conversation_id, auth_payload):
    """Get a page of messages, oldest first.

    Query Params:
        page: int - 1-based page (default: 1)
        limit: int - page size, 1..100 (default: 20)
    """
    user_id = auth_payload['user_id']
    logger.info(f"GET /api/messages/{conversation_id} | user: {user_id}")

    services = get_services()
    page = _int_arg('page', 1)
    limit = _int_arg('limit', services.settings.MESSAGES_PAGE_SIZE)

    result = services.messaging.get_messages(conversation_id, user_id, page=page, page_size=limit)
    return respond_success(result)


@message_bp.route('/<message_id>', methods=['DELETE'])
@handle_errors
@require_auth
def delete_message(message_id, auth_payload):
    user_id = auth_payload['user_id']
    logger.info(f"DELETE /api/messages/{message_id} | user: {user_id}")

    get_services().messaging.delete_message(message_id, user_id)
    return respond_success({'message': 'Message deleted successfully'})
