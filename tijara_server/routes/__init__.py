from tijara_server.routes.listing import listing_bp
from tijara_server.routes.message import message_bp
from tijara_server.routes.notification import notification_bp
from tijara_server.routes.public import public_bp

ALL_BLUEPRINTS = (public_bp, message_bp, notification_bp, listing_bp)

__all__ = ['ALL_BLUEPRINTS', 'listing_bp', 'message_bp', 'notification_bp', 'public_bp']
