from flask import Blueprint

from tijara_server.utils.helpers import respond_success, get_services
from tijara_server.utils.time_utils import utc_now, to_iso

public_bp = Blueprint('public', __name__, url_prefix='/api')


# =============================================================================
# Health Check Endpoints
# =============================================================================

@public_bp.route('/health', methods=['GET'])
def health_check():
    """Simple health endpoint for load balancers and uptime checks.

    Always 200 while the process is up; the database state is reported but
    does not change the status code.
    """
    services = get_services()
    settings = services.settings
    return respond_success({
        'status': 'ok',
        'timestamp': to_iso(utc_now()),
        'environment': settings.ENV,
        'version': settings.APP_VERSION,
        'database': 'connected' if services.database.is_initialized else 'not initialized'
    })
