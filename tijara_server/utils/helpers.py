from flask import jsonify, current_app


def respond_error(message_or_dict, status=400):
    """Return a standardized error response."""
    if isinstance(message_or_dict, dict):
        body = {'success': False, 'errors': message_or_dict}
    else:
        body = {'success': False, 'error': message_or_dict}
    return jsonify(body), status


def respond_success(payload=None, status=200):
    if payload is None:
        payload = {}
    body = {'success': True}
    if isinstance(payload, dict):
        body.update(payload)
    else:
        body['data'] = payload
    return jsonify(body), status


def get_services():
    """Return the service container registered on the current app."""
    return current_app.extensions['tijara']


def parse_page_args(args, default_limit=20, max_limit=50):
    """Parse `page`/`limit` query args, clamping instead of rejecting.

    Non-numeric values fall back to the defaults; page is at least 1 and
    limit is kept within 1..max_limit.
    """
    try:
        page = int(args.get('page', 1))
    except (TypeError, ValueError):
        page = 1
    try:
        limit = int(args.get('limit', default_limit))
    except (TypeError, ValueError):
        limit = default_limit
    page = max(1, page)
    limit = max(1, min(max_limit, limit))
    return page, limit
