"""
Moderator authorization — dashboard session cookie OR a per-feature shared secret.

The session token is stateless: HMAC-SHA256 over "username:password" keyed by
DASHBOARD_AUTH_SECRET, so rotating any of the three logs everyone out.
"""
import hashlib
import hmac
import logging
from functools import wraps

from flask import jsonify, request

from app import config

logger = logging.getLogger('app.auth')

UNAUTHORIZED_MESSAGE = 'Unauthorized.'


def session_token():
    return hmac.new(
        config.DASHBOARD_AUTH_SECRET.encode('utf-8'),
        f'{config.DASHBOARD_USERNAME}:{config.DASHBOARD_PASSWORD}'.encode('utf-8'),
        hashlib.sha256,
    ).hexdigest()


def is_credential_valid(username, password):
    return username == config.DASHBOARD_USERNAME and password == config.DASHBOARD_PASSWORD


def is_session_valid(token):
    if not token:
        return False
    expected = session_token()
    if len(token) != len(expected):
        return False
    return hmac.compare_digest(token.encode('utf-8'), expected.encode('utf-8'))


def bearer_token(req):
    authorization = req.headers.get('Authorization', '')
    if not authorization:
        return ''
    parts = authorization.split(' ')
    if len(parts) < 2 or parts[0].lower() != 'bearer' or not parts[1]:
        return ''
    return parts[1].strip()


def has_valid_session(req):
    return is_session_valid(req.cookies.get(config.DASHBOARD_AUTH_COOKIE_NAME))


def is_secret_authorized(req, secret, header_name):
    secret = (secret or '').strip()
    if not secret:
        return False
    header_secret = (req.headers.get(header_name) or '').strip()
    return bearer_token(req) == secret or header_secret == secret


def is_moderator_authorized(req, secret, header_name):
    """Valid dashboard session, or the feature secret as bearer token / header."""
    return has_valid_session(req) or is_secret_authorized(req, secret, header_name)


def moderator_required(secret_name, header_name, require_secret_in_production=False,
                       open_without_secret_in_dev=False):
    """
    Guard a view with is_moderator_authorized().

    `secret_name` is the app.config attribute holding the feature secret; it is
    read per request. With `require_secret_in_production`, a production deploy
    that has no secret configured answers 500 unless the caller has a session.
    With `open_without_secret_in_dev`, a missing secret outside production lets
    every request through.
    """
    def decorator(view):
        @wraps(view)
        def wrapped(*args, **kwargs):
            secret = getattr(config, secret_name, '') or ''

            if require_secret_in_production and config.is_production() and not secret:
                if not has_valid_session(request):
                    logger.error("%s is not configured in production", secret_name)
                    return jsonify({
                        'error': f'Security configuration missing: {secret_name} must be set.'
                    }), 500

            if open_without_secret_in_dev and not secret and not config.is_production():
                return view(*args, **kwargs)

            if not is_moderator_authorized(request, secret, header_name):
                return jsonify({'error': UNAUTHORIZED_MESSAGE}), 401

            return view(*args, **kwargs)
        return wrapped
    return decorator
