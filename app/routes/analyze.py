"""
Analyze routes — trigger one feedback batch analysis (cron or moderator button).
"""
import logging
from flask import Blueprint, jsonify, request

from app.auth import moderator_required
from app.database import get_session
from app.errors import error_response
from app.services.feedback_analyzer import run_batch

logger = logging.getLogger('routes.analyze')

bp = Blueprint('analyze', __name__)

ANALYZE_ERROR = 'An error occurred during analysis.'

analyze_auth = moderator_required(
    'ANALYZE_SECRET', 'x-analyze-secret',
    require_secret_in_production=True,
    open_without_secret_in_dev=True,
)


def _force_requested():
    """?force=true, or {"force": true} in a POST body."""
    by_query = request.args.get('force') == 'true'
    by_body = False
    if request.method == 'POST':
        body = request.get_json(silent=True)
        by_body = isinstance(body, dict) and body.get('force') is True
    return by_query or by_body


@bp.route('/api/analyze', methods=['GET', 'POST'])
@analyze_auth
def analyze():
    """Run one batch; returns the analyzer result or a skip reason."""
    force = _force_requested()
    session = get_session()
    try:
        result = run_batch(session, force=force)
        return jsonify(result)
    except Exception as e:
        logger.error("Feedback analysis failed: %s", e, exc_info=True)
        return error_response(e, ANALYZE_ERROR)
    finally:
        session.close()
