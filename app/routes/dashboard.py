"""
Dashboard routes — health check, moderator login cookie, live summary, data reset.
"""
import logging
from flask import Blueprint, jsonify, request
from sqlalchemy import delete, func, select

from app import config
from app.auth import is_credential_valid, moderator_required, session_token
from app.database import get_session
from app.errors import error_response
from app.models.analytics_snapshot import AnalyticsSnapshot
from app.models.feedback import Feedback
from app.services.live_poll import poll_tallies, serialize_poll
from app.services.poll_message import is_poll_message

logger = logging.getLogger('routes.dashboard')

bp = Blueprint('dashboard', __name__)

DELETE_CONFIRM_PHRASE = 'DELETE_MESSAGES'
RECENT_COMMENTS = 5
RECENT_SCAN_ROWS = 200

reset_auth = moderator_required('RESET_SECRET', 'x-reset-secret')
summary_auth = moderator_required('POLL_ADMIN_SECRET', 'x-dashboard-poll-secret')


@bp.route('/health')
def health_check():
    """Health check endpoint."""
    return jsonify({"status": "healthy"}), 200


# ── Login cookie ─────────────────────────────────────────────────────────────

def _set_auth_cookie(response, value, max_age):
    response.set_cookie(
        config.DASHBOARD_AUTH_COOKIE_NAME,
        value,
        max_age=max_age,
        path='/',
        httponly=True,
        secure=config.is_production(),
        samesite='Lax',
    )


@bp.route('/api/dashboard-auth', methods=['POST'])
def login():
    """Exchange moderator credentials for the session cookie."""
    payload = request.get_json(silent=True) or {}
    username = payload.get('username').strip() if isinstance(payload.get('username'), str) else ''
    password = payload.get('password') if isinstance(payload.get('password'), str) else ''

    if not is_credential_valid(username, password):
        logger.warning("Dashboard login failed for %r", username)
        return jsonify({'error': 'Invalid username or password.'}), 401

    response = jsonify({'ok': True})
    _set_auth_cookie(response, session_token(), config.DASHBOARD_AUTH_COOKIE_MAX_AGE)
    return response


@bp.route('/api/dashboard-auth', methods=['DELETE'])
def logout():
    response = jsonify({'ok': True})
    _set_auth_cookie(response, '', 0)
    return response


# ── Summary ──────────────────────────────────────────────────────────────────

@bp.route('/api/dashboard/summary')
@summary_auth
def summary():
    """Feedback count, latest snapshot, recent comments and active-poll tallies."""
    session = get_session()
    try:
        total = session.scalar(select(func.count(Feedback.id))) or 0
        latest = session.scalars(
            select(AnalyticsSnapshot).order_by(AnalyticsSnapshot.created_at.desc()).limit(1)
        ).first()

        recent_rows = list(session.scalars(
            select(Feedback).order_by(Feedback.created_at.desc()).limit(RECENT_SCAN_ROWS)
        ))
        comments = [
            row.to_dict() for row in recent_rows
            if not is_poll_message(row.message) and row.message.strip()
        ][:RECENT_COMMENTS]

        active_poll, poll_question, tallies = poll_tallies(session)

        return jsonify({
            'total_feedbacks': total,
            'latest_analysis': latest.to_dict() if latest else None,
            'recent_comments': comments,
            'activePoll': serialize_poll(active_poll),
            'poll_question': poll_question,
            'poll_results': tallies,
        })
    except Exception as e:
        logger.error("Dashboard summary failed: %s", e, exc_info=True)
        return error_response(e, 'Dashboard summary could not be loaded.')
    finally:
        session.close()


# ── Reset ────────────────────────────────────────────────────────────────────

@bp.route('/api/dashboard/reset-data', methods=['POST'])
@reset_auth
def reset_data():
    """Delete every feedback row and analytics snapshot."""
    payload = request.get_json(silent=True) or {}
    if payload.get('confirm') != DELETE_CONFIRM_PHRASE:
        return jsonify({'error': 'Confirmation phrase is missing or wrong.'}), 400

    session = get_session()
    try:
        feedback_count = session.scalar(select(func.count(Feedback.id))) or 0
        analytics_count = session.scalar(select(func.count(AnalyticsSnapshot.id))) or 0

        session.execute(delete(Feedback))
        session.execute(delete(AnalyticsSnapshot))
        session.commit()

        logger.warning("Reset event data: %d feedbacks, %d snapshots", feedback_count, analytics_count)
        return jsonify({
            'ok': True,
            'deleted_feedbacks': feedback_count,
            'deleted_analytics': analytics_count,
        })
    except Exception as e:
        session.rollback()
        logger.error("Dashboard reset failed: %s", e, exc_info=True)
        return error_response(e, 'An error occurred while clearing the database.')
    finally:
        session.close()
