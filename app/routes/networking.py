"""
Networking routes — attendee profile create/update and the match directory.
"""
import logging
from flask import Blueprint, jsonify, request

from app.database import get_session
from app.errors import error_response
from app.services import networking

logger = logging.getLogger('routes.networking')

bp = Blueprint('networking', __name__)


@bp.route('/api/networking/profile', methods=['POST'])
def create_profile():
    data = request.get_json(silent=True) or {}
    session = get_session()
    try:
        profile_id = networking.create_profile(session, data)
        return jsonify({'ok': True, 'id': profile_id}), 201
    except Exception as e:
        logger.error("Profile create failed: %s", e, exc_info=True)
        return error_response(e, 'Profile could not be saved.')
    finally:
        session.close()


@bp.route('/api/networking/profile', methods=['PUT'])
def update_profile():
    data = request.get_json(silent=True) or {}
    session = get_session()
    try:
        profile_id = networking.update_profile(session, data)
        return jsonify({'ok': True, 'id': profile_id})
    except Exception as e:
        session.rollback()
        logger.error("Profile update failed: %s", e, exc_info=True)
        return error_response(e, 'Profile could not be updated.')
    finally:
        session.close()


@bp.route('/api/networking/match', methods=['POST'])
def match():
    """Recommended and other attendees for one profile."""
    data = request.get_json(silent=True) or {}
    session = get_session()
    try:
        return jsonify(networking.match_profile(session, data.get('profileId')))
    except Exception as e:
        logger.error("Networking match failed: %s", e, exc_info=True)
        return error_response(e, 'Profile service error.')
    finally:
        session.close()
