"""
Live poll routes — active poll (public read, moderator publish/close), results, presets.
"""
import logging
from flask import Blueprint, jsonify, request

from app.auth import moderator_required
from app.database import get_session
from app.errors import error_response
from app.services import live_poll as polls

logger = logging.getLogger('routes.live_poll')

bp = Blueprint('live_poll', __name__)

poll_auth = moderator_required('POLL_ADMIN_SECRET', 'x-dashboard-poll-secret')


@bp.route('/api/live-poll')
def active_poll():
    session = get_session()
    try:
        return jsonify({'activePoll': polls.serialize_poll(polls.get_active_poll(session))})
    except Exception as e:
        logger.error("Active poll read failed: %s", e, exc_info=True)
        return error_response(e, 'Active poll could not be loaded.')
    finally:
        session.close()


@bp.route('/api/live-poll', methods=['POST'])
@poll_auth
def publish_poll():
    """Close the current poll and publish a new one."""
    data = request.get_json(silent=True) or {}
    session = get_session()
    try:
        poll = polls.publish_poll(session, data)
        return jsonify({
            'ok': True,
            'activePoll': polls.serialize_poll(poll),
            'message': 'Live poll published.',
        })
    except Exception as e:
        logger.error("Poll publish failed: %s", e, exc_info=True)
        return error_response(e, 'Poll could not be published.')
    finally:
        session.close()


@bp.route('/api/live-poll', methods=['DELETE'])
@poll_auth
def close_poll():
    session = get_session()
    try:
        polls.close_polls(session)
        return jsonify({'ok': True, 'activePoll': None, 'message': 'Active poll closed.'})
    except Exception as e:
        logger.error("Poll close failed: %s", e, exc_info=True)
        return error_response(e, 'Poll could not be closed.')
    finally:
        session.close()


@bp.route('/api/live-poll/results')
def poll_results():
    """Vote counts per option for the active poll, or the default poll when none is active."""
    session = get_session()
    try:
        poll, question, results = polls.poll_tallies(session)
        return jsonify({
            'activePoll': polls.serialize_poll(poll),
            'question': question,
            'results': results,
            'total_votes': sum(results.values()),
        })
    except Exception as e:
        logger.error("Poll results failed: %s", e, exc_info=True)
        return error_response(e, 'Poll results could not be loaded.')
    finally:
        session.close()


# ── Presets ──────────────────────────────────────────────────────────────────

@bp.route('/api/live-poll/presets')
@poll_auth
def list_presets():
    session = get_session()
    try:
        return jsonify({'presets': polls.list_presets(session)})
    except Exception as e:
        logger.error("Preset list failed: %s", e, exc_info=True)
        return error_response(e, 'Presets could not be loaded.')
    finally:
        session.close()


@bp.route('/api/live-poll/presets', methods=['POST'])
@poll_auth
def create_preset():
    data = request.get_json(silent=True) or {}
    session = get_session()
    try:
        preset = polls.create_preset(session, data)
        return jsonify({'ok': True, 'preset': preset, 'message': 'Preset saved.'})
    except Exception as e:
        session.rollback()
        logger.error("Preset create failed: %s", e, exc_info=True)
        return error_response(e, 'Preset could not be saved.')
    finally:
        session.close()


@bp.route('/api/live-poll/presets', methods=['DELETE'])
@poll_auth
def delete_preset():
    data = request.get_json(silent=True) or {}
    session = get_session()
    try:
        preset_id = polls.delete_preset(session, data)
        return jsonify({'ok': True, 'presetId': preset_id, 'message': 'Preset deleted.'})
    except Exception as e:
        session.rollback()
        logger.error("Preset delete failed: %s", e, exc_info=True)
        return error_response(e, 'Preset could not be deleted.')
    finally:
        session.close()
