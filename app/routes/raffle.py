"""
Raffle routes — admin console (draw, prizes, participants, import) + public board.
"""
import logging
import os
from flask import Blueprint, jsonify, request

from app import config
from app.auth import moderator_required
from app.database import get_session
from app.errors import error_response
from app.services import raffle
from app.services.participant_import import import_participants

logger = logging.getLogger('routes.raffle')

bp = Blueprint('raffle', __name__)

raffle_auth = moderator_required('RAFFLE_ADMIN_SECRET', 'x-raffle-secret')


@bp.route('/api/raffle/draw', methods=['POST'])
@raffle_auth
def draw():
    """Draw one winner for `prizeId`."""
    data = request.get_json(silent=True) or {}
    session = get_session()
    try:
        return jsonify(raffle.run_draw(session, data.get('prizeId')))
    except Exception as e:
        logger.error("Raffle draw failed: %s", e, exc_info=True)
        return error_response(e, 'An error occurred during the draw.')
    finally:
        session.close()


@bp.route('/api/raffle/overview')
@raffle_auth
def overview():
    session = get_session()
    try:
        return jsonify(raffle.raffle_overview(session))
    except Exception as e:
        logger.error("Raffle overview failed: %s", e, exc_info=True)
        return error_response(e, 'Raffle overview could not be loaded.')
    finally:
        session.close()


@bp.route('/api/raffle/public')
def public():
    """Public winners board; no auth."""
    session = get_session()
    try:
        return jsonify(raffle.public_board(session))
    except Exception as e:
        logger.error("Raffle public board failed: %s", e, exc_info=True)
        return error_response(e, 'Raffle board could not be loaded.')
    finally:
        session.close()


# ── Prizes ───────────────────────────────────────────────────────────────────

@bp.route('/api/raffle/prizes')
@raffle_auth
def list_prizes():
    session = get_session()
    try:
        return jsonify({'prizes': raffle.list_prizes(session)})
    except Exception as e:
        logger.error("Prize list failed: %s", e, exc_info=True)
        return error_response(e, 'Prizes could not be loaded.')
    finally:
        session.close()


@bp.route('/api/raffle/prizes', methods=['POST'])
@raffle_auth
def create_prize():
    data = request.get_json(silent=True) or {}
    session = get_session()
    try:
        return jsonify({'ok': True, 'prize': raffle.create_prize(session, data)})
    except Exception as e:
        session.rollback()
        logger.error("Prize create failed: %s", e, exc_info=True)
        return error_response(e, 'Prize could not be created.')
    finally:
        session.close()


@bp.route('/api/raffle/prizes', methods=['PATCH'])
@raffle_auth
def update_prize():
    data = request.get_json(silent=True) or {}
    session = get_session()
    try:
        return jsonify({'ok': True, 'prize': raffle.update_prize(session, data)})
    except Exception as e:
        session.rollback()
        logger.error("Prize update failed: %s", e, exc_info=True)
        return error_response(e, 'Prize could not be updated.')
    finally:
        session.close()


# ── Participants ─────────────────────────────────────────────────────────────

@bp.route('/api/raffle/participants')
@raffle_auth
def list_participants():
    """Newest participants, optionally filtered by `q`; `limit` is clamped to 1-500."""
    query = request.args.get('q', '')
    limit = raffle.clamp_limit(request.args.get('limit'))
    session = get_session()
    try:
        participants = raffle.list_participants(session, query=query, limit=limit)
        return jsonify({'participants': participants})
    except Exception as e:
        logger.error("Participant list failed: %s", e, exc_info=True)
        return error_response(e, 'Participants could not be loaded.')
    finally:
        session.close()


@bp.route('/api/raffle/participants/import', methods=['POST'])
@raffle_auth
def import_rows():
    """Import the pasted `rows` blob."""
    data = request.get_json(silent=True) or {}
    raw_rows = data.get('rows') if isinstance(data.get('rows'), str) else ''
    session = get_session()
    try:
        return jsonify(import_participants(session, raw_rows))
    except Exception as e:
        logger.error("Participant import failed: %s", e, exc_info=True)
        return error_response(e, 'An error occurred during participant import.')
    finally:
        session.close()


@bp.route('/api/raffle/participants/import-project-csv', methods=['POST'])
@raffle_auth
def import_project_csv():
    """Import the participant file shipped with the deployment."""
    csv_path = config.RAFFLE_PROJECT_CSV
    source = os.path.basename(csv_path)
    try:
        with open(csv_path, encoding='utf-8') as f:
            content = f.read()
    except (OSError, UnicodeDecodeError) as e:
        logger.error("Project CSV not readable at %s: %s", csv_path, e)
        return jsonify({'error': f'{source} could not be read.'}), 400

    session = get_session()
    try:
        result = import_participants(session, content)
        return jsonify({**result, 'source': source})
    except Exception as e:
        logger.error("Project CSV import failed: %s", e, exc_info=True)
        return error_response(e, 'An error occurred during project CSV import.')
    finally:
        session.close()
