"""
Feedback routes — public attendee submission (free text or poll vote).
"""
import logging
from flask import Blueprint, jsonify, request

from app.database import get_session
from app.errors import error_response
from app.models.feedback import Feedback
from app.services.poll_message import create_poll_message, normalize_option

logger = logging.getLogger('routes.feedback')

bp = Blueprint('feedback', __name__)

MESSAGE_MAX_LENGTH = 1000


@bp.route('/api/feedback', methods=['POST'])
def submit_feedback():
    """Store a free-text message, or a poll vote when `option` is given."""
    data = request.get_json(silent=True) or {}

    option = data.get('option') if isinstance(data.get('option'), str) else ''
    if option:
        if not normalize_option(option):
            return jsonify({'error': 'Poll option is empty.'}), 400
        poll_id = data.get('pollId') if isinstance(data.get('pollId'), str) else None
        message = create_poll_message(option, poll_id)
    else:
        message = data.get('message').strip() if isinstance(data.get('message'), str) else ''
        if not message:
            return jsonify({'error': 'Message is required.'}), 400
        if len(message) > MESSAGE_MAX_LENGTH:
            return jsonify({'error': f'Message can be at most {MESSAGE_MAX_LENGTH} characters.'}), 400

    session = get_session()
    try:
        feedback = Feedback(message=message, is_analyzed=False)
        session.add(feedback)
        session.commit()
        return jsonify({'ok': True, 'id': feedback.id}), 201
    except Exception as e:
        session.rollback()
        logger.error("Feedback insert failed: %s", e, exc_info=True)
        return error_response(e, 'Feedback could not be saved.')
    finally:
        session.close()
