"""
Live poll + preset management.

Publishing is two separate statements (close every active poll, then insert the
new one); concurrent publishes may briefly leave two polls active, and reads
always pick the most recently updated one.
"""
import logging
import re

from sqlalchemy import delete, select, update

from app.errors import UpstreamError, ValidationError
from app.models._columns import utcnow
from app.models.feedback import Feedback
from app.models.live_poll import LivePoll, LivePollPreset
from app.services.poll_message import tally_poll_votes

logger = logging.getLogger('services.live_poll')

MIN_OPTIONS = 2
MAX_OPTIONS = 6
QUESTION_MIN_LENGTH = 6
QUESTION_MAX_LENGTH = 180
OPTION_MAX_LENGTH = 80
PRESET_LIST_LIMIT = 30

# Poll shown before a moderator publishes one; legacy "ANKET: <option>" votes count here.
DEFAULT_POLL_PROMPT = "Which field are you considering after graduation?"
DEFAULT_POLL_OPTIONS = ("DUS", "Doktora", "Kamu", "Klinik")


def normalize_text(value):
    return re.sub(r'\s+', ' ', value or '').strip()


def sanitize_options(value):
    """Normalize, cap and case-insensitively dedup options, keeping the first spelling."""
    if not isinstance(value, list):
        return []

    seen = set()
    options = []
    for item in value:
        if not isinstance(item, str):
            continue
        normalized = normalize_text(item)[:OPTION_MAX_LENGTH]
        if not normalized:
            continue
        key = normalized.lower()
        if key in seen:
            continue
        seen.add(key)
        options.append(normalized)

    return options[:MAX_OPTIONS]


def stored_options(value):
    """Options as read back from the JSON column, tolerating legacy junk."""
    if not isinstance(value, list):
        return []
    options = [normalize_text(item)[:OPTION_MAX_LENGTH] for item in value if isinstance(item, str)]
    return [option for option in options if option][:MAX_OPTIONS]


def validate_poll_input(data, noun='Poll question'):
    """Return (question, options) or raise ValidationError."""
    raw_question = data.get('question')
    question = normalize_text(raw_question) if isinstance(raw_question, str) else ''
    options = sanitize_options(data.get('options'))

    if len(question) < QUESTION_MIN_LENGTH:
        raise ValidationError(f'{noun} must be at least {QUESTION_MIN_LENGTH} characters.')
    if len(question) > QUESTION_MAX_LENGTH:
        raise ValidationError(f'{noun} can be at most {QUESTION_MAX_LENGTH} characters.')
    if len(options) < MIN_OPTIONS:
        raise ValidationError(f'At least {MIN_OPTIONS} options are required.')

    return question, options


def _isoformat(value):
    return value.isoformat() if value else None


def serialize_poll(poll):
    if poll is None:
        return None
    return {
        'id': poll.id,
        'question': poll.question,
        'options': stored_options(poll.options),
        'isActive': poll.is_active,
        'createdAt': _isoformat(poll.created_at),
        'updatedAt': _isoformat(poll.updated_at),
    }


def serialize_preset(preset):
    return {
        'id': preset.id,
        'question': preset.question,
        'options': stored_options(preset.options),
        'createdAt': _isoformat(preset.created_at),
        'updatedAt': _isoformat(preset.updated_at),
    }


# ── Live poll ────────────────────────────────────────────────────────────────

def get_active_poll(session):
    """Most recently updated active poll, or None."""
    return session.scalars(
        select(LivePoll)
        .where(LivePoll.is_active.is_(True))
        .order_by(LivePoll.updated_at.desc())
        .limit(1)
    ).first()


def poll_tallies(session):
    """
    (active_poll, question, results) for the poll attendees currently see.

    Without an active poll the default question applies and only legacy
    votes (no poll id) are counted against its options.
    """
    poll = get_active_poll(session)
    messages = session.scalars(select(Feedback.message))
    if poll is None:
        return None, DEFAULT_POLL_PROMPT, tally_poll_votes(messages, None, DEFAULT_POLL_OPTIONS)
    return poll, poll.question, tally_poll_votes(messages, poll.id, stored_options(poll.options))


def _close_active(session):
    session.execute(
        update(LivePoll)
        .where(LivePoll.is_active.is_(True))
        .values(is_active=False, updated_at=utcnow())
    )
    session.commit()


def publish_poll(session, data):
    question, options = validate_poll_input(data)

    try:
        _close_active(session)
    except Exception as e:
        session.rollback()
        raise UpstreamError(f'Current poll could not be closed: {e}') from e

    poll = LivePoll(question=question, options=options, is_active=True)
    try:
        session.add(poll)
        session.commit()
    except Exception as e:
        session.rollback()
        raise UpstreamError(f'Poll could not be published: {e}') from e

    logger.info("Published live poll %s (%d options)", poll.id, len(options))
    return poll


def close_polls(session):
    try:
        _close_active(session)
    except Exception as e:
        session.rollback()
        raise UpstreamError(f'Poll could not be closed: {e}') from e
    logger.info("Closed active live poll")


# ── Presets ──────────────────────────────────────────────────────────────────

def list_presets(session):
    presets = session.scalars(
        select(LivePollPreset).order_by(LivePollPreset.updated_at.desc()).limit(PRESET_LIST_LIMIT)
    )
    return [serialize_preset(preset) for preset in presets]


def create_preset(session, data):
    question, options = validate_poll_input(data, noun='Preset question')
    preset = LivePollPreset(question=question, options=options)
    session.add(preset)
    session.commit()
    return serialize_preset(preset)


def delete_preset(session, data):
    raw_id = data.get('presetId')
    preset_id = raw_id.strip() if isinstance(raw_id, str) else ''
    if not preset_id:
        raise ValidationError('Preset id to delete is missing.')

    session.execute(delete(LivePollPreset).where(LivePollPreset.id == preset_id))
    session.commit()
    return preset_id
