"""
Raffle orchestration — draw, progress, prize management, admin/public boards.

Winner selection, previous-winner exclusion and draw numbering belong to the
run_raffle_draw() database function; this module only calls it and recounts.
"""
import logging
import math
import re
from collections import Counter

from sqlalchemy import func, or_, select, text

from app.errors import DrawError, NotFoundError, UpstreamError, ValidationError
from app.models.raffle import RaffleDraw, RaffleParticipant, RafflePrize

logger = logging.getLogger('services.raffle')

_UUID_RE = re.compile(
    r'^[0-9a-f]{8}-[0-9a-f]{4}-[1-5][0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$',
    re.IGNORECASE,
)

TITLE_MIN_LENGTH = 2
TITLE_MAX_LENGTH = 140
DESCRIPTION_MAX_LENGTH = 300
QUANTITY_MIN = 1
QUANTITY_MAX = 100

OVERVIEW_RECENT_DRAWS = 40
PUBLIC_RECENT_DRAWS = 12
DEFAULT_PRIZE_TITLE = 'Prize'


def is_valid_uuid(value):
    return isinstance(value, str) and bool(_UUID_RE.match(value))


def compute_progress(quantity, drawn):
    """Progress of a prize from authoritative counts."""
    quantity = quantity or 0
    drawn = drawn or 0
    return {
        'drawn': drawn,
        'quantity': quantity,
        'remaining': max(quantity - drawn, 0),
        'is_completed': drawn >= quantity,
    }


def run_draw(session, prize_id):
    """
    Draw one winner for a prize and return {winner, progress}.

    A failure after the draw committed (recount / prize lookup) is surfaced but
    the draw itself stays recorded.
    """
    prize_id = (prize_id or '').strip() if isinstance(prize_id, str) else ''
    if not is_valid_uuid(prize_id):
        raise ValidationError('Invalid prize id.')

    try:
        row = session.execute(
            text('SELECT * FROM run_raffle_draw(:p_prize_id)'),
            {'p_prize_id': prize_id},
        ).mappings().first()
        session.commit()
    except Exception as e:
        session.rollback()
        logger.error("run_raffle_draw failed for prize %s", prize_id, exc_info=True)
        raise DrawError(str(e)) from e

    if not row:
        raise DrawError('The draw produced no winner.')

    winner = {
        'draw_id': row['draw_id'],
        'prize_id': row['prize_id'],
        'prize_title': row['prize_title'],
        'draw_number': row['draw_number'],
        'winner_participant_id': row['winner_participant_id'],
        'winner_code': row['winner_code'],
        'winner_name': row['winner_name'],
        'drawn_at': _isoformat(row['drawn_at']),
    }
    logger.info("Prize %s draw #%s -> %s", prize_id, winner['draw_number'], winner['winner_code'])

    try:
        drawn = session.scalar(
            select(func.count(RaffleDraw.id)).where(RaffleDraw.prize_id == prize_id)
        )
        quantity = session.scalar(select(RafflePrize.quantity).where(RafflePrize.id == prize_id))
    except Exception as e:
        logger.error("Progress lookup failed after draw for prize %s", prize_id, exc_info=True)
        raise UpstreamError(f'Prize draw count could not be read: {e}') from e

    if quantity is None:
        raise UpstreamError('Prize could not be read after the draw.')

    return {'ok': True, 'winner': winner, 'progress': compute_progress(quantity, drawn)}


# ── Prizes ───────────────────────────────────────────────────────────────────

def _clean_title(value):
    title = value.strip()
    if len(title) < TITLE_MIN_LENGTH or len(title) > TITLE_MAX_LENGTH:
        raise ValidationError(f'Prize title must be {TITLE_MIN_LENGTH}-{TITLE_MAX_LENGTH} characters.')
    return title


def _clean_description(value):
    description = value.strip()
    if len(description) > DESCRIPTION_MAX_LENGTH:
        raise ValidationError(f'Prize description can be at most {DESCRIPTION_MAX_LENGTH} characters.')
    return description or None


def _clean_quantity(value):
    if isinstance(value, bool):
        value = int(value)
    try:
        quantity = float(value)
    except (TypeError, ValueError):
        quantity = None
    if quantity is None or not quantity.is_integer() or not QUANTITY_MIN <= quantity <= QUANTITY_MAX:
        raise ValidationError(f'Prize quantity must be an integer between {QUANTITY_MIN} and {QUANTITY_MAX}.')
    return int(quantity)


def list_prizes(session):
    prizes = session.scalars(select(RafflePrize).order_by(RafflePrize.created_at.asc()))
    return [prize.to_dict() for prize in prizes]


def create_prize(session, data):
    title = _clean_title(data.get('title') if isinstance(data.get('title'), str) else '')
    description = _clean_description(data['description']) if isinstance(data.get('description'), str) else None
    quantity = _clean_quantity(data['quantity']) if data.get('quantity') is not None else 1

    prize = RafflePrize(
        title=title,
        description=description,
        quantity=quantity,
        allow_previous_winner=data.get('allowPreviousWinner') is True,
        is_active=True,
    )
    session.add(prize)
    session.commit()
    logger.info("Created prize %s (%s x%d)", prize.id, title, quantity)
    return prize.to_dict()


def update_prize(session, data):
    prize_id = data.get('prizeId').strip() if isinstance(data.get('prizeId'), str) else ''
    if not is_valid_uuid(prize_id):
        raise ValidationError('Invalid prize id.')

    updates = {}
    if isinstance(data.get('title'), str):
        updates['title'] = _clean_title(data['title'])
    if isinstance(data.get('description'), str):
        updates['description'] = _clean_description(data['description'])
    if 'quantity' in data and data['quantity'] is not None:
        updates['quantity'] = _clean_quantity(data['quantity'])
    if isinstance(data.get('isActive'), bool):
        updates['is_active'] = data['isActive']
    if isinstance(data.get('allowPreviousWinner'), bool):
        updates['allow_previous_winner'] = data['allowPreviousWinner']

    if not updates:
        raise ValidationError('No fields to update.')

    prize = session.get(RafflePrize, prize_id)
    if prize is None:
        raise NotFoundError('Prize not found.')

    for key, value in updates.items():
        setattr(prize, key, value)
    session.commit()
    return prize.to_dict()


# ── Participants ─────────────────────────────────────────────────────────────

def clamp_limit(value, default=100, lower=1, upper=500):
    try:
        parsed = float(value)
    except (TypeError, ValueError):
        return default
    if not math.isfinite(parsed):
        return default
    return max(lower, min(upper, int(parsed)))


def list_participants(session, query='', limit=100):
    stmt = select(RaffleParticipant).order_by(RaffleParticipant.created_at.desc()).limit(limit)
    query = (query or '').strip()
    if query:
        pattern = f'%{query}%'
        stmt = stmt.where(or_(
            RaffleParticipant.full_name.ilike(pattern),
            RaffleParticipant.participant_code.ilike(pattern),
            RaffleParticipant.external_ref.ilike(pattern),
        ))
    return [participant.to_dict() for participant in session.scalars(stmt)]


# ── Boards ───────────────────────────────────────────────────────────────────

def _isoformat(value):
    return value.isoformat() if hasattr(value, 'isoformat') else value


def _draw_summary(draw, prize_titles):
    return {
        'id': draw.id,
        'prize_id': draw.prize_id,
        'prize_title': prize_titles.get(draw.prize_id, DEFAULT_PRIZE_TITLE),
        'draw_number': draw.draw_number,
        'winner_code': draw.winner_code_snapshot,
        'winner_name': draw.winner_name_snapshot,
        'drawn_at': _isoformat(draw.drawn_at),
    }


def raffle_overview(session):
    """Admin board: counters, per-prize progress over all draws, recent draws."""
    participants_total = session.scalar(select(func.count(RaffleParticipant.id)))
    participants_active = session.scalar(
        select(func.count(RaffleParticipant.id)).where(RaffleParticipant.is_active.is_(True))
    )
    active_prizes = session.scalar(
        select(func.count(RafflePrize.id)).where(RafflePrize.is_active.is_(True))
    )
    total_draws = session.scalar(select(func.count(RaffleDraw.id)))

    prizes = list(session.scalars(select(RafflePrize).order_by(RafflePrize.created_at.asc())))
    recent_draws = list(session.scalars(
        select(RaffleDraw).order_by(RaffleDraw.drawn_at.desc()).limit(OVERVIEW_RECENT_DRAWS)
    ))

    draw_counts = Counter(session.scalars(select(RaffleDraw.prize_id)))

    prize_summaries = []
    for prize in prizes:
        drawn = draw_counts.get(prize.id, 0)
        progress = compute_progress(prize.quantity, drawn)
        prize_summaries.append({
            **prize.to_dict(),
            'draw_count': drawn,
            'remaining': progress['remaining'],
            'is_completed': progress['is_completed'],
        })

    prize_titles = {prize.id: prize.title for prize in prizes}
    return {
        'stats': {
            'participants_total': participants_total or 0,
            'participants_active': participants_active or 0,
            'active_prizes': active_prizes or 0,
            'total_draws': total_draws or 0,
        },
        'prizes': prize_summaries,
        'recent_draws': [_draw_summary(draw, prize_titles) for draw in recent_draws],
    }


def public_board(session):
    """Public board: active participant count and the latest winners."""
    recent_draws = list(session.scalars(
        select(RaffleDraw).order_by(RaffleDraw.drawn_at.desc()).limit(PUBLIC_RECENT_DRAWS)
    ))
    participants_active = session.scalar(
        select(func.count(RaffleParticipant.id)).where(RaffleParticipant.is_active.is_(True))
    )

    prize_ids = {draw.prize_id for draw in recent_draws}
    prize_titles = {}
    if prize_ids:
        prize_titles = dict(session.execute(
            select(RafflePrize.id, RafflePrize.title).where(RafflePrize.id.in_(prize_ids))
        ).all())

    return {
        'participants_active': participants_active or 0,
        'recent_draws': [_draw_summary(draw, prize_titles) for draw in recent_draws],
    }
