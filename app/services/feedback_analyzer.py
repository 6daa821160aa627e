"""
Feedback batch analyzer — turns pending attendee feedback into a moderator snapshot.

One run:
  1. pull up to ANALYZE_MAX_BATCH oldest unanalyzed rows
  2. split poll votes from free text
  3. below ANALYZE_MIN_BATCH free-text rows (and not forced): mark poll rows only
  4. otherwise one model call, coerce the reply, append a congress_analytics row,
     mark every row of the batch analyzed
"""
import json
import logging
import math
from dataclasses import dataclass, field, asdict
from typing import Any, Dict, List, Optional

from sqlalchemy import func, select, update

from app import config
from app.errors import BatchAnalysisError, MalformedModelOutput
from app.models.analytics_snapshot import AnalyticsSnapshot
from app.models.feedback import Feedback
from app.services.openai_client import request_feedback_analysis
from app.services.poll_message import is_poll_message

logger = logging.getLogger('services.feedback_analyzer')

MAX_LIST_ITEMS = 3
NEUTRAL_SENTIMENT = {'positive': 0.0, 'neutral': 100.0, 'negative': 0.0}


@dataclass
class ModeratorBrief:
    room_mood: str = ''
    audience_priorities: List[str] = field(default_factory=list)
    critical_questions: List[str] = field(default_factory=list)
    recommended_actions: List[str] = field(default_factory=list)
    confidence_0_100: Optional[int] = None


@dataclass
class AnalysisResult:
    sentiment: Dict[str, float]
    top_topics: List[str]
    summary: str
    moderator_brief: ModeratorBrief

    def keywords_payload(self) -> Dict[str, Any]:
        """Shape stored in congress_analytics.top_keywords."""
        return {
            'top_topics': self.top_topics,
            'summary': self.summary,
            'moderator_brief': asdict(self.moderator_brief),
        }


# ── Coercion ─────────────────────────────────────────────────────────────────

def _to_number(value) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, str):
        try:
            value = float(value.strip())
        except ValueError:
            return None
    if not isinstance(value, (int, float)) or not math.isfinite(value):
        return None
    return float(value)


def round_half_up(value, scale=1):
    """Round to the nearest 1/scale with halves going up (built-in round() goes to even)."""
    return math.floor(value * scale + 0.5) / scale


def to_percent(value) -> float:
    """Round to 0.1 and clamp to [0, 100]; anything non-numeric is 0."""
    numeric = _to_number(value)
    if numeric is None:
        return 0.0
    return max(0.0, min(100.0, round_half_up(numeric, 10)))


def normalize_sentiment(value) -> Dict[str, float]:
    if not isinstance(value, dict):
        return dict(NEUTRAL_SENTIMENT)

    normalized = {key: to_percent(value.get(key)) for key in ('positive', 'neutral', 'negative')}
    total = sum(normalized.values())
    if total == 0:
        return dict(NEUTRAL_SENTIMENT)
    if total == 100:
        return normalized

    scale = 100 / total
    return {key: round_half_up(score * scale, 10) for key, score in normalized.items()}


def to_string_list(value, max_items=MAX_LIST_ITEMS) -> List[str]:
    if not isinstance(value, list):
        return []
    items = [item.strip() for item in value if isinstance(item, str)]
    return [item for item in items if item][:max_items]


def _to_confidence(value) -> Optional[int]:
    numeric = _to_number(value)
    if numeric is None:
        return None
    return int(round_half_up(max(0.0, min(100.0, numeric))))


def _to_text(value) -> str:
    return value.strip() if isinstance(value, str) else ''


def coerce_analysis(raw) -> AnalysisResult:
    """
    Validate a model reply (JSON text or already-decoded dict) into an AnalysisResult.

    Missing or malformed fields fall back to empty values; only a reply that is
    not a JSON object at all is rejected.
    """
    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except ValueError as e:
            raise MalformedModelOutput('Model output could not be parsed as JSON.') from e

    if not isinstance(raw, dict):
        raise MalformedModelOutput('Model output is not a JSON object.')

    brief_raw = raw.get('moderator_brief')
    if not isinstance(brief_raw, dict):
        brief_raw = {}

    return AnalysisResult(
        sentiment=normalize_sentiment(raw.get('sentiment')),
        top_topics=to_string_list(raw.get('top_topics')),
        summary=_to_text(raw.get('summary')),
        moderator_brief=ModeratorBrief(
            room_mood=_to_text(brief_raw.get('room_mood')),
            audience_priorities=to_string_list(brief_raw.get('audience_priorities')),
            critical_questions=to_string_list(brief_raw.get('critical_questions')),
            recommended_actions=to_string_list(brief_raw.get('recommended_actions')),
            confidence_0_100=_to_confidence(brief_raw.get('confidence_0_100')),
        ),
    )


# ── Batch run ────────────────────────────────────────────────────────────────

def _mark_analyzed(session, ids):
    if not ids:
        return
    try:
        session.execute(update(Feedback).where(Feedback.id.in_(ids)).values(is_analyzed=True))
        session.commit()
    except Exception as e:
        session.rollback()
        raise BatchAnalysisError(f'Feedback rows could not be marked as analyzed: {e}') from e


def run_batch(session, force=False):
    """Analyze one batch of pending feedback. Returns the JSON-ready result dict."""
    try:
        pending = list(session.scalars(
            select(Feedback)
            .where(Feedback.is_analyzed.is_(False))
            .order_by(Feedback.created_at.asc())
            .limit(config.ANALYZE_MAX_BATCH)
        ))
    except Exception as e:
        raise BatchAnalysisError(f'Pending feedback could not be loaded: {e}') from e

    if not pending:
        return {'processed': 0, 'skipped': True, 'reason': 'No pending feedback.'}

    poll_rows = [row for row in pending if is_poll_message(row.message)]
    text_rows = [
        row for row in pending
        if not is_poll_message(row.message) and (row.message or '').strip()
    ]
    poll_ids = [row.id for row in poll_rows]

    if not text_rows:
        _mark_analyzed(session, poll_ids)
        return {
            'processed': len(poll_rows),
            'skipped': True,
            'reason': 'Only poll responses found; waiting for free-text feedback.',
        }

    if len(text_rows) < config.ANALYZE_MIN_BATCH and not force:
        _mark_analyzed(session, poll_ids)
        logger.info("Below threshold: %d/%d free-text rows", len(text_rows), config.ANALYZE_MIN_BATCH)
        return {
            'processed': len(poll_rows),
            'skipped': True,
            'reason': f'Free-text responses below threshold ({len(text_rows)}/{config.ANALYZE_MIN_BATCH}).',
        }

    content = request_feedback_analysis([row.message for row in text_rows])
    result = coerce_analysis(content)

    try:
        total = session.scalar(select(func.count(Feedback.id))) or 0
        session.add(AnalyticsSnapshot(
            total_feedbacks=total,
            sentiment_score=result.sentiment,
            top_keywords=result.keywords_payload(),
        ))
        session.commit()
    except Exception as e:
        session.rollback()
        logger.error("Analytics snapshot insert failed", exc_info=True)
        raise BatchAnalysisError(f'Analytics snapshot could not be saved: {e}') from e

    processed_ids = [row.id for row in text_rows] + poll_ids
    _mark_analyzed(session, processed_ids)

    logger.info(
        "Analyzed batch: %d text rows, %d poll rows, sentiment=%s",
        len(text_rows), len(poll_rows), result.sentiment,
    )

    return {
        'processed': len(processed_ids),
        'processed_text_rows': len(text_rows),
        'processed_poll_rows': len(poll_rows),
        'skipped': False,
        'sentiment': result.sentiment,
        'top_topics': result.top_topics,
        'summary': result.summary,
        'moderator_brief': asdict(result.moderator_brief),
    }
