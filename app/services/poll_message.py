"""
Poll-vote codec — lets the feedback `message` column carry a structured poll vote.

Formats:
    legacy     "ANKET: <option>"                         (no poll id)
    versioned  'ANKET:{"pollId": "<uuid>", "option": "<option>"}'

Anything that does not start with the prefix is free-text feedback.
"""
import json
import re
from dataclasses import dataclass
from typing import Dict, Iterable, Optional

POLL_MESSAGE_PREFIX = 'ANKET:'
OPTION_MAX_LENGTH = 120
MESSAGE_MAX_LENGTH = 200


@dataclass(frozen=True)
class PollResponse:
    poll_id: Optional[str]
    option: str

    def to_dict(self):
        return {'pollId': self.poll_id, 'option': self.option}


def normalize_option(value):
    return re.sub(r'\s+', ' ', value or '').strip()[:OPTION_MAX_LENGTH]


def is_poll_message(message):
    return (message or '').lstrip().startswith(POLL_MESSAGE_PREFIX)


def create_poll_message(option, poll_id=None):
    """Encode a vote. Output is capped at 200 chars even if that cuts the JSON."""
    normalized = normalize_option(option)
    poll_id = (poll_id or '').strip()

    if not poll_id:
        message = f'{POLL_MESSAGE_PREFIX} {normalized}'
    else:
        payload = json.dumps({'pollId': poll_id, 'option': normalized}, ensure_ascii=False)
        message = f'{POLL_MESSAGE_PREFIX}{payload}'

    return message[:MESSAGE_MAX_LENGTH]


def parse_poll_response(message) -> Optional[PollResponse]:
    """Decode a vote; None for free text, empty options, or truncated JSON."""
    if not is_poll_message(message):
        return None

    remainder = message.lstrip()[len(POLL_MESSAGE_PREFIX):]
    payload = remainder.strip()
    if not payload:
        return None

    try:
        decoded = json.loads(payload)
    except ValueError:
        # Versioned framing has no space after the prefix; if it was cut short
        # by the length cap there is no option to recover.
        if remainder.startswith('{'):
            return None
        decoded = None

    if isinstance(decoded, dict):
        raw_poll_id = decoded.get('pollId')
        poll_id = raw_poll_id.strip() if isinstance(raw_poll_id, str) else ''
        raw_option = decoded.get('option')
        option = normalize_option(raw_option) if isinstance(raw_option, str) else ''
        if not option:
            return None
        return PollResponse(poll_id=poll_id or None, option=option)

    return PollResponse(poll_id=None, option=payload)


def tally_poll_votes(messages: Iterable[str], poll_id: Optional[str], options) -> Dict[str, int]:
    """
    Count votes per option for one poll.

    With a poll id only versioned votes for that id count; without one only
    legacy votes count. Options outside `options` are ignored.
    """
    counts = {option: 0 for option in options}

    for message in messages:
        response = parse_poll_response(message)
        if response is None:
            continue
        if poll_id:
            if response.poll_id != poll_id:
                continue
        elif response.poll_id:
            continue
        if response.option in counts:
            counts[response.option] += 1

    return counts
