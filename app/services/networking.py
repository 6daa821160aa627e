"""
Networking profiles — create / update a profile and build its match directory.

Ranking: profiles sharing the caller's interest area are recommended (goal match
first, then newest), capped at 8; everyone else follows under the same ordering.
"""
import logging
import re

from sqlalchemy import select

from app.errors import NotFoundError, UpstreamError, ValidationError
from app.models.networking_profile import NetworkingProfile
from app.services.contact_info import build_contact_info
from app.services.raffle import is_valid_uuid

logger = logging.getLogger('services.networking')

NAME_MIN_LENGTH = 2
NAME_MAX_LENGTH = 120
FIELD_MAX_LENGTH = 120
MAX_RECOMMENDED = 8


def normalize_text(value):
    return re.sub(r'\s+', ' ', value).strip() if isinstance(value, str) else ''


def _profile_fields(data):
    full_name = normalize_text(data.get('fullName'))
    interest_area = normalize_text(data.get('interestArea'))
    goal = normalize_text(data.get('goal'))

    if len(full_name) < NAME_MIN_LENGTH or len(full_name) > NAME_MAX_LENGTH:
        raise ValidationError('Full name is invalid.')
    if not interest_area or len(interest_area) > FIELD_MAX_LENGTH:
        raise ValidationError('Interest area is invalid.')
    if not goal or len(goal) > FIELD_MAX_LENGTH:
        raise ValidationError('Career goal is invalid.')

    instagram = data.get('instagram') if isinstance(data.get('instagram'), str) else ''
    linkedin = data.get('linkedin') if isinstance(data.get('linkedin'), str) else ''

    return {
        'full_name': full_name,
        'interest_area': interest_area,
        'goal': goal,
        'contact_info': build_contact_info(instagram, linkedin),
    }


def create_profile(session, data):
    fields = _profile_fields(data)
    profile = NetworkingProfile(**fields)
    try:
        session.add(profile)
        session.commit()
    except Exception as e:
        session.rollback()
        raise UpstreamError(f'Profile could not be saved: {e}') from e

    logger.info("Created networking profile %s (%s)", profile.id, profile.interest_area)
    return profile.id


def update_profile(session, data):
    raw_id = data.get('profileId')
    profile_id = raw_id.strip() if isinstance(raw_id, str) else ''
    if not is_valid_uuid(profile_id):
        raise ValidationError('Invalid profile id.')

    fields = _profile_fields(data)

    profile = session.get(NetworkingProfile, profile_id)
    if profile is None:
        raise NotFoundError('Profile to update was not found.')

    for key, value in fields.items():
        setattr(profile, key, value)
    session.commit()
    return profile.id


def _rank_key(current):
    def key(profile):
        goal_match = 1 if profile.goal == current.goal else 0
        created = profile.created_at.timestamp() if profile.created_at else 0
        return (-goal_match, -created)
    return key


def build_directory(current, others):
    """Split `others` into (recommended, remaining), both ranked for `current`."""
    rank = _rank_key(current)
    recommended = sorted(
        (profile for profile in others if profile.interest_area == current.interest_area),
        key=rank,
    )[:MAX_RECOMMENDED]
    recommended_ids = {profile.id for profile in recommended}
    remaining = sorted((profile for profile in others if profile.id not in recommended_ids), key=rank)
    return recommended, remaining


def directory_message(recommended_count, other_count):
    if recommended_count == 0 and other_count == 0:
        return 'No other attendees yet. The list updates as new attendees join.'
    if recommended_count > 0 and other_count > 0:
        return f'{recommended_count} recommended profiles and {other_count} other attendees listed.'
    if recommended_count > 0:
        return f'{recommended_count} recommended profiles listed.'
    return f'No recommendations right now, {other_count} other attendees listed.'


def match_profile(session, profile_id):
    profile_id = profile_id.strip() if isinstance(profile_id, str) else ''
    if not is_valid_uuid(profile_id):
        raise ValidationError('Invalid profile id.')

    current = session.get(NetworkingProfile, profile_id)
    if current is None:
        raise NotFoundError('Profile not found.')

    others = list(session.scalars(
        select(NetworkingProfile)
        .where(NetworkingProfile.id != profile_id)
        .order_by(NetworkingProfile.created_at.desc())
    ))
    recommended, remaining = build_directory(current, others)

    return {
        'status': 'found' if recommended or remaining else 'waiting',
        'currentProfile': current.to_public_dict(),
        'recommendedProfiles': [profile.to_public_dict() for profile in recommended],
        'otherProfiles': [profile.to_public_dict() for profile in remaining],
        'message': directory_message(len(recommended), len(remaining)),
    }
