#!/usr/bin/env python3
"""
Seed demo data for trying the dashboards locally.

Creates:
  1. 14 free-text feedbacks + a handful of poll votes (enough for /api/analyze)
  2. An active live poll and two presets
  3. Networking profiles across three interest areas
  4. Two raffle prizes and a participant list (imported through the real parser)

Usage:
    python scripts/seed_demo_data.py          # seed everything
    python scripts/seed_demo_data.py --clear  # wipe event tables first

Requires: DATABASE_URL set (or defaults to sqlite:///local.db).
"""
import sys
import os
import argparse

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from sqlalchemy import delete

from app import create_app
from app.database import get_session, engine, Base
from app.models.analytics_snapshot import AnalyticsSnapshot
from app.models.feedback import Feedback
from app.models.live_poll import LivePoll, LivePollPreset
from app.models.networking_profile import NetworkingProfile
from app.models.raffle import RaffleDraw, RaffleParticipant, RafflePrize
from app.services.contact_info import build_contact_info
from app.services.participant_import import import_participants
from app.services.poll_message import create_poll_message


FEEDBACK = [
    'The digital workflow session was the best part of the morning.',
    'Audio in the back rows keeps cutting out.',
    'Could the speakers share their slides afterwards?',
    'Too many product pitches, not enough clinical cases.',
    'Great energy in the room, the panel was really honest.',
    'Please leave more time for audience questions.',
    'Coffee break was too short for the number of people.',
    'Loved the live demo of the intraoral scanner.',
    'I would like a session on practice management for young dentists.',
    'Screens on the left side are hard to read.',
    'The moderator keeps the pace well.',
    'More about AI-assisted diagnostics please.',
    'Networking area is crowded, hard to find people.',
    'Very inspiring keynote, thank you!',
]

POLL = {
    'question': 'Which topic should the afternoon panel dig into?',
    'options': ['AI diagnostics', 'Practice management', 'Digital workflow'],
}

VOTES = ['AI diagnostics', 'AI diagnostics', 'Digital workflow', 'Practice management', 'AI diagnostics']

PRESETS = [
    {'question': 'How useful was this session?', 'options': ['Very useful', 'Somewhat', 'Not really']},
    {'question': 'Would you attend next year?', 'options': ['Yes', 'Maybe', 'No']},
]

PROFILES = [
    ('Elif Kaya', 'Implantology', 'Open my own clinic', 'elif.dent', 'in/elif-kaya'),
    ('Mert Demir', 'Implantology', 'Academic career', '', 'mert-demir'),
    ('Zeynep Arslan', 'Orthodontics', 'Open my own clinic', '@zeynep.ortho', ''),
    ('Can Yilmaz', 'Digital dentistry', 'Work abroad', 'https://instagram.com/canyilmaz/', ''),
    ('Deniz Sahin', 'Implantology', 'Open my own clinic', '', 'linkedin.com/in/deniz-sahin/'),
]

PRIZES = [
    {'title': 'Intraoral scanner voucher', 'description': 'Sponsored by the exhibition partner.', 'quantity': 1},
    {'title': 'Conference tote bag', 'quantity': 5, 'allow_previous_winner': True},
]

PARTICIPANT_ROWS = """\
Ayse Yildiz | VIP-0001 | Badge 17
Burak Celik | VIP-0002
Cem Aydin;STD-0003;Badge 22
Derya Koc, STD0004
Ece Ozturk
Fatih Polat | STD-0006
Gizem Acar | STD-0007 | Badge 40
"""


def seed_feedback(session):
    for message in FEEDBACK:
        session.add(Feedback(message=message))
    print(f'  [1] {len(FEEDBACK)} free-text feedbacks')


def seed_live_poll(session):
    poll = LivePoll(question=POLL['question'], options=POLL['options'], is_active=True)
    session.add(poll)
    session.flush()

    for option in VOTES:
        session.add(Feedback(message=create_poll_message(option, poll.id)))
    for preset in PRESETS:
        session.add(LivePollPreset(question=preset['question'], options=preset['options']))

    print(f'  [2] Live poll {poll.id} with {len(VOTES)} votes, {len(PRESETS)} presets')


def seed_networking(session):
    for full_name, interest, goal, instagram, linkedin in PROFILES:
        session.add(NetworkingProfile(
            full_name=full_name,
            interest_area=interest,
            goal=goal,
            contact_info=build_contact_info(instagram, linkedin),
        ))
    print(f'  [3] {len(PROFILES)} networking profiles')


def seed_raffle(session):
    for prize in PRIZES:
        session.add(RafflePrize(
            title=prize['title'],
            description=prize.get('description'),
            quantity=prize['quantity'],
            allow_previous_winner=prize.get('allow_previous_winner', False),
        ))
    session.commit()

    result = import_participants(session, PARTICIPANT_ROWS)
    print(f'  [4] {len(PRIZES)} prizes, {result["imported_total"]} participants')


# ── Clear / Main ─────────────────────────────────────────────────────────────

def clear_event_data(session):
    """Remove every row from the event tables (children first)."""
    for model in (RaffleDraw, RafflePrize, RaffleParticipant, NetworkingProfile,
                  LivePollPreset, LivePoll, AnalyticsSnapshot, Feedback):
        deleted = session.execute(delete(model)).rowcount
        print(f'Cleared {deleted} rows from {model.__tablename__}.')
    session.commit()


def main():
    parser = argparse.ArgumentParser(description='Seed demo data for the event dashboards')
    parser.add_argument('--clear', action='store_true', help='Clear event data before (or instead of) seeding')
    parser.add_argument('--clear-only', action='store_true', help='Only clear, do not re-seed')
    args = parser.parse_args()

    app = create_app()
    with app.app_context():
        # Ensure tables exist (for SQLite local dev)
        Base.metadata.create_all(engine)

        session = get_session()
        try:
            if args.clear or args.clear_only:
                clear_event_data(session)
                if args.clear_only:
                    return

            print('Seeding demo data...')
            seed_feedback(session)
            seed_live_poll(session)
            seed_networking(session)
            session.commit()
            seed_raffle(session)
            print('\nDone! Try POST /api/analyze?force=true or GET /api/raffle/public.')

        except Exception as e:
            session.rollback()
            print(f'Error: {e}')
            raise
        finally:
            session.close()


if __name__ == '__main__':
    main()
