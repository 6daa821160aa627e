"""Initial event schema: feedback, analytics, live polls, networking, raffle

Revision ID: 3c9f1a6d2e84
Revises:
Create Date: 2026-10-17 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3c9f1a6d2e84'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


NOW = sa.text('(CURRENT_TIMESTAMP)')

# Picks a random eligible participant, numbers the draw per prize and records
# name/code snapshots. The prize row lock serializes concurrent draws.
RUN_RAFFLE_DRAW_SQL = """
CREATE OR REPLACE FUNCTION run_raffle_draw(p_prize_id text)
RETURNS TABLE (
    draw_id text,
    prize_id text,
    prize_title text,
    draw_number integer,
    winner_participant_id text,
    winner_code text,
    winner_name text,
    drawn_at timestamptz
)
LANGUAGE plpgsql
AS $$
#variable_conflict use_column
DECLARE
    v_prize raffle_prizes%ROWTYPE;
    v_winner raffle_participants%ROWTYPE;
    v_drawn integer;
    v_draw_id text := gen_random_uuid()::text;
    v_drawn_at timestamptz := now();
BEGIN
    SELECT * INTO v_prize FROM raffle_prizes WHERE id = p_prize_id FOR UPDATE;
    IF NOT FOUND THEN
        RAISE EXCEPTION 'Prize not found.';
    END IF;
    IF NOT v_prize.is_active THEN
        RAISE EXCEPTION 'Prize is not active.';
    END IF;

    SELECT count(*) INTO v_drawn FROM raffle_draws d WHERE d.prize_id = p_prize_id;
    IF v_drawn >= v_prize.quantity THEN
        RAISE EXCEPTION 'Every winner for this prize has already been drawn.';
    END IF;

    SELECT p.* INTO v_winner
    FROM raffle_participants p
    WHERE p.is_active
      AND NOT EXISTS (
          SELECT 1 FROM raffle_draws d
          WHERE d.prize_id = p_prize_id AND d.winner_participant_id = p.id
      )
      AND (
          v_prize.allow_previous_winner
          OR NOT EXISTS (SELECT 1 FROM raffle_draws d WHERE d.winner_participant_id = p.id)
      )
    ORDER BY random()
    LIMIT 1;
    IF NOT FOUND THEN
        RAISE EXCEPTION 'No eligible participants left for this prize.';
    END IF;

    INSERT INTO raffle_draws (
        id, prize_id, winner_participant_id, draw_number,
        winner_code_snapshot, winner_name_snapshot, drawn_at
    ) VALUES (
        v_draw_id, p_prize_id, v_winner.id, v_drawn + 1,
        v_winner.participant_code, v_winner.full_name, v_drawn_at
    );

    RETURN QUERY SELECT
        v_draw_id, p_prize_id, v_prize.title, v_drawn + 1,
        v_winner.id, v_winner.participant_code, v_winner.full_name, v_drawn_at;
END;
$$;
"""


def upgrade() -> None:
    """Upgrade schema."""
    is_postgres = op.get_bind().dialect.name == 'postgresql'

    op.create_table('attendee_feedbacks',
        sa.Column('id', sa.Text(), nullable=False),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('is_analyzed', sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=NOW, nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_attendee_feedbacks_is_analyzed', 'attendee_feedbacks', ['is_analyzed'])
    op.create_index('ix_attendee_feedbacks_created_at', 'attendee_feedbacks', ['created_at'])

    op.create_table('congress_analytics',
        sa.Column('id', sa.Text(), nullable=False),
        sa.Column('total_feedbacks', sa.Integer(), server_default='0', nullable=False),
        sa.Column('sentiment_score', sa.JSON(), nullable=False),
        sa.Column('top_keywords', sa.JSON(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=NOW, nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_congress_analytics_created_at', 'congress_analytics', ['created_at'])

    op.create_table('live_polls',
        sa.Column('id', sa.Text(), nullable=False),
        sa.Column('question', sa.Text(), nullable=False),
        sa.Column('options', sa.JSON(), nullable=False),
        sa.Column('is_active', sa.Boolean(), server_default=sa.true(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=NOW, nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=NOW, nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_live_polls_is_active', 'live_polls', ['is_active'])

    op.create_table('live_poll_presets',
        sa.Column('id', sa.Text(), nullable=False),
        sa.Column('question', sa.Text(), nullable=False),
        sa.Column('options', sa.JSON(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=NOW, nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=NOW, nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )

    op.create_table('networking_profiles',
        sa.Column('id', sa.Text(), nullable=False),
        sa.Column('full_name', sa.Text(), nullable=False),
        sa.Column('interest_area', sa.Text(), nullable=False),
        sa.Column('goal', sa.Text(), nullable=False),
        sa.Column('contact_info', sa.Text(), nullable=True),
        sa.Column('is_matched', sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column('matched_with_id', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=NOW, nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )

    code_default = (
        sa.text("('P-' || upper(substr(md5(random()::text), 1, 8)))") if is_postgres else None
    )
    op.create_table('raffle_participants',
        sa.Column('id', sa.Text(), nullable=False),
        sa.Column('full_name', sa.Text(), nullable=False),
        sa.Column('participant_code', sa.Text(), server_default=code_default, nullable=False),
        sa.Column('external_ref', sa.Text(), nullable=True),
        sa.Column('is_active', sa.Boolean(), server_default=sa.true(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=NOW, nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=NOW, nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('participant_code'),
    )
    op.create_index('ix_raffle_participants_is_active', 'raffle_participants', ['is_active'])

    op.create_table('raffle_prizes',
        sa.Column('id', sa.Text(), nullable=False),
        sa.Column('title', sa.Text(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('quantity', sa.Integer(), server_default='1', nullable=False),
        sa.Column('allow_previous_winner', sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column('is_active', sa.Boolean(), server_default=sa.true(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=NOW, nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=NOW, nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.CheckConstraint('quantity BETWEEN 1 AND 100', name='ck_raffle_prizes_quantity'),
    )
    op.create_index('ix_raffle_prizes_is_active', 'raffle_prizes', ['is_active'])

    op.create_table('raffle_draws',
        sa.Column('id', sa.Text(), nullable=False),
        sa.Column('prize_id', sa.Text(), nullable=False),
        sa.Column('winner_participant_id', sa.Text(), nullable=False),
        sa.Column('draw_number', sa.Integer(), nullable=False),
        sa.Column('winner_code_snapshot', sa.Text(), nullable=False),
        sa.Column('winner_name_snapshot', sa.Text(), nullable=False),
        sa.Column('drawn_at', sa.DateTime(timezone=True), server_default=NOW, nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['prize_id'], ['raffle_prizes.id']),
        sa.ForeignKeyConstraint(['winner_participant_id'], ['raffle_participants.id']),
        sa.UniqueConstraint('prize_id', 'draw_number', name='uq_raffle_draw_prize_number'),
    )
    op.create_index('ix_raffle_draws_prize_id', 'raffle_draws', ['prize_id'])
    op.create_index('ix_raffle_draws_drawn_at', 'raffle_draws', ['drawn_at'])

    if is_postgres:
        op.execute(RUN_RAFFLE_DRAW_SQL)


def downgrade() -> None:
    """Downgrade schema."""
    if op.get_bind().dialect.name == 'postgresql':
        op.execute('DROP FUNCTION IF EXISTS run_raffle_draw(text)')

    op.drop_index('ix_raffle_draws_drawn_at', table_name='raffle_draws')
    op.drop_index('ix_raffle_draws_prize_id', table_name='raffle_draws')
    op.drop_table('raffle_draws')
    op.drop_index('ix_raffle_prizes_is_active', table_name='raffle_prizes')
    op.drop_table('raffle_prizes')
    op.drop_index('ix_raffle_participants_is_active', table_name='raffle_participants')
    op.drop_table('raffle_participants')
    op.drop_table('networking_profiles')
    op.drop_table('live_poll_presets')
    op.drop_index('ix_live_polls_is_active', table_name='live_polls')
    op.drop_table('live_polls')
    op.drop_index('ix_congress_analytics_created_at', table_name='congress_analytics')
    op.drop_table('congress_analytics')
    op.drop_index('ix_attendee_feedbacks_created_at', table_name='attendee_feedbacks')
    op.drop_index('ix_attendee_feedbacks_is_analyzed', table_name='attendee_feedbacks')
    op.drop_table('attendee_feedbacks')
