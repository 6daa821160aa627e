"""
Raffle models — participants, prizes, and the append-only draw log.

Draw rows are written only by the run_raffle_draw() database function.
"""
import secrets

from sqlalchemy import Column, Integer, Text, Boolean, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.sql import func

from app.database import Base
from app.models._columns import new_uuid, utcnow


def generate_participant_code():
    """System code for participants imported without one, e.g. P-3FA85F64."""
    return f'P-{secrets.token_hex(4).upper()}'


class RaffleParticipant(Base):
    __tablename__ = 'raffle_participants'

    id = Column(Text, primary_key=True, default=new_uuid)
    full_name = Column(Text, nullable=False)
    participant_code = Column(Text, nullable=False, unique=True, default=generate_participant_code)
    external_ref = Column(Text, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True, index=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), onupdate=utcnow)

    def to_dict(self):
        return {
            'id': self.id,
            'full_name': self.full_name,
            'participant_code': self.participant_code,
            'external_ref': self.external_ref,
            'is_active': self.is_active,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None,
        }


class RafflePrize(Base):
    __tablename__ = 'raffle_prizes'

    id = Column(Text, primary_key=True, default=new_uuid)
    title = Column(Text, nullable=False)
    description = Column(Text, nullable=True)
    quantity = Column(Integer, nullable=False, default=1)  # 1-100
    allow_previous_winner = Column(Boolean, nullable=False, default=False)
    is_active = Column(Boolean, nullable=False, default=True, index=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), onupdate=utcnow)

    def to_dict(self):
        return {
            'id': self.id,
            'title': self.title,
            'description': self.description,
            'quantity': self.quantity,
            'allow_previous_winner': self.allow_previous_winner,
            'is_active': self.is_active,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None,
        }


class RaffleDraw(Base):
    __tablename__ = 'raffle_draws'
    __table_args__ = (
        UniqueConstraint('prize_id', 'draw_number', name='uq_raffle_draw_prize_number'),
    )

    id = Column(Text, primary_key=True, default=new_uuid)
    prize_id = Column(Text, ForeignKey('raffle_prizes.id'), nullable=False, index=True)
    winner_participant_id = Column(Text, ForeignKey('raffle_participants.id'), nullable=False)
    draw_number = Column(Integer, nullable=False)
    winner_code_snapshot = Column(Text, nullable=False)
    winner_name_snapshot = Column(Text, nullable=False)
    drawn_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), index=True)
