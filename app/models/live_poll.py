"""
LivePoll + LivePollPreset models.

At most one LivePoll is active at a time; presets are reusable question templates.
"""
from sqlalchemy import Column, Text, Boolean, DateTime, JSON
from sqlalchemy.sql import func

from app.database import Base
from app.models._columns import new_uuid, utcnow


class LivePoll(Base):
    __tablename__ = 'live_polls'

    id = Column(Text, primary_key=True, default=new_uuid)
    question = Column(Text, nullable=False)
    options = Column(JSON, nullable=False, default=list)
    is_active = Column(Boolean, nullable=False, default=True, index=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), onupdate=utcnow)


class LivePollPreset(Base):
    __tablename__ = 'live_poll_presets'

    id = Column(Text, primary_key=True, default=new_uuid)
    question = Column(Text, nullable=False)
    options = Column(JSON, nullable=False, default=list)
    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), onupdate=utcnow)
