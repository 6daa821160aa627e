"""
Feedback model — one attendee submission (free text or an encoded poll vote).
"""
from sqlalchemy import Column, Text, Boolean, DateTime
from sqlalchemy.sql import func

from app.database import Base
from app.models._columns import new_uuid, utcnow


class Feedback(Base):
    __tablename__ = 'attendee_feedbacks'

    id = Column(Text, primary_key=True, default=new_uuid)
    message = Column(Text, nullable=False)
    is_analyzed = Column(Boolean, nullable=False, default=False, index=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), index=True)

    def to_dict(self):
        return {
            'id': self.id,
            'message': self.message,
            'is_analyzed': self.is_analyzed,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }
