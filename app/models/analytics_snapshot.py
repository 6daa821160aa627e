"""
AnalyticsSnapshot model — append-only output of one feedback-batch analysis.
"""
from sqlalchemy import Column, Integer, Text, DateTime, JSON
from sqlalchemy.sql import func

from app.database import Base
from app.models._columns import new_uuid, utcnow


class AnalyticsSnapshot(Base):
    __tablename__ = 'congress_analytics'

    id = Column(Text, primary_key=True, default=new_uuid)
    total_feedbacks = Column(Integer, nullable=False, default=0)
    sentiment_score = Column(JSON, nullable=False, default=dict)  # {positive, neutral, negative}
    top_keywords = Column(JSON, nullable=False, default=dict)     # {top_topics, summary, moderator_brief}
    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), index=True)

    def to_dict(self):
        return {
            'id': self.id,
            'total_feedbacks': self.total_feedbacks,
            'sentiment_score': self.sentiment_score,
            'top_keywords': self.top_keywords,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }
