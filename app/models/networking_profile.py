"""
NetworkingProfile model — one per attendee device, keyed by a client-held UUID.
"""
from sqlalchemy import Column, Text, Boolean, DateTime
from sqlalchemy.sql import func

from app.database import Base
from app.models._columns import new_uuid, utcnow


class NetworkingProfile(Base):
    __tablename__ = 'networking_profiles'

    id = Column(Text, primary_key=True, default=new_uuid)
    full_name = Column(Text, nullable=False)
    interest_area = Column(Text, nullable=False)
    goal = Column(Text, nullable=False)
    contact_info = Column(Text, nullable=True)  # "ig:<handle>|in:<path>"
    # Kept for schema parity with existing deployments; matches are computed per
    # request and nothing writes these two columns.
    is_matched = Column(Boolean, nullable=False, default=False)
    matched_with_id = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now())

    def to_public_dict(self):
        return {
            'id': self.id,
            'full_name': self.full_name,
            'interest_area': self.interest_area,
            'goal': self.goal,
            'contact_info': self.contact_info,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }
