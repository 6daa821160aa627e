"""
Column defaults shared by the event models.
"""
import uuid
from datetime import datetime, timezone


def new_uuid():
    return str(uuid.uuid4())


def utcnow():
    return datetime.now(timezone.utc)
